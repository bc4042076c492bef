from docshare.domains.comments.entities import BlockType, Comment, CommentThread
from docshare.domains.comments.threads import (
    group_into_threads, group_by_block, sort_threads_by_date, block_stats
)
from docshare.domains.comments.schemas import (
    CommentCreate, CommentUpdate, CommentResolve, CommentResponse,
    CommentThreadResponse, BlockThreadsResponse, CommentsByBlockResponse
)

__all__ = [
    "BlockType", "Comment", "CommentThread",
    "group_into_threads", "group_by_block", "sort_threads_by_date", "block_stats",
    "CommentCreate", "CommentUpdate", "CommentResolve", "CommentResponse",
    "CommentThreadResponse", "BlockThreadsResponse", "CommentsByBlockResponse"
]
