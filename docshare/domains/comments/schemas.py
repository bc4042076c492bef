from pydantic import BaseModel, ConfigDict, Field
from typing import Optional, List, Dict
from datetime import datetime

from docshare.domains.comments.entities import BlockType, CommentThread
from docshare.domains.comments.threads import block_stats


class CommentCreate(BaseModel):
    """Схема для создания комментария; поля автора не принимаются"""
    block_id: str = Field(..., min_length=1, max_length=128)
    block_type: BlockType
    text: str = Field(..., max_length=10000)
    parent_comment_id: Optional[str] = None
    
    model_config = ConfigDict(extra="forbid")


class CommentUpdate(BaseModel):
    """Схема для изменения текста комментария"""
    text: str = Field(..., max_length=10000)
    
    model_config = ConfigDict(extra="forbid")


class CommentResolve(BaseModel):
    """Схема для решения или переоткрытия треда"""
    resolved: bool = True


class CommentResponse(BaseModel):
    """Схема для ответа с данными комментария"""
    id: str
    block_id: str
    block_type: BlockType
    author_id: str
    author_email: str
    author_display_name: str
    text: str
    created_at: datetime
    updated_at: datetime
    parent_comment_id: Optional[str] = None
    resolved: bool
    
    model_config = ConfigDict(from_attributes=True)


class CommentThreadResponse(BaseModel):
    """Корневой комментарий и ответы"""
    root_comment: CommentResponse
    replies: List[CommentResponse]
    
    model_config = ConfigDict(from_attributes=True)


class BlockThreadsResponse(BaseModel):
    """Треды одного блока"""
    block_id: str
    comment_count: int
    has_unresolved: bool
    threads: List[CommentThreadResponse]


class CommentsByBlockResponse(BaseModel):
    """Все треды документа по блокам"""
    document_id: str
    blocks: List[BlockThreadsResponse]
    total: int
    
    @classmethod
    def from_threads(cls, document_id: str, by_block: Dict[str, List[CommentThread]]) -> "CommentsByBlockResponse":
        blocks = []
        total = 0
        for block_id, threads in by_block.items():
            count, has_unresolved = block_stats(threads)
            total += count
            blocks.append(BlockThreadsResponse(
                block_id=block_id,
                comment_count=count,
                has_unresolved=has_unresolved,
                threads=[CommentThreadResponse.model_validate(thread) for thread in threads]
            ))
        return cls(document_id=document_id, blocks=blocks, total=total)
