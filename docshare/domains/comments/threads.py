"""Группировка плоского списка комментариев в треды.

Функции чистые: на каждое изменение ленты комментариев результат
пересчитывается целиком, и повторный запуск или перестановка входного
списка дают равные треды.
"""
from typing import Dict, Iterable, List, Tuple

from docshare.domains.comments.entities import Comment, CommentThread


def _chronological_key(comment: Comment):
    return (comment.created_at, comment.id)


def group_into_threads(comments: Iterable[Comment]) -> List[CommentThread]:
    """Корни с ответами; ответы без корня во входном наборе отбрасываются"""
    comments = list(comments)
    roots = sorted((c for c in comments if c.parent_comment_id is None), key=_chronological_key)

    replies_by_parent: Dict[str, List[Comment]] = {}
    for reply in comments:
        if reply.parent_comment_id is not None:
            replies_by_parent.setdefault(reply.parent_comment_id, []).append(reply)

    return [
        CommentThread(
            root_comment=root,
            replies=sorted(replies_by_parent.get(root.id, []), key=_chronological_key),
        )
        for root in roots
    ]


def sort_threads_by_date(threads: Iterable[CommentThread], ascending: bool = False) -> List[CommentThread]:
    """По умолчанию новые обсуждения первыми"""
    return sorted(
        threads,
        key=lambda thread: _chronological_key(thread.root_comment),
        reverse=not ascending,
    )


def group_by_block(comments: Iterable[Comment]) -> Dict[str, List[CommentThread]]:
    by_block: Dict[str, List[Comment]] = {}
    for comment in comments:
        by_block.setdefault(comment.block_id, []).append(comment)

    return {
        block_id: sort_threads_by_date(group_into_threads(block_comments))
        for block_id, block_comments in by_block.items()
    }


def block_stats(threads: Iterable[CommentThread]) -> Tuple[int, bool]:
    """Число комментариев в блоке и есть ли среди тредов нерешенные"""
    count = 0
    has_unresolved = False
    for thread in threads:
        count += thread.comment_count
        if not thread.root_comment.resolved:
            has_unresolved = True
    return count, has_unresolved
