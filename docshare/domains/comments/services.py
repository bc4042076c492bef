import logging
from typing import Dict, List, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from docshare.core.errors import AccessDeniedError, CommentNotFoundError, CommentValidationError
from docshare.db.repositories.comment_repository import CommentRepository
from docshare.domains.comments.entities import BlockType, Comment, CommentThread
from docshare.domains.comments.feed import CommentFeed, comment_feed
from docshare.domains.comments.threads import group_by_block
from docshare.domains.identity.entities import User
from docshare.domains.sharing.entities import Permission
from docshare.domains.sharing.resolver import AccessResult, PermissionResolver

logger = logging.getLogger(__name__)


def clean_text(text: Optional[str]) -> str:
    text = (text or "").strip()
    if not text:
        raise CommentValidationError("Comment text cannot be empty")
    return text


class CommentService:
    """Сервис комментариев к блокам документа.

    Автор всегда берется из аутентифицированного вызывающего. Все проверки
    выполняются до записи, поэтому отклоненный запрос ничего не меняет.
    """
    
    def __init__(self, session: AsyncSession, feed: CommentFeed = comment_feed):
        self.session = session
        self.comment_repository = CommentRepository(session)
        self.resolver = PermissionResolver(session)
        self.feed = feed
    
    async def list_comments(
        self,
        document_id: str,
        caller_id: Optional[str] = None,
        caller_email: Optional[str] = None
    ) -> List[Comment]:
        """Плоский список комментариев документа для любого, кто может его читать"""
        access = await self.resolver.require(document_id, caller_id, caller_email)
        return await self.comment_repository.list_for_document(access.owner_id, document_id)
    
    async def list_threads_by_block(
        self,
        document_id: str,
        caller_id: Optional[str] = None,
        caller_email: Optional[str] = None
    ) -> Dict[str, List[CommentThread]]:
        """Треды комментариев по блокам"""
        return group_by_block(await self.list_comments(document_id, caller_id, caller_email))
    
    async def add_comment(
        self,
        document_id: str,
        author: User,
        block_id: str,
        block_type: BlockType,
        text: str,
        parent_comment_id: Optional[str] = None
    ) -> Comment:
        """Добавление комментария или ответа"""
        text = clean_text(text)
        access = await self.resolver.require(document_id, author.id, author.verified_email)
        
        if parent_comment_id is not None:
            parent = await self.comment_repository.get(access.owner_id, document_id, parent_comment_id)
            if parent is None or not parent.is_root:
                raise CommentValidationError("Replies must reference an existing root comment")
            # ответ живет в блоке своего треда
            block_id = parent.block_id
            block_type = parent.block_type
        
        comment = Comment.create(
            block_id=block_id,
            block_type=block_type,
            author_id=author.id,
            author_email=author.email,
            author_display_name=author.name,
            text=text,
            parent_comment_id=parent_comment_id
        )
        
        saved = await self.comment_repository.create(access.owner_id, document_id, comment)
        logger.info(f"Comment {saved.id} added to document {document_id} by {author.id}")
        await self._publish(access, document_id)
        return saved
    
    async def edit_comment(self, document_id: str, caller: User, comment_id: str, text: str) -> Comment:
        """Изменение текста: только автор"""
        text = clean_text(text)
        access = await self.resolver.require(document_id, caller.id, caller.verified_email)
        comment = await self._get_comment(access, document_id, comment_id)
        
        if not comment.is_author(caller.id):
            raise AccessDeniedError("You can only edit your own comments")
        
        updated = await self.comment_repository.update_text(access.owner_id, document_id, comment_id, text)
        await self._publish(access, document_id)
        return updated
    
    async def delete_comment(self, document_id: str, caller: User, comment_id: str) -> int:
        """Удаление автором или владельцем документа; корень удаляется вместе с ответами"""
        access = await self.resolver.require(document_id, caller.id, caller.verified_email)
        comment = await self._get_comment(access, document_id, comment_id)
        
        if not (comment.is_author(caller.id) or access.permission == Permission.OWNER):
            raise AccessDeniedError("You can only delete your own comments")
        
        if comment.is_root:
            deleted = await self.comment_repository.delete_thread(access.owner_id, document_id, comment_id)
        else:
            deleted = await self.comment_repository.delete(access.owner_id, document_id, comment_id)
        
        logger.info(f"Deleted {deleted} comment(s) of thread {comment_id} in document {document_id}")
        await self._publish(access, document_id)
        return deleted
    
    async def resolve_thread(self, document_id: str, caller: User, root_id: str, resolved: bool) -> Comment:
        """Отметка треда решенным: автор корня или владелец документа"""
        access = await self.resolver.require(document_id, caller.id, caller.verified_email)
        comment = await self._get_comment(access, document_id, root_id)
        
        if not comment.is_root:
            raise CommentValidationError("Can only resolve root comments")
        
        if not (comment.is_author(caller.id) or access.permission == Permission.OWNER):
            raise AccessDeniedError("Only the comment author or the document owner can resolve a thread")
        
        updated = await self.comment_repository.set_resolved(access.owner_id, document_id, root_id, resolved)
        await self._publish(access, document_id)
        return updated
    
    async def _get_comment(self, access: AccessResult, document_id: str, comment_id: str) -> Comment:
        comment = await self.comment_repository.get(access.owner_id, document_id, comment_id)
        if comment is None:
            raise CommentNotFoundError(comment_id)
        return comment
    
    async def _publish(self, access: AccessResult, document_id: str) -> None:
        if not self.feed.subscriber_count(document_id):
            return
        comments = await self.comment_repository.list_for_document(access.owner_id, document_id)
        self.feed.publish(document_id, comments)
