from typing import Optional, List
from datetime import datetime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_, or_

from docshare.db.models.comment import Comment as CommentModel
from docshare.domains.comments.entities import Comment, BlockType


class CommentRepository:
    """Репозиторий комментариев документа users/{owner}/documents/{document}/comments"""
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def create(self, owner_id: str, document_id: str, comment: Comment) -> Comment:
        """Создание комментария"""
        db_comment = CommentModel(
            owner_id=owner_id,
            document_id=document_id,
            id=comment.id,
            block_id=comment.block_id,
            block_type=BlockType(comment.block_type).value,
            author_id=comment.author_id,
            author_email=comment.author_email,
            author_display_name=comment.author_display_name,
            text=comment.text,
            created_at=comment.created_at,
            updated_at=comment.updated_at,
            parent_comment_id=comment.parent_comment_id,
            resolved=comment.resolved
        )
        
        self.session.add(db_comment)
        await self.session.commit()
        await self.session.refresh(db_comment)
        return self._to_domain(db_comment)
    
    async def get(self, owner_id: str, document_id: str, comment_id: str) -> Optional[Comment]:
        """Получение комментария"""
        result = await self.session.execute(
            select(CommentModel).where(self._document_filter(owner_id, document_id, CommentModel.id == comment_id))
        )
        db_comment = result.scalar_one_or_none()
        return self._to_domain(db_comment) if db_comment else None
    
    async def list_for_document(self, owner_id: str, document_id: str) -> List[Comment]:
        """Плоский список всех комментариев документа"""
        result = await self.session.execute(
            select(CommentModel)
            .where(self._document_filter(owner_id, document_id))
            .order_by(CommentModel.created_at.asc())
        )
        return [self._to_domain(c) for c in result.scalars().all()]
    
    async def update_text(self, owner_id: str, document_id: str, comment_id: str, text: str) -> Optional[Comment]:
        """Изменение текста комментария"""
        stmt = (
            update(CommentModel)
            .where(self._document_filter(owner_id, document_id, CommentModel.id == comment_id))
            .values(text=text, updated_at=datetime.utcnow())
        )
        await self.session.execute(stmt)
        await self.session.commit()
        return await self.get(owner_id, document_id, comment_id)
    
    async def set_resolved(self, owner_id: str, document_id: str, comment_id: str, resolved: bool) -> Optional[Comment]:
        """Отметка треда решенным или нерешенным"""
        stmt = (
            update(CommentModel)
            .where(self._document_filter(owner_id, document_id, CommentModel.id == comment_id))
            .values(resolved=resolved, updated_at=datetime.utcnow())
        )
        await self.session.execute(stmt)
        await self.session.commit()
        return await self.get(owner_id, document_id, comment_id)
    
    async def delete(self, owner_id: str, document_id: str, comment_id: str) -> int:
        """Удаление одного комментария"""
        stmt = delete(CommentModel).where(
            self._document_filter(owner_id, document_id, CommentModel.id == comment_id)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount
    
    async def delete_thread(self, owner_id: str, document_id: str, root_id: str) -> int:
        """Удаление корня вместе со всеми ответами одним запросом"""
        stmt = delete(CommentModel).where(
            self._document_filter(
                owner_id,
                document_id,
                or_(CommentModel.id == root_id, CommentModel.parent_comment_id == root_id)
            )
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount
    
    async def delete_for_document(self, owner_id: str, document_id: str) -> int:
        """Удаление всех комментариев документа"""
        stmt = delete(CommentModel).where(self._document_filter(owner_id, document_id))
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount
    
    @staticmethod
    def _document_filter(owner_id: str, document_id: str, *conditions):
        return and_(
            CommentModel.owner_id == owner_id,
            CommentModel.document_id == document_id,
            *conditions
        )
    
    def _to_domain(self, db_comment: CommentModel) -> Comment:
        """Преобразование модели БД в доменную сущность"""
        return Comment(
            id=db_comment.id,
            block_id=db_comment.block_id,
            block_type=BlockType(db_comment.block_type),
            author_id=db_comment.author_id,
            author_email=db_comment.author_email,
            author_display_name=db_comment.author_display_name,
            text=db_comment.text,
            created_at=db_comment.created_at,
            updated_at=db_comment.updated_at,
            parent_comment_id=db_comment.parent_comment_id,
            resolved=db_comment.resolved
        )
