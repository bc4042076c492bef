import asyncio
import logging
from typing import Optional, List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession

from docshare.core.config import settings
from docshare.core.errors import AccessDeniedError, SaveTimeoutError
from docshare.db.repositories.comment_repository import CommentRepository
from docshare.db.repositories.document_repository import DocumentRepository, DocumentIndexRepository
from docshare.domains.documents.entities import Document, DEFAULT_TITLE
from docshare.domains.sharing.entities import DocumentIndexEntry
from docshare.domains.sharing.resolver import AccessResult, PermissionResolver
from docshare.domains.sharing.services import SharingService

logger = logging.getLogger(__name__)


class DocumentService:
    """Сервис для работы с документами"""
    
    def __init__(self, session: AsyncSession):
        self.session = session
        self.document_repository = DocumentRepository(session)
        self.index_repository = DocumentIndexRepository(session)
        self.comment_repository = CommentRepository(session)
        self.resolver = PermissionResolver(session)
        self.sharing_service = SharingService(session)
    
    async def save_document(
        self,
        owner_id: str,
        document_id: str,
        data: Optional[Dict[str, Any]],
        title: str = DEFAULT_TITLE
    ) -> Document:
        """Сохранение документа владельцем и регистрация в индексе"""
        entry = await self.index_repository.get(document_id)
        
        # Владелец документа не меняется после создания
        if entry is not None and entry.owner_id != owner_id:
            logger.warning(f"User {owner_id} tried to save document {document_id} owned by another user")
            raise AccessDeniedError("Document id is already taken")
        
        document = await self._save_with_timeout(owner_id, document_id, title, data)
        await self.index_repository.upsert(DocumentIndexEntry(document_id=document_id, owner_id=owner_id))
        return document
    
    async def get_document(self, owner_id: str, document_id: str) -> Optional[Document]:
        """Получение документа владельца"""
        return await self.document_repository.get(owner_id, document_id)
    
    async def list_documents(self, owner_id: str) -> List[Document]:
        """Документы владельца, сначала недавно измененные"""
        return await self.document_repository.list_by_owner(owner_id)
    
    async def update_title(self, owner_id: str, document_id: str, title: str) -> bool:
        """Обновление заголовка документа"""
        return await self.document_repository.update_title(owner_id, document_id, title)
    
    async def delete_document(self, owner_id: str, document_id: str) -> bool:
        """Удаление документа вместе с комментариями, ссылками получателей и индексом"""
        document = await self.document_repository.get(owner_id, document_id)
        
        if not document:
            return False
        
        await self.comment_repository.delete_for_document(owner_id, document_id)
        await self.sharing_service.remove_document_views(document)
        await self.document_repository.delete(owner_id, document_id)
        
        entry = await self.index_repository.get(document_id)
        if entry is not None and entry.owner_id == owner_id:
            await self.index_repository.delete(document_id)
        
        logger.info(f"Document {document_id} of owner {owner_id} deleted")
        return True
    
    async def open_document(
        self,
        document_id: str,
        caller_id: Optional[str] = None,
        caller_email: Optional[str] = None
    ) -> AccessResult:
        """Открытие документа по идентификатору с разрешением прав"""
        return await self.resolver.require(document_id, caller_id, caller_email)
    
    async def save_shared_content(
        self,
        document_id: str,
        data: Optional[Dict[str, Any]],
        title: Optional[str] = None,
        caller_id: Optional[str] = None,
        caller_email: Optional[str] = None
    ) -> Document:
        """Сохранение содержимого владельцем, редактором или по публичной ссылке.

        Блок sharing при этом не затрагивается.
        """
        access = await self.resolver.require(document_id, caller_id, caller_email)
        
        if not access.permission.can_write:
            raise AccessDeniedError("You don't have permission to edit this document")
        
        return await self._save_with_timeout(access.owner_id, document_id, title, data)
    
    async def _save_with_timeout(
        self,
        owner_id: str,
        document_id: str,
        title: Optional[str],
        data: Optional[Dict[str, Any]]
    ) -> Document:
        try:
            return await asyncio.wait_for(
                self.document_repository.save_content(owner_id, document_id, title, data),
                timeout=settings.save_timeout_seconds
            )
        except asyncio.TimeoutError:
            logger.warning(f"Save of document {document_id} timed out after {settings.save_timeout_seconds}s")
            await self.session.rollback()
            raise SaveTimeoutError(document_id, settings.save_timeout_seconds)
