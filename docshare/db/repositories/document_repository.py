from typing import Optional, List, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_

from docshare.db.models.document import Document as DocumentModel, DocumentIndex as DocumentIndexModel
from docshare.domains.documents.entities import Document, DEFAULT_TITLE
from docshare.domains.sharing.entities import SharingInfo, DocumentIndexEntry


class DocumentRepository:
    """Репозиторий для работы с документами владельцев"""
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def get(self, owner_id: str, document_id: str) -> Optional[Document]:
        """Получение документа по владельцу и идентификатору"""
        db_document = await self._get_model(owner_id, document_id)
        return self._to_domain(db_document) if db_document else None
    
    async def list_by_owner(self, owner_id: str) -> List[Document]:
        """Получение документов владельца, сначала недавно измененные"""
        result = await self.session.execute(
            select(DocumentModel)
            .where(DocumentModel.owner_id == owner_id)
            .order_by(DocumentModel.updated_at.desc())
        )
        return [self._to_domain(doc) for doc in result.scalars().all()]
    
    async def save_content(
        self,
        owner_id: str,
        document_id: str,
        title: Optional[str],
        data: Optional[Dict[str, Any]]
    ) -> Document:
        """Создание или обновление содержимого; created_at и sharing сохраняются"""
        db_document = await self._get_model(owner_id, document_id)
        
        if db_document is None:
            document = Document.create_document(document_id, owner_id, title=title or DEFAULT_TITLE, data=data)
            db_document = DocumentModel(
                owner_id=owner_id,
                id=document_id,
                title=document.title,
                data=document.data,
                sharing=None,
                created_at=document.created_at,
                updated_at=document.updated_at
            )
            self.session.add(db_document)
        else:
            document = self._to_domain(db_document)
            document.update_content(data, title)
            db_document.title = document.title
            db_document.data = document.data
            db_document.updated_at = document.updated_at
        
        await self.session.commit()
        await self.session.refresh(db_document)
        return self._to_domain(db_document)
    
    async def update_title(self, owner_id: str, document_id: str, title: str) -> bool:
        """Обновление заголовка документа"""
        stmt = (
            update(DocumentModel)
            .where(and_(DocumentModel.owner_id == owner_id, DocumentModel.id == document_id))
            .values(title=title)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0
    
    async def update_sharing(self, owner_id: str, document_id: str, sharing: SharingInfo) -> bool:
        """Запись всего блока sharing одной операцией"""
        stmt = (
            update(DocumentModel)
            .where(and_(DocumentModel.owner_id == owner_id, DocumentModel.id == document_id))
            .values(sharing=sharing.to_dict())
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0
    
    async def delete(self, owner_id: str, document_id: str) -> bool:
        """Удаление документа"""
        stmt = delete(DocumentModel).where(
            and_(DocumentModel.owner_id == owner_id, DocumentModel.id == document_id)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0
    
    async def _get_model(self, owner_id: str, document_id: str) -> Optional[DocumentModel]:
        result = await self.session.execute(
            select(DocumentModel).where(
                and_(DocumentModel.owner_id == owner_id, DocumentModel.id == document_id)
            )
        )
        return result.scalar_one_or_none()
    
    def _to_domain(self, db_document: DocumentModel) -> Document:
        """Преобразование модели БД в доменную сущность"""
        return Document(
            id=db_document.id,
            owner_id=db_document.owner_id,
            title=db_document.title,
            data=db_document.data,
            sharing=SharingInfo.from_dict(db_document.sharing),
            created_at=db_document.created_at,
            updated_at=db_document.updated_at
        )


class DocumentIndexRepository:
    """Репозиторий индекса documentId -> ownerId"""
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def get(self, document_id: str) -> Optional[DocumentIndexEntry]:
        """Получение записи индекса"""
        result = await self.session.execute(
            select(DocumentIndexModel).where(DocumentIndexModel.document_id == document_id)
        )
        db_entry = result.scalar_one_or_none()
        if not db_entry:
            return None
        return DocumentIndexEntry(document_id=db_entry.document_id, owner_id=db_entry.owner_id)
    
    async def upsert(self, entry: DocumentIndexEntry) -> None:
        """Создание или замена записи индекса"""
        stmt = (
            update(DocumentIndexModel)
            .where(DocumentIndexModel.document_id == entry.document_id)
            .values(owner_id=entry.owner_id)
        )
        result = await self.session.execute(stmt)
        
        if result.rowcount == 0:
            self.session.add(DocumentIndexModel(document_id=entry.document_id, owner_id=entry.owner_id))
        
        await self.session.commit()
    
    async def delete(self, document_id: str) -> bool:
        """Удаление записи индекса"""
        stmt = delete(DocumentIndexModel).where(DocumentIndexModel.document_id == document_id)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0
