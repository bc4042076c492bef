from typing import Optional, List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, and_

from docshare.db.models.sharing import (
    SharedReference as SharedReferenceModel,
    PublicLookup as PublicLookupModel
)
from docshare.domains.sharing.entities import (
    SharedReference, PublicLookupEntry, PermissionLevel, normalize_email, shared_reference_key
)


class SharedReferenceRepository:
    """Репозиторий ссылок "доступно мне" по получателям"""
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def get(self, recipient_email: str, owner_id: str, document_id: str) -> Optional[SharedReference]:
        """Получение ссылки по получателю и документу"""
        result = await self.session.execute(
            select(SharedReferenceModel).where(
                and_(
                    SharedReferenceModel.recipient_email == normalize_email(recipient_email),
                    SharedReferenceModel.key == shared_reference_key(owner_id, document_id)
                )
            )
        )
        db_reference = result.scalar_one_or_none()
        return self._to_domain(db_reference) if db_reference else None
    
    async def list_for_recipient(self, recipient_email: str) -> List[SharedReference]:
        """Документы, которыми поделились с получателем"""
        result = await self.session.execute(
            select(SharedReferenceModel)
            .where(SharedReferenceModel.recipient_email == normalize_email(recipient_email))
            .order_by(SharedReferenceModel.shared_at.desc())
        )
        return [self._to_domain(ref) for ref in result.scalars().all()]
    
    async def list_for_document(self, owner_id: str, document_id: str) -> List[SharedReference]:
        """Все ссылки, выданные на документ"""
        result = await self.session.execute(
            select(SharedReferenceModel).where(
                and_(
                    SharedReferenceModel.owner_id == owner_id,
                    SharedReferenceModel.document_id == document_id
                )
            )
        )
        return [self._to_domain(ref) for ref in result.scalars().all()]
    
    async def upsert(self, reference: SharedReference) -> None:
        """Создание или полная замена ссылки по ключу (получатель, документ)"""
        recipient_email = normalize_email(reference.recipient_email)
        values = dict(
            document_id=reference.document_id,
            owner_id=reference.owner_id,
            owner_email=reference.owner_email,
            owner_display_name=reference.owner_display_name,
            title=reference.title,
            permission=PermissionLevel(reference.permission).value,
            shared_at=reference.shared_at,
            notification_status=None
        )
        stmt = (
            update(SharedReferenceModel)
            .where(
                and_(
                    SharedReferenceModel.recipient_email == recipient_email,
                    SharedReferenceModel.key == reference.key
                )
            )
            .values(**values)
        )
        result = await self.session.execute(stmt)
        
        # Если ссылки нет, создаем новую; статус уведомления не заполняется никогда
        if result.rowcount == 0:
            self.session.add(SharedReferenceModel(recipient_email=recipient_email, key=reference.key, **values))
        
        await self.session.commit()
    
    async def delete(self, recipient_email: str, owner_id: str, document_id: str) -> bool:
        """Удаление ссылки"""
        stmt = delete(SharedReferenceModel).where(
            and_(
                SharedReferenceModel.recipient_email == normalize_email(recipient_email),
                SharedReferenceModel.key == shared_reference_key(owner_id, document_id)
            )
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0
    
    def _to_domain(self, db_reference: SharedReferenceModel) -> SharedReference:
        """Преобразование модели БД в доменную сущность"""
        return SharedReference(
            recipient_email=db_reference.recipient_email,
            document_id=db_reference.document_id,
            owner_id=db_reference.owner_id,
            owner_email=db_reference.owner_email,
            owner_display_name=db_reference.owner_display_name,
            title=db_reference.title,
            permission=PermissionLevel(db_reference.permission),
            shared_at=db_reference.shared_at,
            notification_status=db_reference.notification_status
        )


class PublicLookupRepository:
    """Репозиторий токенов публичных ссылок"""
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def get(self, token: str) -> Optional[PublicLookupEntry]:
        """Получение записи по токену"""
        result = await self.session.execute(
            select(PublicLookupModel).where(PublicLookupModel.token == token)
        )
        db_entry = result.scalar_one_or_none()
        if not db_entry:
            return None
        return PublicLookupEntry(
            token=db_entry.token,
            document_id=db_entry.document_id,
            owner_id=db_entry.owner_id,
            created_at=db_entry.created_at
        )
    
    async def upsert(self, entry: PublicLookupEntry) -> None:
        """Создание или замена записи токена"""
        stmt = (
            update(PublicLookupModel)
            .where(PublicLookupModel.token == entry.token)
            .values(document_id=entry.document_id, owner_id=entry.owner_id)
        )
        result = await self.session.execute(stmt)
        
        if result.rowcount == 0:
            self.session.add(PublicLookupModel(
                token=entry.token,
                document_id=entry.document_id,
                owner_id=entry.owner_id,
                created_at=entry.created_at
            ))
        
        await self.session.commit()
    
    async def delete(self, token: str) -> bool:
        """Удаление записи токена"""
        stmt = delete(PublicLookupModel).where(PublicLookupModel.token == token)
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0
    
    async def delete_for_document(self, owner_id: str, document_id: str, keep: Optional[str] = None) -> int:
        """Удаление токенов документа, кроме keep"""
        conditions = [PublicLookupModel.owner_id == owner_id, PublicLookupModel.document_id == document_id]
        if keep is not None:
            conditions.append(PublicLookupModel.token != keep)
        stmt = delete(PublicLookupModel).where(and_(*conditions))
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount
