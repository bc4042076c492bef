import asyncio
import logging
from typing import Awaitable, Iterable, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from docshare.core.config import settings
from docshare.core.errors import DocumentNotAccessibleError, SharingSyncError
from docshare.db.repositories.document_repository import DocumentRepository
from docshare.db.repositories.sharing_repository import SharedReferenceRepository, PublicLookupRepository
from docshare.domains.documents.entities import Document
from docshare.domains.sharing.entities import (
    Collaborator, PermissionLevel, PublicLookupEntry, SharedReference, ShareMeta, SharingInfo,
    normalize_email
)
from docshare.domains.sharing.resolver import AccessResult, PermissionResolver
from docshare.domains.sharing.tokens import generate_public_token

logger = logging.getLogger(__name__)


class SharingService:
    """Синхронизация настроек доступа документа и всех его денормализованных представлений.

    Запись в документ и записи ссылок получателей не атомарны как группа.
    Каждый шаг - upsert или delete по ключу, поэтому повтор той же операции
    после частичного сбоя приводит данные в согласованное состояние.
    """
    
    def __init__(self, session: AsyncSession):
        self.session = session
        self.document_repository = DocumentRepository(session)
        self.reference_repository = SharedReferenceRepository(session)
        self.lookup_repository = PublicLookupRepository(session)
        self.resolver = PermissionResolver(session)
    
    async def get_sharing_info(self, owner_id: str, document_id: str) -> Optional[SharingInfo]:
        """Настройки доступа документа или None, если документа нет"""
        document = await self.document_repository.get(owner_id, document_id)
        if document is None:
            return None
        return document.sharing
    
    async def share_with_user(
        self,
        owner_id: str,
        document_id: str,
        email: str,
        permission: PermissionLevel,
        meta: ShareMeta
    ) -> SharingInfo:
        """Добавление или изменение одного соавтора"""
        document = await self._load(owner_id, document_id)
        current = document.sharing
        email = normalize_email(email)
        permission = PermissionLevel(permission)
        
        existing = current.find(email)
        if existing is not None and existing.permission == permission:
            collaborator = existing
        else:
            collaborator = Collaborator(email=email, permission=permission)
        
        collaborators = [c for c in current.collaborators if c.email != email] + [collaborator]
        target = current.with_collaborators(collaborators)
        await self._write_sharing(owner_id, document_id, target)
        
        changed = set() if existing is collaborator else {email}
        await self._sync_references(owner_id, document_id, target, meta, changed=changed, scope={email})
        
        logger.info(f"Document {document_id} shared with {email} as {permission.value}")
        return target
    
    async def unshare_user(self, owner_id: str, document_id: str, email: str) -> SharingInfo:
        """Удаление одного соавтора"""
        document = await self._load(owner_id, document_id)
        email = normalize_email(email)
        
        target = document.sharing.with_collaborators(
            c for c in document.sharing.collaborators if c.email != email
        )
        await self._write_sharing(owner_id, document_id, target)
        await self._sync_references(owner_id, document_id, target, ShareMeta(), scope={email})
        
        logger.info(f"Document {document_id} unshared from {email}")
        return target
    
    async def set_public(
        self,
        owner_id: str,
        document_id: str,
        is_public: bool,
        public_permission: Optional[PermissionLevel] = None
    ) -> Optional[str]:
        """Включение или выключение публичной ссылки, возвращает текущий токен"""
        document = await self._load(owner_id, document_id)
        current = document.sharing
        
        if public_permission is None:
            public_permission = current.public_permission
        
        target = await self._apply_public_access(owner_id, document_id, current, is_public, public_permission)
        await self._write_sharing(owner_id, document_id, target)
        
        logger.info(f"Document {document_id} public access set to {is_public}")
        return target.public_token
    
    async def save_sharing_settings(
        self,
        owner_id: str,
        document_id: str,
        new_collaborators: Iterable[Collaborator],
        is_public: bool,
        public_permission: Optional[PermissionLevel] = PermissionLevel.VIEWER,
        meta: Optional[ShareMeta] = None
    ) -> Optional[str]:
        """Полная сверка желаемых настроек доступа с текущими.

        Возвращает токен публичной ссылки: новый, прежний или None.
        """
        meta = meta or ShareMeta()
        document = await self._load(owner_id, document_id)
        current = document.sharing
        
        # дата добавления сохраняется у тех, кто уже был соавтором
        collaborators = []
        for collaborator in new_collaborators:
            existing = current.find(collaborator.email)
            if existing is not None and existing.permission == collaborator.permission:
                collaborator = existing
            collaborators.append(collaborator)
        
        target = await self._apply_public_access(owner_id, document_id, current, is_public, public_permission)
        target = target.with_collaborators(collaborators)
        
        removed = set(current.collaborator_emails) - set(target.collaborator_emails)
        added_or_updated = {
            c.email for c in target.collaborators
            if (current.find(c.email) is None or current.find(c.email).permission != c.permission)
        }
        
        await self._write_sharing(owner_id, document_id, target)
        await self._sync_references(owner_id, document_id, target, meta, changed=added_or_updated)
        
        logger.info(
            f"Sharing settings saved for document {document_id}: "
            f"{len(added_or_updated)} added or updated, {len(removed)} removed, public={target.is_public}"
        )
        return target.public_token
    
    async def list_shared_with_me(self, email: Optional[str]) -> List[SharedReference]:
        """Документы, которыми поделились с пользователем; без подтвержденного email список пуст"""
        if not email:
            return []
        return await self.reference_repository.list_for_recipient(email)
    
    async def get_public_document(self, token: str) -> AccessResult:
        """Документ по токену публичной ссылки"""
        return await self.resolver.resolve_public_token(token)
    
    async def remove_document_views(self, document: Document) -> None:
        """Удаление всех денормализованных представлений доступа к документу"""
        references = await self.reference_repository.list_for_document(document.owner_id, document.id)
        for reference in references:
            await self.reference_repository.delete(reference.recipient_email, document.owner_id, document.id)
        await self.lookup_repository.delete_for_document(document.owner_id, document.id)
    
    async def _load(self, owner_id: str, document_id: str) -> Document:
        document = await self.document_repository.get(owner_id, document_id)
        if document is None:
            raise DocumentNotAccessibleError(document_id)
        return document
    
    async def _write_sharing(self, owner_id: str, document_id: str, sharing: SharingInfo) -> None:
        # весь блок sharing вместе с проекциями пишется одной операцией
        if not await self.document_repository.update_sharing(owner_id, document_id, sharing):
            raise DocumentNotAccessibleError(document_id)
    
    async def _apply_public_access(
        self,
        owner_id: str,
        document_id: str,
        current: SharingInfo,
        is_public: bool,
        public_permission: Optional[PermissionLevel]
    ) -> SharingInfo:
        token = current.public_token
        
        if is_public:
            # токен не меняется при правках, не связанных с публичным доступом
            if not token:
                token = generate_public_token()
            await self.lookup_repository.upsert(
                PublicLookupEntry(token=token, document_id=document_id, owner_id=owner_id)
            )
            # записи, оставшиеся от прерванных попыток, указывают на тот же документ
            await self.lookup_repository.delete_for_document(owner_id, document_id, keep=token)
            return current.with_public_access(True, token, public_permission or PermissionLevel.VIEWER)

        await self.lookup_repository.delete_for_document(owner_id, document_id)
        return current.with_public_access(False, None, None)
    
    async def _sync_references(
        self,
        owner_id: str,
        document_id: str,
        target: SharingInfo,
        meta: ShareMeta,
        changed: Optional[Set[str]] = None,
        scope: Optional[Set[str]] = None
    ) -> None:
        """Приведение ссылок получателей к списку соавторов.

        Удаляются ссылки всех, кого нет в target; создаются или заменяются
        ссылки для changed и для тех, чья ссылка отсутствует или устарела.
        scope ограничивает сверку указанными email.
        """
        changed = changed or set()
        existing = {
            ref.recipient_email: ref
            for ref in await self.reference_repository.list_for_document(owner_id, document_id)
        }
        
        failed: List[str] = []
        
        stale = (set(existing) - set(target.collaborator_emails))
        if scope is not None:
            stale &= scope
        for email in sorted(stale):
            if not await self._guarded(
                self.reference_repository.delete(email, owner_id, document_id), document_id, email
            ):
                failed.append(email)
        
        for collaborator in target.collaborators:
            if scope is not None and collaborator.email not in scope:
                continue
            reference = existing.get(collaborator.email)
            needs_write = (
                collaborator.email in changed
                or reference is None
                or reference.permission != collaborator.permission
            )
            if not needs_write:
                continue
            new_reference = SharedReference.for_collaborator(collaborator, owner_id, document_id, meta)
            if not await self._guarded(
                self.reference_repository.upsert(new_reference), document_id, collaborator.email
            ):
                failed.append(collaborator.email)
        
        if failed:
            raise SharingSyncError(document_id, failed)
    
    async def _guarded(self, write: Awaitable, document_id: str, email: str) -> bool:
        """Запись ссылки с ограничением по времени; сбой журналируется, но не откатывается"""
        try:
            await asyncio.wait_for(write, timeout=settings.save_timeout_seconds)
            return True
        except (SQLAlchemyError, asyncio.TimeoutError) as e:
            logger.error(f"Failed to sync shared reference of document {document_id} for {email}: {e!r}")
            await self.session.rollback()
            return False
