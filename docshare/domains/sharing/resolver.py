"""Определение прав вызывающего на документ.

Права вычисляются одной чистой функцией resolve_permission; PermissionResolver
только загружает запись индекса и сам документ. Если прав нет, документ
не возвращается вовсе: "не найден" и "нет доступа" неразличимы.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from docshare.core.errors import DocumentNotAccessibleError
from docshare.db.repositories.document_repository import DocumentRepository, DocumentIndexRepository
from docshare.db.repositories.sharing_repository import PublicLookupRepository
from docshare.domains.documents.entities import Document
from docshare.domains.sharing.entities import Permission, normalize_email

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AccessResult:
    document: Optional[Document] = None
    permission: Optional[Permission] = None

    @property
    def granted(self) -> bool:
        return self.permission is not None

    @property
    def owner_id(self) -> Optional[str]:
        return self.document.owner_id if self.document else None


NO_ACCESS = AccessResult()


def resolve_permission(
    document: Document,
    caller_id: Optional[str] = None,
    caller_email: Optional[str] = None
) -> Optional[Permission]:
    if document.is_owner(caller_id):
        return Permission.OWNER

    sharing = document.sharing
    if caller_email:
        email = normalize_email(caller_email)
        if email in {normalize_email(e) for e in sharing.collaborator_emails}:
            if email in {normalize_email(e) for e in sharing.editor_emails}:
                return Permission.EDITOR
            return Permission.VIEWER

    if sharing.is_public:
        if sharing.public_permission is not None:
            return Permission(sharing.public_permission.value)
        return Permission.VIEWER

    return None


class PermissionResolver:
    """Разрешение доступа по одному идентификатору документа"""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.document_repository = DocumentRepository(session)
        self.index_repository = DocumentIndexRepository(session)
        self.lookup_repository = PublicLookupRepository(session)

    async def resolve(
        self,
        document_id: str,
        caller_id: Optional[str] = None,
        caller_email: Optional[str] = None
    ) -> AccessResult:
        entry = await self.index_repository.get(document_id)
        if entry is None:
            return NO_ACCESS

        document = await self.document_repository.get(entry.owner_id, document_id)
        if document is None:
            return NO_ACCESS

        permission = resolve_permission(document, caller_id, caller_email)
        if permission is None:
            return NO_ACCESS

        return AccessResult(document=document, permission=permission)

    async def require(
        self,
        document_id: str,
        caller_id: Optional[str] = None,
        caller_email: Optional[str] = None
    ) -> AccessResult:
        """Как resolve, но отсутствие доступа поднимает DocumentNotAccessibleError"""
        access = await self.resolve(document_id, caller_id, caller_email)
        if not access.granted:
            logger.info(f"Access to document {document_id} refused for caller {caller_id or 'anonymous'}")
            raise DocumentNotAccessibleError(document_id)
        return access

    async def resolve_public_token(self, token: str) -> AccessResult:
        """Доступ по публичной ссылке.

        Токен действителен, только пока документ публичен и хранит этот же токен.
        """
        entry = await self.lookup_repository.get(token)
        if entry is None:
            return NO_ACCESS

        document = await self.document_repository.get(entry.owner_id, entry.document_id)
        if document is None:
            return NO_ACCESS

        sharing = document.sharing
        if not sharing.is_public or sharing.public_token != token:
            return NO_ACCESS

        return AccessResult(document=document, permission=resolve_permission(document))
