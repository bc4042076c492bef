from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime

from docshare.domains.sharing.entities import Collaborator, PermissionLevel, SharingInfo, Permission


class CollaboratorSchema(BaseModel):
    """Соавтор в запросах и ответах"""
    email: EmailStr
    permission: PermissionLevel = PermissionLevel.VIEWER
    added_at: Optional[datetime] = None
    
    def to_entity(self) -> Collaborator:
        if self.added_at is None:
            return Collaborator(email=self.email, permission=self.permission)
        return Collaborator(email=self.email, permission=self.permission, added_at=self.added_at)


class SharingInfoResponse(BaseModel):
    """Настройки доступа документа"""
    is_public: bool
    public_token: Optional[str] = None
    public_permission: Optional[PermissionLevel] = None
    collaborators: List[CollaboratorSchema]
    collaborator_emails: List[str]
    editor_emails: List[str]
    
    @classmethod
    def from_entity(cls, sharing: SharingInfo) -> "SharingInfoResponse":
        return cls(
            is_public=sharing.is_public,
            public_token=sharing.public_token,
            public_permission=sharing.public_permission,
            collaborators=[
                CollaboratorSchema(email=c.email, permission=c.permission, added_at=c.added_at)
                for c in sharing.collaborators
            ],
            collaborator_emails=list(sharing.collaborator_emails),
            editor_emails=list(sharing.editor_emails)
        )


class SharingSettingsRequest(BaseModel):
    """Полный набор настроек доступа из диалога "Поделиться" """
    collaborators: List[CollaboratorSchema] = Field(default_factory=list)
    is_public: bool = False
    public_permission: PermissionLevel = PermissionLevel.VIEWER


class ShareUserRequest(BaseModel):
    """Схема для предоставления доступа одному пользователю"""
    email: EmailStr
    permission: PermissionLevel = PermissionLevel.VIEWER


class PublicAccessRequest(BaseModel):
    """Схема для включения или выключения публичной ссылки"""
    is_public: bool
    public_permission: Optional[PermissionLevel] = None


class PublicTokenResponse(BaseModel):
    """Токен публичной ссылки после изменения настроек"""
    document_id: str
    is_public: bool
    public_token: Optional[str] = None


class SharedReferenceResponse(BaseModel):
    """Документ в списке "доступно мне" """
    document_id: str
    owner_id: str
    owner_email: str
    owner_display_name: str
    title: str
    permission: PermissionLevel
    shared_at: datetime


class SharedWithMeResponse(BaseModel):
    documents: List[SharedReferenceResponse]
    total: int


class AccessResponse(BaseModel):
    """Право вызывающего на документ"""
    document_id: str
    permission: Permission
