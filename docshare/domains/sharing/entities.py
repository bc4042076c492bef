from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple


class PermissionLevel(str, Enum):
    """Уровень доступа, выдаваемый соавтору или публичной ссылке"""
    VIEWER = "viewer"
    EDITOR = "editor"


class Permission(str, Enum):
    """Итоговое право вызывающего на документ"""
    OWNER = "owner"
    EDITOR = "editor"
    VIEWER = "viewer"

    @property
    def can_write(self) -> bool:
        return self in (Permission.OWNER, Permission.EDITOR)


def normalize_email(email: str) -> str:
    """Email сравниваются без учета регистра"""
    return email.strip().lower()


def _parse_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if value:
        return datetime.fromisoformat(value)
    return datetime.utcnow()


@dataclass(frozen=True)
class Collaborator:
    """Соавтор документа, ключ - нормализованный email"""
    email: str
    permission: PermissionLevel
    added_at: datetime = field(default_factory=datetime.utcnow)

    def __post_init__(self):
        object.__setattr__(self, "email", normalize_email(self.email))
        object.__setattr__(self, "permission", PermissionLevel(self.permission))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "email": self.email,
            "permission": self.permission.value,
            "addedAt": self.added_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Collaborator":
        return cls(
            email=data["email"],
            permission=PermissionLevel(data["permission"]),
            added_at=_parse_datetime(data.get("addedAt")),
        )


@dataclass(frozen=True)
class SharingInfo:
    """Блок настроек доступа, встроенный в документ.

    collaborator_emails и editor_emails - избыточные проекции списка
    collaborators для декларативных правил доступа. Они не передаются
    в конструктор и всегда пересчитываются из collaborators, поэтому
    не могут разойтись с исходным списком.
    """
    is_public: bool = False
    public_token: Optional[str] = None
    public_permission: Optional[PermissionLevel] = None
    collaborators: Tuple[Collaborator, ...] = ()
    collaborator_emails: Tuple[str, ...] = field(init=False)
    editor_emails: Tuple[str, ...] = field(init=False)

    def __post_init__(self):
        by_email: Dict[str, Collaborator] = {}
        for collaborator in self.collaborators:
            by_email[collaborator.email] = collaborator
        collaborators = tuple(by_email.values())

        object.__setattr__(self, "collaborators", collaborators)
        object.__setattr__(self, "collaborator_emails", tuple(c.email for c in collaborators))
        object.__setattr__(
            self,
            "editor_emails",
            tuple(c.email for c in collaborators if c.permission == PermissionLevel.EDITOR),
        )
        if self.public_permission is not None:
            object.__setattr__(self, "public_permission", PermissionLevel(self.public_permission))

    @classmethod
    def private(cls) -> "SharingInfo":
        """Настройки по умолчанию: приватный документ без соавторов"""
        return cls()

    def with_collaborators(self, collaborators: Iterable[Collaborator]) -> "SharingInfo":
        return replace(self, collaborators=tuple(collaborators))

    def with_public_access(
        self,
        is_public: bool,
        public_token: Optional[str],
        public_permission: Optional[PermissionLevel]
    ) -> "SharingInfo":
        return replace(
            self,
            is_public=is_public,
            public_token=public_token,
            public_permission=public_permission if is_public else None,
        )

    def find(self, email: str) -> Optional[Collaborator]:
        email = normalize_email(email)
        for collaborator in self.collaborators:
            if collaborator.email == email:
                return collaborator
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isPublic": self.is_public,
            "publicToken": self.public_token,
            "publicPermission": self.public_permission.value if self.public_permission else None,
            "collaborators": [c.to_dict() for c in self.collaborators],
            "collaboratorEmails": list(self.collaborator_emails),
            "editorEmails": list(self.editor_emails),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SharingInfo":
        if not data:
            return cls.private()
        # Проекции в хранилище игнорируются и строятся заново
        return cls(
            is_public=bool(data.get("isPublic", False)),
            public_token=data.get("publicToken"),
            public_permission=data.get("publicPermission"),
            collaborators=tuple(Collaborator.from_dict(c) for c in data.get("collaborators") or []),
        )


@dataclass(frozen=True)
class ShareMeta:
    """Данные владельца, которые копируются в ссылку получателя"""
    owner_email: str = ""
    owner_display_name: str = ""
    title: str = ""


def shared_reference_key(owner_id: str, document_id: str) -> str:
    return f"{owner_id}_{document_id}"


@dataclass
class SharedReference:
    """Денормализованный указатель на документ в списке "доступно мне" получателя"""
    recipient_email: str
    document_id: str
    owner_id: str
    owner_email: str
    owner_display_name: str
    title: str
    permission: PermissionLevel
    shared_at: datetime = field(default_factory=datetime.utcnow)
    notification_status: Optional[str] = None

    @property
    def key(self) -> str:
        return shared_reference_key(self.owner_id, self.document_id)

    @classmethod
    def for_collaborator(
        cls,
        collaborator: Collaborator,
        owner_id: str,
        document_id: str,
        meta: ShareMeta
    ) -> "SharedReference":
        return cls(
            recipient_email=collaborator.email,
            document_id=document_id,
            owner_id=owner_id,
            owner_email=meta.owner_email,
            owner_display_name=meta.owner_display_name,
            title=meta.title,
            permission=collaborator.permission,
        )


@dataclass
class PublicLookupEntry:
    token: str
    document_id: str
    owner_id: str
    created_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class DocumentIndexEntry:
    document_id: str
    owner_id: str
