from datetime import datetime
from typing import Optional, Dict, Any

from docshare.domains.sharing.entities import SharingInfo

DEFAULT_TITLE = "Untitled Essay"


class Document:
    """Сущность документа: принадлежит владельцу, содержимое непрозрачно для ядра"""
    
    def __init__(
        self,
        id: str,
        owner_id: str,
        title: str = DEFAULT_TITLE,
        data: Optional[Dict[str, Any]] = None,
        sharing: Optional[SharingInfo] = None,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.id = id
        self.owner_id = owner_id
        self.title = title
        self.data = data
        self.sharing = sharing or SharingInfo.private()
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()
    
    def update_content(self, data: Optional[Dict[str, Any]], title: Optional[str] = None) -> None:
        """Обновление содержимого без изменения настроек доступа; None оставляет прежние данные"""
        if data is not None:
            self.data = data
        if title:
            self.title = title
        self.updated_at = datetime.utcnow()
    
    def update_title(self, new_title: str) -> None:
        """Обновление заголовка документа"""
        self.title = new_title
        self.updated_at = datetime.utcnow()
    
    def is_owner(self, user_id: Optional[str]) -> bool:
        """Проверка является ли пользователь владельцем"""
        return user_id is not None and user_id == self.owner_id
    
    @classmethod
    def create_document(
        cls,
        document_id: str,
        owner_id: str,
        title: str = DEFAULT_TITLE,
        data: Optional[Dict[str, Any]] = None
    ) -> "Document":
        """Создание нового документа"""
        now = datetime.utcnow()
        return cls(
            id=document_id,
            owner_id=owner_id,
            title=title,
            data=data,
            created_at=now,
            updated_at=now
        )
    
    def __eq__(self, other) -> bool:
        if not isinstance(other, Document):
            return False
        return self.owner_id == other.owner_id and self.id == other.id
    
    def __repr__(self) -> str:
        return f"Document(id={self.id}, owner_id={self.owner_id}, title={self.title})"
