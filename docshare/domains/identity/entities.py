import secrets
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from docshare.core.security import get_password_hash, verify_password
from docshare.domains.sharing.entities import normalize_email


class User:
    """Сущность пользователя: идентичность вызывающего для проверок доступа"""
    
    def __init__(
        self,
        id: str,
        email: str,
        display_name: str,
        password_hash: str,
        is_active: bool = True,
        email_verified: bool = False,
        created_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None
    ):
        self.id = id
        self.email = email
        self.display_name = display_name
        self.password_hash = password_hash
        self.is_active = is_active
        self.email_verified = email_verified
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()
    
    def authenticate(self, password: str) -> bool:
        """Проверка пароля пользователя"""
        return verify_password(password, self.password_hash)
    
    @property
    def verified_email(self) -> Optional[str]:
        """Email для проверки прав соавтора; неподтвержденный адрес прав не дает"""
        return self.email if self.email_verified else None
    
    @property
    def name(self) -> str:
        """Отображаемое имя с запасным вариантом"""
        return self.display_name or self.email or "Anonymous"
    
    @classmethod
    def create_user(cls, email: str, password: str, display_name: str = "") -> "User":
        """Создание нового пользователя с хешированием пароля"""
        return cls(
            id=str(uuid.uuid4()),
            email=normalize_email(email),
            display_name=display_name.strip(),
            password_hash=get_password_hash(password)
        )
    
    def __eq__(self, other) -> bool:
        if not isinstance(other, User):
            return False
        return self.id == other.id
    
    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email})"


@dataclass
class EmailVerification:
    """Запрос подтверждения email.

    Внешний отправитель писем следит за созданием таких записей и
    доставляет token владельцу адреса; ядро само писем не шлет.
    """
    token: str
    user_id: str
    email: str
    created_at: datetime = field(default_factory=datetime.utcnow)
    verified_at: Optional[datetime] = None
    
    @property
    def is_used(self) -> bool:
        return self.verified_at is not None
    
    @classmethod
    def for_user(cls, user: User) -> "EmailVerification":
        return cls(token=secrets.token_urlsafe(32), user_id=user.id, email=user.email)
