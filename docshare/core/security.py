"""Пароли и JWT токены доступа.

Токен несет идентификатор пользователя в sub и email, по которому
определяются права соавтора; email в токене всегда нормализован.
"""
from datetime import datetime, timedelta
from typing import Optional, Dict, Any
from jose import JWTError, jwt
from passlib.context import CryptContext

from docshare.core.config import settings

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def create_access_token(
    subject: str,
    claims: Optional[Dict[str, Any]] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """Токен доступа для пользователя subject"""
    expires_delta = expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    payload = dict(claims or {})
    payload.update({"sub": subject, "exp": datetime.utcnow() + expires_delta})
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Данные токена или None, если подпись или срок недействительны"""
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if not payload.get("sub"):
        return None
    return payload
