from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from docshare.core.db import get_db
from docshare.domains.identity.entities import User
from docshare.domains.identity.services import IdentityService

bearer_scheme = HTTPBearer(auto_error=False)


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db)
) -> Optional[User]:
    """Текущий пользователь или None для анонимного доступа по публичной ссылке"""
    if credentials is None:
        return None

    identity_service = IdentityService(db)
    return await identity_service.get_current_user_from_token(credentials.credentials)


async def get_current_user(user: Optional[User] = Depends(get_optional_user)) -> User:
    """Зависимость для получения аутентифицированного пользователя"""
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user
