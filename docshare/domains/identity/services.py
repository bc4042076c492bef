import logging
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession

from docshare.core.security import create_access_token, decode_access_token
from docshare.db.repositories.user_repository import UserRepository, EmailVerificationRepository
from docshare.domains.identity.entities import User, EmailVerification
from docshare.domains.identity.schemas import UserCreate, UserLogin

logger = logging.getLogger(__name__)


class IdentityService:
    """Регистрация, вход и определение вызывающего по токену.

    Остальные сервисы получают отсюда только пару (id, email): по id
    распознается владелец, по подтвержденному email соавтор.
    """
    
    def __init__(self, session: AsyncSession):
        self.session = session
        self.user_repository = UserRepository(session)
        self.verification_repository = EmailVerificationRepository(session)
    
    async def register_user(self, user_data: UserCreate) -> User:
        if await self.user_repository.email_exists(user_data.email):
            raise ValueError("Email already registered")
        
        user = await self.user_repository.create(
            User.create_user(
                email=user_data.email,
                password=user_data.password,
                display_name=user_data.display_name
            )
        )
        await self.verification_repository.create(EmailVerification.for_user(user))
        logger.info(f"Registered user {user.id}, email verification requested")
        return user
    
    async def verify_email(self, token: str) -> Optional[User]:
        """Подтверждение email по токену из письма; повторное использование токена не действует"""
        verification = await self.verification_repository.get(token)
        if verification is None or verification.is_used:
            return None
        
        if not await self.user_repository.mark_email_verified(verification.user_id, verification.email):
            logger.warning(f"Email verification for user {verification.user_id} no longer matches the account")
            return None
        
        await self.verification_repository.mark_used(token)
        logger.info(f"Email verified for user {verification.user_id}")
        return await self.user_repository.get_by_id(verification.user_id)
    
    async def authenticate_user(self, login_data: UserLogin) -> Optional[User]:
        user = await self.user_repository.get_by_email(login_data.email)
        
        if user is None or not user.is_active or not user.authenticate(login_data.password):
            logger.info(f"Failed login attempt for {login_data.email}")
            return None
        
        return user
    
    async def login_user(self, login_data: UserLogin) -> Optional[str]:
        """JWT токен для пользователя или None при неверных данных"""
        user = await self.authenticate_user(login_data)
        if user is None:
            return None
        
        return create_access_token(user.id, {"email": user.email, "name": user.name})
    
    async def get_current_user_from_token(self, token: str) -> Optional[User]:
        payload = decode_access_token(token)
        if payload is None:
            return None
        
        user = await self.user_repository.get_by_id(payload["sub"])
        if user is None or not user.is_active:
            return None
        
        return user
