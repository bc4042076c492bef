from datetime import datetime
from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from docshare.db.models.user import User as UserModel, EmailVerification as EmailVerificationModel
from docshare.domains.identity.entities import User, EmailVerification
from docshare.domains.sharing.entities import normalize_email


class UserRepository:
    """Репозиторий пользователей; email хранится нормализованным"""
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def create(self, user: User) -> User:
        db_user = UserModel(
            id=user.id,
            email=normalize_email(user.email),
            display_name=user.display_name,
            password_hash=user.password_hash,
            is_active=user.is_active,
            email_verified=user.email_verified
        )
        
        self.session.add(db_user)
        try:
            await self.session.commit()
        except IntegrityError:
            await self.session.rollback()
            raise ValueError("Email already registered")
        
        await self.session.refresh(db_user)
        return self._to_domain(db_user)
    
    async def get_by_id(self, user_id: str) -> Optional[User]:
        return await self._get_one(UserModel.id == user_id)
    
    async def get_by_email(self, email: str) -> Optional[User]:
        return await self._get_one(UserModel.email == normalize_email(email))
    
    async def email_exists(self, email: str) -> bool:
        result = await self.session.execute(
            select(UserModel.id).where(UserModel.email == normalize_email(email))
        )
        return result.first() is not None
    
    async def mark_email_verified(self, user_id: str, email: str) -> bool:
        """Подтверждение адреса, если он не изменился с момента запроса"""
        stmt = (
            update(UserModel)
            .where(UserModel.id == user_id, UserModel.email == normalize_email(email))
            .values(email_verified=True)
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0
    
    async def _get_one(self, condition) -> Optional[User]:
        result = await self.session.execute(select(UserModel).where(condition))
        db_user = result.scalar_one_or_none()
        return self._to_domain(db_user) if db_user else None
    
    def _to_domain(self, db_user: UserModel) -> User:
        return User(
            id=db_user.id,
            email=db_user.email,
            display_name=db_user.display_name,
            password_hash=db_user.password_hash,
            is_active=db_user.is_active,
            email_verified=db_user.email_verified,
            created_at=db_user.created_at,
            updated_at=db_user.updated_at
        )


class EmailVerificationRepository:
    """Запросы подтверждения email"""
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def create(self, verification: EmailVerification) -> EmailVerification:
        self.session.add(EmailVerificationModel(
            token=verification.token,
            user_id=verification.user_id,
            email=normalize_email(verification.email),
            created_at=verification.created_at
        ))
        await self.session.commit()
        return verification
    
    async def get(self, token: str) -> Optional[EmailVerification]:
        result = await self.session.execute(
            select(EmailVerificationModel).where(EmailVerificationModel.token == token)
        )
        db_verification = result.scalar_one_or_none()
        if not db_verification:
            return None
        return EmailVerification(
            token=db_verification.token,
            user_id=db_verification.user_id,
            email=db_verification.email,
            created_at=db_verification.created_at,
            verified_at=db_verification.verified_at
        )
    
    async def mark_used(self, token: str) -> bool:
        stmt = (
            update(EmailVerificationModel)
            .where(EmailVerificationModel.token == token, EmailVerificationModel.verified_at.is_(None))
            .values(verified_at=datetime.utcnow())
        )
        result = await self.session.execute(stmt)
        await self.session.commit()
        return result.rowcount > 0
