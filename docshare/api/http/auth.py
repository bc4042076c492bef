from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from docshare.core.auth import get_current_user
from docshare.core.db import get_db
from docshare.domains.identity.entities import User
from docshare.domains.identity.schemas import UserCreate, UserLogin, UserResponse, Token, EmailVerify
from docshare.domains.identity.services import IdentityService

router = APIRouter(prefix="/auth", tags=["authentication"])


def to_user_response(user: User) -> UserResponse:
    return UserResponse(
        id=user.id,
        email=user.email,
        display_name=user.display_name,
        is_active=user.is_active,
        email_verified=user.email_verified,
        created_at=user.created_at
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    user_data: UserCreate,
    db: AsyncSession = Depends(get_db)
):
    """Регистрация нового пользователя"""
    identity_service = IdentityService(db)
    
    try:
        user = await identity_service.register_user(user_data)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    
    return to_user_response(user)


@router.post("/login", response_model=Token)
async def login(
    login_data: UserLogin,
    db: AsyncSession = Depends(get_db)
):
    """Вход пользователя"""
    identity_service = IdentityService(db)
    token = await identity_service.login_user(login_data)
    
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    return {"access_token": token, "token_type": "bearer"}


@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Получение информации о текущем пользователе"""
    return to_user_response(current_user)


@router.post("/verify-email", response_model=UserResponse)
async def verify_email(
    verify_data: EmailVerify,
    db: AsyncSession = Depends(get_db)
):
    """Подтверждение email: только после него открываются документы, расшаренные на этот адрес"""
    identity_service = IdentityService(db)
    user = await identity_service.verify_email(verify_data.token)
    
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired verification token"
        )
    
    return to_user_response(user)
