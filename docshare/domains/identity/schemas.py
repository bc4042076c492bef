from pydantic import BaseModel, EmailStr, Field, field_validator, ConfigDict
from datetime import datetime


class UserCreate(BaseModel):
    """Схема для создания пользователя"""
    email: EmailStr
    display_name: str = Field(default="", max_length=255)
    password: str = Field(..., min_length=8, max_length=128)
    
    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if not any(c.isalpha() for c in v):
            raise ValueError('Password must contain at least one letter')
        if not any(c.isdigit() for c in v):
            raise ValueError('Password must contain at least one digit')
        return v


class UserLogin(BaseModel):
    """Схема для входа пользователя"""
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Схема для ответа с данными пользователя"""
    id: str
    email: str
    display_name: str
    is_active: bool
    email_verified: bool = False
    created_at: datetime
    
    model_config = ConfigDict(from_attributes=True)


class Token(BaseModel):
    """Схема для JWT токена"""
    access_token: str
    token_type: str = "bearer"


class EmailVerify(BaseModel):
    """Токен подтверждения из письма"""
    token: str = Field(..., min_length=1, max_length=64)
