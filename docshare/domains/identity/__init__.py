from docshare.domains.identity.entities import User, EmailVerification
from docshare.domains.identity.schemas import UserCreate, UserLogin, UserResponse, Token, EmailVerify

__all__ = [
    "User", "EmailVerification",
    "UserCreate", "UserLogin", "UserResponse", "Token", "EmailVerify"
]
