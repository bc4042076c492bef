from datetime import timedelta

import pytest
from sqlalchemy import select

from docshare.core.security import create_access_token, decode_access_token, get_password_hash, verify_password
from docshare.db.models import EmailVerification as EmailVerificationModel
from docshare.domains.identity.entities import User
from docshare.domains.identity.schemas import UserCreate, UserLogin
from docshare.domains.identity.services import IdentityService


def test_password_hashing():
    hashed = get_password_hash("password123")
    assert hashed != "password123"
    assert verify_password("password123", hashed)
    assert not verify_password("password124", hashed)


def test_token_round_trip():
    token = create_access_token("user-1", {"email": "a@b.com"})
    payload = decode_access_token(token)
    assert payload["sub"] == "user-1"
    assert payload["email"] == "a@b.com"


def test_expired_or_garbage_token():
    expired = create_access_token("user-1", expires_delta=timedelta(seconds=-1))
    assert decode_access_token(expired) is None
    assert decode_access_token("not-a-token") is None


def test_user_name_fallbacks():
    assert User.create_user("A@B.com", "password123", "Ann").name == "Ann"
    user = User.create_user(" A@B.com ", "password123")
    assert user.email == "a@b.com"
    assert user.name == "a@b.com"


def test_password_rules():
    with pytest.raises(ValueError):
        UserCreate(email="a@example.com", password="onlyletters")
    with pytest.raises(ValueError):
        UserCreate(email="a@example.com", password="12345678")


async def test_register_login_and_resolve_token(test_db):
    service = IdentityService(test_db)
    user = await service.register_user(UserCreate(email="Ann@Example.com", password="password123", display_name="Ann"))
    assert user.email == "ann@example.com"

    with pytest.raises(ValueError):
        await service.register_user(UserCreate(email="ann@example.com", password="password123"))

    assert await service.login_user(UserLogin(email="ann@example.com", password="wrong1234")) is None

    token = await service.login_user(UserLogin(email="ANN@example.com", password="password123"))
    current = await service.get_current_user_from_token(token)
    assert current == user
    assert await service.get_current_user_from_token("garbage") is None


def test_verified_email_requires_confirmation():
    user = User.create_user("ann@example.com", "password123")
    assert user.verified_email is None
    user.email_verified = True
    assert user.verified_email == "ann@example.com"


async def test_verify_email(test_db):
    service = IdentityService(test_db)
    user = await service.register_user(UserCreate(email="ann@example.com", password="password123"))
    assert not user.email_verified

    result = await test_db.execute(
        select(EmailVerificationModel.token).where(EmailVerificationModel.user_id == user.id)
    )
    token = result.scalar_one()

    assert await service.verify_email("unknown") is None

    verified = await service.verify_email(token)
    assert verified.email_verified
    assert verified.verified_email == "ann@example.com"

    # токен одноразовый
    assert await service.verify_email(token) is None
