from datetime import datetime

from sqlalchemy import Column, String, Boolean, DateTime

from docshare.db.base import Base, TimestampMixin


class User(TimestampMixin, Base):
    __tablename__ = "users"
    
    id = Column(String(36), primary_key=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    display_name = Column(String(255), nullable=False, default="")
    password_hash = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True)
    # Права соавтора по email действуют только после подтверждения адреса
    email_verified = Column(Boolean, default=False, nullable=False)


class EmailVerification(Base):
    __tablename__ = "email_verifications"
    
    token = Column(String(64), primary_key=True)
    user_id = Column(String(36), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    verified_at = Column(DateTime, nullable=True)
