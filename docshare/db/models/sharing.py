from datetime import datetime

from sqlalchemy import Column, String, DateTime

from docshare.db.base import Base


class SharedReference(Base):
    __tablename__ = "shared_references"
    
    recipient_email = Column(String(255), primary_key=True)
    # ключ вида "{owner_id}_{document_id}"
    key = Column(String(257), primary_key=True)
    document_id = Column(String(128), nullable=False, index=True)
    owner_id = Column(String(128), nullable=False, index=True)
    owner_email = Column(String(255), nullable=False, default="")
    owner_display_name = Column(String(255), nullable=False, default="")
    title = Column(String(255), nullable=False, default="")
    permission = Column(String(16), nullable=False)
    shared_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    # Заполняется только внешним отправителем писем
    notification_status = Column(String(32), nullable=True)


class PublicLookup(Base):
    __tablename__ = "public_lookup"
    
    token = Column(String(64), primary_key=True)
    document_id = Column(String(128), nullable=False)
    owner_id = Column(String(128), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
