from sqlalchemy import Column, String, Text, Boolean, DateTime, Index

from docshare.db.base import Base


class Comment(Base):
    __tablename__ = "document_comments"
    __table_args__ = (
        Index("ix_document_comments_parent", "owner_id", "document_id", "parent_comment_id"),
    )
    
    owner_id = Column(String(128), primary_key=True)
    document_id = Column(String(128), primary_key=True)
    id = Column(String(64), primary_key=True)
    block_id = Column(String(128), nullable=False)
    block_type = Column(String(32), nullable=False)
    author_id = Column(String(128), nullable=False)
    author_email = Column(String(255), nullable=False, default="")
    author_display_name = Column(String(255), nullable=False, default="")
    text = Column(Text, nullable=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=False)
    parent_comment_id = Column(String(64), nullable=True)
    resolved = Column(Boolean, default=False, nullable=False)
