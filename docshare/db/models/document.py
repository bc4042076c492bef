from sqlalchemy import Column, String, JSON

from docshare.db.base import Base, TimestampMixin


class Document(TimestampMixin, Base):
    __tablename__ = "documents"
    
    owner_id = Column(String(128), primary_key=True)
    id = Column(String(128), primary_key=True)
    title = Column(String(255), nullable=False, default="Untitled Essay")
    # Содержимое документа непрозрачно для ядра
    data = Column(JSON, nullable=True)
    # Встроенный блок SharingInfo вместе с производными списками email
    sharing = Column(JSON, nullable=True)


class DocumentIndex(Base):
    __tablename__ = "document_index"
    
    document_id = Column(String(128), primary_key=True)
    owner_id = Column(String(128), nullable=False)
