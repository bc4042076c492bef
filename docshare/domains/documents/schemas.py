from pydantic import BaseModel, Field, field_validator
from typing import Optional, List, Dict, Any
from datetime import datetime

from docshare.domains.documents.entities import DEFAULT_TITLE
from docshare.domains.sharing.entities import Permission


class DocumentSave(BaseModel):
    """Схема для сохранения документа"""
    title: str = Field(default=DEFAULT_TITLE, max_length=255)
    data: Optional[Dict[str, Any]] = None
    
    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        return v.strip() or DEFAULT_TITLE


class DocumentContentUpdate(BaseModel):
    """Схема для сохранения содержимого соавтором или по публичной ссылке"""
    title: Optional[str] = Field(None, max_length=255)
    data: Optional[Dict[str, Any]] = None


class DocumentTitleUpdate(BaseModel):
    """Схема для обновления заголовка"""
    title: str = Field(..., min_length=1, max_length=255)
    
    @field_validator('title')
    @classmethod
    def validate_title(cls, v):
        if not v.strip():
            raise ValueError('Title cannot be empty')
        return v.strip()


class DocumentSummary(BaseModel):
    """Краткие данные документа для списков"""
    id: str
    owner_id: str
    title: str
    created_at: datetime
    updated_at: datetime


class DocumentResponse(DocumentSummary):
    """Схема для ответа с данными документа и правом вызывающего"""
    data: Optional[Dict[str, Any]] = None
    permission: Permission


class DocumentListResponse(BaseModel):
    """Схема для списка документов"""
    documents: List[DocumentSummary]
    total: int
