from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from docshare.api.http.errors import DOMAIN_ERRORS, to_http_exception
from docshare.core.auth import get_current_user, get_optional_user
from docshare.core.db import get_db
from docshare.domains.documents.entities import Document
from docshare.domains.documents.schemas import (
    DocumentSave, DocumentContentUpdate, DocumentTitleUpdate,
    DocumentSummary, DocumentResponse, DocumentListResponse
)
from docshare.domains.documents.services import DocumentService
from docshare.domains.identity.entities import User
from docshare.domains.sharing.entities import Permission
from docshare.domains.sharing.schemas import AccessResponse

router = APIRouter(prefix="/documents", tags=["documents"])


def to_document_response(document: Document, permission: Permission) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        owner_id=document.owner_id,
        title=document.title,
        data=document.data,
        created_at=document.created_at,
        updated_at=document.updated_at,
        permission=permission
    )


@router.get("/", response_model=DocumentListResponse)
async def list_documents(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Получение списка документов текущего пользователя"""
    document_service = DocumentService(db)
    documents = await document_service.list_documents(current_user.id)
    
    return DocumentListResponse(
        documents=[
            DocumentSummary(
                id=doc.id,
                owner_id=doc.owner_id,
                title=doc.title,
                created_at=doc.created_at,
                updated_at=doc.updated_at
            )
            for doc in documents
        ],
        total=len(documents)
    )


@router.get("/{document_id}", response_model=DocumentResponse)
async def get_document(
    document_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Открытие документа по идентификатору: владелец, соавтор или публичный доступ"""
    document_service = DocumentService(db)
    
    try:
        access = await document_service.open_document(
            document_id,
            current_user.id if current_user else None,
            current_user.verified_email if current_user else None
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    
    return to_document_response(access.document, access.permission)


@router.put("/{document_id}", response_model=DocumentResponse)
async def save_document(
    document_id: str,
    document_data: DocumentSave,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Сохранение собственного документа"""
    document_service = DocumentService(db)
    
    try:
        document = await document_service.save_document(
            current_user.id,
            document_id,
            document_data.data,
            document_data.title
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    
    return to_document_response(document, Permission.OWNER)


@router.put("/{document_id}/content", response_model=DocumentResponse)
async def save_shared_content(
    document_id: str,
    content: DocumentContentUpdate,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Сохранение содержимого редактором или по публичной ссылке с правом редактирования"""
    document_service = DocumentService(db)
    caller_id = current_user.id if current_user else None
    caller_email = current_user.verified_email if current_user else None
    
    try:
        document = await document_service.save_shared_content(
            document_id,
            content.data,
            content.title,
            caller_id=caller_id,
            caller_email=caller_email
        )
        access = await document_service.open_document(document_id, caller_id, caller_email)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    
    return to_document_response(document, access.permission)


@router.patch("/{document_id}/title", status_code=status.HTTP_204_NO_CONTENT)
async def update_title(
    document_id: str,
    title_data: DocumentTitleUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Обновление заголовка документа"""
    document_service = DocumentService(db)
    
    if not await document_service.update_title(current_user.id, document_id, title_data.title):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )


@router.delete("/{document_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_document(
    document_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Удаление документа"""
    document_service = DocumentService(db)
    
    if not await document_service.delete_document(current_user.id, document_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )


@router.get("/{document_id}/access", response_model=AccessResponse)
async def get_access(
    document_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Право вызывающего на документ без загрузки содержимого"""
    document_service = DocumentService(db)
    
    try:
        access = await document_service.open_document(
            document_id,
            current_user.id if current_user else None,
            current_user.verified_email if current_user else None
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    
    return AccessResponse(document_id=document_id, permission=access.permission)
