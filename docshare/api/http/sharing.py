from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from docshare.api.http.documents import to_document_response
from docshare.api.http.errors import DOMAIN_ERRORS, to_http_exception
from docshare.core.auth import get_current_user
from docshare.core.db import get_db
from docshare.domains.documents.services import DocumentService
from docshare.domains.identity.entities import User
from docshare.domains.documents.schemas import DocumentResponse
from docshare.domains.sharing.entities import ShareMeta
from docshare.domains.sharing.schemas import (
    SharingInfoResponse, SharingSettingsRequest, ShareUserRequest, PublicAccessRequest,
    PublicTokenResponse, SharedReferenceResponse, SharedWithMeResponse
)
from docshare.domains.sharing.services import SharingService

router = APIRouter(tags=["sharing"])


async def get_share_meta(db: AsyncSession, owner: User, document_id: str) -> ShareMeta:
    """Данные владельца и заголовок для ссылок получателей"""
    document = await DocumentService(db).get_document(owner.id, document_id)
    if not document:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )
    return ShareMeta(owner_email=owner.email, owner_display_name=owner.name, title=document.title)


@router.get("/documents/{document_id}/sharing", response_model=SharingInfoResponse)
async def get_sharing_info(
    document_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Настройки доступа собственного документа"""
    sharing_service = SharingService(db)
    sharing = await sharing_service.get_sharing_info(current_user.id, document_id)
    
    if sharing is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found"
        )
    
    return SharingInfoResponse.from_entity(sharing)


@router.put("/documents/{document_id}/sharing", response_model=PublicTokenResponse)
async def save_sharing_settings(
    document_id: str,
    settings_data: SharingSettingsRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Сохранение всех настроек доступа из диалога "Поделиться" """
    meta = await get_share_meta(db, current_user, document_id)
    sharing_service = SharingService(db)
    
    try:
        token = await sharing_service.save_sharing_settings(
            current_user.id,
            document_id,
            [c.to_entity() for c in settings_data.collaborators],
            settings_data.is_public,
            settings_data.public_permission,
            meta
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    
    return PublicTokenResponse(
        document_id=document_id,
        is_public=settings_data.is_public,
        public_token=token
    )


@router.post("/documents/{document_id}/sharing/collaborators", response_model=SharingInfoResponse)
async def share_with_user(
    document_id: str,
    share_data: ShareUserRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Добавление соавтора или изменение его права"""
    meta = await get_share_meta(db, current_user, document_id)
    sharing_service = SharingService(db)
    
    try:
        sharing = await sharing_service.share_with_user(
            current_user.id,
            document_id,
            share_data.email,
            share_data.permission,
            meta
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    
    return SharingInfoResponse.from_entity(sharing)


@router.delete("/documents/{document_id}/sharing/collaborators/{email}", response_model=SharingInfoResponse)
async def unshare_user(
    document_id: str,
    email: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Удаление соавтора"""
    sharing_service = SharingService(db)
    
    try:
        sharing = await sharing_service.unshare_user(current_user.id, document_id, email)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    
    return SharingInfoResponse.from_entity(sharing)


@router.put("/documents/{document_id}/sharing/public", response_model=PublicTokenResponse)
async def set_public(
    document_id: str,
    public_data: PublicAccessRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Включение или выключение публичной ссылки"""
    sharing_service = SharingService(db)
    
    try:
        token = await sharing_service.set_public(
            current_user.id,
            document_id,
            public_data.is_public,
            public_data.public_permission
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    
    return PublicTokenResponse(document_id=document_id, is_public=public_data.is_public, public_token=token)


@router.get("/shared-with-me", response_model=SharedWithMeResponse)
async def list_shared_with_me(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Документы, которыми поделились с текущим пользователем"""
    sharing_service = SharingService(db)
    references = await sharing_service.list_shared_with_me(current_user.verified_email)
    
    return SharedWithMeResponse(
        documents=[
            SharedReferenceResponse(
                document_id=ref.document_id,
                owner_id=ref.owner_id,
                owner_email=ref.owner_email,
                owner_display_name=ref.owner_display_name,
                title=ref.title,
                permission=ref.permission,
                shared_at=ref.shared_at
            )
            for ref in references
        ],
        total=len(references)
    )


@router.get("/public/{token}", response_model=DocumentResponse)
async def get_public_document(
    token: str,
    db: AsyncSession = Depends(get_db)
):
    """Открытие документа по публичной ссылке без аутентификации"""
    sharing_service = SharingService(db)
    access = await sharing_service.get_public_document(token)
    
    if not access.granted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Document not found or not accessible"
        )
    
    return to_document_response(access.document, access.permission)
