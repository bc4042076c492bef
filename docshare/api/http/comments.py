from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from docshare.api.http.errors import DOMAIN_ERRORS, to_http_exception
from docshare.core.auth import get_current_user, get_optional_user
from docshare.core.db import get_db
from docshare.domains.comments.schemas import (
    CommentCreate, CommentUpdate, CommentResolve, CommentResponse, CommentsByBlockResponse
)
from docshare.domains.comments.services import CommentService
from docshare.domains.identity.entities import User

router = APIRouter(prefix="/documents/{document_id}/comments", tags=["comments"])


@router.get("/", response_model=CommentsByBlockResponse)
async def list_comments(
    document_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Треды комментариев документа, сгруппированные по блокам"""
    comment_service = CommentService(db)
    
    try:
        by_block = await comment_service.list_threads_by_block(
            document_id,
            current_user.id if current_user else None,
            current_user.verified_email if current_user else None
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    
    return CommentsByBlockResponse.from_threads(document_id, by_block)


@router.post("/", response_model=CommentResponse, status_code=status.HTTP_201_CREATED)
async def add_comment(
    document_id: str,
    comment_data: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Добавление комментария или ответа в тред"""
    comment_service = CommentService(db)
    
    try:
        comment = await comment_service.add_comment(
            document_id,
            current_user,
            comment_data.block_id,
            comment_data.block_type,
            comment_data.text,
            comment_data.parent_comment_id
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    
    return CommentResponse.model_validate(comment)


@router.patch("/{comment_id}", response_model=CommentResponse)
async def edit_comment(
    document_id: str,
    comment_id: str,
    comment_data: CommentUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Изменение текста своего комментария"""
    comment_service = CommentService(db)
    
    try:
        comment = await comment_service.edit_comment(document_id, current_user, comment_id, comment_data.text)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    
    return CommentResponse.model_validate(comment)


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    document_id: str,
    comment_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Удаление комментария; корень удаляется вместе с ответами"""
    comment_service = CommentService(db)
    
    try:
        await comment_service.delete_comment(document_id, current_user, comment_id)
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)


@router.post("/{comment_id}/resolve", response_model=CommentResponse)
async def resolve_thread(
    document_id: str,
    comment_id: str,
    resolve_data: CommentResolve,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Отметка треда решенным или переоткрытие"""
    comment_service = CommentService(db)
    
    try:
        comment = await comment_service.resolve_thread(
            document_id, current_user, comment_id, resolve_data.resolved
        )
    except DOMAIN_ERRORS as e:
        raise to_http_exception(e)
    
    return CommentResponse.model_validate(comment)
