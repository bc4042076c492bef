from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional
import asyncio
import contextlib
import logging

from docshare.core.db import get_db
from docshare.core.errors import DocumentNotAccessibleError
from docshare.domains.comments.entities import Comment
from docshare.domains.comments.feed import CommentFeed, comment_feed
from docshare.domains.comments.schemas import CommentsByBlockResponse
from docshare.domains.comments.services import CommentService
from docshare.domains.comments.threads import group_by_block
from docshare.domains.identity.services import IdentityService
from docshare.domains.sharing.resolver import PermissionResolver

logger = logging.getLogger(__name__)

router = APIRouter()


def comments_message(document_id: str, comments: List[Comment]) -> dict:
    """Сообщение с тредами по блокам, собранными из плоского списка"""
    return {
        "type": "comments",
        "data": CommentsByBlockResponse.from_threads(document_id, group_by_block(comments)).model_dump(mode="json")
    }


async def forward_feed(
    websocket: WebSocket,
    document_id: str,
    queue: asyncio.Queue,
    feed: CommentFeed,
    resolver: PermissionResolver,
    caller_id: Optional[str] = None,
    caller_email: Optional[str] = None
):
    """Пересылка снимков ленты клиенту.

    Права проверяются заново перед каждой отправкой: соавтора могут удалить,
    а публичную ссылку выключить, пока соединение открыто.
    """
    while True:
        comments = await queue.get()
        comments = feed.latest(queue, comments)
        
        # сессия живет все соединение, настройки доступа перечитываются из БД
        resolver.session.expire_all()
        access = await resolver.resolve(document_id, caller_id, caller_email)
        if not access.granted:
            logger.info(f"Access to document {document_id} revoked for {caller_id or 'anonymous'}, closing comment feed")
            await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
            return
        
        await websocket.send_json(comments_message(document_id, comments))


@router.websocket("/ws/documents/{document_id}/comments")
async def comments_websocket(
    websocket: WebSocket,
    document_id: str,
    token: Optional[str] = None,
    db: AsyncSession = Depends(get_db)
):
    """Живая лента комментариев документа.

    Токен передается в query-параметре; без него доступ только по публичной ссылке.
    """
    user = None
    if token:
        user = await IdentityService(db).get_current_user_from_token(token)
    caller_id = user.id if user else None
    caller_email = user.verified_email if user else None
    
    comment_service = CommentService(db)
    try:
        comments = await comment_service.list_comments(document_id, caller_id, caller_email)
    except DocumentNotAccessibleError:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    
    await websocket.accept()
    queue = comment_feed.subscribe(document_id)
    logger.info(f"Comment feed opened for document {document_id} by {caller_id or 'anonymous'}")
    
    sender = asyncio.create_task(forward_feed(
        websocket, document_id, queue, comment_feed, PermissionResolver(db), caller_id, caller_email
    ))
    try:
        await websocket.send_json(comments_message(document_id, comments))
        
        while True:
            message = await websocket.receive_json()
            if message.get("type") == "ping":
                await websocket.send_json({"type": "pong"})
    
    except WebSocketDisconnect:
        logger.info(f"Comment feed closed for document {document_id}")
    
    finally:
        comment_feed.unsubscribe(document_id, queue)
        sender.cancel()
        with contextlib.suppress(asyncio.CancelledError, WebSocketDisconnect):
            await sender
