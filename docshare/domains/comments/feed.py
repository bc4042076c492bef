import asyncio
import logging
from typing import Dict, List, Set

from docshare.domains.comments.entities import Comment

logger = logging.getLogger(__name__)


class CommentFeed:
    """Лента комментариев документа.

    После каждого изменения подписчики получают полный плоский список
    комментариев и сами заново группируют его в треды.
    """

    def __init__(self):
        # {document_id: {queue, ...}}
        self._subscribers: Dict[str, Set[asyncio.Queue]] = {}

    def subscribe(self, document_id: str) -> asyncio.Queue:
        """Подписка на изменения комментариев документа"""
        queue: asyncio.Queue = asyncio.Queue()
        self._subscribers.setdefault(document_id, set()).add(queue)
        logger.info(f"Comment feed subscriber added for document {document_id}")
        return queue

    def unsubscribe(self, document_id: str, queue: asyncio.Queue) -> None:
        """Отписка от ленты"""
        subscribers = self._subscribers.get(document_id)
        if not subscribers:
            return
        subscribers.discard(queue)
        if not subscribers:
            del self._subscribers[document_id]

    def publish(self, document_id: str, comments: List[Comment]) -> int:
        """Рассылка текущего списка комментариев, возвращает число подписчиков"""
        subscribers = self._subscribers.get(document_id, set())
        for queue in subscribers:
            queue.put_nowait(list(comments))
        return len(subscribers)

    def subscriber_count(self, document_id: str) -> int:
        return len(self._subscribers.get(document_id, ()))

    @staticmethod
    def latest(queue: asyncio.Queue, comments: List[Comment]) -> List[Comment]:
        """Пропуск промежуточных снимков: важен только последний"""
        while not queue.empty():
            comments = queue.get_nowait()
        return comments


comment_feed = CommentFeed()
