import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional


class BlockType(str, Enum):
    """Тип блока эссе, к которому привязан комментарий"""
    CLAIM = "claim"
    BODY_PARAGRAPH = "bodyParagraph"
    PROOF_BLOCK = "proofBlock"
    INTRO = "intro"
    CONCLUSION = "conclusion"


def generate_comment_id() -> str:
    return uuid.uuid4().hex[:12]


@dataclass
class Comment:
    """Комментарий к блоку документа.

    parent_comment_id is None означает корневой комментарий; флаг resolved
    имеет смысл только у корня.
    """
    id: str
    block_id: str
    block_type: BlockType
    author_id: str
    author_email: str
    author_display_name: str
    text: str
    created_at: datetime
    updated_at: datetime
    parent_comment_id: Optional[str] = None
    resolved: bool = False

    @property
    def is_root(self) -> bool:
        return self.parent_comment_id is None

    def is_author(self, user_id: Optional[str]) -> bool:
        return user_id is not None and user_id == self.author_id

    @classmethod
    def create(
        cls,
        block_id: str,
        block_type: BlockType,
        author_id: str,
        author_email: str,
        author_display_name: str,
        text: str,
        parent_comment_id: Optional[str] = None
    ) -> "Comment":
        """Создание нового комментария"""
        now = datetime.utcnow()
        return cls(
            id=generate_comment_id(),
            block_id=block_id,
            block_type=BlockType(block_type),
            author_id=author_id,
            author_email=author_email,
            author_display_name=author_display_name,
            text=text,
            created_at=now,
            updated_at=now,
            parent_comment_id=parent_comment_id,
            resolved=False,
        )


@dataclass
class CommentThread:
    """Корневой комментарий и ответы на него по возрастанию времени создания"""
    root_comment: Comment
    replies: List[Comment] = field(default_factory=list)

    @property
    def comment_count(self) -> int:
        return 1 + len(self.replies)
