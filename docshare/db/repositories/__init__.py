from docshare.db.repositories.user_repository import UserRepository, EmailVerificationRepository
from docshare.db.repositories.document_repository import DocumentRepository, DocumentIndexRepository
from docshare.db.repositories.sharing_repository import SharedReferenceRepository, PublicLookupRepository
from docshare.db.repositories.comment_repository import CommentRepository

__all__ = [
    "UserRepository",
    "EmailVerificationRepository",
    "DocumentRepository",
    "DocumentIndexRepository",
    "SharedReferenceRepository",
    "PublicLookupRepository",
    "CommentRepository"
]
