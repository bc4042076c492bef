from docshare.db.models.user import User, EmailVerification
from docshare.db.models.document import Document, DocumentIndex
from docshare.db.models.sharing import SharedReference, PublicLookup
from docshare.db.models.comment import Comment

__all__ = [
    "User",
    "EmailVerification",
    "Document",
    "DocumentIndex",
    "SharedReference",
    "PublicLookup",
    "Comment"
]
