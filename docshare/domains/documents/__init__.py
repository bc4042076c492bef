from docshare.domains.documents.entities import Document, DEFAULT_TITLE
from docshare.domains.documents.schemas import (
    DocumentSave, DocumentContentUpdate, DocumentTitleUpdate,
    DocumentSummary, DocumentResponse, DocumentListResponse
)

__all__ = [
    "Document", "DEFAULT_TITLE",
    "DocumentSave", "DocumentContentUpdate", "DocumentTitleUpdate",
    "DocumentSummary", "DocumentResponse", "DocumentListResponse"
]
