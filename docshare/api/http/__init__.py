from docshare.api.http.health import router as health_router
from docshare.api.http.auth import router as auth_router
from docshare.api.http.documents import router as documents_router
from docshare.api.http.sharing import router as sharing_router
from docshare.api.http.comments import router as comments_router

__all__ = [
    "health_router",
    "auth_router",
    "documents_router",
    "sharing_router",
    "comments_router"
]
