from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from docshare.api.http import (
    health_router, auth_router, documents_router, sharing_router, comments_router
)
from docshare.api.ws.comments import router as comments_ws_router
from docshare.core.config import settings
from docshare.core.db import init_models

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_models()
    logger.info("Database models initialized")
    yield


app = FastAPI(
    title="DocShare",
    description="Хранение эссе, совместный доступ и комментарии к блокам документа",
    version="1.0.0",
    lifespan=lifespan
)

# Настройка CORS для работы с frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Подключаем роутеры
app.include_router(health_router)
app.include_router(auth_router)
app.include_router(documents_router)
app.include_router(sharing_router)
app.include_router(comments_router)
app.include_router(comments_ws_router)


@app.get("/")
async def root():
    """Корневой эндпоинт"""
    return {
        "message": "DocShare API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


def run():
    import uvicorn
    uvicorn.run("docshare.main:app", host="0.0.0.0", port=8000)
