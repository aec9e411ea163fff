"""Versioned API router registration."""

from fastapi import APIRouter

from .health import router as health_router
from .chat import router as chat_router
from .content import router as content_router


def create_v1_router() -> APIRouter:
    """Create and configure v1 API router"""
    router = APIRouter(prefix="/v1")

    router.include_router(health_router, tags=["health"])
    router.include_router(chat_router, tags=["chat"])
    router.include_router(content_router, tags=["content"])

    return router
