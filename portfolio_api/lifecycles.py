"""Startup/shutdown lifecycle hooks"""
import asyncio
import contextlib
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI

from .core.cache import TTLCache
from .core.config import Settings, get_settings
from .core.logging import get_logger
from .core.rate_limit import ServerRateLimiter
from .services.chat_service import ChatService
from .services.content_service import ContentService
from .services.provider_service import ProviderService
from .storage.documents import DocumentStore, InMemoryDocumentStore


logger = get_logger(__name__)


def build_document_store(settings: Settings) -> DocumentStore:
    if settings.content_seed_path:
        store = InMemoryDocumentStore.from_file(settings.content_seed_path)
        logger.info("document_store_seeded", path=settings.content_seed_path)
        return store
    return InMemoryDocumentStore()


async def sweep_rate_limits(limiter: ServerRateLimiter, interval_seconds: float) -> None:
    """Drop expired rate-limit windows forever, once per interval"""
    while True:
        await asyncio.sleep(interval_seconds)
        removed = limiter.cleanup_expired()
        logger.debug("rate_limit_sweep", removed=removed, tracked=len(limiter))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown"""

    logger.info("application_starting")

    settings = get_settings()

    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(60.0),
        limits=httpx.Limits(max_keepalive_connections=20, max_connections=100)
    )
    app.state.http_client = http_client

    store = getattr(app.state, "document_store", None) or build_document_store(settings)
    cache = TTLCache(max_items=settings.cache_max_items)
    rate_limiter = ServerRateLimiter(
        max_requests=settings.chat_rate_limit_max_requests,
        window_seconds=settings.chat_rate_limit_window_seconds,
    )
    provider_service = ProviderService(settings, http_client)
    content_service = ContentService(
        store,
        cache,
        profile_ttl=settings.profile_cache_ttl_seconds,
        site_settings_ttl=settings.site_settings_cache_ttl_seconds,
    )
    chat_service = ChatService(
        provider_service,
        content_service,
        store,
        history_limit=settings.chat_history_limit,
    )

    app.state.document_store = store
    app.state.cache = cache
    app.state.rate_limiter = rate_limiter
    app.state.provider_service = provider_service
    app.state.content_service = content_service
    app.state.chat_service = chat_service

    sweeper = asyncio.create_task(
        sweep_rate_limits(rate_limiter, settings.rate_limit_cleanup_interval_seconds)
    )

    logger.info("application_started", assistants=provider_service.describe_providers())

    try:
        yield
    finally:
        logger.info("application_shutting_down")

        sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await sweeper
        await http_client.aclose()

        logger.info("application_shutdown_complete")
