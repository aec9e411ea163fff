"""Portfolio content reads and writes, with cached singleton documents."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..core.cache import TTLCache
from ..core.logging import get_logger
from ..storage.documents import Document, DocumentStore

logger = get_logger(__name__)

PROFILE_COLLECTION = "personalInfo"
SITE_SETTINGS_COLLECTION = "siteSettings"
SINGLETON_ID = "main"

PROFILE_CACHE_KEY = "profile:main"
SITE_SETTINGS_CACHE_KEY = "settings:site"


def _now_iso() -> str:
    return datetime.now(tz=timezone.utc).isoformat()


class ContentService:
    def __init__(
        self,
        store: DocumentStore,
        cache: TTLCache,
        profile_ttl: float = 10.0,
        site_settings_ttl: float = 30.0,
    ) -> None:
        self.store = store
        self.cache = cache
        self.profile_ttl = profile_ttl
        self.site_settings_ttl = site_settings_ttl

    async def _cached_read(self, key: str, collection: str, ttl: float) -> Optional[Document]:
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug("content_cache_hit", key=key)
            return cached

        doc = await self.store.get(collection, SINGLETON_ID)
        if doc is not None:
            self.cache.set(key, doc, ttl)
        logger.debug("content_cache_miss", key=key, found=doc is not None)
        return doc

    async def _write_through(self, key: str, collection: str, ttl: float, data: Dict[str, Any]) -> Document:
        stored = await self.store.set(collection, SINGLETON_ID, {**data, "updatedAt": _now_iso()}, merge=True)
        # The writer refreshes its own read path instead of waiting out the TTL.
        self.cache.set(key, stored, ttl)
        logger.info("content_updated", collection=collection)
        return stored

    async def get_profile(self) -> Optional[Document]:
        return await self._cached_read(PROFILE_CACHE_KEY, PROFILE_COLLECTION, self.profile_ttl)

    async def update_profile(self, data: Dict[str, Any]) -> Document:
        return await self._write_through(PROFILE_CACHE_KEY, PROFILE_COLLECTION, self.profile_ttl, data)

    async def get_site_settings(self) -> Optional[Document]:
        return await self._cached_read(SITE_SETTINGS_CACHE_KEY, SITE_SETTINGS_COLLECTION, self.site_settings_ttl)

    async def update_site_settings(self, data: Dict[str, Any]) -> Document:
        return await self._write_through(
            SITE_SETTINGS_CACHE_KEY, SITE_SETTINGS_COLLECTION, self.site_settings_ttl, data
        )

    async def list_skills(self) -> List[Document]:
        return await self.store.query("skills", order_by="order")

    async def add_skill(self, data: Dict[str, Any]) -> str:
        stamp = _now_iso()
        skill_id = await self.store.add("skills", {**data, "createdAt": stamp, "updatedAt": stamp})
        logger.info("skill_created", skill_id=skill_id)
        return skill_id
