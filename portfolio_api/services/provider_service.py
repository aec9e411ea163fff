"""Provider registry for the two chat assistants."""

from __future__ import annotations

from typing import Dict, List, Optional

import httpx

from ..core.config import Settings
from ..providers.base import LLMProvider, ModelDescriptor
from ..providers.gemini import GeminiProvider

ADMIN = "admin"
PUBLIC = "public"


class ProviderService:
    """Holds one provider per assistant.

    The admin assistant and the visitor-facing assistant use separate API
    keys and models so a public quota problem never blocks the admin panel.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self.settings = settings
        self.http_client = http_client
        self._providers: Dict[str, LLMProvider] = {}
        self._models: Dict[str, str] = {
            ADMIN: settings.admin_chat_model,
            PUBLIC: settings.public_chat_model,
        }

        if settings.gemini_api_key:
            self._providers[ADMIN] = GeminiProvider(settings.gemini_api_key, http_client)
        public_key = settings.public_gemini_key
        if public_key:
            self._providers[PUBLIC] = GeminiProvider(public_key, http_client)

    def get_provider(self, name: str) -> Optional[LLMProvider]:
        return self._providers.get(name)

    def is_provider_enabled(self, name: str) -> bool:
        return name in self._providers

    def model_for(self, name: str) -> str:
        return self._models[name]

    async def list_models(self, name: str) -> List[ModelDescriptor]:
        provider = self._providers.get(name)
        if provider is None:
            return []
        return await provider.list_models()

    def describe_providers(self) -> List[Dict[str, object]]:
        described: List[Dict[str, object]] = []
        for name in (ADMIN, PUBLIC):
            provider = self._providers.get(name)
            described.append(
                {
                    "name": name,
                    "enabled": provider is not None,
                    "model": self._models[name],
                    "capabilities": provider.capabilities().model_dump() if provider else None,
                }
            )
        return described
