import copy
from typing import List

import httpx
import pytest
from fastapi.testclient import TestClient

from portfolio_api.core.config import get_settings
from portfolio_api.main import create_app
from portfolio_api.providers.base import (
    LLMProvider,
    LLMRawResponse,
    ModelDescriptor,
    PromptPacket,
    ProviderCapabilities,
)
from portfolio_api.storage.documents import InMemoryDocumentStore


SEED = {
    "personalInfo": {
        "main": {
            "fullName": "Ada Lovelace",
            "title": "Software Engineer",
            "bio": "I build analytical engines.",
            "location": "London",
        }
    },
    "skills": {
        "py": {"name": "Python", "level": "Expert", "order": 1},
        "sql": {"name": "SQL", "order": 2},
    },
    "experience": {
        "eng": {"title": "Lead Programmer", "company": "Engine Co", "period": "1842-1843", "order": 1},
    },
    "projects": {
        "notes": {"title": "Notes", "description": "First algorithm", "status": "published", "order": 1},
        "secret": {"title": "Secret", "status": "draft", "order": 2},
    },
    "blogPosts": {
        "old": {"title": "Old post", "status": "published", "publishedAt": "2023-01-01"},
        "new": {"title": "New post", "status": "published", "publishedAt": "2024-01-01"},
    },
}


class FakeClock:
    def __init__(self, start: float = 0.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubProvider(LLMProvider):
    name = "stub"

    def __init__(self, reply: str = "Hi there!", fail: bool = False) -> None:
        super().__init__(api_key="stub")
        self.reply = reply
        self.fail = fail
        self.prompts: List[PromptPacket] = []

    async def generate(self, prompt: PromptPacket) -> LLMRawResponse:  # type: ignore[override]
        self.prompts.append(prompt)
        if self.fail:
            raise httpx.ConnectError("upstream unreachable")
        return LLMRawResponse(content=self.reply, model=prompt.model, provider="stub")

    def capabilities(self) -> ProviderCapabilities:  # type: ignore[override]
        return ProviderCapabilities()

    async def list_models(self):  # type: ignore[override]
        return [ModelDescriptor(id="models/stub-flash", family="Stub Flash")]


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    for var in ("GEMINI_API_KEY", "GEMINI_PUBLIC_API_KEY", "API_KEY", "CONTENT_SEED_PATH"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def store():
    return InMemoryDocumentStore(seed=copy.deepcopy(SEED))


@pytest.fixture()
def public_provider():
    return StubProvider(reply="I mostly work with Python.")


@pytest.fixture()
def admin_provider():
    return StubProvider(reply="Draft ready.")


@pytest.fixture()
def client(store, public_provider, admin_provider):
    app = create_app(document_store=store)
    with TestClient(app) as client:
        client.app.state.provider_service._providers["public"] = public_provider
        client.app.state.provider_service._providers["admin"] = admin_provider
        yield client
