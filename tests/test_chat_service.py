import asyncio

import pytest

from portfolio_api.api.errors import APIError
from portfolio_api.core.cache import TTLCache
from portfolio_api.core.config import Settings
from portfolio_api.models.chat import ChatHistoryItem
from portfolio_api.prompts.chat import CONTEXT_UNAVAILABLE, NO_CONTEXT, PUBLIC_GREETING
from portfolio_api.services.chat_service import ChatService
from portfolio_api.services.content_service import ContentService
from portfolio_api.services.provider_service import ProviderService
from portfolio_api.storage.documents import InMemoryDocumentStore


class FlakyStore(InMemoryDocumentStore):
    def __init__(self, seed=None, failing=()):
        super().__init__(seed=seed)
        self.failing = set(failing)

    async def query(self, collection, **kwargs):
        if collection in self.failing:
            raise RuntimeError(f"{collection} index missing")
        return await super().query(collection, **kwargs)


def make_service(store, history_limit=10):
    providers = ProviderService(Settings(), http_client=None)
    content = ContentService(store, TTLCache())
    return ChatService(providers, content, store, history_limit=history_limit)


def test_portfolio_context_renders_every_section(store):
    context = asyncio.run(make_service(store).build_portfolio_context())

    assert context.splitlines() == [
        "Name: Ada Lovelace",
        "Title: Software Engineer",
        "Bio: I build analytical engines.",
        "Location: London",
        "Skills: Python (Expert), SQL",
        'Projects: "Notes": First algorithm',
        "Experience: Lead Programmer at Engine Co (1842-1843)",
        "Recent blog posts: New post, Old post",
    ]


def test_empty_store_has_placeholder_context():
    context = asyncio.run(make_service(InMemoryDocumentStore()).build_portfolio_context())
    assert context == NO_CONTEXT


def test_failing_section_is_skipped():
    store = FlakyStore(seed={"skills": {"a": {"name": "Go"}}, "projects": {}}, failing={"skills"})
    context = asyncio.run(make_service(store).build_portfolio_context())
    assert context == NO_CONTEXT


def test_failing_section_keeps_the_others():
    flaky = FlakyStore(seed={"personalInfo": {"main": {"name": "Ada"}}}, failing={"experience"})
    context = asyncio.run(make_service(flaky).build_portfolio_context())
    assert context == "Name: Ada"


def test_rendering_failure_degrades_to_unavailable(store, monkeypatch):
    def explode(_profile):
        raise RuntimeError("bad profile shape")

    monkeypatch.setattr("portfolio_api.services.chat_service._profile_lines", explode)
    assert asyncio.run(make_service(store).build_portfolio_context()) == CONTEXT_UNAVAILABLE


def test_conversation_filters_history():
    service = make_service(InMemoryDocumentStore(), history_limit=4)
    history = [
        ChatHistoryItem(role="user", text="one"),
        ChatHistoryItem(role="assistant", text="two"),
        ChatHistoryItem(role="user", text=None),
        ChatHistoryItem(role="model", text="thinking", loading=True),
        ChatHistoryItem(role="user", text="three"),
    ]
    turns = service.build_public_conversation("four?", "ctx", history)

    assert turns[0].text.endswith("**Portfolio Context:**\nctx")
    assert turns[1].text == PUBLIC_GREETING
    assert [(t.role, t.text) for t in turns[2:]] == [
        ("model", "two"),
        ("user", "three"),
        ("user", "four?"),
    ]


def test_require_provider_raises_when_unconfigured():
    with pytest.raises(APIError) as excinfo:
        make_service(InMemoryDocumentStore()).require_provider("public")
    assert excinfo.value.status_code == 503
