"""Chat orchestration: portfolio context, conversation assembly, provider calls."""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Dict, List, Optional, Sequence

import httpx

from ..api.errors import APIError
from ..core.logging import get_logger
from ..models.chat import ChatHistoryItem
from ..prompts.chat import CONTEXT_UNAVAILABLE, NO_CONTEXT, PUBLIC_GREETING, build_system_message
from ..providers.base import ChatTurn, LLMProvider, PromptPacket
from ..providers.gemini import EmptyCompletionError
from ..storage.documents import Document, DocumentStore
from .content_service import ContentService
from .provider_service import ADMIN, PUBLIC, ProviderService

logger = get_logger(__name__)


async def _safe(label: str, pending: Awaitable[Any]) -> Any:
    """Await a context query; a failing section is left out, not fatal."""

    try:
        return await pending
    except Exception as exc:  # noqa: BLE001 - any store failure just drops the section
        logger.warning("portfolio_context_section_failed", section=label, error=str(exc))
        return None


def _profile_lines(profile: Optional[Document]) -> List[str]:
    if not profile:
        return []
    lines = []
    name = profile.get("fullName") or profile.get("name")
    if name:
        lines.append(f"Name: {name}")
    if profile.get("title"):
        lines.append(f"Title: {profile['title']}")
    bio = profile.get("bio") or profile.get("description")
    if bio:
        lines.append(f"Bio: {bio}")
    if profile.get("email"):
        lines.append(f"Email: {profile['email']}")
    if profile.get("location"):
        lines.append(f"Location: {profile['location']}")
    return lines


def _skill_label(doc: Document) -> str:
    name = doc.get("name") or ""
    if name and doc.get("level"):
        return f"{name} ({doc['level']})"
    return name


def _project_label(doc: Document) -> str:
    title = doc.get("title")
    if not title:
        return ""
    if doc.get("description"):
        return f'"{title}": {doc["description"]}'
    return f'"{title}"'


def _experience_label(doc: Document) -> str:
    if not doc.get("title"):
        return ""
    label = f"{doc['title']} at {doc.get('company') or 'unknown company'}"
    if doc.get("period"):
        label += f" ({doc['period']})"
    return label


class ChatService:
    def __init__(
        self,
        provider_service: ProviderService,
        content_service: ContentService,
        store: DocumentStore,
        history_limit: int = 10,
    ) -> None:
        self.provider_service = provider_service
        self.content_service = content_service
        self.store = store
        self.history_limit = history_limit

    def require_provider(self, name: str) -> LLMProvider:
        provider = self.provider_service.get_provider(name)
        if provider is None:
            raise APIError(
                code="PROVIDER_UNAVAILABLE",
                message=f"The {name} assistant is not configured",
                status_code=503,
            )
        return provider

    async def build_portfolio_context(self) -> str:
        try:
            profile, skills, experience, projects, posts = await asyncio.gather(
                _safe("profile", self.content_service.get_profile()),
                _safe("skills", self.store.query("skills", order_by="order", limit=15)),
                _safe("experience", self.store.query("experience", order_by="order", limit=10)),
                _safe(
                    "projects",
                    self.store.query("projects", where=[("status", "published")], order_by="order", limit=10),
                ),
                _safe(
                    "blog",
                    self.store.query(
                        "blogPosts",
                        where=[("status", "published")],
                        order_by="publishedAt",
                        descending=True,
                        limit=5,
                    ),
                ),
            )

            parts = _profile_lines(profile)
            sections = (
                ("Skills", skills, _skill_label, ", "),
                ("Projects", projects, _project_label, " | "),
                ("Experience", experience, _experience_label, " | "),
                ("Recent blog posts", posts, lambda doc: doc.get("title") or "", ", "),
            )
            for label, docs, render, separator in sections:
                rendered = [text for text in (render(doc) for doc in docs or []) if text]
                if rendered:
                    parts.append(f"{label}: {separator.join(rendered)}")
        except Exception as exc:  # noqa: BLE001 - the assistant still answers without context
            logger.error("portfolio_context_failed", exc_info=exc)
            return CONTEXT_UNAVAILABLE

        return "\n".join(parts) or NO_CONTEXT

    def build_public_conversation(
        self, prompt: str, portfolio_context: str, history: Sequence[ChatHistoryItem] = ()
    ) -> List[ChatTurn]:
        turns = [
            ChatTurn(role="user", text=build_system_message(portfolio_context)),
            ChatTurn(role="model", text=PUBLIC_GREETING),
        ]
        recent = list(history)[-self.history_limit:] if self.history_limit > 0 else []
        for item in recent:
            if item.loading or not item.role or not item.text:
                continue
            turns.append(ChatTurn(role="user" if item.role == "user" else "model", text=item.text))
        turns.append(ChatTurn(role="user", text=prompt))
        return turns

    async def _generate(self, name: str, provider: LLMProvider, contents: List[ChatTurn]) -> str:
        packet = PromptPacket(model=self.provider_service.model_for(name), contents=contents)
        try:
            response = await provider.generate(packet)
        except (httpx.HTTPError, EmptyCompletionError) as exc:
            logger.warning("chat_upstream_failed", assistant=name, error=str(exc))
            raise APIError(
                code="UPSTREAM_ERROR",
                message="Failed to generate response",
                status_code=502,
                details={"reason": str(exc)},
            ) from exc

        logger.info("chat_reply_generated", assistant=name, model=response.model, chars=len(response.content))
        return response.content

    async def public_reply(
        self, provider: LLMProvider, prompt: str, history: Sequence[ChatHistoryItem] = ()
    ) -> str:
        context = await self.build_portfolio_context()
        contents = self.build_public_conversation(prompt, context, history)
        return await self._generate(PUBLIC, provider, contents)

    async def admin_reply(self, provider: LLMProvider, prompt: str) -> str:
        return await self._generate(ADMIN, provider, [ChatTurn(role="user", text=prompt)])

    def status(self) -> Dict[str, bool]:
        return {
            "gemini": self.provider_service.is_provider_enabled(ADMIN),
            "public": self.provider_service.is_provider_enabled(PUBLIC),
        }
