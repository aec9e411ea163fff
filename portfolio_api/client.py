"""Visitor chat client with a local, advisory rate limit.

The client refuses to send once its local counter is exhausted, so a
visitor over the limit never reaches the network. The server-side limiter
stays authoritative: a 429 from the server is reported the same way.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx

from .core.logging import get_logger
from .core.rate_limit import ClientRateLimiter
from .prompts.chat import rate_limit_message

logger = get_logger(__name__)


@dataclass
class ChatOutcome:
    reply: Optional[str] = None
    blocked: bool = False
    message: Optional[str] = None
    remaining: Optional[int] = None
    reset_at_ms: Optional[int] = None


class PublicChatClient:
    def __init__(
        self,
        base_url: str,
        limiter: ClientRateLimiter,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.limiter = limiter
        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(base_url=self.base_url, timeout=60.0)

    def close(self) -> None:
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "PublicChatClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def send(self, prompt: str, history: Sequence[Dict[str, Any]] = ()) -> ChatOutcome:
        """Send one message; raises ``httpx.HTTPError`` on transport errors and non-429 failures."""

        local = self.limiter.check()
        if not local.allowed:
            logger.info("chat_blocked_locally", reset_at=local.reset_at_ms)
            return ChatOutcome(
                blocked=True,
                message=rate_limit_message(local.reset_at, self.limiter.max_requests),
                remaining=0,
                reset_at_ms=local.reset_at_ms,
            )

        body: Dict[str, Any] = {"prompt": prompt, "chatHistory": list(history)}
        response = self.client.post("/v1/public/chat", json=body)

        if response.status_code == 429:
            data = response.json()
            return ChatOutcome(
                blocked=True,
                message=data.get("message"),
                remaining=0,
                reset_at_ms=data.get("resetAt"),
            )

        response.raise_for_status()
        data = response.json()
        self.limiter.increment()
        return ChatOutcome(
            reply=data.get("reply", ""),
            remaining=data.get("remaining"),
            reset_at_ms=data.get("resetAt"),
        )


def history_entry(role: str, text: str) -> Dict[str, str]:
    return {"role": role, "text": text}


def trim_history(history: List[Dict[str, str]], limit: int = 10) -> List[Dict[str, str]]:
    return history[-limit:] if limit > 0 else []
