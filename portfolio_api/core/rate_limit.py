"""Fixed-window chat rate limiting.

Two limiters share the same window arithmetic:

* :class:`ServerRateLimiter` is authoritative. It keeps one window per
  identity in process memory and exposes an atomic ``check_and_increment``
  for request handlers.
* :class:`ClientRateLimiter` is advisory. It persists a single window as
  ``{"count": int, "resetAt": epoch_ms}`` in a key-value storage (the
  Python stand-in for browser ``localStorage``) so a chat client can refuse
  to send before touching the network.

Windows never slide: once ``now >= reset_at`` the old window is dropped and
a fresh one starts at ``now``.
"""

from __future__ import annotations

import json
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from .logging import get_logger

logger = get_logger(__name__)

Clock = Callable[[], float]

DEFAULT_MAX_REQUESTS = 10
DEFAULT_WINDOW_SECONDS = 24 * 60 * 60
CLIENT_STORAGE_KEY = "publicChatRateLimit"


@dataclass
class RateLimitWindow:
    count: int
    reset_at: float

    def expired(self, now: float) -> bool:
        return now >= self.reset_at

    def to_json(self) -> str:
        return json.dumps({"count": self.count, "resetAt": int(self.reset_at * 1000)})

    @classmethod
    def from_json(cls, payload: str) -> "RateLimitWindow":
        data = json.loads(payload)
        count = data["count"]
        reset_at_ms = data["resetAt"]
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise ValueError(f"invalid count: {count!r}")
        if isinstance(reset_at_ms, bool) or not isinstance(reset_at_ms, (int, float)):
            raise ValueError(f"invalid resetAt: {reset_at_ms!r}")
        reset_at = reset_at_ms / 1000.0
        # json.loads accepts NaN and Infinity; a stored window must end.
        if not math.isfinite(reset_at):
            raise ValueError(f"invalid resetAt: {reset_at_ms!r}")
        return cls(count=count, reset_at=reset_at)


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    remaining: int
    reset_at: float

    @property
    def reset_at_ms(self) -> int:
        return int(self.reset_at * 1000)


class _FixedWindowPolicy:
    def __init__(self, max_requests: int, window_seconds: float, clock: Optional[Clock]) -> None:
        if max_requests < 1:
            raise ValueError("max_requests must be at least 1")
        if window_seconds <= 0:
            raise ValueError("window_seconds must be positive")
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock or time.time

    def _now(self) -> float:
        return self._clock()

    def _fresh(self, now: float, count: int = 0) -> RateLimitWindow:
        return RateLimitWindow(count=count, reset_at=now + self.window_seconds)

    def _decide(self, window: RateLimitWindow) -> RateLimitDecision:
        return RateLimitDecision(
            allowed=window.count < self.max_requests,
            remaining=max(0, self.max_requests - window.count),
            reset_at=window.reset_at,
        )


class ServerRateLimiter(_FixedWindowPolicy):
    """In-memory, per-process, per-identity fixed window limiter.

    One lock guards the whole window map, so ``check_and_increment`` is
    linearizable under threaded servers as well as on the event loop.
    State is lost on restart.
    """

    def __init__(
        self,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(max_requests, window_seconds, clock)
        self._windows: Dict[str, RateLimitWindow] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def _current(self, identity: str, now: float) -> RateLimitWindow:
        window = self._windows.get(identity)
        if window is None or window.expired(now):
            window = self._fresh(now)
            self._windows[identity] = window
        return window

    def check(self, identity: str) -> RateLimitDecision:
        with self._lock:
            return self._decide(self._current(identity, self._now()))

    def increment(self, identity: str) -> None:
        with self._lock:
            self._current(identity, self._now()).count += 1

    def check_and_increment(self, identity: str) -> RateLimitDecision:
        with self._lock:
            window = self._current(identity, self._now())
            if window.count >= self.max_requests:
                return RateLimitDecision(allowed=False, remaining=0, reset_at=window.reset_at)
            window.count += 1
            return RateLimitDecision(
                allowed=True,
                remaining=max(0, self.max_requests - window.count),
                reset_at=window.reset_at,
            )

    def cleanup_expired(self) -> int:
        """Drop windows whose reset time has passed; returns how many went."""

        with self._lock:
            now = self._now()
            stale = [key for key, window in self._windows.items() if window.expired(now)]
            for key in stale:
                del self._windows[key]
            return len(stale)


class ClientRateLimiter(_FixedWindowPolicy):
    """Advisory limiter persisted in a caller-owned key-value storage.

    The storage scope is the identity: one storage (a browser profile, a
    state file) holds one window under ``storage_key``. ``check`` and
    ``increment`` are separate on purpose; clients increment only after the
    server accepted a message, so concurrent clients sharing one storage can
    briefly exceed ``max_requests`` until the server-side limiter blocks them.
    """

    def __init__(
        self,
        storage,
        max_requests: int = DEFAULT_MAX_REQUESTS,
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
        storage_key: str = CLIENT_STORAGE_KEY,
        clock: Optional[Clock] = None,
    ) -> None:
        super().__init__(max_requests, window_seconds, clock)
        self.storage = storage
        self.storage_key = storage_key

    def _load(self) -> Optional[RateLimitWindow]:
        try:
            payload = self.storage.get_item(self.storage_key)
        except OSError as exc:
            logger.warning("rate_limit_storage_unreadable", key=self.storage_key, error=str(exc))
            return None
        if payload is None:
            return None
        try:
            return RateLimitWindow.from_json(payload)
        except (ValueError, TypeError, KeyError, OverflowError) as exc:
            # Corrupt state fails open to a fresh window.
            logger.warning("rate_limit_state_corrupt", key=self.storage_key, error=str(exc))
            return None

    def _store(self, window: RateLimitWindow) -> None:
        try:
            self.storage.set_item(self.storage_key, window.to_json())
        except OSError as exc:
            logger.warning("rate_limit_storage_unwritable", key=self.storage_key, error=str(exc))

    def check(self) -> RateLimitDecision:
        now = self._now()
        window = self._load()
        if window is None or window.expired(now):
            window = self._fresh(now)
            self._store(window)
        return self._decide(window)

    def increment(self) -> None:
        now = self._now()
        window = self._load()
        if window is None or window.expired(now):
            window = self._fresh(now, count=1)
        else:
            window.count += 1
        self._store(window)

    def remaining(self) -> RateLimitDecision:
        return self.check()
