"""Terminal chat with the portfolio assistant, honoring the local daily limit."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List

import httpx

from portfolio_api.client import PublicChatClient, history_entry, trim_history
from portfolio_api.core.rate_limit import ClientRateLimiter
from portfolio_api.utils.local_storage import JsonFileStorage

DEFAULT_STATE = Path.home() / ".portfolio-chat" / "storage.json"


class TerminalChat:
    """Blocking read-eval loop over ``PublicChatClient``."""

    def __init__(self, base_url: str, state_path: Path = DEFAULT_STATE) -> None:
        self.limiter = ClientRateLimiter(JsonFileStorage(state_path))
        self.chat = PublicChatClient(base_url, self.limiter)
        self.history: List[Dict[str, str]] = []

    def run(self) -> None:
        decision = self.limiter.remaining()
        print(f"Connected to {self.chat.base_url}. {decision.remaining} messages remaining today.")
        print("Type 'quit' to exit.\n")
        try:
            while True:
                try:
                    prompt = input("you> ").strip()
                except EOFError:
                    print()
                    return
                if prompt.lower() in {"q", "quit", "exit"}:
                    return
                if not prompt:
                    continue
                self._send(prompt)
        finally:
            self.chat.close()

    def _send(self, prompt: str) -> None:
        try:
            outcome = self.chat.send(prompt, trim_history(self.history))
        except httpx.HTTPError as exc:
            print(f"HTTP error: {exc}\n")
            return

        if outcome.blocked:
            print(f"[limit] {outcome.message}\n")
            return

        self.history.append(history_entry("user", prompt))
        self.history.append(history_entry("model", outcome.reply or ""))
        print(f"bot> {outcome.reply}")
        print(f"     ({outcome.remaining} messages remaining today)\n")


def main() -> None:
    base_url = sys.argv[1] if len(sys.argv) > 1 else "http://localhost:8000"
    TerminalChat(base_url).run()


if __name__ == "__main__":
    main()
