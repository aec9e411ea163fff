"""Google Gemini provider integration."""

from __future__ import annotations

from typing import Any, Dict, List

import httpx

from .base import LLMProvider, LLMRawResponse, ModelDescriptor, PromptPacket, ProviderCapabilities


class EmptyCompletionError(RuntimeError):
    """Raised when Gemini answers without any candidate text."""


class GeminiProvider(LLMProvider):
    name = "gemini"

    BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
    MODELS_URL = f"{BASE_URL}/models"

    def __init__(self, api_key: str, http_client: httpx.AsyncClient) -> None:
        super().__init__(api_key)
        self.http_client = http_client

    async def generate(self, prompt: PromptPacket) -> LLMRawResponse:
        model = prompt.model.removeprefix("models/")
        body: Dict[str, Any] = {
            "contents": [
                {"role": turn.role, "parts": [{"text": turn.text}]}
                for turn in prompt.contents
            ]
        }
        if prompt.temperature is not None:
            body["generationConfig"] = {"temperature": prompt.temperature}

        response = await self.http_client.post(
            f"{self.MODELS_URL}/{model}:generateContent",
            params={"key": self.api_key},
            json=body,
            timeout=60.0,
        )
        response.raise_for_status()

        data = response.json()
        candidates = data.get("candidates") or []
        if not candidates:
            raise EmptyCompletionError("Gemini returned no candidates")
        candidate = candidates[0]
        text = self._candidate_text(candidate)
        if not text:
            raise EmptyCompletionError("Gemini returned an empty candidate")

        return LLMRawResponse(
            content=text,
            model=data.get("modelVersion", model),
            provider=self.name,
            finish_reason=candidate.get("finishReason"),
            usage=data.get("usageMetadata"),
        )

    @staticmethod
    def _candidate_text(candidate: Dict[str, Any]) -> str:
        content = candidate.get("content") or {}
        parts = content.get("parts") or []
        fragments = [part.get("text", "") for part in parts if isinstance(part, dict)]
        return "".join(fragments).strip()

    def capabilities(self) -> ProviderCapabilities:
        return ProviderCapabilities(supports_multi_turn=True, supports_model_listing=True)

    async def list_models(self) -> List[ModelDescriptor]:
        params = {"key": self.api_key}
        try:
            response = await self.http_client.get(self.MODELS_URL, params=params, timeout=10.0)
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError):
            return []

        models: List[ModelDescriptor] = []
        for item in data.get("models", []):
            if "generateContent" not in item.get("supportedGenerationMethods", []):
                continue
            models.append(
                ModelDescriptor(
                    id=item.get("name", ""),
                    family=item.get("displayName", "gemini"),
                    context_window=item.get("inputTokenLimit"),
                    notes=item.get("description"),
                )
            )
        return models
