import asyncio
import json

import httpx
import pytest

from portfolio_api.providers.base import ChatTurn, PromptPacket
from portfolio_api.providers.gemini import EmptyCompletionError, GeminiProvider


def run_with(handler, coro_factory):
    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
            return await coro_factory(GeminiProvider("test-key", http_client))

    return asyncio.run(run())


def test_generate_posts_contents_and_joins_parts():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["key"] = request.url.params["key"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "candidates": [
                    {"content": {"parts": [{"text": "Hello "}, {"text": "visitor"}]}, "finishReason": "STOP"}
                ],
                "modelVersion": "gemini-2.0-flash-exp",
            },
        )

    packet = PromptPacket(
        model="models/gemini-2.0-flash-exp",
        contents=[ChatTurn(role="user", text="hi"), ChatTurn(role="model", text="hello")],
        temperature=0.4,
    )
    response = run_with(handler, lambda provider: provider.generate(packet))

    assert seen["path"] == "/v1beta/models/gemini-2.0-flash-exp:generateContent"
    assert seen["key"] == "test-key"
    assert seen["body"]["contents"][1] == {"role": "model", "parts": [{"text": "hello"}]}
    assert seen["body"]["generationConfig"] == {"temperature": 0.4}
    assert response.content == "Hello visitor"
    assert response.finish_reason == "STOP"
    assert response.provider == "gemini"


def test_generate_without_candidates_raises():
    packet = PromptPacket(model="gemini-2.5-flash", contents=[ChatTurn(role="user", text="hi")])
    with pytest.raises(EmptyCompletionError):
        run_with(lambda request: httpx.Response(200, json={"candidates": []}), lambda p: p.generate(packet))


def test_generate_propagates_http_errors():
    packet = PromptPacket(model="gemini-2.5-flash", contents=[ChatTurn(role="user", text="hi")])
    with pytest.raises(httpx.HTTPStatusError):
        run_with(lambda request: httpx.Response(429, json={}), lambda p: p.generate(packet))


def test_list_models_keeps_generate_content_models():
    payload = {
        "models": [
            {"name": "models/gemini-2.5-flash", "displayName": "Gemini 2.5 Flash",
             "inputTokenLimit": 1048576, "supportedGenerationMethods": ["generateContent"]},
            {"name": "models/embedding-001", "supportedGenerationMethods": ["embedContent"]},
        ]
    }
    models = run_with(lambda request: httpx.Response(200, json=payload), lambda p: p.list_models())

    assert [m.id for m in models] == ["models/gemini-2.5-flash"]
    assert models[0].context_window == 1048576


def test_list_models_swallows_upstream_failure():
    models = run_with(lambda request: httpx.Response(500), lambda p: p.list_models())
    assert models == []
