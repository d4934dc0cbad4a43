# tests/unit/backends/test_http_backend.py
"""
测试 HTTP 后端与 FastAPI 服务之间的请求/响应契约，
以及各类失败被统一转换为 `BackendError`。
"""

import json
from collections.abc import Callable

import httpx
import pytest

from smash_assistant.backends.http import API_KEY_HEADER, HttpBackend, HttpBackendConfig
from smash_assistant.core.exceptions import BackendError, ConfigurationError
from smash_assistant.core.types import (
    AnalysisResult,
    ContextType,
    Message,
    MessageKind,
    MessageRole,
)

BASE_URL = "http://testserver/api"


def _backend(
    handler: Callable[[httpx.Request], httpx.Response], **config: object
) -> HttpBackend:
    return HttpBackend(
        HttpBackendConfig(base_url=BASE_URL, **config),
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_analyze_sentence_parses_camel_case_response() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "englishSentence": "The cat sat.",
                "chineseTranslation": "猫坐着。",
                "chunks": [
                    {"text": "The cat", "grammarDescription": "名词短语", "partOfSpeech": "NP", "role": "主语"}
                ],
                "detailedTokens": [],
                "sentencePattern": "S + V",
            },
        )

    backend = _backend(handler)
    result = await backend.analyze_sentence("The cat sat.")
    await backend.close()

    assert seen[0].url.path == "/api/fastapi/analyze"
    assert json.loads(seen[0].content) == {"sentence": "The cat sat."}
    assert result.english_sentence == "The cat sat."
    assert result.chunks[0].grammar_description == "名词短语"
    assert result.sentence_pattern == "S + V"


@pytest.mark.asyncio
async def test_quick_lookup_sends_word_context_and_url() -> None:
    payloads: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        payloads.append(json.loads(request.content))
        return httpx.Response(
            200,
            json={"word": "run", "contextMeaning": "跑", "url": "/reading?id=1"},
        )

    backend = _backend(handler)
    result = await backend.quick_lookup("run", "I run fast.", "/reading?id=1")

    assert payloads == [{"word": "run", "context": "I run fast.", "url": "/reading?id=1"}]
    assert result.context_meaning == "跑"
    assert result.url == "/reading?id=1"
    assert result.original_sentence is None


@pytest.mark.asyncio
async def test_lookup_word_parses_dictionary_result() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/fastapi/lookup"
        return httpx.Response(
            200,
            json={
                "word": "run",
                "phonetic": "/rʌn/",
                "entries": [
                    {
                        "partOfSpeech": "verb",
                        "cocaFrequency": "Rank 120",
                        "definitions": [{"meaning": "跑", "exampleTranslation": "他跑了。"}],
                    }
                ],
            },
        )

    result = await _backend(handler).lookup_word("run")

    assert result.entries[0].coca_frequency == "Rank 120"
    assert result.entries[0].definitions[0].example_translation == "他跑了。"


@pytest.mark.asyncio
async def test_chat_reply_serializes_history() -> None:
    bodies: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        bodies.append(json.loads(request.content))
        return httpx.Response(200, json={"response": "好的"})

    history = [
        Message(
            role=MessageRole.ASSISTANT,
            content="The cat sat.",
            kind=MessageKind.ANALYSIS_RESULT,
            payload=AnalysisResult(english_sentence="The cat sat."),
        ),
        Message(role=MessageRole.USER, content="解释一下"),
    ]
    reply = await _backend(handler).chat_reply(
        history, "The cat sat.", "解释一下", ContextType.SENTENCE
    )

    assert reply == "好的"
    body = bodies[0]
    assert body["contextContent"] == "The cat sat."
    assert body["userMessage"] == "解释一下"
    assert body["contextType"] == "sentence"
    assert body["history"][0]["type"] == "analysis_result"
    assert body["history"][0]["data"]["englishSentence"] == "The cat sat."
    assert body["history"][1] == {
        "role": "user",
        "content": "解释一下",
        "type": "text",
        "data": None,
    }


@pytest.mark.asyncio
async def test_api_key_header_is_sent() -> None:
    headers: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        headers.append(request.headers.get(API_KEY_HEADER))
        return httpx.Response(200, json={"response": "ok"})

    backend = _backend(handler, api_key="secret-key")
    await backend.chat_reply([], None, "hi", ContextType.WORD)

    assert headers == ["secret-key"]


def test_empty_api_key_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        HttpBackend(HttpBackendConfig(base_url=BASE_URL, api_key=""))


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "handler",
    [
        lambda request: httpx.Response(500, text="boom"),
        lambda request: httpx.Response(422, json={"detail": "bad"}),
        lambda request: httpx.Response(200, text="not json"),
        lambda request: httpx.Response(200, json={"unexpected": True}),
    ],
    ids=["server-error", "client-error", "malformed-body", "wrong-shape"],
)
async def test_failures_raise_backend_error(
    handler: Callable[[httpx.Request], httpx.Response],
) -> None:
    with pytest.raises(BackendError):
        await _backend(handler).analyze_sentence("The cat sat.")


@pytest.mark.asyncio
async def test_connection_error_raises_backend_error() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(BackendError, match="ConnectError"):
        await _backend(handler).quick_lookup("run", "I run fast.")


@pytest.mark.asyncio
async def test_chat_without_response_field_raises() -> None:
    backend = _backend(lambda request: httpx.Response(200, json={"answer": "hi"}))
    with pytest.raises(BackendError):
        await backend.chat_reply([], None, "hi", ContextType.SENTENCE)
