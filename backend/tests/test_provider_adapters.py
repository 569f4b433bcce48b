from __future__ import annotations

import json

import httpx
import pytest

from resume_chat.core.errors import EmbeddingError, QuotaExceededError, UpstreamError
from resume_chat.providers.base import ProviderRuntimeConfig
from resume_chat.providers.openai_adapter import OpenAIAdapter
from resume_chat.retrieval.embedder import OpenAIEmbedder
from resume_chat.retrieval.vector_search import SupabaseVectorSearch
from resume_chat.schemas.chat import ChatMessage

CFG = ProviderRuntimeConfig(
    provider="openai",
    model_name="gpt-test",
    base_url="https://api.openai.com",
    api_key="sk-test",
)
MESSAGES = [
    ChatMessage(role="system", text="persona"),
    ChatMessage(role="user", text="hi"),
]


@pytest.mark.anyio
async def test_openai_adapter_complete():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "choices": [{"message": {"content": "hello from completions"}}],
                "usage": {"prompt_tokens": 5, "completion_tokens": 7},
            },
        )

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        adapter = OpenAIAdapter(http_client=client)
        result = await adapter.complete(CFG, MESSAGES, 0.7)

    assert result.content == "hello from completions"
    assert result.token_in == 5
    assert result.token_out == 7
    assert seen["path"] == "/v1/chat/completions"
    assert seen["auth"] == "Bearer sk-test"
    assert seen["body"]["temperature"] == 0.7
    assert seen["body"]["messages"] == [
        {"role": "system", "content": "persona"},
        {"role": "user", "content": "hi"},
    ]


@pytest.mark.anyio
@pytest.mark.parametrize(
    "payload",
    [{"choices": []}, {"choices": [{"message": {"content": None}}]}, {}],
)
async def test_openai_adapter_defaults_to_placeholder(payload: dict):
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=payload))
    async with httpx.AsyncClient(transport=transport) as client:
        result = await OpenAIAdapter(http_client=client).complete(CFG, MESSAGES, 0.7)

    assert result.content == "…"


@pytest.mark.anyio
async def test_openai_adapter_quota_error_is_distinguished():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            429,
            json={
                "error": {
                    "message": "You exceeded your current quota, please check your plan.",
                    "code": "insufficient_quota",
                }
            },
        )

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(QuotaExceededError) as exc_info:
            await OpenAIAdapter(http_client=client).complete(CFG, MESSAGES, 0.7)

    assert exc_info.value.status_code == 429
    assert "quota" in exc_info.value.message


@pytest.mark.anyio
async def test_openai_adapter_rate_limit_is_not_quota():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, json={"error": {"message": "rate limited"}})

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(UpstreamError) as exc_info:
            await OpenAIAdapter(http_client=client).complete(CFG, MESSAGES, 0.7)

    assert not isinstance(exc_info.value, QuotaExceededError)
    assert exc_info.value.code == "PROVIDER_RATE_LIMIT"
    assert exc_info.value.status_code == 429


@pytest.mark.anyio
async def test_openai_adapter_connection_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("down", request=request)

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        with pytest.raises(UpstreamError) as exc_info:
            await OpenAIAdapter(http_client=client).complete(CFG, MESSAGES, 0.7)

    assert exc_info.value.code == "PROVIDER_CONNECTION_ERROR"


@pytest.mark.anyio
async def test_openai_adapter_requires_api_key():
    cfg = ProviderRuntimeConfig(
        provider="openai", model_name="gpt-test", base_url="https://api.openai.com"
    )
    with pytest.raises(UpstreamError) as exc_info:
        await OpenAIAdapter().complete(cfg, MESSAGES, 0.7)

    assert exc_info.value.code == "API_KEY_REQUIRED"


@pytest.mark.anyio
async def test_openai_embedder_returns_vector():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/v1/embeddings"
        body = json.loads(request.content)
        assert body == {"model": "text-embedding-ada-002", "input": ["Does she know GTM?"]}
        return httpx.Response(200, json={"data": [{"embedding": [0.1, 0.2, 0.3]}]})

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        embedder = OpenAIEmbedder(
            base_url="https://api.openai.com/v1",
            api_key="sk-test",
            model_name="text-embedding-ada-002",
            http_client=client,
        )
        vector = await embedder.embed("Does she know GTM?")

    assert vector == [0.1, 0.2, 0.3]


@pytest.mark.anyio
async def test_openai_embedder_failure_raises_embedding_error():
    transport = httpx.MockTransport(lambda request: httpx.Response(500, text="boom"))
    async with httpx.AsyncClient(transport=transport) as client:
        embedder = OpenAIEmbedder(
            base_url="https://api.openai.com",
            api_key="sk-test",
            model_name="text-embedding-ada-002",
            http_client=client,
        )
        with pytest.raises(EmbeddingError):
            await embedder.embed("question")

    assert isinstance(EmbeddingError("x"), UpstreamError)


@pytest.mark.anyio
async def test_supabase_search_sends_rpc_and_parses_rows():
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["apikey"] = request.headers.get("apikey")
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json=[
                {"id": 1, "content": "Led GTM", "similarity": 0.91},
                {"id": 2, "chunk": "RevOps", "similarity": 0.84, "recency_score": 0.5},
                "not-a-row",
            ],
        )

    transport = httpx.MockTransport(handler)
    async with httpx.AsyncClient(transport=transport) as client:
        search = SupabaseVectorSearch(
            base_url="https://project.supabase.co",
            service_key="service-key",
            http_client=client,
        )
        candidates = await search.search([0.5, 0.25], threshold=0.8, limit=6)

    assert seen["path"] == "/rest/v1/rpc/match_vectors"
    assert seen["apikey"] == "service-key"
    assert seen["auth"] == "Bearer service-key"
    assert seen["body"] == {
        "query_embedding": [0.5, 0.25],
        "match_threshold": 0.8,
        "match_count": 6,
    }
    assert [item.id for item in candidates] == ["1", "2"]
    assert candidates[1].content == "RevOps"
    assert candidates[1].recency_score == 0.5


@pytest.mark.anyio
async def test_supabase_search_failure_raises_upstream_error():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(503, json={"message": "unavailable"})
    )
    async with httpx.AsyncClient(transport=transport) as client:
        search = SupabaseVectorSearch(
            base_url="https://project.supabase.co",
            service_key="service-key",
            http_client=client,
        )
        with pytest.raises(UpstreamError) as exc_info:
            await search.search([0.1], threshold=0.8, limit=6)

    assert exc_info.value.code == "PROVIDER_UPSTREAM"
