import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from collections.abc import Sequence

import httpx
import pytest

from resume_chat.core.config import get_settings
from resume_chat.main import create_app
from resume_chat.providers.base import CompletionResult, ProviderRuntimeConfig
from resume_chat.retrieval.types import MatchCandidate
from resume_chat.schemas.chat import ChatMessage
from resume_chat.services.interaction_logger import InteractionLogger
from resume_chat.services.retrieval_service import RetrievalService

WEBHOOK_URL = "https://hooks.test/sheet"


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("SUPABASE_URL", "")
    monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "")
    monkeypatch.setenv("LOG_WEBHOOK_URL", WEBHOOK_URL)
    monkeypatch.setenv("CHAT_LOG_INTERACTIONS", "false")
    monkeypatch.setenv("ASSISTANT_NAME", "Sara")
    get_settings.cache_clear()
    app = create_app()
    app.state.chat_service.set_adapter(StubAdapter())
    app.state.chat_service.set_retrieval_service(StubRetrievalService())
    yield app
    get_settings.cache_clear()


@pytest.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
async def webhook(app):
    """Route the interaction logger through a mock transport and capture payloads."""

    calls: list[dict] = []
    state = {"status": 200, "fail": False}

    def handler(request: httpx.Request) -> httpx.Response:
        if state["fail"]:
            raise httpx.ConnectError("webhook unreachable", request=request)
        calls.append({"url": str(request.url), "json": _json(request)})
        return httpx.Response(state["status"], text="ok")

    mock_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    app.state.interaction_logger = InteractionLogger(WEBHOOK_URL, http_client=mock_client)
    yield calls, state
    await mock_client.aclose()


def _json(request: httpx.Request) -> dict:
    return json.loads(request.content.decode("utf-8"))


class StubAdapter:
    """Completion stub used to avoid external API calls in tests."""

    def __init__(self, content: str = "Sara has led GTM launches.", error: Exception | None = None):
        self.content = content
        self.error = error
        self.calls: list[tuple[list[ChatMessage], float]] = []

    async def complete(
        self,
        cfg: ProviderRuntimeConfig,
        messages: Sequence[ChatMessage],
        temperature: float,
    ) -> CompletionResult:
        self.calls.append((list(messages), temperature))
        if self.error is not None:
            raise self.error
        return CompletionResult(
            content=self.content,
            model_provider=cfg.provider,
            model_name=cfg.model_name,
            token_in=1,
            token_out=1,
        )


class StubRetrievalService(RetrievalService):
    """Retrieval stub returning a fixed candidate list."""

    def __init__(self, candidates: list[MatchCandidate] | None = None, limit: int = 6):
        self.candidates = candidates or []
        self.limit = limit
        self.queries: list[str] = []

    async def retrieve(self, query_text: str) -> list[MatchCandidate]:
        self.queries.append(query_text)
        return list(self.candidates)
