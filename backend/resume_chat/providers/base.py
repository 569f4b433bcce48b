from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Optional, Protocol

import httpx

from resume_chat.core.errors import QuotaExceededError, UpstreamError
from resume_chat.schemas.chat import ChatMessage

PLACEHOLDER_REPLY = "…"


@dataclass
class ProviderRuntimeConfig:
    """Runtime configuration needed by a completion adapter."""

    provider: str
    model_name: str
    base_url: str | None = None
    api_key: str | None = None


@dataclass
class CompletionResult:
    """Result returned from a chat-completion call."""

    content: str
    model_provider: str
    model_name: str
    token_in: int | None = None
    token_out: int | None = None


class CompletionAdapter(Protocol):
    """Adapter interface for chat-completion providers."""

    async def complete(
        self,
        cfg: ProviderRuntimeConfig,
        messages: Sequence[ChatMessage],
        temperature: float,
    ) -> CompletionResult:
        """Generate a reply for the ordered message list."""


def build_status_error(response: httpx.Response) -> UpstreamError:
    """Build a normalized upstream error from an HTTP response."""

    status = response.status_code
    message = _extract_response_message(response)
    formatted = f"Provider returned {status}: {message}"
    if "quota" in message.lower():
        return QuotaExceededError("PROVIDER_QUOTA", formatted, status_code=status)
    if status in {408, 429}:
        code = "PROVIDER_TIMEOUT" if status == 408 else "PROVIDER_RATE_LIMIT"
        return UpstreamError(code, formatted, status_code=status)
    if status >= 500:
        return UpstreamError("PROVIDER_UPSTREAM", formatted, status_code=status)
    return UpstreamError("PROVIDER_BAD_STATUS", formatted, status_code=status)


def require_api_key(api_key: Optional[str], provider_name: str) -> str:
    """Return an API key or raise a normalized configuration error."""

    if api_key:
        return api_key
    raise UpstreamError("API_KEY_REQUIRED", f"API key is required for {provider_name}.")


def _extract_response_message(response: httpx.Response) -> str:
    """Extract a concise error message from provider JSON/text payloads."""

    try:
        payload: Any = response.json()
    except ValueError:
        return (response.text or "Unknown error from provider.").strip()

    if isinstance(payload, dict):
        error = payload.get("error")
        if isinstance(error, dict):
            detail = error.get("message") or error.get("code")
            if isinstance(detail, str) and detail.strip():
                return detail.strip()
        if isinstance(error, str) and error.strip():
            return error.strip()
        message = payload.get("message")
        if isinstance(message, str) and message.strip():
            return message.strip()
    return (response.text or "Unknown error from provider.").strip()


class HTTPProviderAdapter:
    """Shared HTTP behavior for upstream service clients."""

    def __init__(
        self, timeout_sec: float = 20, http_client: Optional[httpx.AsyncClient] = None
    ) -> None:
        self._timeout = timeout_sec
        self._client = http_client

    async def _request_json(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        json: Optional[Any] = None,
    ) -> Any:
        response = await self._request(method, url, headers=headers, json=json)
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamError("PROVIDER_PARSE_ERROR", "Invalid JSON from provider.") from exc

    async def _request(
        self,
        method: str,
        url: str,
        headers: Optional[dict[str, str]] = None,
        json: Optional[Any] = None,
    ) -> httpx.Response:
        try:
            if self._client:
                response = await self._client.request(
                    method, url, headers=headers, json=json, timeout=self._timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.request(method, url, headers=headers, json=json)
        except httpx.TimeoutException as exc:
            raise UpstreamError("PROVIDER_TIMEOUT", "Provider request timed out.") from exc
        except httpx.RequestError as exc:
            raise UpstreamError("PROVIDER_CONNECTION_ERROR", "Provider connection failed.") from exc
        if response.status_code >= 400:
            raise build_status_error(response)
        return response

    @staticmethod
    def _join_url(base_url: Optional[str], path: str) -> str:
        if not base_url:
            raise UpstreamError("PROVIDER_BASE_URL_MISSING", "Base URL is required.")
        base = base_url.rstrip("/")
        if base.endswith("/v1") and path.startswith("/v1/"):
            return base + path[3:]
        return base + path
