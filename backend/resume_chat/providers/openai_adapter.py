from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Optional

from resume_chat.core.errors import UpstreamError
from resume_chat.providers.base import (
    PLACEHOLDER_REPLY,
    CompletionResult,
    HTTPProviderAdapter,
    ProviderRuntimeConfig,
    require_api_key,
)
from resume_chat.schemas.chat import ChatMessage


class OpenAIAdapter(HTTPProviderAdapter):
    """Adapter for OpenAI-compatible chat-completion APIs."""

    async def complete(
        self,
        cfg: ProviderRuntimeConfig,
        messages: Sequence[ChatMessage],
        temperature: float,
    ) -> CompletionResult:
        url = self._join_url(cfg.base_url, "/v1/chat/completions")
        api_key = require_api_key(cfg.api_key, "OpenAI")
        headers = {"Authorization": f"Bearer {api_key}"}
        payload = {
            "model": cfg.model_name,
            "messages": [message.to_wire() for message in messages],
            "temperature": temperature,
        }
        data = await self._request_json("POST", url, headers=headers, json=payload)
        if not isinstance(data, dict):
            raise UpstreamError("PROVIDER_PARSE_ERROR", "Provider returned invalid JSON payload.")
        return CompletionResult(
            content=self._first_choice_text(data),
            model_provider=cfg.provider,
            model_name=cfg.model_name,
            token_in=self._get_usage_int(data, "prompt_tokens"),
            token_out=self._get_usage_int(data, "completion_tokens"),
        )

    @staticmethod
    def _first_choice_text(data: dict[str, Any]) -> str:
        choices = data.get("choices") or []
        if not choices or not isinstance(choices[0], dict):
            return PLACEHOLDER_REPLY
        message = choices[0].get("message") or {}
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content:
            return PLACEHOLDER_REPLY
        return content

    @staticmethod
    def _get_usage_int(data: dict[str, Any], key: str) -> Optional[int]:
        usage = data.get("usage") or {}
        value = usage.get(key)
        return int(value) if isinstance(value, int) else None
