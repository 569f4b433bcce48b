from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from resume_chat.core.config import Settings
from resume_chat.core.errors import InputError, UpstreamError, is_quota_error
from resume_chat.providers.base import CompletionAdapter, ProviderRuntimeConfig
from resume_chat.providers.openai_adapter import OpenAIAdapter
from resume_chat.retrieval.types import MatchCandidate
from resume_chat.services.context_assembler import assemble_context
from resume_chat.services.prompt_builder import PromptBuilder
from resume_chat.services.reply_formatter import format_reply
from resume_chat.services.retrieval_service import RetrievalService, create_retrieval_service

logger = logging.getLogger(__name__)

GENERIC_FAILURE_REPLY = (
    "Sorry, something went wrong. Please try rephrasing your question or come back later."
)
NO_INPUT_REPLY = "No input."
MESSAGE_TOO_LONG_REPLY = "Message is too long."
QUOTA_FAILURE_REPLY = (
    "OpenAI error: Your API key may have no credits left. "
    "Check your billing settings at https://platform.openai.com/account/billing."
)


@dataclass(frozen=True)
class ChatOutcome:
    """Reply text plus the HTTP status it should be delivered with."""

    reply: str
    status_code: int = 200

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class ChatService:
    """Run one question through retrieval, prompting, completion and formatting."""

    def __init__(
        self,
        *,
        settings: Settings,
        prompt_builder: PromptBuilder,
        retrieval_service: RetrievalService,
        adapter: Optional[CompletionAdapter] = None,
    ) -> None:
        self._settings = settings
        self._prompt_builder = prompt_builder
        self._retrieval_service = retrieval_service
        self._adapter: CompletionAdapter = adapter or OpenAIAdapter(
            timeout_sec=settings.http_timeout_sec
        )

    def set_adapter(self, adapter: CompletionAdapter) -> None:
        """Override the completion adapter (useful for tests)."""

        self._adapter = adapter

    def set_retrieval_service(self, retrieval_service: RetrievalService) -> None:
        """Override the retrieval service (useful for tests)."""

        self._retrieval_service = retrieval_service

    @property
    def persona_name(self) -> str:
        return self._prompt_builder.persona_name

    def runtime_config(self) -> ProviderRuntimeConfig:
        return ProviderRuntimeConfig(
            provider="openai",
            model_name=self._settings.chat_model,
            base_url=self._settings.openai_base_url,
            api_key=self._settings.openai_api_key,
        )

    async def answer(self, message: Optional[str], use_embeddings: bool = True) -> ChatOutcome:
        """Answer one question. Raises ``InputError`` for an empty or over-long message."""

        question = message or ""
        if not question.strip():
            raise InputError(NO_INPUT_REPLY)
        if len(question) > self._settings.max_message_chars:
            raise InputError(MESSAGE_TOO_LONG_REPLY)

        candidates: list[MatchCandidate] = []
        if use_embeddings:
            candidates = await self._retrieval_service.retrieve(question)
        context_block = assemble_context(candidates, limit=self._retrieval_service.limit)
        if not context_block:
            logger.warning("No semantic matches found; falling back to no context")

        messages = self._prompt_builder.build_messages(context_block, question)
        try:
            result = await self._adapter.complete(
                self.runtime_config(), messages, self._settings.chat_temperature
            )
        except UpstreamError as exc:
            logger.error("Completion failed (%s): %s", exc.code, exc.message)
            return self._failure(exc)
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected completion failure")
            return self._failure(exc)

        if result.token_in is not None or result.token_out is not None:
            logger.debug("Completion usage: in=%s out=%s", result.token_in, result.token_out)
        reply = format_reply(result.content, context_block, self.persona_name)
        return ChatOutcome(reply=reply)

    @staticmethod
    def _failure(exc: BaseException) -> ChatOutcome:
        reply = QUOTA_FAILURE_REPLY if is_quota_error(exc) else GENERIC_FAILURE_REPLY
        return ChatOutcome(reply=reply, status_code=500)


def create_chat_service(settings: Settings) -> ChatService:
    """Wire the chat service from settings."""

    return ChatService(
        settings=settings,
        prompt_builder=PromptBuilder(
            persona_name=settings.assistant_name,
            persona_prompt=settings.persona_prompt,
        ),
        retrieval_service=create_retrieval_service(settings),
    )


def get_chat_service(request: Request) -> ChatService:
    """Dependency to access the chat service from app state."""

    return request.app.state.chat_service

