from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from resume_chat.core.config import Settings
from resume_chat.core.errors import EmbeddingError, UpstreamError
from resume_chat.retrieval.embedder import Embedder, OpenAIEmbedder
from resume_chat.retrieval.types import MatchCandidate
from resume_chat.retrieval.vector_search import (
    NullVectorSearch,
    SupabaseVectorSearch,
    VectorSearch,
)

logger = logging.getLogger(__name__)


class RetrievalService(ABC):
    """Abstract context retrieval for one question."""

    limit: Optional[int] = None

    @abstractmethod
    async def retrieve(self, query_text: str) -> list[MatchCandidate]:
        """Return candidate snippets for the question, or ``[]``."""


class NoopRetrievalService(RetrievalService):
    """Disabled retrieval mode implementation."""

    async def retrieve(self, query_text: str) -> list[MatchCandidate]:
        return []


class VectorRetrievalService(RetrievalService):
    """Embed the question and look up nearby snippets; failures yield no candidates."""

    def __init__(
        self,
        *,
        embedder: Embedder,
        vector_search: VectorSearch,
        threshold: float,
        limit: int,
        verbose: bool = False,
    ) -> None:
        self._embedder = embedder
        self._vector_search = vector_search
        self._threshold = threshold
        self.limit = max(1, limit)
        self._verbose = verbose

    async def retrieve(self, query_text: str) -> list[MatchCandidate]:
        cleaned_query = query_text.strip()
        if not cleaned_query:
            return []

        try:
            query_embedding = await self._embedder.embed(cleaned_query)
        except EmbeddingError as exc:
            logger.warning("Context retrieval skipped because query embedding failed: %s", exc)
            return []
        except Exception:  # noqa: BLE001
            logger.exception("Context retrieval failed while embedding query")
            return []

        try:
            candidates = await self._vector_search.search(
                query_embedding, threshold=self._threshold, limit=self.limit
            )
        except UpstreamError as exc:
            logger.warning("Context retrieval skipped because vector search failed: %s", exc)
            return []
        except Exception:  # noqa: BLE001
            logger.exception("Context retrieval failed while searching vectors")
            return []

        logger.info("Found %d semantic matches for context.", len(candidates))
        if self._verbose:
            for item in candidates:
                preview = (item.content or "[no content field]")[:100]
                logger.info(
                    "  match %s similarity=%.4f recency=%.2f: %s",
                    item.id,
                    item.similarity,
                    item.recency_score,
                    preview,
                )
        return candidates


def create_retrieval_service(
    settings: Settings, *, embedder: Optional[Embedder] = None
) -> RetrievalService:
    """Factory for runtime retrieval mode selection."""

    if not settings.embeddings_enabled:
        return NoopRetrievalService()

    if settings.vector_search_configured:
        vector_search: VectorSearch = SupabaseVectorSearch(
            base_url=settings.supabase_url,
            service_key=settings.supabase_service_role_key,
            timeout_sec=settings.http_timeout_sec,
        )
    else:
        logger.warning(
            "SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY is missing; answers will have no context"
        )
        vector_search = NullVectorSearch()

    return VectorRetrievalService(
        embedder=embedder
        or OpenAIEmbedder(
            base_url=settings.openai_base_url,
            api_key=settings.openai_api_key,
            model_name=settings.embed_model.strip() or "text-embedding-ada-002",
            timeout_sec=settings.http_timeout_sec,
        ),
        vector_search=vector_search,
        threshold=settings.match_threshold,
        limit=settings.match_count,
        verbose=settings.is_verbose,
    )
