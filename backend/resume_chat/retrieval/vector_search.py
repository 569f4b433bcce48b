from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Optional

import httpx

from resume_chat.core.errors import UpstreamError
from resume_chat.providers.base import HTTPProviderAdapter
from resume_chat.retrieval.types import MatchCandidate


class VectorSearch(ABC):
    """Nearest-neighbour lookup over the résumé snippet index."""

    @abstractmethod
    async def search(
        self,
        query_embedding: Sequence[float],
        *,
        threshold: float,
        limit: int,
    ) -> list[MatchCandidate]:
        """Return up to ``limit`` candidates scoring at or above ``threshold``."""


class NullVectorSearch(VectorSearch):
    """Search backend used when no vector database is configured."""

    async def search(
        self,
        query_embedding: Sequence[float],
        *,
        threshold: float,
        limit: int,
    ) -> list[MatchCandidate]:
        return []


class SupabaseVectorSearch(HTTPProviderAdapter, VectorSearch):
    """Calls the ``match_vectors`` Postgres function through Supabase's REST RPC."""

    def __init__(
        self,
        *,
        base_url: str,
        service_key: str,
        function_name: str = "match_vectors",
        timeout_sec: float = 20.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(timeout_sec=timeout_sec, http_client=http_client)
        self._url = self._join_url(base_url, f"/rest/v1/rpc/{function_name}")
        self._service_key = service_key

    async def search(
        self,
        query_embedding: Sequence[float],
        *,
        threshold: float,
        limit: int,
    ) -> list[MatchCandidate]:
        if limit <= 0:
            return []
        headers = {
            "Content-Type": "application/json",
            "apikey": self._service_key,
            "Authorization": f"Bearer {self._service_key}",
        }
        payload = {
            "query_embedding": [float(value) for value in query_embedding],
            "match_threshold": threshold,
            "match_count": limit,
        }
        rows = await self._request_json("POST", self._url, headers=headers, json=payload)
        if not isinstance(rows, list):
            raise UpstreamError("SEARCH_PARSE_ERROR", "Vector search returned a non-list payload.")
        candidates = [MatchCandidate.from_row(row) for row in rows if isinstance(row, dict)]
        return candidates[:limit]
