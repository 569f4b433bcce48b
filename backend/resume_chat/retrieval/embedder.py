from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Optional

import httpx

from resume_chat.core.errors import EmbeddingError


class Embedder(ABC):
    """Embedding interface for pluggable providers."""

    provider: str
    model_name: str

    @abstractmethod
    async def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        """Generate vectors for each text input."""

    async def embed(self, text: str) -> list[float]:
        """Generate the vector for one non-empty text."""

        if not text.strip():
            raise EmbeddingError("Cannot embed empty text", code="EMBEDDING_EMPTY_INPUT")
        vectors = await self.embed_texts([text])
        if not vectors:
            raise EmbeddingError("Embedding response shape is invalid")
        return vectors[0]


class OpenAIEmbedder(Embedder):
    """OpenAI-compatible embedding provider implementation."""

    provider = "openai"

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        model_name: str,
        timeout_sec: float = 20.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.model_name = model_name
        self._timeout_sec = timeout_sec
        self._api_key = api_key
        self._client = http_client
        normalized = base_url.rstrip("/")
        if normalized.endswith("/v1"):
            normalized = normalized[:-3]
        self._endpoint = f"{normalized}/v1/embeddings"

    async def embed_texts(self, texts: Sequence[str]) -> list[list[float]]:
        if not texts:
            return []
        if not self._api_key.strip():
            raise EmbeddingError("OpenAI embedding API key is empty", code="API_KEY_REQUIRED")
        payload = {"model": self.model_name, "input": list(texts)}
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

        try:
            if self._client:
                response = await self._client.post(
                    self._endpoint, json=payload, headers=headers, timeout=self._timeout_sec
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout_sec) as client:
                    response = await client.post(self._endpoint, json=payload, headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise EmbeddingError("OpenAI embedding request failed") from exc

        try:
            data = response.json()
        except ValueError as exc:
            raise EmbeddingError("Embedding response is not JSON") from exc
        return self._parse_embeddings(data, len(texts))

    def _parse_embeddings(self, payload: Any, expected_size: int) -> list[list[float]]:
        rows = payload.get("data") if isinstance(payload, dict) else None
        if not isinstance(rows, list) or len(rows) != expected_size:
            raise EmbeddingError("Embedding response shape is invalid")

        vectors: list[list[float]] = []
        for row in rows:
            embedding = row.get("embedding") if isinstance(row, dict) else None
            if not isinstance(embedding, list):
                raise EmbeddingError("Embedding row is missing vector data")
            try:
                vector = [float(value) for value in embedding]
            except (TypeError, ValueError) as exc:
                raise EmbeddingError("Embedding contains non-numeric values") from exc
            vectors.append(vector)
        return vectors
