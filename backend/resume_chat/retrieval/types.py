from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class MatchCandidate:
    """Vector-search candidate with similarity and optional recency weight."""

    id: str
    content: Optional[str]
    similarity: float = 0.0
    recency_score: float = 1.0

    @property
    def combined_score(self) -> float:
        return self.recency_score * self.similarity

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "MatchCandidate":
        """Build a candidate from one ``match_vectors`` result row."""

        content = row.get("content") or row.get("chunk")
        return cls(
            id=str(row.get("id", "")),
            content=content if isinstance(content, str) else None,
            similarity=_as_float(row.get("similarity"), 0.0),
            recency_score=_as_float(row.get("recency_score"), 1.0),
        )


def _as_float(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default
