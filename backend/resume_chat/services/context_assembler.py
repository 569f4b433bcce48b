from __future__ import annotations

from collections.abc import Sequence
from typing import Optional

from resume_chat.retrieval.types import MatchCandidate

SEGMENT_SEPARATOR = "\n\n"


def rank_candidates(candidates: Sequence[MatchCandidate]) -> list[MatchCandidate]:
    """Order candidates by recency-weighted similarity, highest first.

    ``sorted`` is stable, so candidates with equal combined scores keep their
    input order.
    """

    return sorted(candidates, key=lambda item: item.combined_score, reverse=True)


def assemble_context(
    candidates: Sequence[MatchCandidate], limit: Optional[int] = None
) -> str:
    """Join ranked candidate contents into one context block.

    Candidates without content contribute an empty segment, so adjacent
    separators can appear in the result. An empty input yields ``""``.
    """

    if not candidates:
        return ""
    ranked = rank_candidates(candidates)
    if limit is not None:
        ranked = ranked[: max(0, limit)]
    return SEGMENT_SEPARATOR.join(item.content or "" for item in ranked)
