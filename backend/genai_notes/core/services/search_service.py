from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import numpy as np

from genai_notes.config import settings
from genai_notes.core.errors import MissingEmbeddingError, NoteNotFoundError, NoteValidationError
from genai_notes.core.services.embedding_service import preprocess_text
from genai_notes.utils.logging import get_logger
from genai_notes.utils.retry import retry_with_linear_backoff

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from genai_notes.core.models.note import NoteMatch
    from genai_notes.core.repositories.note_repository import NoteRepository
    from genai_notes.core.services.embedding_service import EmbeddingClient

logger = get_logger(__name__)

STOP_WORDS = frozenset(
    """
    a about above after again against all am an and any are as at be because been
    before being below between both but by can could did do does doing down during
    each few for from further had has have having he her here hers herself him
    himself his how i if in into is it its itself just me more most my myself no nor
    not of off on once only or other our ours ourselves out over own same she should
    so some such than that the their theirs them themselves then there these they
    this those through to too under until up very was we were what when where which
    while who whom why will with would you your yours yourself yourselves
    """.split()
)


def normalize_search_query(query: str) -> str:
    """Case-fold the query and drop stop-words.

    Falls back to the case-folded query when every word is a stop-word.
    """
    folded = preprocess_text(query)
    kept = [word for word in folded.split(" ") if word and word not in STOP_WORDS]
    return " ".join(kept) if kept else folded


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    denom = np.linalg.norm(va) * np.linalg.norm(vb)
    if denom == 0:
        return 0.0
    return float(np.dot(va, vb) / denom)


@dataclass
class SearchOutcome:
    query: str
    normalized_query: str
    threshold: float
    results: list[NoteMatch] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.results


@dataclass
class SimilarityReport:
    note_id: UUID
    title: str
    similarity: float

    @property
    def distance(self) -> float:
        return 1.0 - self.similarity


class SearchService:
    """Semantic search over stored note embeddings.

    Nearest-neighbour ranking happens in the database (`match_notes` RPC); this
    service prepares the query vector (retried with linear backoff like the
    other AI calls) and applies the threshold fallback.
    """

    def __init__(
        self,
        repo: NoteRepository,
        embedder: EmbeddingClient,
        *,
        match_threshold: float | None = None,
        fallback_threshold: float | None = None,
        attempts: int | None = None,
        base_delay: float | None = None,
    ) -> None:
        self._repo = repo
        self._embedder = embedder
        self._match_threshold = (
            match_threshold if match_threshold is not None else settings.search_match_threshold
        )
        self._fallback_threshold = (
            fallback_threshold if fallback_threshold is not None else settings.search_fallback_threshold
        )
        self._attempts = attempts if attempts is not None else settings.ai_retry_attempts
        self._base_delay = base_delay if base_delay is not None else settings.ai_retry_delay_seconds

    async def search(self, query: str, *, limit: int | None = None) -> SearchOutcome:
        if not query or not query.strip():
            raise NoteValidationError({"query": "Search query is required"})

        normalized = normalize_search_query(query)
        count = limit or settings.search_match_count
        vector = await self._embed_query(normalized)

        threshold = self._match_threshold
        results = await self._repo.match_notes(
            query_embedding=vector, match_threshold=threshold, match_count=count
        )
        if not results and self._fallback_threshold < threshold:
            logger.info(
                "No matches at threshold %.2f, retrying at %.2f",
                threshold, self._fallback_threshold,
                extra={"normalized_query": normalized},
            )
            threshold = self._fallback_threshold
            results = await self._repo.match_notes(
                query_embedding=vector, match_threshold=threshold, match_count=count
            )

        return SearchOutcome(
            query=query.strip(),
            normalized_query=normalized,
            threshold=threshold,
            results=list(results),
        )

    async def related_notes(self, note_id: UUID, *, limit: int | None = None) -> list[NoteMatch]:
        note = await self._repo.get(note_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        if not note.embedding:
            raise MissingEmbeddingError(note_id)
        results = await self._repo.match_notes(
            query_embedding=note.embedding,
            match_threshold=settings.related_match_threshold,
            match_count=limit or settings.related_match_count,
            exclude_id=note_id,
        )
        return list(results)

    async def debug_similarity(self, query: str, note_id: UUID) -> SimilarityReport:
        """Score one note against a query, for tuning the search thresholds."""
        note = await self._repo.get(note_id)
        if note is None:
            raise NoteNotFoundError(note_id)
        if not note.embedding:
            raise MissingEmbeddingError(note_id)
        vector = await self._embed_query(normalize_search_query(query))
        return SimilarityReport(
            note_id=note.id,
            title=note.title,
            similarity=cosine_similarity(vector, note.embedding),
        )

    async def _embed_query(self, text: str) -> list[float]:
        return await retry_with_linear_backoff(
            lambda: self._embedder.embed(text),
            attempts=self._attempts,
            base_delay=self._base_delay,
            name="search",
        )
