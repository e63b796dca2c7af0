from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from genai_notes.core.models.note import Note, NoteMatch


class NoteRepository(ABC):
    """Abstract repository interface for notes.

    Contract used by services and dependency injection. Implementations perform
    network I/O and therefore expose async methods. Failures are raised as
    `genai_notes.core.errors` types; empty results are returned, not raised.
    """

    @abstractmethod
    async def create(self, note: Note) -> Note:  # pragma: no cover - interface only
        """Persist a new note and return the stored row."""

    @abstractmethod
    async def get(self, note_id: UUID) -> Note | None:  # pragma: no cover
        """Fetch a note by id or return None if not found."""

    @abstractmethod
    async def list(self, *, limit: int | None = None, tag: str | None = None) -> Sequence[Note]:  # pragma: no cover
        """Return notes ordered by creation time, newest first.

        With `tag`, only notes carrying it; `limit` applies after that filter.
        """

    @abstractmethod
    async def update_fields(self, note_id: UUID, changes: dict) -> Note | None:  # pragma: no cover
        """Partially update a note and return the stored row, or None if missing."""

    @abstractmethod
    async def delete(self, note_id: UUID) -> bool:  # pragma: no cover
        """Delete a note by id. Return True if a row was removed, False otherwise."""

    @abstractmethod
    async def delete_all(self) -> int:  # pragma: no cover
        """Delete every note and return how many rows were removed."""

    @abstractmethod
    async def set_embedding(self, note_id: UUID, embedding: list[float]) -> None:  # pragma: no cover
        """Store the embedding vector of a note."""

    @abstractmethod
    async def list_for_embedding(self, *, missing_only: bool = True) -> Sequence[Note]:  # pragma: no cover
        """Return notes oldest first, optionally only those without an embedding."""

    @abstractmethod
    async def match_notes(
        self,
        *,
        query_embedding: list[float],
        match_threshold: float,
        match_count: int,
        exclude_id: UUID | None = None,
    ) -> Sequence[NoteMatch]:  # pragma: no cover
        """Run the similarity match RPC; rows come back by descending similarity."""


class AIUsageRepository(ABC):
    """Append-only log of AI feature invocations."""

    @abstractmethod
    async def log(self, feature: str) -> None:  # pragma: no cover
        """Append one usage event."""

    @abstractmethod
    async def list_features(self) -> Sequence[str]:  # pragma: no cover
        """Return the feature name of every logged event."""
