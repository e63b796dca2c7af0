from __future__ import annotations

from typing import TYPE_CHECKING, Any

from genai_notes.core.errors import MalformedResponseError
from genai_notes.core.models.note import Note, NoteMatch
from genai_notes.core.repositories.note_repository import NoteRepository
from genai_notes.db.base import run_supabase
from genai_notes.utils.logging import get_logger

logger = get_logger(__name__)

NIL_UUID = "00000000-0000-0000-0000-000000000000"

if TYPE_CHECKING:
    from collections.abc import Sequence
    from uuid import UUID

    from supabase import Client


class SupabaseNoteRepository(NoteRepository):
    """Supabase implementation of the NoteRepository.

    Uses PostgREST for CRUD on the `notes` table and the `match_notes` RPC
    (pgvector) for similarity search.
    """

    TABLE_NAME = "notes"
    MATCH_RPC = "match_notes"
    NOTE_FIELDS = frozenset(Note.model_fields)

    def __init__(self, client: Client) -> None:
        self._client: Client = client

    async def create(self, note: Note) -> Note:
        row = self._note_to_row(note)
        resp = await run_supabase(
            lambda: self._client.table(self.TABLE_NAME)
            .insert(row)
            .execute()
        )
        data = self._first(resp.data)
        if not data:
            raise MalformedResponseError("Database did not return the created note")
        return self._row_to_note(data)

    async def get(self, note_id: UUID) -> Note | None:
        resp = await run_supabase(
            lambda: self._client.table(self.TABLE_NAME)
            .select("*")
            .eq("id", str(note_id))
            .limit(1)
            .execute()
        )
        items = resp.data or []
        if not items:
            return None
        return self._row_to_note(items[0])

    async def list(self, *, limit: int | None = None, tag: str | None = None) -> Sequence[Note]:
        def _query():
            q = self._client.table(self.TABLE_NAME).select("id, title, content, tags, created_at, updated_at")
            if tag:
                q = q.contains("tags", [tag])
            q = q.order("created_at", desc=True)
            if limit is not None:
                q = q.limit(limit)
            return q.execute()

        resp = await run_supabase(_query)
        items = resp.data or []
        return [self._row_to_note(i) for i in items]

    async def update_fields(self, note_id: UUID, changes: dict) -> Note | None:
        sanitized: dict[str, Any] = {
            k: v for k, v in (changes or {}).items() if k not in {"id", "created_at", "embedding"}
        }
        if not sanitized:
            return await self.get(note_id)

        resp = await run_supabase(
            lambda: self._client.table(self.TABLE_NAME)
            .update(sanitized)
            .eq("id", str(note_id))
            .execute()
        )
        items = resp.data or []
        if not items:
            return None
        return self._row_to_note(items[0])

    async def delete(self, note_id: UUID) -> bool:
        resp = await run_supabase(
            lambda: self._client.table(self.TABLE_NAME)
            .delete()
            .eq("id", str(note_id))
            .execute()
        )
        items = resp.data or []
        return len(items) > 0

    async def delete_all(self) -> int:
        # PostgREST refuses an unfiltered delete; the nil UUID matches no real note
        resp = await run_supabase(
            lambda: self._client.table(self.TABLE_NAME)
            .delete()
            .neq("id", NIL_UUID)
            .execute()
        )
        return len(resp.data or [])

    async def set_embedding(self, note_id: UUID, embedding: list[float]) -> None:
        await run_supabase(
            lambda: self._client.table(self.TABLE_NAME)
            .update({"embedding": embedding})
            .eq("id", str(note_id))
            .execute()
        )

    async def list_for_embedding(self, *, missing_only: bool = True) -> Sequence[Note]:
        def _query():
            q = self._client.table(self.TABLE_NAME).select("id, title, content, tags, created_at")
            if missing_only:
                q = q.is_("embedding", "null")
            return q.order("created_at", desc=False).execute()

        resp = await run_supabase(_query)
        return [self._row_to_note(i) for i in (resp.data or [])]

    async def match_notes(
        self,
        *,
        query_embedding: list[float],
        match_threshold: float,
        match_count: int,
        exclude_id: UUID | None = None,
    ) -> Sequence[NoteMatch]:
        params: dict[str, Any] = {
            "query_embedding": query_embedding,
            "match_threshold": match_threshold,
            "match_count": match_count,
            "exclude_id": str(exclude_id) if exclude_id else None,
        }
        resp = await run_supabase(lambda: self._client.rpc(self.MATCH_RPC, params).execute())
        rows: list[dict[str, Any]] = resp.data or []
        matches = [self._row_to_match(r) for r in rows]
        return sorted(matches, key=lambda m: m.similarity, reverse=True)

    @staticmethod
    def _first(data: Any) -> dict[str, Any]:
        if isinstance(data, list) and data:
            return data[0]
        if isinstance(data, dict):
            return data
        return {}

    @staticmethod
    def _parse_vector_string(vector: Any) -> list[float] | None:
        """Parse a pgvector value into list[float].

        PostgREST returns vectors as strings like '[0.1,0.2,0.3]'.
        """
        if vector is None or isinstance(vector, list):
            return vector

        try:
            cleaned = str(vector).strip("[]")
            if not cleaned:
                return None
            return [float(x.strip()) for x in cleaned.split(",")]
        except (ValueError, TypeError) as e:
            logger.warning("Failed to parse vector string: %s", e)
            return None

    @classmethod
    def _row_to_note(cls, row: dict[str, Any]) -> Note:
        # Drop columns the model does not know about (e.g. similarity, owner columns)
        normalized = {k: v for k, v in row.items() if k in cls.NOTE_FIELDS}
        if "embedding" in normalized:
            normalized["embedding"] = cls._parse_vector_string(normalized["embedding"])
        if normalized.get("tags") is None:
            normalized["tags"] = []
        return Note.model_validate(normalized)

    @classmethod
    def _row_to_match(cls, row: dict[str, Any]) -> NoteMatch:
        return NoteMatch(note=cls._row_to_note(row), similarity=float(row.get("similarity") or 0.0))

    @staticmethod
    def _note_to_row(note: Note) -> dict[str, Any]:
        data = note.model_dump(mode="json", exclude={"updated_at"})
        if data.get("embedding") is None:
            data.pop("embedding", None)
        return data
