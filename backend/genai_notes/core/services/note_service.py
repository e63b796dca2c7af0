from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID, uuid4

from genai_notes.core.errors import NoteValidationError
from genai_notes.core.models.base import utc_now
from genai_notes.core.models.note import Note
from genai_notes.core.schemas.note_draft import (
    CONTENT_REQUIRED,
    TAGS_REQUIRED,
    TITLE_REQUIRED,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from genai_notes.api.v1.schemas.note import NoteUpdate
    from genai_notes.core.repositories.note_repository import NoteRepository
    from genai_notes.core.schemas.note_draft import NoteDraft


class NoteService:
    """Service for managing notes.

    Writes go straight to the repository and the stored row it returns is the
    only thing handed back to callers; nothing is cached between requests.
    """

    def __init__(self, repo: NoteRepository) -> None:
        self._repo = repo

    async def create_note(self, draft: NoteDraft) -> Note:
        """Create a note from a submitted form, rejecting missing fields."""
        errors = draft.validation_errors()
        if errors:
            raise NoteValidationError(errors)

        note = Note(
            id=uuid4(),
            title=draft.title.strip(),
            content=draft.content.strip(),
            tags=draft.tags,
            created_at=utc_now(),
        )
        return await self._repo.create(note)

    async def get_note(self, note_id: str | UUID) -> Note | None:
        try:
            note_uuid = UUID(str(note_id))
        except ValueError:
            return None
        return await self._repo.get(note_uuid)

    async def list_notes(self, *, tag: str | None = None, limit: int | None = None) -> Sequence[Note]:
        """List notes newest first, optionally only those carrying `tag`."""
        return await self._repo.list(limit=limit, tag=tag or None)

    async def update_note(self, note_id: str | UUID, update_dto: NoteUpdate) -> Note | None:
        """Apply a resubmitted edit form.

        Fields that are sent must stay non-empty, same as on creation.
        """
        existing = await self.get_note(note_id)
        if not existing:
            return None

        raw_changes = update_dto.model_dump(exclude_unset=True)
        changes: dict = {}
        errors: dict[str, str] = {}
        for key in ("title", "content"):
            if key not in raw_changes:
                continue
            value = (raw_changes[key] or "").strip()
            if not value:
                errors[key] = TITLE_REQUIRED if key == "title" else CONTENT_REQUIRED
            changes[key] = value
        if "tags" in raw_changes:
            if not raw_changes["tags"]:
                errors["tags"] = TAGS_REQUIRED
            changes["tags"] = raw_changes["tags"] or []
        if errors:
            raise NoteValidationError(errors)

        return await self._repo.update_fields(existing.id, changes)

    async def delete_note(self, note_id: str | UUID) -> bool:
        note = await self.get_note(note_id)
        if not note:
            return False
        return await self._repo.delete(note.id)
