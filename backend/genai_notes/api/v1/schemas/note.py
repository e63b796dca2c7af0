from __future__ import annotations

from datetime import datetime  # noqa: TCH003
from uuid import UUID  # noqa: TCH003

from pydantic import Field, field_validator

from genai_notes.core.models.base import AppBaseModel
from genai_notes.core.models.note import TITLE_MAX_LENGTH, normalize_tags
from genai_notes.core.schemas.note_draft import NoteDraft


class NoteCreate(NoteDraft):
    """Submitted note form. Required fields are checked by `NoteService`."""


class NoteUpdate(AppBaseModel):
    """Resubmitted edit form; only the fields sent are changed."""

    title: str | None = Field(default=None, max_length=TITLE_MAX_LENGTH)
    content: str | None = None
    tags: list[str] | None = None

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        return normalize_tags(v)


class NoteRead(AppBaseModel):
    id: UUID
    title: str
    content: str
    tags: list[str]
    created_at: datetime
    updated_at: datetime | None = None


class NoteDraftValidation(AppBaseModel):
    """Whether a draft may be submitted, and why not."""

    can_submit: bool
    errors: dict[str, str] = Field(default_factory=dict)


class TagCount(AppBaseModel):
    tag: str
    count: int


class TagFilterRead(AppBaseModel):
    total: int
    selected_tag: str | None = None
    tags: list[TagCount]
    showing: int
    status: str | None = None
    empty_message: str | None = None
