from __future__ import annotations

from pydantic import Field

from genai_notes.core.models.base import AppBaseModel
from genai_notes.core.models.note import Note  # noqa: TCH001


class TagFilterView(AppBaseModel):
    """Tag vocabulary of the current collection and the notes a filter selects.

    - tag_counts: tag -> number of notes carrying it, in first-seen order
    - notes: the subset matching `selected_tag` (everything when unset)
    """

    total: int = 0
    selected_tag: str | None = None
    tag_counts: dict[str, int] = Field(default_factory=dict)
    notes: list[Note] = Field(default_factory=list)
    status: str | None = None
    empty_message: str | None = None
