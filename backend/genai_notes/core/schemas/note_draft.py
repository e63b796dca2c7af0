from __future__ import annotations

from pydantic import Field, field_validator

from genai_notes.core.models.base import AppBaseModel
from genai_notes.core.models.note import TITLE_MAX_LENGTH, normalize_tags

TITLE_REQUIRED = "Title is required"
CONTENT_REQUIRED = "Content is required"
TAGS_REQUIRED = "At least one tag is required"


class NoteDraft(AppBaseModel):
    """State of the note form before submission.

    A draft may be incomplete; `validation_errors` reports one message per
    missing field and `can_submit` gates the submit action. At least one tag
    is required.
    """

    title: str = Field(default="", max_length=TITLE_MAX_LENGTH)
    content: str = ""
    tags: list[str] = Field(default_factory=list)
    # Scratch input for the expand-shorthand helper; never stored
    shorthand: str = ""

    @field_validator("title", "content", "shorthand", mode="before")
    @classmethod
    def coerce_null_text(cls, v: str | None) -> str:
        return v if v is not None else ""

    @field_validator("tags", mode="before")
    @classmethod
    def coerce_null_tags(cls, v: list[str] | None) -> list[str]:
        return [] if v is None else v

    @field_validator("tags")
    @classmethod
    def validate_tags(cls, v: list[str]) -> list[str]:
        return normalize_tags(v)

    def validation_errors(self) -> dict[str, str]:
        errors: dict[str, str] = {}
        if not self.title.strip():
            errors["title"] = TITLE_REQUIRED
        if not self.content.strip():
            errors["content"] = CONTENT_REQUIRED
        if not self.tags:
            errors["tags"] = TAGS_REQUIRED
        return errors

    @property
    def can_submit(self) -> bool:
        return not self.validation_errors()

    def add_tag(self, tag: str) -> None:
        self.tags = normalize_tags([*self.tags, tag])

    def remove_tag(self, tag: str) -> None:
        self.tags = [t for t in self.tags if t != tag]

    def clear(self) -> None:
        """Reset the form after a successful submission."""
        self.title = ""
        self.content = ""
        self.tags = []
        self.shorthand = ""
