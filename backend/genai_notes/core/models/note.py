from __future__ import annotations

from datetime import datetime  # noqa: TCH003
from typing import Literal
from uuid import UUID, uuid4

from pydantic import Field, field_validator

from genai_notes.config import settings

from .base import AppBaseModel, utc_now

TITLE_MAX_LENGTH = 100

AIFeature = Literal["summarize", "autoTitle", "generate"]
AI_FEATURES: tuple[str, ...] = ("summarize", "autoTitle", "generate")


def normalize_tags(tags: list[str] | None) -> list[str]:
    """Strip, drop empties and duplicates; keep the order tags were entered in."""
    normalized: list[str] = []
    for tag in tags or []:
        cleaned = tag.strip()
        if cleaned and cleaned not in normalized:
            normalized.append(cleaned)
    return normalized


class Note(AppBaseModel):
    """Note domain model, as stored in the `notes` table."""

    id: UUID = Field(default_factory=uuid4, description="Unique note identifier")
    title: str = Field(default="", description="Note title")
    content: str = Field(default="", description="Note content")
    tags: list[str] = Field(default_factory=list, description="Tags in the order they were entered")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime | None = None

    # pgvector column, produced externally by the embedding model
    embedding: list[float] | None = Field(
        default=None,
        description="Vector embedding used by the match_notes similarity RPC",
    )

    @field_validator("title", "content", mode="before")
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

    @field_validator("embedding")
    @classmethod
    def validate_embedding(cls, v: list[float] | None) -> list[float] | None:
        """Validate embedding dimensions."""
        if v is not None and len(v) != settings.embedding_dimensions:
            raise ValueError(
                f"Embedding must be {settings.embedding_dimensions}-dimensional"
            )
        return v

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "id": str(uuid4()),
                    "title": "Welcome to GenAI Notes!",
                    "content": "This is a demo note. You can edit or delete it, or create your own.",
                    "tags": ["demo", "welcome"],
                }
            ]
        }
    }


class NoteMatch(AppBaseModel):
    """A note returned by the similarity match RPC together with its score."""

    note: Note
    similarity: float


class AIUsageEvent(AppBaseModel):
    """One logged invocation of an AI-assisted feature."""

    feature: AIFeature
    created_at: datetime | None = None
