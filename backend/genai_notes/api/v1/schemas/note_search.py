from __future__ import annotations

from datetime import datetime  # noqa: TCH003
from uuid import UUID  # noqa: TCH003

from pydantic import Field, field_validator

from genai_notes.core.models.base import AppBaseModel


class SemanticSearchRequest(AppBaseModel):
    query: str = Field(..., description="Free-text query, matched by meaning")
    limit: int | None = Field(default=None)

    @field_validator("limit")
    @classmethod
    def validate_limit(cls, v: int | None) -> int | None:
        if v is None:
            return v
        return max(1, min(50, v))


class NoteMatchPublic(AppBaseModel):
    id: UUID
    title: str
    content: str
    tags: list[str]
    created_at: datetime
    similarity: float


class SemanticSearchResponse(AppBaseModel):
    query: str
    normalized_query: str
    threshold: float
    results: list[NoteMatchPublic]
    empty_message: str | None = None


class SimilarityDebugRequest(AppBaseModel):
    query: str = Field(..., min_length=1)
    note_id: UUID


class SimilarityDebugResponse(AppBaseModel):
    note_id: UUID
    title: str
    similarity: float
    distance: float
