from __future__ import annotations

from pydantic import Field

from genai_notes.core.models.base import AppBaseModel


class DayCount(AppBaseModel):
    date: str
    count: int


class TagUsage(AppBaseModel):
    tag: str
    count: int


class AnalyticsSnapshot(AppBaseModel):
    """Derived view over the notes collection and the AI usage log.

    Never stored as an entity of its own; the on-disk cache only keeps the
    last one as a fallback display source.
    """

    total_notes: int = 0
    total_tags: int = 0
    notes_per_day: list[DayCount] = Field(default_factory=list)
    ai_usage: dict[str, int] = Field(
        default_factory=lambda: {"summarize": 0, "autoTitle": 0, "generate": 0}
    )
    top_tags: list[TagUsage] = Field(default_factory=list)
    tag_counts: dict[str, int] = Field(default_factory=dict)
    ai_usage_error: str | None = None
