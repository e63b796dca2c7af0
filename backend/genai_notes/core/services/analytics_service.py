from __future__ import annotations

from collections import Counter
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import ValidationError

from genai_notes.config import settings
from genai_notes.core.errors import NotesError, NoteValidationError
from genai_notes.core.models.base import ensure_utc, utc_now
from genai_notes.core.models.note import AI_FEATURES
from genai_notes.core.schemas.analytics import AnalyticsSnapshot, DayCount, TagUsage
from genai_notes.core.services.tag_service import count_tags
from genai_notes.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from genai_notes.core.models.note import Note
    from genai_notes.core.repositories.note_repository import AIUsageRepository, NoteRepository

logger = get_logger(__name__)

TRAILING_DAYS = 7
TOP_TAG_LIMIT = 10


def resolve_timezone(name: str | None) -> ZoneInfo:
    try:
        return ZoneInfo(name or settings.analytics_timezone)
    except (ZoneInfoNotFoundError, ValueError, OSError) as err:
        # tzdata turns over-long or odd keys into OSError rather than a lookup miss
        raise NoteValidationError({"tz": f"Unknown timezone: {name}"}) from err


def last_n_dates(n: int, today: date) -> list[str]:
    """ISO dates of the trailing `n` days ending today, oldest first."""
    return [(today - timedelta(days=offset)).isoformat() for offset in range(n - 1, -1, -1)]


def local_date(timestamp: datetime, tz: ZoneInfo) -> str:
    return ensure_utc(timestamp).astimezone(tz).date().isoformat()


def notes_per_day(
    notes: Iterable[Note],
    *,
    tz: ZoneInfo,
    today: date,
    days: int = TRAILING_DAYS,
) -> list[DayCount]:
    window = last_n_dates(days, today)
    per_day = Counter(local_date(note.created_at, tz) for note in notes)
    return [DayCount(date=day, count=per_day.get(day, 0)) for day in window]


def count_ai_usage(features: Iterable[str]) -> dict[str, int]:
    """Per-feature call counts; unknown feature names are ignored."""
    usage = dict.fromkeys(AI_FEATURES, 0)
    for feature in features:
        if feature in usage:
            usage[feature] += 1
    return usage


def top_tags(tag_counts: dict[str, int], limit: int = TOP_TAG_LIMIT) -> list[TagUsage]:
    # sorted() is stable, so ties keep first-seen order
    ranked = sorted(tag_counts.items(), key=lambda item: item[1], reverse=True)
    return [TagUsage(tag=tag, count=count) for tag, count in ranked[:limit]]


def build_analytics(
    notes: Sequence[Note],
    features: Iterable[str],
    *,
    tz: ZoneInfo,
    today: date,
) -> AnalyticsSnapshot:
    """Recompute every statistic from the current collection and usage log."""
    tag_counts = count_tags(notes)
    return AnalyticsSnapshot(
        total_notes=len(notes),
        total_tags=len(tag_counts),
        notes_per_day=notes_per_day(notes, tz=tz, today=today),
        ai_usage=count_ai_usage(features),
        top_tags=top_tags(tag_counts),
        tag_counts=tag_counts,
    )


class AnalyticsSnapshotCache:
    """Last computed snapshot, kept on disk as a fallback display source."""

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path or settings.analytics_cache_path)

    def load(self) -> AnalyticsSnapshot | None:
        if not self._path.exists():
            return None
        try:
            return AnalyticsSnapshot.model_validate_json(self._path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as err:
            logger.warning("Ignoring unreadable analytics cache %s: %s", self._path, err)
            return None

    def save(self, snapshot: AnalyticsSnapshot) -> None:
        try:
            self._path.write_text(snapshot.model_dump_json(), encoding="utf-8")
        except OSError as err:
            logger.warning("Failed to write analytics cache %s: %s", self._path, err)


class AnalyticsService:
    """Builds the analytics view from the notes collection and the AI usage log."""

    def __init__(
        self,
        note_repo: NoteRepository,
        usage_repo: AIUsageRepository,
        cache: AnalyticsSnapshotCache | None = None,
    ) -> None:
        self._notes = note_repo
        self._usage = usage_repo
        self._cache = cache or AnalyticsSnapshotCache()

    async def snapshot(self, *, tz_name: str | None = None, today: date | None = None) -> AnalyticsSnapshot:
        tz = resolve_timezone(tz_name)
        today = today or utc_now().astimezone(tz).date()
        notes = await self._notes.list()

        usage_error = None
        try:
            features = await self._usage.list_features()
        except NotesError as err:
            logger.error("Failed to load AI usage data: %s", err.message)
            usage_error = "Failed to load AI usage data"
            features = []

        snapshot = build_analytics(notes, features, tz=tz, today=today)
        if usage_error is None:
            self._cache.save(snapshot)
            return snapshot

        cached = self._cache.load()
        if cached is not None:
            snapshot.ai_usage = cached.ai_usage
        snapshot.ai_usage_error = usage_error
        return snapshot
