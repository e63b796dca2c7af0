from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends

from genai_notes.api.v1.errors import to_http_exception
from genai_notes.core.errors import NotesError
from genai_notes.core.schemas.analytics import AnalyticsSnapshot
from genai_notes.dependencies import get_analytics_service

if TYPE_CHECKING:
    from genai_notes.core.services.analytics_service import AnalyticsService

router = APIRouter()


@router.get("/", response_model=AnalyticsSnapshot)
async def get_analytics(
    tz: str | None = None,
    service: AnalyticsService = Depends(get_analytics_service),
) -> AnalyticsSnapshot:
    """Notes per day over the last week, AI feature usage and tag popularity.

    `tz` is an IANA zone name used to bucket notes by local calendar date.
    """
    try:
        return await service.snapshot(tz_name=tz)
    except NotesError as err:
        raise to_http_exception(err) from err
