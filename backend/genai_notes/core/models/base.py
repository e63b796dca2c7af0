from __future__ import annotations

from datetime import UTC, datetime

from pydantic import BaseModel as PydanticBaseModel
from pydantic import ConfigDict


def utc_now() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive timestamps (rows written without an offset) as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


class AppBaseModel(PydanticBaseModel):
    """Shared config for domain models, DTOs and derived views.

    Assignments are validated so that mutating helpers (e.g. draft tag edits)
    go through the same normalization as construction.
    """

    model_config = ConfigDict(
        from_attributes=True,
        extra="forbid",
        populate_by_name=True,
        validate_assignment=True,
    )
