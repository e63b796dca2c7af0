from __future__ import annotations

from typing import TYPE_CHECKING, Any

from genai_notes.core.repositories.note_repository import AIUsageRepository
from genai_notes.db.base import run_supabase

if TYPE_CHECKING:
    from collections.abc import Sequence

    from supabase import Client


class SupabaseAIUsageRepository(AIUsageRepository):
    """AI usage log stored in the `ai_usage` table (one row per call)."""

    TABLE_NAME = "ai_usage"

    def __init__(self, client: Client) -> None:
        self._client: Client = client

    async def log(self, feature: str) -> None:
        await run_supabase(
            lambda: self._client.table(self.TABLE_NAME)
            .insert({"feature": feature})
            .execute()
        )

    async def list_features(self) -> Sequence[str]:
        resp = await run_supabase(
            lambda: self._client.table(self.TABLE_NAME).select("feature").execute()
        )
        rows: list[dict[str, Any]] = resp.data or []
        return [r["feature"] for r in rows if isinstance(r.get("feature"), str)]
