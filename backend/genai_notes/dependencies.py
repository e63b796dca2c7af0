from __future__ import annotations

from functools import lru_cache
from typing import TYPE_CHECKING

from fastapi import Depends, Request

from genai_notes.core.repositories.implementations.supabase.ai_usage_repository import (
    SupabaseAIUsageRepository,
)
from genai_notes.core.repositories.implementations.supabase.note_repository import (
    SupabaseNoteRepository,
)
from genai_notes.core.services.analytics_service import AnalyticsService, AnalyticsSnapshotCache
from genai_notes.core.services.completion_service import AIAssistService, CompletionClient
from genai_notes.core.services.embedding_service import EmbeddingClient
from genai_notes.core.services.note_service import NoteService
from genai_notes.core.services.search_service import SearchService
from genai_notes.db.base import create_request_supabase_client
from genai_notes.utils.logging import get_logger
from genai_notes.utils.openai_client import get_openai_client

logger = get_logger(__name__)

if TYPE_CHECKING:
    from supabase import Client

    from genai_notes.core.repositories.note_repository import AIUsageRepository, NoteRepository


def get_request_supabase_client(request: Request) -> Client:
    """Create a request-scoped Supabase client.

    Forwards an `Authorization: Bearer <jwt>` header to PostgREST when the
    caller sends one, so row-level security applies to that user.
    """
    auth_header = request.headers.get("authorization")
    jwt: str | None = None
    if auth_header and auth_header.lower().startswith("bearer "):
        jwt = auth_header.split(" ", 1)[1].strip()
    return create_request_supabase_client(jwt)


def get_note_repository(client: Client = Depends(get_request_supabase_client)) -> NoteRepository:
    return SupabaseNoteRepository(client)


def get_ai_usage_repository(client: Client = Depends(get_request_supabase_client)) -> AIUsageRepository:
    return SupabaseAIUsageRepository(client)


def get_embedding_client() -> EmbeddingClient:
    return EmbeddingClient(get_openai_client())


def get_completion_client() -> CompletionClient:
    return CompletionClient(get_openai_client())


@lru_cache(maxsize=1)
def get_analytics_cache() -> AnalyticsSnapshotCache:
    return AnalyticsSnapshotCache()


def get_note_service(repo: NoteRepository = Depends(get_note_repository)) -> NoteService:
    return NoteService(repo)


def get_search_service(
    repo: NoteRepository = Depends(get_note_repository),
    embedder: EmbeddingClient = Depends(get_embedding_client),
) -> SearchService:
    return SearchService(repo, embedder)


def get_ai_assist_service(
    completion: CompletionClient = Depends(get_completion_client),
    usage_repo: AIUsageRepository = Depends(get_ai_usage_repository),
) -> AIAssistService:
    return AIAssistService(completion, usage_repo)


def get_analytics_service(
    note_repo: NoteRepository = Depends(get_note_repository),
    usage_repo: AIUsageRepository = Depends(get_ai_usage_repository),
    cache: AnalyticsSnapshotCache = Depends(get_analytics_cache),
) -> AnalyticsService:
    return AnalyticsService(note_repo, usage_repo, cache)
