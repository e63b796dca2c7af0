from __future__ import annotations

import asyncio
from functools import lru_cache
from typing import TYPE_CHECKING, Any

import httpx
from postgrest.exceptions import APIError
from supabase import Client, create_client
from supabase.lib.client_options import ClientOptions

from genai_notes.config import settings
from genai_notes.core.errors import (
    NotesError,
    ServiceAuthError,
    ServiceUnavailableError,
    UpstreamError,
)
from genai_notes.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Callable

logger = get_logger(__name__)

_AUTH_ERROR_CODES = {"401", "403", "42501", "PGRST301", "PGRST302"}


@lru_cache(maxsize=1)
def get_supabase_admin_client() -> Client:
    """Return a cached Supabase admin client using the service role key.

    Background jobs and utility scripts use it to write embeddings.
    """
    logger.debug("Initializing Supabase admin client")
    if not settings.supabase_service_role_key:
        raise RuntimeError("supabase_service_role_key is required for admin client")
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )


def create_request_supabase_client(bearer_token: str | None = None) -> Client:
    """Create a request-scoped Supabase client using the anon key.

    If a JWT is provided, set it as the PostgREST bearer so that RLS policies
    apply to the table/rpc operations of this request.
    """
    logger.debug("Creating request-scoped Supabase client")
    anon_key = settings.supabase_anon_key
    if not anon_key:
        raise RuntimeError("supabase_anon_key is required for request client")

    client = create_client(
        settings.supabase_url,
        anon_key,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
    if bearer_token:
        client.postgrest.auth(bearer_token)
    return client


def classify_supabase_error(err: Exception) -> NotesError:
    """Map a PostgREST/transport failure onto the domain error taxonomy."""
    if isinstance(err, httpx.TransportError):
        return ServiceUnavailableError(f"Could not reach the database: {err}")
    if isinstance(err, APIError):
        code = str(err.code or "")
        message = err.message or str(err)
        lowered = message.lower()
        if code in _AUTH_ERROR_CODES or "jwt" in lowered or "permission denied" in lowered:
            return ServiceAuthError(f"Database authorization failed: {message}")
        return UpstreamError(f"Database error: {message}")
    return UpstreamError(f"Database error: {err}")


async def run_supabase(func: Callable[[], Any]) -> Any:
    """Run a blocking supabase-py call in a worker thread, mapping its failures."""
    try:
        return await asyncio.to_thread(func)
    except (APIError, httpx.TransportError) as err:
        mapped = classify_supabase_error(err)
        logger.error("Supabase call failed: %s", mapped.message, extra={"error_type": type(err).__name__})
        raise mapped from err
