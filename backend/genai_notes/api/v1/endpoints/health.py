from __future__ import annotations

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from genai_notes.config import settings
from genai_notes.core.errors import NotesError
from genai_notes.db.base import create_request_supabase_client, run_supabase

router = APIRouter()

SERVICE_NAME = "genai-notes-api"
VERSION = "0.1.0"


@router.get("/")
async def health_check():
    """Health check endpoint."""
    return JSONResponse(
        status_code=status.HTTP_200_OK,
        content={
            "status": "healthy",
            "service": SERVICE_NAME,
            "version": VERSION,
        }
    )


@router.get("/ready")
async def readiness_check():
    """Readiness check; queries the notes table."""
    db_status = "connected"
    ready = True
    try:
        client = create_request_supabase_client()
        await run_supabase(lambda: client.table("notes").select("id").limit(1).execute())
    except NotesError as e:
        db_status = f"error: {e.message}"
        ready = False

    return JSONResponse(
        status_code=status.HTTP_200_OK if ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if ready else "degraded",
            "database": db_status,
            "completion_model": settings.completion_model,
            "embedding_model": settings.embedding_model,
            "api_prefix": settings.api_prefix,
        }
    )
