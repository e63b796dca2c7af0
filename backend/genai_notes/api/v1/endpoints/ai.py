from __future__ import annotations

from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends

from genai_notes.api.v1.errors import to_http_exception
from genai_notes.api.v1.schemas.ai import (
    AITextResponse,
    ExpandRequest,
    SummarizeRequest,
    TitleRequest,
)
from genai_notes.core.errors import NotesError
from genai_notes.dependencies import get_ai_assist_service

if TYPE_CHECKING:
    from genai_notes.core.services.completion_service import AIAssistService

# Each call is idempotent from the client's point of view; a failed call is
# retried by sending the same request again.
router = APIRouter(
    responses={
        429: {"description": "AI service rate limit reached"},
        502: {"description": "AI service error or malformed response"},
        503: {"description": "AI service unreachable"},
    }
)


@router.post("/title", response_model=AITextResponse)
async def auto_title(
    payload: TitleRequest,
    ai: AIAssistService = Depends(get_ai_assist_service),
):
    """Generate a title (max 50 characters) from note content."""
    try:
        title = await ai.generate_title(payload.content)
    except NotesError as err:
        raise to_http_exception(err) from err
    return AITextResponse(feature="autoTitle", text=title)


@router.post("/expand", response_model=AITextResponse)
async def expand_shorthand(
    payload: ExpandRequest,
    ai: AIAssistService = Depends(get_ai_assist_service),
):
    """Expand shorthand or bullet points into full note content."""
    try:
        content = await ai.expand_shorthand(payload.shorthand)
    except NotesError as err:
        raise to_http_exception(err) from err
    return AITextResponse(feature="generate", text=content)


@router.post("/summarize", response_model=AITextResponse)
async def summarize(
    payload: SummarizeRequest,
    ai: AIAssistService = Depends(get_ai_assist_service),
):
    try:
        summary = await ai.summarize_note(payload.content)
    except NotesError as err:
        raise to_http_exception(err) from err
    return AITextResponse(feature="summarize", text=summary)
