from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING
from urllib.parse import urlencode

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from genai_notes.background.embedding import generate_and_store_note_embedding
from genai_notes.config import settings
from genai_notes.core.errors import NotesError, NoteValidationError
from genai_notes.core.models.note import TITLE_MAX_LENGTH
from genai_notes.core.schemas.note_draft import NoteDraft
from genai_notes.core.services.tag_service import build_tag_filter_view
from genai_notes.dependencies import (
    get_analytics_service,
    get_embedding_client,
    get_note_repository,
    get_note_service,
)
from genai_notes.utils.logging import get_logger

if TYPE_CHECKING:
    from genai_notes.core.repositories.note_repository import NoteRepository
    from genai_notes.core.services.analytics_service import AnalyticsService
    from genai_notes.core.services.embedding_service import EmbeddingClient
    from genai_notes.core.services.note_service import NoteService

logger = get_logger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))

router = APIRouter(include_in_schema=False)

NAV_ITEMS = [("/notes", "Notes"), ("/analytics", "Analytics")]


def _render(request: Request, template_name: str, **context) -> HTMLResponse:
    ctx = {
        "nav_items": NAV_ITEMS,
        "current_path": request.url.path,
        "api_prefix": settings.api_prefix,
        **context,
    }
    return templates.TemplateResponse(request, template_name, ctx)


def render_error_page(request: Request) -> HTMLResponse:
    """Generic reload prompt so an unexpected failure never leaves a blank page."""
    response = _render(request, "error.html")
    response.status_code = 500
    return response


def _notes_url(tag: str | None = None) -> str:
    return f"/notes?{urlencode({'tag': tag})}" if tag else "/notes"


async def _render_workspace(
    request: Request,
    service: NoteService,
    tag: str | None = None,
    *,
    draft: NoteDraft | None = None,
    form_errors: dict[str, str] | None = None,
    error: str | None = None,
    status_code: int = status.HTTP_200_OK,
) -> HTMLResponse:
    notes = []
    try:
        notes = await service.list_notes()
    except NotesError as err:
        logger.error("Failed to load notes for workspace: %s", err.message)
        error = error or err.message
    view = build_tag_filter_view(notes, tag)
    response = _render(
        request,
        "notes.html",
        view=view,
        error=error,
        draft=draft or NoteDraft(),
        form_errors=form_errors or {},
    )
    response.status_code = status_code
    return response


@router.get("/", response_class=HTMLResponse)
async def landing_page(request: Request):
    return _render(request, "landing.html")


@router.get("/notes", response_class=HTMLResponse)
async def notes_page(
    request: Request,
    tag: str | None = None,
    service: NoteService = Depends(get_note_service),
):
    """Notes workspace: the new-note form, the tag filter bar and the (filtered) list."""
    return await _render_workspace(request, service, tag)


@router.post("/notes", response_class=HTMLResponse)
async def create_note_from_form(
    request: Request,
    background_tasks: BackgroundTasks,
    title: str = Form(""),
    content: str = Form(""),
    tags: str = Form(""),
    service: NoteService = Depends(get_note_service),
    repo: NoteRepository = Depends(get_note_repository),
    embedder: EmbeddingClient = Depends(get_embedding_client),
):
    """Submit the new-note form. Tags arrive comma separated.

    On a rejected submission the form is shown again with what was typed.
    """
    draft = NoteDraft(title=title[:TITLE_MAX_LENGTH], content=content, tags=tags.split(","))
    try:
        note = await service.create_note(draft)
    except NoteValidationError as err:
        return await _render_workspace(
            request,
            service,
            draft=draft,
            form_errors=err.errors,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )
    except NotesError as err:
        logger.error("Failed to create note from form: %s", err.message)
        return await _render_workspace(
            request,
            service,
            draft=draft,
            error=err.message,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE if err.retryable else status.HTTP_502_BAD_GATEWAY,
        )

    # Returned responses pick up the request's background tasks
    background_tasks.add_task(
        generate_and_store_note_embedding,
        note_id=note.id,
        title=note.title,
        content=note.content,
        repo=repo,
        embedder=embedder,
    )
    return RedirectResponse(_notes_url(), status_code=status.HTTP_303_SEE_OTHER)


@router.get("/notes/{note_id}/delete", response_class=HTMLResponse)
async def confirm_delete_page(
    request: Request,
    note_id: str,
    tag: str | None = None,
    service: NoteService = Depends(get_note_service),
):
    """Ask before deleting; nothing is removed until the form is posted."""
    try:
        note = await service.get_note(note_id)
    except NotesError as err:
        logger.error("Failed to load note %s for deletion: %s", note_id, err.message)
        return await _render_workspace(request, service, tag, error=err.message)
    if note is None:
        return RedirectResponse(_notes_url(tag), status_code=status.HTTP_303_SEE_OTHER)
    return _render(request, "confirm_delete.html", note=note, tag=tag or "")


@router.post("/notes/{note_id}/delete")
async def delete_note_from_form(
    request: Request,
    note_id: str,
    tag: str = Form(""),
    service: NoteService = Depends(get_note_service),
):
    try:
        deleted = await service.delete_note(note_id)
    except NotesError as err:
        logger.error("Failed to delete note %s: %s", note_id, err.message)
        return await _render_workspace(request, service, tag or None, error=err.message)
    if not deleted:
        logger.info("Note %s was already gone", note_id)
    return RedirectResponse(_notes_url(tag or None), status_code=status.HTTP_303_SEE_OTHER)


@router.get("/analytics", response_class=HTMLResponse)
async def analytics_page(
    request: Request,
    tz: str | None = None,
    service: AnalyticsService = Depends(get_analytics_service),
):
    error = None
    snapshot = None
    try:
        snapshot = await service.snapshot(tz_name=tz)
    except NotesError as err:
        logger.error("Failed to build analytics view: %s", err.message)
        error = err.message
    return _render(request, "analytics.html", snapshot=snapshot, error=error)
