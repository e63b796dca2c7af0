from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TCH003

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status

from genai_notes.api.v1.errors import to_http_exception
from genai_notes.api.v1.schemas.ai import AITextResponse
from genai_notes.api.v1.schemas.note import (
    NoteCreate,
    NoteDraftValidation,
    NoteRead,
    NoteUpdate,
    TagCount,
    TagFilterRead,
)
from genai_notes.api.v1.schemas.note_search import (
    NoteMatchPublic,
    SemanticSearchRequest,
    SemanticSearchResponse,
    SimilarityDebugRequest,
    SimilarityDebugResponse,
)
from genai_notes.background.embedding import generate_and_store_note_embedding
from genai_notes.core.errors import NoteNotFoundError, NotesError
from genai_notes.core.schemas.note_draft import NoteDraft
from genai_notes.core.services.tag_service import build_tag_filter_view
from genai_notes.dependencies import (
    get_ai_assist_service,
    get_embedding_client,
    get_note_repository,
    get_note_service,
    get_search_service,
)

if TYPE_CHECKING:
    from genai_notes.core.models.note import NoteMatch
    from genai_notes.core.repositories.note_repository import NoteRepository
    from genai_notes.core.services.completion_service import AIAssistService
    from genai_notes.core.services.embedding_service import EmbeddingClient
    from genai_notes.core.services.note_service import NoteService
    from genai_notes.core.services.search_service import SearchService

router = APIRouter()

NO_SEARCH_RESULTS = "No notes found matching your search"


def _match_to_public(match: NoteMatch) -> NoteMatchPublic:
    note = match.note
    return NoteMatchPublic(
        id=note.id,
        title=note.title,
        content=note.content,
        tags=note.tags,
        created_at=note.created_at,
        similarity=match.similarity,
    )


@router.post("/", response_model=NoteRead, status_code=status.HTTP_201_CREATED)
async def create_note(
    payload: NoteCreate,
    background_tasks: BackgroundTasks,
    service: NoteService = Depends(get_note_service),
    repo: NoteRepository = Depends(get_note_repository),
    embedder: EmbeddingClient = Depends(get_embedding_client),
):
    try:
        note = await service.create_note(payload)
    except NotesError as err:
        raise to_http_exception(err) from err
    background_tasks.add_task(
        generate_and_store_note_embedding,
        note_id=note.id,
        title=note.title,
        content=note.content,
        repo=repo,
        embedder=embedder,
    )
    return NoteRead.model_validate(note)


@router.get("/", response_model=list[NoteRead])
async def list_notes(
    tag: str | None = None,
    limit: int | None = Query(default=None, ge=1, le=1000),
    service: NoteService = Depends(get_note_service),
):
    """List notes newest first; `tag` keeps only notes carrying that tag."""
    try:
        notes = await service.list_notes(tag=tag, limit=limit)
    except NotesError as err:
        raise to_http_exception(err) from err
    return [NoteRead.model_validate(n) for n in notes]


@router.get("/tags", response_model=TagFilterRead)
async def list_tags(
    tag: str | None = None,
    service: NoteService = Depends(get_note_service),
):
    """Tag filter bar: total, per-tag counts and the status line for `tag`."""
    try:
        notes = await service.list_notes()
    except NotesError as err:
        raise to_http_exception(err) from err
    view = build_tag_filter_view(notes, tag)
    return TagFilterRead(
        total=view.total,
        selected_tag=view.selected_tag,
        tags=[TagCount(tag=t, count=c) for t, c in view.tag_counts.items()],
        showing=len(view.notes),
        status=view.status,
        empty_message=view.empty_message,
    )


@router.post("/validate", response_model=NoteDraftValidation)
async def validate_draft(payload: NoteDraft):
    """Report whether the note form may be submitted, with a message per missing field."""
    errors = payload.validation_errors()
    return NoteDraftValidation(can_submit=not errors, errors=errors)


@router.post("/search", response_model=SemanticSearchResponse)
async def semantic_search(
    payload: SemanticSearchRequest,
    service: SearchService = Depends(get_search_service),
):
    """Search notes by meaning. No matches is an empty result, not an error."""
    try:
        outcome = await service.search(payload.query, limit=payload.limit)
    except NotesError as err:
        raise to_http_exception(err) from err
    return SemanticSearchResponse(
        query=outcome.query,
        normalized_query=outcome.normalized_query,
        threshold=outcome.threshold,
        results=[_match_to_public(m) for m in outcome.results],
        empty_message=NO_SEARCH_RESULTS if outcome.is_empty else None,
    )


@router.post("/search/debug", response_model=SimilarityDebugResponse)
async def debug_similarity(
    payload: SimilarityDebugRequest,
    service: SearchService = Depends(get_search_service),
):
    try:
        report = await service.debug_similarity(payload.query, payload.note_id)
    except NotesError as err:
        raise to_http_exception(err) from err
    return SimilarityDebugResponse(
        note_id=report.note_id,
        title=report.title,
        similarity=report.similarity,
        distance=report.distance,
    )


@router.get("/{note_id}", response_model=NoteRead)
async def get_note(
    note_id: UUID,
    service: NoteService = Depends(get_note_service),
):
    try:
        note = await service.get_note(note_id)
    except NotesError as err:
        raise to_http_exception(err) from err
    if not note:
        raise to_http_exception(NoteNotFoundError(note_id))
    return NoteRead.model_validate(note)


@router.patch("/{note_id}", response_model=NoteRead)
async def update_note(
    note_id: UUID,
    payload: NoteUpdate,
    background_tasks: BackgroundTasks,
    service: NoteService = Depends(get_note_service),
    repo: NoteRepository = Depends(get_note_repository),
    embedder: EmbeddingClient = Depends(get_embedding_client),
):
    try:
        note = await service.update_note(note_id, payload)
    except NotesError as err:
        raise to_http_exception(err) from err
    if not note:
        raise to_http_exception(NoteNotFoundError(note_id))
    if payload.title is not None or payload.content is not None:
        background_tasks.add_task(
            generate_and_store_note_embedding,
            note_id=note.id,
            title=note.title,
            content=note.content,
            repo=repo,
            embedder=embedder,
        )
    return NoteRead.model_validate(note)


@router.delete("/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_note(
    note_id: UUID,
    service: NoteService = Depends(get_note_service),
):
    try:
        deleted = await service.delete_note(note_id)
    except NotesError as err:
        raise to_http_exception(err) from err
    if not deleted:
        raise to_http_exception(NoteNotFoundError(note_id))
    return None


@router.get("/{note_id}/related", response_model=list[NoteMatchPublic])
async def related_notes(
    note_id: UUID,
    limit: int | None = Query(default=None, ge=1, le=20),
    service: SearchService = Depends(get_search_service),
):
    try:
        matches = await service.related_notes(note_id, limit=limit)
    except NotesError as err:
        raise to_http_exception(err) from err
    return [_match_to_public(m) for m in matches]


@router.post("/{note_id}/summary", response_model=AITextResponse)
async def summarize_stored_note(
    note_id: UUID,
    service: NoteService = Depends(get_note_service),
    ai: AIAssistService = Depends(get_ai_assist_service),
):
    try:
        note = await service.get_note(note_id)
        if not note:
            raise NoteNotFoundError(note_id)
        summary = await ai.summarize_note(note.content)
    except NotesError as err:
        raise to_http_exception(err) from err
    return AITextResponse(feature="summarize", text=summary)
