from __future__ import annotations

from typing import TYPE_CHECKING

from genai_notes.core.errors import NotesError
from genai_notes.core.services.embedding_service import build_note_text
from genai_notes.utils.logging import get_logger

logger = get_logger(__name__)

if TYPE_CHECKING:
    from uuid import UUID

    from genai_notes.core.repositories.note_repository import NoteRepository
    from genai_notes.core.services.embedding_service import EmbeddingClient


async def generate_and_store_note_embedding(
    *,
    note_id: UUID,
    title: str | None,
    content: str | None,
    repo: NoteRepository,
    embedder: EmbeddingClient,
) -> bool:
    """Embed a note after it was created or edited and store the vector.

    Runs as background work after the write response went out, so failures are
    logged and reported through the return value only.
    """
    text = build_note_text(title, content)
    if not text.strip():
        logger.warning("No text content to embed for note %s", note_id)
        return False

    try:
        vector = await embedder.embed(text)
        await repo.set_embedding(note_id, vector)
    except NotesError as err:
        logger.error("Embedding job failed for note %s: %s", note_id, err.message)
        return False

    logger.info("Stored embedding for note %s", note_id)
    return True
