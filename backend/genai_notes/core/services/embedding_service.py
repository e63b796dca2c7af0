from __future__ import annotations

import re
from typing import TYPE_CHECKING

import openai

from genai_notes.config import settings
from genai_notes.core.errors import MalformedResponseError, NoteValidationError
from genai_notes.utils.logging import get_logger
from genai_notes.utils.openai_client import classify_openai_error, get_openai_client

if TYPE_CHECKING:
    from openai import AsyncOpenAI

logger = get_logger(__name__)

_WHITESPACE = re.compile(r"\s+")


def build_note_text(title: str | None, content: str | None) -> str:
    """Concatenate title and content into a single string for embeddings.

    Keeps a stable delimiter so updates result in stable text shape.
    """
    safe_title = (title or "").strip()
    safe_content = (content or "").strip()
    if safe_title and safe_content:
        return f"{safe_title}\n\n{safe_content}"
    return safe_title or safe_content


def preprocess_text(text: str) -> str:
    return _WHITESPACE.sub(" ", text.strip()).lower()


class EmbeddingClient:
    """Turns free text into a fixed-length vector via the embeddings endpoint."""

    def __init__(self, client: AsyncOpenAI | None = None, model: str | None = None) -> None:
        self._client = client or get_openai_client()
        self._model = model or settings.embedding_model

    async def embed(self, text: str) -> list[float]:
        if not text or not text.strip():
            raise NoteValidationError({"text": "Text to embed must not be empty"})
        try:
            resp = await self._client.embeddings.create(model=self._model, input=text)
        except openai.OpenAIError as err:
            mapped = classify_openai_error(err)
            logger.error("Failed to create embedding: %s", mapped.message)
            raise mapped from err

        data = getattr(resp, "data", None)
        vector = getattr(data[0], "embedding", None) if data else None
        if not vector:
            raise MalformedResponseError("Embedding response did not contain a vector")
        return list(vector)

    async def embed_note(self, title: str | None, content: str | None) -> list[float]:
        return await self.embed(build_note_text(title, content))
