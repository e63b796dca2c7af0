from __future__ import annotations

from typing import TYPE_CHECKING, Any

import openai

from genai_notes.config import settings
from genai_notes.core.errors import MalformedResponseError, NotesError
from genai_notes.utils.logging import get_logger
from genai_notes.utils.openai_client import classify_openai_error, get_openai_client
from genai_notes.utils.retry import retry_with_linear_backoff

if TYPE_CHECKING:
    from openai import AsyncOpenAI

    from genai_notes.core.repositories.note_repository import AIUsageRepository

logger = get_logger(__name__)

TITLE_MAX_CHARS = 50

SUMMARIZE_SYSTEM_PROMPT = "You are a helpful assistant that summarizes notes."
EXPAND_SYSTEM_PROMPT = (
    "You are a helpful assistant that expands shorthand or bullet points into a full, "
    "clear note. Provide comprehensive, well-structured content that fully expands on "
    "the given points."
)
TITLE_SYSTEM_PROMPT = (
    "You are a helpful assistant that generates concise, descriptive titles for notes. "
    "Keep titles under 50 characters and make them clear and specific."
)


class CompletionClient:
    """Single-shot chat completion against the configured model."""

    def __init__(self, client: AsyncOpenAI | None = None, model: str | None = None) -> None:
        self._client = client or get_openai_client()
        self._model = model or settings.completion_model

    async def complete(
        self,
        messages: list[dict[str, str]],
        *,
        temperature: float = 0.7,
        max_tokens: int = 256,
    ) -> str:
        try:
            resp = await self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=temperature,
                max_tokens=max_tokens,
            )
        except openai.OpenAIError as err:
            mapped = classify_openai_error(err)
            logger.error("Completion request failed: %s", mapped.message, extra={"model": self._model})
            raise mapped from err
        return self._extract_text(resp)

    @staticmethod
    def _extract_text(resp: Any) -> str:
        choices = getattr(resp, "choices", None)
        if not choices:
            raise MalformedResponseError("AI response did not contain any choices")
        message = getattr(choices[0], "message", None)
        content = getattr(message, "content", None)
        if not isinstance(content, str):
            raise MalformedResponseError("AI response did not contain message content")
        return content.strip()


def truncate_title(title: str, limit: int = TITLE_MAX_CHARS) -> str:
    if len(title) > limit:
        return title[: limit - 3] + "..."
    return title


class AIAssistService:
    """Fixed-prompt AI helpers: summarize, expand shorthand, auto-title.

    Every call appends an AI usage event first. Completion failures are retried
    with linear backoff up to the configured number of attempts.
    """

    def __init__(
        self,
        completion: CompletionClient,
        usage_repo: AIUsageRepository,
        *,
        attempts: int | None = None,
        base_delay: float | None = None,
    ) -> None:
        self._completion = completion
        self._usage = usage_repo
        self._attempts = attempts if attempts is not None else settings.ai_retry_attempts
        self._base_delay = base_delay if base_delay is not None else settings.ai_retry_delay_seconds

    async def summarize_note(self, content: str) -> str:
        await self._log_usage("summarize")
        return await self._complete(
            [
                {"role": "system", "content": SUMMARIZE_SYSTEM_PROMPT},
                {"role": "user", "content": f"Summarize this note:\n{content}"},
            ],
            max_tokens=100,
            name="summarize",
        )

    async def expand_shorthand(self, shorthand: str) -> str:
        await self._log_usage("generate")
        return await self._complete(
            [
                {"role": "system", "content": EXPAND_SYSTEM_PROMPT},
                {"role": "user", "content": f"Expand this shorthand or bullet points into a full note:\n{shorthand}"},
            ],
            max_tokens=1000,
            name="generate",
        )

    async def generate_title(self, content: str) -> str:
        await self._log_usage("autoTitle")
        title = await self._complete(
            [
                {"role": "system", "content": TITLE_SYSTEM_PROMPT},
                {
                    "role": "user",
                    "content": f"Generate a short, descriptive title for this note (max 50 characters):\n{content}",
                },
            ],
            max_tokens=16,
            temperature=0.3,
            name="autoTitle",
        )
        return truncate_title(title.strip().strip('"'))

    async def _complete(
        self,
        messages: list[dict[str, str]],
        *,
        max_tokens: int,
        temperature: float = 0.7,
        name: str,
    ) -> str:
        return await retry_with_linear_backoff(
            lambda: self._completion.complete(messages, temperature=temperature, max_tokens=max_tokens),
            attempts=self._attempts,
            base_delay=self._base_delay,
            name=name,
        )

    async def _log_usage(self, feature: str) -> None:
        try:
            await self._usage.log(feature)
        except NotesError as err:
            logger.error("Failed to log AI usage for %s: %s", feature, err.message)
