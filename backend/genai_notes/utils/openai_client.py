from __future__ import annotations

from functools import lru_cache

import openai
from openai import AsyncOpenAI

from genai_notes.config import settings
from genai_notes.core.errors import (
    MalformedResponseError,
    NotesError,
    ServiceAuthError,
    ServiceRateLimitError,
    ServiceUnavailableError,
    UpstreamError,
)
from genai_notes.utils.logging import get_logger


@lru_cache(maxsize=1)
def get_openai_client() -> AsyncOpenAI:
    """Return a singleton OpenAI client keyed by `APP_OPENAI_API_KEY`.

    Retries are disabled on the SDK side; AI call retries are bounded and
    scheduled by `genai_notes.utils.retry`.
    """
    logger = get_logger(__name__)
    logger.debug("Initializing OpenAI client with APP_OPENAI_API_KEY")
    return AsyncOpenAI(api_key=settings.openai_api_key, max_retries=0)


def classify_openai_error(err: Exception) -> NotesError:
    """Map an OpenAI SDK failure onto the domain error taxonomy.

    The upstream message is kept verbatim so it can be shown to the user.
    """
    if isinstance(err, openai.APIConnectionError):
        return ServiceUnavailableError(f"Could not reach the AI service: {err}")
    if isinstance(err, openai.AuthenticationError | openai.PermissionDeniedError):
        return ServiceAuthError(f"AI service rejected the credentials: {err.message}")
    if isinstance(err, openai.RateLimitError):
        return ServiceRateLimitError(f"AI service rate limit reached: {err.message}")
    if isinstance(err, openai.APIStatusError):
        return UpstreamError(f"AI API error ({err.status_code}): {err.message}")
    if isinstance(err, openai.APIError):
        return UpstreamError(f"AI API error: {err.message}")
    return MalformedResponseError(f"Unexpected AI service response: {err}")
