from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, TypeVar

from genai_notes.core.errors import NotesError
from genai_notes.utils.logging import get_logger

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")

logger = get_logger(__name__)


async def retry_with_linear_backoff(
    operation: Callable[[], Awaitable[T]],
    *,
    attempts: int,
    base_delay: float,
    name: str = "operation",
) -> T:
    """Await `operation` up to `attempts` times, sleeping `base_delay * n` after failure n.

    Only `NotesError`s flagged `retryable` are retried; anything else, and the
    last retryable failure, propagates to the caller.
    """
    attempts = max(1, attempts)
    for attempt in range(1, attempts + 1):
        try:
            return await operation()
        except NotesError as err:
            if not err.retryable or attempt == attempts:
                raise
            delay = base_delay * attempt
            logger.warning(
                "%s failed (attempt %d/%d), retrying in %.1fs: %s",
                name, attempt, attempts, delay, err.message,
            )
            await asyncio.sleep(delay)
    raise AssertionError("unreachable")
