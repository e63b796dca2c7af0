import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from genai_notes.core.errors import ServiceAuthError, UpstreamError
from genai_notes.utils.retry import retry_with_linear_backoff


def test_returns_first_success_without_sleeping():
    operation = AsyncMock(return_value="done")
    with patch("genai_notes.utils.retry.asyncio.sleep", new=AsyncMock()) as sleep:
        result = asyncio.run(retry_with_linear_backoff(operation, attempts=3, base_delay=1.0))

    assert result == "done"
    operation.assert_awaited_once()
    sleep.assert_not_awaited()


def test_backoff_grows_linearly_then_gives_up():
    operation = AsyncMock(side_effect=UpstreamError("AI API error (500): boom"))
    with patch("genai_notes.utils.retry.asyncio.sleep", new=AsyncMock()) as sleep:
        with pytest.raises(UpstreamError, match="boom"):
            asyncio.run(retry_with_linear_backoff(operation, attempts=3, base_delay=1.0))

    assert operation.await_count == 3
    assert [c.args[0] for c in sleep.await_args_list] == [1.0, 2.0]


def test_recovers_on_later_attempt():
    operation = AsyncMock(side_effect=[UpstreamError("flaky"), "ok"])
    with patch("genai_notes.utils.retry.asyncio.sleep", new=AsyncMock()):
        result = asyncio.run(retry_with_linear_backoff(operation, attempts=3, base_delay=0.5))

    assert result == "ok"
    assert operation.await_count == 2


def test_non_retryable_error_propagates_immediately():
    operation = AsyncMock(side_effect=ServiceAuthError("bad key"))
    with patch("genai_notes.utils.retry.asyncio.sleep", new=AsyncMock()) as sleep:
        with pytest.raises(ServiceAuthError):
            asyncio.run(retry_with_linear_backoff(operation, attempts=3, base_delay=1.0))

    operation.assert_awaited_once()
    sleep.assert_not_awaited()


def test_other_exceptions_are_not_caught():
    operation = AsyncMock(side_effect=KeyError("boom"))
    with pytest.raises(KeyError):
        asyncio.run(retry_with_linear_backoff(operation, attempts=3, base_delay=0))
    operation.assert_awaited_once()
