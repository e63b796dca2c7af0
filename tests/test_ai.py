import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest
from conftest import FakeCompletion, InMemoryAIUsageRepository, make_note

from genai_notes.core.errors import (
    MalformedResponseError,
    ServiceAuthError,
    ServiceRateLimitError,
    ServiceUnavailableError,
    UpstreamError,
)
from genai_notes.core.services.completion_service import (
    AIAssistService,
    CompletionClient,
    truncate_title,
)
from genai_notes.utils.openai_client import classify_openai_error

AI_URL = "/api/v1/ai/"
REQUEST = httpx.Request("POST", "https://api.openai.com/v1/chat/completions")


def _status_error(cls, code, message):
    return cls(message, response=httpx.Response(code, request=REQUEST), body=None)


def _chat_response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


def test_title_endpoint_logs_usage_and_truncates(client, completion, usage_repo):
    completion.outcomes.append('"' + "A very long generated title " * 4 + '"')

    response = client.post(AI_URL + "title", json={"content": "some note"})

    assert response.status_code == 200
    body = response.json()
    assert body["feature"] == "autoTitle"
    assert len(body["text"]) == 50
    assert body["text"].endswith("...")
    assert usage_repo.features == ["autoTitle"]
    assert completion.calls[0]["max_tokens"] == 16


def test_expand_and_summarize_log_their_features(client, completion, usage_repo):
    completion.outcomes.extend(["Full note text", "Short summary"])

    expanded = client.post(AI_URL + "expand", json={"shorthand": "- milk\n- eggs"})
    summary = client.post(AI_URL + "summarize", json={"content": "Long text"})

    assert expanded.json() == {"feature": "generate", "text": "Full note text"}
    assert summary.json() == {"feature": "summarize", "text": "Short summary"}
    assert usage_repo.features == ["generate", "summarize"]


def test_empty_input_is_rejected(client, usage_repo):
    response = client.post(AI_URL + "title", json={"content": ""})
    assert response.status_code == 422
    assert usage_repo.features == []


def test_failure_detail_carries_upstream_message(client, completion):
    failure = ServiceRateLimitError("AI service rate limit reached: quota exceeded")
    completion.outcomes.extend([failure, failure, failure])

    response = client.post(AI_URL + "summarize", json={"content": "text"})

    assert response.status_code == 429
    detail = response.json()["detail"]
    assert "quota exceeded" in detail["message"]
    assert detail["retryable"] is True
    assert len(completion.calls) == 3


def test_transient_failure_is_retried(client, completion, usage_repo):
    completion.outcomes.extend([ServiceUnavailableError("connection reset"), "Recovered"])

    response = client.post(AI_URL + "expand", json={"shorthand": "x"})

    assert response.json()["text"] == "Recovered"
    assert len(completion.calls) == 2
    # usage is logged once per user action, not per attempt
    assert usage_repo.features == ["generate"]


def test_auth_failure_is_not_retried(client, completion):
    completion.outcomes.append(ServiceAuthError("AI service rejected the credentials: bad key"))

    response = client.post(AI_URL + "title", json={"content": "x"})

    assert response.status_code == 502
    assert response.json()["detail"]["kind"] == "auth"
    assert response.json()["detail"]["retryable"] is False
    assert len(completion.calls) == 1


def test_summarize_stored_note(client, note_repo, completion):
    note = make_note(content="Stored body")
    note_repo.notes[note.id] = note
    completion.outcomes.append("Summary of stored body")

    response = client.post(f"/api/v1/notes/{note.id}/summary")

    assert response.json()["text"] == "Summary of stored body"
    assert "Stored body" in completion.calls[0]["messages"][1]["content"]


def test_usage_logging_failure_does_not_block_call():
    usage = InMemoryAIUsageRepository()
    usage.error = ServiceUnavailableError("usage table down")
    service = AIAssistService(FakeCompletion("Fine"), usage, attempts=1, base_delay=0)

    assert asyncio.run(service.summarize_note("text")) == "Fine"


def test_truncate_title():
    assert truncate_title("short") == "short"
    assert truncate_title("x" * 50) == "x" * 50
    assert truncate_title("x" * 51) == "x" * 47 + "..."


def test_completion_client_maps_sdk_errors():
    sdk = MagicMock()
    sdk.chat.completions.create = AsyncMock(
        side_effect=_status_error(openai.RateLimitError, 429, "Too many requests")
    )
    client = CompletionClient(sdk, model="test-model")

    with pytest.raises(ServiceRateLimitError, match="Too many requests"):
        asyncio.run(client.complete([{"role": "user", "content": "hi"}]))


def test_completion_client_rejects_missing_content():
    sdk = MagicMock()
    sdk.chat.completions.create = AsyncMock(return_value=SimpleNamespace(choices=[]))
    client = CompletionClient(sdk, model="test-model")

    with pytest.raises(MalformedResponseError):
        asyncio.run(client.complete([{"role": "user", "content": "hi"}]))

    sdk.chat.completions.create = AsyncMock(return_value=_chat_response(None))
    with pytest.raises(MalformedResponseError):
        asyncio.run(client.complete([{"role": "user", "content": "hi"}]))


def test_completion_client_returns_stripped_text():
    sdk = MagicMock()
    sdk.chat.completions.create = AsyncMock(return_value=_chat_response("  Hello  \n"))
    client = CompletionClient(sdk, model="test-model")

    assert asyncio.run(client.complete([{"role": "user", "content": "hi"}], max_tokens=5)) == "Hello"
    kwargs = sdk.chat.completions.create.call_args.kwargs
    assert kwargs["model"] == "test-model"
    assert kwargs["max_tokens"] == 5


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (openai.APIConnectionError(request=REQUEST), ServiceUnavailableError),
        (_status_error(openai.AuthenticationError, 401, "Invalid API key"), ServiceAuthError),
        (_status_error(openai.PermissionDeniedError, 403, "Forbidden"), ServiceAuthError),
        (_status_error(openai.RateLimitError, 429, "Slow down"), ServiceRateLimitError),
        (_status_error(openai.InternalServerError, 500, "Server exploded"), UpstreamError),
    ],
)
def test_classify_openai_error(error, expected):
    mapped = classify_openai_error(error)
    assert isinstance(mapped, expected)


def test_classified_status_error_keeps_code_and_message():
    mapped = classify_openai_error(_status_error(openai.InternalServerError, 500, "Server exploded"))
    assert mapped.message == "AI API error (500): Server exploded"
    assert mapped.retryable is True
