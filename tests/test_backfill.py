import asyncio
from datetime import UTC, datetime
from unittest.mock import AsyncMock, patch

import pytest
from conftest import FakeEmbedder, InMemoryNoteRepository, make_note

from genai_notes.core.errors import ServiceRateLimitError, UpstreamError
from genai_notes.scripts import backfill_embeddings as backfill


def _repo_with_notes():
    first = make_note(title="First", created_at=datetime(2024, 1, 1, tzinfo=UTC))
    second = make_note(title="Second", created_at=datetime(2024, 1, 2, tzinfo=UTC))
    done = make_note(title="Done", created_at=datetime(2024, 1, 3, tzinfo=UTC), embedding=[1.0, 1.0, 1.0])
    return InMemoryNoteRepository([first, second, done]), first, second, done


def test_backfill_only_fills_missing_embeddings():
    repo, first, second, done = _repo_with_notes()
    embedder = FakeEmbedder()

    report = asyncio.run(backfill.backfill_embeddings(repo, embedder, delay=0))

    assert (report.total, report.succeeded, report.failed) == (2, 2, [])
    assert repo.notes[first.id].embedding == [0.1, 0.2, 0.3]
    assert repo.notes[done.id].embedding == [1.0, 1.0, 1.0]
    assert embedder.calls == ["First\n\nContent", "Second\n\nContent"]


def test_backfill_continues_past_failures():
    repo, first, second, _ = _repo_with_notes()
    embedder = FakeEmbedder()
    embedder.errors.append(ServiceRateLimitError("AI service rate limit reached"))

    report = asyncio.run(backfill.backfill_embeddings(repo, embedder, delay=0))

    assert report.succeeded == 1
    assert report.failed == [str(first.id)]
    assert repo.notes[second.id].embedding == [0.1, 0.2, 0.3]


def test_backfill_regenerate_all_waits_between_notes():
    repo, *_ = _repo_with_notes()
    with patch("genai_notes.scripts.backfill_embeddings.asyncio.sleep", new=AsyncMock()) as sleep:
        report = asyncio.run(
            backfill.backfill_embeddings(repo, FakeEmbedder(), regenerate=True, delay=0.25)
        )

    assert report.total == 3
    assert [c.args[0] for c in sleep.await_args_list] == [0.25, 0.25]


def test_backfill_with_nothing_to_do():
    repo = InMemoryNoteRepository([make_note(embedding=[0.0, 0.0, 1.0])])
    report = asyncio.run(backfill.backfill_embeddings(repo, FakeEmbedder(), delay=0))
    assert (report.total, report.succeeded) == (0, 0)


def test_parser_flags():
    args = backfill.build_parser().parse_args(["--all", "--delay", "0", "-v"])
    assert args.regenerate is True
    assert args.delay == 0.0
    assert args.verbose is True
    assert backfill.build_parser().parse_args([]).regenerate is False


def test_missing_settings_exit_before_any_work(monkeypatch):
    monkeypatch.delenv("APP_OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("APP_SUPABASE_URL", raising=False)
    monkeypatch.chdir("/")

    with pytest.raises(SystemExit) as excinfo:
        backfill.load_settings()

    message = str(excinfo.value.code)
    assert "APP_OPENAI_API_KEY" in message
    assert "APP_SUPABASE_URL" in message


def test_main_reports_fatal_error(monkeypatch, capsys):
    repo = InMemoryNoteRepository()
    repo.error = UpstreamError("Database error: relation does not exist")
    monkeypatch.setattr(
        "genai_notes.core.repositories.implementations.supabase.note_repository.SupabaseNoteRepository",
        lambda client: repo,
    )
    monkeypatch.setattr("genai_notes.db.base.create_request_supabase_client", lambda *a: object())
    monkeypatch.setattr("genai_notes.utils.openai_client.get_openai_client", lambda: object())

    assert backfill.main(["--delay", "0"]) == 1
    assert "Backfill complete" not in capsys.readouterr().out


def test_main_prints_summary(monkeypatch, capsys):
    repo, *_ = _repo_with_notes()
    monkeypatch.setattr(
        "genai_notes.core.repositories.implementations.supabase.note_repository.SupabaseNoteRepository",
        lambda client: repo,
    )
    monkeypatch.setattr("genai_notes.db.base.create_request_supabase_client", lambda *a: object())
    monkeypatch.setattr(
        "genai_notes.core.services.embedding_service.EmbeddingClient",
        lambda client: FakeEmbedder(),
    )
    monkeypatch.setattr("genai_notes.utils.openai_client.get_openai_client", lambda: object())

    assert backfill.main(["--delay", "0"]) == 0
    out = capsys.readouterr().out
    assert "Successfully processed: 2 notes" in out
    assert "Errors: 0 notes" in out
