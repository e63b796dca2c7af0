import os

# Settings are read at import time; configure before the app is imported.
os.environ.setdefault("APP_SUPABASE_URL", "https://example.supabase.co")
os.environ.setdefault("APP_SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("APP_OPENAI_API_KEY", "test-openai-key")
os.environ["APP_EMBEDDING_DIMENSIONS"] = "3"
os.environ["APP_AI_RETRY_DELAY_SECONDS"] = "0"

from datetime import UTC, datetime, timedelta  # noqa: E402
from uuid import uuid4  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from genai_notes.core.models.note import Note  # noqa: E402
from genai_notes.core.repositories.note_repository import (  # noqa: E402
    AIUsageRepository,
    NoteRepository,
)
from genai_notes.core.services.analytics_service import AnalyticsSnapshotCache  # noqa: E402
from genai_notes.core.services.completion_service import AIAssistService  # noqa: E402
from genai_notes.core.services.embedding_service import build_note_text  # noqa: E402


class InMemoryNoteRepository(NoteRepository):
    """Note store used in place of Supabase."""

    def __init__(self, notes=None):
        self.notes = {n.id: n for n in notes or []}
        self.match_results = []
        self.match_calls = []
        self.error = None

    def _check(self):
        if self.error is not None:
            raise self.error

    async def create(self, note):
        self._check()
        stored = note.model_copy()
        self.notes[stored.id] = stored
        return stored

    async def get(self, note_id):
        self._check()
        return self.notes.get(note_id)

    async def list(self, *, limit=None, tag=None):
        self._check()
        ordered = sorted(self.notes.values(), key=lambda n: n.created_at, reverse=True)
        if tag:
            ordered = [n for n in ordered if tag in n.tags]
        return ordered[:limit] if limit is not None else ordered

    async def update_fields(self, note_id, changes):
        self._check()
        if note_id not in self.notes:
            return None
        updated = self.notes[note_id].model_copy(update=changes)
        self.notes[note_id] = updated
        return updated

    async def delete(self, note_id):
        self._check()
        return self.notes.pop(note_id, None) is not None

    async def delete_all(self):
        self._check()
        removed = len(self.notes)
        self.notes.clear()
        return removed

    async def set_embedding(self, note_id, embedding):
        self._check()
        self.notes[note_id] = self.notes[note_id].model_copy(update={"embedding": embedding})

    async def list_for_embedding(self, *, missing_only=True):
        self._check()
        ordered = sorted(self.notes.values(), key=lambda n: n.created_at)
        if missing_only:
            return [n for n in ordered if n.embedding is None]
        return ordered

    async def match_notes(self, *, query_embedding, match_threshold, match_count, exclude_id=None):
        self._check()
        self.match_calls.append(
            {
                "query_embedding": query_embedding,
                "match_threshold": match_threshold,
                "match_count": match_count,
                "exclude_id": exclude_id,
            }
        )
        if self.match_results:
            return self.match_results.pop(0)
        return []


class InMemoryAIUsageRepository(AIUsageRepository):
    def __init__(self, features=None):
        self.features = list(features or [])
        self.error = None

    async def log(self, feature):
        if self.error is not None:
            raise self.error
        self.features.append(feature)

    async def list_features(self):
        if self.error is not None:
            raise self.error
        return list(self.features)


class FakeEmbedder:
    """Returns a fixed vector; queued exceptions are raised first."""

    def __init__(self, vector=None):
        self.vector = vector or [0.1, 0.2, 0.3]
        self.errors = []
        self.calls = []

    async def embed(self, text):
        self.calls.append(text)
        if self.errors:
            raise self.errors.pop(0)
        return list(self.vector)

    async def embed_note(self, title, content):
        return await self.embed(build_note_text(title, content))


class FakeCompletion:
    """Plays back queued outcomes: strings are returned, exceptions raised."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    async def complete(self, messages, *, temperature=0.7, max_tokens=256):
        self.calls.append({"messages": messages, "temperature": temperature, "max_tokens": max_tokens})
        outcome = self.outcomes.pop(0) if self.outcomes else "ok"
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_note(title="Title", content="Content", tags=("tag",), created_at=None, embedding=None):
    return Note(
        id=uuid4(),
        title=title,
        content=content,
        tags=list(tags),
        created_at=created_at or datetime.now(UTC),
        embedding=embedding,
    )


@pytest.fixture
def note_repo():
    return InMemoryNoteRepository()


@pytest.fixture
def usage_repo():
    return InMemoryAIUsageRepository()


@pytest.fixture
def embedder():
    return FakeEmbedder()


@pytest.fixture
def completion():
    return FakeCompletion()


@pytest.fixture
def analytics_cache(tmp_path):
    return AnalyticsSnapshotCache(tmp_path / "analytics.json")


@pytest.fixture
def client(note_repo, usage_repo, embedder, completion, analytics_cache):
    from genai_notes import dependencies
    from genai_notes.main import app

    app.dependency_overrides[dependencies.get_note_repository] = lambda: note_repo
    app.dependency_overrides[dependencies.get_ai_usage_repository] = lambda: usage_repo
    app.dependency_overrides[dependencies.get_embedding_client] = lambda: embedder
    app.dependency_overrides[dependencies.get_completion_client] = lambda: completion
    app.dependency_overrides[dependencies.get_analytics_cache] = lambda: analytics_cache
    app.dependency_overrides[dependencies.get_ai_assist_service] = lambda: AIAssistService(
        completion, usage_repo, attempts=3, base_delay=0
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def days_ago(n, hour=12):
    now = datetime.now(UTC).replace(hour=hour, minute=0, second=0, microsecond=0)
    return now - timedelta(days=n)
