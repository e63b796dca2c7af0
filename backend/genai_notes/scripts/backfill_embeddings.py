"""Embedding backfill utility.

Scans stored notes that have no embedding yet (or every note with ``--all``),
computes one through the embeddings endpoint and writes it back. A failure on
one note is logged and the run continues with the next.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from pydantic import ValidationError

from genai_notes.core.errors import NotesError

if TYPE_CHECKING:
    from genai_notes.config import Settings
    from genai_notes.core.repositories.note_repository import NoteRepository
    from genai_notes.core.services.embedding_service import EmbeddingClient

logger = logging.getLogger(__name__)


@dataclass
class BackfillReport:
    total: int = 0
    succeeded: int = 0
    failed: list[str] = field(default_factory=list)


def describe_missing_settings(err: ValidationError) -> str:
    names = sorted(
        "APP_" + "_".join(str(part) for part in e["loc"]).upper()
        for e in err.errors()
    )
    return "Missing or invalid required environment variables: " + ", ".join(names)


def load_settings() -> Settings:
    """Validate configuration before touching any remote service."""
    try:
        from genai_notes.config import Settings

        return Settings()
    except ValidationError as err:
        raise SystemExit(describe_missing_settings(err)) from err


async def backfill_embeddings(
    repo: NoteRepository,
    embedder: EmbeddingClient,
    *,
    regenerate: bool = False,
    delay: float = 0.1,
) -> BackfillReport:
    notes = await repo.list_for_embedding(missing_only=not regenerate)
    report = BackfillReport(total=len(notes))
    if not notes:
        logger.info("All notes already have embeddings")
        return report

    logger.info("Found %d notes to embed", len(notes))
    for index, note in enumerate(notes):
        try:
            vector = await embedder.embed_note(note.title, note.content)
            await repo.set_embedding(note.id, vector)
        except NotesError as err:
            logger.error("Failed to embed note %s (%r): %s", note.id, note.title, err.message)
            report.failed.append(str(note.id))
        else:
            logger.info("Updated embedding for note %s (%r)", note.id, note.title)
            report.succeeded += 1

        if delay and index < len(notes) - 1:
            # Space out calls to stay under the embeddings rate limit
            await asyncio.sleep(delay)

    return report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compute and store embeddings for notes that lack one.",
    )
    parser.add_argument(
        "--all",
        dest="regenerate",
        action="store_true",
        help="Regenerate embeddings for every note, not only missing ones",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=0.1,
        help="Seconds to wait between notes (default: 0.1)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()

    from genai_notes.core.repositories.implementations.supabase.note_repository import (
        SupabaseNoteRepository,
    )
    from genai_notes.core.services.embedding_service import EmbeddingClient
    from genai_notes.db.base import create_request_supabase_client, get_supabase_admin_client
    from genai_notes.utils.logging import setup_logging
    from genai_notes.utils.openai_client import get_openai_client

    setup_logging("DEBUG" if args.verbose else None)

    if settings.supabase_service_role_key:
        client = get_supabase_admin_client()
    else:
        logger.warning("APP_SUPABASE_SERVICE_ROLE_KEY not set, using the anon key")
        client = create_request_supabase_client()

    repo = SupabaseNoteRepository(client)
    embedder = EmbeddingClient(get_openai_client())

    try:
        report = asyncio.run(
            backfill_embeddings(repo, embedder, regenerate=args.regenerate, delay=args.delay)
        )
    except NotesError as err:
        logger.error("Fatal error during embedding backfill: %s", err.message)
        return 1

    print("=== Backfill complete ===")
    print(f"Successfully processed: {report.succeeded} notes")
    print(f"Errors: {len(report.failed)} notes")
    print(f"Total: {report.total} notes")
    return 0


if __name__ == "__main__":
    sys.exit(main())
