"""Demo data seeding.

Clears the notes table, inserts a handful of demo notes and embeds them. The
delete spans every row, so the service role key is required.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import TYPE_CHECKING

from genai_notes.core.errors import NotesError
from genai_notes.core.models.base import utc_now
from genai_notes.core.models.note import Note
from genai_notes.scripts.backfill_embeddings import BackfillReport, backfill_embeddings, load_settings

if TYPE_CHECKING:
    from genai_notes.core.repositories.note_repository import NoteRepository
    from genai_notes.core.services.embedding_service import EmbeddingClient

logger = logging.getLogger(__name__)

# (title, content, tags, hours before now)
DEMO_NOTES = [
    (
        "Welcome to GenAI Notes!",
        "This is a demo note. You can edit or delete it, or create your own.",
        ["demo", "welcome"],
        0,
    ),
    ("AI Features", "Try the AI auto-title and summarization features!", ["ai", "features"], 1),
    ("Tag Filtering", "Filter notes by tags using the sidebar.", ["tags", "filter"], 2),
    ("Analytics", "Check out the Analytics page to see note and tag stats.", ["analytics", "demo"], 3),
]


@dataclass
class SeedReport:
    removed: int = 0
    created: list[Note] = field(default_factory=list)
    embeddings: BackfillReport | None = None


def build_demo_notes(now: datetime | None = None) -> list[Note]:
    now = now or utc_now()
    return [
        Note(title=title, content=content, tags=tags, created_at=now - timedelta(hours=hours))
        for title, content, tags, hours in DEMO_NOTES
    ]


async def seed_notes(
    repo: NoteRepository,
    embedder: EmbeddingClient,
    *,
    keep_existing: bool = False,
    embed: bool = True,
    delay: float = 0.1,
    now: datetime | None = None,
) -> SeedReport:
    report = SeedReport()
    if not keep_existing:
        logger.info("Clearing existing notes")
        report.removed = await repo.delete_all()

    logger.info("Inserting demo notes")
    for note in build_demo_notes(now):
        report.created.append(await repo.create(note))

    if embed:
        report.embeddings = await backfill_embeddings(repo, embedder, delay=delay)
    return report


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Replace the stored notes with a small demo set and embed them.",
    )
    parser.add_argument(
        "--keep-existing",
        action="store_true",
        help="Insert the demo notes without clearing the table first",
    )
    parser.add_argument(
        "--no-embed",
        dest="embed",
        action="store_false",
        help="Skip computing embeddings for the inserted notes",
    )
    parser.add_argument(
        "--delay",
        type=float,
        default=0.1,
        help="Seconds to wait between embeddings (default: 0.1)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Log at DEBUG level")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    settings = load_settings()
    if not settings.supabase_service_role_key:
        print("Missing required environment variable: APP_SUPABASE_SERVICE_ROLE_KEY", file=sys.stderr)
        return 1

    from genai_notes.core.repositories.implementations.supabase.note_repository import (
        SupabaseNoteRepository,
    )
    from genai_notes.core.services.embedding_service import EmbeddingClient
    from genai_notes.db.base import get_supabase_admin_client
    from genai_notes.utils.logging import setup_logging
    from genai_notes.utils.openai_client import get_openai_client

    setup_logging("DEBUG" if args.verbose else None)

    repo = SupabaseNoteRepository(get_supabase_admin_client())
    embedder = EmbeddingClient(get_openai_client())

    try:
        report = asyncio.run(
            seed_notes(
                repo,
                embedder,
                keep_existing=args.keep_existing,
                embed=args.embed,
                delay=args.delay,
            )
        )
    except NotesError as err:
        logger.error("Fatal error while seeding notes: %s", err.message)
        return 1

    print(f"Removed {report.removed} existing notes")
    print(f"Seeded {len(report.created)} notes:")
    for note in report.created:
        print(f"  {note.id}  {note.title}")
    if report.embeddings is not None:
        print(f"Embedded: {report.embeddings.succeeded}, errors: {len(report.embeddings.failed)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
