from __future__ import annotations

from collections import Counter
from typing import TYPE_CHECKING

from genai_notes.core.schemas.taxonomy import TagFilterView

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from genai_notes.core.models.note import Note


def filter_notes_by_tag(notes: Sequence[Note], tag: str | None) -> list[Note]:
    """Notes whose tag list contains `tag`; no tag selects the whole collection."""
    if not tag:
        return list(notes)
    return [note for note in notes if tag in (note.tags or [])]


def collect_tags(notes: Iterable[Note]) -> list[str]:
    """Unique tags across the collection, in first-seen order."""
    seen: dict[str, None] = {}
    for note in notes:
        for tag in note.tags or []:
            seen.setdefault(tag, None)
    return list(seen)


def count_tags(notes: Iterable[Note]) -> dict[str, int]:
    """Number of notes carrying each tag, keyed in first-seen order."""
    notes = list(notes)
    counts = Counter(tag for note in notes for tag in set(note.tags or []))
    return {tag: counts[tag] for tag in collect_tags(notes)}


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def build_tag_filter_view(notes: Sequence[Note], selected_tag: str | None = None) -> TagFilterView:
    """Counts and messages for the tag filter bar, recomputed on every call."""
    filtered = filter_notes_by_tag(notes, selected_tag)
    status = None
    empty_message = None
    if selected_tag:
        status = f'Showing {len(filtered)} note{_plural(len(filtered))} with tag "{selected_tag}"'
        if not filtered:
            empty_message = f'No notes found with tag "{selected_tag}"'
    elif not notes:
        empty_message = "No notes yet."

    return TagFilterView(
        total=len(notes),
        selected_tag=selected_tag or None,
        tag_counts=count_tags(notes),
        notes=filtered,
        status=status,
        empty_message=empty_message,
    )
