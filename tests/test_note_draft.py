import pytest
from conftest import make_note
from pydantic import ValidationError

from genai_notes.core.models.note import Note, normalize_tags
from genai_notes.core.schemas.note_draft import NoteDraft
from genai_notes.core.services.tag_service import (
    build_tag_filter_view,
    collect_tags,
    count_tags,
    filter_notes_by_tag,
)


def test_normalize_tags_keeps_order_and_case():
    assert normalize_tags([" Work", "ideas", "Work", "", "  ", "work"]) == ["Work", "ideas", "work"]
    assert normalize_tags(None) == []


def test_empty_draft_cannot_submit():
    draft = NoteDraft()
    assert not draft.can_submit
    assert set(draft.validation_errors()) == {"title", "content", "tags"}


def test_draft_tag_editing():
    draft = NoteDraft(title="Title", content="Body")
    draft.add_tag(" work ")
    draft.add_tag("work")
    draft.add_tag("ideas")
    assert draft.tags == ["work", "ideas"]
    assert draft.can_submit

    draft.remove_tag("work")
    draft.remove_tag("ideas")
    assert draft.validation_errors() == {"tags": "At least one tag is required"}


def test_draft_clear():
    draft = NoteDraft(title="Title", content="Body", tags=["a"], shorthand="- a\n- b")
    draft.clear()
    assert (draft.title, draft.content, draft.tags, draft.shorthand) == ("", "", [], "")


def test_tags_must_be_a_list_of_strings():
    with pytest.raises(ValidationError):
        NoteDraft(title="T", content="C", tags="work")
    with pytest.raises(ValidationError):
        Note(tags="work")
    with pytest.raises(ValidationError):
        Note(tags=[1])


def test_draft_title_length_limit():
    NoteDraft(title="x" * 100)
    with pytest.raises(ValidationError):
        NoteDraft(title="x" * 101)


def test_note_coerces_null_text_and_checks_embedding_size():
    note = Note(title=None, content=None, tags=None)
    assert (note.title, note.content, note.tags) == ("", "", [])
    with pytest.raises(ValidationError):
        Note(embedding=[0.1, 0.2])


def test_tag_filter_helpers():
    notes = [make_note(tags=["b", "a"]), make_note(tags=["a"]), make_note(tags=["c"])]

    assert filter_notes_by_tag(notes, "a") == notes[:2]
    assert filter_notes_by_tag(notes, None) == notes
    assert filter_notes_by_tag(notes, "zzz") == []
    assert collect_tags(notes) == ["b", "a", "c"]
    assert count_tags(notes) == {"b": 1, "a": 2, "c": 1}


def test_tag_filter_view_messages():
    notes = [make_note(tags=["solo"])]

    single = build_tag_filter_view(notes, "solo")
    assert single.status == 'Showing 1 note with tag "solo"'
    assert single.empty_message is None

    missing = build_tag_filter_view(notes, "other")
    assert missing.notes == []
    assert missing.empty_message == 'No notes found with tag "other"'

    everything = build_tag_filter_view(notes)
    assert everything.status is None
    assert everything.total == 1

    assert build_tag_filter_view([]).empty_message == "No notes yet."
