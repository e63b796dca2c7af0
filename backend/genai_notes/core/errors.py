from __future__ import annotations


class NotesError(Exception):
    """Base class for failures surfaced to the caller as a message string."""

    retryable: bool = False

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ServiceUnavailableError(NotesError):
    """Network or connection failure talking to a remote collaborator."""

    retryable = True


class ServiceAuthError(NotesError):
    """Authentication or authorization rejected by a remote collaborator."""


class ServiceRateLimitError(NotesError):
    """Remote collaborator rejected the call with a rate limit."""

    retryable = True


class UpstreamError(NotesError):
    """Remote collaborator returned a non-success status."""

    retryable = True


class MalformedResponseError(NotesError):
    """Remote collaborator answered without the expected fields."""

    retryable = True


class NoteValidationError(NotesError):
    """A note submission is missing required fields."""

    def __init__(self, errors: dict[str, str]) -> None:
        super().__init__("; ".join(errors.values()) or "Invalid note")
        self.errors = errors


class NoteNotFoundError(NotesError):
    def __init__(self, note_id: object) -> None:
        super().__init__("Note not found")
        self.note_id = note_id


class MissingEmbeddingError(NotesError):
    """Note exists but has no stored embedding yet."""

    def __init__(self, note_id: object) -> None:
        super().__init__("Note has no embedding available yet")
        self.note_id = note_id
