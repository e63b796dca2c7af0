from __future__ import annotations

from fastapi import HTTPException, status

from genai_notes.core.errors import (
    MalformedResponseError,
    MissingEmbeddingError,
    NotesError,
    NoteNotFoundError,
    NoteValidationError,
    ServiceAuthError,
    ServiceRateLimitError,
    ServiceUnavailableError,
    UpstreamError,
)

_STATUS_BY_ERROR: list[tuple[type[NotesError], int, str]] = [
    (NoteValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY, "validation"),
    (NoteNotFoundError, status.HTTP_404_NOT_FOUND, "not_found"),
    (MissingEmbeddingError, status.HTTP_409_CONFLICT, "missing_embedding"),
    (ServiceUnavailableError, status.HTTP_503_SERVICE_UNAVAILABLE, "network"),
    (ServiceAuthError, status.HTTP_502_BAD_GATEWAY, "auth"),
    (ServiceRateLimitError, status.HTTP_429_TOO_MANY_REQUESTS, "rate_limit"),
    (MalformedResponseError, status.HTTP_502_BAD_GATEWAY, "malformed_response"),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY, "upstream"),
]


def to_http_exception(err: NotesError) -> HTTPException:
    """Turn a domain failure into a response the client can show verbatim.

    `retryable` tells the client whether to offer a retry control.
    """
    status_code, kind = status.HTTP_500_INTERNAL_SERVER_ERROR, "error"
    for error_type, code, name in _STATUS_BY_ERROR:
        if isinstance(err, error_type):
            status_code, kind = code, name
            break

    detail: dict = {"message": err.message, "kind": kind, "retryable": err.retryable}
    if isinstance(err, NoteValidationError):
        detail["errors"] = err.errors
    return HTTPException(status_code=status_code, detail=detail)
