from __future__ import annotations

import time
from typing import TYPE_CHECKING

from starlette.middleware.base import BaseHTTPMiddleware

from genai_notes.config import settings
from genai_notes.utils.logging import get_logger

if TYPE_CHECKING:
    from fastapi import Request
    from starlette.types import ASGIApp

logger = get_logger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "no-store, no-cache, must-revalidate, max-age=0",
    "Pragma": "no-cache",
}

# AI calls that take longer than this are logged as slow
SLOW_REQUEST_SECONDS = 5.0


def build_csp(supabase_url: str) -> str:
    """Views are server-rendered; the only cross-origin peer is the Supabase project."""
    return (
        "default-src 'self'; "
        "script-src 'self'; "
        "style-src 'self' 'unsafe-inline'; "
        "img-src 'self' data:; "
        f"connect-src 'self' {supabase_url}; "
        "frame-ancestors 'none';"
    )


class SecurityMiddleware(BaseHTTPMiddleware):
    """Security headers on every response.

    API responses are also marked uncacheable so a reload always shows the
    stored state, and slow API calls are logged with their timing.
    """

    def __init__(self, app: ASGIApp, api_prefix: str | None = None):
        super().__init__(app)
        self._api_prefix = api_prefix or settings.api_prefix
        self._static_headers = {
            "X-Content-Type-Options": "nosniff",
            "X-Frame-Options": "DENY",
            "Referrer-Policy": "strict-origin-when-cross-origin",
            "Content-Security-Policy": build_csp(settings.supabase_url),
        }

    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        response.headers.update(self._static_headers)
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=15552000; includeSubDomains"

        if request.url.path.startswith(self._api_prefix):
            response.headers.update(NO_CACHE_HEADERS)
            if elapsed >= SLOW_REQUEST_SECONDS:
                logger.warning(
                    "Slow API request",
                    extra={
                        "path": request.url.path,
                        "method": request.method,
                        "status": response.status_code,
                        "elapsed_ms": round(elapsed * 1000),
                    },
                )

        return response
