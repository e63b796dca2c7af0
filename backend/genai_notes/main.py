from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.gzip import GZipMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from .api.middleware.security import SecurityMiddleware
from .api.v1.router import api_router
from .config import settings
from .utils.logging import get_logger, setup_logging
from .web.views import render_error_page
from .web.views import router as web_router

logger = get_logger(__name__)

UNEXPECTED_ERROR_MESSAGE = "Something went wrong. Please reload the page."


def _is_api_path(request: Request) -> bool:
    return request.url.path.startswith(settings.api_prefix)


async def redirect_unknown_paths(request: Request, exc: StarletteHTTPException):
    """Unknown view paths land on the landing page; API 404s stay JSON."""
    if exc.status_code == status.HTTP_404_NOT_FOUND and not _is_api_path(request):
        return RedirectResponse("/", status_code=status.HTTP_302_FOUND)
    return await http_exception_handler(request, exc)


async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    if _is_api_path(request):
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": {"message": UNEXPECTED_ERROR_MESSAGE, "kind": "error", "retryable": False}},
        )
    return render_error_page(request)


def create_app() -> FastAPI:
    setup_logging()

    app = FastAPI(
        title="GenAI Notes API",
        debug=settings.debug,
        version="0.1.0",
        root_path=settings.root_path or "",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=[
            "Accept",
            "Accept-Language",
            "Content-Language",
            "Content-Type",
            "Authorization",
            "X-Requested-With",
        ],
        max_age=600,  # Cache preflight requests for 10 minutes
    )

    # Proxy headers (X-Forwarded-*) when behind a load balancer
    app.add_middleware(ProxyHeadersMiddleware, trusted_hosts=["*"])

    app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.trusted_hosts)

    app.add_middleware(GZipMiddleware, minimum_size=1000)

    app.add_middleware(SecurityMiddleware)

    app.add_exception_handler(StarletteHTTPException, redirect_unknown_paths)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(api_router, prefix=settings.api_prefix)
    app.include_router(web_router)
    return app


app = create_app()
