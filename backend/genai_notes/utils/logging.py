from __future__ import annotations

import logging
import sys

from genai_notes.config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Client libraries log every request at INFO; only their warnings are useful here
NOISY_LOGGERS = ("httpx", "httpcore", "openai", "hpack")


def setup_logging(level: str | None = None) -> None:
    """Configure root logging once for the API process or a script run.

    `level` overrides `APP_LOG_LEVEL` (the backfill script passes DEBUG for
    `--verbose`).
    """
    resolved = getattr(logging, (level or settings.log_level).upper(), logging.INFO)
    logging.basicConfig(level=resolved, format=LOG_FORMAT, stream=sys.stdout)

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.access").setLevel(logging.INFO)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))

    logging.getLogger(__name__).debug("Logging configured at %s", logging.getLevelName(resolved))


def get_logger(name: str | None = None) -> logging.Logger:
    return logging.getLogger(name)
