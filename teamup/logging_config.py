"""
Stdout logging for the TeamUp API.

Lines look like `2026-01-06T14:05:52Z [api] INFO Created request req_1`.
LOG_LEVEL=DEBUG turns on debug output; INFO otherwise.
"""

from __future__ import annotations

import logging
import os
import sys
from datetime import UTC, datetime

UVICORN_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access")


class ISO8601Formatter(logging.Formatter):
    """`<UTC timestamp> [source] LEVEL message`, traceback on following lines."""

    def __init__(self, source: str = "teamup"):
        super().__init__()
        self.source = source

    def format(self, record: logging.LogRecord) -> str:
        stamp = datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")
        line = f"{stamp} [{self.source}] {record.levelname} {record.getMessage()}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class HealthCheckFilter(logging.Filter):
    """Hide liveness-probe access lines above DEBUG."""

    HEALTH_PATHS = ("/health", "/api/health")

    def filter(self, record: logging.LogRecord) -> bool:
        if record.levelno <= logging.DEBUG:
            return True
        message = record.getMessage()
        # Access lines read like: 127.0.0.1:5000 - "GET /health HTTP/1.1" 200 OK
        return not any(f" {path} " in message for path in self.HEALTH_PATHS)


def configure_logging(source: str = "teamup", level: int | None = None, debug: bool = False) -> logging.Logger:
    """Send the root and uvicorn loggers to one stdout handler.

    `level` wins; otherwise DEBUG when LOG_LEVEL=DEBUG or `debug`, else INFO.
    Returns the root logger.
    """
    if level is None:
        level = logging.DEBUG if debug or os.getenv("LOG_LEVEL", "").upper() == "DEBUG" else logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ISO8601Formatter(source=source))
    handler.addFilter(HealthCheckFilter())

    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level)

    for name in UVICORN_LOGGERS:
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers[:] = [handler]
        uvicorn_logger.setLevel(level)
        uvicorn_logger.propagate = False

    # PocketBase SDK request chatter
    for name in ("httpx", "httpcore"):
        logging.getLogger(name).setLevel(logging.WARNING)

    return root
