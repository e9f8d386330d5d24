# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Logging setup: console output plus an optional rotating file.

Every handler carries a filter that masks credential-looking fragments, since
request payloads (which may hold passwords) end up in debug messages.
"""

from __future__ import annotations

import logging
import re
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Pattern

_SENSITIVE_PATTERNS: list[tuple[str, Pattern[str]]] = [
    ("password", re.compile(r"(?i)(password|passwd|pwd)\s*[=:]\s*[\"']?[^\s\"',}]+[\"']?")),
    ("token", re.compile(r"(?i)(token|session_?id)\s*[=:]\s*[\"']?[^\s\"',}]+[\"']?")),
    ("secret", re.compile(r"(?i)(secret|secret_key)\s*[=:]\s*[\"']?[^\s\"',}]+[\"']?")),
]

_REDACTED = "[REDACTED]"

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def redact(text: str) -> str:
    for name, pattern in _SENSITIVE_PATTERNS:
        text = pattern.sub(f"{name}={_REDACTED}", text)
    return text


class RedactingFilter(logging.Filter):
    """Replace the record's message with its rendered, redacted text. Never drops the record."""

    def filter(self, record: logging.LogRecord) -> bool:
        try:
            text = record.getMessage()
        except (TypeError, ValueError):
            text = f"{record.msg} [unformattable arguments dropped]"
        record.msg = redact(text)
        record.args = None
        return True


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    *,
    max_bytes: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> logging.Logger:
    """Configure the ``zenbatu`` logger hierarchy. Safe to call more than once."""
    logger = logging.getLogger("zenbatu")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    for h in list(logger.handlers):
        if getattr(h, "_zenbatu", False):
            logger.removeHandler(h)
            h.close()

    formatter = logging.Formatter(LOG_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(str(log_file), maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8")
        )

    for h in handlers:
        h.setFormatter(formatter)
        h.addFilter(RedactingFilter())
        h._zenbatu = True  # type: ignore[attr-defined]
        logger.addHandler(h)

    return logger
