# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

_TRUTHY = {"1", "true", "yes", "y"}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    db_path: Path
    secret_key: Optional[str]
    session_salt: str
    cookie_name: str
    cookie_secure: bool
    session_max_age: int
    log_level: str
    log_file: Optional[Path]
    host: str
    port: int
    reload: bool

    def require_secret_key(self) -> str:
        if not self.secret_key:
            raise RuntimeError("Missing SECRET_KEY (or ZENBATU_SECRET_KEY) in environment")
        return self.secret_key


def load_settings() -> Settings:
    """Read settings from the environment. Called once per app instance."""
    log_file = os.getenv("ZENBATU_LOG_FILE", "").strip()
    return Settings(
        db_path=Path(os.getenv("ZENBATU_DB_PATH", "data/zenbatu.db")).resolve(),
        secret_key=os.getenv("SECRET_KEY") or os.getenv("ZENBATU_SECRET_KEY"),
        session_salt=os.getenv("ZENBATU_SESSION_SALT", "zenbatu.session.v1"),
        cookie_name=os.getenv("ZENBATU_COOKIE_NAME", "zenbatu_session"),
        cookie_secure=_env_flag("ZENBATU_COOKIE_SECURE"),
        session_max_age=int(os.getenv("ZENBATU_SESSION_MAX_AGE", "0")),
        log_level=os.getenv("ZENBATU_LOG_LEVEL", "INFO").upper(),
        log_file=Path(log_file).resolve() if log_file else None,
        host=os.getenv("ZENBATU_HOST", "0.0.0.0"),
        port=int(os.getenv("ZENBATU_PORT", "8089")),
        reload=_env_flag("ZENBATU_RELOAD"),
    )
