# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Engine and session handling for the account and inventory repositories.

Repository functions are blocking; ``Database.run`` moves them onto the
thread pool so the event loop never waits on disk I/O.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator, TypeVar

from fastapi.concurrency import run_in_threadpool
from sqlalchemy import create_engine, event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from zenbatu.errors import StoreUnavailable
from zenbatu.infra.models import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _enable_foreign_keys(dbapi_conn, _record) -> None:
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys = ON")
    cur.close()


class Database:
    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self.engine = create_engine(
            f"sqlite:///{self.path}",
            connect_args={"check_same_thread": False, "timeout": 10},
        )
        event.listen(self.engine, "connect", _enable_foreign_keys)
        self.SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
            bind=self.engine,
        )
        self._ready = False

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session inside a transaction (commit on success, rollback on error)."""
        db = self.SessionLocal()
        try:
            yield db
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def initialize(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        try:
            Base.metadata.create_all(bind=self.engine)
        except SQLAlchemyError as e:
            raise StoreUnavailable(f"Error initializing database: {e}") from e
        self._ready = True
        logger.info("Database ready at %s", self.path)

    def state(self) -> str:
        if not self._ready:
            return "disconnected"
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except SQLAlchemyError:
            return "disconnected"
        return "connected"

    async def run(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        """Run a blocking repository function on the thread pool.

        A ``SQLAlchemyError`` escaping ``fn`` becomes ``StoreUnavailable``;
        repositories translate the errors they understand before that.
        """
        try:
            return await run_in_threadpool(fn, *args, **kwargs)
        except SQLAlchemyError as e:
            logger.exception("Database operation %s failed", getattr(fn, "__name__", fn))
            raise StoreUnavailable(f"Database operation failed: {e}") from e
