# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Active-session table.

Sessions live in process memory only. A store keeps a primary index by
session id plus a secondary index by username; every mutation happens under
one lock so concurrent logins/logouts never observe a half-updated table.
"""

from __future__ import annotations

import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional, Set


@dataclass(frozen=True)
class Session:
    session_id: str
    username: str
    created_at: float
    last_seen: float = field(compare=False)


class SessionStore(ABC):
    """Atomic insert/remove/lookup over sessions keyed by id."""

    @abstractmethod
    def add(self, session: Session) -> None: ...

    @abstractmethod
    def get(self, session_id: str) -> Optional[Session]: ...

    @abstractmethod
    def remove(self, session_id: str) -> Optional[Session]: ...

    @abstractmethod
    def remove_user(self, username: str) -> List[Session]: ...

    @abstractmethod
    def has_user(self, username: str) -> bool: ...

    @abstractmethod
    def __len__(self) -> int: ...


class InMemorySessionStore(SessionStore):
    """Lock-guarded dict store.

    ``max_age`` is an idle timeout in seconds. ``None`` (or 0) keeps sessions
    until they are removed explicitly.
    """

    def __init__(self, *, max_age: Optional[float] = None, clock: Callable[[], float] = time.time) -> None:
        self._by_id: Dict[str, Session] = {}
        self._by_user: Dict[str, Set[str]] = {}
        self._lock = threading.Lock()
        self._max_age = max_age or None
        self._clock = clock

    def _expired(self, s: Session, now: float) -> bool:
        return self._max_age is not None and now - s.last_seen > self._max_age

    def _drop(self, session_id: str) -> Optional[Session]:
        s = self._by_id.pop(session_id, None)
        if s is None:
            return None
        ids = self._by_user.get(s.username)
        if ids is not None:
            ids.discard(session_id)
            if not ids:
                del self._by_user[s.username]
        return s

    def add(self, session: Session) -> None:
        with self._lock:
            if session.session_id in self._by_id:
                raise ValueError(f"Session id already registered: {session.session_id!r}")
            self._by_id[session.session_id] = session
            self._by_user.setdefault(session.username, set()).add(session.session_id)

    def get(self, session_id: str) -> Optional[Session]:
        if not session_id:
            return None
        with self._lock:
            s = self._by_id.get(session_id)
            if s is None:
                return None
            now = self._clock()
            if self._expired(s, now):
                self._drop(session_id)
                return None
            if self._max_age is not None:
                s = replace(s, last_seen=now)
                self._by_id[session_id] = s
            return s

    def remove(self, session_id: str) -> Optional[Session]:
        if not session_id:
            return None
        with self._lock:
            return self._drop(session_id)

    def remove_user(self, username: str) -> List[Session]:
        with self._lock:
            ids = list(self._by_user.get(username, ()))
            return [s for s in (self._drop(i) for i in ids) if s is not None]

    def has_user(self, username: str) -> bool:
        with self._lock:
            now = self._clock()
            for sid in list(self._by_user.get(username, ())):
                if self._expired(self._by_id[sid], now):
                    self._drop(sid)
            return username in self._by_user

    def purge_expired(self) -> int:
        """Drop every idle-expired session. Returns how many were dropped."""
        if self._max_age is None:
            return 0
        with self._lock:
            now = self._clock()
            stale = [sid for sid, s in self._by_id.items() if self._expired(s, now)]
            for sid in stale:
                self._drop(sid)
            return len(stale)

    def __len__(self) -> int:
        with self._lock:
            return len(self._by_id)
