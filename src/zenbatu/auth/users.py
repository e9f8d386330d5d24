# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional

from zenbatu.errors import DuplicateAccount


@dataclass(frozen=True)
class AccountRecord:
    username: str
    password_hash: str

    def __repr__(self) -> str:
        return f"AccountRecord(username={self.username!r})"


class CredentialStore(ABC):
    """Narrow persistence interface for ``{username, password_hash}`` pairs.

    Implementations raise ``DuplicateAccount`` on a username clash and
    ``StoreUnavailable`` when the backend cannot be reached.
    """

    @abstractmethod
    async def get_account(self, username: str) -> Optional[AccountRecord]: ...

    @abstractmethod
    async def add_account(self, username: str, password_hash: str) -> None: ...

    @abstractmethod
    async def update_password_hash(self, username: str, password_hash: str) -> None: ...

    @abstractmethod
    async def delete_account(self, username: str) -> bool: ...


class InMemoryCredentialStore(CredentialStore):
    """Dict-backed store for tests and throwaway instances."""

    def __init__(self) -> None:
        self._accounts: Dict[str, AccountRecord] = {}
        self._lock = threading.Lock()

    async def get_account(self, username: str) -> Optional[AccountRecord]:
        return self._accounts.get(username)

    async def add_account(self, username: str, password_hash: str) -> None:
        with self._lock:
            if username in self._accounts:
                raise DuplicateAccount(f"Account '{username}' already exists")
            self._accounts[username] = AccountRecord(username=username, password_hash=password_hash)

    async def update_password_hash(self, username: str, password_hash: str) -> None:
        with self._lock:
            if username in self._accounts:
                self._accounts[username] = AccountRecord(username=username, password_hash=password_hash)

    async def delete_account(self, username: str) -> bool:
        with self._lock:
            return self._accounts.pop(username, None) is not None

    def __len__(self) -> int:
        return len(self._accounts)
