# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from sqlalchemy.exc import IntegrityError

from zenbatu.auth.users import AccountRecord, CredentialStore
from zenbatu.errors import DuplicateAccount
from zenbatu.infra.database import Database
from zenbatu.infra.models import Account


class SqlCredentialStore(CredentialStore):
    """``accounts`` table access. Only AccountManager talks to it."""

    def __init__(self, db: Database) -> None:
        self.db = db

    def _get(self, username: str) -> Optional[AccountRecord]:
        with self.db.session() as s:
            row = s.query(Account).filter(Account.username == username).first()
            if row is None:
                return None
            return AccountRecord(username=row.username, password_hash=row.password_hash)

    def _add(self, username: str, password_hash: str) -> None:
        try:
            with self.db.session() as s:
                s.add(Account(username=username, password_hash=password_hash))
        except IntegrityError as e:
            raise DuplicateAccount(f"Account '{username}' already exists") from e

    def _update_hash(self, username: str, password_hash: str) -> None:
        with self.db.session() as s:
            s.query(Account).filter(Account.username == username).update(
                {Account.password_hash: password_hash}, synchronize_session=False
            )

    def _delete(self, username: str) -> bool:
        with self.db.session() as s:
            n = s.query(Account).filter(Account.username == username).delete(synchronize_session=False)
        return n > 0

    async def get_account(self, username: str) -> Optional[AccountRecord]:
        return await self.db.run(self._get, username)

    async def add_account(self, username: str, password_hash: str) -> None:
        await self.db.run(self._add, username, password_hash)

    async def update_password_hash(self, username: str, password_hash: str) -> None:
        await self.db.run(self._update_hash, username, password_hash)

    async def delete_account(self, username: str) -> bool:
        return await self.db.run(self._delete, username)
