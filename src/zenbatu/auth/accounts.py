# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Account sign-up, login and the session lifecycle.

Per username: no account -> (sign_up) -> registered -> (log_in) -> one or more
active sessions -> (log_out) -> registered. A session is only registered after
the credentials were verified; the username it carries is the tenant key for
every inventory query.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from zenbatu.auth import passwords
from zenbatu.auth.session import InMemorySessionStore, Session, SessionStore
from zenbatu.auth.users import AccountRecord, CredentialStore
from zenbatu.auth.validators import validate_password, validate_username
from zenbatu.core.ids import generate_id
from zenbatu.errors import (
    HashingError,
    InvalidCredentials,
    StoreUnavailable,
    UnknownAccount,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Re-rolls of the id generator before giving up on a clashing session id.
_MAX_ID_ATTEMPTS = 3


class AccountManager:
    def __init__(
        self,
        credentials: CredentialStore,
        sessions: Optional[SessionStore] = None,
        *,
        id_factory: Callable[[], str] = generate_id,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.credentials = credentials
        self.sessions = sessions if sessions is not None else InMemorySessionStore()
        self._new_id = id_factory
        self._clock = clock

    # --- Accounts ---

    async def sign_up(self, username: str, password: str) -> None:
        logger.info("Attempting to sign up username %r", username)
        try:
            validate_username(username)
            validate_password(password)
        except ValidationError as e:
            logger.info("Sign-up rejected for %r: %s", username, type(e).__name__)
            raise

        hashed = await passwords.hash_password_async(password)
        await self.credentials.add_account(username, hashed)
        logger.info("Signed up %r", username)

    async def check_credentials(self, username: str, password: str) -> AccountRecord:
        """Verify a username/password pair against the credential store.

        Raises ``UnknownAccount`` or ``InvalidCredentials``; both are
        ``LoginError`` and must look identical to the client.
        """
        account = await self.credentials.get_account(username)
        if account is None:
            await passwords.burn_verify_async(password)
            logger.info("Login failed for %r: unknown account", username)
            raise UnknownAccount(f"No account named '{username}'")

        if not await passwords.verify_password_async(account.password_hash, password):
            logger.warning("Login failed for %r: password does not match stored hash", username)
            raise InvalidCredentials(f"Wrong password for '{username}'")

        return account

    async def log_in(self, username: str, password: str) -> str:
        """Authenticate and register a new session. Returns the session id."""
        logger.info("Attempting to log in with username %r", username)
        try:
            validate_username(username)
        except ValidationError:
            logger.info("Login rejected: malformed username %r", username)
            raise

        account = await self.check_credentials(username, password)
        await self._rotate_hash_if_stale(account, password)

        now = self._clock()
        for _ in range(_MAX_ID_ATTEMPTS):
            session = Session(session_id=self._new_id(), username=account.username, created_at=now, last_seen=now)
            try:
                self.sessions.add(session)
            except ValueError:
                logger.warning("Session id collision, drawing a new one")
                continue
            logger.info("Logged in %r", account.username)
            return session.session_id

        raise RuntimeError("Could not allocate a unique session id")

    async def delete_account(self, username: str, password: str) -> bool:
        """Remove the account after re-checking its password, then drop its sessions."""
        validate_username(username)
        await self.check_credentials(username, password)
        deleted = await self.credentials.delete_account(username)
        dropped = self.log_out_all(username)
        logger.info("Deleted account %r (%d session(s) closed)", username, dropped)
        return deleted

    async def _rotate_hash_if_stale(self, account: AccountRecord, password: str) -> None:
        if not passwords.needs_rehash(account.password_hash):
            return
        try:
            new_hash = await passwords.hash_password_async(password)
            await self.credentials.update_password_hash(account.username, new_hash)
            logger.info("Rotated password hash for %r", account.username)
        except (StoreUnavailable, HashingError):
            logger.exception("Password hash rotation failed for %r", account.username)

    # --- Sessions ---

    def get_session(self, session_id: str) -> Optional[Session]:
        return self.sessions.get(session_id)

    def get_username(self, session_id: str) -> Optional[str]:
        s = self.get_session(session_id)
        if s is None or not s.username:
            return None
        return s.username

    def log_out(self, session_id: str) -> None:
        if self.sessions.remove(session_id) is not None:
            logger.info("Logged out a session")

    def log_out_all(self, username: str) -> int:
        return len(self.sessions.remove_user(username))

    def is_session_active(self, session_id: str) -> bool:
        return self.get_session(session_id) is not None

    def is_username_logged_in(self, username: str) -> bool:
        return self.sessions.has_user(username)

    def active_session_count(self) -> int:
        return len(self.sessions)
