#!/usr/bin/env python3
from __future__ import annotations

import asyncio
import sys
from getpass import getpass

from zenbatu.auth.accounts import AccountManager
from zenbatu.config import load_settings
from zenbatu.core.logging import setup_logging
from zenbatu.errors import DuplicateAccount, ValidationError
from zenbatu.infra.accounts_repo import SqlCredentialStore
from zenbatu.infra.database import Database


async def _create(username: str, password: str) -> None:
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_file)
    db = Database(settings.db_path)
    db.initialize()
    await AccountManager(SqlCredentialStore(db)).sign_up(username, password)
    print(f"OK -> {username} @ {db.path}")


def main() -> None:
    username = input("Username: ").strip()
    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    try:
        asyncio.run(_create(username, pw1))
    except (ValidationError, DuplicateAccount) as e:
        print(str(e), file=sys.stderr)
        raise SystemExit(1)


if __name__ == "__main__":
    main()
