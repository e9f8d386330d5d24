# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import HashingError as Argon2HashingError
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from fastapi.concurrency import run_in_threadpool

from zenbatu.errors import HashingError

_PH = PasswordHasher()

# Verified against when the account does not exist, so both login failures cost the same.
_DUMMY_HASH = _PH.hash("zenbatu-dummy-password!")


def hash_password(plain: str) -> str:
    if not plain:
        raise ValueError("Empty password")
    try:
        return _PH.hash(plain)
    except Argon2HashingError as e:
        raise HashingError(f"argon2 hash failed: {e}") from e


def verify_password(hash_value: str, plain: str) -> bool:
    if not hash_value or not plain:
        return False
    try:
        return _PH.verify(hash_value, plain)
    except VerifyMismatchError:
        return False
    except (InvalidHashError, VerificationError) as e:
        raise HashingError(f"argon2 verify failed: {e}") from e


def needs_rehash(hash_value: str) -> bool:
    try:
        return _PH.check_needs_rehash(hash_value)
    except InvalidHashError:
        return False


def burn_verify(plain: str) -> None:
    """Spend one verification on a throwaway hash; the result is discarded."""
    verify_password(_DUMMY_HASH, plain or "x")


async def hash_password_async(plain: str) -> str:
    return await run_in_threadpool(hash_password, plain)


async def verify_password_async(hash_value: str, plain: str) -> bool:
    return await run_in_threadpool(verify_password, hash_value, plain)


async def burn_verify_async(plain: str) -> None:
    await run_in_threadpool(burn_verify, plain)
