# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Credential shape checks, run before any store round-trip.

Usernames: 3-50 ASCII letters, digits or underscores.
Passwords: 3-50 characters of any kind, with at least one of ``!@#$%&*-_``.
"""

from __future__ import annotations

import re

from zenbatu.errors import InvalidPassword, InvalidUsername

MIN_LENGTH = 3
MAX_LENGTH = 50
PASSWORD_SPECIALS = "!@#$%&*-_"

USERNAME_RE = re.compile(r"[A-Za-z0-9_]{%d,%d}" % (MIN_LENGTH, MAX_LENGTH))
PASSWORD_RE = re.compile(r".{%d,%d}" % (MIN_LENGTH, MAX_LENGTH), re.DOTALL)
_SPECIAL_RE = re.compile("[%s]" % re.escape(PASSWORD_SPECIALS))


def validate_username(username: object) -> str:
    if not isinstance(username, str) or not USERNAME_RE.fullmatch(username):
        raise InvalidUsername()
    return username


def validate_password(password: object) -> str:
    if not isinstance(password, str) or not PASSWORD_RE.fullmatch(password):
        raise InvalidPassword()
    if not _SPECIAL_RE.search(password):
        raise InvalidPassword()
    return password
