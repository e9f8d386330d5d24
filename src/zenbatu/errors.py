# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error hierarchy shared by the account, session and inventory layers.

Validation and credential failures are expected outcomes: the HTTP layer turns
them into user-facing messages. Store and hashing failures are faults: they fail
the current request and are logged with full detail.
"""

from __future__ import annotations


class ZenbatuError(Exception):
    """Base class for every error raised by zenbatu."""

    public_message = "Unexpected error."

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.public_message)


# --- Input shape ---


class ValidationError(ZenbatuError, ValueError):
    public_message = "Invalid input."


class InvalidCredentialsFormat(ValidationError):
    public_message = "Invalid username or password format."


class InvalidUsername(InvalidCredentialsFormat):
    public_message = (
        "The username must be between 3 and 50 characters long and can only contain "
        "letters, numbers or underscores."
    )


class InvalidPassword(InvalidCredentialsFormat):
    public_message = (
        "The password must be between 3 and 50 characters long and can contain letters "
        "or numbers, as well as at least one special character among the following: !@#$%&*-_"
    )


# --- Authentication ---


class LoginError(ZenbatuError):
    """Single externally visible login failure.

    Subclasses tell the two causes apart for logging; callers facing the client
    must only ever show ``public_message``.
    """

    public_message = "Invalid username or password."


class UnknownAccount(LoginError):
    pass


class InvalidCredentials(LoginError):
    pass


class DuplicateAccount(ZenbatuError):
    public_message = "That username is already taken."


class SessionNotFound(ZenbatuError):
    public_message = "Session Id does not exist!"


# --- Infrastructure ---


class StoreUnavailable(ZenbatuError):
    public_message = "The data store is not available right now."


class HashingError(ZenbatuError):
    public_message = "Could not process the password."


class RecordNotFound(ZenbatuError):
    public_message = "Record not found."
