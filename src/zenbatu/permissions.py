# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from zenbatu.auth.accounts import AccountManager
from zenbatu.auth.tokens import SessionSigner
from zenbatu.config import Settings
from zenbatu.errors import SessionNotFound


@dataclass(frozen=True)
class CurrentUser:
    username: str
    session_id: str


def _accounts(request: Request) -> AccountManager:
    return request.app.state.accounts


def session_id_from_cookie(request: Request) -> Optional[str]:
    settings: Settings = request.app.state.settings
    signer: SessionSigner = request.app.state.signer
    return signer.unsign(request.cookies.get(settings.cookie_name, ""))


def load_user(request: Request, session_id: Optional[str] = None) -> Optional[CurrentUser]:
    """Resolve the caller from an explicit session id, falling back to the cookie."""
    sid = session_id or session_id_from_cookie(request)
    if not sid:
        return None
    username = _accounts(request).get_username(sid)
    if not username:
        return None
    return CurrentUser(username=username, session_id=sid)


def current_user_optional(request: Request) -> Optional[CurrentUser]:
    u = getattr(request.state, "user", None)
    if u is not None:
        return u
    return load_user(request)


def require_user(request: Request, session_id: Optional[str] = None) -> CurrentUser:
    """The only place inventory routes get a username from."""
    u = load_user(request, session_id) if session_id else current_user_optional(request)
    if u is None:
        raise SessionNotFound()
    return u


def cookie_settings(settings: Settings) -> dict:
    return {"httponly": True, "samesite": "lax", "secure": settings.cookie_secure}
