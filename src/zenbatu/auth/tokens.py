# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from itsdangerous import BadSignature, URLSafeTimedSerializer


class SessionSigner:
    """Signs session ids for the client-held cookie.

    The signature only proves the id was issued by this server. It carries no
    expiry of its own: whether the session is still active (including idle
    timeout) is always answered by the session store.
    """

    def __init__(self, secret_key: str, *, salt: str = "zenbatu.session.v1") -> None:
        if not secret_key:
            raise RuntimeError("A secret key is required to sign session cookies")
        self._s = URLSafeTimedSerializer(secret_key=secret_key, salt=salt)

    def sign(self, session_id: str) -> str:
        return self._s.dumps({"sid": session_id})

    def unsign(self, token: str) -> Optional[str]:
        if not token:
            return None
        try:
            data = self._s.loads(token)
        except BadSignature:
            return None
        sid = str((data or {}).get("sid") or "").strip() if isinstance(data, dict) else ""
        return sid or None
