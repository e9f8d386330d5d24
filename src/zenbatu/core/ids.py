# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Opaque identifiers for session tokens and asset records (random UUID4)."""

from __future__ import annotations

import uuid


def generate_id() -> str:
    return str(uuid.uuid4())
