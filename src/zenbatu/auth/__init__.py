# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication and session layer.

This package provides:
- Username/password shape validation
- Password hashing/verification (argon2)
- Account storage behind the CredentialStore interface
- The in-process active-session table
- Signed session cookies (itsdangerous)
- AccountManager, which ties the above together
"""
