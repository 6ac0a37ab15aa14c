# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification (argon2)
- User store backed by data/users.yml
- Server-side sessions (encrypted at rest) behind signed cookies (itsdangerous)
"""
