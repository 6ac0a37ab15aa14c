# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from argon2 import PasswordHasher as _Argon2Hasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError


class PasswordHasher:
    """Salted argon2id hashing with a tunable work factor."""

    def __init__(self, *, time_cost: int = 3, memory_cost: int = 65536) -> None:
        self._ph = _Argon2Hasher(time_cost=time_cost, memory_cost=memory_cost)

    def hash(self, plain: str) -> str:
        if not plain:
            raise ValueError("Empty password")
        return self._ph.hash(plain)

    def verify(self, plain: str, digest: str) -> bool:
        if not digest or not plain:
            return False
        try:
            return self._ph.verify(digest, plain)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False


_DEFAULT = PasswordHasher()


def hash_password(plain: str) -> str:
    return _DEFAULT.hash(plain)


def verify_password(plain: str, digest: str) -> bool:
    return _DEFAULT.verify(plain, digest)
