# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable

from cryptography.fernet import Fernet
from fastapi import Request

from portal.auth.passwords import PasswordHasher
from portal.auth.session import CookieSigner, SessionStore, fernet_from_secret
from portal.auth.users import UserStore
from portal.config import Settings


@dataclass
class AppContext:
    """Handles shared by every request of one application instance."""

    settings: Settings
    users: UserStore
    sessions: SessionStore
    signer: CookieSigner
    hasher: PasswordHasher


def build_context(settings: Settings, *, clock: Callable[[], float] = time.time) -> AppContext:
    if settings.session_encryption_key:
        fernet = Fernet(settings.session_encryption_key)
    else:
        fernet = fernet_from_secret(settings.secret_key)
    return AppContext(
        settings=settings,
        users=UserStore(settings.users_path),
        sessions=SessionStore(
            settings.sessions_path,
            fernet,
            ttl_seconds=settings.session_ttl_seconds,
            clock=clock,
        ),
        signer=CookieSigner(settings.secret_key, max_age=settings.session_ttl_seconds),
        hasher=PasswordHasher(
            time_cost=settings.hash_time_cost,
            memory_cost=settings.hash_memory_cost,
        ),
    )


def get_context(request: Request) -> AppContext:
    return request.app.state.ctx
