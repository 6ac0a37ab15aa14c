# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Runtime settings read from the environment.

Every value has a default except the signing secret.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

_TRUTHY = {"1", "true", "yes", "y"}


def _flag(raw: Optional[str], default: bool = False) -> bool:
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass(frozen=True)
class Settings:
    secret_key: str
    data_dir: Path = Path("data")
    users_path: Optional[Path] = None
    sessions_path: Optional[Path] = None
    session_encryption_key: str = ""
    session_ttl_seconds: int = 3600  # 1 hour
    cookie_name: str = "portal_session"
    cookie_secure: bool = False
    hash_time_cost: int = 3
    hash_memory_cost: int = 65536
    host: str = "0.0.0.0"
    port: int = 3000
    reload: bool = False

    def __post_init__(self) -> None:
        if not self.secret_key:
            raise RuntimeError("Missing SECRET_KEY (or PORTAL_SECRET_KEY) in environment")
        data_dir = Path(self.data_dir).resolve()
        object.__setattr__(self, "data_dir", data_dir)
        if self.users_path is None:
            object.__setattr__(self, "users_path", data_dir / "users.yml")
        if self.sessions_path is None:
            object.__setattr__(self, "sessions_path", data_dir / "sessions.yml")
        if self.session_ttl_seconds <= 0:
            raise RuntimeError("PORTAL_SESSION_TTL must be a positive number of seconds")

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        data_dir = Path(env.get("PORTAL_DATA_DIR", "data"))
        users = env.get("PORTAL_USERS_PATH")
        sessions = env.get("PORTAL_SESSIONS_PATH")
        return cls(
            secret_key=env.get("PORTAL_SECRET_KEY") or env.get("SECRET_KEY") or "",
            data_dir=data_dir,
            users_path=Path(users) if users else None,
            sessions_path=Path(sessions) if sessions else None,
            session_encryption_key=env.get("PORTAL_SESSION_ENCRYPTION_KEY", ""),
            session_ttl_seconds=int(env.get("PORTAL_SESSION_TTL", "3600")),
            cookie_name=env.get("PORTAL_COOKIE_NAME", "portal_session"),
            cookie_secure=_flag(env.get("PORTAL_COOKIE_SECURE")),
            hash_time_cost=int(env.get("PORTAL_HASH_TIME_COST", "3")),
            hash_memory_cost=int(env.get("PORTAL_HASH_MEMORY_COST", "65536")),
            host=env.get("PORTAL_HOST", "0.0.0.0"),
            port=int(env.get("PORT") or env.get("PORTAL_PORT", "3000")),
            reload=_flag(env.get("PORTAL_RELOAD")),
        )
