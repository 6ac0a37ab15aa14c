# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import base64
import hashlib
import json
import logging
import os
import secrets
import tempfile
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Callable, Dict, Optional

import yaml
from cryptography.fernet import Fernet, InvalidToken
from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

from portal.auth.users import Role, User

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 60 * 60


@dataclass(frozen=True)
class SessionSnapshot:
    """Identity copied at login; not refreshed when the user record changes."""

    name: str
    email: str
    role: Role

    @classmethod
    def of(cls, user: User) -> "SessionSnapshot":
        return cls(name=user.name, email=user.email, role=user.role)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def fernet_from_secret(secret: str) -> Fernet:
    """Derive a Fernet key from an arbitrary secret string."""
    digest = hashlib.sha256(secret.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def _token_key(token: str) -> str:
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionStore:
    """Server-side sessions keyed by an opaque token.

    Only a hash of the token is written to disk and the snapshot is stored
    Fernet-encrypted. Expiry is absolute: loading never extends it. Expired
    records are dropped whenever a new session is written.

    The lock only serializes writers inside one process. Run a single
    worker without reload; several processes sharing the file can lose
    updates.
    """

    def __init__(
        self,
        path: Path,
        fernet: Fernet,
        *,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.path = Path(path)
        self.ttl_seconds = int(ttl_seconds)
        self._fernet = fernet
        self._clock = clock
        self._lock = threading.RLock()

    def _read(self) -> Dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError):
            logger.error("session store unreadable: %s", self.path)
            raise
        sessions = raw.get("sessions") if isinstance(raw, dict) else None
        return dict(sessions) if isinstance(sessions, dict) else {}

    def _write(self, sessions: Dict[str, dict]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                yaml.safe_dump({"version": 1, "sessions": sessions}, fh, sort_keys=False)
            os.replace(tmp, self.path)
        except Exception:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def _alive(self, sessions: Dict[str, dict]) -> Dict[str, dict]:
        now = self._clock()
        return {
            k: v
            for k, v in sessions.items()
            if isinstance(v, dict) and now < float(v.get("expires_at") or 0)
        }

    def _seal(self, snapshot: SessionSnapshot) -> str:
        data = asdict(snapshot)
        data["role"] = snapshot.role.value
        return self._fernet.encrypt(json.dumps(data).encode("utf-8")).decode("ascii")

    def _open(self, sealed: str) -> Optional[SessionSnapshot]:
        try:
            data = json.loads(self._fernet.decrypt(sealed.encode("ascii")))
            return SessionSnapshot(
                name=str(data["name"]),
                email=str(data["email"]),
                role=Role(data["role"]),
            )
        except (InvalidToken, ValueError, KeyError, TypeError):
            logger.warning("discarding unreadable session record")
            return None

    def create_session(self, snapshot: SessionSnapshot) -> str:
        token = secrets.token_urlsafe(32)
        record = {
            "expires_at": self._clock() + self.ttl_seconds,
            "data": self._seal(snapshot),
        }
        with self._lock:
            # Abandoned sessions are never loaded again; drop them here.
            sessions = self._alive(self._read())
            sessions[_token_key(token)] = record
            self._write(sessions)
        return token

    def load_session(self, token: Optional[str]) -> Optional[SessionSnapshot]:
        if not token:
            return None
        key = _token_key(token)
        with self._lock:
            sessions = self._read()
            record = sessions.get(key)
            if not isinstance(record, dict):
                return None
            if self._clock() >= float(record.get("expires_at") or 0):
                del sessions[key]
                self._write(sessions)
                return None
        return self._open(str(record.get("data") or ""))

    def destroy_session(self, token: Optional[str]) -> None:
        if not token:
            return
        key = _token_key(token)
        with self._lock:
            sessions = self._read()
            if key in sessions:
                del sessions[key]
                self._write(sessions)

    def purge_expired(self) -> int:
        """Drop every expired record; returns how many were removed."""
        with self._lock:
            sessions = self._read()
            alive = self._alive(sessions)
            removed = len(sessions) - len(alive)
            if removed:
                self._write(alive)
        return removed


class CookieSigner:
    """Wraps the opaque session token in a signed, timestamped cookie value."""

    def __init__(self, secret: str, *, max_age: int = DEFAULT_TTL_SECONDS, salt: str = "portal.session.v1") -> None:
        self.max_age = max_age
        self._s = URLSafeTimedSerializer(secret_key=secret, salt=salt)

    def sign(self, token: str) -> str:
        return self._s.dumps({"t": token})

    def unsign(self, value: Optional[str]) -> Optional[str]:
        if not value:
            return None
        try:
            data = self._s.loads(value, max_age=self.max_age)
        except (BadSignature, BadTimeSignature):
            return None
        t = str((data or {}).get("t") or "").strip() if isinstance(data, dict) else ""
        return t or None
