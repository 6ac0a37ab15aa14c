# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import enum
import logging
import os
import tempfile
import threading
import uuid
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Dict, List, Optional

import pydantic
import yaml
from pydantic import EmailStr, TypeAdapter

from portal.errors import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

NAME_MAX_LEN = 30

_EMAIL = TypeAdapter(EmailStr)


class Role(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"

    @classmethod
    def parse(cls, value: object) -> "Role":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or "").strip().lower())
        except ValueError:
            raise ValidationError("role: must be one of [user, admin]") from None


@dataclass(frozen=True)
class User:
    id: str
    name: str
    email: str
    password_hash: str
    role: Role = Role.USER

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def to_doc(self) -> Dict[str, str]:
        doc = asdict(self)
        doc["role"] = self.role.value
        return doc

    @classmethod
    def from_doc(cls, doc: dict) -> "User":
        return cls(
            id=str(doc.get("id") or ""),
            name=str(doc.get("name") or ""),
            email=str(doc.get("email") or ""),
            password_hash=str(doc.get("password_hash") or ""),
            role=Role.parse(doc.get("role") or Role.USER.value),
        )


def normalize_email(email: str) -> str:
    """Same normalization pydantic applies to form input (lowercased domain)."""
    try:
        return _EMAIL.validate_python(email)
    except pydantic.ValidationError:
        raise ValidationError("email: must be a valid email") from None


def _check_fields(name: str, email: str, password_hash: str) -> str:
    if not name or not name.strip():
        raise ValidationError("name: must not be empty")
    if len(name) > NAME_MAX_LEN:
        raise ValidationError(f"name: must be at most {NAME_MAX_LEN} characters long")
    normalized = normalize_email(email)
    if not password_hash:
        raise ValidationError("password: hash is missing")
    return normalized


class UserStore:
    """User documents persisted in a single YAML file.

    Every mutation rewrites the file atomically under a lock, so a single
    record update is never observed half-applied. There are no multi-record
    transactions.

    The lock only serializes writers inside one process. Run a single
    worker without reload; several processes sharing the file can lose
    updates.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)
        self._lock = threading.RLock()

    # -- persistence ---------------------------------------------------------

    def _read(self) -> List[User]:
        if not self.path.exists():
            return []
        try:
            raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError):
            logger.error("user store unreadable: %s", self.path)
            raise
        docs = (raw.get("users") or []) if isinstance(raw, dict) else []
        return [User.from_doc(d) for d in docs if isinstance(d, dict)]

    def _write(self, users: List[User]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = {"version": 1, "users": [u.to_doc() for u in users]}
        fd, tmp = tempfile.mkstemp(dir=str(self.path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                yaml.safe_dump(payload, fh, sort_keys=False, allow_unicode=True)
            os.replace(tmp, self.path)
        except Exception:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    # -- operations ----------------------------------------------------------

    def create(self, name: str, email: str, password_hash: str, role: object = Role.USER) -> User:
        email = _check_fields(name, email, password_hash)
        user = User(
            id=uuid.uuid4().hex,
            name=name,
            email=email,
            password_hash=password_hash,
            role=Role.parse(role),
        )
        with self._lock:
            users = self._read()
            users.append(user)
            self._write(users)
        return user

    def find_by_email(self, email: str) -> Optional[User]:
        # Emails are not unique; the first stored match wins.
        e = (email or "").strip()
        if not e:
            return None
        try:
            e = normalize_email(e)
        except ValidationError:
            return None
        for u in self._read():
            if u.email == e:
                return u
        return None

    def get(self, user_id: str) -> Optional[User]:
        for u in self._read():
            if u.id == user_id:
                return u
        return None

    def list_users(self) -> List[User]:
        return self._read()

    def update_role(self, user_id: str, role: Role) -> User:
        with self._lock:
            users = self._read()
            for idx, u in enumerate(users):
                if u.id == user_id:
                    users[idx] = replace(u, role=role)
                    self._write(users)
                    return users[idx]
        raise NotFoundError(f"No user with id {user_id!r}")
