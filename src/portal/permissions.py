# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request

from portal.auth.session import SessionSnapshot
from portal.auth.users import Role

LOGIN_PATH = "/login"


def current_session_optional(request: Request) -> Optional[SessionSnapshot]:
    return getattr(request.state, "session", None)


def require_user(request: Request) -> SessionSnapshot:
    s = current_session_optional(request)
    if s:
        return s
    raise HTTPException(status_code=303, headers={"Location": LOGIN_PATH})


def require_admin(request: Request) -> SessionSnapshot:
    # No redirect here: without a session this is a plain 403.
    s = current_session_optional(request)
    if s is None:
        raise HTTPException(status_code=403, detail="Forbidden")
    if s.role is Role.ADMIN:
        return s
    if s.role is Role.USER:
        raise HTTPException(status_code=403, detail="Forbidden")
    raise AssertionError(f"unhandled role {s.role!r}")


def cookie_settings(secure: bool = False) -> dict:
    return {"httponly": True, "samesite": "lax", "secure": secure}
