# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional, Tuple

from portal.auth.session import SessionSnapshot
from portal.auth.users import User
from portal.context import AppContext
from portal.errors import AuthenticationError, NotFoundError
from portal.schemas import LoginForm, SignupForm

logger = logging.getLogger(__name__)


def signup(ctx: AppContext, form: SignupForm) -> Tuple[User, str]:
    """Create the user and open a session for it. Returns (user, token)."""
    digest = ctx.hasher.hash(form.password)
    user = ctx.users.create(form.name, str(form.email), digest, form.role)
    token = ctx.sessions.create_session(SessionSnapshot.of(user))
    logger.info("signup user=%s role=%s", user.id, user.role.value)
    return user, token


def authenticate(ctx: AppContext, email: str, password: str) -> User:
    user = ctx.users.find_by_email(email)
    if user is None:
        raise NotFoundError("User not found")
    if not ctx.hasher.verify(password, user.password_hash):
        logger.warning("login rejected: bad password for user=%s", user.id)
        raise AuthenticationError("Invalid password")
    return user


def login(ctx: AppContext, form: LoginForm) -> Tuple[User, str]:
    user = authenticate(ctx, str(form.email), form.password)
    token = ctx.sessions.create_session(SessionSnapshot.of(user))
    logger.info("login user=%s", user.id)
    return user, token


def logout(ctx: AppContext, token: Optional[str]) -> None:
    ctx.sessions.destroy_session(token)
    if token:
        logger.info("logout")
