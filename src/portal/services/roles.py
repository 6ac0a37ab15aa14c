# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Admin-only role changes.

Changes apply to the stored user only. Sessions opened before the change
keep their old role until the user logs in again.
"""

from __future__ import annotations

import logging
from typing import Optional

from portal.auth.users import Role, User
from portal.context import AppContext
from portal.errors import NotFoundError

logger = logging.getLogger(__name__)


def set_role(ctx: AppContext, user_id: str, role: Role) -> Optional[User]:
    """Set the role unconditionally; an unknown id is a no-op and returns None."""
    try:
        user = ctx.users.update_role(user_id, role)
    except NotFoundError:
        logger.info("role change to %s ignored: no user %s", role.value, user_id)
        return None
    logger.info("role of user=%s set to %s", user.id, role.value)
    return user


def promote(ctx: AppContext, user_id: str) -> Optional[User]:
    return set_role(ctx, user_id, Role.ADMIN)


def demote(ctx: AppContext, user_id: str) -> Optional[User]:
    return set_role(ctx, user_id, Role.USER)
