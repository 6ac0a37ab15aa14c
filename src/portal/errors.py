# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations


class PortalError(Exception):
    """Base error carrying a message safe to show to the visitor."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ValidationError(PortalError):
    pass


class NotFoundError(PortalError):
    pass


class AuthenticationError(PortalError):
    pass


class AuthorizationError(PortalError):
    """Never raised directly: `permissions.require_user` answers it with a
    redirect to the login page and `permissions.require_admin` with a 403.
    """
