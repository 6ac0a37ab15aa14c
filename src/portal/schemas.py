# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Form payloads for signup and login."""

from __future__ import annotations

from typing import Any, Dict, Type, TypeVar

import pydantic
from pydantic import BaseModel, EmailStr, Field

from portal.auth.users import NAME_MAX_LEN, Role
from portal.errors import ValidationError

PASSWORD_MIN_LEN = 5
PASSWORD_MAX_LEN = 30

M = TypeVar("M", bound=BaseModel)


class LoginForm(BaseModel):
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)


class SignupForm(BaseModel):
    name: str = Field(min_length=1, max_length=NAME_MAX_LEN)
    email: EmailStr
    password: str = Field(min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    # Callers may pick "admin" here; kept as-is, see DESIGN.md.
    role: Role = Role.USER


def first_error_message(exc: pydantic.ValidationError) -> str:
    """Render only the first failure, e.g. 'email: value is not a valid email address: ...'."""
    errors = exc.errors()
    if not errors:
        return "Invalid input"
    err = errors[0]
    loc = err.get("loc") or ()
    field = str(loc[0]) if loc else "input"
    return f"{field}: {err.get('msg', 'is invalid')}"


def parse_form(model: Type[M], data: Dict[str, Any]) -> M:
    """Validate raw form fields; blank optional fields count as omitted."""
    fields = model.model_fields
    payload = {}
    for k, v in data.items():
        if k not in fields:
            continue
        if v in ("", None) and not fields[k].is_required():
            continue
        payload[k] = v
    try:
        return model.model_validate(payload)
    except pydantic.ValidationError as e:
        raise ValidationError(first_error_message(e)) from None
