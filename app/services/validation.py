"""Field rules for a submitted user payload.

Each rule is evaluated on its own so the caller gets every problem at
once, in the order name -> email -> age.  Only the email rule looks at
the stored users (uniqueness), and only after the format check passed.
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from typing import Any

from app.models.user import User

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

MIN_NAME_LENGTH = 3
MIN_AGE = 1
MAX_AGE = 150

NAME_REQUIRED = "Name is required and must be a valid string"
NAME_TOO_SHORT = f"Name must be at least {MIN_NAME_LENGTH} characters"
EMAIL_REQUIRED = "Email is required"
EMAIL_INVALID = "Invalid email"
EMAIL_DUPLICATE = "Email already registered"
AGE_REQUIRED = "Age is required"
AGE_NOT_INTEGER = "Age must be an integer"
AGE_OUT_OF_RANGE = f"Age must be between {MIN_AGE} and {MAX_AGE}"


def is_valid_email(value: str) -> bool:
    return EMAIL_RE.match(value) is not None


def is_integral(value: object) -> bool:
    # bool is an int subclass but never a valid age
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, float) and value.is_integer()


def _check_name(name: Any) -> str | None:
    if not isinstance(name, str) or not name.strip():
        return NAME_REQUIRED
    if len(name.strip()) < MIN_NAME_LENGTH:
        return NAME_TOO_SHORT
    return None


def _check_email(email: Any, existing_users: Iterable[User]) -> str | None:
    if not isinstance(email, str) or not email.strip():
        return EMAIL_REQUIRED
    normalized = email.strip()
    if not is_valid_email(normalized):
        return EMAIL_INVALID
    normalized = normalized.lower()
    if any(u.email.lower() == normalized for u in existing_users):
        return EMAIL_DUPLICATE
    return None


def _check_age(age: Any) -> str | None:
    if age is None:
        return AGE_REQUIRED
    if not is_integral(age):
        return AGE_NOT_INTEGER
    if not MIN_AGE <= age <= MAX_AGE:
        return AGE_OUT_OF_RANGE
    return None


def validate_user(
    candidate: Mapping[str, Any], existing_users: Iterable[User]
) -> list[str]:
    """Return the rule violations for ``candidate`` (empty list = valid).

    ``candidate`` may hold values of any type under ``name``, ``email``
    and ``age``; absent keys count as missing.
    """
    checks = (
        _check_name(candidate.get("name")),
        _check_email(candidate.get("email"), existing_users),
        _check_age(candidate.get("age")),
    )
    return [error for error in checks if error is not None]
