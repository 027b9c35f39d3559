from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from typing import Any

from app.core.metrics import USER_OPERATIONS, USERS_STORED
from app.models.user import User
from app.repos.user_repo import UserNotFoundError, UserRepo
from app.services.validation import validate_user

logger = logging.getLogger(__name__)

_USER_ID_RE = re.compile(r"[+-]?[0-9]+")


class UserValidationError(ValueError):
    def __init__(self, errors: list[str]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


class InvalidUserIdError(ValueError):
    def __init__(self, raw: str) -> None:
        super().__init__(f"invalid user id {raw!r}")
        self.raw = raw


def parse_user_id(raw: str) -> int:
    # Plain decimal only; int() alone would also take "1_000".
    candidate = raw.strip()
    if not _USER_ID_RE.fullmatch(candidate):
        raise InvalidUserIdError(raw)
    try:
        return int(candidate)
    except ValueError:
        # longer than sys.get_int_max_str_digits()
        raise InvalidUserIdError(raw) from None


def list_users(repo: UserRepo) -> list[User]:
    return repo.list_all()


def count_users(repo: UserRepo) -> int:
    return repo.count()


def register_user(repo: UserRepo, payload: Mapping[str, Any]) -> User:
    """Validate ``payload`` against the stored users and insert it.

    Validation and insert run under the repo lock so two concurrent
    submissions of the same email cannot both pass the uniqueness rule.
    """
    with repo.lock:
        errors = validate_user(payload, repo.list_all())
        if errors:
            logger.warning("Rejected user payload errors=%s", errors)
            USER_OPERATIONS.labels(operation="create", result="rejected").inc()
            raise UserValidationError(errors)

        user = repo.add(payload["name"], payload["email"], payload["age"])
        USERS_STORED.set(repo.count())

    USER_OPERATIONS.labels(operation="create", result="ok").inc()
    logger.info("Created user id=%d email=%s", user.id, user.email)
    return user


def get_user(repo: UserRepo, user_id: int) -> User:
    try:
        user = repo.find_by_id(user_id)
    except UserNotFoundError:
        USER_OPERATIONS.labels(operation="get", result="not_found").inc()
        raise
    USER_OPERATIONS.labels(operation="get", result="ok").inc()
    return user


def remove_user(repo: UserRepo, user_id: int) -> User:
    with repo.lock:
        try:
            user = repo.delete_by_id(user_id)
        except UserNotFoundError:
            logger.warning("Delete of unknown user id=%d", user_id)
            USER_OPERATIONS.labels(operation="delete", result="not_found").inc()
            raise
        USERS_STORED.set(repo.count())

    USER_OPERATIONS.labels(operation="delete", result="ok").inc()
    logger.info("Removed user id=%d email=%s", user.id, user.email)
    return user
