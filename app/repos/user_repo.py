from __future__ import annotations

import threading
from contextlib import AbstractContextManager
from datetime import datetime, timezone
from typing import Any, Protocol

from app.models.user import User


class UserNotFoundError(LookupError):
    def __init__(self, user_id: int) -> None:
        super().__init__(f"user {user_id} not found")
        self.user_id = user_id


class UserRepo(Protocol):
    lock: AbstractContextManager[Any]

    def add(self, name: str, email: str, age: int) -> User: ...
    def list_all(self) -> list[User]: ...
    def find_by_id(self, user_id: int) -> User: ...
    def delete_by_id(self, user_id: int) -> User: ...
    def count(self) -> int: ...


class InMemoryUserRepo:
    """Ordered user store with an id counter that never goes backwards.

    Callers validate before ``add``; the repo only normalizes.  ``lock`` is
    reentrant so a caller can hold it across validate-then-add while the
    repo methods take it again internally.
    """

    def __init__(self) -> None:
        self.lock = threading.RLock()
        self._users: list[User] = []
        self._next_id = 1

    def add(self, name: str, email: str, age: int) -> User:
        with self.lock:
            user = User(
                id=self._next_id,
                name=name.strip(),
                email=email.strip().lower(),
                age=int(age),
                created_at=datetime.now(timezone.utc),
            )
            self._next_id += 1
            self._users.append(user)
            return user

    def list_all(self) -> list[User]:
        with self.lock:
            return list(self._users)

    def find_by_id(self, user_id: int) -> User:
        with self.lock:
            for u in self._users:
                if u.id == user_id:
                    return u
        raise UserNotFoundError(user_id)

    def delete_by_id(self, user_id: int) -> User:
        with self.lock:
            for i, u in enumerate(self._users):
                if u.id == user_id:
                    return self._users.pop(i)
        raise UserNotFoundError(user_id)

    def count(self) -> int:
        with self.lock:
            return len(self._users)
