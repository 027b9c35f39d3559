"""User collection endpoints under /api/users.

Handlers stay thin: they parse the path id, call users_service and wrap
the result in the ``{success, ...}`` envelope.  Failures are raised as
domain errors and turned into responses by app.api.exception_handlers.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from fastapi import APIRouter, Body, status
from pydantic import BaseModel

from app.api.dependencies import UserRepoDep
from app.models.user import User
from app.services import users_service

router = APIRouter(prefix="/api/users", tags=["users"])



# --- Response schemas ------------------------------------------------------


class UserOut(BaseModel):
    id: int
    name: str
    email: str
    age: int
    createdAt: datetime

    @classmethod
    def from_user(cls, user: User) -> UserOut:
        return cls(
            id=user.id,
            name=user.name,
            email=user.email,
            age=user.age,
            createdAt=user.created_at,
        )


class UserListOut(BaseModel):
    success: bool = True
    count: int
    data: list[UserOut]


class UserOneOut(BaseModel):
    success: bool = True
    data: UserOut


class UserMessageOut(BaseModel):
    success: bool = True
    message: str
    data: UserOut


# --- Endpoints -------------------------------------------------------------


@router.get("", response_model=UserListOut)
def list_users(repo: UserRepoDep) -> UserListOut:
    users = users_service.list_users(repo)
    return UserListOut(count=len(users), data=[UserOut.from_user(u) for u in users])


@router.post("", response_model=UserMessageOut, status_code=status.HTTP_201_CREATED)
def create_user(
    repo: UserRepoDep,
    payload: Annotated[dict[str, Any] | None, Body()] = None,
) -> UserMessageOut:
    # Fields are checked by the validator, not by pydantic, so that every
    # rule violation is reported in one response.
    user = users_service.register_user(repo, payload or {})
    return UserMessageOut(
        message="User registered successfully",
        data=UserOut.from_user(user),
    )


@router.get("/{user_id}", response_model=UserOneOut)
def get_user(user_id: str, repo: UserRepoDep) -> UserOneOut:
    user = users_service.get_user(repo, users_service.parse_user_id(user_id))
    return UserOneOut(data=UserOut.from_user(user))


@router.delete("/{user_id}", response_model=UserMessageOut)
def delete_user(user_id: str, repo: UserRepoDep) -> UserMessageOut:
    user = users_service.remove_user(repo, users_service.parse_user_id(user_id))
    return UserMessageOut(
        message="User removed successfully",
        data=UserOut.from_user(user),
    )
