from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from app.repos.user_repo import UserRepo


def get_user_repo(request: Request) -> UserRepo:
    """Hand the app-owned user store to an endpoint.

    The store is created once per app in ``app.main`` and kept on
    ``app.state``; tests swap or clear it there.
    """
    return request.app.state.user_repo


UserRepoDep = Annotated[UserRepo, Depends(get_user_repo)]
