"""Liveness and readiness endpoints.

/health answers "is the process up" and reports how many users are held
in memory.  /ready answers "can this instance take traffic"; with no
external dependencies that is true whenever the process can respond.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Response
from pydantic import BaseModel

from app.api.dependencies import UserRepoDep
from app.services import users_service

router = APIRouter(tags=["health"])


class HealthOut(BaseModel):
    success: bool = True
    message: str
    timestamp: datetime
    totalUsers: int


@router.get("/health", response_model=HealthOut)
def health(repo: UserRepoDep) -> HealthOut:
    return HealthOut(
        message="API is running",
        timestamp=datetime.now(timezone.utc),
        totalUsers=users_service.count_users(repo),
    )


@router.get("/ready")
async def ready() -> Response:
    return Response(status_code=200)
