"""Translate errors into the ``{success: false, message, ...}`` envelope.

Domain errors raised by users_service and the repo map to 400/404.
Framework errors (unknown route, unparseable body) are reshaped into the
same envelope.  Anything else is logged with its traceback and answered
with a generic 500; the process keeps serving.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Mapping
from typing import cast

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import JSONResponse, Response

from app.repos.user_repo import UserNotFoundError
from app.services.users_service import InvalidUserIdError, UserValidationError

logger = logging.getLogger(__name__)

ExceptionHandler = Callable[[Request, Exception], Awaitable[Response]]


def _envelope(
    status_code: int,
    message: str,
    headers: Mapping[str, str] | None = None,
    **extra: object,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message, **extra},
        headers=headers,
    )


async def user_validation_error_handler(
    _request: Request, exc: UserValidationError
) -> Response:
    return _envelope(status.HTTP_400_BAD_REQUEST, "Invalid data", errors=exc.errors)


async def invalid_user_id_handler(
    _request: Request, _exc: InvalidUserIdError
) -> Response:
    return _envelope(status.HTTP_400_BAD_REQUEST, "Invalid ID")


async def user_not_found_handler(
    _request: Request, _exc: UserNotFoundError
) -> Response:
    return _envelope(status.HTTP_404_NOT_FOUND, "User not found")


async def request_validation_error_handler(
    request: Request, exc: RequestValidationError
) -> Response:
    errors = [
        f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
        for err in exc.errors()
    ]
    logger.warning("Malformed request body path=%s errors=%s", request.url.path, errors)
    return _envelope(status.HTTP_400_BAD_REQUEST, "Invalid request body", errors=errors)


async def http_exception_handler(
    _request: Request, exc: StarletteHTTPException
) -> Response:
    # Unmatched routes surface as Starlette's bare 404.
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        message = "Route not found"
    else:
        message = str(exc.detail)
    # 405 carries an Allow header
    return _envelope(exc.status_code, message, headers=exc.headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> Response:
    logger.exception(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    handlers: list[tuple[type[Exception], object]] = [
        (UserValidationError, user_validation_error_handler),
        (InvalidUserIdError, invalid_user_id_handler),
        (UserNotFoundError, user_not_found_handler),
        (RequestValidationError, request_validation_error_handler),
        (StarletteHTTPException, http_exception_handler),
        (Exception, unhandled_exception_handler),
    ]
    for exc_class, handler in handlers:
        app.add_exception_handler(exc_class, cast(ExceptionHandler, handler))
