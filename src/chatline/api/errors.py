"""Exception handlers that turn domain errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from chatline.services.errors import (
    ChatlineError,
    ConflictError,
    NotFoundError,
    StorageFailure,
    UnauthorizedError,
)

logger = logging.getLogger(__name__)

_STATUS_CODES: dict[type[ChatlineError], int] = {
    NotFoundError: status.HTTP_404_NOT_FOUND,
    UnauthorizedError: status.HTTP_403_FORBIDDEN,
    ConflictError: status.HTTP_409_CONFLICT,
    StorageFailure: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_code_for(exc: ChatlineError) -> int:
    """Return the HTTP status for a domain error."""
    for error_type, code in _STATUS_CODES.items():
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def chatline_exception_handler(request: Request, exc: ChatlineError) -> JSONResponse:
    """Handle domain errors raised by services and repositories."""
    status_code = status_code_for(exc)
    if status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        detail = StorageFailure.default_message
    else:
        logger.info("%s %s rejected (%d): %s", request.method, request.url.path, status_code, exc.message)
        detail = exc.message
    return JSONResponse(status_code=status_code, content={"detail": detail})


async def sqlalchemy_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Handle database errors that escaped the repositories."""
    logger.exception("Database error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": StorageFailure.default_message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the handlers above to ``app``."""
    app.add_exception_handler(ChatlineError, chatline_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_exception_handler)  # type: ignore[arg-type]
