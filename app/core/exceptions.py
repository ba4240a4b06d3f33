"""
Domain exceptions and global exception handlers.

Services raise the exceptions below; the handlers translate them into
``{"detail": ..., "success": false}`` responses and prevent stack-trace
leakage to clients.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


# ── Domain exceptions ───────────────────────────────────────────────
class ConsoleError(Exception):
    """Base class for expected business failures."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RecordValidationError(ConsoleError):
    """A single record failed a required-field or format rule."""

    status_code = 422


class DuplicateRecordError(ConsoleError):
    status_code = 409


class RecordNotFoundError(ConsoleError):
    status_code = 404


class AuthorizationError(ConsoleError):
    """Caller lacks the privilege for the operation."""

    status_code = 403


class ImportFormatError(ConsoleError):
    status_code = 400


class BackendError(Exception):
    """An underlying store call failed."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class RecordExistsError(BackendError):
    """Insert rejected because the document id is already taken."""


# ── Handlers ────────────────────────────────────────────────────────
async def _http_exception_handler(_request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "success": False},
    )


async def _console_error_handler(_request: Request, exc: ConsoleError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "success": False},
    )


async def _backend_error_handler(_request: Request, exc: BackendError) -> JSONResponse:
    logger.error("Backend error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal database error", "success": False},
    )


async def _sqlalchemy_error_handler(_request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal database error", "success": False},
    )


async def _generic_exception_handler(_request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception: %s", exc)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error", "success": False},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach all exception handlers to the FastAPI app."""
    app.add_exception_handler(HTTPException, _http_exception_handler)  # type: ignore[arg-type]
    app.add_exception_handler(ConsoleError, _console_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(BackendError, _backend_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(SQLAlchemyError, _sqlalchemy_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, _generic_exception_handler)
