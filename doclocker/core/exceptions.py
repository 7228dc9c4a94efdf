"""Доменные исключения и их отображение в HTTP-ответы"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from doclocker.core.logging import loggable_path

logger = logging.getLogger(__name__)


class DocLockerError(Exception):
    """Базовое исключение приложения"""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(DocLockerError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ForbiddenError(DocLockerError, PermissionError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Not authorized"


class AuthenticationError(DocLockerError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Not authorized to access this route"


class ExpiredError(DocLockerError):
    status_code = status.HTTP_410_GONE
    default_message = "Share link has expired"


class ValidationError(DocLockerError, ValueError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid input"


class InternalError(DocLockerError):
    pass


def error_envelope(message: str, **extra) -> dict:
    return {"success": False, "message": message, **extra}


async def doclocker_error_handler(request: Request, exc: DocLockerError) -> JSONResponse:
    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}
    if exc.status_code >= 500:
        logger.error(f"{exc.__class__.__name__} on {request.method} {loggable_path(request)}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.message),
        headers=headers,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning(f"Validation error on {request.method} {loggable_path(request)}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_envelope("Request validation failed", errors=jsonable_encoder(exc.errors())),
    )


async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error(f"Database error on {request.method} {loggable_path(request)}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope("A database error occurred. Please try again later."),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled exception on {request.method} {loggable_path(request)}", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope("An unexpected error occurred. Please try again later."),
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DocLockerError, doclocker_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(SQLAlchemyError, database_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
