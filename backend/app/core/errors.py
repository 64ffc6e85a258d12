# app/core/errors.py
"""
Domain error taxonomy and the central error-translation layer.

Services raise one of the AppError subclasses below; the handlers registered
by `register_error_handlers` turn them into JSON responses of the form
    {"success": false, "error": {"code": "...", "message": "..."}}
with the status code carried by the error class.
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from tortoise.exceptions import IntegrityError, OperationalError

logger = logging.getLogger("uvicorn.error")


class AppError(Exception):
    """Base class for all domain errors."""
    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "BAD_REQUEST"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class MissingFieldsError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "MISSING_FIELDS"


class InvalidEmailError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_EMAIL"


class InvalidPasswordError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_PASSWORD"


class InvalidCredentialsError(AppError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "INVALID_CREDENTIALS"


class UserNotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "USER_NOT_FOUND"


class EventNotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "EVENT_NOT_FOUND"


class EmailAlreadyExistsError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "EMAIL_EXISTS"


class InvalidConfirmationCodeError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_CONFIRMATION_CODE"


class UserAlreadyConfirmedError(AppError):
    status_code = status.HTTP_409_CONFLICT
    code = "USER_ALREADY_CONFIRMED"


class UserNotConfirmedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "USER_NOT_CONFIRMED"


class ForbiddenError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "FORBIDDEN"


class InvalidDateRangeError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "INVALID_DATE_RANGE"


class CannotFollowSelfError(AppError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "CANNOT_FOLLOW_SELF"


class HashingError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "HASHING_ERROR"


class DatabaseError(AppError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "DATABASE_ERROR"


class CodeGenerationError(AppError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "CODE_GENERATION_EXHAUSTED"


def error_body(code: str, message: str) -> dict:
    return {"success": False, "error": {"code": code, "message": message}}


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Translate a domain error into its HTTP response."""
    if exc.status_code >= 500:
        logger.error("[error] %s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.code, exc.message))


async def database_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """ORM failures that escaped the service layer (e.g. mid-cascade) surface as DATABASE_ERROR."""
    logger.exception("[error] database failure on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=DatabaseError.status_code,
        content=error_body(DatabaseError.code, "A database operation failed"),
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(OperationalError, database_error_handler)
    app.add_exception_handler(IntegrityError, database_error_handler)
