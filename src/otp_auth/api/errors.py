"""Maps core error kinds to HTTP responses."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from otp_auth.api.schemas import ErrorResponse
from otp_auth.errors import (
    AuthError,
    ConfigError,
    GenerationError,
    InvalidOTPStateError,
    OTPMismatchError,
    OTPNotFoundError,
    PersistenceError,
    RateLimitExceeded,
    SigningError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Error class → (status code, client-facing message)
_ERROR_RESPONSES: dict[type[AuthError], tuple[int, str]] = {
    ValidationError: (status.HTTP_400_BAD_REQUEST, "bad parameters"),
    GenerationError: (status.HTTP_500_INTERNAL_SERVER_ERROR, "OTP creation failed"),
    OTPNotFoundError: (status.HTTP_404_NOT_FOUND, "OTP not found or expired"),
    InvalidOTPStateError: (
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal error verifying OTP",
    ),
    OTPMismatchError: (status.HTTP_401_UNAUTHORIZED, "Incorrect OTP code"),
    PersistenceError: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Error creating new user"),
    ConfigError: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Error generating access token"),
    SigningError: (status.HTTP_500_INTERNAL_SERVER_ERROR, "Error generating access token"),
}

INTERNAL_ERROR_MESSAGE = "internal server error"


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    body = ErrorResponse(status_code=status_code, message=message)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
        headers=headers,
    )


def retry_after_minutes(retry_after: int) -> int:
    """Round a retry delay in seconds up to whole minutes."""
    return (retry_after + 59) // 60


async def _auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    if isinstance(exc, RateLimitExceeded):
        minutes = retry_after_minutes(exc.retry_after)
        return error_response(
            status.HTTP_429_TOO_MANY_REQUESTS,
            f"Too many OTP requests. Please try again after {minutes} minutes.",
            headers={"Retry-After": str(exc.retry_after)},
        )

    for error_type in type(exc).__mro__:
        if error_type in _ERROR_RESPONSES:
            status_code, message = _ERROR_RESPONSES[error_type]
            return error_response(status_code, message)

    logger.error("Unmapped auth error on %s: %r", request.url.path, exc)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


async def _validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.debug("Request to %s is not valid: %s", request.url.path, exc.errors())
    return error_response(status.HTTP_400_BAD_REQUEST, "bad parameters")


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_ERROR_MESSAGE)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the error-kind → response mapping on *app*."""
    app.add_exception_handler(AuthError, _auth_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)
