"""Global exception handlers for consistent error responses.

- OtpAppError → 400 in the OTP endpoint's ``{success: false, ...}`` shape
  (the OTP route renders its validation/dispatch errors the same way)
- other AppError subclasses → 400/500/502 ``{"error": {...}}`` envelope
- unexpected Exception → generic 500 (safety net)
- every response carries the request_id
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from gateway.core.errors import (
    AppError,
    DispatchAppError,
    OtpAppError,
    OtpMismatchError,
    PaymentGatewayAppError,
)
from gateway.core.logging import get_request_id
from gateway.schemas.otp import OtpErrorResponse

logger = logging.getLogger(__name__)


def status_code_for(exc: AppError) -> int:
    """Map a domain error to its HTTP status code."""
    if isinstance(exc, PaymentGatewayAppError):
        return 502
    if isinstance(exc, DispatchAppError):
        return 500
    return 400


def otp_failure_response(exc: AppError) -> JSONResponse:
    """Render an error in the OTP endpoint shape ``{success: false, error, code, ...}``."""
    attempts_remaining = exc.attempts_remaining if isinstance(exc, OtpMismatchError) else None

    body = OtpErrorResponse(
        error=exc.message,
        code=exc.code,
        attempts_remaining=attempts_remaining,
        request_id=get_request_id(),
    )
    return JSONResponse(
        status_code=status_code_for(exc),
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


async def otp_error_handler(request: Request, exc: OtpAppError) -> JSONResponse:
    logger.info(
        "otp_error_handled",
        extra={"error_code": exc.code, "request_path": request.url.path},
    )
    return otp_failure_response(exc)


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Handle domain application errors with consistent JSON format.

    Args:
        request: FastAPI request object.
        exc: AppError instance (or subclass).

    Returns:
        JSONResponse with the mapped status code and error details.
    """
    status_code = status_code_for(exc)

    logger.warning(
        "app_error_handled",
        extra={
            "error_code": exc.code,
            "error_message": exc.message,
            "status_code": status_code,
            "has_details": bool(exc.details),
        },
    )

    error_content = {
        "code": exc.code,
        "message": exc.message,
        "request_id": get_request_id(),
    }
    if exc.details:
        error_content["details"] = exc.details

    return JSONResponse(status_code=status_code, content={"error": error_content})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Fallback handler for unexpected errors; never leaks internals."""
    logger.error(
        "unhandled_exception",
        extra={
            "error_type": type(exc).__name__,
            "error_msg": str(exc),
            "request_path": request.url.path,
            "request_method": request.method,
        },
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "internal_server_error",
                "message": "An unexpected error occurred. Please try again later.",
                "request_id": get_request_id(),
            }
        },
    )


def setup_exception_handlers(app) -> None:
    """Register all exception handlers with the FastAPI app.

    Starlette picks the handler for the most specific class in the exception's
    MRO, so OtpAppError wins over AppError.
    """
    app.exception_handler(OtpAppError)(otp_error_handler)
    app.exception_handler(AppError)(app_error_handler)
    app.exception_handler(Exception)(general_exception_handler)
