"""Exception handlers for the FastAPI application."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from auth.exceptions import AuthException, InternalError, ValidationFailedError
from auth.schemas import MessageResponse, ValidationErrorResponse

logger = logging.getLogger(__name__)


def message_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=MessageResponse(message=str(message)).model_dump(),
    )


def errors_response(errors: list[str]) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationErrorResponse(errors=[str(e) for e in errors]).model_dump(),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return message_response(exc.status_code, str(exc.detail))


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies as a list of messages."""
    error_details = []
    for error in exc.errors():
        field = error["loc"][-1] if error.get("loc") else "unknown"
        message = error.get("msg", "")

        # Remove "Value error, " prefix if present
        if message.startswith("Value error, "):
            message = message[13:]

        error_details.append(f"{field}: {message}")

    return errors_response(error_details)


async def auth_exception_handler(request: Request, exc: AuthException) -> JSONResponse:
    if isinstance(exc, ValidationFailedError):
        return errors_response(exc.errors)
    return message_response(exc.status_code, exc.message)


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other unhandled exceptions with error logging."""
    logger.exception(
        "Unhandled exception occurred",
        extra={"path": request.url.path, "method": request.method},
    )
    error = InternalError()
    return message_response(error.status_code, error.message)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(AuthException, auth_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)
