"""Global exception handlers.

Every failure leaves the API as an ``ErrorResponse`` body.  Handlers must
be registered before the application first serves a request.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ragdesk.core.pipeline.errors import ModelError, PipelineTimeout

from .models import (
    CODE_INPUT_VALIDATION,
    CODE_MODEL_ERROR,
    CODE_SERVER_ERROR,
    CODE_TIMEOUT,
    ErrorResponse,
)

logger = logging.getLogger(__name__)

MESSAGE_TIMEOUT = (
    "The request took too long to process. Please try again with a simpler question."
)
MESSAGE_MODEL_ERROR = (
    "The AI service is temporarily unavailable. Please try again in a moment."
)
MESSAGE_SERVER_ERROR = "An unexpected error occurred. Please try again later."


class InputValidationError(Exception):
    """The request passed schema validation but breaks a configured limit."""


def error_response(status_code: int, code: str, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(code=code, message=message).model_dump(),
    )


def _first_error_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers on ``app``."""

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return error_response(400, CODE_INPUT_VALIDATION, _first_error_message(exc))

    @app.exception_handler(InputValidationError)
    async def handle_input_validation(
        request: Request, exc: InputValidationError
    ) -> JSONResponse:
        return error_response(400, CODE_INPUT_VALIDATION, str(exc))

    @app.exception_handler(PipelineTimeout)
    async def handle_timeout(request: Request, exc: PipelineTimeout) -> JSONResponse:
        return error_response(504, CODE_TIMEOUT, MESSAGE_TIMEOUT)

    @app.exception_handler(ModelError)
    async def handle_model_error(request: Request, exc: ModelError) -> JSONResponse:
        return error_response(502, CODE_MODEL_ERROR, MESSAGE_MODEL_ERROR)

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled error on %s", request.url.path, exc_info=exc)
        return error_response(500, CODE_SERVER_ERROR, MESSAGE_SERVER_ERROR)
