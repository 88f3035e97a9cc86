"""
NITC Blogs — Error boundary

The only place errors become HTTP responses. Operational errors keep their
message; anything else is logged and answered with a generic 500. Stack
traces and kind names are only exposed in development.
"""
import logging
import traceback

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from nitc_blogs.core.errors import AppError, ValidationError

logger = logging.getLogger(__name__)

GENERIC_MESSAGE = "Something went wrong"


def _body(request: Request, exc: Exception, status: str, message: str) -> dict:
    body = {"status": status, "message": message}
    if not request.app.state.settings.is_production:
        body["error"] = exc.kind if isinstance(exc, AppError) else type(exc).__name__
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


def _field_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return ". ".join(messages)


async def handle_app_error(request: Request, exc: AppError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.kind, request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=_body(request, exc, exc.status, exc.message),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = ValidationError(f"Invalid input data. {_field_errors(exc)}")
    return JSONResponse(
        status_code=error.status_code,
        content=_body(request, error, error.status, error.message),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    message = GENERIC_MESSAGE if request.app.state.settings.is_production else str(exc) or GENERIC_MESSAGE
    return JSONResponse(status_code=500, content=_body(request, exc, "error", message))


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, handle_app_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)
