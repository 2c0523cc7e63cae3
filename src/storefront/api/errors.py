"""Exception handlers rendering every failure in the response envelope."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, InvalidOperationError, ObjectNotFoundError, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.api.schemas import Envelope
from storefront.errors import AccessDeniedError

logger = structlog.get_logger(__name__)


def _first_message(messages, default):
    """Pick a readable headline from a ``{field: [messages]}`` dict."""
    if isinstance(messages, dict):
        for value in messages.values():
            if isinstance(value, list | tuple) and value:
                return str(value[0])
            if value:
                return str(value)
    return default


def _messages_of(exc):
    """The ``{field: [messages]}`` dict an exception was raised with, if any."""
    messages = getattr(exc, "messages", None)
    if messages is None and exc.args and isinstance(exc.args[0], dict):
        messages = exc.args[0]
    return messages


def _error_response(status_code, message, data=None):
    body = Envelope(status="error", message=message, data=data if data is not None else [])
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ObjectNotFoundError)
    async def not_found(request: Request, exc: ObjectNotFoundError):
        messages = _messages_of(exc)
        logger.info("Resource not found", path=request.url.path, errors=messages)
        return _error_response(404, _first_message(messages, "Resource not found"), messages)

    @app.exception_handler(ValidationError)
    async def validation_failed(request: Request, exc: ValidationError):
        messages = _messages_of(exc)
        logger.info("Request rejected", path=request.url.path, error=type(exc).__name__, errors=messages)
        return _error_response(400, _first_message(messages, "Invalid request"), messages)

    @app.exception_handler(InvalidOperationError)
    async def invalid_operation(request: Request, exc: InvalidOperationError):
        messages = _messages_of(exc)
        logger.info("Operation not allowed", path=request.url.path, errors=messages)
        return _error_response(400, _first_message(messages, "Operation not allowed"), messages)

    @app.exception_handler(AccessDeniedError)
    async def access_denied(request: Request, exc: AccessDeniedError):
        messages = _messages_of(exc)
        logger.warning("Access denied", path=request.url.path, errors=messages)
        return _error_response(403, _first_message(messages, "Access denied"), messages)

    # A concurrent request saved the same record first; the client may retry.
    @app.exception_handler(ExpectedVersionError)
    async def version_conflict(request: Request, exc: ExpectedVersionError):
        logger.warning("Concurrent update rejected", path=request.url.path, error=str(exc))
        return _error_response(
            409,
            "The record was changed by another request, please retry",
            {"version": [str(exc)]},
        )

    @app.exception_handler(RequestValidationError)
    async def malformed_request(request: Request, exc: RequestValidationError):
        errors = {}
        for error in exc.errors():
            location = ".".join(str(part) for part in error["loc"] if part != "body")
            errors.setdefault(location or "body", []).append(error["msg"])
        logger.info("Malformed request", path=request.url.path, errors=errors)
        return _error_response(400, _first_message(errors, "Invalid request"), errors)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return _error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error", path=request.url.path)
        return _error_response(500, "Internal server error")
