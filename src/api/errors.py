"""Exception handlers that turn every failure into ``{message, fieldErrors?}``.

Domain errors keep their message for 4xx responses. Upstream and unexpected
failures are logged with detail here and reach the client only as a generic
message.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from domain.model.errors import (
    AuthenticationError,
    ConflictError,
    DomainError,
    NotFoundError,
    UpstreamError,
    ValidationError,
)

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = UpstreamError.message

_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
    (UpstreamError, status.HTTP_500_INTERNAL_SERVER_ERROR),
)


def status_for(exc: DomainError) -> int:
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


def _error_body(message: str, field_errors: dict[str, str] | None = None) -> dict:
    body = {"message": message}
    if field_errors:
        body["fieldErrors"] = field_errors
    return body


def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    code = status_for(exc)
    extra = {
        "method": request.method,
        "path": request.url.path,
        "status_code": code,
        "error_type": type(exc).__name__,
    }
    if code >= 500:
        logger.error("Request failed: %s", exc.message, extra=extra, exc_info=exc)
        return JSONResponse(status_code=code, content=_error_body(GENERIC_ERROR_MESSAGE))

    logger.info("Request rejected: %s", exc.message, extra=extra)
    field_errors = None
    if isinstance(exc, ValidationError) and exc.field:
        field_errors = {exc.field: exc.message}
    return JSONResponse(status_code=code, content=_error_body(exc.message, field_errors))


def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Pydantic validation errors become 400 with one message per field."""
    field_errors: dict[str, str] = {}
    for error in exc.errors():
        loc = [str(part) for part in error["loc"] if part not in ("body", "query", "path")]
        field = ".".join(loc) or "body"
        field_errors.setdefault(field, error["msg"])

    first_field, first_message = next(iter(field_errors.items()))
    message = first_message if first_field == "body" else f"{first_field}: {first_message}"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(message, field_errors),
    )


def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled exception: %s %s",
        request.method,
        request.url.path,
        extra={"method": request.method, "path": request.url.path, "status_code": 500},
        exc_info=exc,
    )
    return JSONResponse(status_code=500, content=_error_body(GENERIC_ERROR_MESSAGE))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
