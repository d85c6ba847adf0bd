"""RFC 7807 Problem Details error handling.

All errors leave the API in one JSON shape:

    {
        "type": "about:blank",
        "title": "Unsupported Media Type",
        "status": 415,
        "detail": "Unsupported file format. Please upload PDF, Excel, or CSV.",
        "instance": "/api/v1/ingest/statement"
    }

Ingestion failures raised by the statement parser are translated here, so
routers can let them propagate.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from packages.statement_ingestion.errors import (
    CorruptSourceError,
    IngestionError,
    PasswordProtectedError,
    UnsupportedFormatError,
)

logger = structlog.get_logger()


class AppError(Exception):
    """Base application error."""

    def __init__(self, detail: str, status_code: int = 500, error_type: str = "about:blank"):
        self.detail = detail
        self.status_code = status_code
        self.error_type = error_type
        super().__init__(detail)


class ValidationError(AppError):
    """Request validation failed."""

    def __init__(self, detail: str = "Validation failed"):
        super().__init__(detail=detail, status_code=422)


class PayloadTooLargeError(AppError):
    """Upload exceeds the configured size limit."""

    def __init__(self, detail: str = "File too large"):
        super().__init__(detail=detail, status_code=413)


class UnsupportedMediaError(AppError):
    """Upload is not a media kind the API can read."""

    def __init__(self, detail: str = "Unsupported media type"):
        super().__init__(detail=detail, status_code=415)


# Ingestion error -> HTTP status
_INGESTION_STATUS = {
    UnsupportedFormatError: 415,
    CorruptSourceError: 422,
    PasswordProtectedError: 422,
}


def from_ingestion_error(exc: IngestionError) -> AppError:
    """Map a parser failure onto the API error hierarchy."""
    status = _INGESTION_STATUS.get(type(exc), 422)
    if status == 415:
        return UnsupportedMediaError(exc.detail)
    return ValidationError(exc.detail)


def _build_problem_detail(
    status: int,
    title: str,
    detail: str,
    error_type: str = "about:blank",
    instance: str = "",
    request_id: str = "",
) -> dict:
    """Build RFC 7807 Problem Details response body."""
    body = {
        "type": error_type,
        "title": title,
        "status": status,
        "detail": detail,
    }
    if instance:
        body["instance"] = instance
    if request_id:
        body["request_id"] = request_id
    return body


_STATUS_TITLES = {
    400: "Bad Request",
    404: "Not Found",
    413: "Payload Too Large",
    415: "Unsupported Media Type",
    422: "Unprocessable Entity",
    500: "Internal Server Error",
}


def _problem_response(request: Request, exc: AppError) -> JSONResponse:
    body = _build_problem_detail(
        status=exc.status_code,
        title=_STATUS_TITLES.get(exc.status_code, "Error"),
        detail=exc.detail,
        error_type=exc.error_type,
        instance=str(request.url.path),
        request_id=getattr(request.state, "request_id", ""),
    )
    return JSONResponse(status_code=exc.status_code, content=body)


def register_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers on the FastAPI app."""

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
        return _problem_response(request, exc)

    @app.exception_handler(IngestionError)
    async def ingestion_error_handler(request: Request, exc: IngestionError) -> JSONResponse:
        logger.info("ingestion_rejected", error=type(exc).__name__, path=str(request.url.path))
        return _problem_response(request, from_ingestion_error(exc))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
        detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
        return _problem_response(request, AppError(detail, status_code=exc.status_code))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unhandled_error", error=str(exc), path=str(request.url.path))
        return _problem_response(request, AppError("An unexpected error occurred"))
