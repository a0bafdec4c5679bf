"""Translation of application exceptions into the error envelope."""

from typing import Tuple

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from meeting_summarizer.core.exceptions import (
    AppError,
    ConfigurationError,
    ContentRejected,
    DatabaseError,
    DocumentNotFoundError,
    EmailDeliveryError,
    EmailQuotaExceeded,
    GenerationFailed,
    QuotaExceeded,
    ValidationError,
)
from meeting_summarizer.utils.logging import get_logger
from meeting_summarizer.utils.responses import create_error_detail, create_error_response

LOGGER = get_logger(__name__)

QUOTA_MESSAGE = "API quota exceeded. Please try again later."
CONTENT_REJECTED_MESSAGE = "Content was blocked due to safety concerns. Please review your transcript."
GENERATION_FAILED_MESSAGE = "Failed to generate summary. Please try again."


def describe_error(exc: AppError) -> Tuple[int, str, str]:
    """Return ``(status, title, detail)`` for an application error.

    Subclasses are checked before their parents.
    """
    if isinstance(exc, QuotaExceeded):
        return status.HTTP_429_TOO_MANY_REQUESTS, "Quota Exceeded", QUOTA_MESSAGE
    if isinstance(exc, ContentRejected):
        return status.HTTP_400_BAD_REQUEST, "Content Rejected", CONTENT_REJECTED_MESSAGE
    if isinstance(exc, GenerationFailed):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, "Generation Failed", GENERATION_FAILED_MESSAGE
    if isinstance(exc, EmailQuotaExceeded):
        return status.HTTP_429_TOO_MANY_REQUESTS, "Email Quota Exceeded", exc.message
    if isinstance(exc, EmailDeliveryError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, "Email Delivery Failed", exc.message
    if isinstance(exc, ValidationError):
        return status.HTTP_400_BAD_REQUEST, "Validation Error", exc.message
    if isinstance(exc, DocumentNotFoundError):
        return status.HTTP_404_NOT_FOUND, "Document Not Found", exc.message
    if isinstance(exc, ConfigurationError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, "Configuration Error", exc.message
    if isinstance(exc, DatabaseError):
        return status.HTTP_500_INTERNAL_SERVER_ERROR, "Database Error", "A database error occurred. Please try again."
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal Server Error", "An unexpected error occurred."


def _error_response(request: Request, status_code: int, title: str, detail: str, headers=None) -> JSONResponse:
    error = create_error_detail(title=title, status=status_code, detail=detail, request=request)
    return JSONResponse(
        status_code=status_code,
        content=create_error_response(error, request=request),
        headers=headers,
    )


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    status_code, title, detail = describe_error(exc)
    if status_code >= 500:
        LOGGER.error(
            f"{exc.__class__.__name__} on {request.url.path}: {exc.message}",
            exc_info=exc.original_error or exc,
        )
    else:
        LOGGER.warning(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
    return _error_response(request, status_code, title, detail)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    title = "Unauthorized" if exc.status_code == status.HTTP_401_UNAUTHORIZED else "HTTP Error"
    return _error_response(request, exc.status_code, title, detail, headers=getattr(exc, "headers", None))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = "; ".join(
        f"{'.'.join(str(part) for part in error.get('loc', ()))}: {error.get('msg')}"
        for error in exc.errors()
    )
    return _error_response(request, status.HTTP_400_BAD_REQUEST, "Validation Error", problems)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
