"""Error taxonomy for the page engine and its HTTP exception handlers."""

import logging

from litestar import Request, Response
from litestar.exceptions import HTTPException
from litestar.status_codes import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_409_CONFLICT,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

logger = logging.getLogger(__name__)


class FolioError(Exception):
    """Base class for all page engine errors."""

    status_code: int = HTTP_500_INTERNAL_SERVER_ERROR


class NotFoundError(FolioError):
    """A requested draft or published slot does not exist."""

    status_code = HTTP_404_NOT_FOUND


class NoDraftError(FolioError):
    """Publish was requested but the owner has no draft to copy."""

    status_code = HTTP_409_CONFLICT


class ValidationError(FolioError):
    """A document about to be saved contains structurally invalid content."""

    status_code = HTTP_400_BAD_REQUEST

    def __init__(self, message: str, details: list | None = None) -> None:
        super().__init__(message)
        self.details = details or []


class UploadFailure(FolioError):
    """The asset upload collaborator rejected or failed to store a file."""

    status_code = HTTP_400_BAD_REQUEST


class UploadTooLargeError(UploadFailure):
    """Raised when an upload exceeds the configured size limit."""

    status_code = HTTP_413_REQUEST_ENTITY_TOO_LARGE


class TransientIOError(FolioError):
    """Save or publish could not reach the store. The caller may retry."""

    status_code = HTTP_503_SERVICE_UNAVAILABLE


class EditorBusyError(FolioError):
    """Save or publish was triggered while the other one is still in flight."""

    status_code = HTTP_409_CONFLICT


def folio_error_handler(request: Request, exc: FolioError) -> Response:
    """Render page engine errors as JSON."""
    content = {
        "status_code": exc.status_code,
        "detail": str(exc),
        "error": type(exc).__name__,
    }
    if isinstance(exc, ValidationError) and exc.details:
        content["details"] = exc.details
    return Response(content=content, status_code=exc.status_code, media_type="application/json")


def http_exception_handler(request: Request, exc: HTTPException) -> Response:
    """Handle HTTP exceptions with a JSON body."""
    status_code = exc.status_code
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    content: dict = {"status_code": status_code, "detail": detail}
    extra = getattr(exc, "extra", None)
    if extra:
        content["extra"] = extra
    return Response(content=content, status_code=status_code, media_type="application/json")


def internal_server_error_handler(request: Request, exc: Exception) -> Response:
    """Log unexpected exceptions and hide their details from the client."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return Response(
        content={"status_code": HTTP_500_INTERNAL_SERVER_ERROR, "detail": "Internal Server Error"},
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        media_type="application/json",
    )


EXCEPTION_HANDLERS = {
    FolioError: folio_error_handler,
    HTTPException: http_exception_handler,
    Exception: internal_server_error_handler,
}
