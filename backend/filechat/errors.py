"""Error taxonomy shared by the upload and chat endpoints.

Every failure a request can hit is raised as a :class:`RelayError` subclass
and rendered by :func:`relay_error_handler` as::

    {"error": "<message>", "kind": "<stable kind>", "detail": "<optional>"}

``RelayError`` extends ``HTTPException`` so that an error raised while
FastAPI is still parsing the request body (the upload size limit) keeps its
own status code instead of being folded into a generic 400.
"""
import logging
from typing import Any, Optional

from fastapi import HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class RelayError(HTTPException):
    """Base exception for request-level failures."""

    kind = "internal_error"

    def __init__(self, message: str, status_code: int = 500, detail: Optional[Any] = None):
        self.message = message
        self.error_detail = detail
        super().__init__(status_code=status_code, detail=message)

    def to_payload(self, include_detail: bool = True) -> dict:
        payload = {"error": self.message, "kind": self.kind}
        if include_detail and self.error_detail is not None:
            payload["detail"] = self.error_detail
        return payload


class ValidationError(RelayError):
    """Raised when required input is missing."""

    kind = "validation_error"

    def __init__(self, message: str, detail: Optional[Any] = None):
        super().__init__(message, status_code=400, detail=detail)


def _format_limit(limit_bytes: int) -> str:
    mib, rem = divmod(limit_bytes, 1024 * 1024)
    return f"{mib}MB" if mib and not rem else f"{limit_bytes} byte"


class PayloadTooLargeError(ValidationError):
    """Raised when a request body passes its size ceiling."""

    kind = "payload_too_large"
    subject = "Request body"

    def __init__(self, limit_bytes: int):
        self.limit_bytes = limit_bytes
        super().__init__(f"{self.subject} exceeds the {_format_limit(limit_bytes)} limit")
        self.status_code = 413


class UploadTooLargeError(PayloadTooLargeError):
    """Raised when an uploaded file passes the size ceiling."""

    kind = "upload_too_large"
    subject = "File"


class ConfigurationError(RelayError):
    """Raised when the upstream credential is not configured."""

    kind = "configuration_error"

    def __init__(self, message: str = "OpenAI API key not configured on server"):
        super().__init__(message, status_code=400)


class UpstreamError(RelayError):
    """Raised when the completion service fails or times out."""

    kind = "upstream_error"

    def __init__(self, message: str, detail: Optional[Any] = None, status_code: int = 502):
        super().__init__(message, status_code=status_code, detail=detail)


class InternalError(RelayError):
    """Raised for filesystem or otherwise unexpected failures."""

    kind = "internal_error"

    def __init__(self, message: str = "Server error", detail: Optional[Any] = None):
        super().__init__(message, status_code=500, detail=detail)


def _expose_detail(request: Request) -> bool:
    return getattr(request.app.state, "expose_error_detail", True)


async def relay_error_handler(request: Request, exc: RelayError) -> JSONResponse:
    """Render a RelayError as a JSON error payload."""
    return JSONResponse(
        exc.to_payload(include_detail=_expose_detail(request)),
        status_code=exc.status_code,
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed request bodies in the same shape as RelayError."""
    payload = {"error": "Invalid request body", "kind": ValidationError.kind}
    if _expose_detail(request):
        payload["detail"] = [
            {"loc": list(err.get("loc", ())), "msg": err.get("msg", "")}
            for err in exc.errors()
        ]
    return JSONResponse(payload, status_code=422)


def install_error_handlers(app) -> None:
    """Register the JSON error handlers on a FastAPI app."""
    app.add_exception_handler(RelayError, relay_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
