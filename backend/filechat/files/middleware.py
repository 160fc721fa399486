"""Request body size limits enforced while the body streams in.

``BodySizeLimitMiddleware`` guards a single path:

* a declared ``Content-Length`` above the limit is rejected with 413 before
  the application reads a single body byte;
* bodies without a declared length (chunked transfer) are counted as they
  arrive and the request is aborted as soon as the count passes the limit.

The abort is raised from ``receive`` as a :class:`RelayError`, which FastAPI
lets through its body parsing untouched, so the multipart parser never spools
more than ``max_body_bytes`` to disk.
"""
import logging
from typing import Callable, Optional

from fastapi.responses import JSONResponse
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from ..errors import PayloadTooLargeError, RelayError, ValidationError

logger = logging.getLogger(__name__)


class BodySizeLimitMiddleware:
    """Pure ASGI middleware capping the request body size for one path."""

    def __init__(
        self,
        app: ASGIApp,
        path: str,
        max_body_bytes: int,
        error_factory: Optional[Callable[[], RelayError]] = None,
    ) -> None:
        self.app = app
        self.path = path.rstrip("/")
        self.max_body_bytes = max_body_bytes
        self.error_factory = error_factory or (lambda: PayloadTooLargeError(max_body_bytes))

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or scope["path"].rstrip("/") != self.path:
            await self.app(scope, receive, send)
            return

        content_length = _declared_length(scope)
        if content_length is not None:
            if content_length < 0:
                await self._reject(scope, receive, send, ValidationError("Invalid Content-Length header"))
                return
            if content_length > self.max_body_bytes:
                logger.info(
                    "Rejected %s: Content-Length %d exceeds %d",
                    self.path, content_length, self.max_body_bytes,
                )
                await self._reject(scope, receive, send, self.error_factory())
                return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_body_bytes:
                    logger.info("Aborted %s: streamed body passed %d bytes", self.path, self.max_body_bytes)
                    raise self.error_factory()
            return message

        await self.app(scope, limited_receive, send)

    async def _reject(self, scope: Scope, receive: Receive, send: Send, error: RelayError) -> None:
        response = JSONResponse(error.to_payload(), status_code=error.status_code)
        await response(scope, receive, send)


def _declared_length(scope: Scope):
    for name, value in scope.get("headers", []):
        if name == b"content-length":
            try:
                return int(value)
            except ValueError:
                return -1
    return None
