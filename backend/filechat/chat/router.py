"""FastAPI router for the chat relay endpoint."""
import logging
from typing import Optional

from fastapi import APIRouter, Request

from ..errors import InternalError, RelayError
from .schemas import ChatRequest, ChatResponse
from .service import ChatRelay

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["chat"])


def get_relay(request: Request) -> ChatRelay:
    """Return the relay built at application start."""
    return request.app.state.chat_relay


@router.post("/chat", response_model=ChatResponse)
async def chat(request: Request, chat_request: Optional[ChatRequest] = None) -> ChatResponse:
    """Forward text and attachment descriptors to the completion service.

    Returns:
        ChatResponse with the model reply and the echoed attachments.

    Raises:
        ValidationError 400: If both text and attachments are empty.
        ConfigurationError 400: If no API key is configured.
        UpstreamError 502/504: If the upstream call fails.
        InternalError 500: On any other failure.
    """
    # An empty or JSON null body carries neither text nor attachments.
    if chat_request is None:
        chat_request = ChatRequest()

    relay = get_relay(request)
    try:
        return await relay.handle(chat_request)
    except RelayError:
        raise
    except Exception as exc:
        logger.exception("Chat error: %s", exc)
        raise InternalError("Server error", detail=str(exc)) from exc
