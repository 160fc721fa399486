"""Chat relay: validate, compose, forward, translate.

Each request runs the same linear sequence with a single upstream attempt:

    VALIDATE -> CHECK_CONFIG -> COMPOSE -> DISPATCH -> TRANSLATE -> RESPOND

Usage:
    relay = ChatRelay(provider, credential_provider=lambda: os.environ.get("OPENAI_API_KEY"))
    response = await relay.handle(ChatRequest(text="Hello"))
"""
import logging
from typing import Callable, Optional

from ..ai_provider import CompletionProvider, build_messages
from ..errors import ConfigurationError, ValidationError
from .schemas import ChatRequest, ChatResponse, EchoedAttachment

logger = logging.getLogger(__name__)

NO_REPLY = "No reply"


class ChatRelay:
    """Forwards chat requests to the completion service.

    Attributes:
        provider: Upstream completion client.
        credential_provider: Called on every request to fetch the bearer
            credential, so a changed key applies without a restart.
    """

    def __init__(
        self,
        provider: CompletionProvider,
        credential_provider: Callable[[], Optional[str]],
    ) -> None:
        self.provider = provider
        self.credential_provider = credential_provider

    async def handle(self, request: ChatRequest) -> ChatResponse:
        """Run one chat request through the relay.

        Raises:
            ValidationError: If neither text nor attachments are given.
            ConfigurationError: If no credential is configured.
            UpstreamError: If the completion service call fails.
        """
        attachments = request.attachments or []
        if not request.text and not attachments:
            raise ValidationError("No text or attachments")

        api_key = self.credential_provider()
        if not api_key:
            logger.warning("Chat request rejected: OpenAI API key not configured")
            raise ConfigurationError()

        messages = build_messages(request.text, attachments)
        logger.info(
            "Relaying chat: %d chars of text, %d attachments",
            len(request.text or ""), len(attachments),
        )

        result = await self.provider.complete(messages, api_key)
        reply = result.content if result.content is not None else NO_REPLY

        return ChatResponse(
            reply=reply,
            attachments=[
                EchoedAttachment(name=a.name, url=a.url, type=a.type)
                for a in attachments
            ],
        )
