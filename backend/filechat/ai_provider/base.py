"""CompletionProvider abstract interface for LLM integrations.

This module defines the message types exchanged with the completion service
and the abstract base class every provider implements.

Usage:
    from filechat.ai_provider import ChatMessage, OpenAIProvider

    provider = OpenAIProvider(base_url="https://api.openai.com/v1", model="gpt-4o-mini")
    result = await provider.complete(messages, api_key="sk-...")
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Literal, Optional


@dataclass(frozen=True)
class ChatMessage:
    """A single message in the conversation sent upstream.

    Attributes:
        role: system, user or assistant.
        content: The message text.
    """
    role: Literal["system", "user", "assistant"]
    content: str

    def to_dict(self) -> dict:
        """Convert to the wire format expected by chat-completions APIs."""
        return {"role": self.role, "content": self.content}


@dataclass
class CompletionResult:
    """Outcome of a successful upstream call.

    Attributes:
        content: Text of the first choice, or None if the response did not
            have the expected shape.
        raw: The decoded response body.
    """
    content: Optional[str]
    raw: Dict[str, Any] = field(default_factory=dict)


class CompletionProvider(ABC):
    """Abstract base class for completion service clients."""

    @abstractmethod
    async def complete(self, messages: List[ChatMessage], api_key: str) -> CompletionResult:
        """Send the messages upstream in a single attempt.

        Args:
            messages: Ordered conversation, system message first.
            api_key: Bearer credential for the upstream service.

        Returns:
            CompletionResult with the reply text (possibly None).

        Raises:
            UpstreamError: On non-success status, timeout, transport failure
                or an undecodable body.
        """
        pass
