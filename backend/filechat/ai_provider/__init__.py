"""AI Provider module for the chat relay.

Usage:
    from filechat.ai_provider import ChatMessage, OpenAIProvider, build_messages

    provider = OpenAIProvider(model="gpt-4o-mini")
    messages = build_messages("Hello", attachments=[])
    result = await provider.complete(messages, api_key="sk-...")
"""
from .base import ChatMessage, CompletionProvider, CompletionResult
from .openai_provider import OpenAIProvider, extract_reply_content
from .prompts import (
    ATTACHMENTS_NOTE,
    SYSTEM_PROMPT,
    build_messages,
    build_user_content,
    format_attachment_line,
)

__all__ = [
    "ChatMessage",
    "CompletionProvider",
    "CompletionResult",
    "OpenAIProvider",
    "extract_reply_content",
    "ATTACHMENTS_NOTE",
    "SYSTEM_PROMPT",
    "build_messages",
    "build_user_content",
    "format_attachment_line",
]
