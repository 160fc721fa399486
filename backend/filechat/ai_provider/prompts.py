"""Prompt templates for the chat relay.

The relay never looks inside attachments. It lists them in the user message
and asks the model to say so when it cannot open one.
"""
from typing import Iterable, List, Optional

from .base import ChatMessage

SYSTEM_PROMPT = (
    "You are an assistant that replies helpfully and concisely. "
    "If attachments are included, mention their filenames and explain you may "
    "not be able to view them directly unless the server provided extracted text."
)

ATTACHMENTS_HEADER = "Attachments:"

ATTACHMENTS_NOTE = (
    "Please consider these attachments when answering. "
    "If you cannot access an attachment, mention that you could not access it."
)


def format_attachment_line(index: int, name: Optional[str], type_: Optional[str], url: Optional[str]) -> str:
    """Format one attachment as ``{i}. {name} ({type}) - {url}``."""
    return f"{index}. {name or 'file'} ({type_ or 'unknown'}) - {url or 'no-url'}"


def build_user_content(text: Optional[str], attachments: Iterable = ()) -> str:
    """Compose the user message from free text and attachment descriptors.

    Attachments may be any objects with ``name``, ``type`` and ``url``
    attributes. With no attachments the text is returned unchanged.
    """
    content = text or ""
    attachments = list(attachments or [])
    if not attachments:
        return content

    content += f"\n\n{ATTACHMENTS_HEADER}\n"
    for idx, attachment in enumerate(attachments, start=1):
        line = format_attachment_line(idx, attachment.name, attachment.type, attachment.url)
        content += f"{line}\n"
    content += f"\n{ATTACHMENTS_NOTE}"
    return content


def build_messages(text: Optional[str], attachments: Iterable = ()) -> List[ChatMessage]:
    """Return the system + user message pair sent upstream."""
    return [
        ChatMessage(role="system", content=SYSTEM_PROMPT),
        ChatMessage(role="user", content=build_user_content(text, attachments)),
    ]
