"""Pydantic schemas for the chat relay endpoint.

Attachment descriptors are client-supplied and never verified: the relay
does not check that ``url`` points at a stored upload.
"""
from typing import List, Optional

from pydantic import BaseModel, Field


class AttachmentDescriptor(BaseModel):
    """Client-declared metadata about an attached file."""
    name: Optional[str] = Field(None, description="Display filename")
    type: Optional[str] = Field(None, description="Declared MIME type")
    url: Optional[str] = Field(None, description="Where the file can be fetched")


class ChatRequest(BaseModel):
    """Body of POST /api/chat.

    Either ``text`` or ``attachments`` must be non-empty; that rule is
    enforced by the relay so the error matches the other relay failures.
    """
    text: Optional[str] = None
    attachments: Optional[List[AttachmentDescriptor]] = None


class EchoedAttachment(BaseModel):
    name: Optional[str] = None
    url: Optional[str] = None
    type: Optional[str] = None


class ChatResponse(BaseModel):
    """Reply from the model plus the attachments it was told about."""
    reply: str
    attachments: List[EchoedAttachment] = Field(default_factory=list)
