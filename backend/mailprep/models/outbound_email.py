"""
Pydantic models for outbound message composition.

Models:
  OutboundMessageRequest  — structured request to compose a message
  RenderAttachment        — a single file handed to the MIME renderer
  RenderRequest           — input shape of the external MIME renderer
  ComposeResponse         — API response carrying the raw message
"""

from typing import Optional
from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Compose request
# ---------------------------------------------------------------------------

class OutboundMessageRequest(BaseModel):
    """
    A message to be composed.

    Field names follow Python conventions; the camelCase aliases
    (htmlBody, mimeType, inReplyTo) match what agent tool calls send, and
    both spellings are accepted on input.

    mime_type is normally "text/plain" or "text/html". Leaving it unset
    lets an html_body produce a multipart/alternative message; setting it
    to "text/plain" forces a plain-only message even when html_body is set.
    """
    model_config = {"extra": "ignore", "populate_by_name": True}

    to: list[str] = Field(min_length=1)
    cc: Optional[list[str]] = None
    bcc: Optional[list[str]] = None
    subject: str
    body: str
    html_body: Optional[str] = Field(default=None, alias="htmlBody")
    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    in_reply_to: Optional[str] = Field(default=None, alias="inReplyTo")
    attachments: Optional[list[str]] = None


# ---------------------------------------------------------------------------
# Renderer input
# ---------------------------------------------------------------------------

class RenderAttachment(BaseModel):
    """A file on disk, with the name it should carry in the message."""
    filename: str
    path: str


class RenderRequest(BaseModel):
    """
    Display-ready fields for the MIME renderer.

    Address lists are already joined into ", "-separated strings; the
    renderer only copies them into headers.
    """
    from_address: str
    to: str
    cc: Optional[str] = None
    bcc: Optional[str] = None
    subject: str
    text: str
    html: Optional[str] = None
    attachments: list[RenderAttachment] = []
    in_reply_to: Optional[str] = None
    references: Optional[str] = None


# ---------------------------------------------------------------------------
# API response
# ---------------------------------------------------------------------------

class ComposeResponse(BaseModel):
    """
    Response body for POST /api/messages/compose.

    message is the raw RFC 822 text; raw is the same text base64url-encoded
    without padding, ready for a mail-sending API.
    """
    message: str
    raw: str
