"""
Inbound MIME part tree, as delivered by mail-reading APIs (Gmail's
users.messages.get "payload" shape).

Only the fields the sanitizer reads are modelled; provider-specific extras
are ignored so that a full API payload can be passed straight through.
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field, field_validator


class MimeHeader(BaseModel):
    model_config = {"extra": "ignore"}

    name: str = ""
    value: str = ""

    @field_validator("name", "value", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return "" if v is None else v


class MimePartBody(BaseModel):
    """Payload of a single part. data is base64url-encoded."""
    model_config = {"extra": "ignore", "populate_by_name": True}

    data: Optional[str] = None
    size: Optional[int] = None
    attachment_id: Optional[str] = Field(default=None, alias="attachmentId")


class MimePart(BaseModel):
    """
    One node of a message body.

    Leaves usually carry body.data; containers (multipart/*) carry parts.
    A node may have both, in which case both contribute to extraction.
    """
    model_config = {"extra": "ignore", "populate_by_name": True}

    mime_type: Optional[str] = Field(default=None, alias="mimeType")
    filename: Optional[str] = None
    headers: list[MimeHeader] = []
    body: Optional[MimePartBody] = None
    parts: list[MimePart] = []

    @field_validator("headers", "parts", mode="before")
    @classmethod
    def _null_list_as_empty(cls, v):
        # Providers send null for "no children"; null entries are skipped too
        if v is None:
            return []
        if isinstance(v, list):
            return [item for item in v if item is not None]
        return v


class SanitizeRequest(BaseModel):
    """Request body for POST /api/messages/sanitize."""
    model_config = {"populate_by_name": True}

    payload: MimePart = Field(default_factory=MimePart)
    max_chars: Optional[int] = Field(default=None, ge=1, alias="maxChars")


class SanitizeResponse(BaseModel):
    body: str
    truncated: bool = False
