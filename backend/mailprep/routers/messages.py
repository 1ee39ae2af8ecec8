"""
Message composition and sanitization endpoints.

Endpoints:
  POST /compose   — build a raw message (with or without attachments)
  POST /sanitize  — reduce an inbound MIME payload to LLM-safe text

Composition errors (invalid recipient, missing attachment file) are returned
as 422 with the error message as detail; callers should correct the input
rather than retry.
"""

import logging

from fastapi import APIRouter, HTTPException

from mailprep.config import get_max_chars
from mailprep.models.mime_part import SanitizeRequest, SanitizeResponse
from mailprep.models.outbound_email import ComposeResponse, OutboundMessageRequest
from mailprep.services.address_validator import InvalidRecipientError
from mailprep.services.attachment_composer import (
    MissingAttachmentError,
    create_email_with_attachments,
)
from mailprep.services.body_sanitizer import TRUNCATION_MARKER, make_email_body_llm_safe
from mailprep.services.message_composer import create_email_message, encode_raw_message

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/compose",
    response_model=ComposeResponse,
    responses={
        200: {
            "description": "Raw message, plain and base64url-encoded",
            "content": {
                "application/json": {
                    "example": {
                        "message": "From: me\r\nTo: alice@example.com\r\nSubject: Hi\r\n...",
                        "raw": "RnJvbTogbWUNClRvOiBhbGljZUBleGFtcGxlLmNvbQ0K...",
                    }
                }
            },
        },
        422: {"description": "Invalid recipient address or missing attachment file"},
    },
)
async def compose_message(request: OutboundMessageRequest):
    """
    Compose a message ready for a mail-sending API.

    Requests with attachments are rendered by the attachment-aware composer;
    all others are built directly as a CRLF-separated MIME string.
    """
    try:
        if request.attachments:
            message = await create_email_with_attachments(request)
        else:
            message = create_email_message(request)
    except (InvalidRecipientError, MissingAttachmentError) as e:
        raise HTTPException(status_code=422, detail=str(e))

    return ComposeResponse(message=message, raw=encode_raw_message(message))


@router.post("/sanitize", response_model=SanitizeResponse)
async def sanitize_message(request: SanitizeRequest):
    """
    Extract a short plain-text body from a mail API payload.

    max_chars overrides MAILPREP_MAX_CHARS for this call. truncated is True
    when the body was cut to fit the budget.
    """
    max_chars = request.max_chars or get_max_chars()
    body = make_email_body_llm_safe(request.payload, max_chars=max_chars)
    truncated = len(body) > max_chars and body.endswith(TRUNCATION_MARKER)
    return SanitizeResponse(body=body, truncated=truncated)
