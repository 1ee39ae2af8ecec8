"""
Raw message composer.

Builds a complete RFC 822 message as a single CRLF-separated string from an
OutboundMessageRequest, without any attachment support. The result is what a
mail-sending API expects (after base64url encoding, see encode_raw_message).

Message shapes
--------------
  multipart/alternative  html_body set and mime_type not "text/plain"
                         (plain part first, HTML part second)
  text/html              mime_type == "text/html" and no html_body
                         (the plain body is sent as HTML)
  text/plain             everything else
"""

import base64
import logging
import re
from typing import Callable, List, Optional
from uuid import uuid4

from mailprep.config import get_from_placeholder
from mailprep.models.outbound_email import OutboundMessageRequest
from mailprep.services.address_validator import ensure_valid_recipients
from mailprep.services.header_encoder import encode_email_header

logger = logging.getLogger(__name__)

CRLF = "\r\n"

MULTIPART_ALTERNATIVE = "multipart/alternative"
TEXT_HTML = "text/html"
TEXT_PLAIN = "text/plain"

_BOUNDARY_PREFIX = "----=_NextPart_"

_LINE_BREAK_RE = re.compile(r"[\r\n]+")
_BODY_NEWLINE_RE = re.compile(r"\r\n|\r|\n")

BoundaryFactory = Callable[[], str]


def make_boundary() -> str:
    """Fresh multipart boundary: fixed prefix plus 32 random hex characters."""
    return f"{_BOUNDARY_PREFIX}{uuid4().hex}"


def fold_header_value(value: str) -> str:
    # Header values must not introduce new header lines.
    return _LINE_BREAK_RE.sub(" ", value)


def to_crlf(text: str) -> str:
    """Normalise any mix of CR, LF and CRLF line endings in a body to CRLF."""
    return _BODY_NEWLINE_RE.sub(CRLF, text)


def resolve_content_type(request: OutboundMessageRequest) -> str:
    """Pick the message shape for a request (see module docstring)."""
    mime_type = request.mime_type or None
    if request.html_body and mime_type != TEXT_PLAIN:
        return MULTIPART_ALTERNATIVE
    if mime_type == TEXT_HTML:
        return TEXT_HTML
    return TEXT_PLAIN


def build_header_lines(request: OutboundMessageRequest) -> List[str]:
    """
    Common header block. Optional headers are left out entirely rather
    than emitted blank.
    """
    lines = [
        f"From: {get_from_placeholder()}",
        f"To: {', '.join(request.to)}",
    ]
    if request.cc:
        lines.append(f"Cc: {fold_header_value(', '.join(request.cc))}")
    if request.bcc:
        lines.append(f"Bcc: {fold_header_value(', '.join(request.bcc))}")
    lines.append(f"Subject: {encode_email_header(fold_header_value(request.subject))}")
    if request.in_reply_to:
        thread_ref = fold_header_value(request.in_reply_to)
        lines.append(f"In-Reply-To: {thread_ref}")
        lines.append(f"References: {thread_ref}")
    lines.append("MIME-Version: 1.0")
    return lines


def _text_part_headers(subtype: str) -> List[str]:
    return [
        f"Content-Type: text/{subtype}; charset=UTF-8",
        "Content-Transfer-Encoding: 7bit",
    ]


def create_email_message(
    request: OutboundMessageRequest,
    boundary_factory: Optional[BoundaryFactory] = None,
) -> str:
    """
    Compose the raw message for request.

    Args:
        request:          The message to compose.
        boundary_factory: Zero-argument callable returning the multipart
                          boundary. Defaults to make_boundary; tests pass a
                          constant to get deterministic output.

    Returns:
        The full message (headers, blank line, body) joined with CRLF.

    Raises:
        InvalidRecipientError: at the first "to" address that fails
                               validation. Nothing is composed in that case.
    """
    ensure_valid_recipients(request.to)

    content_type = resolve_content_type(request)
    lines = build_header_lines(request)

    if content_type == MULTIPART_ALTERNATIVE:
        boundary = (boundary_factory or make_boundary)()
        lines.append(f'Content-Type: multipart/alternative; boundary="{boundary}"')
        lines.append("")

        lines.append(f"--{boundary}")
        lines.extend(_text_part_headers("plain"))
        lines.append("")
        lines.append(to_crlf(request.body))
        lines.append("")

        lines.append(f"--{boundary}")
        lines.extend(_text_part_headers("html"))
        lines.append("")
        lines.append(to_crlf(request.html_body or request.body))
        lines.append("")

        lines.append(f"--{boundary}--")
    elif content_type == TEXT_HTML:
        lines.extend(_text_part_headers("html"))
        lines.append("")
        lines.append(to_crlf(request.html_body or request.body))
    else:
        lines.extend(_text_part_headers("plain"))
        lines.append("")
        lines.append(to_crlf(request.body))

    logger.debug(
        "Composed %s message for %d recipient(s)", content_type, len(request.to)
    )
    return CRLF.join(lines)


def encode_raw_message(raw_message: str) -> str:
    """
    base64url-encode a raw message without padding, the form Gmail's
    users.messages.send / drafts.create expect in their "raw" field.
    """
    encoded = base64.urlsafe_b64encode(raw_message.encode("utf-8")).decode("ascii")
    return encoded.rstrip("=")
