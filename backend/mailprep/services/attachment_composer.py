"""
Attachment-aware message composer.

Attachment encoding is delegated to a MessageRenderer. This module only
validates input, checks that attachment files exist, and maps the request
onto the renderer's RenderRequest shape:

  to / cc / bcc   -> ", "-joined display strings
  body            -> text
  html_body       -> html
  in_reply_to     -> in_reply_to and references
  attachments     -> [{filename: basename(path), path}]

The default renderer (EmailMessageRenderer) uses the standard library's
email package and only renders; nothing is transmitted.
"""

import asyncio
import logging
import mimetypes
import os
from email.message import EmailMessage
from email.policy import default as default_policy
from pathlib import Path
from typing import Optional, Protocol

from mailprep.config import get_from_placeholder, get_render_timeout
from mailprep.models.outbound_email import (
    OutboundMessageRequest,
    RenderAttachment,
    RenderRequest,
)
from mailprep.services.address_validator import ensure_valid_recipients
from mailprep.services.message_composer import fold_header_value

logger = logging.getLogger(__name__)


class MissingAttachmentError(ValueError):
    """An attachment path does not exist on disk, or is not a regular file."""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"File does not exist: {path}")


class MessageRenderer(Protocol):
    """Turns a RenderRequest into raw message bytes."""

    async def render(self, request: RenderRequest) -> bytes:
        ...


# ---------------------------------------------------------------------------
# Default renderer
# ---------------------------------------------------------------------------

def _guess_type(path: str) -> tuple[str, str]:
    ctype, encoding = mimetypes.guess_type(path)
    if ctype is None or encoding is not None:
        # Unknown, or compressed (e.g. .tar.gz): send as opaque bytes
        return "application", "octet-stream"
    maintype, subtype = ctype.split("/", 1)
    return maintype, subtype


class EmailMessageRenderer:
    """
    Renders with email.message.EmailMessage.

    Bcc stays in the rendered headers: sending APIs that accept a raw
    message read the Bcc recipients from it and strip it before delivery.
    """

    def build(self, request: RenderRequest) -> EmailMessage:
        msg = EmailMessage(policy=default_policy)
        msg["From"] = request.from_address
        msg["To"] = request.to
        if request.cc:
            msg["Cc"] = request.cc
        if request.bcc:
            msg["Bcc"] = request.bcc
        msg["Subject"] = request.subject
        if request.in_reply_to:
            msg["In-Reply-To"] = request.in_reply_to
        if request.references:
            msg["References"] = request.references

        msg.set_content(request.text)
        if request.html:
            msg.add_alternative(request.html, subtype="html")

        for attachment in request.attachments:
            maintype, subtype = _guess_type(attachment.path)
            data = Path(attachment.path).read_bytes()
            msg.add_attachment(
                data, maintype=maintype, subtype=subtype, filename=attachment.filename
            )

        return msg

    async def render(self, request: RenderRequest) -> bytes:
        # File reads and encoding block; keep them off the event loop.
        msg = await asyncio.to_thread(self.build, request)
        return msg.as_bytes()


# ---------------------------------------------------------------------------
# Composer
# ---------------------------------------------------------------------------

def ensure_attachments_exist(paths: list[str]) -> None:
    """
    Raise MissingAttachmentError for the first path that is not a regular
    file (missing, or a directory).
    """
    for path in paths:
        if not os.path.isfile(path):
            logger.warning("Attachment not found: %s", path)
            raise MissingAttachmentError(path)


def build_render_request(request: OutboundMessageRequest) -> RenderRequest:
    """
    Map a compose request onto the renderer's input shape.

    Header values are folded onto one line, as in the raw composer;
    email.policy.default rejects CR/LF in headers outright.
    """
    in_reply_to = fold_header_value(request.in_reply_to) if request.in_reply_to else None
    return RenderRequest(
        from_address=get_from_placeholder(),
        to=", ".join(request.to),
        cc=fold_header_value(", ".join(request.cc)) if request.cc else None,
        bcc=fold_header_value(", ".join(request.bcc)) if request.bcc else None,
        subject=fold_header_value(request.subject),
        text=request.body,
        html=request.html_body,
        attachments=[
            RenderAttachment(filename=os.path.basename(path), path=path)
            for path in request.attachments or []
        ],
        in_reply_to=in_reply_to,
        references=in_reply_to,
    )


async def create_email_with_attachments(
    request: OutboundMessageRequest,
    renderer: Optional[MessageRenderer] = None,
    timeout: Optional[float] = None,
) -> str:
    """
    Validate, then render a message that may carry file attachments.

    Args:
        request:  The message to compose; request.attachments are file paths.
        renderer: MIME renderer to delegate to (default: EmailMessageRenderer).
        timeout:  Seconds to wait for the renderer (default:
                  MAILPREP_RENDER_TIMEOUT_SECONDS).

    Returns:
        The rendered raw message as text.

    Raises:
        InvalidRecipientError:  a "to" address fails validation.
        MissingAttachmentError: an attachment path is not a file. Raised
                                before the renderer is called.
        asyncio.TimeoutError:   the renderer did not finish in time.
    """
    ensure_valid_recipients(request.to)
    ensure_attachments_exist(request.attachments or [])

    render_request = build_render_request(request)
    renderer = renderer or EmailMessageRenderer()
    if timeout is None:
        timeout = get_render_timeout()

    raw_bytes = await asyncio.wait_for(renderer.render(render_request), timeout=timeout)

    logger.debug(
        "Rendered message with %d attachment(s) (%d bytes)",
        len(render_request.attachments),
        len(raw_bytes),
    )
    return raw_bytes.decode("utf-8")
