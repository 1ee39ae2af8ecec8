"""
Inbound body sanitizer.

Reduces a mail API MIME part tree to a short plain-text body suitable for an
LLM prompt. Stages run in order and none of them raise:

  1. decode      base64url payload -> UTF-8 text
  2. extract     walk the tree, collecting text/plain and text/html separately
  3. select      prefer plain text; fall back to HTML converted to text
  4. quotes      cut at the first quoted-reply marker ("On ... wrote:", ...)
  5. footers     cut at the first legal/unsubscribe footer phrase
  6. truncate    bound to max_chars and append a visible marker
"""

import base64
import binascii
import html
import logging
import re
from typing import Any, Optional, Union

from pydantic import ValidationError

from mailprep.config import get_max_chars, get_max_part_depth
from mailprep.models.mime_part import MimePart

logger = logging.getLogger(__name__)

TRUNCATION_MARKER = "\n\n[truncated for model]"

# Start-of-line markers that introduce a quoted reply chain. The earliest
# match across all of them wins.
QUOTE_MARKERS = [
    re.compile(r"^On .* wrote:$", re.MULTILINE),
    re.compile(r"^From: .*$", re.MULTILINE),
    re.compile(r"^-----Original Message-----$", re.MULTILINE),
    re.compile(r"^> ?On .* wrote:$", re.MULTILINE),
]

FOOTER_MARKERS = [
    re.compile(r"This e-mail and any attachments are confidential", re.IGNORECASE),
    re.compile(r"This email and any attachments are confidential", re.IGNORECASE),
    re.compile(r"Please consider the environment before printing this email", re.IGNORECASE),
    re.compile(r"To unsubscribe", re.IGNORECASE),
    re.compile(r"Unsubscribe here", re.IGNORECASE),
]

_STYLE_RE = re.compile(r"<style\b[^>]*>.*?</style\s*>", re.IGNORECASE | re.DOTALL)
_SCRIPT_RE = re.compile(r"<script\b[^>]*>.*?</script\s*>", re.IGNORECASE | re.DOTALL)
_PARAGRAPH_OPEN_RE = re.compile(r"<p\b[^>]*>", re.IGNORECASE)
_BLOCK_CLOSE_RE = re.compile(r"</(?:p|div|li|h[1-6]|br|tr)\s*>", re.IGNORECASE)
_BR_RE = re.compile(r"<br\b[^>]*>", re.IGNORECASE)
_LI_OPEN_RE = re.compile(r"<li\b[^>]*>", re.IGNORECASE)
_TAG_RE = re.compile(r"<[^>]+>")
_BLANK_LINES_RE = re.compile(r"\r?\n\s*\r?\n\s*")
_HSPACE_RE = re.compile(r"[ \t\f\v\xa0]+")
_LINE_EDGE_SPACE_RE = re.compile(r" *\n *")

MimePayload = Union[MimePart, dict, None]


# ---------------------------------------------------------------------------
# Stage 1-2: decode and extract
# ---------------------------------------------------------------------------

def decode_body(data: Optional[str]) -> str:
    """
    Decode a base64url payload to text.

    Mail APIs often drop the "=" padding, so it is restored before decoding.
    A dangling final character (one more than a multiple of 4) cannot carry
    a whole byte and is dropped, so the leading bytes are still recovered.
    Invalid UTF-8 sequences become U+FFFD. Missing or undecodable data -> "".
    """
    if not data:
        return ""
    trimmed = data.rstrip("=")
    if len(trimmed) % 4 == 1:
        trimmed = trimmed[:-1]
    padded = trimmed + "=" * (-len(trimmed) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as e:
        logger.debug("decode_body: undecodable payload (%d chars): %s", len(data), e)
        return ""
    return raw.decode("utf-8", errors="replace")


def _part_payload(part: MimePart) -> str:
    if part.body is None:
        return ""
    return decode_body(part.body.data)


def extract_text_and_html(
    part: Optional[MimePart],
    max_depth: Optional[int] = None,
) -> tuple[str, str]:
    """
    Collect every text/plain and text/html payload in part's tree.

    Depth-first, in document order. A node contributes its own payload
    first, then its children's. Subtrees nested deeper than max_depth
    (default: MAILPREP_MAX_PART_DEPTH) are skipped.

    Returns:
        (text, html) — concatenated plain-text and HTML payloads.
    """
    if max_depth is None:
        max_depth = get_max_part_depth()

    text_chunks: list[str] = []
    html_chunks: list[str] = []

    def walk(node: MimePart, depth: int) -> None:
        if depth > max_depth:
            logger.warning(
                "MIME tree deeper than %d levels; skipping nested parts", max_depth
            )
            return

        if node.mime_type == "text/plain":
            text_chunks.append(_part_payload(node))
        elif node.mime_type == "text/html":
            html_chunks.append(_part_payload(node))

        for child in node.parts:
            walk(child, depth + 1)

    if part is not None:
        walk(part, 0)

    return "".join(text_chunks), "".join(html_chunks)


# ---------------------------------------------------------------------------
# Stage 3: HTML -> text
# ---------------------------------------------------------------------------

def html_to_text(markup: str) -> str:
    """
    Convert an HTML body to readable plain text.

    Keeps just enough structure for a model to follow: paragraphs are
    separated by a blank line, block elements and <br> end a line, and
    list items are prefixed with "- ".

    Examples:
        "<p>Hello</p><p>World</p>"     -> "Hello\\n\\nWorld"
        "<ul><li>a</li><li>b</li></ul>" -> "- a\\n- b"
    """
    if not markup:
        return ""

    s = _STYLE_RE.sub("", markup)
    s = _SCRIPT_RE.sub("", s)

    s = _PARAGRAPH_OPEN_RE.sub("\n", s)
    s = _BLOCK_CLOSE_RE.sub("\n", s)
    s = _BR_RE.sub("\n", s)
    s = _LI_OPEN_RE.sub("- ", s)

    s = _TAG_RE.sub(" ", s)
    s = html.unescape(s)

    s = _BLANK_LINES_RE.sub("\n\n", s)
    s = _HSPACE_RE.sub(" ", s)
    s = _LINE_EDGE_SPACE_RE.sub("\n", s)
    return s.strip()


# ---------------------------------------------------------------------------
# Stage 4-6: clean-up
# ---------------------------------------------------------------------------

def _earliest_match(text: str, patterns: list[re.Pattern]) -> int:
    positions = [m.start() for m in (p.search(text) for p in patterns) if m]
    return min(positions) if positions else -1


def strip_quoted_reply(text: str) -> str:
    """Drop everything from the first quoted-reply marker line onward."""
    idx = _earliest_match(text, QUOTE_MARKERS)
    if idx != -1:
        return text[:idx].strip()
    return text.strip()


def strip_footers(text: str) -> str:
    """Drop everything from the first legal/marketing footer phrase onward."""
    idx = _earliest_match(text, FOOTER_MARKERS)
    if idx != -1:
        return text[:idx].strip()
    return text


def truncate_for_model(text: str, max_chars: Optional[int] = None) -> str:
    if max_chars is None:
        max_chars = get_max_chars()
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + TRUNCATION_MARKER


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------

def coerce_payload(payload: Any) -> Optional[MimePart]:
    """
    Accept a MimePart, a mail API payload dict, or None.

    Returns None (after logging) for anything that cannot be read as a part
    tree.
    """
    if payload is None or isinstance(payload, MimePart):
        return payload
    try:
        return MimePart.model_validate(payload)
    except ValidationError as e:
        logger.warning("Ignoring malformed MIME payload: %d validation error(s)", e.error_count())
        return None
    except RecursionError:
        logger.warning("Ignoring MIME payload nested too deeply to validate")
        return None


def select_body(text: str, markup: str) -> str:
    """Plain text if it has any content, else the HTML converted to text."""
    body = text.strip()
    if not body and markup:
        body = html_to_text(markup)
    return body.replace("\r\n", "\n")


def make_email_body_llm_safe(
    payload: MimePayload,
    max_chars: Optional[int] = None,
) -> str:
    """
    Full sanitizer pipeline: part tree -> short plain-text body.

    Args:
        payload:   Root MIME part (model or raw API dict). None is allowed.
        max_chars: Character budget before the truncation marker
                   (default: MAILPREP_MAX_CHARS).

    Returns:
        The sanitized body; "" when nothing readable was found.
    """
    part = coerce_payload(payload)
    text, markup = extract_text_and_html(part)

    body = select_body(text, markup)
    body = strip_quoted_reply(body)
    body = strip_footers(body)
    return truncate_for_model(body, max_chars)
