"""
RFC 2047 "encoded word" helper for header values.
"""

import base64
import re

_NON_ASCII_RE = re.compile(r"[^\x00-\x7F]")


def encode_email_header(text: str) -> str:
    """
    Wrap text as =?UTF-8?B?...?= if it contains any non-ASCII character.

    Pure ASCII text is returned unchanged so ordinary subjects stay readable
    in the raw message.
    """
    if not _NON_ASCII_RE.search(text):
        return text
    encoded = base64.b64encode(text.encode("utf-8")).decode("ascii")
    return f"=?UTF-8?B?{encoded}?="
