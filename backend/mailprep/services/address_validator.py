"""
Recipient address checks run before any message is composed.

The check is deliberately shallow: local-part@domain with no whitespace or
extra "@", and at least one dot in the domain. It catches typos and
placeholder strings, not undeliverable addresses.
"""

import logging
import re
from typing import Iterable

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class InvalidRecipientError(ValueError):
    """A recipient address failed the syntactic check."""

    def __init__(self, address: str):
        self.address = address
        super().__init__(f"Recipient email address is invalid: {address}")


def validate_email(email: str) -> bool:
    """
    Return True if email looks like local@domain.tld.

    Examples:
        "alice@example.com"   -> True
        "a.b+tag@mail.co.uk"  -> True
        "bad-address"         -> False
        "alice@localhost"     -> False   (no dot in domain)
        "al ice@example.com"  -> False
    """
    if not isinstance(email, str):
        return False
    return _EMAIL_RE.match(email) is not None


def ensure_valid_recipients(addresses: Iterable[str]) -> None:
    """
    Raise InvalidRecipientError for the first address that fails
    validate_email. Later addresses are not inspected.
    """
    for address in addresses:
        if not validate_email(address):
            logger.warning("Rejected recipient address %r", address)
            raise InvalidRecipientError(address)
