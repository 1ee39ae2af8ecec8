"""
Unit tests for recipient address validation.
"""

import pytest

from mailprep.services.address_validator import (
    InvalidRecipientError,
    ensure_valid_recipients,
    validate_email,
)


# ---------------------------------------------------------------------------
# validate_email
# ---------------------------------------------------------------------------

class TestValidateEmail:
    """Shape check: local@domain.tld, no whitespace, single @."""

    def test_simple_address(self):
        assert validate_email("alice@example.com") is True

    def test_plus_tag_and_subdomain(self):
        assert validate_email("a.b+tag@mail.example.co.uk") is True

    def test_missing_at_sign(self):
        assert validate_email("bad-address") is False

    def test_domain_without_dot(self):
        assert validate_email("alice@localhost") is False

    def test_whitespace_in_local_part(self):
        assert validate_email("al ice@example.com") is False

    def test_trailing_whitespace(self):
        assert validate_email("alice@example.com ") is False

    def test_two_at_signs(self):
        assert validate_email("alice@bob@example.com") is False

    def test_empty_local_part(self):
        assert validate_email("@example.com") is False

    def test_empty_tld(self):
        assert validate_email("alice@example.") is False

    def test_empty_string(self):
        assert validate_email("") is False

    def test_display_name_form_is_rejected(self):
        # Display names are not accepted in recipient lists
        assert validate_email("Alice <alice@example.com>") is False

    def test_non_string_is_rejected(self):
        assert validate_email(None) is False


# ---------------------------------------------------------------------------
# ensure_valid_recipients
# ---------------------------------------------------------------------------

class TestEnsureValidRecipients:

    def test_all_valid_passes(self):
        ensure_valid_recipients(["alice@example.com", "bob@example.org"])

    def test_empty_list_passes(self):
        ensure_valid_recipients([])

    def test_invalid_address_named_in_error(self):
        with pytest.raises(InvalidRecipientError) as exc_info:
            ensure_valid_recipients(["bad-address"])

        assert exc_info.value.address == "bad-address"
        assert "bad-address" in str(exc_info.value)

    def test_first_invalid_address_is_reported(self):
        with pytest.raises(InvalidRecipientError) as exc_info:
            ensure_valid_recipients(["alice@example.com", "first-bad", "second-bad"])

        assert exc_info.value.address == "first-bad"

    def test_error_is_a_value_error(self):
        with pytest.raises(ValueError):
            ensure_valid_recipients(["nope"])
