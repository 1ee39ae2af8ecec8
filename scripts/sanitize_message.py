#!/usr/bin/env python3
"""
Dev helper: run the inbound body sanitizer on a saved mail API message.

Accepts either a full Gmail users.messages.get response (the part tree is
read from its "payload" key) or a bare payload object, and prints the
LLM-safe body.

Usage
-----
# Sanitize a saved message
python scripts/sanitize_message.py message.json

# Read from stdin, with a smaller budget
cat message.json | python scripts/sanitize_message.py - --max-chars 500

# Show what extraction found before quote/footer stripping
python scripts/sanitize_message.py message.json --raw

Environment / .env
------------------
MAILPREP_MAX_CHARS       Default character budget (default: 6000).
MAILPREP_MAX_PART_DEPTH  Deepest MIME nesting level walked (default: 50).
"""

import argparse
import json
import sys
import textwrap

from mailprep.services.body_sanitizer import (
    coerce_payload,
    extract_text_and_html,
    make_email_body_llm_safe,
)


def _load_message(source: str) -> dict:
    if source == "-":
        return json.load(sys.stdin)
    with open(source, encoding="utf-8") as fh:
        return json.load(fh)


def _payload_of(message: dict) -> dict:
    """Full API responses nest the part tree under "payload"."""
    payload = message.get("payload")
    return payload if isinstance(payload, dict) else message


def main() -> int:
    parser = argparse.ArgumentParser(
        prog="sanitize_message.py",
        description=textwrap.dedent("""\
            Print the LLM-safe body of a saved mail API message.
        """),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=textwrap.dedent("""\
            Examples:
              python scripts/sanitize_message.py message.json
              python scripts/sanitize_message.py - --max-chars 500 < message.json
              python scripts/sanitize_message.py message.json --raw
        """),
    )
    parser.add_argument(
        "source",
        metavar="PATH",
        help='JSON file holding the message, or "-" for stdin',
    )
    parser.add_argument(
        "--max-chars",
        type=int,
        default=None,
        help="Character budget (default: MAILPREP_MAX_CHARS or 6000)",
    )
    parser.add_argument(
        "--raw",
        action="store_true",
        help="Print the extracted text and HTML buffers instead of the sanitized body.",
    )

    args = parser.parse_args()

    if args.max_chars is not None and args.max_chars < 1:
        print("ERROR: --max-chars must be at least 1", file=sys.stderr)
        return 1

    try:
        message = _load_message(args.source)
    except FileNotFoundError:
        print(f"ERROR: File not found: {args.source}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as e:
        print(f"ERROR: {args.source} is not valid JSON: {e}", file=sys.stderr)
        return 1

    if not isinstance(message, dict):
        print("ERROR: expected a JSON object", file=sys.stderr)
        return 1

    payload = _payload_of(message)

    if args.raw:
        text, markup = extract_text_and_html(coerce_payload(payload))
        print(f"--- text/plain ({len(text)} chars) ---")
        print(text)
        print(f"--- text/html ({len(markup)} chars) ---")
        print(markup)
        return 0

    print(make_email_body_llm_safe(payload, max_chars=args.max_chars))
    return 0


if __name__ == "__main__":
    sys.exit(main())
