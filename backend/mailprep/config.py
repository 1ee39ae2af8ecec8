"""
Runtime configuration.

All settings come from environment variables (a .env file in the working
directory is loaded on import). Getters read the environment at call time so
tests can override values with monkeypatch.setenv without reloading modules.

Environment variables
---------------------
MAILPREP_MAX_CHARS               Character budget for sanitized bodies (default: 6000).
MAILPREP_MAX_PART_DEPTH          Deepest MIME nesting level walked during extraction
                                 (default: 50).
MAILPREP_RENDER_TIMEOUT_SECONDS  Upper bound on a single attachment render (default: 30).
MAILPREP_FROM_PLACEHOLDER        Value of the From header; the sending API replaces it
                                 with the authenticated identity (default: "me").
CORS_ORIGINS                     Extra comma-separated origins allowed by the API.
"""

import logging
import os
from typing import List

from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MAX_CHARS = 6000
DEFAULT_MAX_PART_DEPTH = 50
DEFAULT_RENDER_TIMEOUT_SECONDS = 30.0
DEFAULT_FROM_PLACEHOLDER = "me"


def _positive_number(name: str, default, cast):
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("%s=%r is not a valid number; using default %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("%s must be positive (got %r); using default %s", name, raw, default)
        return default
    return value


def get_max_chars() -> int:
    return _positive_number("MAILPREP_MAX_CHARS", DEFAULT_MAX_CHARS, int)


def get_max_part_depth() -> int:
    return _positive_number("MAILPREP_MAX_PART_DEPTH", DEFAULT_MAX_PART_DEPTH, int)


def get_render_timeout() -> float:
    return _positive_number(
        "MAILPREP_RENDER_TIMEOUT_SECONDS", DEFAULT_RENDER_TIMEOUT_SECONDS, float
    )


def get_from_placeholder() -> str:
    return os.getenv("MAILPREP_FROM_PLACEHOLDER", "").strip() or DEFAULT_FROM_PLACEHOLDER


def get_extra_cors_origins() -> List[str]:
    """
    Parse CORS_ORIGINS as a comma-separated list, e.g.:
        CORS_ORIGINS=https://agent.example.com,https://preview.example.com
    """
    cors_env = os.getenv("CORS_ORIGINS", "").strip()
    if not cors_env:
        return []
    return [o.strip() for o in cors_env.split(",") if o.strip()]
