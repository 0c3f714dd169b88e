"""Input sanitization and lenient parsing helpers."""

import json
import logging
import re
from typing import Any, Dict, Optional

from cobalt_hub.infra.error_handler import InvalidSessionIdError, MalformedOptionalInputError

logger = logging.getLogger(__name__)

HTML_TAG_RE = re.compile(r"<[^>]*>?")
MARKUP_RE = re.compile(r"<[a-zA-Z/!][^>]*>")
CONTROL_CHARS_RE = re.compile(r"[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F]")

MAX_SESSION_ID_LENGTH = 256


def sanitize_text(content: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize message text.

    Removes NUL and control characters (newlines and tabs are kept). Content
    is only truncated when max_length is given.
    """
    if not content:
        return ""

    if max_length is not None and len(content) > max_length:
        content = content[:max_length] + "... [truncated]"

    return CONTROL_CHARS_RE.sub("", content)


def contains_markup(text: str) -> bool:
    """Whether text looks like it carries HTML tags."""
    return bool(text) and MARKUP_RE.search(text) is not None


def strip_html(html: str) -> str:
    """Strip all HTML tags, leaving the text content."""
    if not html:
        return ""
    return HTML_TAG_RE.sub("", html)


def parse_json_object(value: Any, field: str = "payload", strict: bool = False) -> Dict[str, Any]:
    """
    Parse an optional JSON object blob.

    Dicts pass through, strings are parsed as JSON. Anything else (or a
    string that is not a JSON object) becomes an empty dict, or raises
    MalformedOptionalInputError when strict is set.
    """
    if value is None or value == "":
        return {}
    if isinstance(value, dict):
        return value

    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as e:
            return _malformed(field, f"{field} is not valid JSON: {e}", strict)
        if isinstance(parsed, dict):
            return parsed
        return _malformed(field, f"{field} must be a JSON object", strict)

    return _malformed(field, f"{field} has unsupported type {type(value).__name__}", strict)


def _malformed(field: str, message: str, strict: bool) -> Dict[str, Any]:
    if strict:
        raise MalformedOptionalInputError(message, field=field)
    logger.warning(message, extra={"field": field})
    return {}


def validate_session_id(session_id: str) -> None:
    """
    Validate a resolved session id.

    Raises:
        InvalidSessionIdError: If validation fails
    """
    if not session_id:
        raise InvalidSessionIdError("Session ID cannot be empty.")

    if len(session_id) > MAX_SESSION_ID_LENGTH:
        raise InvalidSessionIdError(f"Session ID exceeds {MAX_SESSION_ID_LENGTH} characters.")

    if CONTROL_CHARS_RE.search(session_id):
        raise InvalidSessionIdError("Session ID contains control characters.")
