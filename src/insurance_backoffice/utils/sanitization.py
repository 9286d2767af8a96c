"""Input sanitization for free-text fields before they reach the store."""

import re
from typing import Any

# Maximum lengths for text fields (characters)
MAX_NAME = 200
MAX_EMAIL = 100
MAX_PHONE = 20
MAX_ADDRESS = 500
MAX_DESCRIPTION = 5000
MAX_NOTES = 2000
MAX_IDENTIFIER = 50

FIELD_LIMITS = {
    "name": MAX_NAME,
    "email": MAX_EMAIL,
    "phone": MAX_PHONE,
    "address": MAX_ADDRESS,
    "description": MAX_DESCRIPTION,
    "notes": MAX_NOTES,
    "policy_number": MAX_IDENTIFIER,
    "claim_number": MAX_IDENTIFIER,
}

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


def sanitize_text(text: str | None, max_length: int) -> str | None:
    """Strip control characters and surrounding whitespace, truncate to max_length.

    None stays None so optional fields remain unset.
    """
    if text is None:
        return None
    if not isinstance(text, str):
        text = str(text)
    cleaned = _CONTROL_CHARS.sub("", text).strip()
    if len(cleaned) > max_length:
        cleaned = cleaned[:max_length]
    return cleaned


def sanitize_fields(data: dict[str, Any]) -> dict[str, Any]:
    """
    Sanitize known text fields of a payload.

    - Strips control characters and whitespace
    - Truncates to FIELD_LIMITS
    - Passes other fields through unchanged

    Returns a new dict; does not mutate the input.
    """
    if not data:
        return {}
    out: dict[str, Any] = {}
    for key, value in data.items():
        limit = FIELD_LIMITS.get(key)
        if limit is not None and isinstance(value, str):
            out[key] = sanitize_text(value, limit)
        else:
            out[key] = value
    return out
