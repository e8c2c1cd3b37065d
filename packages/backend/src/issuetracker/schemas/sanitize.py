"""Input clean-up applied before field constraints are checked."""

import re

EMAIL_RE = re.compile(r"^\S+@\S+\.\S+$")


def sanitize_string(value):
    """Trim whitespace and drop angle brackets. Non-strings pass through."""
    if isinstance(value, str):
        return value.strip().replace("<", "").replace(">", "")
    return value


def is_valid_email(value: str) -> bool:
    return bool(EMAIL_RE.match(value))
