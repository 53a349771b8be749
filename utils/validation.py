"""
Input sanitation helpers shared by the payment form and booking notes.
"""

import re
from typing import Optional

_NON_DIGITS = re.compile(r"[^0-9]")


def digits_only(text: Optional[str]) -> str:
    """
    Strip everything but ASCII digits.

    Args:
        text: Raw user input

    Returns:
        Digit string (possibly empty)
    """
    if not text:
        return ""
    return _NON_DIGITS.sub("", str(text))


def sanitize_text(text: str, max_length: Optional[int] = None) -> str:
    """
    Sanitize user input text.

    Args:
        text: Input text
        max_length: Optional maximum length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    # Remove control characters except newlines and tabs
    sanitized = re.sub(r'[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F]', '', str(text))

    sanitized = sanitized.strip()

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
