"""Validation utilities for URL shortener."""

from typing import Tuple

from ..shortcode import MAX_CODE_LENGTH, ShortCodeGenerator


MAX_URL_LENGTH = 2048
ALLOWED_SCHEMES = ("http://", "https://")


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL.

    Only the scheme prefix is checked (case-insensitively); anything after
    ``http://`` or ``https://`` is accepted as-is.

    Args:
        url: The URL to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not isinstance(url, str) or not url.strip():
        return False, "URL is required"

    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"

    if not url.lower().startswith(ALLOWED_SCHEMES):
        return False, "URL must start with http:// or https://"

    return True, ""


def is_valid_short_code(short_code: str, max_length: int = MAX_CODE_LENGTH) -> Tuple[bool, str]:
    """Validate a short code.

    Args:
        short_code: The short code to validate
        max_length: Maximum length for short code

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not short_code or not isinstance(short_code, str):
        return False, "Short code is required"

    if len(short_code) > max_length:
        return False, f"Short code must be at most {max_length} characters"

    if not ShortCodeGenerator.is_valid(short_code):
        return False, "Short code can only contain letters and numbers"

    return True, ""
