"""Core business logic for URL shortener."""

from .shortcode import ShortCodeGenerator
from .models import UrlMapping, ClickRecord, UrlAnalytics, AnalyticsSummary
from .errors import (
    ShortenerError,
    InvalidUrlError,
    InvalidTtlError,
    CodeSpaceExhaustedError,
    InvalidCharacterError,
    StorageError,
)
from .service import URLShortenerService

__all__ = [
    "ShortCodeGenerator",
    "UrlMapping",
    "ClickRecord",
    "UrlAnalytics",
    "AnalyticsSummary",
    "ShortenerError",
    "InvalidUrlError",
    "InvalidTtlError",
    "CodeSpaceExhaustedError",
    "InvalidCharacterError",
    "StorageError",
    "URLShortenerService",
]
