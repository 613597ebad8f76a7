"""Exceptions raised by the URL shortener core."""


class ShortenerError(Exception):
    """Base class for all shortener errors."""


class InvalidUrlError(ShortenerError, ValueError):
    """Raised when a URL fails validation (blank, too long, wrong scheme)."""

    def __init__(self, reason: str):
        super().__init__(f"Invalid URL: {reason}")
        self.reason = reason


class InvalidTtlError(ShortenerError, ValueError):
    """Raised when a TTL puts the expiration past the representable range."""

    def __init__(self, ttl_days: int):
        super().__init__(f"TTL of {ttl_days} days is too large")
        self.ttl_days = ttl_days


class CodeSpaceExhaustedError(ShortenerError):
    """Raised when no free short code was found within the retry budget.

    Signals that the code length is too small for the current occupancy.
    """

    def __init__(self, attempts: int, length: int):
        super().__init__(
            f"Unable to generate a unique short code of length {length} "
            f"after {attempts} attempts"
        )
        self.attempts = attempts
        self.length = length


class InvalidCharacterError(ShortenerError, ValueError):
    """Raised when decoding a symbol outside the base62 alphabet."""

    def __init__(self, char: str, code: str):
        super().__init__(f"Invalid character {char!r} in short code {code!r}")
        self.char = char
        self.code = code


class StorageError(ShortenerError):
    """Raised when the backing store cannot be reached or returns bad data."""
