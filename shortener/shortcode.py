"""Short code generation utilities."""

import secrets
import string
from typing import Optional

from .errors import InvalidCharacterError


MAX_CODE_LENGTH = 10


class ShortCodeGenerator:
    """Generate and encode base62 short codes."""

    # Base62 characters, digit 0 is 'A'
    BASE62_CHARS = string.ascii_uppercase + string.ascii_lowercase + string.digits

    def __init__(self, default_length: int = 6):
        """Initialize short code generator.

        Args:
            default_length: Default length for generated codes
        """
        self._check_length(default_length)
        self.default_length = default_length

    def generate(self, length: Optional[int] = None) -> str:
        """Generate a random short code.

        Symbols are drawn uniformly with replacement from a CSPRNG so codes
        cannot be predicted from previously issued ones.

        Args:
            length: Length of the code (uses default if not specified)

        Returns:
            Random short code

        Raises:
            ValueError: If length is outside 1..10
        """
        length = self.default_length if length is None else length
        self._check_length(length)
        return ''.join(secrets.choice(self.BASE62_CHARS) for _ in range(length))

    def generate_sequential(self, sequence_number: int, length: Optional[int] = None) -> str:
        """Generate short code from a sequence number.

        Args:
            sequence_number: Non-negative counter value
            length: Minimum length, padded with the zero symbol

        Returns:
            Short code based on sequence number
        """
        length = self.default_length if length is None else length
        code = self.encode(sequence_number)

        if len(code) < length:
            code = code.rjust(length, self.BASE62_CHARS[0])

        return code

    @classmethod
    def encode(cls, number: int) -> str:
        """Convert a non-negative integer to base62, most significant first."""
        if number < 0:
            raise ValueError("Cannot encode a negative number")

        if number == 0:
            return cls.BASE62_CHARS[0]

        result = []
        base = len(cls.BASE62_CHARS)

        while number > 0:
            number, remainder = divmod(number, base)
            result.append(cls.BASE62_CHARS[remainder])

        return ''.join(reversed(result))

    @classmethod
    def decode(cls, code: str) -> int:
        """Convert a base62 string back to an integer.

        Raises:
            InvalidCharacterError: If any symbol is outside the alphabet
        """
        result = 0
        base = len(cls.BASE62_CHARS)

        for char in code:
            index = cls.BASE62_CHARS.find(char)
            if index < 0:
                raise InvalidCharacterError(char, code)
            result = result * base + index

        return result

    @classmethod
    def is_valid(cls, code: str) -> bool:
        """Check that every character of code is in the alphabet."""
        if not code or not isinstance(code, str):
            return False
        return all(c in cls.BASE62_CHARS for c in code)

    @staticmethod
    def _check_length(length: int) -> None:
        if not 1 <= length <= MAX_CODE_LENGTH:
            raise ValueError(f"Code length must be between 1 and {MAX_CODE_LENGTH}, got {length}")
