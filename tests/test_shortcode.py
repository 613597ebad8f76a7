"""Tests for short code generation."""

import pytest

from shortener.errors import InvalidCharacterError
from shortener.shortcode import ShortCodeGenerator


class TestShortCodeGenerator:
    """Test short code generation."""

    def test_alphabet(self):
        """Alphabet has 62 distinct symbols with 'A' as digit zero."""
        chars = ShortCodeGenerator.BASE62_CHARS
        assert len(chars) == 62
        assert len(set(chars)) == 62
        assert chars[0] == "A"

    def test_generate_default_length(self):
        """Test random code generation."""
        generator = ShortCodeGenerator()

        code = generator.generate()
        assert len(code) == 6
        assert generator.is_valid(code)

    def test_generate_custom_length(self):
        """Test random code with custom length."""
        generator = ShortCodeGenerator(default_length=6)

        code = generator.generate(length=10)
        assert len(code) == 10
        assert generator.is_valid(code)

    @pytest.mark.parametrize("length", [0, -1, 11])
    def test_generate_rejects_bad_length(self, length):
        with pytest.raises(ValueError):
            ShortCodeGenerator().generate(length)

    def test_constructor_rejects_bad_length(self):
        with pytest.raises(ValueError):
            ShortCodeGenerator(default_length=0)

    def test_generate_uses_whole_alphabet(self):
        """Symbols are drawn from every part of the alphabet."""
        generator = ShortCodeGenerator()
        seen = set("".join(generator.generate(10) for _ in range(500)))

        assert seen <= set(ShortCodeGenerator.BASE62_CHARS)
        assert any(c.isupper() for c in seen)
        assert any(c.islower() for c in seen)
        assert any(c.isdigit() for c in seen)

    def test_encode_zero(self):
        assert ShortCodeGenerator.encode(0) == "A"

    def test_encode_known_values(self):
        assert ShortCodeGenerator.encode(61) == "9"
        assert ShortCodeGenerator.encode(62) == "BA"
        assert ShortCodeGenerator.encode(62 ** 6 - 1) == "999999"

    def test_encode_negative(self):
        with pytest.raises(ValueError):
            ShortCodeGenerator.encode(-5)

    def test_decode_inverts_encode(self):
        """Test base62 encoding/decoding."""
        for num in (0, 1, 61, 62, 123456, 2 ** 40):
            assert ShortCodeGenerator.decode(ShortCodeGenerator.encode(num)) == num

    def test_decode_invalid_character(self):
        with pytest.raises(InvalidCharacterError) as exc_info:
            ShortCodeGenerator.decode("ab-c")

        assert exc_info.value.char == "-"
        assert isinstance(exc_info.value, ValueError)

    def test_generate_sequential(self):
        """Test sequential generation."""
        generator = ShortCodeGenerator(default_length=6)

        code = generator.generate_sequential(62)
        assert code == "AAAABA"
        assert generator.decode(code) == 62

    def test_is_valid(self):
        """Test format validation."""
        assert ShortCodeGenerator.is_valid("abc123")
        assert ShortCodeGenerator.is_valid("ABC")

        # Invalid formats
        assert not ShortCodeGenerator.is_valid("")
        assert not ShortCodeGenerator.is_valid("abc 123")
        assert not ShortCodeGenerator.is_valid("abc_123")
        assert not ShortCodeGenerator.is_valid("test-code")
        assert not ShortCodeGenerator.is_valid(None)
