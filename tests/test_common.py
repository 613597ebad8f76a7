"""Tests for common utilities."""

import json
import logging

import pytest

from shortener.common.logging_config import LOGGER_NAME, JsonFormatter, setup_logging
from shortener.common.url_builder import build_short_url
from shortener.common.validators import is_valid_short_code, is_valid_url


class TestValidators:
    """Test validation utilities."""

    def test_valid_urls(self):
        """Test valid URL validation."""
        valid, _ = is_valid_url("https://example.com")
        assert valid

        valid, _ = is_valid_url("http://example.com/path")
        assert valid

        valid, _ = is_valid_url("https://sub.example.com:8080/path?query=value")
        assert valid

    def test_scheme_is_case_insensitive(self):
        valid, _ = is_valid_url("HTTPS://EXAMPLE.COM/Path")
        assert valid

        valid, _ = is_valid_url("Http://example.com")
        assert valid

    def test_invalid_urls(self):
        """Test invalid URL validation."""
        valid, error = is_valid_url("")
        assert not valid
        assert "required" in error.lower()

        valid, error = is_valid_url("   ")
        assert not valid
        assert "required" in error.lower()

        valid, error = is_valid_url(None)
        assert not valid

        valid, error = is_valid_url("not-a-url")
        assert not valid

        valid, error = is_valid_url("ftp://example.com")
        assert not valid
        assert "http" in error.lower()

    def test_url_length_limit(self):
        prefix = "https://example.com/"
        at_limit = prefix + "a" * (2048 - len(prefix))
        over_limit = at_limit + "a"

        assert is_valid_url(at_limit)[0]

        valid, error = is_valid_url(over_limit)
        assert not valid
        assert "too long" in error.lower()

    def test_valid_short_codes(self):
        """Test valid short code validation."""
        assert is_valid_short_code("a")[0]
        assert is_valid_short_code("abc123")[0]
        assert is_valid_short_code("A" * 10)[0]

    def test_invalid_short_codes(self):
        """Test invalid short code validation."""
        valid, error = is_valid_short_code("")
        assert not valid
        assert "required" in error.lower()

        valid, error = is_valid_short_code("a" * 11)
        assert not valid
        assert "at most" in error.lower()

        valid, error = is_valid_short_code("abc@123")
        assert not valid

        valid, error = is_valid_short_code("test-code")
        assert not valid


class TestURLBuilder:
    """Test URL building utilities."""

    def test_build_short_url_no_prefix(self):
        """Test short URL building without prefix."""
        url = build_short_url(
            short_code="abc123",
            base_url="https://example.com/",
            path_prefix=""
        )

        assert url == "https://example.com/abc123"

    def test_build_short_url_with_prefix(self):
        """Test short URL building with prefix."""
        url = build_short_url(
            short_code="abc123",
            base_url="https://example.com",
            path_prefix="/s/"
        )

        assert url == "https://example.com/s/abc123"


class TestLogging:

    def test_setup_logging_replaces_handlers(self, tmp_path):
        log_file = tmp_path / "shortener.log"

        setup_logging(level="INFO")
        logger = setup_logging(level="debug", log_file=str(log_file))

        assert logger.name == "shortener"
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 2

        logger.info("hello")
        for handler in logger.handlers:
            handler.flush()
        assert "hello" in log_file.read_text()

        # Detach the file handler before tmp_path is removed
        setup_logging(level="INFO")

    def test_unknown_level_defaults_to_info(self):
        logger = setup_logging(level="chatty")
        assert logger.level == logging.INFO

    @pytest.mark.parametrize("json_format", [True, False])
    def test_format_selection(self, json_format):
        logger = setup_logging(json_format=json_format)
        assert isinstance(logger.handlers[0].formatter, JsonFormatter) == json_format

    def test_json_lines_escape_quotes(self):
        formatter = JsonFormatter()
        record = logging.LogRecord(
            "shortener.service", logging.INFO, __file__, 1,
            'Created short URL: %s -> %s', ("abc123", 'https://example.com/?q="x"'), None,
        )

        payload = json.loads(formatter.format(record))

        assert payload["level"] == "INFO"
        assert payload["logger"] == "shortener.service"
        assert payload["message"] == 'Created short URL: abc123 -> https://example.com/?q="x"'

    def test_module_loggers_reach_package_handlers(self, tmp_path):
        log_file = tmp_path / "shortener.log"
        setup_logging(level="INFO", log_file=str(log_file), json_format=True)

        logging.getLogger("shortener.store.redis_store").warning("redis down")
        for handler in logging.getLogger(LOGGER_NAME).handlers:
            handler.flush()

        line = log_file.read_text().strip()
        assert json.loads(line)["logger"] == "shortener.store.redis_store"

        setup_logging(level="INFO")
