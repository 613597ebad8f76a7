"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta, timezone

import pytest

from shortener.analytics import InMemoryAnalyticsRecorder
from shortener.common.logging_config import setup_logging
from shortener.service import URLShortenerService
from shortener.shortcode import ShortCodeGenerator
from shortener.store import InMemoryMappingStore


START = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime = START):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def logger():
    """Create test logger."""
    return setup_logging(level="DEBUG")


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def short_code_generator():
    """Create short code generator."""
    return ShortCodeGenerator(default_length=6)


@pytest.fixture
def store(logger):
    """Create in-memory mapping store."""
    return InMemoryMappingStore(logger=logger)


@pytest.fixture
def analytics(store, clock, logger):
    """Create in-memory analytics recorder."""
    return InMemoryAnalyticsRecorder(
        store,
        base_url="http://testserver",
        clock=clock,
        logger=logger,
    )


@pytest.fixture
def make_service(store, analytics, short_code_generator, clock, logger):
    """Factory for services sharing the test store, with policy overrides."""
    def _make(**kwargs):
        options = dict(
            store=store,
            analytics=analytics,
            short_code_generator=short_code_generator,
            logger=logger,
            default_expiration_days=0,
            base_url="http://testserver",
            clock=clock,
        )
        options.update(kwargs)
        return URLShortenerService(**options)
    return _make


@pytest.fixture
async def service(make_service):
    """Create service instance; links never expire unless asked to."""
    svc = make_service()
    yield svc
    await svc.close()


@pytest.fixture
def sample_urls():
    """Sample URLs for testing."""
    return [
        "https://example.com/test",
        "https://github.com/user/repo",
        "http://stackoverflow.com/questions/123456",
    ]
