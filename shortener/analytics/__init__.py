"""Click analytics backends for URL shortener."""

from .base import AnalyticsRecorderBase
from .memory import InMemoryAnalyticsRecorder
from .redis_analytics import RedisAnalyticsRecorder

__all__ = ["AnalyticsRecorderBase", "InMemoryAnalyticsRecorder", "RedisAnalyticsRecorder"]
