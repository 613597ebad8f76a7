"""Tests for configuration and backend wiring."""

from unittest.mock import AsyncMock, patch

import pytest
from pydantic import ValidationError

from config import Config, load_config
from shortener.analytics import InMemoryAnalyticsRecorder, RedisAnalyticsRecorder
from shortener.errors import StorageError
from shortener.factory import create_backends, create_service
from shortener.store import InMemoryMappingStore, RedisMappingStore


class TestConfig:

    def test_defaults(self):
        config = Config()

        assert config.store_backend == "memory"
        assert config.short_code_length == 6
        assert config.default_expiration_days == 365
        assert config.max_collision_retries == 10
        assert config.analytics_timezone == "UTC"

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "redis")
        monkeypatch.setenv("REDIS_URL", "redis://cache:6379/1")
        monkeypatch.setenv("DEFAULT_EXPIRATION_DAYS", "0")

        config = load_config()

        assert config.store_backend == "redis"
        assert config.redis_url == "redis://cache:6379/1"
        assert config.default_expiration_days == 0

    def test_keyword_overrides_win(self, monkeypatch):
        monkeypatch.setenv("STORE_BACKEND", "redis")

        assert load_config(store_backend="memory").store_backend == "memory"

    @pytest.mark.parametrize("field,value", [
        ("short_code_length", 0),
        ("short_code_length", 11),
        ("max_collision_retries", 0),
        ("default_expiration_days", -1),
        ("store_backend", "postgres"),
    ])
    def test_rejects_bad_values(self, field, value):
        with pytest.raises(ValidationError):
            Config(**{field: value})


class TestCreateBackends:

    @pytest.mark.asyncio
    async def test_memory_backend(self, logger):
        store, analytics = await create_backends(Config(), logger)

        assert isinstance(store, InMemoryMappingStore)
        assert isinstance(analytics, InMemoryAnalyticsRecorder)
        assert analytics.store is store

    @pytest.mark.asyncio
    async def test_redis_backend(self, logger):
        config = Config(store_backend="redis", redis_url="redis://localhost:6379/0")

        with patch.object(RedisMappingStore, "connect", AsyncMock()):
            store, analytics = await create_backends(config, logger)

        assert isinstance(store, RedisMappingStore)
        assert isinstance(analytics, RedisAnalyticsRecorder)
        assert analytics.client is store.client
        assert store.key_prefix == "url:"
        assert analytics.key_prefix == "analytics:"

    @pytest.mark.asyncio
    async def test_redis_requires_url(self, logger):
        with pytest.raises(ValueError):
            await create_backends(Config(store_backend="redis"), logger)

    @pytest.mark.asyncio
    async def test_redis_unreachable_falls_back(self, logger):
        config = Config(store_backend="redis", redis_url="redis://localhost:6379/0")

        with patch.object(RedisMappingStore, "connect", AsyncMock(side_effect=StorageError("down"))):
            store, analytics = await create_backends(config, logger)

        assert isinstance(store, InMemoryMappingStore)
        assert isinstance(analytics, InMemoryAnalyticsRecorder)

    @pytest.mark.asyncio
    async def test_redis_unreachable_without_fallback(self, logger):
        config = Config(
            store_backend="redis",
            redis_url="redis://localhost:6379/0",
            redis_fallback_to_memory=False,
        )

        with patch.object(RedisMappingStore, "connect", AsyncMock(side_effect=StorageError("down"))):
            with pytest.raises(StorageError):
                await create_backends(config, logger)


class TestCreateService:

    @pytest.mark.asyncio
    async def test_policy_from_config(self, logger):
        config = Config(
            short_code_length=8,
            default_expiration_days=30,
            max_collision_retries=4,
            base_url="https://sho.rt",
            path_prefix="/s",
        )

        service = await create_service(config, logger)
        try:
            mapping = await service.create_short_url("https://example.com")

            assert len(mapping.short_code) == 8
            assert (mapping.expires_at - mapping.created_at).days == 30
            assert service.max_collision_retries == 4
            assert service.short_url(mapping.short_code) == f"https://sho.rt/s/{mapping.short_code}"
        finally:
            await service.close()
