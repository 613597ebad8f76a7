"""Backend selection and service wiring."""

import logging
from typing import Optional, Tuple

from .analytics import AnalyticsRecorderBase, InMemoryAnalyticsRecorder, RedisAnalyticsRecorder
from .errors import StorageError
from .service import URLShortenerService
from .shortcode import ShortCodeGenerator
from .store import InMemoryMappingStore, MappingStoreBase, RedisMappingStore


async def create_backends(
    config,
    logger: Optional[logging.Logger] = None,
) -> Tuple[MappingStoreBase, AnalyticsRecorderBase]:
    """Build the mapping store and analytics recorder named by config.

    A Redis backend that cannot be reached falls back to memory when
    ``redis_fallback_to_memory`` is set, otherwise StorageError propagates.
    """
    logger = logger or logging.getLogger(__name__)
    analytics_kwargs = dict(
        base_url=config.base_url,
        path_prefix=config.path_prefix,
        timezone_name=config.analytics_timezone,
        history_limit=config.click_history_limit,
        logger=logger,
    )

    if config.store_backend == "redis":
        if not config.redis_url:
            raise ValueError("redis_url is required when store_backend is 'redis'")

        logger.info(f"Connecting to Redis at {config.redis_url}")
        store = RedisMappingStore(
            redis_url=config.redis_url,
            key_prefix=config.redis_key_prefix,
            logger=logger,
        )
        try:
            await store.connect()
        except StorageError:
            await store.close()
            if not config.redis_fallback_to_memory:
                raise
            logger.warning("Redis unavailable, falling back to in-memory store")
        else:
            analytics = RedisAnalyticsRecorder(
                store,
                client=store.client,
                key_prefix=config.analytics_key_prefix,
                history_prefix=config.click_history_key_prefix,
                **analytics_kwargs,
            )
            return store, analytics

    store = InMemoryMappingStore(logger=logger)
    analytics = InMemoryAnalyticsRecorder(store, **analytics_kwargs)
    logger.info("Using in-memory store")
    return store, analytics


async def create_service(
    config,
    logger: Optional[logging.Logger] = None,
) -> URLShortenerService:
    """Create a fully wired service from configuration."""
    logger = logger or logging.getLogger(__name__)
    store, analytics = await create_backends(config, logger)

    return URLShortenerService(
        store=store,
        analytics=analytics,
        short_code_generator=ShortCodeGenerator(default_length=config.short_code_length),
        logger=logger,
        default_expiration_days=config.default_expiration_days,
        max_collision_retries=config.max_collision_retries,
        base_url=config.base_url,
        path_prefix=config.path_prefix,
    )
