"""Business logic service for URL shortener."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Optional, Set

from .analytics.base import AnalyticsRecorderBase
from .common.url_builder import build_short_url
from .common.validators import is_valid_short_code, is_valid_url
from .errors import CodeSpaceExhaustedError, InvalidTtlError, InvalidUrlError
from .models import AnalyticsSummary, UrlAnalytics, UrlMapping
from .shortcode import ShortCodeGenerator
from .store.base import MappingStoreBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class URLShortenerService:
    """Service layer for URL shortening business logic."""

    def __init__(
        self,
        store: MappingStoreBase,
        analytics: AnalyticsRecorderBase,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        logger: Optional[logging.Logger] = None,
        default_expiration_days: Optional[int] = 365,
        max_collision_retries: int = 10,
        base_url: str = "http://localhost:8080",
        path_prefix: str = "",
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """Initialize URL shortener service.

        Args:
            store: Mapping store
            analytics: Analytics recorder
            short_code_generator: Optional short code generator
            logger: Optional logger
            default_expiration_days: TTL applied when the caller gives none;
                0 or None means links never expire
            max_collision_retries: Code generation attempts before giving up
            base_url: Base URL for human-readable short links
            path_prefix: Optional path prefix for short links
            clock: Callable returning the current UTC time
        """
        self.store = store
        self.analytics = analytics
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.default_expiration_days = default_expiration_days
        self.max_collision_retries = max_collision_retries
        self.base_url = base_url
        self.path_prefix = path_prefix
        self.clock = clock or _utcnow
        self._pending: Set[asyncio.Task] = set()

    async def create_short_url(
        self,
        original_url: str,
        ttl_days: Optional[int] = None,
    ) -> UrlMapping:
        """Create a new short URL.

        Args:
            original_url: The original long URL
            ttl_days: Days until expiration; non-positive or None falls back
                to the configured default

        Returns:
            The stored mapping

        Raises:
            InvalidUrlError: If validation fails
            InvalidTtlError: If the expiration falls outside the datetime range
            CodeSpaceExhaustedError: If no free code was found
        """
        is_valid, error = is_valid_url(original_url)
        if not is_valid:
            raise InvalidUrlError(error)

        created_at = self.clock()
        expires_at = self._compute_expires_at(created_at, ttl_days)

        short_code = await self._generate_unique_short_code()
        mapping = await self.store.put(short_code, original_url, created_at, expires_at)

        self.logger.info(f"Created short URL: {short_code} -> {original_url}")
        return mapping

    async def resolve(
        self,
        short_code: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        referer: Optional[str] = None,
    ) -> Optional[str]:
        """Get the original URL for a short code and count the click.

        Unknown, deactivated and expired codes all return None.

        Args:
            short_code: The short code to lookup
            ip_address: Client address for analytics
            user_agent: Client user agent for analytics
            referer: Referer header for analytics

        Returns:
            Original URL or None if not accessible
        """
        is_valid, _ = is_valid_short_code(short_code)
        if not is_valid:
            return None

        mapping = await self.store.get(short_code)
        if mapping is None or not mapping.is_accessible(self.clock()):
            self.logger.debug(f"Short code not found: {short_code}")
            return None

        self._schedule_click(short_code, ip_address, user_agent, referer)
        return mapping.original_url

    async def get_mapping(self, short_code: str) -> Optional[UrlMapping]:
        """Stored mapping without accessibility checks or click tracking."""
        return await self.store.get(short_code)

    async def deactivate(self, short_code: str) -> bool:
        """Soft delete a short URL.

        Returns:
            True if an active mapping was deactivated, False if it was
            missing or already inactive
        """
        deactivated = await self.store.deactivate(short_code)
        if deactivated:
            self.logger.info(f"Deactivated short URL: {short_code}")
        return deactivated

    async def exists(self, short_code: str) -> bool:
        return await self.store.exists(short_code)

    async def click_count(self, short_code: str) -> int:
        return await self.analytics.click_count(short_code)

    async def get_analytics(self, short_code: str) -> Optional[UrlAnalytics]:
        return await self.analytics.get_analytics(short_code)

    async def get_summary(self) -> AnalyticsSummary:
        return await self.analytics.get_summary(self.clock())

    def short_url(self, short_code: str) -> str:
        return build_short_url(short_code, self.base_url, self.path_prefix)

    async def cleanup_expired(self) -> int:
        """Deactivate every active mapping whose expiration has passed.

        Returns:
            Number of mappings deactivated by this pass
        """
        now = self.clock()
        count = 0

        for mapping in await self.store.list_mappings():
            if mapping.is_active and mapping.is_expired(now):
                if await self.store.deactivate(mapping.short_code):
                    count += 1

        if count:
            self.logger.info(f"Deactivated {count} expired short URLs")
        return count

    async def run_cleanup_loop(
        self,
        interval_seconds: float,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        """Run cleanup_expired every interval until stop_event is set."""
        stop_event = stop_event or asyncio.Event()
        self.logger.info(f"Starting expiry cleanup loop every {interval_seconds}s")

        while not stop_event.is_set():
            try:
                await self.cleanup_expired()
            except Exception as e:
                self.logger.error(f"Error during expiry cleanup: {e}")

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
            except asyncio.TimeoutError:
                pass

        self.logger.info("Expiry cleanup loop stopped")

    async def flush_analytics(self) -> None:
        """Wait for all scheduled click recordings to finish."""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        store_healthy = await self.store.health_check()
        return {
            "store": store_healthy,
            "overall": store_healthy,
        }

    async def get_statistics(self) -> Dict[str, Any]:
        """Backend and policy settings, for diagnostics."""
        return {
            "store_backend": self.store.backend_name,
            "analytics_backend": self.analytics.backend_name,
            "code_length": self.generator.default_length,
            "default_expiration_days": self.default_expiration_days,
            "max_collision_retries": self.max_collision_retries,
        }

    async def close(self) -> None:
        """Finish pending analytics and close connections."""
        await self.flush_analytics()
        await self.analytics.close()
        await self.store.close()

    def _schedule_click(
        self,
        short_code: str,
        ip_address: Optional[str],
        user_agent: Optional[str],
        referer: Optional[str],
    ) -> None:
        # Fire and forget; record_click never raises
        task = asyncio.create_task(
            self.analytics.record_click(short_code, ip_address, user_agent, referer)
        )
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    def _compute_expires_at(self, created_at: datetime, ttl_days: Optional[int]) -> Optional[datetime]:
        if ttl_days is None or ttl_days <= 0:
            ttl_days = self.default_expiration_days
        if not ttl_days or ttl_days <= 0:
            return None

        try:
            return created_at + timedelta(days=ttl_days)
        except OverflowError as e:
            raise InvalidTtlError(ttl_days) from e

    async def _generate_unique_short_code(self) -> str:
        """Generate a short code not currently bound in the store.

        Raises:
            CodeSpaceExhaustedError: If unable to find a free code
        """
        for attempt in range(self.max_collision_retries):
            code = self.generator.generate()

            if not await self.store.exists(code):
                if attempt:
                    self.logger.debug(f"Generated code after {attempt + 1} attempts: {code}")
                return code

        self.logger.error(
            f"Short code space exhausted after {self.max_collision_retries} attempts"
        )
        raise CodeSpaceExhaustedError(self.max_collision_retries, self.generator.default_length)
