"""Best-effort click analytics for URL shortener."""

import logging
from abc import ABC, abstractmethod
from collections import Counter
from datetime import datetime, timezone, tzinfo
from typing import Callable, List, Optional, Tuple
from zoneinfo import ZoneInfo

from ..common.url_builder import build_short_url
from ..models import AnalyticsSummary, ClickCounter, ClickRecord, UrlAnalytics, UrlMapping
from ..store.base import MappingStoreBase


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def resolve_timezone(name: str) -> tzinfo:
    """Map a timezone name to a tzinfo, UTC without needing tzdata."""
    if not name or name.upper() == "UTC":
        return timezone.utc
    return ZoneInfo(name)


class AnalyticsRecorderBase(ABC):
    """Click counter and summary aggregator keyed by short code.

    Writes are best-effort: ``record_click`` never raises, so a redirect
    cannot fail because analytics could not be written. Subclasses provide
    the storage primitives; aggregation lives here.
    """

    backend_name = "base"

    def __init__(
        self,
        store: MappingStoreBase,
        base_url: str = "",
        path_prefix: str = "",
        timezone_name: str = "UTC",
        history_limit: int = 100,
        top_n: int = 5,
        recent_n: int = 5,
        clock: Optional[Callable[[], datetime]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """Initialize analytics recorder.

        Args:
            store: Mapping store used for metadata and summary scans
            base_url: Base URL for the short links shown in reports
            path_prefix: Optional path prefix for short links
            timezone_name: Reference timezone for "today" counts
            history_limit: Click records retained per short code
            top_n: Size of the top-by-clicks list in summaries
            recent_n: Size of the most-recent list in summaries
            clock: Callable returning the current UTC time
            logger: Optional logger
        """
        self.store = store
        self.base_url = base_url
        self.path_prefix = path_prefix
        self.tz = resolve_timezone(timezone_name)
        self.history_limit = history_limit
        self.top_n = top_n
        self.recent_n = recent_n
        self.clock = clock or _utcnow
        self.logger = logger or logging.getLogger(__name__)

    async def record_click(
        self,
        short_code: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        referer: Optional[str] = None,
    ) -> None:
        """Record one click. Failures are logged and swallowed."""
        try:
            click = ClickRecord(
                short_code=short_code,
                timestamp=self.clock(),
                ip_address=ip_address,
                user_agent=user_agent,
                referer=referer,
            )
            await self._record(click, self.day_key(click.timestamp))
        except Exception as e:
            self.logger.warning(f"Failed to record click for {short_code}: {e}")

    async def get_analytics(self, short_code: str) -> Optional[UrlAnalytics]:
        """Get click statistics for a short code.

        Args:
            short_code: The short code to lookup

        Returns:
            UrlAnalytics or None if the store does not know the code
        """
        mapping = await self.store.get(short_code)
        if mapping is None:
            return None
        counter = await self._read_counter(short_code)
        return self._build(mapping, counter)

    async def click_count(self, short_code: str) -> int:
        counter = await self._read_counter(short_code)
        return counter.total

    async def get_summary(self, now: Optional[datetime] = None) -> AnalyticsSummary:
        """Aggregate statistics across every stored mapping.

        This is a full scan and is not atomic with respect to concurrent
        writers.
        """
        now = now or self.clock()
        today = self.day_key(now)

        mappings = sorted(
            await self.store.list_mappings(),
            key=lambda m: (m.created_at, m.short_code),
        )

        rows: List[UrlAnalytics] = []
        today_clicks = 0
        for mapping in mappings:
            counter = await self._read_counter(mapping.short_code)
            today_clicks += counter.by_day.get(today, 0)
            rows.append(self._build(mapping, counter))

        # sorted() is stable, so ties keep creation order
        top_urls = sorted(rows, key=lambda a: a.click_count, reverse=True)[: self.top_n]
        recent_urls = list(reversed(rows))[: self.recent_n]

        return AnalyticsSummary(
            total_urls=len(rows),
            active_urls=sum(1 for m in mappings if m.is_accessible(now)),
            total_clicks=sum(a.click_count for a in rows),
            today_urls=sum(1 for m in mappings if self.day_key(m.created_at) == today),
            today_clicks=today_clicks,
            top_urls=top_urls,
            recent_urls=recent_urls,
            last_updated=now,
        )

    async def get_click_history(self, short_code: str, limit: Optional[int] = None) -> List[ClickRecord]:
        """Most recent clicks for a short code, newest first.

        A missing or zero limit means the full retained history; a negative
        limit yields nothing.
        """
        limit = min(limit or self.history_limit, self.history_limit)
        if limit <= 0:
            return []
        return await self._read_history(short_code, limit)

    async def unique_visitors(self, short_code: str) -> int:
        """Distinct IP addresses among the retained click history."""
        history = await self._read_history(short_code, self.history_limit)
        return len({c.ip_address for c in history if c.ip_address})

    async def top_referrers(self, short_code: str, limit: int = 5) -> List[Tuple[str, int]]:
        """Most common referers among the retained click history."""
        history = await self._read_history(short_code, self.history_limit)
        counts = Counter(c.referer for c in history if c.referer)
        return counts.most_common(limit)

    def day_key(self, moment: datetime) -> str:
        """Calendar day of a timestamp in the reference timezone."""
        if moment.tzinfo is None:
            moment = moment.replace(tzinfo=timezone.utc)
        return moment.astimezone(self.tz).date().isoformat()

    def _build(self, mapping: UrlMapping, counter: ClickCounter) -> UrlAnalytics:
        return UrlAnalytics(
            short_code=mapping.short_code,
            original_url=mapping.original_url,
            short_url=build_short_url(mapping.short_code, self.base_url, self.path_prefix),
            created_at=mapping.created_at,
            expires_at=mapping.expires_at,
            is_active=mapping.is_active,
            click_count=counter.total,
            last_accessed_at=counter.last_accessed_at,
        )

    @abstractmethod
    async def _record(self, click: ClickRecord, day: str) -> None:
        """Bump counters and append the click to the history."""
        pass

    @abstractmethod
    async def _read_counter(self, short_code: str) -> ClickCounter:
        """Current counters, zeroed for unknown codes."""
        pass

    @abstractmethod
    async def _read_history(self, short_code: str, limit: int) -> List[ClickRecord]:
        pass

    async def close(self) -> None:
        pass
