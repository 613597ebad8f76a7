"""Data models for URL shortener."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def _parse_dt(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class UrlMapping:
    """A short code bound to an original URL."""

    short_code: str
    original_url: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    is_active: bool = True

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at

    def is_accessible(self, now: datetime) -> bool:
        """Active and not past its expiration time."""
        return self.is_active and not self.is_expired(now)

    def deactivated(self) -> "UrlMapping":
        return replace(self, is_active=False)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "short_code": self.short_code,
            "original_url": self.original_url,
            "created_at": _iso(self.created_at),
            "expires_at": _iso(self.expires_at),
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UrlMapping":
        """Create from dictionary."""
        is_active = data.get("is_active", True)
        if isinstance(is_active, str):
            is_active = is_active not in ("0", "false", "False", "")
        return cls(
            short_code=data["short_code"],
            original_url=data["original_url"],
            created_at=_parse_dt(data["created_at"]),
            expires_at=_parse_dt(data.get("expires_at")),
            is_active=bool(is_active),
        )


@dataclass(frozen=True)
class ClickRecord:
    """One redirect event."""

    short_code: str
    timestamp: datetime
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    referer: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "short_code": self.short_code,
            "timestamp": _iso(self.timestamp),
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "referer": self.referer,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ClickRecord":
        return cls(
            short_code=data["short_code"],
            timestamp=_parse_dt(data["timestamp"]),
            ip_address=data.get("ip_address"),
            user_agent=data.get("user_agent"),
            referer=data.get("referer"),
        )


@dataclass
class ClickCounter:
    """Aggregated click state for a single short code."""

    total: int = 0
    last_accessed_at: Optional[datetime] = None
    by_day: Dict[str, int] = field(default_factory=dict)


@dataclass
class UrlAnalytics:
    """Click statistics with a denormalized copy of the mapping."""

    short_code: str
    original_url: str
    short_url: str
    created_at: datetime
    expires_at: Optional[datetime]
    is_active: bool
    click_count: int = 0
    last_accessed_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "short_code": self.short_code,
            "original_url": self.original_url,
            "short_url": self.short_url,
            "created_at": _iso(self.created_at),
            "expires_at": _iso(self.expires_at),
            "is_active": self.is_active,
            "click_count": self.click_count,
            "last_accessed_at": _iso(self.last_accessed_at),
        }


@dataclass
class AnalyticsSummary:
    """Aggregate view across all tracked short codes."""

    total_urls: int
    active_urls: int
    total_clicks: int
    today_urls: int
    today_clicks: int
    top_urls: List[UrlAnalytics]
    recent_urls: List[UrlAnalytics]
    last_updated: datetime

    def to_dict(self) -> dict:
        return {
            "total_urls": self.total_urls,
            "active_urls": self.active_urls,
            "total_clicks": self.total_clicks,
            "today_urls": self.today_urls,
            "today_clicks": self.today_clicks,
            "top_urls": [a.to_dict() for a in self.top_urls],
            "recent_urls": [a.to_dict() for a in self.recent_urls],
            "last_updated": _iso(self.last_updated),
        }
