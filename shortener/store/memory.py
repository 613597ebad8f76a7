"""In-process mapping store."""

import logging
import threading
from datetime import datetime
from typing import Dict, List, Optional

from .base import MappingStoreBase
from ..models import UrlMapping


class InMemoryMappingStore(MappingStoreBase):
    """Mapping store held in a dict for the lifetime of the process.

    Mappings are immutable, so readers always see either the old or the new
    record. The lock only serialises read-modify-write in ``deactivate``.
    Expired entries are kept; the service compares ``expires_at`` on read.
    """

    backend_name = "memory"

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._mappings: Dict[str, UrlMapping] = {}
        self._lock = threading.Lock()

    async def put(
        self,
        short_code: str,
        original_url: str,
        created_at: datetime,
        expires_at: Optional[datetime] = None,
    ) -> UrlMapping:
        mapping = UrlMapping(
            short_code=short_code,
            original_url=original_url,
            created_at=created_at,
            expires_at=expires_at,
            is_active=True,
        )
        with self._lock:
            self._mappings[short_code] = mapping
        self.logger.debug(f"Stored mapping {short_code} -> {original_url}")
        return mapping

    async def get(self, short_code: str) -> Optional[UrlMapping]:
        return self._mappings.get(short_code)

    async def exists(self, short_code: str) -> bool:
        return short_code in self._mappings

    async def deactivate(self, short_code: str) -> bool:
        with self._lock:
            mapping = self._mappings.get(short_code)
            if mapping is None or not mapping.is_active:
                return False
            self._mappings[short_code] = mapping.deactivated()
        return True

    async def list_mappings(self) -> List[UrlMapping]:
        with self._lock:
            return list(self._mappings.values())

    def __len__(self) -> int:
        return len(self._mappings)
