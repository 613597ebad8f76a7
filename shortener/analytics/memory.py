"""In-process analytics backend."""

import threading
from collections import deque
from itertools import islice
from typing import Deque, Dict, List

from .base import AnalyticsRecorderBase
from ..models import ClickCounter, ClickRecord


class InMemoryAnalyticsRecorder(AnalyticsRecorderBase):
    """Counters and bounded click history kept in dicts."""

    backend_name = "memory"

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._counters: Dict[str, ClickCounter] = {}
        self._history: Dict[str, Deque[ClickRecord]] = {}
        self._lock = threading.Lock()

    async def _record(self, click: ClickRecord, day: str) -> None:
        with self._lock:
            counter = self._counters.setdefault(click.short_code, ClickCounter())
            counter.total += 1
            counter.by_day[day] = counter.by_day.get(day, 0) + 1
            if counter.last_accessed_at is None or click.timestamp > counter.last_accessed_at:
                counter.last_accessed_at = click.timestamp

            history = self._history.get(click.short_code)
            if history is None:
                history = self._history[click.short_code] = deque(maxlen=self.history_limit)
            history.appendleft(click)

    async def _read_counter(self, short_code: str) -> ClickCounter:
        with self._lock:
            counter = self._counters.get(short_code)
            if counter is None:
                return ClickCounter()
            # Copy so callers never observe a later increment
            return ClickCounter(
                total=counter.total,
                last_accessed_at=counter.last_accessed_at,
                by_day=dict(counter.by_day),
            )

    async def _read_history(self, short_code: str, limit: int) -> List[ClickRecord]:
        with self._lock:
            return list(islice(self._history.get(short_code, ()), limit))
