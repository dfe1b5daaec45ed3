"""Abuse counter stores.

`InMemoryAbuseCounters` is process-local: counts vanish on restart and are
not shared between instances. Use the Redis store
(infrastructure/redis_counters.py) when running more than one process.

Spam counts use a window measured from the *last* occurrence: a new
occurrence more than `window_seconds` after the previous one restarts the
count at 1.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol


class AbuseCounterStore(Protocol):
    async def incr_reports(self, user_id: str) -> int: ...

    async def record_spam(self, user_id: str) -> int: ...


@dataclass
class _SpamRecord:
    count: int
    last_at: float


class InMemoryAbuseCounters:
    def __init__(
        self,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._window = window_seconds
        self._clock = clock
        self._reports: dict[str, int] = {}
        self._spam: dict[str, _SpamRecord] = {}

    async def incr_reports(self, user_id: str) -> int:
        count = self._reports.get(user_id, 0) + 1
        self._reports[user_id] = count
        return count

    async def record_spam(self, user_id: str) -> int:
        now = self._clock()
        record = self._spam.get(user_id)
        if record is None or now - record.last_at > self._window:
            record = _SpamRecord(count=0, last_at=now)
        record.count += 1
        record.last_at = now
        self._spam[user_id] = record
        return record.count
