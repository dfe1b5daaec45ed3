"""Snowflake-style string IDs for every business row except users.

Listings, offers, conversations, messages, notifications and reports all
use these. IDs sort by creation time, so the listing feed can page with an
id cursor and messages order stably inside the same millisecond.
"""

import threading
import time

from config.settings import settings

_EPOCH_MS = 1_767_225_600_000  # 2026-01-01T00:00:00Z
_MACHINE_BITS = 10
_SEQUENCE_BITS = 12
_SEQUENCE_MASK = (1 << _SEQUENCE_BITS) - 1


class SnowflakeIdGenerator:
    """41-bit millisecond timestamp | 10-bit machine id | 12-bit sequence."""

    def __init__(self, machine_id: int = 0) -> None:
        if not 0 <= machine_id < (1 << _MACHINE_BITS):
            raise ValueError(f"machine_id must be 0-{(1 << _MACHINE_BITS) - 1}, got {machine_id}")
        self._machine_id = machine_id
        self._last_ms = -1
        self._sequence = 0
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            now_ms = int(time.time() * 1000)
            if now_ms < self._last_ms:
                # Clock stepped back; keep issuing from the last seen millisecond.
                now_ms = self._last_ms
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & _SEQUENCE_MASK
                if self._sequence == 0:
                    while now_ms <= self._last_ms:
                        now_ms = int(time.time() * 1000)
            else:
                self._sequence = 0
            self._last_ms = now_ms
            value = (
                (now_ms - _EPOCH_MS) << (_MACHINE_BITS + _SEQUENCE_BITS)
                | self._machine_id << _SEQUENCE_BITS
                | self._sequence
            )
            return str(value)


_generator = SnowflakeIdGenerator(settings.ID_MACHINE_ID)


def generate_id() -> str:
    return _generator.next_id()
