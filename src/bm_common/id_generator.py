"""Snowflake-style ids for listings, orders, escrows and disputes.

An id is a decimal string of (milliseconds since 2025-01-01 | machine_id |
sequence). Ids from one process are strictly increasing, so `ORDER BY id DESC`
is newest-first and the last id of a page works as a keyset cursor.
"""

import threading
import time

from config.settings import settings

_EPOCH_MS = 1_735_689_600_000  # 2025-01-01T00:00:00Z
_MACHINE_BITS = 10
_SEQUENCE_BITS = 12
_MAX_MACHINE_ID = (1 << _MACHINE_BITS) - 1
_SEQUENCE_MASK = (1 << _SEQUENCE_BITS) - 1


def _now_ms() -> int:
    return time.time_ns() // 1_000_000


class SnowflakeIdGenerator:
    def __init__(self, machine_id: int = 0) -> None:
        if not 0 <= machine_id <= _MAX_MACHINE_ID:
            raise ValueError(f"machine_id must be 0-{_MAX_MACHINE_ID}, got {machine_id}")
        self._machine_id = machine_id
        self._last_ms = -1
        self._sequence = 0
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            # Never step back in time, even if the wall clock does
            now = max(_now_ms(), self._last_ms)
            if now == self._last_ms:
                self._sequence = (self._sequence + 1) & _SEQUENCE_MASK
                if self._sequence == 0:
                    while now <= self._last_ms:
                        now = _now_ms()
            else:
                self._sequence = 0
            self._last_ms = now
            return str(self._pack(now))

    def _pack(self, ms: int) -> int:
        return (
            (ms - _EPOCH_MS) << (_MACHINE_BITS + _SEQUENCE_BITS)
            | self._machine_id << _SEQUENCE_BITS
            | self._sequence
        )


_generator = SnowflakeIdGenerator(machine_id=settings.WORKER_ID)


def generate_id() -> str:
    return _generator.next_id()
