"""Snowflake-style ID generator for wager IDs.

Wager ids are allocated before the wager row is inserted so the ledger debit
for the stake can reference the wager in the same transaction.
Monotonically increasing per process; not coordinated across machines beyond
the configured machine_id.
"""

import threading
import time


class SnowflakeIdGenerator:
    """Layout (64 bits): 41 bits ms timestamp | 10 bits machine_id | 12 bits sequence."""

    _EPOCH_MS = 1_735_689_600_000  # 2025-01-01
    _MACHINE_BITS = 10
    _SEQUENCE_BITS = 12
    _MAX_SEQUENCE = (1 << _SEQUENCE_BITS) - 1

    def __init__(self, machine_id: int = 0) -> None:
        if not (0 <= machine_id < (1 << self._MACHINE_BITS)):
            raise ValueError(f"machine_id must be 0-{(1 << self._MACHINE_BITS) - 1}")
        self._machine_id = machine_id
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    def next_id(self) -> str:
        with self._lock:
            now_ms = int(time.time() * 1000)
            if now_ms == self._last_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    while now_ms <= self._last_ms:
                        now_ms = int(time.time() * 1000)
            else:
                self._sequence = 0
            self._last_ms = now_ms
            value = (
                ((now_ms - self._EPOCH_MS) << (self._MACHINE_BITS + self._SEQUENCE_BITS))
                | (self._machine_id << self._SEQUENCE_BITS)
                | self._sequence
            )
            return str(value)


_default_generator = SnowflakeIdGenerator()


def generate_id() -> str:
    """Next id from the module-level default generator."""
    return _default_generator.next_id()
