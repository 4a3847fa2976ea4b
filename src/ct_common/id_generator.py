"""Snowflake-style ID generator for entity primary keys.

Hire requests, contracts, orders, disputes and notifications all carry a
string snowflake as their internal id; the human-facing order number is a
separate, much smaller keyspace (see ``keyspace.py``).
"""

import threading
import time


class SnowflakeIdGenerator:
    """Layout (63 bits used):
      - 41 bits: millisecond timestamp (since custom epoch)
      - 10 bits: machine_id (0-1023)
      - 12 bits: sequence (0-4095 per millisecond)
    """

    _EPOCH_MS = 1_704_067_200_000  # 2024-01-01T00:00:00Z
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
            now = self._now_ms()
            if now < self._last_ms:
                # Clock stepped backwards; keep ids monotonic by reusing the last tick.
                now = self._last_ms
            if now == self._last_ms:
                self._sequence = (self._sequence + 1) & self._MAX_SEQUENCE
                if self._sequence == 0:
                    now = self._wait_past(self._last_ms)
            else:
                self._sequence = 0

            self._last_ms = now
            value = (
                ((now - self._EPOCH_MS) << (self._MACHINE_BITS + self._SEQUENCE_BITS))
                | (self._machine_id << self._SEQUENCE_BITS)
                | self._sequence
            )
            return str(value)

    def _now_ms(self) -> int:
        return int(time.time() * 1000)

    def _wait_past(self, last_ms: int) -> int:
        now = self._now_ms()
        while now <= last_ms:
            now = self._now_ms()
        return now


_default_generator = SnowflakeIdGenerator()


def configure(machine_id: int) -> None:
    """Rebind the default generator to this process's machine id (called at startup)."""
    global _default_generator  # noqa: PLW0603
    _default_generator = SnowflakeIdGenerator(machine_id)


def generate_id() -> str:
    """Generate a unique snowflake-style string ID using the module-level default generator."""
    return _default_generator.next_id()
