"""Order numbers: ``ORD-`` followed by the last 8 digits of a millisecond clock.

The clock reading is forced to be strictly increasing within the process, so
two checkouts in the same millisecond still get different numbers. The 8
digit window wraps roughly every 27 hours, which is why the ledger is asked
whether a candidate is already taken before it is handed out.
"""

import threading
import time

ORDER_NUMBER_PREFIX = "ORD-"
_DIGITS = 8
_MAX_DRAWS = 1000


class OrderNumberGenerator:
    def __init__(self, clock=None):
        self._clock = clock or (lambda: time.time_ns() // 1_000_000)
        self._lock = threading.Lock()
        self._last_ms = 0

    def _tick(self) -> int:
        with self._lock:
            now = max(int(self._clock()), self._last_ms + 1)
            self._last_ms = now
            return now

    def next(self, is_taken=None) -> str:
        """Draw the next order number, skipping any for which ``is_taken`` is true."""
        for _ in range(_MAX_DRAWS):
            candidate = f"{ORDER_NUMBER_PREFIX}{self._tick() % 10**_DIGITS:0{_DIGITS}d}"
            if is_taken is None or not is_taken(candidate):
                return candidate
        raise RuntimeError("Could not draw a free order number")


_generator = OrderNumberGenerator()


def next_order_number(is_taken=None) -> str:
    return _generator.next(is_taken)
