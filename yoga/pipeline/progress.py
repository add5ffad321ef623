import threading
from typing import Tuple


class ProgressTracker:
    """Thread-safe scan counters, written by the loader and polled by the UI."""

    def __init__(self):
        self._lock = threading.Lock()
        self._total = 0
        self._processed = 0
        self._done = False

    def reset(self):
        with self._lock:
            self._total = 0
            self._processed = 0
            self._done = False

    def set_total(self, total: int):
        with self._lock:
            self._total = total

    def increment(self):
        with self._lock:
            self._processed += 1

    def mark_done(self):
        """After this no further increments happen for the current scan."""
        with self._lock:
            self._done = True

    def snapshot(self) -> Tuple[int, int, bool]:
        """Returns (processed, total, done)."""
        with self._lock:
            return self._processed, self._total, self._done
