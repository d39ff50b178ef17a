"""Control of the number of worker threads used by parallel code."""

from __future__ import annotations

import os
import threading
from typing import Optional, Sequence


def which_max(values: Sequence[int]) -> int:
    """0-based position of the maximum, the greatest one on ties; -1 if empty."""
    if not values:
        return -1
    best = len(values) - 1
    for i in range(best - 1, -1, -1):
        if values[i] > values[best]:
            best = i
    return best


def get_num_procs() -> int:
    """Number of processors available, or 0 if it cannot be determined."""
    return os.cpu_count() or 0


class _ThreadSettings:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._max_threads: Optional[int] = None

    def get(self) -> int:
        with self._lock:
            if self._max_threads is None:
                self._max_threads = get_num_procs() or 1
            return self._max_threads

    def swap(self, nthread: int) -> int:
        previous = self.get()
        with self._lock:
            self._max_threads = nthread
        return previous


_settings = _ThreadSettings()


def get_max_threads() -> int:
    """Current maximum number of threads."""
    return _settings.get()


def set_max_threads(nthread) -> int:
    """Set the maximum number of threads and return the previous one."""
    if not isinstance(nthread, int) or isinstance(nthread, bool):
        raise TypeError("'nthread' must be a single integer")
    if nthread < 1:
        raise ValueError("'nthread' must be >= 1")
    return _settings.swap(nthread)