"""
ID Allocator

Architectural Intent:
- Issues strictly increasing integer ids used to order projects for display
- Safe to call from any number of request threads at once
- Owned by the composition root and injected, never a module global
"""

import itertools
import threading


class IdAllocator:
    def __init__(self, start: int = 0) -> None:
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next(self) -> int:
        with self._lock:
            return next(self._counter)
