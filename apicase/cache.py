# apicase/cache.py
"""Response cache for the REPL: bounded LRU whose entries expire after max_age seconds."""

from __future__ import annotations

import threading
import time
from collections import OrderedDict
from typing import Any, Callable, Optional, Tuple


class ResponseCache:
    def __init__(self, max_size: int = 100, max_age: float = 5.0, clock: Callable[[], float] = time.monotonic):
        if max_size < 1:
            raise ValueError("cache size must be at least 1")
        self.max_size = max_size
        self.max_age = max_age
        self._clock = clock
        self._entries: "OrderedDict[str, Tuple[Any, float]]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, stamp = entry
            if self._clock() - stamp > self.max_age:
                return None
            self._entries.move_to_end(key)
            return value

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock())
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def remove_expired_entries(self) -> int:
        """Drop stale entries; returns how many were removed."""
        with self._lock:
            now = self._clock()
            expired = [k for k, (_, stamp) in self._entries.items() if now - stamp > self.max_age]
            for key in expired:
                del self._entries[key]
            return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None
