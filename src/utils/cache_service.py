"""
Per-container report cache.

Keys carry the full query identity (period plus resolved date range and the
current month), so one query's result is never served for another. Entries
live across warm Lambda invocations until their deadline passes or they are
pushed out by newer reports.
"""

import time
from collections import OrderedDict
from threading import Lock
from typing import Any, Hashable, Optional, Tuple


class LRUCache:
    """Bounded mapping with per-entry expiry; oldest-used entries go first."""

    def __init__(self, max_size: int = 100, ttl_seconds: int = 300):
        self.max_size = max_size
        self.ttl_seconds = ttl_seconds
        self._entries: "OrderedDict[Hashable, Tuple[float, Any]]" = OrderedDict()
        self._lock = Lock()

    def get(self, key: Hashable) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            deadline, value = entry
            if time.monotonic() >= deadline:
                self._entries.pop(key)
                return None
            self._entries.move_to_end(key)
            return value

    def set(self, key: Hashable, value: Any) -> None:
        deadline = time.monotonic() + self.ttl_seconds
        with self._lock:
            self._entries[key] = (deadline, value)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_size:
                self._entries.popitem(last=False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
