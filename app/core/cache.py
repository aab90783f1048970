from __future__ import annotations

import threading
import time
from copy import deepcopy
from typing import Hashable


class TTLCache:
    """进程内短时缓存，仅用于缓存成功的排行榜读取结果"""

    def __init__(self, ttl_seconds: float = 0.0):
        self.ttl_seconds = max(float(ttl_seconds), 0.0)
        self._lock = threading.RLock()
        self._store: dict[Hashable, tuple[float, object]] = {}

    @property
    def enabled(self) -> bool:
        return self.ttl_seconds > 0

    def get(self, key: Hashable):
        if not self.enabled:
            return None
        now = time.monotonic()
        with self._lock:
            item = self._store.get(key)
            if item is None:
                return None
            expires_at, value = item
            if expires_at <= now:
                self._store.pop(key, None)
                return None
            return deepcopy(value)

    def set(self, key: Hashable, value):
        if not self.enabled:
            return
        expires_at = time.monotonic() + self.ttl_seconds
        with self._lock:
            self._store[key] = (expires_at, deepcopy(value))

    def clear(self):
        with self._lock:
            self._store.clear()
