"""layout_ai.store.keyed_store

In-memory KeyedStore with per-key locking.

- Each key has its own lock, so writers for different users never wait on each other.
- Values are replaced, never mutated in place: readers always see a complete snapshot.
- Bounded appends keep the newest `max_size` items (oldest evicted first).
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Iterable, Optional

from layout_ai.contracts.tool_base import KeyedStore


class InMemoryKeyedStore(KeyedStore):
    def __init__(self) -> None:
        self._data: dict[str, Any] = {}
        self._locks: dict[str, threading.Lock] = {}
        # Guards lock creation only, never held while a value is computed
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = threading.Lock()
                self._locks[key] = lock
            return lock

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def put(self, key: str, value: Any) -> None:
        with self._lock_for(key):
            self._data[key] = value

    def update(self, key: str, fn: Callable[[Optional[Any]], Any]) -> Any:
        with self._lock_for(key):
            new = fn(self._data.get(key))
            self._data[key] = new
            return new

    def append_bounded(self, key: str, item: Any, max_size: int) -> tuple[Any, ...]:
        def _append(old: Optional[tuple[Any, ...]]) -> tuple[Any, ...]:
            if max_size <= 0:
                return ()
            return (tuple(old or ()) + (item,))[-max_size:]

        return self.update(key, _append)

    def delete(self, key: str) -> None:
        with self._lock_for(key):
            self._data.pop(key, None)

    def keys(self) -> Iterable[str]:
        return list(self._data)

    def clear(self) -> None:
        for key in list(self._data):
            self.delete(key)

    def __len__(self) -> int:
        return len(self._data)
