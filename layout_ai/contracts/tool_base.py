"""layout_ai.contracts.tool_base

Interfaces for external collaborators: the remote intent model and the keyed store.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Callable, Iterable, Optional


class IntentModelTool(ABC):
    """Remote text-understanding service. Returns the raw (un-normalized) JSON object."""

    @abstractmethod
    def extract_intent(self, prompt: str, context: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    def close(self) -> None:
        return None


class KeyedStore(ABC):
    """Keyed map safe for concurrent use from independent requests.

    Mutations of one key must not block or corrupt other keys. Values handed out are treated as
    immutable snapshots; writers replace them instead of mutating in place.
    """

    @abstractmethod
    def get(self, key: str, default: Any = None) -> Any:
        raise NotImplementedError

    @abstractmethod
    def put(self, key: str, value: Any) -> None:
        raise NotImplementedError

    @abstractmethod
    def update(self, key: str, fn: Callable[[Optional[Any]], Any]) -> Any:
        """Atomically replace the value under `key` with fn(old). Returns the new value."""
        raise NotImplementedError

    @abstractmethod
    def append_bounded(self, key: str, item: Any, max_size: int) -> tuple[Any, ...]:
        """Append to the tuple under `key`, evicting the oldest entries beyond `max_size`."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, key: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def keys(self) -> Iterable[str]:
        raise NotImplementedError

    @abstractmethod
    def clear(self) -> None:
        raise NotImplementedError

    def __len__(self) -> int:
        return len(list(self.keys()))
