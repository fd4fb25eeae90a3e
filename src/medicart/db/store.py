"""Key-value store contract and the in-memory implementation."""

from __future__ import annotations

from typing import Dict, Optional, Protocol, Tuple


class KeyValueStore(Protocol):
    """Synchronous string key-value storage shared by every surface."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...

    def revision(self, key: str) -> int:
        """Return a counter that changes whenever ``key`` is written or removed."""
        ...

    def close(self) -> None:
        """Release connections held by the store."""
        ...


class MemoryKeyValueStore:
    """Dict-backed store, scoped to a single process."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._entries: Dict[str, Tuple[Optional[str], int]] = {}
        for key, value in (initial or {}).items():
            self.set_item(key, value)

    def get_item(self, key: str) -> Optional[str]:
        return self._entries.get(key, (None, 0))[0]

    def set_item(self, key: str, value: str) -> None:
        self._entries[key] = (value, self.revision(key) + 1)

    def remove_item(self, key: str) -> None:
        if self.get_item(key) is not None:
            self._entries[key] = (None, self.revision(key) + 1)

    def revision(self, key: str) -> int:
        return self._entries.get(key, (None, 0))[1]

    def close(self) -> None:
        return None


__all__ = ["KeyValueStore", "MemoryKeyValueStore"]
