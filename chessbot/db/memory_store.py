"""In-process implementation of KeyValueStore, for tests and single-process deployments."""

import threading
from typing import Optional

from chessbot.core.exceptions import StaleRecordError
from chessbot.db.repository import VersionedValue


class InMemoryKeyValueStore:
    """Dictionary of versioned values, compare-and-swap under a lock."""

    def __init__(self) -> None:
        self._entries: dict[str, VersionedValue] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[VersionedValue]:
        with self._lock:
            return self._entries.get(key)

    def set(self, key: str, value: bytes, expected_version: Optional[int]) -> int:
        with self._lock:
            current = self._entries.get(key)
            current_version = current.version if current else None
            if current_version != expected_version:
                raise StaleRecordError(
                    f"Key {key!r} is at version {current_version}, expected {expected_version}."
                )
            new_version = (current_version or 0) + 1
            self._entries[key] = VersionedValue(value=value, version=new_version)
            return new_version
