"""Protocol for the key-value capability the Game Store persists into (SQLAlchemy / in-memory implementations)."""

from dataclasses import dataclass
from typing import Optional, Protocol


@dataclass(frozen=True)
class VersionedValue:
    value: bytes
    version: int


class KeyValueStore(Protocol):
    """Persistence layer orchestration.

    Every entry carries a version that increases by one on each write. Writes are compare-and-swap on that version,
    so two concurrent read-modify-write cycles cannot silently overwrite each other.
    """

    def get(self, key: str) -> Optional[VersionedValue]:
        """Get the value stored under key, if any."""
        ...

    def set(self, key: str, value: bytes, expected_version: Optional[int]) -> int:
        """Store value under key and return the new version.

        expected_version None means the key must not exist yet. Raises StaleRecordError if the stored version differs.
        """
        ...
