"""Implementation of KeyValueStore using SQLAlchemy"""

import logging
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from chessbot.core.exceptions import StaleRecordError, StoreUnavailableError
from chessbot.db.repository import VersionedValue
from chessbot.db.schema import KVEntry, utc_now

logger = logging.getLogger(__name__)


class SQLKeyValueStore:
    """Data stored using SQL / methods implemented using SQLAlchemy"""

    def __init__(self, db_session: Session) -> None:
        self.db = db_session

    def get(self, key: str) -> Optional[VersionedValue]:
        """Get the value stored under key, if any."""
        try:
            entry = self._fetch_entry(key)
        except SQLAlchemyError as e:
            logger.error("Could not read key %r", key, exc_info=True)
            raise StoreUnavailableError(f"Could not read key {key!r}.") from e

        if entry is None:
            return None
        return VersionedValue(value=entry.value, version=entry.version)

    def set(self, key: str, value: bytes, expected_version: Optional[int]) -> int:
        """Store value under key if its version still equals expected_version and return the new version."""
        try:
            if expected_version is None:
                return self._insert(key, value)
            return self._update(key, value, expected_version)
        except StaleRecordError:
            self.db.rollback()
            raise
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Could not write key %r", key, exc_info=True)
            raise StoreUnavailableError(f"Could not write key {key!r}.") from e

    def _insert(self, key: str, value: bytes) -> int:
        if self._fetch_entry(key) is not None:
            raise StaleRecordError(f"Key {key!r} already exists.")
        self.db.add(KVEntry(key=key, value=value, version=1))
        try:
            self.db.commit()
        except IntegrityError as e:
            raise StaleRecordError(f"Key {key!r} was created concurrently.") from e
        return 1

    def _update(self, key: str, value: bytes, expected_version: int) -> int:
        new_version = expected_version + 1
        query = (
            update(KVEntry)
            .where(KVEntry.key == key, KVEntry.version == expected_version)
            .values(value=value, version=new_version, updated_at=utc_now())
        )
        result = self.db.execute(query)
        if result.rowcount != 1:
            raise StaleRecordError(
                f"Key {key!r} is no longer at version {expected_version}."
            )
        self.db.commit()
        return new_version

    def _fetch_entry(self, key: str) -> Optional[KVEntry]:
        query = select(KVEntry).where(KVEntry.key == key)
        entry = self.db.scalar(query)
        if entry is not None:
            # pick up writes committed through other sessions
            self.db.refresh(entry)
        return entry
