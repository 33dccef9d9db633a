"""
Game Store: maps a conversation ID to its serialized GameRecord in the key-value store.

Serialized form is a JSON document with an explicit header (identity metadata) next to the moves serialized by the rules layer:
{"header": {"conversation_id": ..., "white_player_id": ..., ...}, "moves": "1. e4 e5 *"}
"""

import logging
from dataclasses import replace
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from chessbot.core.exceptions import CorruptRecordError, StaleRecordError
from chessbot.core.models import GameRecord, Termination
from chessbot.core.shared_types import Method, Outcome
from chessbot.db.repository import KeyValueStore

logger = logging.getLogger(__name__)


class StoredTermination(BaseModel):
    model_config = ConfigDict(extra="forbid")

    outcome: Outcome
    method: Method


class RecordHeader(BaseModel):
    model_config = ConfigDict(extra="forbid")

    conversation_id: str
    white_player_id: str
    black_player_id: str
    announcement_id: Optional[str] = None
    termination: Optional[StoredTermination] = None


class StoredGame(BaseModel):
    model_config = ConfigDict(extra="forbid")

    header: RecordHeader
    moves: str


def encode_record(record: GameRecord) -> bytes:
    termination = (
        StoredTermination(
            outcome=record.termination.outcome, method=record.termination.method
        )
        if record.termination
        else None
    )
    stored = StoredGame(
        header=RecordHeader(
            conversation_id=record.conversation_id,
            white_player_id=record.white_player_id,
            black_player_id=record.black_player_id,
            announcement_id=record.announcement_id,
            termination=termination,
        ),
        moves=record.moves,
    )
    return stored.model_dump_json().encode("utf-8")


def decode_record(raw: bytes, version: Optional[int] = None) -> GameRecord:
    try:
        stored = StoredGame.model_validate_json(raw)
    except ValidationError as e:
        raise CorruptRecordError(f"Cannot decode game record: {e}") from e

    header = stored.header
    return GameRecord(
        conversation_id=header.conversation_id,
        white_player_id=header.white_player_id,
        black_player_id=header.black_player_id,
        moves=stored.moves,
        announcement_id=header.announcement_id,
        termination=(
            Termination(
                outcome=header.termination.outcome, method=header.termination.method
            )
            if header.termination
            else None
        ),
        version=version,
    )


class GameStore:
    """Single source of truth for game state. No caching: every call goes to the key-value store."""

    def __init__(self, kv_store: KeyValueStore) -> None:
        self.kv = kv_store

    def load(self, key: str) -> Optional[GameRecord]:
        """Get the record stored under key (conversation ID), if any."""
        stored = self.kv.get(key)
        if stored is None:
            return None
        return decode_record(stored.value, version=stored.version)

    def current_version(self, key: str) -> Optional[int]:
        """Version of the entry under key without decoding it. None if absent."""
        stored = self.kv.get(key)
        return stored.version if stored else None

    def save(self, record: GameRecord) -> GameRecord:
        """Write the record back, provided nobody else wrote it since it was loaded.

        Returns the record with its new version.
        """
        try:
            new_version = self.kv.set(
                record.conversation_id, encode_record(record), record.version
            )
        except StaleRecordError:
            logger.warning(
                "Stale write rejected for game %s at version %s",
                record.conversation_id,
                record.version,
            )
            raise
        return replace(record, version=new_version)
