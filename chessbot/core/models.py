"""
Boundary layer data model(s).

The GameRecord is the only persisted entity. The Game Manager reads it from the Game Store, hands it to the rules layer and writes it back.
(Decouples identity metadata of a game from the serialization format used by the rules engine for the moves.)
"""

from dataclasses import dataclass
from typing import Optional

from chessbot.core.shared_types import Method, Outcome

# Type aliases to make GameRecord easier to read
ConversationID = str
UserID = str


@dataclass(frozen=True)
class Termination:
    """A result that cannot be derived from the moves alone (resignation, claimed draw)."""

    outcome: Outcome
    method: Method


@dataclass
class GameRecord:
    """Persisted state of one chess game, keyed by the conversation it is played in."""

    conversation_id: ConversationID
    white_player_id: UserID
    black_player_id: UserID
    moves: str  # serialized by the rules layer (PGN movetext)
    announcement_id: Optional[str] = None
    termination: Optional[Termination] = None
    # version of the stored entry this record was read at. None if never stored.
    version: Optional[int] = None
