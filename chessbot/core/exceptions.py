"""
Custom exceptions raised by the chess bot core.

Validation errors (turn order, participation, illegal notation, ...) carry a message that can be shown to the user as is.
Infrastructure errors (store, rendering) should be reported to the user with a generic message and logged for operators.
"""

GENERIC_FAILURE_MESSAGE = (
    "An unknown error occurred. Please talk to your system administrator for help."
)


class GameError(Exception):
    """Top-level exception for anything raised by the chess bot."""


# --- Validation errors ---
class InvalidRequestError(GameError):
    """Request could not be interpreted (self challenge, empty movement, ...)."""


class GameAlreadyActiveError(GameError):
    """A game is still in progress in this conversation."""


class NoSuchGameError(GameError):
    """No game record was found for the given ID."""


class NotYourTurnError(GameError):
    """The player tried to move while it is the opponent's turn."""


class NotAParticipantError(GameError):
    """The player is neither the white nor the black player of the game."""


class GameOverError(GameError):
    """The game has already been decided."""


class IllegalMoveError(GameError):
    """The rules engine rejected the move. The reason is kept verbatim for display."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class InvalidColorError(GameError):
    """Color could not be parsed as #RGB or #RRGGBB."""


# --- Infrastructure errors ---
class InfrastructureError(GameError):
    """Failures of collaborators. Never retried inside the core."""


class StoreUnavailableError(InfrastructureError):
    """The key-value store could not be reached."""


class StaleRecordError(InfrastructureError):
    """The record changed since it was read. Safe to retry the whole operation."""


class CorruptRecordError(InfrastructureError):
    """Stored bytes could not be decoded into a game record."""


class RenderFailedError(InfrastructureError):
    """The board image could not be rendered."""


def is_user_error(exc: GameError) -> bool:
    """True if the message of the exception is meant for the user."""
    return not isinstance(exc, InfrastructureError)


def user_message(exc: GameError) -> str:
    """Message to show to the user for any error raised by the core."""
    if is_user_error(exc):
        return f"Error: {exc}"
    return GENERIC_FAILURE_MESSAGE
