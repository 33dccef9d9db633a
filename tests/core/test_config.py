"""Unit tests for chessbot/core/config.py and chessbot/core/exceptions.py"""

import pytest

from chessbot.core.config import Settings
from chessbot.core.exceptions import (
    GENERIC_FAILURE_MESSAGE,
    IllegalMoveError,
    NotYourTurnError,
    RenderFailedError,
    StoreUnavailableError,
    is_user_error,
    user_message,
)
from chessbot.core.shared_types import Method, Outcome


def test_defaults_without_environment() -> None:
    assert Settings.from_env({}) == Settings()


def test_settings_from_environment() -> None:
    settings = Settings.from_env(
        {
            "CHESSBOT_DATABASE_URL": "sqlite:///:memory:",
            "CHESSBOT_SITE_URL": "https://chat.example.com/",
            "CHESSBOT_PLUGIN_ID": "com.example.chess",
            "CHESSBOT_BOARD_SIZE": "320",
            "UNRELATED": "ignored",
        }
    )
    assert settings == Settings(
        database_url="sqlite:///:memory:",
        site_url="https://chat.example.com",
        plugin_id="com.example.chess",
        board_size=320,
    )
    assert settings.move_url("dm") == "https://chat.example.com/plugins/com.example.chess/move/dm"
    assert settings.resign_url("dm") == "https://chat.example.com/plugins/com.example.chess/resign/dm"
    assert settings.image_url("dm") == "https://chat.example.com/plugins/com.example.chess/images/dm"


def test_invalid_board_size() -> None:
    with pytest.raises(ValueError):
        Settings.from_env({"CHESSBOT_BOARD_SIZE": "large"})


# --- Error messages ---
def test_validation_errors_are_shown_to_the_user() -> None:
    error = IllegalMoveError("illegal san: 'Ke2'")
    assert error.reason == "illegal san: 'Ke2'"
    assert is_user_error(error)
    assert user_message(error) == "Error: illegal san: 'Ke2'"
    assert user_message(NotYourTurnError("It is not your turn.")) == "Error: It is not your turn."


@pytest.mark.parametrize("error", [StoreUnavailableError("db down"), RenderFailedError("bad fen")])
def test_infrastructure_errors_get_a_generic_message(error: Exception) -> None:
    assert not is_user_error(error)
    assert user_message(error) == GENERIC_FAILURE_MESSAGE


@pytest.mark.parametrize(
    "outcome, decisive",
    [
        (Outcome.IN_PROGRESS, False),
        (Outcome.WHITE_WON, True),
        (Outcome.BLACK_WON, True),
        (Outcome.DRAW, False),
    ],
)
def test_decisive_outcomes(outcome: Outcome, decisive: bool) -> None:
    assert outcome.is_decisive == decisive


@pytest.mark.parametrize(
    "method, display_name",
    [
        (Method.CHECKMATE, "Checkmate"),
        (Method.DRAW_OFFER, "Draw offer"),
        (Method.FIFTY_MOVE_RULE, "Fifty move rule"),
        (Method.FIVEFOLD_REPETITION, "Fivefold Repetition"),
        (Method.INSUFFICIENT_MATERIAL, "Insufficient Material"),
        (Method.NO_METHOD, "No method"),
        (Method.RESIGNATION, "Resignation"),
        (Method.SEVENTY_FIVE_MOVE_RULE, "Seventy five move rule"),
        (Method.STALEMATE, "Stalemate"),
        (Method.THREEFOLD_REPETITION, "Threefold repetition"),
    ],
)
def test_method_display_names(method: Method, display_name: str) -> None:
    assert method.display_name == display_name
