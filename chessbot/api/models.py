"""Requests and Response models exchanged with the request handlers"""

import logging
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from chessbot.core.exceptions import InvalidColorError, InvalidRequestError
from chessbot.core.shared_types import HighlightRole
from chessbot.render.board import DEFAULT_PALETTE, Palette, parse_hex_color

logger = logging.getLogger(__name__)


def _is_square_name(value: str) -> bool:
    return len(value) == 2 and value[0] in "abcdefgh" and value[1] in "12345678"


# --- REQUEST MODELS ---
class ChallengeRequest(BaseModel):
    challenger_id: str
    opponent_id: str

    @field_validator("opponent_id")
    @classmethod
    def validate_opponent(cls, value: str, info: ValidationInfo) -> str:
        if value == info.data.get("challenger_id"):
            raise InvalidRequestError("You cannot challenge yourself.")
        return value


class MovementSubmission(BaseModel):
    """Content of the 'Make your move' dialog: a move in Standard Algebraic Notation (e.g. f3, Qh4)."""

    movement: str

    @field_validator("movement")
    @classmethod
    def validate_movement(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise InvalidRequestError("Write your movement in Algebraic Notation.")
        return value


class ThemePreference(BaseModel):
    """Chat client theme of the requesting user. Only the colors used for the board are read."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    center_channel_bg: Optional[str] = Field(None, alias="centerChannelBg")
    sidebar_bg: Optional[str] = Field(None, alias="sidebarBg")
    mention_highlight_bg: Optional[str] = Field(None, alias="mentionHighlightBg")

    def to_palette(self) -> Palette:
        """Light squares from the channel background, dark squares from the sidebar, highlights from mentions."""
        return Palette(
            light=self._color_or_default(self.center_channel_bg, DEFAULT_PALETTE.light),
            dark=self._color_or_default(self.sidebar_bg, DEFAULT_PALETTE.dark),
            highlight=self._color_or_default(
                self.mention_highlight_bg, DEFAULT_PALETTE.highlight
            ),
        )

    @staticmethod
    def _color_or_default(value: Optional[str], default: str) -> str:
        if value is None:
            return default
        try:
            return parse_hex_color(value)
        except InvalidColorError:
            logger.debug("Ignoring theme color %r", value)
            return default


# --- RESPONSE MODELS ---
class BoardRenderSpec(BaseModel):
    """Position plus the squares to highlight when drawing it."""

    fen: str
    from_square: Optional[str] = None
    to_square: Optional[str] = None
    check: Optional[str] = None
    capture: Optional[str] = None

    @field_validator("from_square", "to_square", "check", "capture")
    @classmethod
    def validate_square(cls, value: Optional[str]) -> Optional[str]:
        if value is not None and not _is_square_name(value):
            raise InvalidRequestError(
                f"Cannot interpret {value!r} as a valid square name."
            )
        return value

    def highlights(self) -> dict[HighlightRole, str]:
        squares = {
            HighlightRole.MOVE_FROM: self.from_square,
            HighlightRole.MOVE_TO: self.to_square,
            HighlightRole.CHECK: self.check,
            HighlightRole.CAPTURE: self.capture,
        }
        return {role: square for role, square in squares.items() if square}


class PostAction(BaseModel):
    name: str
    url: str


class AnnouncementContent(BaseModel):
    """Renderable summary of a game, posted in the conversation and updated in place."""

    announcement_id: Optional[str]
    conversation_id: str
    title: str = "Chess game"
    image_url: str
    text: str
    footer: Optional[str] = None
    actions: list[PostAction] = Field(default_factory=list)
