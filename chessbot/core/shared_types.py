"""
Type definitions used across layers
"""

from enum import StrEnum


class Color(StrEnum):
    WHITE = "white"
    BLACK = "black"

    @property
    def other(self) -> "Color":
        return Color.BLACK if self == Color.WHITE else Color.WHITE

    @property
    def label(self) -> str:
        return self.value.capitalize()


class Outcome(StrEnum):
    IN_PROGRESS = "in progress"
    WHITE_WON = "white won"
    BLACK_WON = "black won"
    DRAW = "draw"

    @property
    def winner(self) -> Color | None:
        if self == Outcome.WHITE_WON:
            return Color.WHITE
        if self == Outcome.BLACK_WON:
            return Color.BLACK
        return None

    @property
    def is_decisive(self) -> bool:
        return self.winner is not None

    @classmethod
    def won_by(cls, color: Color) -> "Outcome":
        return cls.WHITE_WON if color == Color.WHITE else cls.BLACK_WON


class Method(StrEnum):
    """How a game reached its outcome."""

    NO_METHOD = "no method"
    CHECKMATE = "checkmate"
    RESIGNATION = "resignation"
    DRAW_OFFER = "draw offer"
    STALEMATE = "stalemate"
    THREEFOLD_REPETITION = "threefold repetition"
    FIVEFOLD_REPETITION = "fivefold repetition"
    FIFTY_MOVE_RULE = "fifty move rule"
    SEVENTY_FIVE_MOVE_RULE = "seventy five move rule"
    INSUFFICIENT_MATERIAL = "insufficient material"

    @property
    def display_name(self) -> str:
        return METHOD_DISPLAY_NAMES.get(self, "Unknown method")


# Shown in the announcement footer, e.g. "White won by Checkmate!"
METHOD_DISPLAY_NAMES: dict[Method, str] = {
    Method.CHECKMATE: "Checkmate",
    Method.DRAW_OFFER: "Draw offer",
    Method.FIFTY_MOVE_RULE: "Fifty move rule",
    Method.FIVEFOLD_REPETITION: "Fivefold Repetition",
    Method.INSUFFICIENT_MATERIAL: "Insufficient Material",
    Method.NO_METHOD: "No method",
    Method.RESIGNATION: "Resignation",
    Method.SEVENTY_FIVE_MOVE_RULE: "Seventy five move rule",
    Method.STALEMATE: "Stalemate",
    Method.THREEFOLD_REPETITION: "Threefold repetition",
}


class HighlightRole(StrEnum):
    """Semantic role of a highlighted square on the rendered board."""

    MOVE_FROM = "from"
    MOVE_TO = "to"
    CHECK = "check"
    CAPTURE = "capture"


class PieceType(StrEnum):
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"
    KING = "king"

    @property
    def label(self) -> str:
        return self.value.capitalize()
