"""
Board Renderer: pure function from (position, highlighted squares, palette) to an SVG image.

The SVG produced by python-chess is post-processed for clients with strict SVG parsers:
an explicit viewBox is added to the root element and malformed color tokens (":RRGGBB") are fixed.
"""

import re
from dataclasses import dataclass
from typing import Mapping, Optional

import chess
import chess.svg

from chessbot.core.exceptions import InvalidColorError
from chessbot.core.shared_types import HighlightRole

SVG_CONTENT_TYPE = "image/svg+xml"
DEFAULT_SIZE = 400
ALERT_COLOR = "#ff0000"

_HEX_DIGITS = "0123456789abcdefABCDEF"
_ROOT_TAG = re.compile(r"<svg\b[^>]*>")
_NUMERIC_ATTRIBUTE = re.compile(r'([a-z]+)="([0-9]+)"')
_BARE_COLOR_TOKEN = re.compile(r":([0-9a-fA-F]{6})(?![0-9a-zA-Z])")


def parse_hex_color(value: str) -> str:
    """Parse '#RGB' or '#RRGGBB' into a normalized lowercase '#rrggbb'."""
    if not value or value[0] != "#":
        raise InvalidColorError(f"Color must start with '#': {value!r}")

    digits = value[1:]
    if any(c not in _HEX_DIGITS for c in digits):
        raise InvalidColorError(f"Color contains non-hexadecimal digits: {value!r}")
    if len(digits) == 3:
        digits = "".join(c * 2 for c in digits)
    elif len(digits) != 6:
        raise InvalidColorError(f"Color must be #RGB or #RRGGBB: {value!r}")
    return "#" + digits.lower()


@dataclass(frozen=True)
class Palette:
    light: str = "#ffffff"
    dark: str = "#145dbf"
    highlight: str = "#ffe577"

    def __post_init__(self) -> None:
        for name in ("light", "dark", "highlight"):
            object.__setattr__(self, name, parse_hex_color(getattr(self, name)))

    def to_svg_colors(self) -> dict[str, str]:
        return {
            "square light": self.light,
            "square dark": self.dark,
        }


DEFAULT_PALETTE = Palette()


def render_board_svg(
    fen: str,
    highlights: Optional[Mapping[HighlightRole, str]] = None,
    palette: Palette = DEFAULT_PALETTE,
    size: int = DEFAULT_SIZE,
) -> str:
    """Draw the position. Move origin/destination use the highlight color, check and capture squares are red."""
    board = chess.Board(fen)
    highlights = highlights or {}

    # later entries win: a capture on the destination square is drawn red
    fill: dict[chess.Square, str] = {}
    for role in (
        HighlightRole.MOVE_FROM,
        HighlightRole.MOVE_TO,
        HighlightRole.CAPTURE,
        HighlightRole.CHECK,
    ):
        square_name = highlights.get(role)
        if not square_name:
            continue
        color = (
            palette.highlight
            if role in (HighlightRole.MOVE_FROM, HighlightRole.MOVE_TO)
            else ALERT_COLOR
        )
        fill[chess.parse_square(square_name)] = color

    svg = chess.svg.board(
        board,
        fill=fill,
        size=size,
        colors=palette.to_svg_colors(),
    )
    return fix_color_tokens(add_viewbox(str(svg)))


def add_viewbox(svg: str) -> str:
    """Add viewBox="0 0 W H" to the root element, from its first two numeric attributes (width and height)."""
    root = _ROOT_TAG.search(svg)
    if root is None:
        return svg

    tag = root.group(0)
    if "viewBox=" in tag:
        return svg

    dimensions = _NUMERIC_ATTRIBUTE.findall(tag)
    if len(dimensions) < 2:
        return svg

    closing = "/>" if tag.endswith("/>") else ">"
    new_tag = (
        tag[: -len(closing)]
        + f' viewBox="0 0 {dimensions[0][1]} {dimensions[1][1]}"'
        + closing
    )
    return svg[: root.start()] + new_tag + svg[root.end() :]


def fix_color_tokens(svg: str) -> str:
    """Rewrite malformed color tokens such as 'fill:000000' into 'fill:#000000'."""
    return _BARE_COLOR_TOKEN.sub(r":#\1", svg)
