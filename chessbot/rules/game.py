"""
The Game class is the entrypoint into the rules layer for the service layer.
It wraps a python-chess board with the two registered players, applies moves in Standard Algebraic Notation and derives
turn, outcome and the information about the last move needed to annotate / render the board.
"""

import io
from dataclasses import dataclass, field
from typing import Optional, Self

import chess
import chess.pgn

from chessbot.core.exceptions import (
    CorruptRecordError,
    GameOverError,
    IllegalMoveError,
    NotAParticipantError,
    NotYourTurnError,
)
from chessbot.core.models import GameRecord, Termination
from chessbot.core.shared_types import Color, Method, Outcome, PieceType

TERMINATION_TO_METHOD: dict[chess.Termination, Method] = {
    chess.Termination.CHECKMATE: Method.CHECKMATE,
    chess.Termination.STALEMATE: Method.STALEMATE,
    chess.Termination.INSUFFICIENT_MATERIAL: Method.INSUFFICIENT_MATERIAL,
    chess.Termination.SEVENTYFIVE_MOVES: Method.SEVENTY_FIVE_MOVE_RULE,
    chess.Termination.FIVEFOLD_REPETITION: Method.FIVEFOLD_REPETITION,
    chess.Termination.FIFTY_MOVES: Method.FIFTY_MOVE_RULE,
    chess.Termination.THREEFOLD_REPETITION: Method.THREEFOLD_REPETITION,
}


def parse_moves(movetext: str) -> chess.Board:
    """Replay serialized PGN movetext onto a board from the standard starting position."""
    pgn_game = chess.pgn.read_game(io.StringIO(movetext))
    if pgn_game is None:
        raise CorruptRecordError(f"No game found in movetext: {movetext!r}")
    if pgn_game.errors:
        raise CorruptRecordError(
            f"Cannot replay movetext {movetext!r}: {pgn_game.errors[0]}"
        )
    return pgn_game.end().board()


def serialize_moves(board: chess.Board) -> str:
    """Encode the move stack of the board as PGN movetext (no headers)."""
    pgn_game = chess.pgn.Game.from_board(board)
    exporter = chess.pgn.StringExporter(headers=False, variations=False, comments=False)
    return pgn_game.accept(exporter)


@dataclass(frozen=True)
class LastMove:
    """Snapshot of the tags of the most recently played move."""

    from_square: str
    to_square: str
    is_check: bool
    is_capture: bool
    is_en_passant: bool
    promoted_to: Optional[PieceType]

    @property
    def capture_square(self) -> Optional[str]:
        """Square the captured piece stood on.

        For en passant the captured pawn is not on the destination square, but next to the origin square:
        destination file combined with origin rank.
        """
        if not self.is_capture:
            return None
        if self.is_en_passant:
            return self.to_square[0] + self.from_square[1]
        return self.to_square


@dataclass
class Game:
    # --- RULES LAYER API CALLED BY SERVICE ---

    board: chess.Board
    players: dict[Color, str]
    termination: Optional[Termination] = field(default=None)

    @classmethod
    def new_game(cls, white_player: str, black_player: str) -> Self:
        """Empty move history from the standard starting position."""
        return cls(
            board=chess.Board(),
            players={Color.WHITE: white_player, Color.BLACK: black_player},
        )

    @classmethod
    def from_record(cls, record: GameRecord) -> Self:
        """Define how to construct a Game from the information the Service layer actually has"""
        return cls(
            board=parse_moves(record.moves),
            players={
                Color.WHITE: record.white_player_id,
                Color.BLACK: record.black_player_id,
            },
            termination=record.termination,
        )

    def serialize_moves(self) -> str:
        return serialize_moves(self.board)

    # --- DERIVED STATE ---
    @property
    def move_count(self) -> int:
        return len(self.board.move_stack)

    @property
    def moves_san(self) -> list[str]:
        """Move history in Standard Algebraic Notation."""
        replay = chess.Board()
        return [replay.san_and_push(move) for move in self.board.move_stack]

    @property
    def turn(self) -> Color:
        """Even number of moves played: white to move. Odd: black to move."""
        return Color.WHITE if self.move_count % 2 == 0 else Color.BLACK

    @property
    def turn_player(self) -> str:
        return self.players[self.turn]

    @property
    def fen(self) -> str:
        return self.board.fen()

    @property
    def outcome(self) -> Outcome:
        return self._result()[0]

    @property
    def method(self) -> Method:
        return self._result()[1]

    @property
    def is_in_progress(self) -> bool:
        return self.outcome == Outcome.IN_PROGRESS

    @property
    def winner(self) -> Optional[str]:
        """ID of the player who won, None while in progress or after a draw."""
        color = self.outcome.winner
        return self.players[color] if color else None

    def player_color(self, player: str) -> Optional[Color]:
        return next(
            (color for color, player_id in self.players.items() if player_id == player),
            None,
        )

    def is_participant(self, player: str) -> bool:
        return self.player_color(player) is not None

    def last_move(self) -> Optional[LastMove]:
        if not self.board.move_stack:
            return None

        move = self.board.peek()
        before = self.board.copy(stack=True)
        before.pop()
        return LastMove(
            from_square=chess.square_name(move.from_square),
            to_square=chess.square_name(move.to_square),
            is_check=self.board.is_check(),
            is_capture=before.is_capture(move),
            is_en_passant=before.is_en_passant(move),
            promoted_to=(
                PieceType(chess.piece_name(move.promotion)) if move.promotion else None
            ),
        )

    def check_square(self) -> Optional[str]:
        """Square of the king put in check by the last move (the side to move)."""
        if not self.board.is_check():
            return None
        king = self.board.king(self.board.turn)
        return chess.square_name(king) if king is not None else None

    # --- MUTATIONS ---
    def make_move(self, move_san: str, player: str) -> None:
        """
        Attempt to make a move
        -----

        1. make sure the game is still in progress
        2. make sure it is the player's turn
        3. let python-chess parse and validate the SAN, then push it on the move stack
        """
        self._assert_in_progress()
        self._assert_your_turn(player)

        try:
            self.board.push_san(move_san)
        except ValueError as e:
            # InvalidMoveError, IllegalMoveError and AmbiguousMoveError all derive from ValueError
            raise IllegalMoveError(str(e)) from e

    def resign(self, player: str) -> None:
        """The player gives up: the opponent wins by resignation."""
        color = self._assert_participant(player)
        self._assert_in_progress()
        self.termination = Termination(
            outcome=Outcome.won_by(color.other), method=Method.RESIGNATION
        )

    def claim_draw(self, player: str) -> None:
        """The player to move claims a draw by threefold repetition or the fifty move rule."""
        self._assert_in_progress()
        self._assert_your_turn(player)

        if self.board.can_claim_threefold_repetition():
            method = Method.THREEFOLD_REPETITION
        elif self.board.can_claim_fifty_moves():
            method = Method.FIFTY_MOVE_RULE
        else:
            raise IllegalMoveError("No draw can be claimed in this position.")
        self.termination = Termination(outcome=Outcome.DRAW, method=method)

    # -- PRIVATE HELPERS ---
    def _result(self) -> tuple[Outcome, Method]:
        if self.termination is not None:
            return self.termination.outcome, self.termination.method

        # claimable draws (threefold, fifty moves) only end the game through claim_draw
        outcome = self.board.outcome(claim_draw=False)
        if outcome is None:
            return Outcome.IN_PROGRESS, Method.NO_METHOD

        method = TERMINATION_TO_METHOD.get(outcome.termination, Method.NO_METHOD)
        if outcome.winner is None:
            return Outcome.DRAW, method
        return Outcome.won_by(Color.WHITE if outcome.winner else Color.BLACK), method

    def _assert_in_progress(self) -> None:
        if not self.is_in_progress:
            raise GameOverError(f"The game is over. Outcome: {self.outcome}")

    def _assert_your_turn(self, player: str) -> None:
        """You must wait for your turn before making a move."""
        if player != self.turn_player:
            raise NotYourTurnError("It is not your turn.")

    def _assert_participant(self, player: str) -> Color:
        color = self.player_color(player)
        if color is None:
            raise NotAParticipantError("You are not playing this game.")
        return color
