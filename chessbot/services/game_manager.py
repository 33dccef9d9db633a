"""Orchestration of communication from request handlers to the rules layer, the Game Store and the chat collaborators."""

import logging
import random
from dataclasses import replace
from typing import Optional

from chessbot.api.models import (
    AnnouncementContent,
    BoardRenderSpec,
    ChallengeRequest,
    MovementSubmission,
    PostAction,
)
from chessbot.core.config import Settings
from chessbot.core.exceptions import (
    CorruptRecordError,
    GameAlreadyActiveError,
    NoSuchGameError,
    RenderFailedError,
)
from chessbot.core.models import GameRecord
from chessbot.core.shared_types import Outcome
from chessbot.db.game_store import GameStore
from chessbot.render.board import DEFAULT_PALETTE, Palette, render_board_svg
from chessbot.rules.game import Game
from chessbot.services.ports import (
    WINNER_ACHIEVEMENT,
    AchievementGranter,
    ChatPlatform,
)

logger = logging.getLogger(__name__)


class GameManager:
    """Sole mutator of game records.

    Every operation re-reads the record from the store and writes it back with a compare-and-swap on its version.
    A concurrent write in between surfaces as StaleRecordError, which callers may retry.
    """

    def __init__(
        self,
        store: GameStore,
        chat: ChatPlatform,
        achievements: AchievementGranter,
        settings: Optional[Settings] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.store = store
        self.chat = chat
        self.achievements = achievements
        self.settings = settings or Settings()
        self._rng = rng or random.SystemRandom()

    # -- Game lifecycle ---
    def create_game(self, player_a: str, player_b: str) -> GameRecord:
        """player_a challenged player_b: start a game in their direct conversation."""
        request = ChallengeRequest(challenger_id=player_a, opponent_id=player_b)
        conversation_id = self.chat.get_direct_conversation(
            request.challenger_id, request.opponent_id
        )

        previous_version = self._superseded_version(conversation_id)

        white, black = self._assign_colors(request.challenger_id, request.opponent_id)
        game = Game.new_game(white_player=white, black_player=black)
        record = self.store.save(
            GameRecord(
                conversation_id=conversation_id,
                white_player_id=white,
                black_player_id=black,
                moves=game.serialize_moves(),
                version=previous_version,
            )
        )

        # Announce, then remember the announcement so later updates happen in place
        announcement_id = self.chat.create_post(self._build_post(record, game))
        record = self.store.save(replace(record, announcement_id=announcement_id))

        logger.info(
            "Game %s created: white=%s black=%s", conversation_id, white, black
        )
        return record

    def move(self, game_id: str, player_id: str, movement: str) -> GameRecord:
        """Make a move attempt, movement in Standard Algebraic Notation."""
        # Retrieve persisted record and rebuild the Game
        record = self._fetch_record(game_id)
        game = Game.from_record(record)
        outcome_before = game.outcome

        submission = MovementSubmission(movement=movement)

        # Attempt the move
        game.make_move(submission.movement, player_id)
        logger.debug("Game %s: %s played %s", game_id, player_id, submission.movement)

        # store the new move list
        record = self.store.save(replace(record, moves=game.serialize_moves()))

        self._on_result(game_id, outcome_before, game)
        return record

    def resign(self, game_id: str, player_id: str) -> GameRecord:
        record = self._fetch_record(game_id)
        game = Game.from_record(record)
        outcome_before = game.outcome

        game.resign(player_id)
        record = self.store.save(replace(record, termination=game.termination))

        self._on_result(game_id, outcome_before, game)
        return record

    def claim_draw(self, game_id: str, player_id: str) -> GameRecord:
        """Player to move claims a draw by threefold repetition or the fifty move rule."""
        record = self._fetch_record(game_id)
        game = Game.from_record(record)
        outcome_before = game.outcome

        game.claim_draw(player_id)
        record = self.store.save(replace(record, termination=game.termination))

        self._on_result(game_id, outcome_before, game)
        return record

    # -- Read-only queries ---
    def can_move(self, game_id: str, player_id: str) -> bool:
        record = self.store.load(game_id)
        if record is None:
            return False
        game = Game.from_record(record)
        return game.is_in_progress and game.turn_player == player_id

    def is_participant(self, game_id: str, player_id: str) -> bool:
        record = self.store.load(game_id)
        if record is None:
            return False
        return Game.from_record(record).is_participant(player_id)

    def render_parameters(self, game_id: str) -> BoardRenderSpec:
        """Current position and the squares touched by the last move."""
        game = Game.from_record(self._fetch_record(game_id))
        return self._render_parameters(game)

    def game_post(self, game_id: str) -> AnnouncementContent:
        record = self._fetch_record(game_id)
        return self._build_post(record, Game.from_record(record))

    def render_board(
        self, game_id: str, palette: Optional[Palette] = None
    ) -> bytes:
        """SVG image of the current position of the game."""
        spec = self.render_parameters(game_id)
        try:
            svg = render_board_svg(
                spec.fen,
                highlights=spec.highlights(),
                palette=palette or DEFAULT_PALETTE,
                size=self.settings.board_size,
            )
        except ValueError as e:
            logger.error("Could not render board of game %s", game_id, exc_info=True)
            raise RenderFailedError(f"Could not render game {game_id}.") from e
        return svg.encode("utf-8")

    def refresh_announcement(self, game_id: str) -> AnnouncementContent:
        """Push the current state of the game to its announcement."""
        record = self._fetch_record(game_id)
        content = self._build_post(record, Game.from_record(record))
        if content.announcement_id is None:
            announcement_id = self.chat.create_post(content)
            self.store.save(replace(record, announcement_id=announcement_id))
            return content.model_copy(update={"announcement_id": announcement_id})

        self.chat.update_post(content)
        return content

    # -- Internal helpers --
    def _fetch_record(self, game_id: str) -> GameRecord:
        """Attempt to find the game in the store and raise error if it fails."""
        record = self.store.load(game_id)
        if record is None:
            raise NoSuchGameError("No game started.")
        return record

    def _superseded_version(self, conversation_id: str) -> Optional[int]:
        """Version of the record a new game overwrites.

        A finished game gets superseded, an active one blocks the challenge.
        An unreadable record gets superseded too.
        """
        try:
            previous = self.store.load(conversation_id)
            if previous is None:
                return None
            if Game.from_record(previous).is_in_progress:
                raise GameAlreadyActiveError("There is still an active game.")
            return previous.version
        except CorruptRecordError:
            logger.error(
                "Superseding unreadable record of game %s", conversation_id, exc_info=True
            )
            return self.store.current_version(conversation_id)

    def _assign_colors(self, player_a: str, player_b: str) -> tuple[str, str]:
        """Unbiased coin flip: (white, black)."""
        if self._rng.randrange(2) == 0:
            return player_a, player_b
        return player_b, player_a

    def _on_result(self, game_id: str, outcome_before: Outcome, game: Game) -> None:
        """Grant the winner achievement once, when the game turns decisive."""
        if outcome_before != Outcome.IN_PROGRESS or game.is_in_progress:
            return

        logger.info(
            "Game %s finished: %s by %s", game_id, game.outcome, game.method
        )
        if not game.outcome.is_decisive:
            return

        winner = game.winner
        try:
            self.achievements.grant(WINNER_ACHIEVEMENT, winner)
        except Exception:
            logger.warning(
                "Could not grant %r to %s", WINNER_ACHIEVEMENT, winner, exc_info=True
            )

    def _render_parameters(self, game: Game) -> BoardRenderSpec:
        last_move = game.last_move()
        if last_move is None:
            return BoardRenderSpec(fen=game.fen)

        return BoardRenderSpec(
            fen=game.fen,
            from_square=last_move.from_square,
            to_square=last_move.to_square,
            check=game.check_square() if last_move.is_check else None,
            capture=last_move.capture_square,
        )

    def _build_post(self, record: GameRecord, game: Game) -> AnnouncementContent:
        game_id = record.conversation_id
        white_name = self.chat.get_username(record.white_player_id)
        black_name = self.chat.get_username(record.black_player_id)

        lines = [f"White: {white_name}", f"Black: {black_name}"]
        last_move = game.last_move()
        if last_move is not None and last_move.promoted_to is not None:
            lines.append(f"Pawn promoted to {last_move.promoted_to.label}")
        if last_move is not None and last_move.is_check:
            lines.append("CHECK!")
        lines.append(f"Turn: {game.turn.label}")

        actions: list[PostAction] = []
        footer = None
        outcome = game.outcome
        if outcome == Outcome.IN_PROGRESS:
            actions = [
                PostAction(name="Move", url=self.settings.move_url(game_id)),
                PostAction(name="Resign", url=self.settings.resign_url(game_id)),
            ]
        elif outcome == Outcome.DRAW:
            footer = f"Draw due to {game.method.display_name}!"
        else:
            footer = f"{outcome.winner.label} won by {game.method.display_name}!"

        return AnnouncementContent(
            announcement_id=record.announcement_id,
            conversation_id=game_id,
            # move count busts client-side image caches after every move
            image_url=f"{self.settings.image_url(game_id)}?v={game.move_count}",
            text="\n".join(lines),
            footer=footer,
            actions=actions,
        )
