"""
The Game class is the entrypoint into the domain layer for the service layer.
It holds the whole state of one room (position, pending moves, clocks, result) and orchestrates the business logic
of a round: validate each submission on its own, wait until both moves are complete, resolve them together,
and evaluate whether the game is over.
"""

import time
from dataclasses import dataclass, field
from typing import Optional, Self

from syncchess.chess.board import Board
from syncchess.chess.castling import CastlingRights
from syncchess.chess.legal_moves import generate_legal_moves, leaves_king_in_check
from syncchess.chess.moves import (
    PROMOTION_OPTIONS,
    Move,
    MoveContext,
    is_in_check,
    is_legal_move,
    is_pawn_push_to_promotion_square,
)
from syncchess.chess.outcome import Verdict, evaluate_outcome
from syncchess.chess.repeat_rule import is_repeat_allowed
from syncchess.chess.resolution import RoundResolution, resolve_round
from syncchess.chess.rounds import Clock, RoundState, SubmissionStatus
from syncchess.chess.square import Square
from syncchess.core.exceptions import (
    GameStateError,
    MoveRejectedError,
    NotInRoomError,
    PromotionRejectedError,
    RoomFullError,
)
from syncchess.core.models import GameSnapshot, PieceSnapshot, TimerSnapshot
from syncchess.core.shared_types import (
    Color,
    GameEndReason,
    GameResult,
    PieceType,
    RejectionReason,
    winner_result,
)


def _per_color(value) -> dict:
    return {color: value for color in Color}


@dataclass
class RoundRecord:
    """What happened in a resolved round. Minimal history, no notation."""

    number: int
    moves: dict[Color, Move]
    moved_identities: dict[Color, str]
    collision_square: Optional[Square]
    captured: dict[Color, list[str]]
    swerved: dict[Color, bool]

    @classmethod
    def from_resolution(cls, number: int, moves: dict[Color, Move], resolution: RoundResolution) -> Self:
        return cls(
            number=number,
            moves=dict(moves),
            moved_identities=resolution.moved_identities,
            collision_square=resolution.collision_square,
            captured=resolution.captured,
            swerved=resolution.swerved,
        )


@dataclass
class Game:
    board: Board
    castling_rights: CastlingRights
    clock: Clock
    rounds: RoundState = field(default_factory=RoundState)
    # target created by each color's double pawn advance in the previous round
    en_passant_targets: dict[Color, Optional[Square]] = field(default_factory=lambda: _per_color(None))
    pending_moves: dict[Color, Optional[Move]] = field(default_factory=lambda: _per_color(None))
    last_moved: dict[Color, Optional[str]] = field(default_factory=lambda: _per_color(None))
    last_moves: dict[Color, Optional[Move]] = field(default_factory=lambda: _per_color(None))
    in_check: dict[Color, bool] = field(default_factory=lambda: _per_color(False))
    history: list[RoundRecord] = field(default_factory=list)
    players: dict[Color, Optional[str]] = field(default_factory=lambda: _per_color(None))
    started: bool = False
    result: Optional[GameResult] = None
    end_reason: Optional[GameEndReason] = None

    @classmethod
    def new_game(
        cls,
        time_control: int = 300,
        starting_fen: Optional[str] = None,
        castling_fen: str = "KQkq",
    ) -> Self:
        """Standard starting position unless a board placement (first part of a FEN string) is given."""
        board = Board.from_fen(starting_fen) if starting_fen else Board.starting_position()
        game = cls(
            board=board,
            castling_rights=CastlingRights.from_fen(castling_fen),
            clock=Clock(time_control),
        )
        game.in_check = {color: is_in_check(board, color) for color in Color}
        return game

    # --- PLAYERS ---
    def seat_player(self, player_id: str, preference: Optional[Color] = None, now: Optional[float] = None) -> Color:
        """
        Give the player a color: the preferred one if it is free, otherwise whatever is left.
        Once both seats are taken for the first time, the clocks start.
        """
        seated_as = self.color_of_or_none(player_id)
        if seated_as is not None:
            return seated_as

        free_colors = [color for color in Color if self.players[color] is None]
        if not free_colors:
            raise RoomFullError("Room is full: both colors are taken.")

        color = preference if preference in free_colors else free_colors[0]
        self.players[color] = player_id

        if self.both_seated and not self.clock.running and self.result is None:
            now = self._now(now)
            self.clock.start(now)
            self._refresh_clock(now)
        return color

    def unseat_player(self, player_id: str) -> Color:
        """Disconnect: the seat is freed, the game itself carries on."""
        color = self.color_of(player_id)
        self.players[color] = None
        return color

    def color_of(self, player_id: str) -> Color:
        color = self.color_of_or_none(player_id)
        if color is None:
            raise NotInRoomError(f"Player {player_id!r} is not part of this game.")
        return color

    def color_of_or_none(self, player_id: str) -> Optional[Color]:
        return next((color for color, name in self.players.items() if name == player_id), None)

    @property
    def both_seated(self) -> bool:
        return all(self.players[color] is not None for color in Color)

    @property
    def is_abandoned(self) -> bool:
        return all(self.players[color] is None for color in Color)

    @property
    def is_over(self) -> bool:
        return self.result is not None

    # --- SETTINGS ---
    def update_time_control(self, seconds: int, now: Optional[float] = None) -> None:
        if self.started:
            raise GameStateError("Cannot change settings after the first move was submitted.")
        if seconds < 0:
            raise GameStateError(f"Time control must be a non-negative number of seconds, got {seconds}.")
        self.clock.set_time_control(seconds)
        self.clock.last_update = self._now(now)

    # --- ROUND ---
    def context_for(self, color: Color) -> MoveContext:
        """The en passant target a color may use is the one its opponent created last round."""
        return MoveContext(
            castling_rights=self.castling_rights,
            en_passant_target=self.en_passant_targets[color.opponent],
        )

    def legal_moves(self, color: Color) -> list[Move]:
        """
        Moves this color can submit for the current round without leaving its king attacked.
        ----
        These can be used to display to the user. The piece moved last round is left out, unless the repeat-move
        rule lets it move again. Promotions are listed once, without a piece type.
        """
        if self.is_over or self.rounds.submissions[color] != SubmissionStatus.NONE:
            return []

        context = self.context_for(color)
        excluded = self.last_moved[color]
        square = self.board.locate_identity(excluded) if excluded is not None else None
        if square is not None:
            piece = self.board.piece(square)
            assert piece is not None
            if is_repeat_allowed(self.board, piece, excluded, self.in_check[color], context):
                excluded = None
        return generate_legal_moves(self.board, color, context, exclude_identity=excluded)

    def submit_move(self, color: Color, move: Move, now: Optional[float] = None) -> bool:
        """
        Attempt to submit a move for the current round
        -----

        1. game must be running, and this color must not have submitted already. A clock that ran out before the
           move arrived ends the game on time instead, the move is not stored (returns False)
        2. validate the move on its own against the current position (raises MoveRejectedError)
        3. store it. A pawn reaching the last rank without a piece type waits for `choose_promotion`
        4. both moves complete? resolve the round

        Returns True if the round got resolved by this submission.
        """
        self._assert_accepting_moves()
        now = self._now(now)
        if self.tick(now):
            return False
        if self.rounds.submissions[color] != SubmissionStatus.NONE:
            raise GameStateError(f"{color} already submitted a move for round {self.rounds.number}.")

        self._validate_move(color, move)

        needs_promotion = is_pawn_push_to_promotion_square(self.board, move.from_square, move.to_square)
        if move.promote_to is not None:
            if not needs_promotion:
                raise MoveRejectedError(
                    RejectionReason.ILLEGAL_MOVE,
                    f"Move {move.to_uci()} does not promote a pawn.",
                )
            if move.promote_to not in PROMOTION_OPTIONS:
                raise MoveRejectedError(
                    RejectionReason.ILLEGAL_MOVE,
                    f"Cannot promote into a {move.promote_to}.",
                )

        self.pending_moves[color] = move
        self.rounds.submit(color, needs_promotion=needs_promotion and move.promote_to is None)
        self.started = True

        return self._after_submission(now)

    def choose_promotion(
        self, color: Color, square: Square, piece_type: PieceType, now: Optional[float] = None
    ) -> bool:
        """Attach the promotion choice to the pending pawn move. Returns True if the round got resolved."""
        self._assert_accepting_moves()
        now = self._now(now)
        if self.tick(now):
            return False
        pending = self.pending_moves[color]
        if pending is None or not self.rounds.is_promotion_pending(color):
            raise PromotionRejectedError(
                RejectionReason.NO_PENDING_PROMOTION, "No pending move requiring promotion."
            )
        if pending.to_square != square:
            raise PromotionRejectedError(
                RejectionReason.SQUARE_MISMATCH,
                f"Promotion square {square} does not match the pending move to {pending.to_square}.",
            )
        if piece_type not in PROMOTION_OPTIONS:
            raise PromotionRejectedError(
                RejectionReason.INVALID_PIECE_TYPE, f"Cannot promote into a {piece_type}."
            )

        self.pending_moves[color] = pending.with_promotion(piece_type)
        self.rounds.complete_promotion(color)
        return self._after_submission(now)

    def tick(self, now: Optional[float] = None) -> bool:
        """Timer tick. Returns True if somebody ran out of time (the game is then over)."""
        if self.is_over or not self.clock.running:
            return False

        now = self._now(now)
        flagged = self.clock.tick(now)
        if not flagged:
            return False

        if len(flagged) == 2:
            verdict = Verdict(GameResult.DRAW, GameEndReason.DOUBLE_TIMEOUT)
        else:
            verdict = Verdict(winner_result(flagged[0].opponent), GameEndReason.TIMEOUT)
        self._finish(verdict, now)
        return True

    # -- PRIVATE HELPERS ---
    def _now(self, now: Optional[float]) -> float:
        return time.monotonic() if now is None else now

    def _assert_accepting_moves(self) -> None:
        if self.is_over:
            raise GameStateError(f"Game is over. result: {self.result}")
        if not self.both_seated:
            raise GameStateError("Waiting for the opponent to join.")

    def _validate_move(self, color: Color, move: Move) -> None:
        """Checks in the order a player would want to hear about them. Never mutates anything."""
        piece = self.board.piece(move.from_square)
        if piece is None:
            raise MoveRejectedError(
                RejectionReason.NO_PIECE_AT_SOURCE, f"No piece at {move.from_square}."
            )
        if piece.color != color:
            raise MoveRejectedError(RejectionReason.WRONG_COLOR, f"The piece on {move.from_square} is not yours.")

        context = self.context_for(color)
        if not is_repeat_allowed(self.board, piece, self.last_moved[color], self.in_check[color], context):
            raise MoveRejectedError(
                RejectionReason.REPEATED_PIECE, "Cannot move the same piece twice in a row."
            )

        if not is_legal_move(self.board, move.from_square, move.to_square, piece, context):
            raise MoveRejectedError(RejectionReason.ILLEGAL_MOVE, f"Move not allowed: {move.to_uci()}")

        # only binding while already in check: a king may walk into an attacked square
        if self.in_check[color] and leaves_king_in_check(self.board, move, color, context):
            raise MoveRejectedError(
                RejectionReason.KING_STILL_IN_CHECK,
                "Your king would be in check after this move.",
            )

    def _after_submission(self, now: float) -> bool:
        self._refresh_clock(now)
        if not self.rounds.both_complete:
            return False
        self._resolve_round(now)
        return True

    def _refresh_clock(self, now: float) -> None:
        """A color's clock runs while it still owes a complete move for this round"""
        if not self.clock.running:
            return
        self.clock.set_active({color: not self.rounds.is_complete(color) for color in Color}, now)

    def _resolve_round(self, now: float) -> None:
        moves: dict[Color, Move] = {}
        for color in Color:
            move = self.pending_moves[color]
            assert move is not None
            moves[color] = move

        resolution = resolve_round(self.board, moves, self.castling_rights, self.en_passant_targets)

        self.board = resolution.board
        self.castling_rights = resolution.castling_rights
        self.en_passant_targets = resolution.en_passant_targets
        self.last_moved = dict(resolution.moved_identities)
        self.last_moves = dict(moves)
        self.history.append(RoundRecord.from_resolution(self.rounds.number, moves, resolution))
        self.in_check = {color: is_in_check(self.board, color) for color in Color}
        self.pending_moves = _per_color(None)
        self.rounds.mark_resolved()

        verdict = evaluate_outcome(
            self.board,
            {color: self.context_for(color) for color in Color},
            resolution.collided_kings,
        )
        if verdict is not None:
            self._finish(verdict, now)
            return

        self.rounds.start_next_round()
        self._refresh_clock(now)

    def _finish(self, verdict: Verdict, now: float) -> None:
        self.result = verdict.result
        self.end_reason = verdict.reason
        self.rounds.finish()
        self.clock.stop(now)

    # --- SNAPSHOT ---
    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            position={
                square.to_algebraic(): PieceSnapshot(
                    color=piece.color.value, type=piece.type.value, identity=piece.identity
                )
                for square, piece in sorted(self.board.position.items())
            },
            board_fen=self.board.to_fen(),
            in_check={color.value: self.in_check[color] for color in Color},
            last_moved_pieces={color.value: self.last_moved[color] for color in Color},
            last_moves={
                color.value: (move.to_uci() if (move := self.last_moves[color]) else None)
                for color in Color
            },
            castling_rights={color.value: self.castling_rights.for_color(color) for color in Color},
            en_passant_targets={
                color.value: (target.to_algebraic() if (target := self.en_passant_targets[color]) else None)
                for color in Color
            },
            timers=TimerSnapshot(
                time_control=self.clock.time_control,
                remaining={color.value: self.clock.remaining[color] for color in Color},
                active={color.value: self.clock.active[color] for color in Color},
                running=self.clock.running,
            ),
            round_number=self.rounds.number,
            round_phase=self.rounds.phase.value,
            submitted={color.value: self.rounds.is_complete(color) for color in Color},
            promotion_pending=[color.value for color in self.rounds.promotion_pending_colors],
            seated={color.value: self.players[color] is not None for color in Color},
            started=self.started,
            result=self.result.value if self.result else None,
            end_reason=self.end_reason.value if self.end_reason else None,
            history=[
                {color.value: record.moves[color].to_uci() for color in Color}
                for record in self.history
            ],
        )
