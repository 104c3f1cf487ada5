"""
Geometry/Base movement and capturing/attacking rules

Key idea: Use strategy pattern to define the movement rule for each piece type.

A rule answers "may this piece go from here to there on this board?" for a single move in isolation. It knows nothing
about the move the opponent submits for the same round, that is the job of the round resolution.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Self

from syncchess.chess.board import Board
from syncchess.chess.castling import (
    CASTLING_RULES,
    CastlingRights,
    castling_direction_for,
)
from syncchess.chess.pieces import FEN_TO_PIECE, PIECE_TO_FEN, Piece
from syncchess.chess.square import BOARD_DIMENSIONS, Square
from syncchess.core.shared_types import Color, PieceType


@dataclass(frozen=True)
class Move:
    """basic definition of a move to be made"""

    from_square: Square
    to_square: Square
    promote_to: Optional[PieceType] = None

    @classmethod
    def from_uci(cls, uci: str) -> Self:
        """
        Universal Chess Interface notation
        ---

        examples:
        * "e2e4": move the piece that was on e2 to e4
        * "e7e8q" : (pawn) moves from e7 to e8 and promotes to a queen (the q)
        """
        from_sq = Square.from_algebraic(uci[:2])
        to_sq = Square.from_algebraic(uci[2:4])
        promote_to = FEN_TO_PIECE[uci[4]] if len(uci) == 5 else None
        return cls(from_sq, to_sq, promote_to)

    def to_uci(self) -> str:
        piece_char = PIECE_TO_FEN[self.promote_to] if self.promote_to else ""
        return f"{self.from_square.to_algebraic()}{self.to_square.to_algebraic()}{piece_char}"

    def with_promotion(self, piece_type: PieceType) -> "Move":
        return Move(self.from_square, self.to_square, piece_type)


@dataclass(frozen=True)
class MoveContext:
    """
    Everything besides the board a rule needs to know.

    * castling_rights: the open castling options (None = no castling at all)
    * en_passant_target: the square the mover may capture en passant onto (set by the opponent in the previous round)
    * allow_castling: switched off while probing for attacks, so castling never recurses into itself
    * attack_probe: asking "is this square attacked?" rather than "can I move there?". Only changes pawns: they attack
      diagonally, whether or not something stands on the square.
    """

    castling_rights: Optional[CastlingRights] = None
    en_passant_target: Optional[Square] = None
    allow_castling: bool = True
    attack_probe: bool = False


ATTACK_PROBE = MoveContext(allow_castling=False, attack_probe=True)


def pawn_direction(color: Color) -> int:
    """White moves UP the board, black moves DOWN"""
    return 1 if color == Color.WHITE else -1


def pawn_home_rank(color: Color) -> int:
    return 2 if color == Color.WHITE else BOARD_DIMENSIONS[1] - 1


def promotion_rank(color: Color) -> int:
    return BOARD_DIMENSIONS[1] if color == Color.WHITE else 1


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def is_path_clear(board: Board, from_square: Square, to_square: Square) -> bool:
    """Walk along a straight line or diagonal. Every square strictly in between must be empty."""
    df = _sign(to_square.file - from_square.file)
    dr = _sign(to_square.rank - from_square.rank)
    square = from_square.offset(df, dr)
    while square != to_square:
        if not board.is_empty(square):
            return False
        square = square.offset(df, dr)
    return True


# --- MOVEMENT RULES ---
def is_legal_pawn_move(
    board: Board, from_square: Square, to_square: Square, color: Color, context: MoveContext
) -> bool:
    """
    A pawn:
    - moves by a single square forward onto an empty square.
    - can move by two from its home rank, if both squares are empty
    - takes diagonally, including en passant onto the context's target square
    """
    direction = pawn_direction(color)
    df = to_square.file - from_square.file
    dr = to_square.rank - from_square.rank

    if context.attack_probe:
        return abs(df) == 1 and dr == direction

    target_empty = board.is_empty(to_square)
    if df == 0 and target_empty:
        if dr == direction:
            return True
        return (
            dr == 2 * direction
            and from_square.rank == pawn_home_rank(color)
            and board.is_empty(from_square.offset(0, direction))
        )

    if abs(df) == 1 and dr == direction:
        if not target_empty:
            return True
        if context.en_passant_target is None or to_square != context.en_passant_target:
            return False
        # the pawn that advanced past the target must still stand behind it
        victim = board.piece(to_square.offset(0, -direction))
        return victim is not None and victim.type == PieceType.PAWN and victim.color != color

    return False


def is_legal_knight_move(
    board: Board, from_square: Square, to_square: Square, color: Color, context: MoveContext
) -> bool:
    """Knights always move such that |delta_rank| + |delta_file| = 3 (and neither is zero)"""
    deltas = {abs(to_square.file - from_square.file), abs(to_square.rank - from_square.rank)}
    return deltas == {1, 2}


def is_legal_bishop_move(
    board: Board, from_square: Square, to_square: Square, color: Color, context: MoveContext
) -> bool:
    """Bishops move diagonally: |delta_rank| = |delta_file|"""
    df = to_square.file - from_square.file
    dr = to_square.rank - from_square.rank
    return abs(df) == abs(dr) and is_path_clear(board, from_square, to_square)


def is_legal_rook_move(
    board: Board, from_square: Square, to_square: Square, color: Color, context: MoveContext
) -> bool:
    """Rooks move either horizontally or vertically"""
    df = to_square.file - from_square.file
    dr = to_square.rank - from_square.rank
    return (df == 0 or dr == 0) and is_path_clear(board, from_square, to_square)


def is_legal_queen_move(
    board: Board, from_square: Square, to_square: Square, color: Color, context: MoveContext
) -> bool:
    """The Queen combines the rook moves and bishop moves"""
    return is_legal_rook_move(
        board, from_square, to_square, color, context
    ) or is_legal_bishop_move(board, from_square, to_square, color, context)


def is_legal_king_move(
    board: Board, from_square: Square, to_square: Square, color: Color, context: MoveContext
) -> bool:
    """
    The king can move by a single square at the time.

    Castling is modelled as a king move over two files (see `is_legal_castling_move`)
    """
    df = to_square.file - from_square.file
    dr = to_square.rank - from_square.rank
    if abs(df) <= 1 and abs(dr) <= 1:
        return True
    if dr == 0 and abs(df) == 2 and context.allow_castling:
        return is_legal_castling_move(board, from_square, to_square, color, context)
    return False


def is_legal_castling_move(
    board: Board, from_square: Square, to_square: Square, color: Color, context: MoveContext
) -> bool:
    """
    **you are allowed to castle if**

    * Castling rights for that side are not yet revoked (king and rook have not moved, rook was not taken).
    * The rook is actually standing on its square.
    * All squares between king and rook are empty.
    * You are not currently in check (you cannot castle out of check).
    * The king does not pass through, or land on, a square that is under attack.
    """
    direction = castling_direction_for(from_square, to_square)
    if direction is None or direction.color != color:
        return False

    rights = context.castling_rights
    if rights is None or not rights.can_castle(direction):
        return False

    rule = CASTLING_RULES[direction]
    rook = board.piece(rule.rook_from)
    if rook is None or rook.type != PieceType.ROOK or rook.color != color:
        return False

    if board.is_any_occupied(rule.squares_between()):
        return False

    if is_in_check(board, color):
        return False

    return not any(
        is_under_attack(board, square, color.opponent) for square in rule.king_path()
    )


# -- STRATEGY PATTERN: MOVEMENT RULES ---
LegalityFn = Callable[[Board, Square, Square, Color, MoveContext], bool]
MOVEMENT_RULES: dict[PieceType, LegalityFn] = {
    PieceType.PAWN: is_legal_pawn_move,
    PieceType.KNIGHT: is_legal_knight_move,
    PieceType.BISHOP: is_legal_bishop_move,
    PieceType.ROOK: is_legal_rook_move,
    PieceType.QUEEN: is_legal_queen_move,
    PieceType.KING: is_legal_king_move,
}


def is_legal_move(
    board: Board,
    from_square: Square,
    to_square: Square,
    piece: Piece,
    context: MoveContext,
) -> bool:
    """
    Geometry check for a single move
    ----

    NOTE: does not check whether the move leaves your own king in check. See `legal_moves.py` for that.
    """
    if from_square == to_square:
        return False
    if not (from_square.is_within_bounds() and to_square.is_within_bounds()):
        return False

    # Can't capture your own piece
    target = board.piece(to_square)
    if target is not None and target.color == piece.color:
        return False

    movement_rule = MOVEMENT_RULES[piece.type]
    return movement_rule(board, from_square, to_square, piece.color, context)


# --- ATTACKS / CHECK ---
def is_under_attack(board: Board, square: Square, by_color: Color) -> bool:
    """Could any piece of `by_color` move onto `square`? (castling never counts as an attack)"""
    for from_square in board.locate_color(by_color):
        piece = board.piece(from_square)
        assert piece is not None
        if is_legal_move(board, from_square, square, piece, ATTACK_PROBE):
            return True
    return False


def is_in_check(board: Board, color: Color) -> bool:
    """
    The king of `color` is attacked by the opponent.

    A color without a king (eliminated) is never in check: it has already lost.
    """
    king_square = board.find_king(color)
    if king_square is None:
        return False
    return is_under_attack(board, king_square, color.opponent)


# -- PAWN PROMOTION --
PROMOTION_OPTIONS: list[PieceType] = [
    PieceType.KNIGHT,
    PieceType.BISHOP,
    PieceType.ROOK,
    PieceType.QUEEN,
]


def is_pawn_push_to_promotion_square(board: Board, from_square: Square, to_square: Square) -> bool:
    """check if the move is a pawn move that reaches the far rank for its color"""
    moving_piece = board.piece(from_square)
    if moving_piece is None or moving_piece.type != PieceType.PAWN:
        return False
    return to_square.rank == promotion_rank(moving_piece.color)
