"""
"No repeated piece" rule
----

A color may not move the same piece (identity, not square) in two consecutive rounds. Exceptions:

a) the piece is the king and that color is in check
b) no other piece of that color has a legal move

(a) is checked first, (b) needs a full search over the other pieces' moves.
"""

from typing import Optional

from syncchess.chess.board import Board
from syncchess.chess.legal_moves import has_legal_move
from syncchess.chess.moves import MoveContext
from syncchess.chess.pieces import Piece
from syncchess.core.shared_types import PieceType


def is_king_in_check_exception(piece: Piece, in_check: bool) -> bool:
    return piece.type == PieceType.KING and in_check


def is_only_movable_piece(board: Board, piece: Piece, context: MoveContext) -> bool:
    """True if no other piece of the same color has any legal move"""
    return not has_legal_move(board, piece.color, context, exclude_identity=piece.identity)


def is_repeat_allowed(
    board: Board,
    piece: Piece,
    last_moved_identity: Optional[str],
    in_check: bool,
    context: MoveContext,
) -> bool:
    """May `piece` be moved this round, given which piece its color moved last round?"""
    if piece.identity != last_moved_identity:
        return True

    if is_king_in_check_exception(piece, in_check):
        return True

    return is_only_movable_piece(board, piece, context)
