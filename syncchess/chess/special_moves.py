"""
Castling execution, en passant bookkeeping and promotion substitution.

These are the moves that touch a second square (the rook, the pawn taken en passant) or change a piece, so the round
resolution handles them before/after the plain "vacate and occupy" logic.
"""

from typing import Optional

from syncchess.chess.board import Board
from syncchess.chess.castling import CASTLING_RULES, CastlingDirection, castling_direction_for
from syncchess.chess.moves import Move, pawn_direction
from syncchess.chess.pieces import Piece
from syncchess.chess.square import Square
from syncchess.core.shared_types import Color, PieceType


# -- CASTLING --
def castling_direction_of_move(board: Board, move: Move) -> Optional[CastlingDirection]:
    """A king shifting two files along its home rank is castling"""
    piece = board.piece(move.from_square)
    if piece is None or piece.type != PieceType.KING:
        return None
    if abs(move.to_square.file - move.from_square.file) != 2:
        return None
    return castling_direction_for(move.from_square, move.to_square)


def execute_castling(board: Board, direction: CastlingDirection) -> None:
    """Move both the King and the Rook"""
    squares = CASTLING_RULES[direction]
    board.move_piece(squares.king_from, squares.king_to)
    board.move_piece(squares.rook_from, squares.rook_to)


# -- EN PASSANT --
def en_passant_target_created(board: Board, move: Move) -> Optional[Square]:
    """A pawn advancing two ranks leaves the square it passed over as en passant target for the next round"""
    piece = board.piece(move.from_square)
    if piece is None or piece.type != PieceType.PAWN:
        return None
    if abs(move.to_square.rank - move.from_square.rank) != 2:
        return None
    return move.from_square.offset(0, pawn_direction(piece.color))


def is_en_passant_capture(board: Board, move: Move, target: Optional[Square]) -> bool:
    """Diagonal pawn move onto an (empty) en passant target square"""
    if target is None or move.to_square != target:
        return False
    piece = board.piece(move.from_square)
    if piece is None or piece.type != PieceType.PAWN:
        return False
    is_diagonal = abs(move.to_square.file - move.from_square.file) == 1
    return is_diagonal and board.is_empty(move.to_square)


def en_passant_victim_square(target: Square, capturing_color: Color) -> Square:
    """The pawn taken en passant stands one rank behind the target square (seen from the capturing side)"""
    return target.offset(0, -pawn_direction(capturing_color))


def remove_en_passant_victim(board: Board, target: Square, capturing_color: Color) -> Optional[Piece]:
    """Remove the opponent's pawn. Nothing happens if it is not there (anymore)."""
    victim_square = en_passant_victim_square(target, capturing_color)
    victim = board.piece(victim_square)
    if victim is None or victim.type != PieceType.PAWN or victim.color == capturing_color:
        return None
    return board.remove_piece(victim_square)


# -- PROMOTION --
def substitute_promotion(piece: Piece, promote_to: Optional[PieceType]) -> None:
    """Type changes, identity stays"""
    if promote_to is not None:
        piece.promote_to(promote_to)
