"""
Full legal move generation: geometry (moves.py) + "does not leave your own king in check".

Used by move validation, the repeat-move rule and the checkmate / stalemate evaluation, so all three agree on what a
legal move is.
"""

from typing import Iterator, Optional

from syncchess.chess.board import Board
from syncchess.chess.moves import Move, MoveContext, is_in_check, is_legal_move
from syncchess.chess.special_moves import (
    castling_direction_of_move,
    execute_castling,
    is_en_passant_capture,
    remove_en_passant_victim,
)
from syncchess.chess.square import all_squares
from syncchess.core.shared_types import Color


def simulate_move(board: Board, move: Move, context: MoveContext) -> Board:
    """
    Play a single move on a copy of the board, as if the opponent did nothing.

    NOTE: Promotion is not applied: the promoted piece stands on the same square, so it cannot change whether your own
    king is attacked.
    """
    piece = board.piece(move.from_square)
    assert piece is not None

    new_board = Board(dict(board.position))
    direction = castling_direction_of_move(board, move)
    if direction is not None:
        execute_castling(new_board, direction)
        return new_board

    if is_en_passant_capture(board, move, context.en_passant_target):
        remove_en_passant_victim(new_board, move.to_square, piece.color)
    new_board.move_piece(move.from_square, move.to_square)
    return new_board


def leaves_king_in_check(board: Board, move: Move, color: Color, context: MoveContext) -> bool:
    """Return True if your king is (still) in check after making the move"""
    return is_in_check(simulate_move(board, move, context), color)


def iter_legal_moves(
    board: Board,
    color: Color,
    context: MoveContext,
    exclude_identity: Optional[str] = None,
) -> Iterator[Move]:
    """
    Try every (from, to) pair for every piece of `color`.
    ----

    * exclude_identity: skip the piece with this identity (the repeat-move rule asks about "any other piece")

    NOTE: Promotion choices are not expanded, a pawn push to the last rank is yielded once without piece type.
    """
    for from_square in board.locate_color(color):
        piece = board.piece(from_square)
        assert piece is not None
        if exclude_identity is not None and piece.identity == exclude_identity:
            continue

        for to_square in all_squares():
            if not is_legal_move(board, from_square, to_square, piece, context):
                continue
            move = Move(from_square, to_square)
            if leaves_king_in_check(board, move, color, context):
                continue
            yield move


def generate_legal_moves(
    board: Board,
    color: Color,
    context: MoveContext,
    exclude_identity: Optional[str] = None,
) -> list[Move]:
    return list(iter_legal_moves(board, color, context, exclude_identity))


def has_legal_move(
    board: Board,
    color: Color,
    context: MoveContext,
    exclude_identity: Optional[str] = None,
) -> bool:
    """Short-circuits on the first legal move found"""
    return next(iter_legal_moves(board, color, context, exclude_identity), None) is not None
