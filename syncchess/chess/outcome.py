"""
Checks for the end of the game after a round was resolved.
----

In this order, first hit decides:

1. a king is gone (collision, or taken by a move it could not see coming): the other side wins, both gone is a draw
2. checkmate: one side mated -> the other side wins (even when its own king is in check), both mated -> draw
3. stalemate: either side (or both) without a legal move while not in check -> draw
"""

from dataclasses import dataclass
from typing import Optional

from syncchess.chess.board import Board
from syncchess.chess.legal_moves import has_legal_move
from syncchess.chess.moves import MoveContext, is_in_check
from syncchess.core.shared_types import Color, GameEndReason, GameResult, winner_result


@dataclass(frozen=True)
class Verdict:
    result: GameResult
    reason: GameEndReason


def evaluate_outcome(
    board: Board,
    contexts: dict[Color, MoveContext],
    collided_kings: Optional[set[Color]] = None,
) -> Optional[Verdict]:
    """
    * contexts: castling rights / en passant target each color would play the next round with
    * collided_kings: colors whose king was removed by a collision this round (only changes the reported reason)
    """
    collided_kings = collided_kings or set()

    verdict = _king_elimination(board, collided_kings)
    if verdict is not None:
        return verdict

    in_check = {color: is_in_check(board, color) for color in Color}
    no_moves = {color: not has_legal_move(board, color, contexts[color]) for color in Color}

    checkmated = [color for color in Color if in_check[color] and no_moves[color]]
    if len(checkmated) == 2:
        return Verdict(GameResult.DRAW, GameEndReason.DOUBLE_CHECKMATE)
    if len(checkmated) == 1:
        return Verdict(winner_result(checkmated[0].opponent), GameEndReason.CHECKMATE)

    stalemated = [color for color in Color if not in_check[color] and no_moves[color]]
    if len(stalemated) == 2:
        return Verdict(GameResult.DRAW, GameEndReason.DOUBLE_STALEMATE)
    if len(stalemated) == 1:
        return Verdict(GameResult.DRAW, GameEndReason.STALEMATE)

    return None


def _king_elimination(board: Board, collided_kings: set[Color]) -> Optional[Verdict]:
    missing = [color for color in Color if not board.has_king(color)]
    if not missing:
        return None

    reason = (
        GameEndReason.COLLISION
        if collided_kings.intersection(missing)
        else GameEndReason.KING_CAPTURED
    )
    if len(missing) == 2:
        return Verdict(GameResult.DRAW, reason)
    return Verdict(winner_result(missing[0].opponent), reason)
