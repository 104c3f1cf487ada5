"""
Round resolution: merge the two simultaneous moves of a round into one new position.
----

Both moves were validated on their own against the position before the round. Neither side "moved first", so
everything here is decided by looking at the pre-round position, never at the half-updated one:

1. castling: king and rook are relocated together
2. en passant bookkeeping: stale targets dropped, new targets recorded for double pawn advances (kept only if the
   pawn survives the round)
3. en passant captures: the pawn behind the target square is removed
4. both moving pieces leave their squares
5. collision: same destination -> both moving pieces are gone
6. swerve: a piece that was aimed at moved away, so the move lands without capturing
7. promotion: landed pawn changes type, keeps its identity
8. castling rights revoked for moved kings/rooks and rooks taken on their home square
"""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Optional, Sequence

from loguru import logger

from syncchess.chess.board import Board
from syncchess.chess.castling import CastlingRights
from syncchess.chess.moves import Move
from syncchess.chess.pieces import Piece
from syncchess.chess.special_moves import (
    castling_direction_of_move,
    en_passant_target_created,
    en_passant_victim_square,
    execute_castling,
    is_en_passant_capture,
    remove_en_passant_victim,
    substitute_promotion,
)
from syncchess.chess.square import Square
from syncchess.core.shared_types import Color, PieceType

DEFAULT_ORDER: tuple[Color, Color] = (Color.WHITE, Color.BLACK)


def _per_color(value_factory) -> dict:
    return {color: value_factory() for color in Color}


@dataclass
class RoundResolution:
    """Everything that came out of resolving one round"""

    board: Board
    castling_rights: CastlingRights
    en_passant_targets: dict[Color, Optional[Square]]
    moved_pieces: dict[Color, Piece]
    collision_square: Optional[Square] = None
    collided: dict[Color, Piece] = field(default_factory=dict)
    # identities taken BY the given color
    captured: dict[Color, list[str]] = field(default_factory=lambda: _per_color(list))
    # the given color aimed at a piece that moved away
    swerved: dict[Color, bool] = field(default_factory=lambda: _per_color(bool))

    @property
    def moved_identities(self) -> dict[Color, str]:
        return {color: piece.identity for color, piece in self.moved_pieces.items()}

    @property
    def collided_kings(self) -> set[Color]:
        return {color for color, piece in self.collided.items() if piece.type == PieceType.KING}


def resolve_round(
    board: Board,
    moves: dict[Color, Move],
    castling_rights: CastlingRights,
    en_passant_targets: dict[Color, Optional[Square]],
    order: Sequence[Color] = DEFAULT_ORDER,
) -> RoundResolution:
    """
    Compute the position after both moves of the round.

    * board / castling_rights: the pre-round state. Neither gets mutated.
    * en_passant_targets: target created by each color in the previous round. A color can only capture onto the one
      its opponent created.
    * order: the order in which the two colors get processed internally. The result does not depend on it.
    """
    if set(order) != set(Color) or len(order) != len(Color):
        raise ValueError(f"order must contain each color exactly once, got {order}")

    pre_round = board
    working = board.copy()
    rights = deepcopy(castling_rights)

    moving: dict[Color, Piece] = {}
    for color in order:
        piece = working.piece(moves[color].from_square)
        if piece is None or piece.color != color:
            raise ValueError(f"{color} move {moves[color].to_uci()} does not start on one of its own pieces")
        moving[color] = piece

    resolution = RoundResolution(
        board=working,
        castling_rights=rights,
        en_passant_targets=_per_color(lambda: None),
        moved_pieces=moving,
    )

    # 1. castling
    castled: set[Color] = set()
    for color in order:
        direction = castling_direction_of_move(pre_round, moves[color])
        if direction is not None:
            execute_castling(working, direction)
            castled.add(color)

    # 2. en passant bookkeeping: only this round's double advances survive
    for color in order:
        resolution.en_passant_targets[color] = en_passant_target_created(pre_round, moves[color])

    # 3. en passant captures
    for color in order:
        _capture_en_passant(pre_round, working, moves, color, en_passant_targets, resolution)

    # 4. vacate source squares
    for color in order:
        if color in castled:
            continue
        from_square = moves[color].from_square
        occupant = working.piece(from_square)
        if occupant is not None and occupant.identity == moving[color].identity:
            working.remove_piece(from_square)

    # 5. collision
    destinations = {moves[color].to_square for color in order}
    if len(destinations) == 1:
        collision_square = moves[order[0]].to_square
        working.remove_piece(collision_square)
        resolution.collision_square = collision_square
        resolution.collided = dict(moving)
        logger.debug(
            f"Collision on {collision_square}: {', '.join(piece.identity for piece in moving.values())} removed"
        )
    else:
        # 6. swerve / ordinary landing
        for color in order:
            _land(pre_round, working, moves, color, moving[color], resolution)

        # 7. promotion
        for color in order:
            substitute_promotion(moving[color], moves[color].promote_to)

    # a target only stays while its pawn survived the round on the square it advanced to
    for color in order:
        if resolution.en_passant_targets[color] is None:
            continue
        landed = working.piece(moves[color].to_square)
        if landed is None or landed.identity != moving[color].identity:
            resolution.en_passant_targets[color] = None

    # 8. castling rights
    for color in order:
        _revoke_rights_of_mover(pre_round, moves[color], color, rights)

    return resolution


def _capture_en_passant(
    pre_round: Board,
    working: Board,
    moves: dict[Color, Move],
    color: Color,
    en_passant_targets: dict[Color, Optional[Square]],
    resolution: RoundResolution,
) -> None:
    """Remove the pawn taken en passant, unless that pawn is the one the opponent moves this round (it swerved)"""
    target = en_passant_targets.get(color.opponent)
    if not is_en_passant_capture(pre_round, moves[color], target):
        return

    assert target is not None
    if moves[color.opponent].from_square == en_passant_victim_square(target, color):
        resolution.swerved[color] = True
        logger.debug(f"{color} en passant onto {target} missed: the pawn moved away")
        return

    victim = remove_en_passant_victim(working, target, color)
    if victim is not None:
        resolution.captured[color].append(victim.identity)


def _land(
    pre_round: Board,
    working: Board,
    moves: dict[Color, Move],
    color: Color,
    piece: Piece,
    resolution: RoundResolution,
) -> None:
    """
    Put the moving piece on its destination.

    * the opponent's piece that stood there before the round has left it (its own move, or castling): swerve, no capture
    * otherwise: whatever opponent piece is standing there now gets captured
    """
    to_square = moves[color].to_square
    target_before = pre_round.piece(to_square)
    occupant = working.piece(to_square)

    aimed_at_opponent = target_before is not None and target_before.color == color.opponent
    if aimed_at_opponent and (occupant is None or occupant.identity != target_before.identity):
        resolution.swerved[color] = True
        logger.debug(f"{color} move onto {to_square} swerved: {target_before.identity} moved away")

    if occupant is not None and occupant.identity != piece.identity:
        resolution.captured[color].append(occupant.identity)
        if occupant.type == PieceType.ROOK:
            # a rook taken on its home square takes the castling right with it
            resolution.castling_rights.revoke_for_rook_square(occupant.color, to_square)

    working.place_piece(piece, to_square)


def _revoke_rights_of_mover(pre_round: Board, move: Move, color: Color, rights: CastlingRights) -> None:
    """Moving your king revokes both directions, moving a rook off its home square revokes that direction"""
    piece = pre_round.piece(move.from_square)
    assert piece is not None
    if piece.type == PieceType.KING:
        rights.revoke_all(color)
    elif piece.type == PieceType.ROOK:
        rights.revoke_for_rook_square(color, move.from_square)
