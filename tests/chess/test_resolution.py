"""Unit tests for /syncchess/chess/resolution.py"""

from typing import Optional

import pytest

from syncchess.chess.board import Board
from syncchess.chess.castling import CastlingRights
from syncchess.chess.moves import Move
from syncchess.chess.resolution import RoundResolution, resolve_round
from syncchess.chess.square import Square
from syncchess.core.shared_types import Color, PieceType

NO_TARGETS: dict[Color, Optional[Square]] = {Color.WHITE: None, Color.BLACK: None}
BOTH_ORDERS = [(Color.WHITE, Color.BLACK), (Color.BLACK, Color.WHITE)]


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


def resolve(
    fen: str,
    white_uci: str,
    black_uci: str,
    castling: str = "-",
    targets: Optional[dict[Color, Optional[Square]]] = None,
    order: tuple[Color, Color] = (Color.WHITE, Color.BLACK),
) -> RoundResolution:
    return resolve_round(
        Board.from_fen(fen),
        {Color.WHITE: Move.from_uci(white_uci), Color.BLACK: Move.from_uci(black_uci)},
        CastlingRights.from_fen(castling),
        targets or dict(NO_TARGETS),
        order=order,
    )


# --- PLAIN ROUNDS ---
def test_e4_e5() -> None:
    board = Board.starting_position()
    resolution = resolve_round(
        board,
        {Color.WHITE: Move.from_uci("e2e4"), Color.BLACK: Move.from_uci("e7e5")},
        CastlingRights(),
        dict(NO_TARGETS),
    )
    assert resolution.board.to_fen() == "rnbqkbnr/pppp1ppp/8/4p3/4P3/8/PPPP1PPP/RNBQKBNR"
    assert resolution.moved_identities == {Color.WHITE: "wPe2", Color.BLACK: "bPe7"}
    assert resolution.en_passant_targets == {Color.WHITE: sq("e3"), Color.BLACK: sq("e6")}
    assert resolution.collision_square is None
    assert resolution.captured == {Color.WHITE: [], Color.BLACK: []}
    # the pre-round board is untouched
    assert board.to_fen() == "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


def test_ordinary_capture_of_a_piece_that_stays() -> None:
    resolution = resolve("4k3/8/8/3n4/8/8/6B1/4K3", "g2d5", "e8d8")
    assert resolution.board.piece(sq("d5")).identity == "wBg2"
    assert resolution.captured[Color.WHITE] == ["bNd5"]
    assert not resolution.swerved[Color.WHITE]


def test_both_capture_each_other_on_different_squares() -> None:
    # white bishop takes the knight, black knight takes the rook somewhere else
    resolution = resolve("4k3/8/8/3n4/8/4R3/6B1/4K3", "g2d5", "d5e3")
    assert resolution.board.piece(sq("d5")).identity == "wBg2"
    assert resolution.board.piece(sq("e3")).identity == "bNd5"
    # the knight left d5 before the bishop arrived: a swerve, not a capture
    assert resolution.swerved[Color.WHITE]
    assert resolution.captured[Color.WHITE] == []
    assert resolution.captured[Color.BLACK] == ["wRe3"]


# --- SWERVE ---
def test_swerve_pawn_and_knight() -> None:
    resolution = resolve("4k3/8/5n2/4P3/8/8/8/4K3", "e5f6", "f6g8")
    assert resolution.board.piece(sq("f6")).identity == "wPe5"
    assert resolution.board.piece(sq("g8")).identity == "bNf6"
    assert resolution.board.piece(sq("e5")) is None
    assert resolution.swerved == {Color.WHITE: True, Color.BLACK: False}
    assert resolution.captured == {Color.WHITE: [], Color.BLACK: []}


def test_mutual_swerve() -> None:
    # the rooks aim at each other: each one has left the square the other one lands on
    resolution = resolve("k7/8/8/8/r7/8/8/R6K", "a1a4", "a4a1")
    assert resolution.board.piece(sq("a4")).identity == "wRa1"
    assert resolution.board.piece(sq("a1")).identity == "bRa4"
    assert resolution.swerved == {Color.WHITE: True, Color.BLACK: True}
    assert resolution.captured == {Color.WHITE: [], Color.BLACK: []}


# --- COLLISION ---
def test_collision_removes_both_pieces() -> None:
    resolution = resolve("4k3/4n3/8/8/8/2N5/8/4K3", "c3d5", "e7d5")
    assert resolution.collision_square == sq("d5")
    assert resolution.board.piece(sq("d5")) is None
    assert resolution.board.locate_identity("wNc3") is None
    assert resolution.board.locate_identity("bNe7") is None
    assert resolution.collided_kings == set()


def test_king_collision() -> None:
    resolution = resolve("8/8/3k4/8/3K4/8/8/8", "d4d5", "d6d5")
    assert resolution.collided_kings == {Color.WHITE, Color.BLACK}
    assert not resolution.board.has_king(Color.WHITE)
    assert not resolution.board.has_king(Color.BLACK)


def test_collision_on_a_square_with_promotion() -> None:
    # pawn promoting on b8 while the black rook drops to b8: both gone, nothing promoted
    resolution = resolve("1r2k3/P7/8/8/8/8/8/4K3", "a7b8q", "b8b7")
    assert resolution.collision_square is None
    resolution = resolve("r3k3/1P6/8/8/8/8/8/4K3", "b7b8q", "a8b8")
    assert resolution.collision_square == sq("b8")
    assert resolution.board.piece(sq("b8")) is None


# --- CASTLING ---
def test_both_sides_castle() -> None:
    resolution = resolve("r3k2r/8/8/8/8/8/8/R3K2R", "e1g1", "e8c8", castling="KQkq")
    assert resolution.board.to_fen() == "2kr3r/8/8/8/8/8/8/R4RK1"
    assert resolution.castling_rights.to_fen() == "-"
    assert resolution.board.piece(sq("f1")).identity == "wRh1"


def test_castled_rook_captured_on_arrival() -> None:
    resolution = resolve("4kr2/8/8/8/8/8/8/4K2R", "e1g1", "f8f1", castling="K")
    assert resolution.board.piece(sq("g1")).type == PieceType.KING
    assert resolution.board.piece(sq("f1")).identity == "bRf8"
    assert resolution.captured[Color.BLACK] == ["wRh1"]


def test_moving_a_rook_revokes_its_side_only() -> None:
    resolution = resolve("r3k2r/8/8/8/8/8/8/R3K2R", "h1h2", "e8e7", castling="KQkq")
    assert resolution.castling_rights.to_fen() == "Q"


def test_rook_taken_on_its_home_square_revokes_the_right() -> None:
    resolution = resolve("4k3/8/8/8/8/8/P5b1/4K2R", "a2a3", "g2h1", castling="K")
    assert resolution.captured[Color.BLACK] == ["wRh1"]
    assert resolution.castling_rights.to_fen() == "-"


# --- EN PASSANT ---
def test_en_passant_capture() -> None:
    resolution = resolve(
        "4k3/8/8/3pP3/8/8/8/4K3", "e5d6", "e8f8", targets={Color.WHITE: None, Color.BLACK: sq("d6")}
    )
    assert resolution.board.piece(sq("d6")).identity == "wPe5"
    assert resolution.board.piece(sq("d5")) is None
    assert resolution.captured[Color.WHITE] == ["bPd5"]


def test_en_passant_victim_moved_away() -> None:
    resolution = resolve(
        "4k3/8/8/3pP3/8/8/8/4K3", "e5d6", "d5d4", targets={Color.WHITE: None, Color.BLACK: sq("d6")}
    )
    assert resolution.board.piece(sq("d6")).identity == "wPe5"
    assert resolution.board.piece(sq("d4")).identity == "bPd5"
    assert resolution.swerved[Color.WHITE]
    assert resolution.captured[Color.WHITE] == []


def test_stale_targets_are_dropped() -> None:
    resolution = resolve(
        "4k3/p7/8/8/8/8/P7/4K3", "a2a4", "e8d8", targets={Color.WHITE: None, Color.BLACK: sq("h6")}
    )
    assert resolution.en_passant_targets == {Color.WHITE: sq("a3"), Color.BLACK: None}


def test_two_targets_in_one_round() -> None:
    resolution = resolve("4k3/p7/8/8/8/8/7P/4K3", "h2h4", "a7a5")
    assert resolution.en_passant_targets == {Color.WHITE: sq("h3"), Color.BLACK: sq("a6")}


def test_collided_pawn_leaves_no_target() -> None:
    resolution = resolve("4k3/8/5n2/8/3p4/8/4P3/4K3", "e2e4", "f6e4")
    assert resolution.collision_square == sq("e4")
    assert resolution.en_passant_targets == NO_TARGETS


# --- PROMOTION ---
def test_promotion_keeps_identity() -> None:
    resolution = resolve("4k3/P7/8/8/8/8/8/4K3", "a7a8n", "e8e7")
    promoted = resolution.board.piece(sq("a8"))
    assert promoted.type == PieceType.KNIGHT
    assert promoted.identity == "wPa7"


def test_promotion_by_capture() -> None:
    resolution = resolve("1r2k3/P7/8/8/8/8/8/4K3", "a7b8q", "e8e7")
    promoted = resolution.board.piece(sq("b8"))
    assert promoted.type == PieceType.QUEEN
    assert resolution.captured[Color.WHITE] == ["bRb8"]


# --- ORDER INDEPENDENCE ---
ORDER_SCENARIOS = [
    ("rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR", "e2e4", "e7e5", "KQkq", NO_TARGETS),
    ("4k3/8/5n2/4P3/8/8/8/4K3", "e5f6", "f6g8", "-", NO_TARGETS),
    ("4k3/8/8/3n4/8/4R3/6B1/4K3", "g2d5", "d5e3", "-", NO_TARGETS),
    ("k7/8/8/8/r7/8/8/R6K", "a1a4", "a4a1", "-", NO_TARGETS),
    ("4k3/4n3/8/8/8/2N5/8/4K3", "c3d5", "e7d5", "-", NO_TARGETS),
    ("8/8/3k4/8/3K4/8/8/8", "d4d5", "d6d5", "-", NO_TARGETS),
    ("r3k2r/8/8/8/8/8/8/R3K2R", "e1g1", "e8c8", "KQkq", NO_TARGETS),
    ("4kr2/8/8/8/8/8/8/4K2R", "e1g1", "f8f1", "K", NO_TARGETS),
    ("4k3/8/8/3pP3/8/8/8/4K3", "e5d6", "d5d4", "-", {Color.WHITE: None, Color.BLACK: Square(4, 6)}),
    ("4k3/8/8/3pP3/8/8/8/4K3", "e5d6", "e8f8", "-", {Color.WHITE: None, Color.BLACK: Square(4, 6)}),
    ("1r2k3/P7/8/8/8/8/8/4K3", "a7b8q", "b8b1", "-", NO_TARGETS),
]


@pytest.mark.parametrize("fen, white_uci, black_uci, castling, targets", ORDER_SCENARIOS)
def test_order_independence(
    fen: str,
    white_uci: str,
    black_uci: str,
    castling: str,
    targets: dict[Color, Optional[Square]],
) -> None:
    """Processing black before white internally must not change anything"""
    results = [
        resolve(fen, white_uci, black_uci, castling, dict(targets), order=order) for order in BOTH_ORDERS
    ]
    first, second = results
    assert first.board.position == second.board.position
    assert first.castling_rights == second.castling_rights
    assert first.en_passant_targets == second.en_passant_targets
    assert first.collision_square == second.collision_square
    assert first.captured == second.captured
    assert first.swerved == second.swerved


def test_invalid_order() -> None:
    with pytest.raises(ValueError):
        resolve("8/8/3k4/8/3K4/8/8/8", "d4d5", "d6d5", order=(Color.WHITE, Color.WHITE))


def test_move_from_an_empty_square() -> None:
    with pytest.raises(ValueError):
        resolve("8/8/3k4/8/3K4/8/8/8", "a1a2", "d6d5")
