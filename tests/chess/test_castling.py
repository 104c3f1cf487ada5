"""Unit tests for /syncchess/chess/castling.py"""

import pytest

from syncchess.chess.castling import (
    CASTLING_RULES,
    CastlingDirection,
    CastlingRights,
    castling_direction_for,
    castling_directions_of,
)
from syncchess.chess.square import Square
from syncchess.core.shared_types import Color


def sq(name: str) -> Square:
    return Square.from_algebraic(name)


@pytest.mark.parametrize("castle_fen", ["KQkq", "Kq", "k", "-"])
def test_fen_round_trip(castle_fen: str) -> None:
    assert CastlingRights.from_fen(castle_fen).to_fen() == castle_fen


def test_direction_properties() -> None:
    assert CastlingDirection.WHITE_KING_SIDE.color == Color.WHITE
    assert CastlingDirection.BLACK_QUEEN_SIDE.color == Color.BLACK
    assert CastlingDirection.BLACK_KING_SIDE.is_king_side
    assert not CastlingDirection.WHITE_QUEEN_SIDE.is_king_side
    assert castling_directions_of(Color.BLACK) == [
        CastlingDirection.BLACK_KING_SIDE,
        CastlingDirection.BLACK_QUEEN_SIDE,
    ]


@pytest.mark.parametrize(
    "from_name, to_name, expected",
    [
        ("e1", "g1", CastlingDirection.WHITE_KING_SIDE),
        ("e1", "c1", CastlingDirection.WHITE_QUEEN_SIDE),
        ("e8", "g8", CastlingDirection.BLACK_KING_SIDE),
        ("e8", "c8", CastlingDirection.BLACK_QUEEN_SIDE),
        ("e1", "f1", None),
        ("d1", "f1", None),
    ],
)
def test_castling_direction_for(from_name: str, to_name: str, expected: CastlingDirection | None) -> None:
    assert castling_direction_for(sq(from_name), sq(to_name)) == expected


def test_squares_between_and_king_path() -> None:
    king_side = CASTLING_RULES[CastlingDirection.WHITE_KING_SIDE]
    assert king_side.squares_between() == [sq("f1"), sq("g1")]
    assert king_side.king_path() == [sq("f1"), sq("g1")]

    queen_side = CASTLING_RULES[CastlingDirection.BLACK_QUEEN_SIDE]
    assert queen_side.squares_between() == [sq("b8"), sq("c8"), sq("d8")]
    assert queen_side.king_path() == [sq("d8"), sq("c8")]


def test_revoke_all_only_touches_one_color() -> None:
    rights = CastlingRights()
    rights.revoke_all(Color.WHITE)
    assert rights.to_fen() == "kq"


@pytest.mark.parametrize(
    "color, square_name, expected_fen",
    [
        (Color.WHITE, "h1", "Qkq"),
        (Color.WHITE, "a1", "Kkq"),
        (Color.BLACK, "a8", "KQk"),
        # not a rook home square: nothing changes
        (Color.WHITE, "d1", "KQkq"),
        # black rook standing on white's home corner
        (Color.BLACK, "h1", "KQkq"),
    ],
)
def test_revoke_for_rook_square(color: Color, square_name: str, expected_fen: str) -> None:
    rights = CastlingRights()
    rights.revoke_for_rook_square(color, sq(square_name))
    assert rights.to_fen() == expected_fen


def test_revocation_is_permanent() -> None:
    rights = CastlingRights.from_fen("K")
    rights.revoke(CastlingDirection.WHITE_KING_SIDE)
    rights.revoke(CastlingDirection.WHITE_KING_SIDE)
    assert rights.to_fen() == "-"
    assert rights.for_color(Color.WHITE) == {"king_side": False, "queen_side": False}
