"""Helpers for implementing Castling rules. Need to be imported by multiple sources"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Self

from syncchess.chess.square import Square
from syncchess.core.shared_types import Color


class CastlingDirection(Enum):
    """The four castling directions. Values represent their encodings in FEN string."""

    WHITE_KING_SIDE = "K"
    WHITE_QUEEN_SIDE = "Q"
    BLACK_KING_SIDE = "k"
    BLACK_QUEEN_SIDE = "q"

    @property
    def color(self) -> Color:
        return Color.WHITE if self.value.isupper() else Color.BLACK

    @property
    def is_king_side(self) -> bool:
        return self.value.lower() == "k"


CASTLING_ORDER: tuple[CastlingDirection, ...] = (
    CastlingDirection.WHITE_KING_SIDE,
    CastlingDirection.WHITE_QUEEN_SIDE,
    CastlingDirection.BLACK_KING_SIDE,
    CastlingDirection.BLACK_QUEEN_SIDE,
)


@dataclass(frozen=True)
class CastlingSquares:
    """
    Store the squares where king/rook start from/end up in by castling.
    NOTE: If castling rights have not been revoked, we already know the king / rook are still at their starting squares.
    """

    king_from: Square
    king_to: Square
    rook_from: Square
    rook_to: Square

    @classmethod
    def from_algebraic(cls, k_from: str, k_to: str, r_from: str, r_to: str) -> Self:
        """Convenience method: to make mapping shown below (from CastlingDirection) more readable"""
        king_from = Square.from_algebraic(k_from)
        king_to = Square.from_algebraic(k_to)
        rook_from = Square.from_algebraic(r_from)
        rook_to = Square.from_algebraic(r_to)
        return cls(king_from, king_to, rook_from, rook_to)

    def squares_between(self) -> list[Square]:
        """Squares between king and rook. All must be empty to castle."""
        low, high = sorted([self.king_from.file, self.rook_from.file])
        return [Square(file, self.king_from.rank) for file in range(low + 1, high)]

    def king_path(self) -> list[Square]:
        """Squares the king passes through and lands on. None of them may be under attack."""
        step = 1 if self.king_to.file > self.king_from.file else -1
        return [
            Square(file, self.king_from.rank)
            for file in range(self.king_from.file + step, self.king_to.file + step, step)
        ]


# The moves (in classical chess) made when castling
CASTLING_RULES: dict[CastlingDirection, CastlingSquares] = {
    CastlingDirection.WHITE_KING_SIDE: CastlingSquares.from_algebraic(
        "e1", "g1", "h1", "f1"
    ),
    CastlingDirection.WHITE_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e1", "c1", "a1", "d1"
    ),
    CastlingDirection.BLACK_KING_SIDE: CastlingSquares.from_algebraic(
        "e8", "g8", "h8", "f8"
    ),
    CastlingDirection.BLACK_QUEEN_SIDE: CastlingSquares.from_algebraic(
        "e8", "c8", "a8", "d8"
    ),
}


def castling_direction_for(from_square: Square, to_square: Square) -> Optional[CastlingDirection]:
    """Which castling move (if any) moves the king between these two squares"""
    return next(
        (
            direction
            for direction, rule in CASTLING_RULES.items()
            if rule.king_from == from_square and rule.king_to == to_square
        ),
        None,
    )


def castling_directions_of(color: Color) -> list[CastlingDirection]:
    return [direction for direction in CASTLING_ORDER if direction.color == color]


@dataclass
class CastlingRights:
    """
    Which castling options are still open.
    ----

    Revocation is permanent: nothing in here can grant a right back once it is gone.
    """

    rights: dict[CastlingDirection, bool] = field(
        default_factory=lambda: {direction: True for direction in CastlingDirection}
    )

    @classmethod
    def from_fen(cls, castle_fen: str) -> Self:
        """parse the part of the FEN string that encodes castling rights ('KQkq', 'Kq', '-', ...)"""
        return cls({direction: (direction.value in castle_fen) for direction in CastlingDirection})

    def to_fen(self) -> str:
        castling_chars = "".join(
            [direction.value for direction in CASTLING_ORDER if self.rights[direction]]
        )
        return castling_chars or "-"

    def can_castle(self, direction: CastlingDirection) -> bool:
        return self.rights[direction]

    def revoke(self, direction: CastlingDirection) -> None:
        self.rights[direction] = False

    def revoke_all(self, color: Color) -> None:
        for direction in castling_directions_of(color):
            self.revoke(direction)

    def revoke_for_rook_square(self, color: Color, square: Square) -> None:
        """A rook of `color` left (or got taken on) `square`. Only matters if that is its home square."""
        for direction in castling_directions_of(color):
            if CASTLING_RULES[direction].rook_from == square:
                self.revoke(direction)

    def for_color(self, color: Color) -> dict[str, bool]:
        """{'king_side': ..., 'queen_side': ...} for snapshots"""
        return {
            ("king_side" if direction.is_king_side else "queen_side"): self.rights[direction]
            for direction in castling_directions_of(color)
        }
