"""Defines the chess pieces and their persistent identity"""

from dataclasses import dataclass
from typing import Self

from syncchess.core.shared_types import Color, PieceType

FEN_TO_PIECE: dict[str, PieceType] = {
    "p": PieceType.PAWN,
    "n": PieceType.KNIGHT,
    "b": PieceType.BISHOP,
    "r": PieceType.ROOK,
    "q": PieceType.QUEEN,
    "k": PieceType.KING,
}

PIECE_TO_FEN: dict[PieceType, str] = {value: key for key, value in FEN_TO_PIECE.items()}

COLOR_TO_CHAR: dict[Color, str] = {Color.WHITE: "w", Color.BLACK: "b"}


def make_identity(color: Color, piece_type: PieceType, square_name: str) -> str:
    """
    Identity token of a piece: color + piece letter + the square it stood on when the position was set up.
    ex) 'wPe2' for the white e-pawn, 'bNg8' for black's king-side knight.
    """
    return f"{COLOR_TO_CHAR[color]}{PIECE_TO_FEN[piece_type].upper()}{square_name}"


@dataclass
class Piece:
    """
    A piece on the board.

    NOTE: `identity` is assigned once and never changes, not even on promotion. It is what the
    repeat-move rule tracks, not the square the piece is standing on.
    """

    type: PieceType
    color: Color
    identity: str

    @classmethod
    def from_fen(cls, character: str, identity: str) -> Self:
        # lower case: Black pieces, upper case: White pieces
        color = Color.WHITE if character.isupper() else Color.BLACK
        piece_type = FEN_TO_PIECE[character.lower()]
        return cls(piece_type, color, identity)

    def to_fen(self) -> str:
        return (
            PIECE_TO_FEN[self.type].upper()
            if self.color == Color.WHITE
            else PIECE_TO_FEN[self.type].lower()
        )

    def promote_to(self, new_type: PieceType) -> None:
        self.type = new_type
