"""The Board holds the position: which piece (with its identity) stands on which square."""

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Iterable, Optional, Self

from syncchess.chess.pieces import FEN_TO_PIECE, Piece, make_identity
from syncchess.chess.square import BOARD_DIMENSIONS, Square
from syncchess.core.exceptions import InvalidFENError
from syncchess.core.shared_types import Color, PieceType

STARTING_POSITION_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR"


def is_valid_placement(fen_str: str) -> bool:
    """Only check the part of the FEN encoding for the board position."""
    num_files, num_ranks = BOARD_DIMENSIONS
    rank_fens = fen_str.split("/")
    if len(rank_fens) != num_ranks:
        return False

    for rank_fen in rank_fens:
        file_count = 0
        for character in rank_fen:
            if character.isdigit():
                file_count += int(character)
            elif character.lower() in FEN_TO_PIECE:
                file_count += 1
            else:
                return False

        if file_count != num_files:
            return False
    return True


@dataclass
class Board:
    """
    Sparse mapping of occupied squares to pieces. Unoccupied squares are simply missing.

    Moving a piece only changes which square points to the Piece record, the record (and its identity) stays the same.
    """

    position: dict[Square, Piece] = field(default_factory=dict)

    @classmethod
    def from_fen(cls, fen_str: str) -> Self:
        """Construct a board using the placement part of a FEN string.

        ex. standard starting position:
        rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR
        * ranks are listed from the 8th down to the 1st, separated by '/'
        * within a rank, files run a -> h
        * a digit means that many empty squares

        Every piece gets an identity based on the square it is placed on (see `make_identity`).
        """
        if not is_valid_placement(fen_str):
            raise InvalidFENError(f"Cannot interpret supplied string as a board position: {fen_str!r}")

        position: dict[Square, Piece] = {}
        for rank_idx, fen_one_rank in enumerate(fen_str.split("/")):
            rank = BOARD_DIMENSIONS[1] - rank_idx
            file = 1
            for character in fen_one_rank:
                if character.isalpha():
                    square = Square(file, rank)
                    color = Color.WHITE if character.isupper() else Color.BLACK
                    identity = make_identity(
                        color, FEN_TO_PIECE[character.lower()], square.to_algebraic()
                    )
                    position[square] = Piece.from_fen(character, identity)
                    file += 1
                else:
                    file += int(character)
        return cls(position)

    @classmethod
    def starting_position(cls) -> Self:
        return cls.from_fen(STARTING_POSITION_FEN)

    def to_fen(self) -> str:
        """Ranks are separated by slashes in FEN string."""
        return "/".join(
            self._rank_to_fen(rank) for rank in range(BOARD_DIMENSIONS[1], 0, -1)
        )

    def _rank_to_fen(self, rank: int) -> str:
        fen_characters: list[str] = []
        empty_count = 0
        for file in range(1, BOARD_DIMENSIONS[0] + 1):
            piece = self.piece(Square(file, rank))
            if piece is None:
                empty_count += 1
                continue

            if empty_count > 0:
                fen_characters.append(str(empty_count))
                empty_count = 0
            fen_characters.append(piece.to_fen())

        if empty_count > 0:
            fen_characters.append(str(empty_count))
        return "".join(fen_characters)

    def copy(self) -> "Board":
        """Deep copy: pieces get promoted in place, so the records must not be shared between boards."""
        return deepcopy(self)

    # --- QUERIES ---
    def piece(self, square: Square) -> Optional[Piece]:
        return self.position.get(square)

    def is_empty(self, square: Square) -> bool:
        return square not in self.position

    def is_any_occupied(self, squares: Iterable[Square]) -> bool:
        return any(not self.is_empty(square) for square in squares)

    def locate_color(self, color: Color) -> list[Square]:
        return [
            square for square, piece in self.position.items() if piece.color == color
        ]

    def find_king(self, color: Color) -> Optional[Square]:
        """A king can get eliminated in this variant, hence Optional"""
        return next(
            (
                square
                for square, piece in self.position.items()
                if piece.color == color and piece.type == PieceType.KING
            ),
            None,
        )

    def has_king(self, color: Color) -> bool:
        return self.find_king(color) is not None

    def locate_identity(self, identity: str) -> Optional[Square]:
        return next(
            (
                square
                for square, piece in self.position.items()
                if piece.identity == identity
            ),
            None,
        )

    # --- UPDATES ---
    def place_piece(self, piece: Piece, square: Square) -> None:
        self.position[square] = piece

    def remove_piece(self, square: Square) -> Optional[Piece]:
        return self.position.pop(square, None)

    def move_piece(self, from_square: Square, to_square: Square) -> Optional[Piece]:
        """Move whatever stands on from_square. Returns the piece that got replaced on to_square (if any)."""
        piece_that_moved = self.position.pop(from_square)
        captured = self.position.get(to_square)
        self.position[to_square] = piece_that_moved
        return captured
