"""
A square on the board

(placed in its own module as multiple other modules need to import it)
"""

from __future__ import annotations

from dataclasses import dataclass
from string import ascii_lowercase
from typing import Iterator

BOARD_DIMENSIONS = (8, 8)


def is_valid_square_name(name: str) -> bool:
    """'a1' - 'h8'. A letter for the file + a number for the rank."""
    if len(name) != 2:
        return False
    file_char, rank_char = name[0], name[1]
    if file_char not in ascii_lowercase[: BOARD_DIMENSIONS[0]]:
        return False
    return rank_char.isdigit() and 1 <= int(rank_char) <= BOARD_DIMENSIONS[1]


@dataclass(frozen=True, order=True)
class Square:
    file: int
    rank: int

    @classmethod
    def from_algebraic(cls, sq: str) -> Square:
        """Algebraic notation: 'a1' - 'h8' get converted to (1,1) - (8,8)"""
        file = ord(sq[0]) - ord("a") + 1
        rank = int(sq[1])
        return cls(file, rank)

    def to_algebraic(self) -> str:
        return f"{chr(self.file + ord('a') - 1)}{self.rank}"

    def is_within_bounds(self) -> bool:
        return (1 <= self.file <= BOARD_DIMENSIONS[0]) and (
            1 <= self.rank <= BOARD_DIMENSIONS[1]
        )

    def offset(self, df: int, dr: int) -> Square:
        """Square shifted by the given file/rank deltas. Can end up off the board, check with is_within_bounds()"""
        return Square(self.file + df, self.rank + dr)

    def __str__(self) -> str:
        return self.to_algebraic()


def all_squares() -> Iterator[Square]:
    """Every square on the board, a1, a2, ... h8"""
    for file in range(1, BOARD_DIMENSIONS[0] + 1):
        for rank in range(1, BOARD_DIMENSIONS[1] + 1):
            yield Square(file, rank)
