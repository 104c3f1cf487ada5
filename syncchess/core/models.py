"""
Boundary layer data model(s).

The Game hands a GameSnapshot to the Service after every state change; the Service turns it into the response models
pushed to both players. Only plain strings / numbers / dicts in here, no domain objects.
"""

from dataclasses import dataclass, field
from typing import Optional

# Type aliases to make GameSnapshot easier to read
PieceColor = str
SquareName = str


@dataclass
class PieceSnapshot:
    color: str
    type: str
    identity: str


@dataclass
class TimerSnapshot:
    time_control: int
    remaining: dict[PieceColor, float]
    active: dict[PieceColor, bool]
    running: bool


@dataclass
class GameSnapshot:
    """Transport-safe representation of a room's game, pushed on every state change."""

    position: dict[SquareName, PieceSnapshot]
    board_fen: str
    in_check: dict[PieceColor, bool]
    last_moved_pieces: dict[PieceColor, Optional[str]]
    last_moves: dict[PieceColor, Optional[str]]
    castling_rights: dict[PieceColor, dict[str, bool]]
    en_passant_targets: dict[PieceColor, Optional[SquareName]]
    timers: TimerSnapshot
    round_number: int
    round_phase: str
    submitted: dict[PieceColor, bool]
    promotion_pending: list[PieceColor]
    seated: dict[PieceColor, bool]
    started: bool
    result: Optional[str] = None
    end_reason: Optional[str] = None
    history: list[dict[PieceColor, str]] = field(default_factory=list)
