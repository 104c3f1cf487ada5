"""Requests and Response models"""

from typing import Optional, Self

from pydantic import BaseModel, field_validator

from syncchess.chess.square import is_valid_square_name
from syncchess.core.exceptions import InvalidRequestError
from syncchess.core.models import GameSnapshot
from syncchess.core.shared_types import Color, PieceType

PieceColor = str
SquareName = str


def _validate_square_name(value: str) -> str:
    if not is_valid_square_name(value):
        raise InvalidRequestError(f"Cannot interpret {value!r} as a valid square name.")
    return value


# --- REQUEST MODELS ---
class JoinRoomRequest(BaseModel):
    player_id: str
    color: Optional[Color] = None
    time_control: Optional[int] = None

    @field_validator("player_id")
    @classmethod
    def validate_player_id(cls, value: str) -> str:
        if not value.strip():
            raise InvalidRequestError("player_id cannot be empty.")
        return value

    @field_validator("time_control")
    @classmethod
    def validate_time_control(cls, value: Optional[int]) -> Optional[int]:
        if value is not None and value < 0:
            raise InvalidRequestError(f"time_control must be a non-negative number of seconds, got {value}.")
        return value


class SubmitMoveRequest(BaseModel):
    from_square: str
    to_square: str
    promote_to: Optional[PieceType] = None

    @field_validator(*["from_square", "to_square"])
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


class PromotionRequest(BaseModel):
    square: str
    piece_type: PieceType

    @field_validator("square")
    @classmethod
    def validate_square(cls, value: str) -> str:
        return _validate_square_name(value)


class UpdateSettingsRequest(BaseModel):
    time_control: int

    @field_validator("time_control")
    @classmethod
    def validate_time_control(cls, value: int) -> int:
        if value < 0:
            raise InvalidRequestError(f"time_control must be a non-negative number of seconds, got {value}.")
        return value


# --- RESPONSE MODELS ---
class PieceResponse(BaseModel):
    color: Color
    type: PieceType
    identity: str


class TimerResponse(BaseModel):
    time_control: int
    remaining: dict[PieceColor, float]
    active: dict[PieceColor, bool]
    running: bool


class GameStateResponse(BaseModel):
    room_id: str
    position: dict[SquareName, PieceResponse]
    board_fen: str
    in_check: dict[PieceColor, bool]
    last_moved_pieces: dict[PieceColor, Optional[str]]
    last_moves: dict[PieceColor, Optional[str]]
    castling_rights: dict[PieceColor, dict[str, bool]]
    en_passant_targets: dict[PieceColor, Optional[SquareName]]
    timers: TimerResponse
    round_number: int
    round_phase: str
    submitted: dict[PieceColor, bool]
    promotion_pending: list[PieceColor]
    seated: dict[PieceColor, bool]
    started: bool
    result: Optional[str] = None
    end_reason: Optional[str] = None
    history: list[dict[PieceColor, str]] = []

    @classmethod
    def from_snapshot(cls, room_id: str, snapshot: GameSnapshot) -> Self:
        return cls(
            room_id=room_id,
            position={
                square: PieceResponse(color=Color(piece.color), type=PieceType(piece.type), identity=piece.identity)
                for square, piece in snapshot.position.items()
            },
            board_fen=snapshot.board_fen,
            in_check=snapshot.in_check,
            last_moved_pieces=snapshot.last_moved_pieces,
            last_moves=snapshot.last_moves,
            castling_rights=snapshot.castling_rights,
            en_passant_targets=snapshot.en_passant_targets,
            timers=TimerResponse(
                time_control=snapshot.timers.time_control,
                remaining=snapshot.timers.remaining,
                active=snapshot.timers.active,
                running=snapshot.timers.running,
            ),
            round_number=snapshot.round_number,
            round_phase=snapshot.round_phase,
            submitted=snapshot.submitted,
            promotion_pending=snapshot.promotion_pending,
            seated=snapshot.seated,
            started=snapshot.started,
            result=snapshot.result,
            end_reason=snapshot.end_reason,
            history=snapshot.history,
        )


class JoinRoomResponse(BaseModel):
    room_id: str
    player_id: str
    color: Color
    state: GameStateResponse


class SubmissionResponse(BaseModel):
    """Answer to the submitting player. The full state goes to subscribers as well."""

    promotion_required: bool
    round_resolved: bool
    state: GameStateResponse


class LegalMovesResponse(BaseModel):
    room_id: str
    player_id: str
    color: Color
    legal_moves: list[str]
