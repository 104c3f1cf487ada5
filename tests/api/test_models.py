"""Unit tests for syncchess/api/models.py"""

import pytest
from pydantic import ValidationError

from syncchess.api.models import (
    GameStateResponse,
    JoinRoomRequest,
    PromotionRequest,
    SubmitMoveRequest,
    UpdateSettingsRequest,
)
from syncchess.chess.game import Game
from syncchess.core.shared_types import Color, PieceType


@pytest.mark.parametrize("square", ["e2", "a1", "h8"])
def test_valid_squares(square: str) -> None:
    request = SubmitMoveRequest(from_square=square, to_square="e4")
    assert request.from_square == square
    assert request.promote_to is None


@pytest.mark.parametrize("square", ["e9", "i2", "e", "E2", "2e", "e22", ""])
def test_invalid_squares(square: str) -> None:
    """InvalidRequestError is a ValueError, so it surfaces as a pydantic ValidationError"""
    with pytest.raises(ValidationError):
        SubmitMoveRequest(from_square=square, to_square="e4")
    with pytest.raises(ValidationError):
        SubmitMoveRequest(from_square="e2", to_square=square)
    with pytest.raises(ValidationError):
        PromotionRequest(square=square, piece_type=PieceType.QUEEN)


def test_piece_types_are_parsed() -> None:
    request = SubmitMoveRequest(from_square="a7", to_square="a8", promote_to="queen")
    assert request.promote_to == PieceType.QUEEN
    with pytest.raises(ValidationError):
        PromotionRequest(square="a8", piece_type="dragon")


@pytest.mark.parametrize("time_control", [-1, -300])
def test_negative_time_control(time_control: int) -> None:
    with pytest.raises(ValidationError):
        UpdateSettingsRequest(time_control=time_control)
    with pytest.raises(ValidationError):
        JoinRoomRequest(player_id="alice", time_control=time_control)


def test_join_request() -> None:
    request = JoinRoomRequest(player_id="alice", color="black")
    assert request.color == Color.BLACK
    assert request.time_control is None
    with pytest.raises(ValidationError):
        JoinRoomRequest(player_id="   ")


def test_state_response_from_snapshot() -> None:
    game = Game.new_game(time_control=120)
    response = GameStateResponse.from_snapshot("room-1", game.snapshot())
    assert response.room_id == "room-1"
    assert len(response.position) == 32
    assert response.position["e1"].type == PieceType.KING
    assert response.position["e1"].color == Color.WHITE
    assert response.position["g8"].identity == "bNg8"
    assert response.timers.remaining == {"white": 120.0, "black": 120.0}
    assert not response.timers.running
    assert response.round_phase == "waiting for both"
    assert response.result is None
    assert response.history == []
