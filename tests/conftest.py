"""
Pytest will auto-discover / import this file called 'conftest.py'.
This file defines fixtures required for testing multiple layers.
"""

from typing import Callable, Iterator, Optional

import pytest

from syncchess.chess.game import Game
from syncchess.chess.moves import Move
from syncchess.core.shared_types import Color
from syncchess.db.memory_repository import InMemoryRoomRepository

WHITE_PLAYER = "alice"
BLACK_PLAYER = "bob"

GameFactory = Callable[..., Game]
RoundPlayer = Callable[[Game, str, str], bool]


@pytest.fixture
def make_game() -> GameFactory:
    """Create a game with both players seated. Unlimited time unless asked otherwise, so the clock never interferes."""

    def _make_game(
        fen: Optional[str] = None, castling: str = "KQkq", time_control: int = 0
    ) -> Game:
        game = Game.new_game(time_control=time_control, starting_fen=fen, castling_fen=castling)
        game.seat_player(WHITE_PLAYER, Color.WHITE, now=0.0)
        game.seat_player(BLACK_PLAYER, Color.BLACK, now=0.0)
        return game

    return _make_game


@pytest.fixture
def play_round() -> RoundPlayer:
    """Submit a white and a black move (UCI notation). Returns whether the round got resolved."""

    def _play_round(game: Game, white_uci: str, black_uci: str) -> bool:
        game.submit_move(Color.WHITE, Move.from_uci(white_uci), now=0.0)
        return game.submit_move(Color.BLACK, Move.from_uci(black_uci), now=0.0)

    return _play_round


@pytest.fixture
def room_repository() -> Iterator[InMemoryRoomRepository]:
    """Ensures to clear the repository between tests"""
    repo = InMemoryRoomRepository()
    try:
        yield repo
    finally:
        repo.clear()
