"""Unit tests for syncchess/db/memory_repository.py"""

import threading

from syncchess.chess.game import Game
from syncchess.db.memory_repository import InMemoryRoomRepository


def test_get_or_create(room_repository: InMemoryRoomRepository) -> None:
    assert room_repository.get("a") is None
    room = room_repository.get_or_create("a", Game.new_game)
    assert room.room_id == "a"
    assert not room.closed
    assert room_repository.get("a") is room
    # a second call does not build another game
    assert room_repository.get_or_create("a", lambda: Game.new_game(time_control=1)) is room
    assert room.game.clock.time_control == 300


def test_delete(room_repository: InMemoryRoomRepository) -> None:
    room = room_repository.get_or_create("a", Game.new_game)
    room_repository.get_or_create("b", Game.new_game)
    assert room_repository.delete("a") is room
    assert room_repository.delete("a") is None
    assert room_repository.room_ids() == ["b"]


def test_rooms_have_their_own_locks(room_repository: InMemoryRoomRepository) -> None:
    first = room_repository.get_or_create("a", Game.new_game)
    second = room_repository.get_or_create("b", Game.new_game)
    with first.lock:
        assert second.lock.acquire(blocking=False)
        second.lock.release()


def test_concurrent_creation_yields_one_room(room_repository: InMemoryRoomRepository) -> None:
    barrier = threading.Barrier(8)
    rooms = []

    def create() -> None:
        barrier.wait()
        rooms.append(room_repository.get_or_create("shared", Game.new_game))

    threads = [threading.Thread(target=create) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len({id(room) for room in rooms}) == 1
    assert room_repository.room_ids() == ["shared"]
