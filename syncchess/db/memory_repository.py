"""Implementation of (Room)Repository keeping everything in a dictionary"""

import threading
from typing import Callable

from loguru import logger

from syncchess.chess.game import Game
from syncchess.db.repository import Room


class InMemoryRoomRepository:
    """
    Rooms stored in a dict.

    The registry lock only guards the dict itself (lookup / insert / delete). Game mutation is guarded by each
    room's own lock, so one busy room never blocks another.
    """

    def __init__(self) -> None:
        self._rooms: dict[str, Room] = {}
        self._registry_lock = threading.Lock()

    def get_or_create(self, room_id: str, factory: Callable[[], Game]) -> Room:
        with self._registry_lock:
            room = self._rooms.get(room_id)
            if room is None:
                room = Room(room_id=room_id, game=factory())
                self._rooms[room_id] = room
                logger.info(f"Room {room_id!r} created")
            return room

    def get(self, room_id: str) -> Room | None:
        with self._registry_lock:
            return self._rooms.get(room_id)

    def delete(self, room_id: str) -> Room | None:
        with self._registry_lock:
            room = self._rooms.pop(room_id, None)
        if room is not None:
            logger.info(f"Room {room_id!r} removed")
        return room

    def room_ids(self) -> list[str]:
        with self._registry_lock:
            return list(self._rooms)

    def clear(self) -> None:
        with self._registry_lock:
            self._rooms.clear()
