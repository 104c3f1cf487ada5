"""Protocol repository for live rooms (an in-memory implementation lives next to it)"""

import threading
from dataclasses import dataclass, field
from typing import Callable, Iterable, Protocol

from syncchess.api.models import GameStateResponse
from syncchess.chess.game import Game

# Called with (room_id, state) after every state change
Listener = Callable[[str, GameStateResponse], None]


@dataclass
class Room:
    """A live game plus the lock that serialises every mutation of it"""

    room_id: str
    game: Game
    lock: threading.Lock = field(default_factory=threading.Lock)
    listeners: list[Listener] = field(default_factory=list)
    closed: bool = False


class RoomRepository(Protocol):
    """Room table orchestration"""

    def get_or_create(self, room_id: str, factory: Callable[[], Game]) -> Room:
        """Get room by ID, create it with a fresh Game from `factory` if it does not exist yet."""
        ...

    def get(self, room_id: str) -> Room | None:
        """Get room by ID, if it exists."""
        ...

    def delete(self, room_id: str) -> Room | None:
        """Remove a room."""
        ...

    def room_ids(self) -> Iterable[str]:
        """IDs of all live rooms."""
        ...
