"""Wires settings, logging, storage and the room service together. A transport layer starts from here."""

from typing import Optional

from syncchess.core.config import Settings, get_settings
from syncchess.core.logging import setup_logging
from syncchess.db.memory_repository import InMemoryRoomRepository
from syncchess.services.room_service import RoomService


def create_room_service(settings: Optional[Settings] = None) -> RoomService:
    settings = settings or get_settings()
    setup_logging(level=settings.log_level, log_file=settings.log_file)
    return RoomService(InMemoryRoomRepository(), settings=settings)
