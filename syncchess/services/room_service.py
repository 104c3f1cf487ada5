"""Orchestration of communication from the transport layer to the game rooms (and the reverse direction)."""

import time
from typing import Callable, Optional

from loguru import logger

from syncchess.api.models import (
    GameStateResponse,
    JoinRoomRequest,
    JoinRoomResponse,
    LegalMovesResponse,
    PromotionRequest,
    SubmissionResponse,
    SubmitMoveRequest,
    UpdateSettingsRequest,
)
from syncchess.chess.game import Game
from syncchess.chess.moves import Move
from syncchess.chess.square import Square
from syncchess.core.config import Settings, get_settings
from syncchess.core.exceptions import InvalidRequestError, RoomNotFoundError
from syncchess.db.repository import Listener, Room, RoomRepository


class RoomService:
    """
    Orchestration of layers for simultaneous chess rooms.

    Every public method that changes a game does so while holding that room's lock, and then pushes the new state
    to the room's subscribers after releasing it.
    """

    def __init__(
        self,
        repository: RoomRepository,
        settings: Optional[Settings] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.repo = repository
        self.settings = settings or get_settings()
        self.clock = clock

    # -- Room lifecycle --
    def join(self, room_id: str, request: JoinRoomRequest) -> JoinRoomResponse:
        """
        A player enters a room.
        ----
        The first join creates the room (with the requested time control, or the configured default). The time
        control of an existing room is left alone, use `update_settings` for that.
        """
        player_id = request.player_id
        if request.time_control is not None:
            self._validate_time_control(request.time_control)
        initial_time_control = (
            self.settings.default_time_control if request.time_control is None else request.time_control
        )

        while True:
            room = self.repo.get_or_create(room_id, lambda: Game.new_game(time_control=initial_time_control))
            with room.lock:
                # torn down between lookup and lock: start over with a fresh room
                if room.closed:
                    continue
                color = room.game.seat_player(player_id, request.color, now=self.clock())
                state = self._state_of(room)
            break

        logger.info(f"Player {player_id!r} joined room {room_id!r} as {color}")
        self._notify(room, state)
        return JoinRoomResponse(room_id=room_id, player_id=player_id, color=color, state=state)

    def leave(self, room_id: str, player_id: str) -> None:
        """Disconnect handling. Once both seats are empty the room (and its clock) is gone."""
        room = self._fetch_room(room_id)
        with room.lock:
            self._assert_open(room)
            color = room.game.unseat_player(player_id)
            teardown = room.game.is_abandoned
            if teardown:
                room.closed = True
                room.game.clock.stop(self.clock())
                self.repo.delete(room_id)
            state = self._state_of(room)

        logger.info(f"Player {player_id!r} ({color}) left room {room_id!r}")
        if teardown:
            return
        self._notify(room, state)

    # -- Game actions --
    def submit_move(self, room_id: str, player_id: str, request: SubmitMoveRequest) -> SubmissionResponse:
        """Move attempt for the current round. Rejections raise MoveRejectedError and leave the room untouched."""
        move = Move(
            from_square=Square.from_algebraic(request.from_square),
            to_square=Square.from_algebraic(request.to_square),
            promote_to=request.promote_to,
        )

        room = self._fetch_room(room_id)
        with room.lock:
            self._assert_open(room)
            color = room.game.color_of(player_id)
            round_number = room.game.rounds.number
            resolved = room.game.submit_move(color, move, now=self.clock())
            promotion_required = room.game.rounds.is_promotion_pending(color)
            state = self._state_of(room)

        logger.info(f"Room {room_id!r}: {color} submitted a move for round {round_number}")
        self._log_progress(room_id, round_number, resolved, state)
        self._notify(room, state)
        return SubmissionResponse(promotion_required=promotion_required, round_resolved=resolved, state=state)

    def choose_promotion(self, room_id: str, player_id: str, request: PromotionRequest) -> SubmissionResponse:
        room = self._fetch_room(room_id)
        with room.lock:
            self._assert_open(room)
            color = room.game.color_of(player_id)
            round_number = room.game.rounds.number
            resolved = room.game.choose_promotion(
                color, Square.from_algebraic(request.square), request.piece_type, now=self.clock()
            )
            state = self._state_of(room)

        logger.info(f"Room {room_id!r}: {color} promotes to {request.piece_type} on {request.square}")
        self._log_progress(room_id, round_number, resolved, state)
        self._notify(room, state)
        return SubmissionResponse(promotion_required=False, round_resolved=resolved, state=state)

    def update_settings(self, room_id: str, player_id: str, request: UpdateSettingsRequest) -> GameStateResponse:
        """Change the time control. Only allowed before the first move of the game."""
        self._validate_time_control(request.time_control)

        room = self._fetch_room(room_id)
        with room.lock:
            self._assert_open(room)
            room.game.color_of(player_id)
            room.game.update_time_control(request.time_control, now=self.clock())
            state = self._state_of(room)

        logger.info(f"Room {room_id!r}: time control set to {request.time_control}s")
        self._notify(room, state)
        return state

    def get_state(self, room_id: str) -> GameStateResponse:
        room = self._fetch_room(room_id)
        with room.lock:
            self._assert_open(room)
            return self._state_of(room)

    def legal_moves(self, room_id: str, player_id: str) -> LegalMovesResponse:
        """Moves the player can still submit this round, in UCI notation. Empty once submitted or game over."""
        room = self._fetch_room(room_id)
        with room.lock:
            self._assert_open(room)
            color = room.game.color_of(player_id)
            moves = room.game.legal_moves(color)

        return LegalMovesResponse(
            room_id=room_id,
            player_id=player_id,
            color=color,
            legal_moves=[move.to_uci() for move in moves],
        )

    def subscribe(self, room_id: str, listener: Listener) -> Callable[[], None]:
        """Register a callback for every state change of the room. Returns a function that unsubscribes."""
        room = self._fetch_room(room_id)
        with room.lock:
            self._assert_open(room)
            room.listeners.append(listener)

        def unsubscribe() -> None:
            with room.lock:
                if listener in room.listeners:
                    room.listeners.remove(listener)

        return unsubscribe

    # -- Timers --
    def tick(self, room_id: str, now: Optional[float] = None) -> bool:
        """Timer tick for one room. Returns True if the game ended on time."""
        room = self._fetch_room(room_id)
        with room.lock:
            self._assert_open(room)
            if room.game.is_over or not room.game.clock.running:
                return False
            timed_out = room.game.tick(self.clock() if now is None else now)
            state = self._state_of(room)

        if timed_out:
            logger.info(f"Room {room_id!r}: game over on time, result: {state.result}")
        self._notify(room, state)
        return timed_out

    def tick_all(self, now: Optional[float] = None) -> list[str]:
        """Tick every live room. Returns the IDs of the rooms whose game ended on time."""
        timed_out = []
        for room_id in self.repo.room_ids():
            try:
                if self.tick(room_id, now):
                    timed_out.append(room_id)
            except RoomNotFoundError:
                # removed while iterating
                continue
        return timed_out

    # -- Internal helpers --
    def _fetch_room(self, room_id: str) -> Room:
        """Attempt to find the room in the repository and raise error if it fails."""
        room = self.repo.get(room_id)
        if room is None:
            raise RoomNotFoundError(f"Room with {room_id=} not found.")
        return room

    def _assert_open(self, room: Room) -> None:
        if room.closed:
            raise RoomNotFoundError(f"Room with room_id={room.room_id!r} not found.")

    def _validate_time_control(self, seconds: int) -> None:
        if seconds < 0 or seconds > self.settings.max_time_control:
            raise InvalidRequestError(
                f"time_control must be between 0 and {self.settings.max_time_control} seconds, got {seconds}."
            )

    def _state_of(self, room: Room) -> GameStateResponse:
        return GameStateResponse.from_snapshot(room.room_id, room.game.snapshot())

    def _log_progress(self, room_id: str, round_number: int, resolved: bool, state: GameStateResponse) -> None:
        if resolved:
            logger.info(
                f"Room {room_id!r}: round {round_number} resolved "
                f"(white {state.last_moves['white']}, black {state.last_moves['black']})"
            )
        if state.result is not None:
            logger.info(f"Room {room_id!r}: game over, result: {state.result} ({state.end_reason})")

    def _notify(self, room: Room, state: GameStateResponse) -> None:
        """Push the state to subscribers. A failing subscriber is logged and does not affect the others."""
        with room.lock:
            listeners = list(room.listeners)
        for listener in listeners:
            try:
                listener(room.room_id, state)
            except Exception:
                logger.exception(f"Subscriber of room {room.room_id!r} failed")
