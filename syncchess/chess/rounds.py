"""
Round lifecycle and the chess clocks.

The round phase is an explicit state with a fixed set of allowed transitions. Events that do not fit the current phase
are refused with a GameStateError instead of being silently absorbed.

    WAITING_BOTH -> ONE_SUBMITTED / PROMOTION_PENDING -> BOTH_SUBMITTED -> RESOLVED -> WAITING_BOTH (next round)

FINISHED is reachable from every phase (checkmate, timeout, ...) and is final.
"""

from dataclasses import dataclass, field
from enum import StrEnum

from syncchess.core.exceptions import GameStateError
from syncchess.core.shared_types import Color


class RoundPhase(StrEnum):
    WAITING_BOTH = "waiting for both"
    ONE_SUBMITTED = "one submitted"
    PROMOTION_PENDING = "promotion pending"
    BOTH_SUBMITTED = "both submitted"
    RESOLVED = "resolved"
    FINISHED = "finished"


class SubmissionStatus(StrEnum):
    NONE = "none"
    PROMOTION_PENDING = "promotion pending"
    COMPLETE = "complete"


ALLOWED_TRANSITIONS: dict[RoundPhase, frozenset[RoundPhase]] = {
    RoundPhase.WAITING_BOTH: frozenset(
        {RoundPhase.ONE_SUBMITTED, RoundPhase.PROMOTION_PENDING, RoundPhase.FINISHED}
    ),
    RoundPhase.ONE_SUBMITTED: frozenset(
        {RoundPhase.PROMOTION_PENDING, RoundPhase.BOTH_SUBMITTED, RoundPhase.FINISHED}
    ),
    # the other color submitting while one color still has to choose keeps us waiting on the promotion
    RoundPhase.PROMOTION_PENDING: frozenset(
        {
            RoundPhase.PROMOTION_PENDING,
            RoundPhase.ONE_SUBMITTED,
            RoundPhase.BOTH_SUBMITTED,
            RoundPhase.FINISHED,
        }
    ),
    RoundPhase.BOTH_SUBMITTED: frozenset({RoundPhase.RESOLVED, RoundPhase.FINISHED}),
    RoundPhase.RESOLVED: frozenset({RoundPhase.WAITING_BOTH, RoundPhase.FINISHED}),
    RoundPhase.FINISHED: frozenset(),
}


def _no_submissions() -> dict[Color, SubmissionStatus]:
    return {color: SubmissionStatus.NONE for color in Color}


@dataclass
class RoundState:
    number: int = 1
    phase: RoundPhase = RoundPhase.WAITING_BOTH
    submissions: dict[Color, SubmissionStatus] = field(default_factory=_no_submissions)

    # --- EVENTS ---
    def submit(self, color: Color, needs_promotion: bool) -> None:
        """A validated move arrived for `color`. Without a promotion choice (when one is needed) it is not complete yet."""
        self._assert_accepting_submissions()
        if self.submissions[color] != SubmissionStatus.NONE:
            raise GameStateError(f"{color} already submitted a move for round {self.number}.")

        self.submissions[color] = (
            SubmissionStatus.PROMOTION_PENDING if needs_promotion else SubmissionStatus.COMPLETE
        )
        self._transition(self._phase_from_submissions())

    def complete_promotion(self, color: Color) -> None:
        self._assert_accepting_submissions()
        if self.submissions[color] != SubmissionStatus.PROMOTION_PENDING:
            raise GameStateError(f"{color} has no move waiting for a promotion choice.")

        self.submissions[color] = SubmissionStatus.COMPLETE
        self._transition(self._phase_from_submissions())

    def mark_resolved(self) -> None:
        self._transition(RoundPhase.RESOLVED)

    def start_next_round(self) -> None:
        self._transition(RoundPhase.WAITING_BOTH)
        self.number += 1
        self.submissions = _no_submissions()

    def finish(self) -> None:
        self._transition(RoundPhase.FINISHED)

    # --- QUERIES ---
    def is_complete(self, color: Color) -> bool:
        return self.submissions[color] == SubmissionStatus.COMPLETE

    def is_promotion_pending(self, color: Color) -> bool:
        return self.submissions[color] == SubmissionStatus.PROMOTION_PENDING

    @property
    def both_complete(self) -> bool:
        return all(self.is_complete(color) for color in Color)

    @property
    def is_finished(self) -> bool:
        return self.phase == RoundPhase.FINISHED

    @property
    def promotion_pending_colors(self) -> list[Color]:
        return [color for color in Color if self.is_promotion_pending(color)]

    # --- HELPERS ---
    def _assert_accepting_submissions(self) -> None:
        if self.phase not in (
            RoundPhase.WAITING_BOTH,
            RoundPhase.ONE_SUBMITTED,
            RoundPhase.PROMOTION_PENDING,
        ):
            raise GameStateError(f"Round {self.number} is not accepting moves. phase: {self.phase}")

    def _phase_from_submissions(self) -> RoundPhase:
        if self.both_complete:
            return RoundPhase.BOTH_SUBMITTED
        if self.promotion_pending_colors:
            return RoundPhase.PROMOTION_PENDING
        if any(self.is_complete(color) for color in Color):
            return RoundPhase.ONE_SUBMITTED
        return RoundPhase.WAITING_BOTH

    def _transition(self, new_phase: RoundPhase) -> None:
        if new_phase not in ALLOWED_TRANSITIONS[self.phase]:
            raise GameStateError(f"Cannot go from {self.phase!r} to {new_phase!r}.")
        self.phase = new_phase


@dataclass
class Clock:
    """
    One countdown per color, in seconds.
    ----

    * time_control == 0: no time limit, nothing is ever decremented
    * time is charged from wall-clock differences (`now` - last update), so irregular ticks stay correct
    * before the active flags change, the time up to that moment is charged to the colors that were running
    """

    time_control: int
    remaining: dict[Color, float] = field(default_factory=dict)
    active: dict[Color, bool] = field(default_factory=lambda: {color: False for color in Color})
    running: bool = False
    last_update: float = 0.0

    def __post_init__(self) -> None:
        if self.time_control < 0:
            raise ValueError(f"time control must be non-negative, got {self.time_control}")
        if not self.remaining:
            self.remaining = {color: float(self.time_control) for color in Color}

    @property
    def unlimited(self) -> bool:
        return self.time_control == 0

    def set_time_control(self, seconds: int) -> None:
        if seconds < 0:
            raise ValueError(f"time control must be non-negative, got {seconds}")
        self.time_control = seconds
        self.remaining = {color: float(seconds) for color in Color}

    def start(self, now: float) -> None:
        self.running = True
        self.last_update = now

    def stop(self, now: float) -> None:
        self._charge(now)
        self.running = False
        self.active = {color: False for color in Color}

    def set_active(self, active: dict[Color, bool], now: float) -> None:
        self._charge(now)
        self.active = dict(active)

    def tick(self, now: float) -> list[Color]:
        """Charge elapsed time and return the colors that ran out of time"""
        self._charge(now)
        if self.unlimited:
            return []
        return [color for color in Color if self.remaining[color] <= 0]

    def _charge(self, now: float) -> None:
        if self.running and not self.unlimited:
            elapsed = max(0.0, now - self.last_update)
            for color in Color:
                if self.active[color]:
                    self.remaining[color] = max(0.0, self.remaining[color] - elapsed)
        self.last_update = now
