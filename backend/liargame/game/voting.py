from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Mapping, Protocol


logger = logging.getLogger(__name__)


class Scheduler(Protocol):
    """What the controller needs from the async runtime.

    ``flask_socketio.SocketIO`` satisfies this as is.
    """

    def start_background_task(self, target: Callable[..., Any], *args: Any, **kwargs: Any) -> Any: ...

    def sleep(self, seconds: float) -> Any: ...


@dataclass(frozen=True)
class VoteTally:
    tally: dict[str, int]
    eliminated: str | None
    tied: bool


def tally_votes(votes: Mapping[str, str]) -> VoteTally:
    """Strict maximum is eliminated; a tie at the top eliminates no one.

    An empty ballot box is not a tie.
    """
    tally: dict[str, int] = {}
    for target_id in votes.values():
        tally[target_id] = tally.get(target_id, 0) + 1

    if not tally:
        return VoteTally(tally={}, eliminated=None, tied=False)

    top = max(tally.values())
    leaders = [target_id for target_id, count in tally.items() if count == top]
    if len(leaders) > 1:
        return VoteTally(tally=tally, eliminated=None, tied=True)
    return VoteTally(tally=tally, eliminated=leaders[0], tied=False)


class VotingController:
    """Owns a room's single vote deadline.

    Each ``schedule`` call opens a new phase. A phase resolves at most once:
    whoever calls ``claim`` first (the quorum check or the deadline callback)
    wins, and every later claim for that phase returns False. Background
    tasks cannot be killed, so cancelling only disarms the phase and the
    sleeping worker turns into a no-op when it wakes.
    """

    def __init__(self, scheduler: Scheduler):
        self._scheduler = scheduler
        self._lock = Lock()
        self._phase = 0
        self._armed = False

    @property
    def phase(self) -> int:
        return self._phase

    @property
    def pending(self) -> bool:
        return self._armed

    def schedule(self, delay: float, on_deadline: Callable[[int], None]) -> int:
        with self._lock:
            if self._armed:
                logger.debug("replacing pending vote deadline for phase %s", self._phase)
            self._phase += 1
            self._armed = True
            phase = self._phase

        self._scheduler.start_background_task(self._worker, phase, delay, on_deadline)
        return phase

    def cancel(self) -> bool:
        with self._lock:
            was_armed = self._armed
            self._armed = False
            return was_armed

    def claim(self, phase: int | None = None) -> bool:
        with self._lock:
            if not self._armed:
                return False
            if phase is not None and phase != self._phase:
                return False
            self._armed = False
            return True

    def _worker(self, phase: int, delay: float, on_deadline: Callable[[int], None]) -> None:
        self._scheduler.sleep(delay)
        try:
            on_deadline(phase)
        except Exception:
            logger.exception("vote deadline callback failed (phase=%s)", phase)
