from __future__ import annotations

import logging
import uuid
from threading import RLock
from typing import Callable

from ..config import Config
from .errors import GameError
from .models import Room, now_ms
from .voting import Scheduler, VotingController


logger = logging.getLogger(__name__)


def normalize_code(raw: object) -> str:
    return str(raw or "").strip().upper()


class RoomRegistry:
    """All live rooms, keyed by code.

    The registry lock only guards the code map; room state is guarded by
    each room's own lock.
    """

    def __init__(self, scheduler: Scheduler, on_removed: Callable[[str], None] | None = None):
        self._scheduler = scheduler
        self._on_removed = on_removed
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def codes(self) -> list[str]:
        with self._lock:
            return list(self._rooms)

    def _new_room(self, code: str) -> Room:
        return Room(code=code, voting=VotingController(self._scheduler))

    def _closed(self, code: str) -> None:
        # Runs under the registry lock so a re-created room at the same code
        # is never created before the old one is closed.
        if self._on_removed is not None:
            self._on_removed(code)

    def create(self) -> str:
        with self._lock:
            code = uuid.uuid4().hex[:8].upper()
            while code in self._rooms:
                code = uuid.uuid4().hex[:8].upper()

            self._rooms[code] = self._new_room(code)
            logger.info("room created: %s", code)
            return code

    def lookup(self, code: str) -> Room | None:
        with self._lock:
            return self._rooms.get(code)

    def get(self, code: str) -> Room:
        room = self.lookup(code)
        if room is None:
            raise GameError("room_not_found", f'Room "{code}" not found. It may have expired or the code is wrong.')
        return room

    def get_or_create(self, code: str, allow_create: bool) -> Room:
        with self._lock:
            room = self._rooms.get(code)
            if room is not None:
                return room
            if not allow_create:
                raise GameError(
                    "room_not_found", f'Room "{code}" not found. It may have expired or the code is wrong.'
                )
            room = self._new_room(code)
            self._rooms[code] = room
            logger.info("room re-created by host: %s", code)
            return room

    def remove(self, code: str, room: Room | None = None) -> bool:
        """Deletes the room at ``code``; when ``room`` is given, only if it is still that room."""
        with self._lock:
            current = self._rooms.get(code)
            if current is None or (room is not None and current is not room):
                return False
            current.voting.cancel()
            del self._rooms[code]
            self._closed(code)
            logger.info("room removed: %s", code)
            return True

    def sweep_expired(self, ttl_sec: int, now: int | None = None) -> list[str]:
        now = now_ms() if now is None else now
        removed = []
        with self._lock:
            for code, room in list(self._rooms.items()):
                if now - room.created_at_ms > ttl_sec * 1000:
                    room.voting.cancel()
                    del self._rooms[code]
                    self._closed(code)
                    removed.append(code)
        for code in removed:
            logger.info("room expired and removed: %s", code)
        return removed

    def start_sweeper(
        self,
        interval_sec: int = Config.ROOM_SWEEP_INTERVAL_SEC,
        ttl_sec: int = Config.ROOM_TTL_SEC,
    ) -> None:
        if interval_sec <= 0:
            return

        def _runner() -> None:
            while True:
                self._scheduler.sleep(interval_sec)
                try:
                    self.sweep_expired(ttl_sec)
                except Exception:
                    logger.exception("room sweep failed")

        self._scheduler.start_background_task(_runner)
