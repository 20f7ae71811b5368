from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Protocol

from ..game import service
from ..game.errors import GameError
from ..game.models import Notice, Room
from ..game.registry import RoomRegistry
from ..game.voting import Scheduler
from .events import JoinRoom, RoomAction, SendChat, SubmitVote


logger = logging.getLogger(__name__)


class Transport(Scheduler, Protocol):
    def emit(self, event: str, payload: Any, to: str) -> None: ...

    def enter_room(self, sid: str, room_code: str) -> None: ...

    def leave_room(self, sid: str, room_code: str) -> None: ...

    def close_room(self, room_code: str) -> None: ...


@dataclass(frozen=True)
class Binding:
    room: Room
    player_id: str
    nickname: str

    @property
    def room_code(self) -> str:
        return self.room.code


class ConnectionGateway:
    """Binds connections to (room, player) and routes their events into rooms.

    Every room-scoped event runs under that room's lock, including delivery
    of the notices it produces, so members see a room's events in the order
    they were applied. A binding points at a room object, not a code: once
    that room is removed the binding is stale even if the code is reused.
    """

    def __init__(self, registry: RoomRegistry, transport: Transport, rng: random.Random | None = None):
        self.registry = registry
        self.transport = transport
        self._rng = rng
        self._lock = Lock()
        self._bindings: dict[str, Binding] = {}
        self._joining: set[str] = set()

    def binding(self, sid: str) -> Binding | None:
        with self._lock:
            return self._bindings.get(sid)

    def _deliver(self, room: Room, notices: list[Notice]) -> None:
        for n in notices:
            self.transport.emit(n.event, n.payload, to=n.to or room.code)

    def _reject(self, sid: str, err: GameError) -> None:
        logger.debug("rejected event from %s: %s", sid, err)
        self.transport.emit("error", err.payload(), to=sid)

    def _is_live(self, room: Room) -> bool:
        return self.registry.lookup(room.code) is room

    def _is_current(self, sid: str, binding: Binding) -> bool:
        return self._is_live(binding.room) and binding.room.find_player(sid) is not None

    def _reserve(self, sid: str) -> None:
        """Marks ``sid`` as joining; only one join per connection can be in flight or bound."""
        existing = self.binding(sid)
        if existing is not None and not self._is_current(sid, existing):
            with self._lock:
                if self._bindings.get(sid) is existing:
                    del self._bindings[sid]
            self.transport.leave_room(sid, existing.room_code)
            logger.debug("dropped stale binding of %s to room %s", sid, existing.room_code)

        with self._lock:
            if sid in self._bindings or sid in self._joining:
                raise GameError("already_in_room")
            self._joining.add(sid)

    def join(self, sid: str, data: Any) -> bool:
        try:
            req = JoinRoom.parse(data)
            self._reserve(sid)
            try:
                room = self.registry.get_or_create(req.room_id, req.create_if_not_exists)
                with room.lock:
                    if not self._is_live(room):
                        raise GameError("room_not_found")
                    notices = service.join(room, sid, req.nickname, req.avatar)
                    with self._lock:
                        self._bindings[sid] = Binding(room, sid, req.nickname)
                    self.transport.enter_room(sid, room.code)
                    self._deliver(room, notices)
            finally:
                with self._lock:
                    self._joining.discard(sid)
            return True
        except GameError as err:
            self._reject(sid, err)
            return False
        except Exception:
            logger.exception("join failed for %s", sid)
            self._reject(sid, GameError("internal_error"))
            return False

    def _dispatch(
        self,
        sid: str,
        data: Any,
        schema: Any,
        action: Callable[[Room, Any], list[Notice]],
    ) -> bool:
        try:
            req = schema.parse(data)
            room = self.registry.get(req.room_id)
            binding = self.binding(sid)
            if binding is None or binding.room is not room:
                raise GameError("not_in_room")

            with room.lock:
                if not self._is_live(room):
                    logger.debug("room %s vanished before %s could act", room.code, sid)
                    return False
                if room.find_player(sid) is None:
                    raise GameError("not_in_room")
                self._deliver(room, action(room, req))
            return True
        except GameError as err:
            self._reject(sid, err)
            return False
        except Exception:
            logger.exception("event from %s failed", sid)
            self._reject(sid, GameError("internal_error"))
            return False

    def start_game(self, sid: str, data: Any) -> bool:
        return self._dispatch(sid, data, RoomAction, lambda room, req: service.start_game(room, sid, rng=self._rng))

    def send_chat(self, sid: str, data: Any) -> bool:
        return self._dispatch(sid, data, SendChat, lambda room, req: service.send_chat(room, sid, req.message))

    def call_vote(self, sid: str, data: Any) -> bool:
        return self._dispatch(
            sid, data, RoomAction, lambda room, req: service.call_vote(room, sid, self._vote_deadline(room))
        )

    def submit_vote(self, sid: str, data: Any) -> bool:
        return self._dispatch(sid, data, SubmitVote, lambda room, req: service.submit_vote(room, sid, req.target_id))

    def next_turn(self, sid: str, data: Any) -> bool:
        return self._dispatch(sid, data, RoomAction, lambda room, req: service.next_turn(room, sid))

    def return_to_lobby(self, sid: str, data: Any) -> bool:
        return self._dispatch(sid, data, RoomAction, lambda room, req: service.return_to_lobby(room, sid))

    def _vote_deadline(self, room: Room) -> Callable[[int], None]:
        # Bound to this room object: a room removed or re-created at the
        # same code never receives another room's deadline.
        def _fire(phase: int) -> None:
            with room.lock:
                if not self._is_live(room):
                    logger.debug("vote deadline for removed room %s ignored", room.code)
                    return
                self._deliver(room, service.expire_vote(room, phase))

        return _fire

    def disconnect(self, sid: str) -> None:
        with self._lock:
            binding = self._bindings.pop(sid, None)
        if binding is None:
            return

        room = binding.room
        try:
            with room.lock:
                if not self._is_live(room):
                    return
                notices, empty = service.leave(room, sid)
                if empty:
                    self.registry.remove(room.code, room)
                    return
                self._deliver(room, notices)
        except Exception:
            logger.exception("disconnect cleanup failed for %s in room %s", sid, room.code)
