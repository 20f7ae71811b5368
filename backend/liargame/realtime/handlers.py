from __future__ import annotations

import logging
from typing import Any, Callable

from flask import request
from flask_socketio import SocketIO

from . import events
from .gateway import ConnectionGateway


logger = logging.getLogger(__name__)


class SocketIOTransport:
    """Adapts a ``SocketIO`` instance to what the gateway and the registry need."""

    def __init__(self, socketio: SocketIO, namespace: str = "/"):
        self.socketio = socketio
        self.namespace = namespace

    def emit(self, event: str, payload: Any, to: str) -> None:
        self.socketio.emit(event, payload, to=to, namespace=self.namespace)

    def enter_room(self, sid: str, room_code: str) -> None:
        self.socketio.server.enter_room(sid, room_code, namespace=self.namespace)

    def leave_room(self, sid: str, room_code: str) -> None:
        self.socketio.server.leave_room(sid, room_code, namespace=self.namespace)

    def close_room(self, room_code: str) -> None:
        self.socketio.close_room(room_code, namespace=self.namespace)

    def start_background_task(self, target: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        return self.socketio.start_background_task(target, *args, **kwargs)

    def sleep(self, seconds: float) -> Any:
        return self.socketio.sleep(seconds)


def register_socketio_handlers(socketio: SocketIO, gateway: ConnectionGateway) -> None:
    @socketio.on("connect")
    def on_connect(auth=None):
        logger.debug("client connected: %s", request.sid)

    @socketio.on(events.JOIN_ROOM)
    def on_join_room(data=None):
        gateway.join(request.sid, data)

    @socketio.on(events.START_GAME)
    def on_start_game(data=None):
        gateway.start_game(request.sid, data)

    @socketio.on(events.SEND_CHAT)
    def on_send_chat(data=None):
        gateway.send_chat(request.sid, data)

    @socketio.on(events.CALL_VOTE)
    def on_call_vote(data=None):
        gateway.call_vote(request.sid, data)

    @socketio.on(events.SUBMIT_VOTE)
    def on_submit_vote(data=None):
        gateway.submit_vote(request.sid, data)

    @socketio.on(events.NEXT_TURN)
    def on_next_turn(data=None):
        gateway.next_turn(request.sid, data)

    @socketio.on(events.RETURN_TO_LOBBY)
    def on_return_to_lobby(data=None):
        gateway.return_to_lobby(request.sid, data)

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        logger.debug("client disconnected: %s", request.sid)
        gateway.disconnect(request.sid)
