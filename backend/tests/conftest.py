import os
import sys
from collections import defaultdict

import pytest

# Ensure the backend root (containing the `liargame` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from liargame.game.registry import RoomRegistry
from liargame.realtime.gateway import ConnectionGateway
from liargame.server import create_app


class TestConfig:
    TESTING = True
    SECRET_KEY = 'test-secret'
    CORS_ORIGINS = '*'
    TRUST_PROXY_HEADERS = False
    SOCKETIO_ASYNC_MODE = 'threading'
    LOG_LEVEL = 'WARNING'
    ROOM_SWEEP_INTERVAL_SEC = 0
    ROOM_TTL_SEC = 3600


class FakeTransport:
    """Records emits and background tasks instead of talking to Socket.IO.

    Background tasks are queued and only run when a test calls ``run_tasks``,
    which makes vote deadlines fire on demand.
    """

    def __init__(self):
        self.members = defaultdict(set)
        self.sent = []
        self.tasks = []
        self.slept = []

    def emit(self, event, payload, to):
        recipients = set(self.members[to]) if to in self.members else {to}
        self.sent.append({'event': event, 'payload': payload, 'to': to, 'recipients': recipients})

    def enter_room(self, sid, room_code):
        self.members[room_code].add(sid)

    def leave_room(self, sid, room_code):
        self.members[room_code].discard(sid)

    def close_room(self, room_code):
        self.members.pop(room_code, None)

    def drop(self, sid):
        for sids in self.members.values():
            sids.discard(sid)

    def start_background_task(self, target, *args, **kwargs):
        self.tasks.append((target, args, kwargs))

    def sleep(self, seconds):
        self.slept.append(seconds)

    def run_tasks(self):
        tasks, self.tasks = self.tasks, []
        for target, args, kwargs in tasks:
            target(*args, **kwargs)

    def received(self, sid, event=None):
        return [
            m['payload'] for m in self.sent
            if sid in m['recipients'] and (event is None or m['event'] == event)
        ]

    def events(self, name):
        return [m for m in self.sent if m['event'] == name]

    def clear(self):
        self.sent = []


@pytest.fixture()
def transport():
    return FakeTransport()


@pytest.fixture()
def registry(transport):
    return RoomRegistry(scheduler=transport, on_removed=transport.close_room)


@pytest.fixture()
def gateway(registry, transport):
    return ConnectionGateway(registry, transport)


@pytest.fixture()
def room(registry):
    return registry.get(registry.create())


@pytest.fixture()
def flask_app():
    application, socketio = create_app(TestConfig)
    yield application, socketio


@pytest.fixture()
def client(flask_app):
    application, _ = flask_app
    return application.test_client()
