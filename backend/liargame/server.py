from __future__ import annotations

import sys

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.registry import RoomRegistry
from .logging_config import setup_logging
from .realtime.gateway import ConnectionGateway
from .realtime.handlers import SocketIOTransport, register_socketio_handlers
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp


def _pick_async_mode(configured: str) -> str:
    if configured:
        return configured
    # eventlet only where it is known to work: CPython < 3.13, not Windows.
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(config_class=Config) -> tuple[Flask, SocketIO]:
    app = Flask(__name__)
    app.config.from_object(config_class)

    setup_logging(app.config.get("LOG_LEVEL"))

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=_pick_async_mode(app.config.get("SOCKETIO_ASYNC_MODE", "")),
    )

    transport = SocketIOTransport(socketio)
    registry = RoomRegistry(scheduler=transport, on_removed=transport.close_room)
    gateway = ConnectionGateway(registry, transport)
    app.extensions["liargame.registry"] = registry
    app.extensions["liargame.gateway"] = gateway

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")

    register_socketio_handlers(socketio, gateway)

    @app.get("/")
    def index():
        return "OK"

    registry.start_sweeper(
        interval_sec=int(app.config.get("ROOM_SWEEP_INTERVAL_SEC", 0)),
        ttl_sec=int(app.config.get("ROOM_TTL_SEC", Config.ROOM_TTL_SEC)),
    )

    return app, socketio
