from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..game import service
from ..game.registry import RoomRegistry, normalize_code

bp = Blueprint("rooms", __name__)


def _registry() -> RoomRegistry:
    return current_app.extensions["liargame.registry"]


@bp.post("/room")
def create_room():
    code = _registry().create()
    return jsonify({"roomId": code})


@bp.get("/room/<code>")
def get_room(code: str):
    room = _registry().lookup(normalize_code(code))
    if not room:
        return jsonify({"exists": False, "error": "room_not_found"}), 404
    return jsonify(service.room_status(room))
