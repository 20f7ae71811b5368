"""Inbound Socket.IO events and their payload schemas.

Clients send camelCase JSON objects; each schema validates one event and
raises ``GameError("invalid_payload")`` on anything it cannot accept.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any

from ..config import Config
from ..game.errors import GameError
from ..game.registry import normalize_code


JOIN_ROOM = "join_room"
START_GAME = "start_game"
SEND_CHAT = "send_chat"
CALL_VOTE = "call_vote"
SUBMIT_VOTE = "submit_vote"
NEXT_TURN = "next_turn"
RETURN_TO_LOBBY = "return_to_lobby"

_CODE_RE = re.compile(r"[A-Z0-9]+")
# Markup brackets and control characters never belong in a display name.
_NICKNAME_FORBIDDEN_RE = re.compile(r"[<>\x00-\x1f]")


def _payload(data: Any) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise GameError("invalid_payload")
    return data


def _room_id(payload: dict) -> str:
    code = normalize_code(payload.get("roomId"))
    if not code or len(code) > Config.ROOM_CODE_MAX_LENGTH or not _CODE_RE.fullmatch(code):
        raise GameError("invalid_payload", "Invalid room code.")
    return code


@dataclass(frozen=True)
class JoinRoom:
    room_id: str
    nickname: str
    avatar: str
    create_if_not_exists: bool

    @classmethod
    def parse(cls, data: Any) -> "JoinRoom":
        payload = _payload(data)
        room_id = _room_id(payload)
        nickname = payload.get("nickname")
        if isinstance(nickname, str):
            nickname = nickname.strip()
        if (
            not isinstance(nickname, str)
            or not 0 < len(nickname) <= Config.NICKNAME_MAX_LENGTH
            or _NICKNAME_FORBIDDEN_RE.search(nickname)
        ):
            raise GameError(
                "invalid_payload", f"Nickname must be 1-{Config.NICKNAME_MAX_LENGTH} characters."
            )
        avatar = str(payload.get("avatar") or "").strip()[: Config.AVATAR_MAX_LENGTH]
        return cls(
            room_id=room_id,
            nickname=nickname,
            avatar=avatar,
            create_if_not_exists=payload.get("createIfNotExists") is True,
        )


@dataclass(frozen=True)
class RoomAction:
    """startGame, callVote, nextTurn and returnToLobby carry only the room code."""

    room_id: str

    @classmethod
    def parse(cls, data: Any) -> "RoomAction":
        return cls(room_id=_room_id(_payload(data)))


@dataclass(frozen=True)
class SendChat:
    room_id: str
    message: str

    @classmethod
    def parse(cls, data: Any) -> "SendChat":
        payload = _payload(data)
        room_id = _room_id(payload)
        message = payload.get("message")
        if not isinstance(message, str) or not message.strip():
            raise GameError("invalid_payload", "Message must not be empty.")
        return cls(room_id=room_id, message=message.strip())


@dataclass(frozen=True)
class SubmitVote:
    room_id: str
    target_id: str

    @classmethod
    def parse(cls, data: Any) -> "SubmitVote":
        payload = _payload(data)
        room_id = _room_id(payload)
        target_id = payload.get("targetId")
        if not isinstance(target_id, str) or not target_id:
            raise GameError("invalid_payload", "Missing vote target.")
        return cls(room_id=room_id, target_id=target_id)
