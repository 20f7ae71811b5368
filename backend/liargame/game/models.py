from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import RLock
from typing import Any, Literal

from .voting import VotingController


RoomState = Literal["lobby", "playing", "voting", "result"]


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Player:
    id: str
    nickname: str
    avatar: str = ""

    def public(self) -> dict:
        return {"id": self.id, "nickname": self.nickname, "avatar": self.avatar}


@dataclass(frozen=True)
class Topic:
    category: str
    word: str


@dataclass
class ChatMessage:
    player_id: str
    nickname: str
    avatar: str
    message: str
    timestamp: int

    def payload(self) -> dict:
        return {
            "playerId": self.player_id,
            "nickname": self.nickname,
            "avatar": self.avatar,
            "message": self.message,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class Notice:
    """One outbound event. ``to=None`` means the whole room."""

    event: str
    payload: Any = None
    to: str | None = None


@dataclass
class Room:
    code: str
    voting: VotingController
    state: RoomState = "lobby"
    players: list[Player] = field(default_factory=list)
    host: str | None = None
    topic: Topic | None = None
    liar_id: str | None = None
    turn_order: list[str] = field(default_factory=list)
    current_turn_index: int = 0
    round: int = 1
    votes: dict[str, str] = field(default_factory=dict)
    chat_messages: list[ChatMessage] = field(default_factory=list)
    # Players as they were at game start; survives disconnects.
    roster: dict[str, Player] = field(default_factory=dict)
    created_at_ms: int = field(default_factory=now_ms)
    lock: RLock = field(default_factory=RLock, repr=False, compare=False)

    def find_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None

    def player_ids(self) -> set[str]:
        return {p.id for p in self.players}

    def current_turn_player_id(self) -> str | None:
        if not self.turn_order:
            return None
        return self.turn_order[self.current_turn_index]
