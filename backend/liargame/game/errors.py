from __future__ import annotations


_DEFAULT_MESSAGES = {
    "invalid_payload": "Malformed request.",
    "room_not_found": "Room not found. It may have expired or the code is wrong.",
    "game_in_progress": "A game is already in progress.",
    "room_full": "The room is full.",
    "duplicate_nickname": "That nickname is already taken in this room.",
    "already_in_room": "You have already joined a room.",
    "not_in_room": "You are not a member of this room.",
    "not_host": "Only the host can do that.",
    "not_enough_players": "Not enough players to start.",
    "wrong_state": "That action is not allowed right now.",
    "not_your_turn": "It is not your turn.",
    "already_voted": "You have already voted.",
    "invalid_target": "You can only vote for a player in this room.",
    "internal_error": "Something went wrong.",
}


class GameError(Exception):
    """A rejected client event. Reported to the sender only; nothing is mutated."""

    def __init__(self, code: str, message: str | None = None):
        self.code = code
        self.message = message or _DEFAULT_MESSAGES.get(code, code)
        super().__init__(f"{code}: {self.message}")

    def payload(self) -> dict:
        return {"code": self.code, "message": self.message}
