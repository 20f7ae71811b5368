from __future__ import annotations

import logging
import random
from typing import Callable

from ..config import Config
from . import turns
from .errors import GameError
from .models import ChatMessage, Notice, Player, Room, now_ms
from .topics import pick_topic
from .voting import tally_votes


logger = logging.getLogger(__name__)


def _require_host(room: Room, player_id: str) -> None:
    if room.host != player_id:
        raise GameError("not_host")


def _require_state(room: Room, *states: str) -> None:
    if room.state not in states:
        raise GameError("wrong_state")


def _identity(room: Room, player_id: str | None) -> dict | None:
    if player_id is None:
        return None
    p = room.roster.get(player_id) or room.find_player(player_id)
    return p.public() if p else None


def room_update(room: Room, include_turn: bool = False) -> Notice:
    payload = {
        "players": [p.public() for p in room.players],
        "host": room.host,
        "state": room.state,
    }
    if include_turn:
        payload["currentTurnPlayerId"] = room.current_turn_player_id()
    return Notice("room_update", payload)


def _turn_changed(room: Room) -> Notice:
    return Notice(
        "turn_changed",
        {"currentTurnPlayerId": room.current_turn_player_id(), "round": room.round},
    )


def _vote_update(room: Room) -> Notice:
    return Notice("vote_update", {"voteCount": len(room.votes), "totalPlayers": len(room.players)})


def room_status(room: Room) -> dict:
    with room.lock:
        return {"exists": True, "playerCount": len(room.players), "state": room.state}


def join(room: Room, player_id: str, nickname: str, avatar: str = "") -> list[Notice]:
    with room.lock:
        if room.state != "lobby":
            raise GameError("game_in_progress")
        if len(room.players) >= Config.MAX_PLAYERS:
            raise GameError("room_full", f"The room is full (max {Config.MAX_PLAYERS} players).")
        if room.find_player(player_id) is not None:
            raise GameError("already_in_room")
        if any(p.nickname == nickname for p in room.players):
            raise GameError("duplicate_nickname", f"'{nickname}' is already taken in this room.")

        room.players.append(Player(id=player_id, nickname=nickname, avatar=avatar))
        if room.host is None:
            room.host = player_id

        logger.info("player %r joined room %s (%d players)", nickname, room.code, len(room.players))

        return [
            room_update(room),
            Notice("joined", {"roomId": room.code, "isHost": room.host == player_id}, to=player_id),
        ]


def start_game(room: Room, player_id: str, rng: random.Random | None = None) -> list[Notice]:
    r = rng or random
    with room.lock:
        _require_host(room, player_id)
        _require_state(room, "lobby")
        if len(room.players) < Config.MIN_PLAYERS:
            raise GameError(
                "not_enough_players", f"At least {Config.MIN_PLAYERS} players are needed to start."
            )

        topic = pick_topic(rng=rng)
        liar = room.players[r.randrange(len(room.players))]
        order = [p.id for p in room.players]
        r.shuffle(order)

        room.voting.cancel()
        room.topic = topic
        room.liar_id = liar.id
        room.turn_order = order
        room.current_turn_index = 0
        room.round = 1
        room.votes = {}
        room.chat_messages = []
        room.roster = {p.id: Player(id=p.id, nickname=p.nickname, avatar=p.avatar) for p in room.players}
        room.state = "playing"

        logger.info("game started in room %s with %d players", room.code, len(room.players))
        logger.debug("room %s: liar=%r word=%r", room.code, liar.nickname, topic.word)

        turn_entries = [room.roster[pid].public() for pid in order]
        first = order[0]
        notices = []
        for p in room.players:
            is_liar = p.id == room.liar_id
            notices.append(
                Notice(
                    "game_started",
                    {
                        "isLiar": is_liar,
                        "category": topic.category,
                        "word": None if is_liar else topic.word,
                        "turnOrder": turn_entries,
                        "currentTurnPlayerId": first,
                    },
                    to=p.id,
                )
            )
        notices.append(room_update(room, include_turn=True))
        return notices


def send_chat(room: Room, player_id: str, message: str) -> list[Notice]:
    with room.lock:
        _require_state(room, "playing")
        if player_id != room.current_turn_player_id():
            raise GameError("not_your_turn")

        player = room.find_player(player_id)
        if player is None:
            raise GameError("not_in_room")

        chat = ChatMessage(
            player_id=player.id,
            nickname=player.nickname,
            avatar=player.avatar,
            message=message[: Config.CHAT_MAX_LENGTH],
            timestamp=now_ms(),
        )
        room.chat_messages.append(chat)

        idx, rounds = turns.next_present(room.turn_order, room.current_turn_index, room.player_ids())
        room.current_turn_index = idx
        room.round += rounds

        return [Notice("chat_message", chat.payload()), _turn_changed(room)]


def call_vote(room: Room, player_id: str, on_deadline: Callable[[int], None]) -> list[Notice]:
    with room.lock:
        _require_state(room, "playing")

        room.votes = {}
        room.state = "voting"
        phase = room.voting.schedule(Config.VOTE_TIME_LIMIT_SEC + Config.VOTE_GRACE_SEC, on_deadline)

        logger.info("vote called in room %s (phase %d)", room.code, phase)
        return [Notice("voting_started", {"timeLimit": Config.VOTE_TIME_LIMIT_SEC})]


def submit_vote(room: Room, player_id: str, target_id: str) -> list[Notice]:
    with room.lock:
        _require_state(room, "voting")
        if player_id in room.votes:
            raise GameError("already_voted")
        if room.find_player(target_id) is None:
            raise GameError("invalid_target")

        room.votes[player_id] = target_id
        return [_vote_update(room)] + _resolve_if_quorum(room)


def expire_vote(room: Room, phase: int) -> list[Notice]:
    """Deadline path. Stale firings (phase already resolved, cancelled or replaced) are no-ops."""
    with room.lock:
        if room.state != "voting" or not room.voting.claim(phase):
            logger.debug("ignoring stale vote deadline for room %s (phase %d)", room.code, phase)
            return []
        return _end_voting(room, reason="deadline")


def _resolve_if_quorum(room: Room) -> list[Notice]:
    if room.players and len(room.votes) >= len(room.players) and room.voting.claim():
        return _end_voting(room, reason="quorum")
    return []


def _end_voting(room: Room, reason: str) -> list[Notice]:
    result = tally_votes(room.votes)
    room.state = "result"

    logger.info(
        "voting resolved in room %s by %s: eliminated=%s tied=%s",
        room.code,
        reason,
        result.eliminated,
        result.tied,
    )

    topic = {"category": room.topic.category, "word": room.topic.word} if room.topic else None
    return [
        Notice(
            "vote_result",
            {
                "eliminated": _identity(room, result.eliminated),
                "isLiar": result.eliminated is not None and result.eliminated == room.liar_id,
                "liar": _identity(room, room.liar_id),
                "topic": topic,
                "tally": result.tally,
                "votes": dict(room.votes),
                "tied": result.tied,
            },
        )
    ]


def next_turn(room: Room, player_id: str) -> list[Notice]:
    with room.lock:
        _require_host(room, player_id)
        _require_state(room, "result")

        before = room.current_turn_index
        idx, rounds = turns.seek_present(room.turn_order, before, room.player_ids())
        room.current_turn_index = idx
        room.round += rounds
        room.state = "playing"

        notices = [room_update(room, include_turn=True)]
        if idx != before:
            notices.append(_turn_changed(room))
        return notices


def return_to_lobby(room: Room, player_id: str) -> list[Notice]:
    with room.lock:
        _require_host(room, player_id)

        room.voting.cancel()
        room.state = "lobby"
        room.topic = None
        room.liar_id = None
        room.votes = {}
        room.chat_messages = []
        room.turn_order = []
        room.current_turn_index = 0
        room.round = 1
        room.roster = {}

        return [Notice("returned_to_lobby", {}), room_update(room)]


def leave(room: Room, player_id: str) -> tuple[list[Notice], bool]:
    """Removes a departing player. Returns (notices, room_is_now_empty)."""
    with room.lock:
        leaving = room.find_player(player_id)
        if leaving is None:
            return [], not room.players

        room.players.remove(leaving)
        logger.info("player %r left room %s (%d remaining)", leaving.nickname, room.code, len(room.players))

        if not room.players:
            room.voting.cancel()
            room.host = None
            return [], True

        notices: list[Notice] = []
        if room.host == player_id:
            room.host = room.players[0].id
            logger.info("room %s: host moved to %r", room.code, room.players[0].nickname)
            notices.append(Notice("became_host", {}, to=room.host))

        notices.append(Notice("player_left", {"playerId": player_id, "nickname": leaving.nickname}))
        notices.append(room_update(room))

        if room.state == "playing" and room.current_turn_player_id() == player_id:
            idx, rounds = turns.next_present(room.turn_order, room.current_turn_index, room.player_ids())
            room.current_turn_index = idx
            room.round += rounds
            notices.append(_turn_changed(room))
        elif room.state == "voting":
            room.votes.pop(player_id, None)
            notices.append(_vote_update(room))
            notices.extend(_resolve_if_quorum(room))

        return notices, False
