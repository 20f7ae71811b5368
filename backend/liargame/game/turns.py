"""Turn rotation over a fixed turn order.

The turn order is snapshotted at game start and never recomputed, so a
player who disconnected mid-game still owns a slot. The ``*_present``
helpers skip such slots; passing index 0 while skipping still counts as a
completed round.
"""
from __future__ import annotations

from typing import Collection, Sequence


def advance(turn_order: Sequence[str], current_index: int) -> tuple[int, bool]:
    """Returns (next_index, round_incremented)."""
    if not turn_order:
        raise ValueError("turn order is empty")
    next_index = (current_index + 1) % len(turn_order)
    return next_index, next_index == 0


def next_present(
    turn_order: Sequence[str], current_index: int, present: Collection[str]
) -> tuple[int, int]:
    """Returns (index, rounds_completed) of the next slot held by a present player.

    Walks at most one full lap; if no one is present the index is left as is.
    """
    idx = current_index
    rounds = 0
    for _ in range(len(turn_order)):
        idx, wrapped = advance(turn_order, idx)
        if wrapped:
            rounds += 1
        if turn_order[idx] in present:
            return idx, rounds
    return current_index, 0


def seek_present(
    turn_order: Sequence[str], current_index: int, present: Collection[str]
) -> tuple[int, int]:
    if turn_order and turn_order[current_index] in present:
        return current_index, 0
    return next_present(turn_order, current_index, present)
