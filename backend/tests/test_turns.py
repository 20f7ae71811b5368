import pytest

from liargame.game import turns


def test_advance_wraps_and_flags_round():
    order = ['a', 'b', 'c']
    assert turns.advance(order, 0) == (1, False)
    assert turns.advance(order, 1) == (2, False)
    assert turns.advance(order, 2) == (0, True)


def test_advance_single_slot_always_completes_a_round():
    assert turns.advance(['solo'], 0) == (0, True)


def test_advance_rejects_empty_order():
    with pytest.raises(ValueError):
        turns.advance([], 0)


def test_round_robin_counts_one_round_per_cycle():
    order = ['a', 'b', 'c', 'd']
    idx, rounds, seen = 0, 1, []
    for _ in range(12):
        seen.append(order[idx])
        idx, wrapped = turns.advance(order, idx)
        rounds += wrapped
    assert seen == order * 3
    assert rounds == 4


def test_next_present_skips_absent_slots():
    order = ['a', 'b', 'c', 'd']
    assert turns.next_present(order, 0, {'a', 'c', 'd'}) == (2, 0)


def test_next_present_counts_wrap_over_absent_first_slot():
    order = ['a', 'b', 'c']
    # 'a' is gone; from 'c' we pass slot 0 and land on 'b'
    assert turns.next_present(order, 2, {'b', 'c'}) == (1, 1)


def test_next_present_with_one_player_left_returns_to_same_slot():
    order = ['a', 'b', 'c']
    assert turns.next_present(order, 1, {'b'}) == (1, 1)


def test_next_present_with_nobody_present_keeps_index():
    assert turns.next_present(['a', 'b'], 1, set()) == (1, 0)


def test_seek_present_keeps_present_slot():
    assert turns.seek_present(['a', 'b', 'c'], 1, {'a', 'b', 'c'}) == (1, 0)
    assert turns.seek_present(['a', 'b', 'c'], 1, {'a', 'c'}) == (2, 0)
