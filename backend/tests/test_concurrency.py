import threading

import pytest


def _join(gateway, sid, code, nickname):
    return gateway.join(sid, {'roomId': code, 'nickname': nickname})


def _run_together(*actions):
    barrier = threading.Barrier(len(actions))

    def runner(action):
        barrier.wait()
        action()

    threads = [threading.Thread(target=runner, args=(a,)) for a in actions]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert not any(t.is_alive() for t in threads)


@pytest.mark.parametrize('attempt', range(20))
def test_quorum_and_deadline_racing_resolve_once(gateway, registry, transport, attempt):
    code = registry.create()
    for sid, nick in (('sA', 'A'), ('sB', 'B'), ('sC', 'C')):
        assert _join(gateway, sid, code, nick)
    room = registry.get(code)
    gateway.start_game('sA', {'roomId': code})
    gateway.call_vote('sA', {'roomId': code})
    gateway.submit_vote('sA', {'roomId': code, 'targetId': 'sB'})

    (deadline, args, kwargs), = transport.tasks
    transport.tasks = []

    _run_together(
        lambda: gateway.submit_vote('sB', {'roomId': code, 'targetId': 'sA'}),
        lambda: gateway.submit_vote('sC', {'roomId': code, 'targetId': 'sB'}),
        lambda: deadline(*args, **kwargs),
    )

    assert len(transport.events('vote_result')) == 1
    assert room.state == 'result'
    assert not room.voting.pending


@pytest.mark.parametrize('attempt', range(20))
def test_one_connection_joining_two_rooms_at_once(gateway, registry, transport, attempt):
    first, second = registry.create(), registry.create()
    results = []

    _run_together(
        lambda: results.append(_join(gateway, 'sA', first, 'A')),
        lambda: results.append(_join(gateway, 'sA', second, 'A')),
    )

    assert sorted(results) == [False, True]
    rooms = [registry.get(first), registry.get(second)]
    assert sum(len(r.players) for r in rooms) == 1
    assert [p['code'] for p in transport.received('sA', 'error')] == ['already_in_room']

    gateway.disconnect('sA')
    for code in (first, second):
        room = registry.lookup(code)
        assert room is None or room.players == []


def test_concurrent_joins_respect_capacity(gateway, registry, transport):
    code = registry.create()
    results = []
    _run_together(*[
        (lambda i=i: results.append(_join(gateway, f's{i}', code, f'N{i}')))
        for i in range(12)
    ])

    room = registry.get(code)
    assert results.count(True) == 8
    assert len(room.players) == 8
    assert len({p.id for p in room.players}) == 8
    assert room.host in room.player_ids()
