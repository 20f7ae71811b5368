import pytest


def _events(sio_client, name):
    return [pkt['args'][0] if pkt['args'] else None for pkt in sio_client.get_received() if pkt['name'] == name]


@pytest.fixture()
def players(flask_app):
    application, socketio = flask_app
    clients = [socketio.test_client(application) for _ in range(3)]
    yield clients
    for c in clients:
        if c.is_connected():
            c.disconnect()


def test_socket_connect(players):
    assert all(c.is_connected() for c in players)


def test_join_unknown_room_reports_error(players):
    a = players[0]
    a.emit('join_room', {'roomId': 'ZZZZ9999', 'nickname': 'A'})
    errors = _events(a, 'error')
    assert errors and errors[0]['code'] == 'room_not_found'


def test_full_round_over_socketio(client, players):
    code = client.post('/api/room').get_json()['roomId']
    a, b, c = players

    for sio_client, nick in zip(players, 'ABC'):
        sio_client.emit('join_room', {'roomId': code.lower(), 'nickname': nick, 'avatar': 'fox'})

    joined = [ev for ev in a.get_received() if ev['name'] == 'joined']
    assert joined[0]['args'][0] == {'roomId': code, 'isHost': True}
    assert _events(b, 'joined') == [{'roomId': code, 'isHost': False}]
    c.get_received()

    assert client.get(f'/api/room/{code}').get_json() == {'exists': True, 'playerCount': 3, 'state': 'lobby'}

    a.emit('start_game', {'roomId': code})
    started = {nick: _events(sio_client, 'game_started')[0] for sio_client, nick in zip(players, 'ABC')}
    assert [s['word'] for s in started.values()].count(None) == 1

    turn_order = started['A']['turnOrder']
    ids = {entry['nickname']: entry['id'] for entry in turn_order}
    by_id = {ids[nick]: sio_client for sio_client, nick in zip(players, 'ABC')}

    for entry in turn_order:
        by_id[entry['id']].emit('send_chat', {'roomId': code, 'message': 'a clue'})
    chats = _events(a, 'chat_message')
    assert [m['playerId'] for m in chats] == [e['id'] for e in turn_order]

    a.emit('call_vote', {'roomId': code})
    assert _events(b, 'voting_started') == [{'timeLimit': 60}]

    a.emit('submit_vote', {'roomId': code, 'targetId': ids['B']})
    b.emit('submit_vote', {'roomId': code, 'targetId': ids['A']})
    c.emit('submit_vote', {'roomId': code, 'targetId': ids['B']})

    results = _events(c, 'vote_result')
    assert len(results) == 1
    assert results[0]['eliminated']['id'] == ids['B']
    assert results[0]['tied'] is False

    a.emit('return_to_lobby', {'roomId': code})
    assert _events(b, 'returned_to_lobby') == [{}]


def test_host_disconnect_over_socketio(client, players):
    code = client.post('/api/room').get_json()['roomId']
    a, b, c = players
    for sio_client, nick in zip(players, 'ABC'):
        sio_client.emit('join_room', {'roomId': code, 'nickname': nick})
    b.get_received()
    c.get_received()

    a.disconnect()

    assert _events(b, 'became_host') == [{}]
    left = _events(c, 'player_left')
    assert left and left[0]['nickname'] == 'A'
    assert client.get(f'/api/room/{code}').get_json()['playerCount'] == 2
