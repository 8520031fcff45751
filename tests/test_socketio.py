from werewolf import socketio

NS = '/ws'


def _connect(flask_app):
    client = socketio.test_client(flask_app, namespace=NS)
    client.get_received(NS)  # flush 'connected'
    return client


def _events(client, name):
    return [pkt['args'][0] for pkt in client.get_received(NS) if pkt['name'] == name]


def _create(client, name='Hana', **settings):
    client.emit('create-room', {
        'userName': name,
        'gameSettings': {
            'roles': settings.get('roles', {'werewolf': 1, 'doctor': 1, 'villager': 1}),
            'dayTime': settings.get('dayTime', 30),
            'nightTime': settings.get('nightTime', 20),
        },
    }, namespace=NS)
    return _events(client, 'room-created')[0]['roomCode']


def test_socket_connect(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected(NS):
        sio_client.connect(namespace=NS)
    assert sio_client.is_connected(NS)
    received = sio_client.get_received(NS)
    assert any(pkt['name'] == 'connected' for pkt in received)


def test_create_and_join_room(flask_app):
    host = _connect(flask_app)
    code = _create(host)
    assert len(code) == 6

    guest = _connect(flask_app)
    guest.emit('join-room', {'userName': 'Piet', 'roomCode': code.lower()}, namespace=NS)
    assert _events(guest, 'room-joined') == [{'roomCode': code}]

    updated = _events(host, 'room-updated')
    assert len(updated) == 1
    assert [p['id'] for p in updated[0]['players']] == ['Hana', 'Piet']
    assert updated[0]['hostId'] == 'Hana'
    assert updated[0]['gameState'] == 'waiting'
    assert updated[0]['currentPhase'] == 'lobby'


def test_join_unknown_room_fails(sio_client):
    sio_client.get_received(NS)
    sio_client.emit('join-room', {'userName': 'Piet', 'roomCode': 'ZZZZZZ'}, namespace=NS)
    assert _events(sio_client, 'join-room-failed') == [{'message': 'Room not found'}]


def test_malformed_payload_is_rejected(sio_client):
    sio_client.get_received(NS)
    sio_client.emit('join-room', {'roomCode': 'ABC123'}, namespace=NS)
    assert _events(sio_client, 'join-room-failed') == [{'message': 'Invalid request'}]
    sio_client.emit('create-room', {'userName': 'x', 'gameSettings': {'dayTime': 0}}, namespace=NS)
    assert _events(sio_client, 'error') == [{'message': 'Invalid request'}]


def test_only_host_starts_game(flask_app):
    host = _connect(flask_app)
    code = _create(host)
    guest = _connect(flask_app)
    guest.emit('join-room', {'userName': 'Piet', 'roomCode': code}, namespace=NS)
    guest.get_received(NS)
    host.get_received(NS)

    guest.emit('start-game', {'roomCode': code}, namespace=NS)
    assert _events(guest, 'start-game-failed') == [{'message': 'Only the host can start the game'}]
    assert _events(host, 'start-game-success') == []

    host.emit('start-game', {'roomCode': code}, namespace=NS)
    for client in (host, guest):
        received = client.get_received(NS)
        names = [pkt['name'] for pkt in received]
        assert 'start-game-success' in names
        started = [pkt['args'][0] for pkt in received if pkt['name'] == 'game-timer-started']
        assert started == [{'currentPhase': 'night', 'timeLeft': 20, 'dayCount': 1}]

    host.emit('start-game', {'roomCode': code}, namespace=NS)
    assert _events(host, 'start-game-failed') == [{'message': 'Game is already in progress'}]


def test_room_info_and_reconnect(flask_app):
    host = _connect(flask_app)
    code = _create(host)
    guest = _connect(flask_app)
    guest.emit('join-room', {'userName': 'Piet', 'roomCode': code}, namespace=NS)
    guest.get_received(NS)

    guest.emit('get-room-info', {'roomCode': code}, namespace=NS)
    info = _events(guest, 'get-room-info-success')[0]
    assert info['currentPlayer']['id'] == 'Piet'
    assert info['currentPlayer']['role'] == 'waiting'
    assert info['settings']['nightTime'] == 20
    assert all('role' not in p for p in info['players'])

    host.emit('start-game', {'roomCode': code}, namespace=NS)
    guest.disconnect(namespace=NS)
    assert 'room-updated' in [pkt['name'] for pkt in host.get_received(NS)]

    back = _connect(flask_app)
    back.emit('reconnect-to-room', {'userName': 'Piet', 'roomCode': code}, namespace=NS)
    state = _events(back, 'reconnection-success')[0]
    assert state['player']['id'] == 'Piet'
    assert state['player']['role'] in ('werewolf', 'doctor', 'villager')
    assert state['currentPhase'] == 'night'
    assert [('role' in p) for p in state['players']] == [p['id'] == 'Piet' for p in state['players']]
    host_updates = _events(host, 'room-updated')
    assert host_updates and all(p['connected'] for p in host_updates[-1]['players'])

    back.emit('reconnect-to-room', {'userName': 'Ghost', 'roomCode': code}, namespace=NS)
    assert _events(back, 'reconnection-failed') == [{'message': 'Player not found in room'}]


def test_timer_broadcasts_reach_the_room(flask_app):
    host = _connect(flask_app)
    code = _create(host, roles={'werewolf': 1}, nightTime=11)
    for name in ('Piet', 'Ria'):
        c = _connect(flask_app)
        c.emit('join-room', {'userName': name, 'roomCode': code}, namespace=NS)
    host.emit('start-game', {'roomCode': code}, namespace=NS)
    host.get_received(NS)

    session = flask_app.extensions['werewolf'].get(code)
    host.emit('submit-vote', {
        'roomCode': code,
        'targetPlayerId': 'Ria',
        'currentPlayerId': 'Piet',
        'currentPlayerRole': 'villager',
    }, namespace=NS)
    assert len(session.room.votes) == 1
    assert host.get_received(NS) == []

    for _ in range(11):
        session.timer.tick()
    received = host.get_received(NS)
    updates = [pkt['args'][0]['timeLeft'] for pkt in received if pkt['name'] == 'timer-update']
    assert updates == [10, 9, 8, 7, 6, 5, 4, 3, 2, 1, 0]
    changed = [pkt['args'][0] for pkt in received if pkt['name'] == 'phase-changed']
    assert changed[0]['newPhase'] == 'day'
    assert changed[0]['dayCount'] == 2


def test_vote_on_missing_room(sio_client):
    sio_client.get_received(NS)
    sio_client.emit('submit-vote', {
        'roomCode': 'NOPE00',
        'targetPlayerId': 'a',
        'currentPlayerId': 'b',
        'currentPlayerRole': 'werewolf',
    }, namespace=NS)
    assert _events(sio_client, 'vote-failed') == [{'message': 'Voting is not allowed at this time'}]


def test_last_disconnect_deletes_room(flask_app):
    host = _connect(flask_app)
    code = _create(host)
    registry = flask_app.extensions['werewolf']
    host.emit('start-game', {'roomCode': code}, namespace=NS)
    timer = registry.get(code).timer

    host.disconnect(namespace=NS)
    assert code not in registry
    assert timer.running is False


def test_disconnect_marks_player_offline_for_the_rest(flask_app):
    host = _connect(flask_app)
    code = _create(host)
    guest = _connect(flask_app)
    guest.emit('join-room', {'userName': 'Piet', 'roomCode': code}, namespace=NS)
    host.get_received(NS)

    guest.disconnect(namespace=NS)
    updates = _events(host, 'room-updated')
    assert len(updates) == 1
    players = {p['id']: p['connected'] for p in updates[0]['players']}
    assert players == {'Hana': True, 'Piet': False}


def test_switching_rooms_stops_broadcasts_from_the_old_one(flask_app):
    host = _connect(flask_app)
    first = _create(host)
    guest = _connect(flask_app)
    guest.emit('join-room', {'userName': 'Piet', 'roomCode': first}, namespace=NS)
    host.get_received(NS)
    guest.get_received(NS)

    second = _create(guest, name='Piet')
    assert second != first
    updates = _events(host, 'room-updated')
    assert len(updates) == 1
    assert {p['id']: p['connected'] for p in updates[0]['players']}['Piet'] is False

    host.emit('start-game', {'roomCode': first}, namespace=NS)
    assert _events(host, 'start-game-success')
    assert guest.get_received(NS) == []
