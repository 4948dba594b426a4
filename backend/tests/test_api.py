def test_index(client):
    res = client.get('/')
    assert res.status_code == 200
    assert 'message' in res.get_json()


def test_health_counts_rooms(client, flask_app):
    assert client.get('/health').get_json() == {'status': 'ok', 'rooms': 0}
    flask_app.extensions['uno_rooms'].create_room('s1', 'Ann')
    assert client.get('/health').get_json() == {'status': 'ok', 'rooms': 1}


def test_list_rooms(client, flask_app):
    registry = flask_app.extensions['uno_rooms']
    game = registry.create_room('s1', 'Ann')
    registry.join_room('s2', game.room_id, 'Ben')

    res = client.get('/api/rooms')
    assert res.status_code == 200
    data = res.get_json()
    assert data['totalRooms'] == 1
    room = data['rooms'][0]
    assert room['roomId'] == game.room_id
    assert room['playerCount'] == 2
    assert room['gameStarted'] is False
    assert [p['name'] for p in room['players']] == ['Ann', 'Ben']


def test_room_lookup(client, flask_app):
    game = flask_app.extensions['uno_rooms'].create_room('s1', 'Ann')
    res = client.get(f'/api/rooms/{game.room_id.lower()}')
    assert res.status_code == 200
    assert res.get_json() == {
        'roomId': game.room_id,
        'playerCount': 1,
        'maxPlayers': 10,
        'gameStarted': False,
        'joinable': True,
    }


def test_started_room_is_not_joinable(client, flask_app):
    registry = flask_app.extensions['uno_rooms']
    game = registry.create_room('s1', 'Ann')
    registry.join_room('s2', game.room_id, 'Ben')
    for p in game.players:
        p.ready = True
    game.start_game('s1')
    data = client.get(f'/api/rooms/{game.room_id}').get_json()
    assert data['gameStarted'] is True
    assert data['joinable'] is False


def test_unknown_room_is_404(client):
    res = client.get('/api/rooms/NOPE00')
    assert res.status_code == 404
    assert res.get_json() == {'error': 'Room not found'}
