def _songs(prefix):
    return [
        {'title': f'{prefix} {i}', 'external_id': f'{prefix}-{i}', 'thumbnail_url': f'https://img/{prefix}{i}'}
        for i in range(1, 4)
    ]


def _create(client, songs_per_round=5):
    res = client.post('/api/parties', json={'name': 'New Year', 'songs_per_round': songs_per_round})
    assert res.status_code == 201
    data = res.get_json()
    return data['id'], data['admin_token']


def test_create_party(client):
    party_id, token = _create(client)
    assert len(party_id) == 6
    assert len(token) == 12
    state = client.get(f'/api/parties/{party_id}/state').get_json()
    assert state['name'] == 'New Year'
    assert state['started'] is False
    assert state['current_round'] == 0


def test_create_party_validation(client):
    assert client.post('/api/parties', json={}).status_code == 400
    res = client.post('/api/parties', json={'name': 'X', 'songs_per_round': 'many'})
    assert res.status_code == 400
    assert res.get_json()['kind'] == 'InvalidInputError'


def test_join_and_users(client):
    party_id, _ = _create(client)
    res = client.post(f'/api/parties/{party_id}/join', json={'name': 'Bob', 'songs': _songs('b')})
    assert res.status_code == 201
    assert res.get_json()['name'] == 'Bob'
    client.post(f'/api/parties/{party_id}/join', json={'name': 'Alice', 'songs': _songs('a')})
    users = client.get(f'/api/parties/{party_id}/users').get_json()
    assert [u['name'] for u in users] == ['Alice', 'Bob']


def test_join_errors(client):
    party_id, _ = _create(client)
    res = client.post(f'/api/parties/{party_id}/join', json={'name': 'Bob', 'songs': _songs('b')[:2]})
    assert res.status_code == 400
    res = client.post('/api/parties/NOPE00/join', json={'name': 'Bob', 'songs': _songs('b')})
    assert res.status_code == 404
    assert res.get_json()['kind'] == 'NotFoundError'
    assert client.get(f'/api/parties/{party_id}/users').get_json() == []


def test_full_game_flow(client):
    party_id, token = _create(client, songs_per_round=5)
    alice = client.post(f'/api/parties/{party_id}/join', json={'name': 'Alice', 'songs': _songs('a')}).get_json()
    bob = client.post(f'/api/parties/{party_id}/join', json={'name': 'Bob', 'songs': _songs('b')}).get_json()

    # Admin only
    assert client.post(f'/api/parties/{party_id}/start', json={'admin_token': 'wrong'}).status_code == 401
    assert client.get(f'/api/parties/{party_id}/round').status_code == 400

    started = client.post(f'/api/parties/{party_id}/start', json={'admin_token': token}).get_json()
    assert started['started'] is True
    assert started['current_round'] == 1
    assert started['show_results'] is False
    assert started['total_songs'] == 6
    assert client.post(f'/api/parties/{party_id}/start', json={'admin_token': token}).status_code == 400

    round1 = client.get(f'/api/parties/{party_id}/round').get_json()
    assert round1['round'] == 1
    assert len(round1['songs']) == 5

    # Alice guesses every song of round 1 as Bob's
    for song in round1['songs']:
        res = client.post(f'/api/parties/{party_id}/guess', json={
            'guesser_id': alice['id'], 'song_id': song['id'], 'guessed_user_id': bob['id'],
        })
        assert res.status_code == 200
    guesses = client.get(f'/api/parties/{party_id}/guesses', query_string={'user': 'Alice'}).get_json()
    assert set(guesses.values()) == {'Bob'}

    assert client.get(f'/api/parties/{party_id}/results', query_string={'round': 1}).status_code == 403
    board = client.get(f'/api/parties/{party_id}/leaderboard').get_json()
    assert all(e['score'] == 0 for e in board)

    revealed = client.post(f'/api/parties/{party_id}/next', json={'admin_token': token}).get_json()
    assert revealed['current_round'] == 1
    assert revealed['show_results'] is True

    results = client.get(f'/api/parties/{party_id}/results', query_string={'round': 1}).get_json()
    assert len(results) == 5
    bob_count = sum(1 for r in results if r['owner_names'] == 'Bob')
    board = {e['user_name']: e['score'] for e in client.get(f'/api/parties/{party_id}/leaderboard').get_json()}
    assert board['Alice'] == bob_count
    round_board = client.get(f'/api/parties/{party_id}/leaderboard', query_string={'round': 1}).get_json()
    assert {e['user_name']: e['score'] for e in round_board} == board

    # Song list is admin-only while the game runs
    assert client.get(f'/api/parties/{party_id}/songs').status_code == 401
    assert len(client.get(f'/api/parties/{party_id}/songs', query_string={'admin_token': token}).get_json()) == 6

    nxt = client.post(f'/api/parties/{party_id}/next', json={'admin_token': token}).get_json()
    assert nxt['current_round'] == 2 and nxt['show_results'] is False
    assert len(client.get(f'/api/parties/{party_id}/round').get_json()['songs']) == 1
    client.post(f'/api/parties/{party_id}/next', json={'admin_token': token})
    over = client.post(f'/api/parties/{party_id}/next', json={'admin_token': token}).get_json()
    assert over['current_round'] == 3
    assert over['game_over'] is True

    # Final reveal is public
    final = client.get(f'/api/parties/{party_id}/songs').get_json()
    assert len(final) == 6
    assert {r['owner_names'] for r in final} == {'Alice', 'Bob'}


def test_query_argument_validation(client):
    party_id, _ = _create(client)
    assert client.get(f'/api/parties/{party_id}/results').status_code == 400
    assert client.get(f'/api/parties/{party_id}/leaderboard', query_string={'round': 'x'}).status_code == 400
    res = client.post(f'/api/parties/{party_id}/guess', json={'guesser_id': 1})
    assert res.status_code == 400


def test_unknown_party(client):
    assert client.get('/api/parties/NOPE00/state').status_code == 404
    assert client.get('/api/parties/NOPE00/leaderboard').status_code == 404
    assert client.post('/api/parties/NOPE00/next', json={'admin_token': 'x'}).status_code == 404
    assert client.post('/api/parties/NOPE00/start', json={'admin_token': 'x'}).status_code == 404
    assert client.get('/api/parties/NOPE00/songs').status_code == 404


def test_names_must_be_strings(client):
    res = client.post('/api/parties', json={'name': 5})
    assert res.status_code == 400
    assert res.get_json()['kind'] == 'InvalidInputError'
    party_id, _ = _create(client)
    res = client.post(f'/api/parties/{party_id}/join', json={'name': {'first': 'Bob'}, 'songs': _songs('b')})
    assert res.status_code == 400
    assert res.get_json()['kind'] == 'InvalidInputError'


def test_integer_fields_reject_other_json_types(client):
    for bad in (2.5, True, [3]):
        res = client.post('/api/parties', json={'name': 'X', 'songs_per_round': bad})
        assert res.status_code == 400
        assert res.get_json()['kind'] == 'InvalidInputError'
    party_id, _ = _create(client)
    res = client.post(f'/api/parties/{party_id}/guess', json={'guesser_id': True, 'song_id': 1, 'guessed_user_id': 1})
    assert res.status_code == 400
    assert client.post('/api/parties', json={'name': 'X', 'songs_per_round': '3'}).status_code == 201
