def _live_session(client, game_ids):
    session = client.post('/api/sessions', json={
        'gameId': game_ids['soccer-skeeball'], 'mode': 'individual', 'playerCount': 2,
    }).get_json()
    client.post(f"/api/sessions/{session['id']}/match")
    return session['id']


def test_socket_connect_and_join(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')

    sio_client.emit('join_session', {'session_id': 'abc'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'joined' for pkt in received)

    sio_client.emit('join_session', {}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'error' for pkt in received)


def test_actions_push_state_updates(sio_client, client, game_ids):
    sid = _live_session(client, game_ids)
    sio_client.emit('join_session', {'session_id': sid}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    client.post(f'/api/sessions/{sid}/match/start')
    client.post(f'/api/sessions/{sid}/match/rounds/start')
    client.post(f'/api/sessions/{sid}/match/tick', json={'seconds': 45})
    events = sio_client.get_received('/ws')
    updates = [e for e in events if e['name'] == 'state_update']
    assert len(updates) == 3
    last = updates[-1]['args'][0]
    assert last['session_id'] == sid
    assert last['events'] == ['round_complete']
    assert last['phase'] == 'playing'
    assert last['timers']['round_running'] is False
    assert last['timers']['total_seconds_remaining'] == 255


def test_rejected_score_entry_still_pushes_update(sio_client, client, game_ids):
    sid = _live_session(client, game_ids)
    base = f'/api/sessions/{sid}/match'
    client.post(f'{base}/start')
    client.post(f'{base}/rounds/start')
    client.put(f'{base}/pending/1', json={'value': 30})
    sio_client.emit('join_session', {'session_id': sid}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    assert client.put(f'{base}/pending/1', json={'value': 'lots'}).status_code == 400
    updates = [e for e in sio_client.get_received('/ws') if e['name'] == 'state_update']
    assert len(updates) == 1
    assert updates[0]['args'][0]['events'] == []
    assert client.get(base).get_json()['pending'] == {'1': 0}


def test_owner_bookkeeping_lives_on_the_registry(flask_app, client, game_ids):
    from kiosk import socketio as _sio
    from kiosk.services.match.registry import get_registry

    sid = _live_session(client, game_ids)
    registry = get_registry(flask_app)
    host_client = _sio.test_client(flask_app, namespace='/ws')
    host_client.emit('join_session', {'session_id': sid, 'is_session_owner': True}, namespace='/ws')
    assert registry.owner_counts[sid] == 1
    assert [ctx['session_id'] for ctx in registry.socket_contexts.values()] == [sid]

    host_client.emit('leave_session', {'session_id': sid}, namespace='/ws')
    assert sid not in registry.owner_counts
    assert sid not in registry

    host_client.disconnect(namespace='/ws')
    assert registry.socket_contexts == {}


def test_game_over_notice_is_pushed(sio_client, client, game_ids, flask_app):
    flask_app.config['TOTAL_GAME_DURATION_SEC'] = 10
    sid = _live_session(client, game_ids)
    sio_client.emit('join_session', {'session_id': sid}, namespace='/ws')
    client.post(f'/api/sessions/{sid}/match/start')
    client.post(f'/api/sessions/{sid}/match/rounds/start')
    sio_client.get_received('/ws')  # flush

    client.post(f'/api/sessions/{sid}/match/tick', json={'seconds': 10})
    names = [e['name'] for e in sio_client.get_received('/ws')]
    assert 'time_expired' not in names

    client.post(f'/api/sessions/{sid}/match/tick', json={'seconds': 35})
    names = [e['name'] for e in sio_client.get_received('/ws')]
    assert 'time_expired' in names


def test_owner_leave_ends_session(flask_app, sio_client, client, game_ids):
    sid = _live_session(client, game_ids)

    from kiosk import socketio as _sio
    host_client = _sio.test_client(flask_app, namespace='/ws')
    host_client.emit('join_session', {'session_id': sid, 'is_session_owner': True}, namespace='/ws')

    sio_client.emit('join_session', {'session_id': sid}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    host_client.emit('leave_session', {'session_id': sid}, namespace='/ws')
    events = sio_client.get_received('/ws')
    assert any(e['name'] == 'session_ended' for e in events)
    assert client.get(f'/api/sessions/{sid}/match').status_code == 404
    host_client.disconnect(namespace='/ws')


def test_owner_disconnect_ends_session(flask_app, sio_client, client, game_ids):
    sid = _live_session(client, game_ids)

    from kiosk import socketio as _sio
    host_client = _sio.test_client(flask_app, namespace='/ws')
    host_client.emit('join_session', {'session_id': sid, 'is_session_owner': True}, namespace='/ws')
    sio_client.emit('join_session', {'session_id': sid}, namespace='/ws')
    sio_client.get_received('/ws')  # flush

    # In TESTING the session ends without a grace period
    host_client.disconnect(namespace='/ws')
    events = sio_client.get_received('/ws')
    assert any(e['name'] == 'session_ended' for e in events)
    assert client.get(f'/api/sessions/{sid}').get_json()['status'] == 'completed'
