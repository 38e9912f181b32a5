import time

from kiosk.services.match.registry import MatchRegistry, get_registry
from kiosk.services.match.scheduler import start_ticker


def test_registry_replacing_a_match_invalidates_the_old_one(make_match):
    registry = MatchRegistry()
    first = make_match()
    registry.put('s1', first)
    token = first.token
    second = registry.put('s1', make_match())
    assert first.exited and first.token is None
    assert registry.get('s1') is second
    assert second.token != token


def test_registry_discard(make_match):
    registry = MatchRegistry()
    match = registry.put('s1', make_match())
    assert 's1' in registry
    assert registry.discard('s1') is match
    assert match.exited
    assert registry.discard('s1') is None
    assert len(registry) == 0


def test_ticker_is_disabled_in_tests(flask_app, make_match):
    registry = get_registry(flask_app)
    registry.put('s1', make_match())
    start_ticker(flask_app, 's1')
    assert registry.tickers == set()


def test_ticker_ignores_missing_match(flask_app):
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    start_ticker(flask_app, 'nothing-here')
    assert get_registry(flask_app).tickers == set()


def test_ticker_pushes_clock_readings_between_events(flask_app, client, sio_client, game_ids):
    flask_app.config['ENABLE_SCHEDULER_IN_TESTS'] = True
    flask_app.config['TICK_INTERVAL_SEC'] = 0.01
    session = client.post('/api/sessions', json={
        'gameId': game_ids['soccer-skeeball'], 'mode': 'individual', 'playerCount': 2,
    }).get_json()
    sid = session['id']
    base = f'/api/sessions/{sid}/match'
    client.post(base)
    sio_client.emit('join_session', {'session_id': sid}, namespace='/ws')
    client.post(f'{base}/start')
    client.post(f'{base}/rounds/start')
    sio_client.get_received('/ws')  # flush

    updates = []
    deadline = time.time() + 5
    while time.time() < deadline:
        updates += [e['args'][0] for e in sio_client.get_received('/ws') if e['name'] == 'state_update']
        if any(u['events'] == ['round_complete'] for u in updates):
            break
        time.sleep(0.02)

    clock_updates = [u for u in updates if u['events'] == [] and u['timers']['round_running']]
    assert len(clock_updates) >= 2
    remaining = [u['timers']['round_seconds_remaining'] for u in clock_updates]
    assert remaining == sorted(remaining, reverse=True)
    assert remaining[-1] < 45

    registry = get_registry(flask_app)
    client.post(f'{base}/exit')
    deadline = time.time() + 2
    while registry.tickers and time.time() < deadline:
        time.sleep(0.02)
    assert registry.tickers == set()
