from typing import Iterable, Optional

from kiosk import socketio
from .machine import FINISHED, GAME_OVER
from .registry import get_registry


def emit_match_update(session_id: str, events: Iterable[str] = (), snapshot: Optional[dict] = None) -> None:
    """Push a state refresh to every screen in the session room.

    When a match snapshot is given, its phase and clock readings ride along
    so countdown displays can redraw without polling.
    """
    room = f"session:{session_id}"
    events = list(events)
    payload = {'session_id': session_id, 'events': events}
    if snapshot is not None:
        payload['phase'] = snapshot['phase']
        payload['timers'] = snapshot['timers']
    socketio.emit('state_update', payload, to=room, namespace='/ws')
    if GAME_OVER in events:
        socketio.emit('time_expired', {'session_id': session_id}, to=room, namespace='/ws')


def start_ticker(app, session_id: str) -> None:
    """Drive the match clocks with a one-second background tick.

    - No-ops in TESTING mode unless ENABLE_SCHEDULER_IN_TESTS is set
    - Ensures a single ticker per (session_id, match token)
    - Aborts once the registry no longer holds a match with that token,
      so a discarded or replaced match is never ticked
    - Pushes a state_update on every tick while a clock is running
    """
    if app.config.get('TESTING') and not app.config.get('ENABLE_SCHEDULER_IN_TESTS'):
        return

    registry = get_registry(app)
    with registry.lock:
        match = registry.get(session_id)
        if match is None or match.token is None:
            return
        token = match.token
        key = (session_id, token)
        if key in registry.tickers:
            app.logger.info(f"[ticker-skip] session={session_id} already ticking")
            return
        registry.tickers.add(key)

    interval = float(app.config.get('TICK_INTERVAL_SEC', 1.0))
    app.logger.info(f"[ticker-set] session={session_id} interval={interval}s")

    def _worker(sid: str, expected_token: str):
        try:
            while True:
                socketio.sleep(interval)
                with app.app_context():
                    with registry.lock:
                        current = registry.get(sid)
                        if current is None or current.token != expected_token:
                            app.logger.info(f"[ticker-abort] session={sid} match discarded or replaced")
                            return
                        was_running = current.timers.any_running
                        events = current.tick()
                        finished = current.phase == FINISHED
                        snapshot = current.to_dict()
                    if events:
                        app.logger.info(f"[ticker-fire] session={sid} events={events}")
                    if events or was_running:
                        emit_match_update(sid, events, snapshot)
                    if finished:
                        return
        finally:
            with registry.lock:
                registry.tickers.discard((sid, expected_token))

    socketio.start_background_task(_worker, session_id, token)
