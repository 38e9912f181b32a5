from flask_socketio import join_room, leave_room, emit
from kiosk import socketio, db
from flask import current_app, has_app_context, request
from kiosk.models import GameSession
from kiosk.services.match.registry import get_registry
import time


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def handle_disconnect(reason=None):
    # A kiosk display that owned the session went away: end its match unless
    # another owner shows up within the grace period
    app = current_app._get_current_object()
    registry = get_registry(app)
    with registry.lock:
        ctx = registry.socket_contexts.pop(_get_sid(), None)
        if not ctx:
            return
        session_id = ctx.get('session_id')
        if not (ctx.get('is_session_owner') and session_id):
            return
        remaining = max(0, registry.owner_counts.get(session_id, 0) - 1)
        registry.owner_counts[session_id] = remaining
    # In tests, end immediately for determinism; in prod, allow grace period
    if app.config.get('TESTING'):
        if remaining == 0:
            end_session(app, session_id)
        return
    _schedule_end_if_no_owner(app, session_id)


def handle_join_session(data):
    session_id = (data or {}).get('session_id')
    is_session_owner = bool((data or {}).get('is_session_owner'))
    if not session_id:
        emit('error', {'message': 'session_id is required'})
        return
    room = f"session:{session_id}"
    join_room(room)
    registry = get_registry(current_app)
    with registry.lock:
        registry.socket_contexts[_get_sid()] = {'session_id': session_id, 'is_session_owner': is_session_owner}
        if is_session_owner:
            registry.owner_counts[session_id] = registry.owner_counts.get(session_id, 0) + 1
            # A returning owner cancels any pending grace-period end
            registry.end_deadlines.pop(session_id, None)
    emit('joined', {'room': room})


def handle_leave_session(data):
    session_id = (data or {}).get('session_id')
    if not session_id:
        emit('error', {'message': 'session_id is required'})
        return
    room = f"session:{session_id}"
    leave_room(room)
    emit('left', {'room': room})
    registry = get_registry(current_app)
    with registry.lock:
        ctx = registry.socket_contexts.get(_get_sid())
    if ctx and ctx.get('is_session_owner') and ctx.get('session_id') == session_id:
        # Explicit exit from the kiosk display: end immediately
        end_session(current_app._get_current_object(), session_id)


def handle_ping(data):
    emit('pong', data or {})

# ---- Session owner lifecycle helpers ----

def _get_sid() -> str:
    # request.sid exists in Socket.IO context
    return request.sid  # type: ignore

def end_session(app, session_id: str) -> bool:
    """Discard the live match, mark the session completed and notify clients.

    Returns True if a live match was discarded.
    """
    if has_app_context():
        match = _discard_and_complete(app, session_id)
    else:
        with app.app_context():
            match = _discard_and_complete(app, session_id)
    # Use socketio.emit since this may be called from a background task
    socketio.emit('session_ended', {'session_id': session_id}, to=f"session:{session_id}", namespace='/ws')
    return match is not None

def _discard_and_complete(app, session_id: str):
    registry = get_registry(app)
    with registry.lock:
        match = registry.discard(session_id)
        registry.owner_counts.pop(session_id, None)
        registry.end_deadlines.pop(session_id, None)
    try:
        row = GameSession.query.filter_by(id=session_id).first()
        if row and row.status != 'completed':
            row.status = 'completed'
            db.session.add(row)
            db.session.commit()
    except Exception:
        db.session.rollback()
        app.logger.exception(f"[session-end] session={session_id} failed to update status")
    app.logger.info(f"[session-end] session={session_id} discarded={match is not None}")
    return match

def _schedule_end_if_no_owner(app, session_id: str) -> None:
    registry = get_registry(app)
    delay_sec = float(app.config.get('OWNER_DISCONNECT_GRACE_SEC', 2.0))
    with registry.lock:
        if registry.owner_counts.get(session_id, 0) > 0:
            return
        deadline = time.time() + delay_sec
        registry.end_deadlines[session_id] = deadline

    def _runner(sid: str, expected_deadline: float):
        sleep_for = max(0.0, expected_deadline - time.time())
        if sleep_for:
            socketio.sleep(sleep_for)
        with registry.lock:
            if registry.owner_counts.get(sid, 0) == 0 and registry.end_deadlines.get(sid) == expected_deadline:
                end_session(app, sid)
                return
        app.logger.info(f"[session-end-skip] session={sid} owner returned")

    socketio.start_background_task(_runner, session_id, deadline)



def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    handlers = {
        'connect': handle_connect,
        'disconnect': handle_disconnect,
        'join_session': handle_join_session,
        'leave_session': handle_leave_session,
        'ping': handle_ping,
    }
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        for event, handler in handlers.items():
            socketio.on_event(event, handler, namespace=namespace)
