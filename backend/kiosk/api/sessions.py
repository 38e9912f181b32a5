from flask import Blueprint, jsonify, request, current_app
from kiosk import db
from kiosk.models import Game, GameSession, SESSION_STATUSES
from kiosk.services.match import ConfigurationError, InputValidationError, InvalidTransitionError, Match
from kiosk.services.match.machine import COUNTDOWN, FINISHED, PLAYING, resolve_participants
from kiosk.services.match.registry import get_registry
from kiosk.services.match.rules import MODE_TEAM, TEAM_RELAY_SHOOTOUT, GameDescriptor, SessionConfig
from kiosk.services.match.scheduler import emit_match_update, start_ticker
from kiosk.services.match.teams import default_teams, randomize_team_assignments, team_count_for_players
from kiosk.socketio_events import end_session
import json


sessions = Blueprint('sessions', __name__)


def _int_or_none(value):
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _build_match(row: GameSession) -> Match:
    game = GameDescriptor.from_dict(row.game.to_dict())
    config = SessionConfig.from_dict(row.to_dict())
    cfg = current_app.config
    if game.type == TEAM_RELAY_SHOOTOUT:
        round_seconds = int(cfg.get('RELAY_ROUND_DURATION_SEC', 300))
    else:
        round_seconds = int(cfg.get('ROUND_DURATION_SEC', 45))
    return Match(
        game,
        config,
        round_seconds=round_seconds,
        total_seconds=int(cfg.get('TOTAL_GAME_DURATION_SEC', 300)),
        countdown_seconds=int(cfg.get('COUNTDOWN_DURATION_SEC', 5)),
    )


def _sync_session(row: GameSession, match: Match) -> None:
    """Mirror match progress onto the stored session row.

    A finished match has its standings stored on the row and leaves the
    registry; later standings reads come from ``row.results``.
    """
    changed = False
    if match.phase in (COUNTDOWN, PLAYING) and row.status == 'pending':
        row.status = 'active'
        changed = True
    if match.phase == FINISHED:
        if not row.results:
            row.results = json.dumps([s.to_dict() for s in match.standings])
            changed = True
        if row.status != 'completed':
            row.status = 'completed'
            changed = True
    if changed:
        db.session.add(row)
        db.session.commit()
        current_app.logger.info(f"[session-sync] session={row.id} status={row.status}")
    if match.phase == FINISHED:
        get_registry(current_app).discard(row.id)


def _run_match_action(session_id: str, action, notify: bool = True):
    """Apply an action to the live match under the registry lock.

    Invalid transitions leave the match untouched and map to 409; rejected
    input maps to 400 and still refreshes the room.
    """
    row = GameSession.query.filter_by(id=session_id).first_or_404()
    registry = get_registry(current_app)
    with registry.lock:
        match = registry.get(session_id)
        if match is None:
            return jsonify({'error': 'No live match for this session'}), 404
        try:
            result = action(match)
        except InputValidationError as exc:
            # A rejected entry may still have staged 0, so screens refresh
            payload = exc.to_dict()
            payload['match'] = match.to_dict()
            rejected = True
        except InvalidTransitionError as exc:
            payload = exc.to_dict()
            payload['match'] = match.to_dict()
            return jsonify(payload), 409
        else:
            rejected = False
            snapshot = match.to_dict()
            _sync_session(row, match)
    if rejected:
        if notify:
            emit_match_update(session_id, snapshot=payload['match'])
        return jsonify(payload), 400
    extra = result if isinstance(result, dict) else {}
    snapshot.update(extra)
    if notify:
        emit_match_update(session_id, extra.get('events', ()), snapshot)
    return jsonify(snapshot)


# ---- Sessions ----

@sessions.route('', methods=['POST'])
def create_session():
    data = request.get_json(silent=True) or {}
    game = Game.query.filter_by(id=str(data.get('gameId'))).first()
    if not game:
        return jsonify({'error': 'Game not found'}), 404

    mode = data.get('mode')
    player_count = _int_or_none(data.get('playerCount'))
    team_count = _int_or_none(data.get('teamCount'))
    teams = data.get('teams') if mode == MODE_TEAM else None
    try:
        if mode == MODE_TEAM:
            if team_count is None and player_count is not None:
                team_count = team_count_for_players(player_count)
            if not teams and team_count is not None:
                assignments = None
                if data.get('randomizeTeams') and player_count:
                    assignments = randomize_team_assignments(player_count, team_count)
                teams = default_teams(team_count, assignments)
        payload = {
            'gameId': game.id,
            'mode': mode,
            'playerCount': player_count,
            'teamCount': team_count,
            'teams': teams,
        }
        resolve_participants(GameDescriptor.from_dict(game.to_dict()), SessionConfig.from_dict(payload))
    except ConfigurationError as exc:
        return jsonify(exc.to_dict()), 400
    except (TypeError, ValueError, AttributeError):
        return jsonify({'error': 'Invalid session data'}), 400

    row = GameSession(
        game_id=game.id,
        mode=mode,
        player_count=player_count,
        team_count=team_count,
        teams=json.dumps(teams) if teams else None,
    )
    db.session.add(row)
    db.session.commit()
    current_app.logger.info(f"[session-create] session={row.id} game_type={game.type} mode={mode}")
    return jsonify(row.to_dict()), 201


@sessions.route('/<string:session_id>', methods=['GET'])
def get_session(session_id):
    row = GameSession.query.filter_by(id=session_id).first_or_404()
    return jsonify(row.to_dict())


@sessions.route('/<string:session_id>/status', methods=['PATCH'])
def update_session_status(session_id):
    data = request.get_json(silent=True) or {}
    status = data.get('status')
    if status not in SESSION_STATUSES:
        return jsonify({'error': 'Invalid status'}), 400
    row = GameSession.query.filter_by(id=session_id).first()
    if not row:
        return jsonify({'error': 'Session not found'}), 404
    if status == 'completed':
        # Completing a session ends its live match as well
        end_session(current_app._get_current_object(), session_id)
        db.session.refresh(row)
        return jsonify(row.to_dict())
    row.status = status
    db.session.add(row)
    db.session.commit()
    return jsonify(row.to_dict())


# ---- Match orchestration ----

@sessions.route('/<string:session_id>/match', methods=['POST'])
def create_match(session_id):
    row = GameSession.query.filter_by(id=session_id).first_or_404()
    registry = get_registry(current_app)
    with registry.lock:
        existing = registry.get(session_id)
        if existing is not None:
            # Idempotent create: match already live
            return jsonify(existing.to_dict())
        if row.status == 'completed':
            return jsonify({'error': 'Session is already completed'}), 409
        try:
            match = _build_match(row)
        except ConfigurationError as exc:
            current_app.logger.warning(f"[match-config] session={session_id} error={exc.message}")
            return jsonify(exc.to_dict()), 400
        registry.put(session_id, match)
        snapshot = match.to_dict()
    current_app.logger.info(
        f"[match-create] session={session_id} rounds={match.plan.total_rounds} game_type={match.game.type}"
    )
    emit_match_update(session_id, snapshot=snapshot)
    return jsonify(snapshot), 201


@sessions.route('/<string:session_id>/match', methods=['GET'])
def get_match(session_id):
    return _run_match_action(session_id, lambda match: None, notify=False)


@sessions.route('/<string:session_id>/match/start', methods=['POST'])
def start_game(session_id):
    response = _run_match_action(session_id, lambda match: match.start_game())
    if not isinstance(response, tuple):
        start_ticker(current_app._get_current_object(), session_id)
    return response


@sessions.route('/<string:session_id>/match/rounds/start', methods=['POST'])
def start_round(session_id):
    return _run_match_action(session_id, lambda match: match.start_round())


@sessions.route('/<string:session_id>/match/pending/<int:participant_id>/adjust', methods=['POST'])
def adjust_pending(session_id, participant_id):
    data = request.get_json(silent=True) or {}

    def _adjust(match):
        if 'direction' in data:
            value = match.step_pending_score(participant_id, -1 if data.get('direction') == 'down' else 1)
        else:
            value = match.adjust_pending_score(participant_id, data.get('delta', 0))
        return {'value': value}

    return _run_match_action(session_id, _adjust)


@sessions.route('/<string:session_id>/match/pending/<int:participant_id>', methods=['PUT'])
def set_pending(session_id, participant_id):
    data = request.get_json(silent=True) or {}
    return _run_match_action(
        session_id, lambda match: {'value': match.set_pending_score(participant_id, data.get('value'))}
    )


@sessions.route('/<string:session_id>/match/submit', methods=['POST'])
def submit_round_scores(session_id):
    return _run_match_action(session_id, lambda match: match.submit_round_scores())


@sessions.route('/<string:session_id>/match/advance', methods=['POST'])
def advance_or_finish(session_id):
    return _run_match_action(session_id, lambda match: match.advance_or_finish())


@sessions.route('/<string:session_id>/match/continue', methods=['POST'])
def continue_after_time_expiry(session_id):
    return _run_match_action(session_id, lambda match: match.continue_after_time_expiry())


@sessions.route('/<string:session_id>/match/exit', methods=['POST'])
def exit_game(session_id):
    GameSession.query.filter_by(id=session_id).first_or_404()
    discarded = end_session(current_app._get_current_object(), session_id)
    if not discarded:
        return jsonify({'error': 'No live match for this session'}), 404
    return jsonify({'exited': True, 'session_id': session_id})


@sessions.route('/<string:session_id>/match/tick', methods=['POST'])
def tick(session_id):
    if not current_app.config.get('MANUAL_TICK_ENABLED'):
        return jsonify({'error': 'Manual ticking is disabled'}), 404
    data = request.get_json(silent=True) or {}
    seconds = _int_or_none(data.get('seconds', 1))
    if seconds is None or not 1 <= seconds <= 3600:
        return jsonify({'error': 'seconds must be between 1 and 3600'}), 400
    return _run_match_action(session_id, lambda match: {'events': match.tick(seconds)})


@sessions.route('/<string:session_id>/match/standings', methods=['GET'])
def get_standings(session_id):
    row = GameSession.query.filter_by(id=session_id).first_or_404()
    registry = get_registry(current_app)
    with registry.lock:
        match = registry.get(session_id)
        if match is not None:
            try:
                return jsonify([s.to_dict() for s in match.standings])
            except InvalidTransitionError as exc:
                return jsonify(exc.to_dict()), 409
    if row.results:
        return jsonify(json.loads(row.results))
    return jsonify({'error': 'No standings for this session'}), 404
