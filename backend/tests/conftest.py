import os
import sys
import pytest

# Ensure the backend root (containing the `kiosk` package) is on sys.path
CURRENT_DIR = os.path.dirname(__file__)
BACKEND_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, '..'))
if BACKEND_ROOT not in sys.path:
    sys.path.insert(0, BACKEND_ROOT)

from kiosk import create_app, db, socketio
from kiosk.services.match import Match
from kiosk.services.match.rules import (
    MODE_INDIVIDUAL, MODE_TEAM, TEAM_RELAY_SHOOTOUT, GameDescriptor, SessionConfig,
)


class TestConfig:
    TESTING = True
    SECRET_KEY = os.environ.get('SECRET_KEY', 'test-secret')
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    ROUND_DURATION_SEC = 45
    RELAY_ROUND_DURATION_SEC = 300
    TOTAL_GAME_DURATION_SEC = 300
    COUNTDOWN_DURATION_SEC = 5
    MANUAL_TICK_ENABLED = True
    ADMIN_RESET_PASSPHRASE = 'staff-only'
    BCRYPT_LOG_ROUNDS = 4
    AUTO_SEED_GAMES = False


@pytest.fixture()
def flask_app():
    application = create_app(TestConfig)
    with application.app_context():
        from kiosk.models import seed_default_games
        db.create_all()
        seed_default_games()
        yield application
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(flask_app):
    return flask_app.test_client()


@pytest.fixture()
def sio_client(flask_app):
    test_client = socketio.test_client(
        flask_app,
        flask_test_client=flask_app.test_client(),
        namespace='/ws'
    )
    yield test_client
    try:
        test_client.disconnect(namespace='/ws')
    except Exception:
        pass


@pytest.fixture()
def game_ids(client):
    """Map of game type -> catalog id."""
    return {g['type']: g['id'] for g in client.get('/api/games').get_json()}


@pytest.fixture()
def make_match():
    """Build a Match straight from descriptors, no Flask involved."""
    def _make(game_type='soccer-skeeball', mode=MODE_INDIVIDUAL, count=2, teams=(), **kwargs):
        relay = game_type == TEAM_RELAY_SHOOTOUT
        game = GameDescriptor(
            id='game-1',
            name='Test Game',
            type=game_type,
            max_players=0 if relay else 8,
            max_teams=4,
            teams_only=relay,
        )
        session = SessionConfig(
            game_id='game-1',
            mode=mode,
            player_count=count if mode == MODE_INDIVIDUAL else None,
            team_count=count if mode == MODE_TEAM else None,
            teams=list(teams),
            session_id='session-1',
        )
        return Match(game, session, **kwargs)
    return _make
