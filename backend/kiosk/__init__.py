from flask import Flask
from flask_sqlalchemy import SQLAlchemy
from flask_bcrypt import Bcrypt
from flask_cors import CORS
from flask_migrate import Migrate
from flask_socketio import SocketIO
import click
from config import Config

db = SQLAlchemy()
bcrypt = Bcrypt()
migrate = Migrate()
allowed_origins = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
    "http://localhost:5000",
    "http://127.0.0.1:5000",
]
socketio = SocketIO(cors_allowed_origins=allowed_origins, async_mode=None)

def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)

    db.init_app(flask_app)
    bcrypt.init_app(flask_app)
    migrate.init_app(flask_app, db)
    CORS(flask_app, supports_credentials=True, origins=allowed_origins)

    socketio.init_app(flask_app, cors_allowed_origins=allowed_origins)

    # Only the hash of the shared reset passphrase is kept in memory
    passphrase = flask_app.config.get('ADMIN_RESET_PASSPHRASE') or Config.ADMIN_RESET_PASSPHRASE
    flask_app.config['ADMIN_RESET_HASH'] = bcrypt.generate_password_hash(passphrase).decode('utf-8')
    flask_app.config.pop('ADMIN_RESET_PASSPHRASE', None)

    # Live matches are owned by the app, never by module globals
    from kiosk.services.match.registry import get_registry
    get_registry(flask_app)

    from kiosk.main import main
    flask_app.register_blueprint(main)

    from kiosk.api.games import games
    flask_app.register_blueprint(games, url_prefix='/api/games')

    from kiosk.api.sessions import sessions
    flask_app.register_blueprint(sessions, url_prefix='/api/sessions')

    from kiosk.api.admin import admin
    flask_app.register_blueprint(admin, url_prefix='/api/admin')

    from kiosk.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    from kiosk.models import seed_default_games

    @click.command('seed-games')
    def seed_games_command():
        """Creates tables and seeds the default game catalog."""
        with flask_app.app_context():
            db.create_all()
            created = seed_default_games()
            print(f'Seeded {created} games.')

    @click.command('db-reset')
    def db_reset_command():
        """Drops, recreates, and seeds the database."""
        with flask_app.app_context():
            db.drop_all()
            db.create_all()
            seed_default_games()
            print('Database has been reset and seeded!')

    flask_app.cli.add_command(seed_games_command)
    flask_app.cli.add_command(db_reset_command)

    if flask_app.config.get('AUTO_SEED_GAMES'):
        with flask_app.app_context():
            db.create_all()
            seed_default_games()

    return flask_app
