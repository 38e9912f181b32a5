import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///kiosk.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Match clocks (seconds)
    ROUND_DURATION_SEC = int(os.environ.get('ROUND_DURATION_SEC', '45'))
    RELAY_ROUND_DURATION_SEC = int(os.environ.get('RELAY_ROUND_DURATION_SEC', '300'))
    TOTAL_GAME_DURATION_SEC = int(os.environ.get('TOTAL_GAME_DURATION_SEC', '300'))
    COUNTDOWN_DURATION_SEC = int(os.environ.get('COUNTDOWN_DURATION_SEC', '5'))
    # Background tick cadence (seconds)
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1.0'))
    # Let kiosk clients drive the clocks themselves via POST .../match/tick
    MANUAL_TICK_ENABLED = os.environ.get('MANUAL_TICK_ENABLED', 'false').lower() in ('1', 'true', 'yes', 'on')
    # Shared staff passphrase for the admin reset; hashed at startup
    ADMIN_RESET_PASSPHRASE = os.environ.get('ADMIN_RESET_PASSPHRASE') or 'eg2017'
    # Grace period before a disconnected kiosk display ends its match
    OWNER_DISCONNECT_GRACE_SEC = float(os.environ.get('OWNER_DISCONNECT_GRACE_SEC', '2.0'))
    # Seed the default game catalog on startup when it is empty
    AUTO_SEED_GAMES = os.environ.get('AUTO_SEED_GAMES', 'true').lower() in ('1', 'true', 'yes', 'on')
