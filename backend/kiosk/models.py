from kiosk import db
from kiosk.services.match.rules import ELITE_SHOOTER, SOCCER_SKEEBALL, TEAM_RELAY_SHOOTOUT
from datetime import datetime, timezone
import json
import uuid

SESSION_STATUSES = ('pending', 'active', 'completed')


def _uuid():
    return str(uuid.uuid4())


class Game(db.Model):
    __tablename__ = 'game'
    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    name = db.Column(db.String(64), nullable=False)
    type = db.Column(db.String(32), nullable=False) # soccer-skeeball, elite-shooter, team-relay-shootout
    description = db.Column(db.Text, nullable=False, default='')
    max_players = db.Column(db.Integer, nullable=False)
    max_teams = db.Column(db.Integer, nullable=False)
    teams_only = db.Column(db.Boolean, nullable=False, default=False)
    sessions = db.relationship('GameSession', back_populates='game', lazy='dynamic')

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'type': self.type,
            'description': self.description,
            'maxPlayers': self.max_players,
            'maxTeams': self.max_teams,
            'teamsOnly': bool(self.teams_only),
        }


class GameSession(db.Model):
    __tablename__ = 'game_session'
    id = db.Column(db.String(36), primary_key=True, default=_uuid)
    game_id = db.Column(db.String(36), db.ForeignKey('game.id'), nullable=False)
    mode = db.Column(db.String(16), nullable=False) # individual, team
    player_count = db.Column(db.Integer, nullable=True)
    team_count = db.Column(db.Integer, nullable=True)
    teams = db.Column(db.Text, nullable=True)  # JSON-encoded list of {id, name, color, players}
    status = db.Column(db.String(16), nullable=False, default='pending') # pending, active, completed
    results = db.Column(db.Text, nullable=True)  # JSON-encoded final standings
    created_at = db.Column(db.DateTime, nullable=False, default=lambda: datetime.now(timezone.utc))
    game = db.relationship('Game', back_populates='sessions')

    def to_dict(self):
        return {
            'id': self.id,
            'gameId': self.game_id,
            'mode': self.mode,
            'playerCount': self.player_count,
            'teamCount': self.team_count,
            'teams': json.loads(self.teams) if self.teams else None,
            'status': self.status,
            'results': json.loads(self.results) if self.results else None,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }


DEFAULT_GAMES = [
    {
        'name': 'Soccer Skeeball',
        'type': SOCCER_SKEEBALL,
        'description': 'Roll soccer balls up a ramp to score points in different target holes.',
        'max_players': 8,
        'max_teams': 4,
        'teams_only': False,
    },
    {
        'name': 'Elite Shooter',
        'type': ELITE_SHOOTER,
        'description': 'Hit the numbered perimeter targets before the clock runs out. Avoid the X zones.',
        'max_players': 8,
        'max_teams': 4,
        'teams_only': False,
    },
    {
        'name': 'Team Relay Shootout',
        'type': TEAM_RELAY_SHOOTOUT,
        'description': 'Teams rotate shooters and aim for their own colored zones in one five minute game.',
        'max_players': 0,
        'max_teams': 4,
        'teams_only': True,
    },
]


def seed_default_games() -> int:
    """Insert the default catalog if no games exist. Returns rows created."""
    if Game.query.first() is not None:
        return 0
    for data in DEFAULT_GAMES:
        db.session.add(Game(**data))
    db.session.commit()
    return len(DEFAULT_GAMES)
