"""Per-game-type constants and the read-only descriptors the core consumes."""
from dataclasses import dataclass, field
from typing import List, Optional

SOCCER_SKEEBALL = 'soccer-skeeball'
ELITE_SHOOTER = 'elite-shooter'
TEAM_RELAY_SHOOTOUT = 'team-relay-shootout'
GAME_TYPES = (SOCCER_SKEEBALL, ELITE_SHOOTER, TEAM_RELAY_SHOOTOUT)

MODE_INDIVIDUAL = 'individual'
MODE_TEAM = 'team'

MIN_PLAYERS, MAX_PLAYERS = 2, 8
MIN_TEAMS, MAX_TEAMS = 2, 4

TOTAL_GAME_SECONDS = 300
COUNTDOWN_SECONDS = 5


@dataclass(frozen=True)
class GameRules:
    round_seconds: int
    step: int
    floor: int
    ceiling: int


GAME_RULES = {
    # 10 balls, zones from -10 to 50
    SOCCER_SKEEBALL: GameRules(round_seconds=45, step=5, floor=-100, ceiling=500),
    # one point per perimeter zone 1-9
    ELITE_SHOOTER: GameRules(round_seconds=45, step=1, floor=0, ceiling=9),
    TEAM_RELAY_SHOOTOUT: GameRules(round_seconds=300, step=1, floor=0, ceiling=999),
}


@dataclass(frozen=True)
class GameDescriptor:
    id: str
    name: str
    type: str
    max_players: int
    max_teams: int
    teams_only: bool = False

    @classmethod
    def from_dict(cls, data: dict) -> 'GameDescriptor':
        return cls(
            id=str(data.get('id')),
            name=data.get('name') or '',
            type=data.get('type') or '',
            max_players=int(data.get('maxPlayers') or 0),
            max_teams=int(data.get('maxTeams') or 0),
            teams_only=bool(data.get('teamsOnly')),
        )


@dataclass(frozen=True)
class TeamDescriptor:
    id: int
    name: str
    color: str
    players: tuple = ()


@dataclass(frozen=True)
class SessionConfig:
    game_id: str
    mode: str
    player_count: Optional[int] = None
    team_count: Optional[int] = None
    teams: List[TeamDescriptor] = field(default_factory=list)
    session_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict) -> 'SessionConfig':
        teams = [
            TeamDescriptor(
                id=int(t.get('id')),
                name=t.get('name') or '',
                color=t.get('color') or '',
                players=tuple(int(p) for p in (t.get('players') or [])),
            )
            for t in (data.get('teams') or [])
        ]
        player_count = data.get('playerCount')
        team_count = data.get('teamCount')
        return cls(
            game_id=str(data.get('gameId')),
            mode=data.get('mode') or '',
            player_count=int(player_count) if player_count is not None else None,
            team_count=int(team_count) if team_count is not None else None,
            teams=teams,
            session_id=data.get('id'),
        )
