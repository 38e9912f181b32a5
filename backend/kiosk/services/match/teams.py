import random
from typing import Dict, List, Optional

from .errors import ConfigurationError
from .rules import MAX_PLAYERS, MAX_TEAMS, MIN_PLAYERS

TEAM_COLORS = ('red', 'blue', 'green', 'yellow')
TEAM_NAMES = ('Red Team', 'Blue Team', 'Green Team', 'Yellow Team')
MAX_PLAYERS_PER_TEAM = 2


def team_count_for_players(player_count: int) -> int:
    if not MIN_PLAYERS <= player_count <= MAX_PLAYERS:
        raise ConfigurationError(f'{player_count} players cannot be split into teams')
    if player_count <= 4:
        return 2
    if player_count <= 6:
        return 3
    return 4


def default_teams(team_count: int, assignments: Optional[Dict[int, int]] = None) -> List[dict]:
    """Build the team roster payload; assignments maps player id -> team id."""
    if not 1 <= team_count <= MAX_TEAMS:
        raise ConfigurationError(f'Unsupported team count: {team_count}')
    assignments = assignments or {}
    return [
        {
            'id': idx + 1,
            'name': TEAM_NAMES[idx],
            'color': TEAM_COLORS[idx],
            'players': sorted(pid for pid, tid in assignments.items() if tid == idx + 1),
        }
        for idx in range(team_count)
    ]


def randomize_team_assignments(player_count: int, team_count: int,
                               rng: Optional[random.Random] = None) -> Dict[int, int]:
    """Shuffle players into teams, filling each team up to two players."""
    rng = rng or random.Random()
    player_ids = list(range(1, player_count + 1))
    rng.shuffle(player_ids)
    assignments = {}
    for idx, pid in enumerate(player_ids):
        team_idx = idx // MAX_PLAYERS_PER_TEAM
        if team_idx < team_count:
            assignments[pid] = team_idx + 1
    return assignments
