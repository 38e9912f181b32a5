"""Scoring grids shown on the kiosk for reference and manual entry."""
import random
from typing import List, Optional, Union

from .errors import ConfigurationError
from .rules import ELITE_SHOOTER, MAX_TEAMS, MIN_TEAMS, SOCCER_SKEEBALL, TEAM_RELAY_SHOOTOUT

GRID_ROWS, GRID_COLS = 3, 5
CELLS_PER_TEAM = 3
AVOID = 'X'
RELAY_COLORS = ('R', 'B', 'G', 'Y')

Cell = Union[int, str, None]

SOCCER_GRID = (
    (50, 25, 15, 25, 50),
    (25, -10, 10, -10, 25),
    (15, 10, 10, 10, 15),
)

ELITE_GRID = (
    (1, 2, 3, 4, 5),
    (6, AVOID, AVOID, AVOID, 7),
    (8, AVOID, AVOID, AVOID, 9),
)


def cell_value(cell: Cell) -> int:
    """Point value of a numeric cell; 'X' and color tags count 0."""
    if isinstance(cell, int):
        return cell
    return 0


def _relay_grid(team_count: Optional[int], rng: random.Random) -> List[List[Cell]]:
    if team_count is None or not MIN_TEAMS <= team_count <= MAX_TEAMS:
        raise ConfigurationError(f'Team relay needs {MIN_TEAMS}-{MAX_TEAMS} teams, got {team_count}')
    cells: List[Cell] = [None] * (GRID_ROWS * GRID_COLS)
    positions = rng.sample(range(len(cells)), CELLS_PER_TEAM * team_count)
    for i, pos in enumerate(positions):
        cells[pos] = RELAY_COLORS[i // CELLS_PER_TEAM]
    return [cells[r * GRID_COLS:(r + 1) * GRID_COLS] for r in range(GRID_ROWS)]


def build_scoring_grid(game_type: str, team_count: Optional[int] = None,
                       rng: Optional[random.Random] = None) -> List[List[Cell]]:
    if game_type == SOCCER_SKEEBALL:
        return [list(row) for row in SOCCER_GRID]
    if game_type == ELITE_SHOOTER:
        return [list(row) for row in ELITE_GRID]
    if game_type == TEAM_RELAY_SHOOTOUT:
        return _relay_grid(team_count, rng or random.Random())
    raise ConfigurationError(f'Unknown game type: {game_type!r}')
