import math
from dataclasses import dataclass
from typing import Tuple

from .errors import ConfigurationError
from .rules import (
    GAME_TYPES, MAX_PLAYERS, MAX_TEAMS, MIN_PLAYERS, MIN_TEAMS, MODE_TEAM,
    TEAM_RELAY_SHOOTOUT,
)


@dataclass(frozen=True)
class RoundPlan:
    total_rounds: int
    participants_per_round: Tuple[Tuple[int, ...], ...]

    def participants_for(self, round_number: int) -> Tuple[int, ...]:
        """Participant ids shooting in the given 1-indexed round."""
        if 1 <= round_number <= self.total_rounds:
            return self.participants_per_round[round_number - 1]
        return ()

    def to_dict(self):
        return {
            'total_rounds': self.total_rounds,
            'participants_per_round': [list(group) for group in self.participants_per_round],
        }


def _bands(participant_count: int, rounds: int) -> Tuple[Tuple[int, ...], ...]:
    band_size = math.ceil(participant_count / rounds)
    return tuple(
        tuple(range(i * band_size + 1, min((i + 1) * band_size, participant_count) + 1))
        for i in range(rounds)
    )


def compute_round_plan(game_type: str, mode: str, participant_count: int) -> RoundPlan:
    """Split participants 1..N into timed rounds.

    Team relay puts every team in a single round. Otherwise up to four
    participants shoot solo, 5-6 share three rounds and 7-8 share four, in
    contiguous bands of ceil(N / rounds).
    """
    if game_type not in GAME_TYPES:
        raise ConfigurationError(f'Unknown game type: {game_type!r}')
    if isinstance(participant_count, bool) or not isinstance(participant_count, int):
        raise ConfigurationError('Participant count must be an integer')

    if mode == MODE_TEAM or game_type == TEAM_RELAY_SHOOTOUT:
        low, high = MIN_TEAMS, MAX_TEAMS
    else:
        low, high = MIN_PLAYERS, MAX_PLAYERS
    if not low <= participant_count <= high:
        raise ConfigurationError(
            f'{participant_count} participants is outside the supported range {low}-{high}'
        )

    if game_type == TEAM_RELAY_SHOOTOUT:
        return RoundPlan(1, (tuple(range(1, participant_count + 1)),))
    if participant_count <= 4:
        return RoundPlan(participant_count, tuple((i,) for i in range(1, participant_count + 1)))
    rounds = 3 if participant_count <= 6 else 4
    return RoundPlan(rounds, _bands(participant_count, rounds))
