"""Match orchestration: round plans, scoring grids, clocks, ledger and standings.

The modules here, apart from ``registry`` and ``scheduler``, are free of
Flask so they can be driven tick by tick from tests. HTTP routes and socket
handlers import from this package.
"""
from .errors import ConfigurationError, InputValidationError, InvalidTransitionError, MatchError
from .machine import Match
from .rounds import RoundPlan, compute_round_plan
from .grid import build_scoring_grid
from .standings import compute_standings

__all__ = [
    'ConfigurationError', 'InputValidationError', 'InvalidTransitionError', 'MatchError',
    'Match', 'RoundPlan', 'compute_round_plan', 'build_scoring_grid', 'compute_standings',
]
