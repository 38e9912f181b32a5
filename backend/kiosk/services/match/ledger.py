import logging
from dataclasses import dataclass
from typing import Dict, List, Sequence, Tuple

from .errors import InputValidationError
from .rules import GameRules

logger = logging.getLogger(__name__)


@dataclass
class ScoreEntry:
    participant_id: int
    display_name: str
    scores_by_round: List[int]

    @property
    def total_score(self) -> int:
        return sum(self.scores_by_round)

    def to_dict(self):
        return {
            'participant_id': self.participant_id,
            'display_name': self.display_name,
            'scores_by_round': list(self.scores_by_round),
            'total_score': self.total_score,
        }


def parse_score(raw_value) -> int:
    """Coerce kiosk input to an int, raising InputValidationError otherwise."""
    if isinstance(raw_value, bool):
        raise InputValidationError(f'Score must be a whole number, got {raw_value!r}')
    if isinstance(raw_value, int):
        return raw_value
    if isinstance(raw_value, float) and raw_value.is_integer():
        return int(raw_value)
    if isinstance(raw_value, str):
        text = raw_value.strip()
        try:
            return int(text)
        except ValueError:
            pass
    raise InputValidationError(f'Score must be a whole number, got {raw_value!r}')


class ScoreLedger:
    """Committed per-round scores plus pending values staged for entry.

    Pending values are keyed by (participant_id, round_number). Committing a
    round overwrites that round's slot, so repeat submissions never add up.
    """

    def __init__(self, participants: Sequence[Tuple[int, str]], total_rounds: int, rules: GameRules):
        self.rules = rules
        self.total_rounds = total_rounds
        self.entries: Dict[int, ScoreEntry] = {
            pid: ScoreEntry(pid, name, [0] * total_rounds) for pid, name in participants
        }
        self._pending: Dict[Tuple[int, int], int] = {}

    def entry(self, participant_id: int) -> ScoreEntry:
        try:
            return self.entries[participant_id]
        except KeyError:
            raise InputValidationError(f'Unknown participant {participant_id!r}') from None

    def ordered_entries(self) -> List[ScoreEntry]:
        return list(self.entries.values())

    def _clamp(self, value: int) -> int:
        return max(self.rules.floor, min(self.rules.ceiling, value))

    def pending(self, participant_id: int, round_number: int) -> int:
        return self._pending.get((participant_id, round_number), 0)

    def adjust_pending_score(self, participant_id: int, round_number: int, delta: int) -> int:
        self.entry(participant_id)
        current = self.pending(participant_id, round_number)
        try:
            step = parse_score(delta)
        except InputValidationError as exc:
            # Nothing is staged, so report what is still pending
            exc.value = current
            raise
        value = self._clamp(current + step)
        self._pending[(participant_id, round_number)] = value
        return value

    def set_pending_score(self, participant_id: int, round_number: int, raw_value) -> int:
        """Stage a directly typed value.

        Values under the floor clamp up to it. Anything unparseable or past
        the configured bounds is staged as 0 and the rejection re-raised.
        """
        self.entry(participant_id)
        key = (participant_id, round_number)
        try:
            value = parse_score(raw_value)
            if value > self.rules.ceiling:
                raise InputValidationError(f'Score {value} is above the maximum of {self.rules.ceiling}')
            if value < self.rules.floor and self.rules.floor < 0:
                raise InputValidationError(f'Score {value} is below the minimum of {self.rules.floor}')
        except InputValidationError as exc:
            self._pending[key] = 0
            logger.warning(f"[score-rejected] participant={participant_id} round={round_number} raw={raw_value!r}")
            exc.value = 0
            raise
        value = max(self.rules.floor, value)
        self._pending[key] = value
        return value

    def submit_round_score(self, participant_id: int, round_number: int, raw_value=None) -> ScoreEntry:
        """Write one participant's round slot, defaulting to the staged value."""
        entry = self.entry(participant_id)
        if not 1 <= round_number <= self.total_rounds:
            raise InputValidationError(f'Round {round_number} is outside 1-{self.total_rounds}')
        if raw_value is None:
            value = self.pending(participant_id, round_number)
        else:
            value = self.set_pending_score(participant_id, round_number, raw_value)
        entry.scores_by_round[round_number - 1] = value
        return entry

    def to_dict(self):
        return [e.to_dict() for e in self.entries.values()]
