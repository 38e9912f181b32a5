from dataclasses import dataclass
from typing import Iterable, List

from .ledger import ScoreEntry

WIN, LOSS, TIE = 'Win', 'Loss', 'Tie'


@dataclass(frozen=True)
class Standing:
    participant_id: int
    display_name: str
    total_score: int
    rank: int
    label: str

    def to_dict(self):
        return {
            'participant_id': self.participant_id,
            'display_name': self.display_name,
            'total_score': self.total_score,
            'rank': self.rank,
            'label': self.label,
        }


def compute_standings(entries: Iterable[ScoreEntry]) -> List[Standing]:
    """Rank entries by total score, highest first.

    Ties keep their original order. Rank is competition style (1, 1, 3).
    Everyone on the top score is a Win, or a Tie when shared.
    """
    ordered = sorted(entries, key=lambda e: e.total_score, reverse=True)
    if not ordered:
        return []
    highest = ordered[0].total_score
    top_count = sum(1 for e in ordered if e.total_score == highest)

    standings = []
    rank = 0
    previous = None
    for position, entry in enumerate(ordered, start=1):
        if entry.total_score != previous:
            rank = position
            previous = entry.total_score
        if entry.total_score == highest:
            label = TIE if top_count > 1 else WIN
        else:
            label = LOSS
        standings.append(Standing(entry.participant_id, entry.display_name, entry.total_score, rank, label))
    return standings
