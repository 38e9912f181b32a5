import threading
from typing import Any, Dict, Optional, Set, Tuple

from .machine import Match

EXTENSION_KEY = 'kiosk_matches'


class MatchRegistry:
    """Live matches keyed by session id.

    ``lock`` serializes HTTP actions, socket handlers and ticker turns, so a
    match is only ever touched by one actor at a time. The socket owner
    bookkeeping lives here too and is guarded by the same lock.
    """

    def __init__(self):
        self.lock = threading.RLock()
        self._matches: Dict[str, Match] = {}
        self.tickers: Set[Tuple[str, str]] = set()
        # socket sid -> {'session_id', 'is_session_owner'}
        self.socket_contexts: Dict[str, Dict[str, Any]] = {}
        self.owner_counts: Dict[str, int] = {}
        self.end_deadlines: Dict[str, float] = {}

    def get(self, session_id: str) -> Optional[Match]:
        return self._matches.get(session_id)

    def put(self, session_id: str, match: Match) -> Match:
        with self.lock:
            self.discard(session_id)
            self._matches[session_id] = match
            return match

    def discard(self, session_id: str) -> Optional[Match]:
        with self.lock:
            match = self._matches.pop(session_id, None)
            if match is not None:
                match.exit_game()
            return match

    def session_ids(self) -> list:
        with self.lock:
            return list(self._matches)

    def __len__(self):
        return len(self._matches)

    def __contains__(self, session_id):
        return session_id in self._matches


def get_registry(app) -> MatchRegistry:
    return app.extensions.setdefault(EXTENSION_KEY, MatchRegistry())
