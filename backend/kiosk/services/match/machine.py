import logging
import random
import uuid
from typing import List, Optional, Tuple

from .errors import ConfigurationError, InvalidTransitionError
from .grid import build_scoring_grid
from .ledger import ScoreEntry, ScoreLedger
from .rounds import compute_round_plan
from .rules import (
    COUNTDOWN_SECONDS, GAME_RULES, GAME_TYPES, MAX_PLAYERS, MAX_TEAMS, MIN_PLAYERS,
    MIN_TEAMS, MODE_INDIVIDUAL, MODE_TEAM, TEAM_RELAY_SHOOTOUT, TOTAL_GAME_SECONDS,
    GameDescriptor, SessionConfig,
)
from .standings import compute_standings
from .teams import default_teams
from .timers import MatchTimers

logger = logging.getLogger(__name__)

SETUP = 'setup'
COUNTDOWN = 'countdown'
PLAYING = 'playing'
FINISHED = 'finished'

ROUND_PENDING = 'pending'
ROUND_RUNNING = 'running'
ROUND_COMPLETE = 'complete'
ROUND_SUBMITTED = 'submitted'

# Tick events
COUNTDOWN_EXPIRED = 'countdown_expired'
ROUND_FINISHED = 'round_complete'
TIME_EXPIRED = 'time_expired'
GAME_OVER = 'game_over'


def resolve_participants(game: Optional[GameDescriptor],
                         session: Optional[SessionConfig]) -> List[Tuple[int, str]]:
    """Validate the game/session pair and return (id, display name) pairs.

    This is the single place where mode gating (teams-only games, player and
    team limits) is enforced.
    """
    if game is None or session is None:
        raise ConfigurationError('Missing game or session context')
    if game.type not in GAME_TYPES:
        raise ConfigurationError(f'Unknown game type: {game.type!r}')
    if session.game_id != game.id:
        raise ConfigurationError('Session does not belong to this game')
    if session.mode not in (MODE_INDIVIDUAL, MODE_TEAM):
        raise ConfigurationError(f'Unknown mode: {session.mode!r}')
    if session.mode != MODE_TEAM and (game.teams_only or game.type == TEAM_RELAY_SHOOTOUT):
        raise ConfigurationError(f'{game.name or game.type} is played in teams only')

    if session.mode == MODE_INDIVIDUAL:
        count = session.player_count
        high = min(MAX_PLAYERS, game.max_players)
        if count is None or not MIN_PLAYERS <= count <= high:
            raise ConfigurationError(f'Player count must be {MIN_PLAYERS}-{high}, got {count}')
        return [(pid, f'Player {pid}') for pid in range(1, count + 1)]

    count = session.team_count
    high = min(MAX_TEAMS, game.max_teams)
    if count is None or not MIN_TEAMS <= count <= high:
        raise ConfigurationError(f'Team count must be {MIN_TEAMS}-{high}, got {count}')
    if session.teams:
        ids = sorted(t.id for t in session.teams)
        if ids != list(range(1, count + 1)):
            raise ConfigurationError('Team roster does not match the team count')
        return [(t.id, t.name or f'Team {t.id}') for t in sorted(session.teams, key=lambda t: t.id)]
    return [(t['id'], t['name']) for t in default_teams(count)]


class Match:
    """Owns one session's round plan, clocks and score ledger.

    Every action either completes or raises before touching state. Time only
    moves through ``tick()``.
    """

    def __init__(self, game: GameDescriptor, session: SessionConfig,
                 rng: Optional[random.Random] = None,
                 round_seconds: Optional[int] = None,
                 total_seconds: int = TOTAL_GAME_SECONDS,
                 countdown_seconds: int = COUNTDOWN_SECONDS):
        participants = resolve_participants(game, session)
        self.game = game
        self.session = session
        self.token = uuid.uuid4().hex
        self.rules = GAME_RULES[game.type]
        self.plan = compute_round_plan(game.type, session.mode, len(participants))
        self.grid = build_scoring_grid(game.type, len(participants), rng=rng)
        self.ledger = ScoreLedger(participants, self.plan.total_rounds, self.rules)
        self.timers = MatchTimers(
            round_seconds if round_seconds is not None else self.rules.round_seconds,
            total_seconds,
            countdown_seconds,
        )
        self.phase = SETUP
        self.current_round = 1
        self.round_status = ROUND_PENDING
        self.time_expired = False
        self.game_over_pending = False
        self.game_over_notice = False
        self.exited = False
        self._standings = None

    @property
    def uses_countdown(self) -> bool:
        return self.game.type == TEAM_RELAY_SHOOTOUT

    @property
    def active_participants(self):
        return self.plan.participants_for(self.current_round)

    @property
    def next_participants(self):
        return self.plan.participants_for(self.current_round + 1)

    @property
    def is_last_round(self) -> bool:
        return self.current_round >= self.plan.total_rounds

    # ---- guards ----

    def _require_playing(self, action: str) -> None:
        if self.exited:
            raise InvalidTransitionError(f'Cannot {action}: match has been exited')
        if self.phase != PLAYING:
            raise InvalidTransitionError(f'Cannot {action} during {self.phase}')
        if self.game_over_notice:
            raise InvalidTransitionError(f'Cannot {action}: acknowledge the time expiry first')

    def _require_active(self, participant_id: int) -> None:
        if participant_id not in self.active_participants:
            raise InvalidTransitionError(
                f'Participant {participant_id} is not playing round {self.current_round}'
            )

    @property
    def can_start_round(self) -> bool:
        if self.phase != PLAYING or self.game_over_notice or self.time_expired:
            return False
        if self.round_status == ROUND_PENDING:
            return True
        return self.round_status == ROUND_SUBMITTED and not self.is_last_round

    @property
    def can_submit(self) -> bool:
        return (self.phase == PLAYING and not self.game_over_notice
                and self.round_status in (ROUND_COMPLETE, ROUND_SUBMITTED))

    @property
    def can_finish(self) -> bool:
        if self.phase != PLAYING or self.game_over_notice:
            return False
        if self.round_status == ROUND_SUBMITTED and (self.is_last_round or self.time_expired):
            return True
        return self.time_expired and self.round_status == ROUND_PENDING

    # ---- actions ----

    def start_game(self) -> None:
        if self.exited or self.phase != SETUP:
            raise InvalidTransitionError(f'Cannot start game during {self.phase}')
        if self.uses_countdown:
            self.phase = COUNTDOWN
            self.timers.start_countdown()
        else:
            self.phase = PLAYING
        logger.info(f"[match-start] session={self.session.session_id} game_type={self.game.type} phase={self.phase}")

    def start_round(self) -> None:
        self._require_playing('start round')
        if self.time_expired:
            raise InvalidTransitionError('Game time has expired; no further rounds')
        if self.round_status == ROUND_RUNNING:
            raise InvalidTransitionError('A round is already running')
        if self.round_status == ROUND_COMPLETE:
            raise InvalidTransitionError('Submit scores before starting the next round')
        if self.round_status == ROUND_SUBMITTED:
            if self.is_last_round:
                raise InvalidTransitionError('All rounds have been played')
            self.current_round += 1
        self._begin_round()

    def _begin_round(self) -> None:
        self.round_status = ROUND_RUNNING
        self.timers.start_round()
        logger.info(
            f"[round-start] session={self.session.session_id} round={self.current_round}/{self.plan.total_rounds} "
            f"participants={list(self.active_participants)}"
        )

    def adjust_pending_score(self, participant_id: int, delta: int) -> int:
        self._require_playing('adjust score')
        self._require_active(participant_id)
        return self.ledger.adjust_pending_score(participant_id, self.current_round, delta)

    def step_pending_score(self, participant_id: int, direction: int) -> int:
        """Increment/decrement button: one game-specific step up or down."""
        step = self.rules.step if direction >= 0 else -self.rules.step
        return self.adjust_pending_score(participant_id, step)

    def set_pending_score(self, participant_id: int, raw_value) -> int:
        self._require_playing('enter score')
        self._require_active(participant_id)
        return self.ledger.set_pending_score(participant_id, self.current_round, raw_value)

    def pending_scores(self) -> dict:
        return {pid: self.ledger.pending(pid, self.current_round) for pid in self.active_participants}

    def submit_round_scores(self) -> List[ScoreEntry]:
        self._require_playing('submit scores')
        if self.round_status == ROUND_RUNNING:
            raise InvalidTransitionError('Round clock is still running')
        if self.round_status == ROUND_PENDING:
            raise InvalidTransitionError('Round has not been played yet')
        entries = [self.ledger.submit_round_score(pid, self.current_round) for pid in self.active_participants]
        self.round_status = ROUND_SUBMITTED
        submitted = {e.participant_id: e.scores_by_round[self.current_round - 1] for e in entries}
        logger.info(f"[round-submit] session={self.session.session_id} round={self.current_round} scores={submitted}")
        return entries

    def advance_or_finish(self) -> str:
        self._require_playing('advance')
        if self.can_finish:
            self._finish()
            return self.phase
        if self.round_status != ROUND_SUBMITTED:
            raise InvalidTransitionError('Submit scores for this round first')
        self.current_round += 1
        self.round_status = ROUND_PENDING
        return self.phase

    def _finish(self) -> None:
        self.timers.stop_all()
        self.phase = FINISHED
        self._standings = compute_standings(self.ledger.ordered_entries())
        logger.info(f"[match-finish] session={self.session.session_id} round={self.current_round}")

    def continue_after_time_expiry(self) -> None:
        if self.exited:
            raise InvalidTransitionError('Cannot continue: match has been exited')
        if not self.game_over_notice:
            raise InvalidTransitionError('There is no time expiry to acknowledge')
        self.game_over_notice = False

    def exit_game(self) -> None:
        """Stop every clock and invalidate the token held by pending tickers."""
        if self.exited:
            return
        self.timers.stop_all()
        self.exited = True
        self.token = None
        logger.info(f"[match-exit] session={self.session.session_id} phase={self.phase}")

    def tick(self, seconds: int = 1) -> List[str]:
        """Advance the clocks by whole seconds and resolve expiries."""
        events: List[str] = []
        if self.exited or self.phase == FINISHED:
            return events
        for _ in range(max(0, int(seconds))):
            result = self.timers.tick()
            if not result:
                continue
            if result.countdown_expired and self.phase == COUNTDOWN:
                self.phase = PLAYING
                self._begin_round()
                events.append(COUNTDOWN_EXPIRED)
            if result.round_expired:
                self.round_status = ROUND_COMPLETE
                events.append(ROUND_FINISHED)
                logger.info(f"[round-complete] session={self.session.session_id} round={self.current_round}")
            if result.total_expired:
                self.time_expired = True
                events.append(TIME_EXPIRED)
                logger.info(
                    f"[time-expired] session={self.session.session_id} round={self.current_round} "
                    f"round_running={self.timers.round_clock.running}"
                )
                if self.timers.round_clock.running:
                    # Let the round in progress finish before announcing game over.
                    self.game_over_pending = True
                else:
                    self._announce_game_over(events)
            elif result.round_expired and self.game_over_pending:
                self._announce_game_over(events)
        return events

    def _announce_game_over(self, events: List[str]) -> None:
        self.game_over_pending = False
        self.game_over_notice = True
        events.append(GAME_OVER)

    # ---- read side ----

    @property
    def standings(self):
        if self.phase != FINISHED:
            raise InvalidTransitionError('Standings are available once the match is finished')
        return self._standings

    def to_dict(self):
        return {
            'session_id': self.session.session_id,
            'game': {'id': self.game.id, 'name': self.game.name, 'type': self.game.type},
            'mode': self.session.mode,
            'phase': self.phase,
            'round_plan': self.plan.to_dict(),
            'current_round': self.current_round,
            'total_rounds': self.plan.total_rounds,
            'round_status': self.round_status,
            'active_participants': list(self.active_participants),
            'next_participants': list(self.next_participants),
            'grid': self.grid,
            'timers': self.timers.state().to_dict(),
            'scores': self.ledger.to_dict(),
            'pending': {str(pid): value for pid, value in self.pending_scores().items()},
            'score_step': self.rules.step,
            'score_floor': self.rules.floor,
            'score_ceiling': self.rules.ceiling,
            'time_expired': self.time_expired,
            'game_over_notice': self.game_over_notice,
            'can_start_round': self.can_start_round,
            'can_submit': self.can_submit,
            'can_finish': self.can_finish,
            'standings': [s.to_dict() for s in self._standings] if self._standings else None,
        }
