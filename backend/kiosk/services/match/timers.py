"""Countdown clocks advanced by an external one-second tick.

Nothing here sleeps or schedules. The owner calls ``MatchTimers.tick()`` once
per elapsed second and reacts to the returned ``TickResult``.
"""
from dataclasses import dataclass

IDLE = 'idle'
RUNNING = 'running'
EXPIRED = 'expired'


class Countdown:
    """A single clock: idle -> running -> expired."""

    def __init__(self, duration: int):
        self.duration = int(duration)
        self.remaining = self.duration
        self.status = IDLE

    @property
    def running(self) -> bool:
        return self.status == RUNNING

    def start(self) -> None:
        self.remaining = self.duration
        self.status = RUNNING

    def stop(self) -> None:
        if self.status == RUNNING:
            self.status = IDLE

    def tick(self) -> bool:
        """Advance one second. Returns True on the tick that reaches zero."""
        if self.status != RUNNING:
            return False
        self.remaining = max(0, self.remaining - 1)
        if self.remaining == 0:
            self.status = EXPIRED
            return True
        return False


@dataclass(frozen=True)
class TickResult:
    countdown_expired: bool = False
    round_expired: bool = False
    total_expired: bool = False

    def __bool__(self):
        return self.countdown_expired or self.round_expired or self.total_expired


@dataclass(frozen=True)
class TimerState:
    round_seconds_remaining: int
    total_seconds_remaining: int
    countdown_seconds_remaining: int
    round_running: bool
    total_running: bool

    def to_dict(self):
        return {
            'round_seconds_remaining': self.round_seconds_remaining,
            'total_seconds_remaining': self.total_seconds_remaining,
            'countdown_seconds_remaining': self.countdown_seconds_remaining,
            'round_running': self.round_running,
            'total_running': self.total_running,
        }


class MatchTimers:
    """Round clock, total game clock and the optional pre-round countdown."""

    def __init__(self, round_seconds: int, total_seconds: int, countdown_seconds: int):
        self.round_clock = Countdown(round_seconds)
        self.total_clock = Countdown(total_seconds)
        self.countdown_clock = Countdown(countdown_seconds)

    def start_countdown(self) -> None:
        self.countdown_clock.start()

    def start_round(self) -> None:
        self.round_clock.start()
        # The total clock starts once, on the first round, and is never reset.
        if self.total_clock.status == IDLE:
            self.total_clock.start()

    def tick(self) -> TickResult:
        # All clocks are evaluated in the same turn so expiries never interleave.
        return TickResult(
            countdown_expired=self.countdown_clock.tick(),
            round_expired=self.round_clock.tick(),
            total_expired=self.total_clock.tick(),
        )

    def stop_all(self) -> None:
        for clock in (self.round_clock, self.total_clock, self.countdown_clock):
            clock.stop()

    @property
    def any_running(self) -> bool:
        return self.round_clock.running or self.total_clock.running or self.countdown_clock.running

    def state(self) -> TimerState:
        return TimerState(
            round_seconds_remaining=self.round_clock.remaining,
            total_seconds_remaining=self.total_clock.remaining,
            countdown_seconds_remaining=self.countdown_clock.remaining,
            round_running=self.round_clock.running,
            total_running=self.total_clock.running,
        )
