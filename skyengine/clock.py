"""Frame timing and the in-game calendar clock."""

from __future__ import annotations

import time

# real seconds per game hour at timescale 1
SECONDS_PER_HOUR = 3600.0


class SessionTimer:
    """Track monotonic frame timing.

    Values are derived from :func:`time.perf_counter` so long preview sessions
    do not drift with wall clock adjustments.
    """

    def __init__(self) -> None:
        now = time.perf_counter()
        self._last_tick = now
        self._session_start = now

        self.delta_time = 0.0
        self.session_time = 0.0

    def tick(self) -> float:
        """Advance timer state and return delta time in seconds."""
        now = time.perf_counter()
        self.delta_time = max(0.0, now - self._last_tick)
        self._last_tick = now
        self.session_time = now - self._session_start
        return self.delta_time


class GameClock:
    """Day count and hour of day, advanced at ``timescale`` game seconds per real second."""

    def __init__(self, day: int = 0, hour: float = 14.0, timescale: float = 30.0) -> None:
        self.day = day
        self.hour = hour
        self.timescale = timescale

    def game_hours_for(self, real_seconds: float) -> float:
        return real_seconds * self.timescale / SECONDS_PER_HOUR

    def advance_hours(self, hours: float) -> None:
        """Move the clock forward (or back), rolling the day over at midnight."""
        total = self.hour + hours
        days, self.hour = divmod(total, 24.0)
        self.day = max(0, self.day + int(days))

    def advance(self, real_seconds: float) -> float:
        """Advance by real elapsed time and return the game hours that passed."""
        hours = self.game_hours_for(real_seconds)
        self.advance_hours(hours)
        return hours
