"""Capabilities the weather manager needs from the rest of the client."""

from __future__ import annotations

import random
from typing import Any, Protocol

from pygame.math import Vector3

from skyengine.fallback import Colour
from skyengine.moon import MoonState
from skyengine.result import WeatherResult


class WorldClock(Protocol):
    def days_passed(self) -> int: ...

    def game_hour(self) -> float: ...

    def is_exterior(self) -> bool:
        """True for exterior and quasi-exterior cells."""
        ...

    def player_position(self) -> Vector3: ...

    def player_region(self) -> str | None:
        """Region id of the player's cell, or ``None`` outside any cell."""
        ...


class SoundSink(Protocol):
    def play(self, sound_id: str, volume: float = 1.0, pitch: float = 1.0) -> None: ...

    def play_loop(self, sound_id: str, volume: float = 1.0) -> Any:
        """Start a looping sound and return a handle for it."""
        ...

    def set_volume(self, handle: Any, volume: float) -> None: ...

    def stop(self, handle: Any) -> None: ...


class SceneSink(Protocol):
    def set_sky_enabled(self, enabled: bool) -> None: ...

    def set_sun_enabled(self, enabled: bool) -> None: ...

    def configure_fog(self, depth: float, colour: Colour) -> None: ...

    def set_ambient_colour(self, colour: Colour) -> None: ...

    def set_sun_colour(self, colour: Colour) -> None: ...

    def set_sun_direction(self, direction: Vector3) -> None: ...

    def set_storm_direction(self, direction: Vector3) -> None: ...

    def set_moon_state(self, name: str, state: MoonState) -> None: ...

    def set_weather(self, result: WeatherResult) -> None: ...


class Dice(Protocol):
    def roll_dice(self, sides: int) -> int:
        """Uniform integer in ``[0, sides - 1]``."""
        ...


class RandomDice:
    """Dice backed by a private :class:`random.Random` stream."""

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def roll_dice(self, sides: int) -> int:
        return self._rng.randrange(sides)
