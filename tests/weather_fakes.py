"""Deterministic collaborators shared by the weather tests."""

from __future__ import annotations

import os
from pathlib import Path

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

from pygame.math import Vector3

from skyengine.clock import GameClock
from skyengine.fallback import Fallback
from skyengine.manager import WeatherManager
from skyengine.preview import LoggingSound, PreviewWorld, PygameSky
from skyengine.profile import WeatherSettings, load_weather_profiles

REPO_ROOT = Path(__file__).resolve().parents[1]
CONFIG_FILE = REPO_ROOT / "data" / "weather.json"


class ScriptedDice:
    """Dice that replay a fixed list of rolls and remember what was asked."""

    def __init__(self, rolls: list[int] | None = None) -> None:
        self.rolls = list(rolls or [])
        self.requests: list[int] = []

    def roll_dice(self, sides: int) -> int:
        self.requests.append(sides)
        if not self.rolls:
            return 0
        return self.rolls.pop(0) % sides


def load_fixtures():
    fallback = Fallback.from_file(CONFIG_FILE)
    settings = WeatherSettings.from_fallback(fallback)
    return fallback, settings, load_weather_profiles(fallback, settings)


def make_manager(
    region: str | None = None,
    hour: float = 12.0,
    day: int = 1,
    dice: ScriptedDice | None = None,
) -> tuple[WeatherManager, PreviewWorld, PygameSky, LoggingSound]:
    clock = GameClock(day=day, hour=hour)
    world = PreviewWorld(clock=clock, region=region, position=Vector3(0.0, 0.0, 0.0))
    sky = PygameSky((320, 200))
    sound = LoggingSound()
    manager = WeatherManager.from_config(CONFIG_FILE, world, sky, sound, dice or ScriptedDice())
    manager.set_hour(hour)
    return manager, world, sky, sound


def advance_seconds(manager: WeatherManager, seconds: float, duration: float = 0.0) -> None:
    manager.advance_time(seconds / 3600.0)
    manager.update(duration)
