"""Pygame stand-ins for the world, sky renderer and sound system."""

from __future__ import annotations

import itertools
import logging
import math
from dataclasses import dataclass, field

import pygame
from pygame.math import Vector3

from skyengine.clock import GameClock
from skyengine.fallback import Colour
from skyengine.moon import MoonPhase, MoonState
from skyengine.result import WeatherResult

LOGGER = logging.getLogger(__name__)

GROUND_COLOR = (38, 44, 34)
HORIZON_RATIO = 0.72
MOON_RADII = {"Masser": 9, "Secunda": 4}
RAIN_COLOR = (150, 160, 176, 90)
# lit fraction of the disc per phase, negative while waning
PHASE_ILLUMINATION = {
    MoonPhase.FULL: 1.0,
    MoonPhase.WANING_GIBBOUS: -0.75,
    MoonPhase.THIRD_QUARTER: -0.5,
    MoonPhase.WANING_CRESCENT: -0.25,
    MoonPhase.NEW: 0.0,
    MoonPhase.WAXING_CRESCENT: 0.25,
    MoonPhase.FIRST_QUARTER: 0.5,
    MoonPhase.WAXING_GIBBOUS: 0.75,
}


def to_rgb(colour: Colour) -> tuple[int, int, int]:
    return tuple(max(0, min(255, int(round(channel * 255.0)))) for channel in colour[:3])


@dataclass
class PreviewWorld:
    """A fixed exterior spot whose calendar is driven by a :class:`GameClock`."""

    clock: GameClock
    region: str | None
    position: Vector3 = field(default_factory=lambda: Vector3(0.0, 0.0, 0.0))
    exterior: bool = True

    def days_passed(self) -> int:
        return self.clock.day

    def game_hour(self) -> float:
        return self.clock.hour

    def is_exterior(self) -> bool:
        return self.exterior

    def player_position(self) -> Vector3:
        return Vector3(self.position)

    def player_region(self) -> str | None:
        return self.region


class LoggingSound:
    """Sound sink that logs requests instead of mixing audio."""

    def __init__(self) -> None:
        self._handles = itertools.count(1)
        self.loops: dict[int, str] = {}
        self.volumes: dict[int, float] = {}
        self.played: list[str] = []

    def play(self, sound_id: str, volume: float = 1.0, pitch: float = 1.0) -> None:
        LOGGER.info("sound %s (volume %.2f)", sound_id, volume)
        self.played.append(sound_id)

    def play_loop(self, sound_id: str, volume: float = 1.0) -> int:
        handle = next(self._handles)
        self.loops[handle] = sound_id
        self.volumes[handle] = volume
        LOGGER.info("loop %s started", sound_id)
        return handle

    def set_volume(self, handle: int, volume: float) -> None:
        if handle in self.loops:
            self.volumes[handle] = volume

    def stop(self, handle: int) -> None:
        sound_id = self.loops.pop(handle, None)
        self.volumes.pop(handle, None)
        if sound_id is not None:
            LOGGER.info("loop %s stopped", sound_id)


class PygameSky:
    """Scene sink that keeps the latest sky inputs and draws them to a surface."""

    def __init__(self, internal_size: tuple[int, int]) -> None:
        self.width, self.height = internal_size
        self.horizon = int(self.height * HORIZON_RATIO)
        self.sky_enabled = True
        self.sun_enabled = False
        self.fog_depth = 1.0
        self.fog_colour: Colour = (0.0, 0.0, 0.0, 1.0)
        self.ambient_colour: Colour = (0.0, 0.0, 0.0, 1.0)
        self.sun_colour: Colour = (0.0, 0.0, 0.0, 1.0)
        self.sun_direction = Vector3(0.0, 0.0, -1.0)
        self.storm_direction = Vector3(0.0, 1.0, 0.0)
        self.moons: dict[str, MoonState] = {}
        self.weather: WeatherResult | None = None
        self._cloud_offset = 0.0
        self._overlay = pygame.Surface((self.width, self.height), pygame.SRCALPHA)

    # SceneSink

    def set_sky_enabled(self, enabled: bool) -> None:
        self.sky_enabled = enabled

    def set_sun_enabled(self, enabled: bool) -> None:
        self.sun_enabled = enabled

    def configure_fog(self, depth: float, colour: Colour) -> None:
        self.fog_depth = depth
        self.fog_colour = colour

    def set_ambient_colour(self, colour: Colour) -> None:
        self.ambient_colour = colour

    def set_sun_colour(self, colour: Colour) -> None:
        self.sun_colour = colour

    def set_sun_direction(self, direction: Vector3) -> None:
        self.sun_direction = Vector3(direction)

    def set_storm_direction(self, direction: Vector3) -> None:
        self.storm_direction = Vector3(direction)

    def set_moon_state(self, name: str, state: MoonState) -> None:
        self.moons[name] = state

    def set_weather(self, result: WeatherResult) -> None:
        self.weather = result

    # drawing

    def _arc_position(self, angle_degrees: float) -> tuple[int, int]:
        radians = math.radians(angle_degrees)
        x = self.width / 2 - math.cos(radians) * self.width * 0.45
        y = self.horizon - math.sin(radians) * self.horizon * 0.85
        return int(round(x)), int(round(y))

    def _draw_sun(self, surface: pygame.Surface) -> None:
        # the stored vector points from the sun toward the ground
        position = -self.sun_direction
        if not self.sun_enabled or position.z <= 0.0:
            return
        angle = math.degrees(math.atan2(position.z, position.x))
        pygame.draw.circle(surface, to_rgb(self.sun_colour), self._arc_position(angle), 7)

    def _draw_moon(self, surface: pygame.Surface, name: str, state: MoonState, sky_rgb: tuple[int, int, int]) -> None:
        alpha = int(max(0.0, min(1.0, state.moon_alpha)) * 255)
        if alpha <= 0 or state.rotation_from_horizon <= 0.0:
            return

        radius = MOON_RADII.get(name, 5)
        disc = pygame.Surface((radius * 2 + 1, radius * 2 + 1), pygame.SRCALPHA)
        lit = tuple(int(sky_rgb[channel] + (236 - sky_rgb[channel]) * state.shadow_blend) for channel in range(3))
        pygame.draw.circle(disc, (*lit, alpha), (radius, radius), radius)

        illumination = PHASE_ILLUMINATION[state.phase]
        if illumination < 1.0:
            shift = int(round(radius * 2 * (1.0 - abs(illumination))))
            shadow_x = radius + shift if illumination < 0.0 else radius - shift
            pygame.draw.circle(disc, (*sky_rgb, alpha), (shadow_x, radius), radius)

        x, y = self._arc_position(state.rotation_from_horizon)
        surface.blit(disc, (x - radius, y - radius))

    def _draw_clouds(self, result: WeatherResult) -> None:
        self._cloud_offset = (self._cloud_offset + result.cloud_speed * 0.2) % self.width
        offset = int(self._cloud_offset)
        band_alpha = int(40 + 60 * (1.0 - result.glare_view))
        cloud_colour = (*to_rgb(result.fog_color), band_alpha)
        pygame.draw.rect(self._overlay, cloud_colour, pygame.Rect(offset - self.width, 18, self.width + 40, 14))
        pygame.draw.rect(self._overlay, cloud_colour, pygame.Rect(offset, 34, self.width + 30, 9))

    def _draw_rain(self, result: WeatherResult) -> None:
        slant = int(round(result.wind_speed * 6))
        step = max(3, int(12 - result.rain_frequency))
        for x in range(0, self.width, step):
            for y in range((x * 7) % 13, self.horizon, 17):
                pygame.draw.line(self._overlay, RAIN_COLOR, (x, y), (x - slant, y + 4))

    def render(self, surface: pygame.Surface) -> None:
        """Draw sky, celestial bodies, clouds, fog and ground."""
        if not self.sky_enabled or self.weather is None:
            surface.fill(to_rgb(self.ambient_colour))
            return

        result = self.weather
        sky_rgb = to_rgb(result.sky_color)
        surface.fill(sky_rgb)

        for name, state in self.moons.items():
            self._draw_moon(surface, name, state, sky_rgb)
        self._draw_sun(surface)

        self._overlay.fill((0, 0, 0, 0))
        self._draw_clouds(result)
        if result.rain_effect:
            self._draw_rain(result)

        # thicker fog climbs higher above the horizon
        fog_height = int(min(self.horizon, 12 + 18 * self.fog_depth))
        fog_rgb = to_rgb(self.fog_colour)
        for row in range(fog_height):
            alpha = int(200 * (row + 1) / fog_height)
            y = self.horizon - fog_height + row
            pygame.draw.line(self._overlay, (*fog_rgb, alpha), (0, y), (self.width - 1, y))
        surface.blit(self._overlay, (0, 0))

        ground = tuple(
            int(GROUND_COLOR[channel] * (0.4 + self.ambient_colour[channel])) for channel in range(3)
        )
        pygame.draw.rect(surface, tuple(min(255, value) for value in ground),
                         pygame.Rect(0, self.horizon, self.width, self.height - self.horizon))
