"""Per-tick resolved weather parameters."""

from __future__ import annotations

from dataclasses import dataclass

from skyengine.fallback import Colour


@dataclass(frozen=True)
class WeatherResult:
    """Everything the sky, fog, precipitation and ambient sound need this tick."""

    cloud_texture: str
    next_cloud_texture: str
    cloud_blend_factor: float
    fog_depth: float
    fog_color: Colour
    ambient_color: Colour
    sky_color: Colour
    sun_color: Colour
    sun_disc_color: Colour
    wind_speed: float
    cloud_speed: float
    glare_view: float
    night_fade: float
    is_night: bool
    is_storm: bool
    rain_speed: float
    rain_frequency: float
    particle_effect: str
    rain_effect: str
    ambient_loop_sound_id: str
    ambient_sound_volume: float
    effect_fade: float
