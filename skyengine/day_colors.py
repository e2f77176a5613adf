"""Time-of-day colours for a single weather profile."""

from __future__ import annotations

from dataclasses import dataclass

from skyengine.fallback import Colour
from skyengine.profile import WeatherProfile, WeatherSettings


def lerp(a: float, b: float, factor: float) -> float:
    return a * (1.0 - factor) + b * factor


def lerp_colour(a: Colour, b: Colour, factor: float) -> Colour:
    return tuple(lerp(a[channel], b[channel], factor) for channel in range(4))


@dataclass(frozen=True)
class DaySchedule:
    """Hour thresholds of the night, sunrise, day and sunset phases."""

    sunrise_time: float
    night_start: float
    night_end: float
    day_start: float
    day_end: float

    @classmethod
    def from_settings(cls, settings: WeatherSettings) -> DaySchedule:
        return cls(
            sunrise_time=settings.sunrise_time,
            night_start=settings.sunset_time + settings.sunset_duration,
            night_end=settings.sunrise_time - 0.5,
            day_start=settings.sunrise_time + settings.sunrise_duration,
            day_end=settings.sunset_time,
        )

    def is_night(self, hour: float) -> bool:
        return hour < self.sunrise_time or hour > self.night_start - 1.0


@dataclass(frozen=True)
class DayColors:
    fog_color: Colour
    ambient_color: Colour
    sun_color: Colour
    sky_color: Colour
    fog_depth: float
    night_fade: float
    is_night: bool


class DailyColorResolver:
    """Resolve the un-blended colours of a profile at a given hour.

    ``night_fade`` is only written by the night phase, the sunrise fade-in
    and the sunset fade-out. Every other hour reports whatever this resolver
    last wrote, including a value written while resolving another profile.
    """

    def __init__(self, schedule: DaySchedule) -> None:
        self.schedule = schedule
        self.night_fade = 0.0

    def resolve(self, hour: float, profile: WeatherProfile) -> DayColors:
        schedule = self.schedule
        # Fog depth uses its own night test; its boundaries deliberately differ
        # from the colour phases below and the two must not be merged.
        is_night = schedule.is_night(hour)
        fog_depth = profile.land_fog_night_depth if is_night else profile.land_fog_day_depth

        if hour <= schedule.night_end or hour >= schedule.night_start + 1.0:
            fog = profile.fog_night_color
            ambient = profile.ambient_night_color
            sun = profile.sun_night_color
            sky = profile.sky_night_color
            self.night_fade = 1.0

        elif schedule.night_end <= hour <= schedule.day_start + 1.0:
            if hour <= schedule.sunrise_time:
                # fade in
                factor = (schedule.sunrise_time - hour) / 0.5
                fog = lerp_colour(profile.fog_sunrise_color, profile.fog_night_color, factor)
                ambient = lerp_colour(profile.ambient_sunrise_color, profile.ambient_night_color, factor)
                sun = lerp_colour(profile.sun_sunrise_color, profile.sun_night_color, factor)
                sky = lerp_colour(profile.sky_sunrise_color, profile.sky_night_color, factor)
                self.night_fade = factor
            else:
                # fade out
                factor = (hour - schedule.sunrise_time) / 3.0
                fog = lerp_colour(profile.fog_sunrise_color, profile.fog_day_color, factor)
                ambient = lerp_colour(profile.ambient_sunrise_color, profile.ambient_day_color, factor)
                sun = lerp_colour(profile.sun_sunrise_color, profile.sun_day_color, factor)
                sky = lerp_colour(profile.sky_sunrise_color, profile.sky_day_color, factor)

        elif schedule.day_start + 1.0 <= hour <= schedule.day_end - 1.0:
            fog = profile.fog_day_color
            ambient = profile.ambient_day_color
            sun = profile.sun_day_color
            sky = profile.sky_day_color

        elif hour <= schedule.day_end + 1.0:
            # sunset fade in
            factor = ((schedule.day_end + 1.0) - hour) / 2.0
            fog = lerp_colour(profile.fog_sunset_color, profile.fog_day_color, factor)
            ambient = lerp_colour(profile.ambient_sunset_color, profile.ambient_day_color, factor)
            sun = lerp_colour(profile.sun_sunset_color, profile.sun_day_color, factor)
            sky = lerp_colour(profile.sky_sunset_color, profile.sky_day_color, factor)

        else:
            # sunset fade out
            factor = (hour - (schedule.day_end + 1.0)) / 2.0
            fog = lerp_colour(profile.fog_sunset_color, profile.fog_night_color, factor)
            ambient = lerp_colour(profile.ambient_sunset_color, profile.ambient_night_color, factor)
            sun = lerp_colour(profile.sun_sunset_color, profile.sun_night_color, factor)
            sky = lerp_colour(profile.sky_sunset_color, profile.sky_night_color, factor)
            self.night_fade = factor

        return DayColors(
            fog_color=fog,
            ambient_color=ambient,
            sun_color=sun,
            sky_color=sky,
            fog_depth=fog_depth,
            night_fade=self.night_fade,
            is_night=is_night,
        )
