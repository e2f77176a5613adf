"""Weather kinds and the immutable per-kind parameter sets."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from skyengine.fallback import Colour, ConfigError, Fallback, FieldSpec

# deltas per hour, reversed from observed transitions with Clouds Maximum Percent at 1.0
TRANSITION_DELTAS_PER_HOUR = 0.00835
RAIN_EFFECT = "meshes\\raindrop.nif"


class UnknownWeatherError(KeyError):
    """Raised when a weather name is not one of the registered kinds."""


class WeatherKind(Enum):
    """The ten weather kinds, declared in script id order."""

    CLEAR = "clear"
    CLOUDY = "cloudy"
    FOGGY = "foggy"
    OVERCAST = "overcast"
    RAIN = "rain"
    THUNDERSTORM = "thunderstorm"
    ASHSTORM = "ashstorm"
    BLIGHT = "blight"
    SNOW = "snow"
    BLIZZARD = "blizzard"

    @property
    def id(self) -> int:
        return _KIND_IDS[self]

    @property
    def config_name(self) -> str:
        """Capitalized name used in configuration keys."""
        return self.value.capitalize()

    @classmethod
    def from_id(cls, weather_id: int) -> WeatherKind:
        """Map a script id to a kind; out-of-range ids fall back to clear."""
        if 0 <= weather_id < len(_KINDS_BY_ID):
            return _KINDS_BY_ID[weather_id]
        return cls.CLEAR

    @classmethod
    def parse(cls, name: str | WeatherKind) -> WeatherKind:
        if isinstance(name, WeatherKind):
            return name
        try:
            return cls(name.lower())
        except ValueError:
            raise UnknownWeatherError(name) from None


_KINDS_BY_ID: tuple[WeatherKind, ...] = tuple(WeatherKind)
_KIND_IDS: dict[WeatherKind, int] = {kind: index for index, kind in enumerate(_KINDS_BY_ID)}

# (ambient loop sound, particle effect) per kind; not part of the configuration
_KIND_EFFECTS: dict[WeatherKind, tuple[str, str]] = {
    WeatherKind.CLEAR: ("", ""),
    WeatherKind.CLOUDY: ("", ""),
    WeatherKind.FOGGY: ("", ""),
    WeatherKind.OVERCAST: ("", ""),
    WeatherKind.RAIN: ("rain", ""),
    WeatherKind.THUNDERSTORM: ("rain heavy", ""),
    WeatherKind.ASHSTORM: ("ashstorm", "meshes\\ashcloud.nif"),
    WeatherKind.BLIGHT: ("blight", "meshes\\blightcloud.nif"),
    WeatherKind.SNOW: ("", "meshes\\snow.nif"),
    WeatherKind.BLIZZARD: ("BM Blizzard", "meshes\\blizzard.nif"),
}


def _weather_field(attribute: str, suffix: str, kind: str, positive: bool = False) -> FieldSpec:
    return FieldSpec(attribute, "Weather_{name}_" + suffix, kind, positive)


PROFILE_SCHEMA: tuple[FieldSpec, ...] = (
    _weather_field("cloud_texture", "Cloud_Texture", "string"),
    _weather_field("sky_sunrise_color", "Sky_Sunrise_Color", "colour"),
    _weather_field("sky_day_color", "Sky_Day_Color", "colour"),
    _weather_field("sky_sunset_color", "Sky_Sunset_Color", "colour"),
    _weather_field("sky_night_color", "Sky_Night_Color", "colour"),
    _weather_field("fog_sunrise_color", "Fog_Sunrise_Color", "colour"),
    _weather_field("fog_day_color", "Fog_Day_Color", "colour"),
    _weather_field("fog_sunset_color", "Fog_Sunset_Color", "colour"),
    _weather_field("fog_night_color", "Fog_Night_Color", "colour"),
    _weather_field("ambient_sunrise_color", "Ambient_Sunrise_Color", "colour"),
    _weather_field("ambient_day_color", "Ambient_Day_Color", "colour"),
    _weather_field("ambient_sunset_color", "Ambient_Sunset_Color", "colour"),
    _weather_field("ambient_night_color", "Ambient_Night_Color", "colour"),
    _weather_field("sun_sunrise_color", "Sun_Sunrise_Color", "colour"),
    _weather_field("sun_day_color", "Sun_Day_Color", "colour"),
    _weather_field("sun_sunset_color", "Sun_Sunset_Color", "colour"),
    _weather_field("sun_night_color", "Sun_Night_Color", "colour"),
    _weather_field("sun_disc_sunset_color", "Sun_Disc_Sunset_Color", "colour"),
    _weather_field("land_fog_day_depth", "Land_Fog_Day_Depth", "float"),
    _weather_field("land_fog_night_depth", "Land_Fog_Night_Depth", "float"),
    _weather_field("wind_speed", "Wind_Speed", "float"),
    _weather_field("cloud_speed", "Cloud_Speed", "float"),
    _weather_field("glare_view", "Glare_View", "float"),
    _weather_field("rain_frequency", "Rain_Entrance_Speed", "float"),
    _weather_field("using_precip", "Using_Precip", "bool"),
    _weather_field("transition_delta", "Transition_Delta", "float", positive=True),
    _weather_field("clouds_maximum_percent", "Clouds_Maximum_Percent", "float", positive=True),
)

SETTINGS_SCHEMA: tuple[FieldSpec, ...] = (
    FieldSpec("sunrise_time", "Weather_Sunrise_Time", "float"),
    FieldSpec("sunset_time", "Weather_Sunset_Time", "float"),
    FieldSpec("sunrise_duration", "Weather_Sunrise_Duration", "float"),
    FieldSpec("sunset_duration", "Weather_Sunset_Duration", "float"),
    FieldSpec("hours_between_weather_changes", "Weather_Hours_Between_Weather_Changes", "float"),
    FieldSpec("rain_speed", "Weather_Precip_Gravity", "float"),
    FieldSpec("storm_wind_speed", "fStromWindSpeed", "float"),
    FieldSpec("thunder_threshold", "Weather_Thunderstorm_Thunder_Threshold", "float"),
    FieldSpec("thunder_sound_0", "Weather_Thunderstorm_Thunder_Sound_ID_0", "string"),
    FieldSpec("thunder_sound_1", "Weather_Thunderstorm_Thunder_Sound_ID_1", "string"),
    FieldSpec("thunder_sound_2", "Weather_Thunderstorm_Thunder_Sound_ID_2", "string"),
    FieldSpec("thunder_sound_3", "Weather_Thunderstorm_Thunder_Sound_ID_3", "string"),
)


@dataclass(frozen=True)
class WeatherSettings:
    """Global weather timings shared by every kind."""

    sunrise_time: float
    sunset_time: float
    sunrise_duration: float
    sunset_duration: float
    hours_between_weather_changes: float
    rain_speed: float
    storm_wind_speed: float
    thunder_threshold: float
    thunder_sound_ids: tuple[str, str, str, str]

    @classmethod
    def from_fallback(cls, fallback: Fallback) -> WeatherSettings:
        values = fallback.resolve(SETTINGS_SCHEMA)
        sounds = tuple(values.pop(f"thunder_sound_{index}") for index in range(4))
        return cls(thunder_sound_ids=sounds, **values)


@dataclass(frozen=True)
class WeatherProfile:
    """All configured parameters of one weather kind."""

    kind: WeatherKind
    cloud_texture: str
    sky_sunrise_color: Colour
    sky_day_color: Colour
    sky_sunset_color: Colour
    sky_night_color: Colour
    fog_sunrise_color: Colour
    fog_day_color: Colour
    fog_sunset_color: Colour
    fog_night_color: Colour
    ambient_sunrise_color: Colour
    ambient_day_color: Colour
    ambient_sunset_color: Colour
    ambient_night_color: Colour
    sun_sunrise_color: Colour
    sun_day_color: Colour
    sun_sunset_color: Colour
    sun_night_color: Colour
    sun_disc_sunset_color: Colour
    land_fog_day_depth: float
    land_fog_night_depth: float
    wind_speed: float
    cloud_speed: float
    glare_view: float
    rain_speed: float
    rain_frequency: float
    transition_delta: float
    clouds_maximum_percent: float
    ambient_loop_sound_id: str = ""
    particle_effect: str = ""
    rain_effect: str = ""
    is_storm: bool = False

    @property
    def name(self) -> str:
        return self.kind.value

    @classmethod
    def from_fallback(cls, kind: WeatherKind, fallback: Fallback, settings: WeatherSettings) -> WeatherProfile:
        values = fallback.resolve(PROFILE_SCHEMA, name=kind.config_name)
        using_precip = values.pop("using_precip")
        ambient_loop_sound_id, particle_effect = _KIND_EFFECTS[kind]
        return cls(
            kind=kind,
            rain_speed=settings.rain_speed,
            ambient_loop_sound_id=ambient_loop_sound_id,
            particle_effect=particle_effect,
            rain_effect=RAIN_EFFECT if using_precip else "",
            is_storm=values["wind_speed"] > settings.storm_wind_speed,
            **values,
        )

    def transition_seconds(self) -> float:
        """Real seconds needed to fully cross-fade away from this weather."""
        return (TRANSITION_DELTAS_PER_HOUR / self.transition_delta) * 60.0 * 60.0

    def cloud_blend_factor(self, transition_ratio: float) -> float:
        # clouds may finish fading before the rest of the sky does
        return transition_ratio / self.clouds_maximum_percent


def load_weather_profiles(fallback: Fallback, settings: WeatherSettings) -> dict[WeatherKind, WeatherProfile]:
    """Build a profile for every kind, aggregating problems across all of them."""
    profiles: dict[WeatherKind, WeatherProfile] = {}
    problems: list[str] = []
    for kind in WeatherKind:
        try:
            profiles[kind] = WeatherProfile.from_fallback(kind, fallback, settings)
        except ConfigError as error:
            problems.extend(error.problems)

    if problems:
        raise ConfigError(problems)
    return profiles
