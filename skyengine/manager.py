"""Regional weather selection, transitions and per-tick sky/sound output."""

from __future__ import annotations

import json
import logging
import math
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Sequence

from pygame.math import Vector3

from skyengine.clock import SECONDS_PER_HOUR
from skyengine.collaborators import Dice, RandomDice, SceneSink, SoundSink, WorldClock
from skyengine.day_colors import DailyColorResolver, DaySchedule, lerp, lerp_colour
from skyengine.fallback import ConfigError, Fallback
from skyengine.moon import MoonModel
from skyengine.profile import (
    WeatherKind,
    WeatherProfile,
    WeatherSettings,
    load_weather_profiles,
)
from skyengine.region import RegionSelector, RegionStore, RegionWeights
from skyengine.result import WeatherResult

LOGGER = logging.getLogger(__name__)

MOON_NAMES = ("Masser", "Secunda")
# Red Mountain; storms blow away from it
STORM_LANDMARK = Vector3(19950.0, 72032.0, 27831.0)
SUN_PITCH = -0.268  # approx tan(-15 degrees)

THUNDER_CHANCE_PER_SECOND = 4.0
THUNDER_SOUND_DELAY = 0.25
THUNDER_SOUND_COOLDOWN = 1000.0
INITIAL_THUNDER_CHANCE_NEEDED = 50.0
THUNDER_SOUND_COUNT = 4


@dataclass(frozen=True)
class WeatherState:
    """The persisted part of the manager; everything else resets on load."""

    hour: float
    wind_speed: float
    current_weather: str
    next_weather: str
    current_region: str
    first_update: bool
    remaining_transition_time: float
    time_passed: float

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> WeatherState:
        """Validate a persisted record; raises :class:`ValueError` when malformed."""
        if not isinstance(data, dict):
            raise ValueError("weather state must be an object")

        try:
            numbers = {
                key: data[key]
                for key in ("hour", "wind_speed", "remaining_transition_time", "time_passed")
            }
            names = {key: data[key] for key in ("current_weather", "next_weather", "current_region")}
            first_update = data["first_update"]
        except KeyError as error:
            raise ValueError(f"weather state is missing {error.args[0]}") from None

        for key, value in numbers.items():
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"weather state {key} must be a number, got {value!r}")
        for key, value in names.items():
            if not isinstance(value, str):
                raise ValueError(f"weather state {key} must be a string, got {value!r}")
        if not isinstance(first_update, bool):
            raise ValueError(f"weather state first_update must be a boolean, got {first_update!r}")

        for key in ("current_weather", "next_weather"):
            value = names[key]
            if value == "" and key == "next_weather":
                continue
            if value.lower() not in {kind.value for kind in WeatherKind}:
                raise ValueError(f"weather state {key} names an unknown weather {value!r}")

        return cls(
            hour=float(numbers["hour"]),
            wind_speed=float(numbers["wind_speed"]),
            current_weather=names["current_weather"].lower(),
            next_weather=names["next_weather"].lower(),
            current_region=names["current_region"].lower(),
            first_update=first_update,
            remaining_transition_time=float(numbers["remaining_transition_time"]),
            time_passed=float(numbers["time_passed"]),
        )


@dataclass(frozen=True)
class ThunderState:
    flash: float
    chance: float
    chance_needed: float
    sound_delay: float


class WeatherManager:
    """Drive the sky from the clock and the player's region.

    At most one transition is in flight. ``next_weather`` is ``None`` while the
    weather is stable; otherwise the sky cross-fades from ``current_weather``
    over the current profile's transition time. Game time reaches the manager
    through :meth:`advance_time` and is consumed by the next :meth:`update`.
    """

    def __init__(
        self,
        profiles: dict[WeatherKind, WeatherProfile],
        settings: WeatherSettings,
        moons: Sequence[MoonModel],
        regions: RegionStore,
        world: WorldClock,
        scene: SceneSink,
        sound: SoundSink,
        dice: Dice | None = None,
    ) -> None:
        self._profiles = dict(profiles)
        self._settings = settings
        self._moons = tuple(moons)
        self._regions = regions
        self._world = world
        self._scene = scene
        self._sound = sound
        self._dice = dice or RandomDice()
        self._selector = RegionSelector(self._dice)
        self._schedule = DaySchedule.from_settings(settings)
        self._day_colors = DailyColorResolver(self._schedule)

        self._hour = 14.0
        self._wind_speed = 0.0
        self._is_storm = False
        self._storm_direction = Vector3(0.0, 1.0, 0.0)
        self._current_weather = WeatherKind.CLEAR
        self._next_weather: WeatherKind | None = None
        self._current_region = ""
        self._first_update = True
        self._remaining_transition_time = 0.0
        self._time_passed = 0.0
        self._weather_update_time = settings.hours_between_weather_changes * SECONDS_PER_HOUR

        self._thunder_flash = 0.0
        self._thunder_chance = 0.0
        self._thunder_chance_needed = INITIAL_THUNDER_CHANCE_NEEDED
        self._thunder_sound_delay = THUNDER_SOUND_DELAY

        self._region_overrides: dict[str, WeatherKind] = {}
        self._region_mods: dict[str, RegionWeights] = {}

        self._playing_sound_id = ""
        self._ambient_sound: Any = None
        self._result: WeatherResult | None = None

    @classmethod
    def from_config(
        cls,
        config_file: str | Path,
        world: WorldClock,
        scene: SceneSink,
        sound: SoundSink,
        dice: Dice | None = None,
    ) -> WeatherManager:
        """Build profiles, moons and regions from one JSON file.

        Every configuration problem is collected before a single
        :class:`ConfigError` is raised.
        """
        fallback = Fallback.from_file(config_file)
        problems: list[str] = []

        settings: WeatherSettings | None = None
        profiles: dict[WeatherKind, WeatherProfile] = {}
        moons: list[MoonModel] = []
        try:
            settings = WeatherSettings.from_fallback(fallback)
            profiles = load_weather_profiles(fallback, settings)
        except ConfigError as error:
            problems.extend(error.problems)
        for name in MOON_NAMES:
            try:
                moons.append(MoonModel.from_fallback(name, fallback))
            except ConfigError as error:
                problems.extend(error.problems)

        if problems or settings is None:
            raise ConfigError(problems)

        regions = RegionStore.from_file(config_file)
        LOGGER.info("Loaded %d weather profiles and %d regions from %s", len(profiles), len(regions.region_ids()), config_file)
        return cls(profiles, settings, moons, regions, world, scene, sound, dice)

    # ------------------------------------------------------------------
    # read-only views

    @property
    def hour(self) -> float:
        return self._hour

    @property
    def current_weather(self) -> WeatherKind:
        return self._current_weather

    @property
    def next_weather(self) -> WeatherKind | None:
        return self._next_weather

    @property
    def remaining_transition_time(self) -> float:
        return self._remaining_transition_time

    @property
    def current_region(self) -> str:
        return self._current_region

    @property
    def weather_update_time(self) -> float:
        """Seconds left until the region's weather is drawn again."""
        return self._weather_update_time

    @property
    def schedule(self) -> DaySchedule:
        return self._schedule

    @property
    def result(self) -> WeatherResult | None:
        """Result of the last exterior update."""
        return self._result

    @property
    def thunder(self) -> ThunderState:
        return ThunderState(
            flash=self._thunder_flash,
            chance=self._thunder_chance,
            chance_needed=self._thunder_chance_needed,
            sound_delay=self._thunder_sound_delay,
        )

    def profile(self, weather: WeatherKind | str) -> WeatherProfile:
        return self._profiles[WeatherKind.parse(weather)]

    def get_weather_id(self) -> int:
        return self._current_weather.id

    def is_in_storm(self) -> bool:
        return self._is_storm

    def get_storm_direction(self) -> Vector3:
        return Vector3(self._storm_direction)

    def get_wind_speed(self) -> float:
        return self._wind_speed

    def is_dark(self) -> bool:
        return self._world.is_exterior() and self._schedule.is_night(self._hour)

    def transition_progress(self) -> float:
        """Linear 0..1 progress of the transition in flight, 0 when stable."""
        if self._next_weather is None:
            return 0.0
        return 1.0 - self._remaining_transition_time / self.profile(self._current_weather).transition_seconds()

    # ------------------------------------------------------------------
    # script commands

    def set_weather(self, weather: WeatherKind | str, instant: bool = False) -> None:
        kind = WeatherKind.parse(weather)
        if kind == self._current_weather and self._next_weather is None:
            self._first_update = False
            return

        if instant or self._first_update:
            self._next_weather = None
            self._current_weather = kind
            LOGGER.info("Weather set to %s", kind.value)
        else:
            if self._next_weather is not None:
                # past the halfway point the old target becomes the new origin
                if self._remaining_transition_time / self.profile(self._current_weather).transition_seconds() <= 0.5:
                    self._current_weather = self._next_weather

            self._next_weather = kind
            self._remaining_transition_time = self.profile(self._current_weather).transition_seconds()
            LOGGER.info(
                "Weather transition %s -> %s over %.0f s",
                self._current_weather.value,
                kind.value,
                self._remaining_transition_time,
            )
        self._first_update = False

    def change_weather(self, region: str, weather_id: int) -> None:
        """Force a region's weather by script id; unknown regions raise."""
        self._regions.find(region)

        kind = WeatherKind.from_id(weather_id)
        self._region_overrides[region.lower()] = kind
        LOGGER.info("Region %s forced to %s", region.lower(), kind.value)

        player_region = self._world.player_region()
        if player_region is not None and player_region.lower() == region.lower():
            self.set_weather(kind)

    def mod_region(self, region_id: str, chances: Sequence[int]) -> None:
        """Install script weights for a region, re-drawing soon if the current weather lost its chance."""
        weights = tuple(int(chance) for chance in chances)
        self._region_mods[region_id.lower()] = weights
        LOGGER.info("Region %s weights changed to %s", region_id.lower(), weights)

        current = self.get_weather_id()
        if current >= len(weights) or weights[current] == 0:
            self._weather_update_time = 0.0

    def set_hour(self, hour: float) -> None:
        self._hour = hour

    def advance_time(self, hours: float) -> None:
        self._time_passed += hours * SECONDS_PER_HOUR

    # ------------------------------------------------------------------
    # persistence

    def write_state(self) -> WeatherState:
        return WeatherState(
            hour=self._hour,
            wind_speed=self._wind_speed,
            current_weather=self._current_weather.value,
            next_weather=self._next_weather.value if self._next_weather is not None else "",
            current_region=self._current_region,
            first_update=self._first_update,
            remaining_transition_time=self._remaining_transition_time,
            time_passed=self._time_passed,
        )

    def read_state(self, state: WeatherState) -> None:
        current = WeatherKind.parse(state.current_weather)
        next_weather = WeatherKind.parse(state.next_weather) if state.next_weather else None

        self.clear()
        self._hour = state.hour
        self._wind_speed = state.wind_speed
        self._current_weather = current
        self._next_weather = next_weather
        self._current_region = state.current_region
        self._first_update = state.first_update
        self._remaining_transition_time = state.remaining_transition_time
        self._time_passed = state.time_passed
        LOGGER.debug("Restored weather state %s", state)

    def save_state(self, state_file: str | Path) -> None:
        Path(state_file).write_text(json.dumps(self.write_state().to_dict(), indent=2), encoding="utf-8")

    def load_state(self, state_file: str | Path) -> None:
        # parse fully first so a bad file leaves the manager untouched
        state = WeatherState.from_dict(json.loads(Path(state_file).read_text(encoding="utf-8")))
        self.read_state(state)

    def clear(self) -> None:
        """Drop script overrides and thunder state; stop the ambient loop."""
        self.stop_sounds()
        self._region_overrides.clear()
        self._region_mods.clear()
        self._thunder_flash = 0.0
        self._thunder_chance = 0.0
        self._thunder_chance_needed = INITIAL_THUNDER_CHANCE_NEEDED
        self._thunder_sound_delay = THUNDER_SOUND_DELAY

    def stop_sounds(self) -> None:
        if self._ambient_sound is not None:
            self._sound.stop(self._ambient_sound)
            self._ambient_sound = None
            self._playing_sound_id = ""

    def close(self) -> None:
        self.stop_sounds()

    # ------------------------------------------------------------------
    # simulation

    def update(self, duration: float, paused: bool = False) -> None:
        """Advance one frame.

        ``duration`` is the real frame time and only drives thunder; weather
        changes and transitions consume the game time accumulated through
        :meth:`advance_time`.
        """
        time_passed = self._time_passed
        self._time_passed = 0.0
        self._weather_update_time -= time_passed

        if not self._world.is_exterior():
            self._scene.set_sky_enabled(False)
            self.stop_sounds()
            return
        self._scene.set_sky_enabled(True)

        self._switch_to_next_weather(False)

        if self._next_weather is not None:
            self._remaining_transition_time -= time_passed
            if self._remaining_transition_time < 0.0:
                LOGGER.info("Weather transition to %s complete", self._next_weather.value)
                self._current_weather = self._next_weather
                self._next_weather = None

        result = self._resolve_result()
        self._result = result
        self._wind_speed = result.wind_speed
        self._is_storm = result.is_storm

        if self._is_storm:
            direction = self._world.player_position() - STORM_LANDMARK
            direction.z = 0.0
            if direction.length_squared() > 0.0:
                self._storm_direction = direction.normalize()
            self._scene.set_storm_direction(Vector3(self._storm_direction))

        self._scene.configure_fog(result.fog_depth, result.fog_color)

        schedule = self._schedule
        self._scene.set_sun_enabled(not (self._hour >= schedule.night_start or self._hour <= schedule.sunrise_time))
        self._scene.set_sun_direction(self._sun_direction())

        days_passed = self._world.days_passed()
        game_hour = self._world.game_hour()
        for moon in self._moons:
            self._scene.set_moon_state(moon.name, moon.calculate_state(days_passed, game_hour))

        if not paused:
            self._update_thunder(duration)

        self._scene.set_ambient_colour(result.ambient_color)
        self._scene.set_sun_colour(result.sun_color)
        self._scene.set_weather(result)
        self._update_ambient_sound(result)

    def _switch_to_next_weather(self, instantly: bool) -> None:
        region = (self._world.player_region() or "").lower()
        if self._weather_update_time > 0.0 and region == self._current_region:
            return

        if region != self._current_region:
            LOGGER.info("Entered region %r", region)
        self._current_region = region
        self._weather_update_time = self._settings.hours_between_weather_changes * SECONDS_PER_HOUR

        weather = WeatherKind.CLEAR
        if region in self._region_overrides:
            weather = self._region_overrides[region]
        else:
            weights = self._regions.search(region)
            if weights is not None:
                weather = self._selector.next_weather(self._region_mods.get(region, weights))

        self.set_weather(weather, instantly)

    def _stable_result(self, profile: WeatherProfile) -> WeatherResult:
        colors = self._day_colors.resolve(self._hour, profile)
        return WeatherResult(
            cloud_texture=profile.cloud_texture,
            next_cloud_texture="",
            cloud_blend_factor=0.0,
            fog_depth=colors.fog_depth,
            fog_color=colors.fog_color,
            ambient_color=colors.ambient_color,
            sky_color=colors.sky_color,
            sun_color=colors.sun_color,
            sun_disc_color=profile.sun_disc_sunset_color,
            wind_speed=profile.wind_speed,
            cloud_speed=profile.cloud_speed,
            glare_view=profile.glare_view,
            night_fade=colors.night_fade,
            is_night=colors.is_night,
            is_storm=profile.is_storm,
            rain_speed=profile.rain_speed,
            rain_frequency=profile.rain_frequency,
            particle_effect=profile.particle_effect,
            rain_effect=profile.rain_effect,
            ambient_loop_sound_id=profile.ambient_loop_sound_id,
            ambient_sound_volume=1.0,
            effect_fade=1.0,
        )

    def _blended_result(self, factor: float) -> WeatherResult:
        next_profile = self.profile(self._next_weather)
        current = self._stable_result(self.profile(self._current_weather))
        other = self._stable_result(next_profile)

        # effects and sound belong to whichever side holds this half of the fade
        if factor < 0.5:
            dominant = current
            volume = 1.0 - factor * 2.0
        else:
            dominant = other
            volume = 2.0 * (factor - 0.5)

        return WeatherResult(
            cloud_texture=current.cloud_texture,
            next_cloud_texture=other.cloud_texture,
            cloud_blend_factor=next_profile.cloud_blend_factor(factor),
            fog_depth=lerp(current.fog_depth, other.fog_depth, factor),
            fog_color=lerp_colour(current.fog_color, other.fog_color, factor),
            ambient_color=lerp_colour(current.ambient_color, other.ambient_color, factor),
            sky_color=lerp_colour(current.sky_color, other.sky_color, factor),
            sun_color=lerp_colour(current.sun_color, other.sun_color, factor),
            sun_disc_color=lerp_colour(current.sun_disc_color, other.sun_disc_color, factor),
            wind_speed=lerp(current.wind_speed, other.wind_speed, factor),
            cloud_speed=lerp(current.cloud_speed, other.cloud_speed, factor),
            glare_view=lerp(current.glare_view, other.glare_view, factor),
            night_fade=lerp(current.night_fade, other.night_fade, factor),
            is_night=current.is_night,
            is_storm=dominant.is_storm,
            rain_speed=dominant.rain_speed,
            rain_frequency=dominant.rain_frequency,
            particle_effect=dominant.particle_effect,
            rain_effect=dominant.rain_effect,
            ambient_loop_sound_id=dominant.ambient_loop_sound_id,
            ambient_sound_volume=volume,
            effect_fade=volume,
        )

    def _resolve_result(self) -> WeatherResult:
        if self._next_weather is not None:
            return self._blended_result(self.transition_progress())
        return self._stable_result(self.profile(self._current_weather))

    def _sun_direction(self) -> Vector3:
        """East-to-west at a fixed pitch; day and night arcs may run at different speeds."""
        sunrise = self._schedule.sunrise_time
        adjusted_hour = self._hour
        adjusted_night_start = self._schedule.night_start
        if adjusted_hour < sunrise:
            adjusted_hour += 24.0
        if adjusted_night_start < sunrise:
            adjusted_night_start += 24.0

        day_duration = adjusted_night_start - sunrise
        night_duration = 24.0 - day_duration
        if adjusted_hour < adjusted_night_start:
            theta = math.pi * (adjusted_hour - sunrise) / day_duration
        else:
            theta = math.pi * (adjusted_hour - adjusted_night_start) / night_duration

        return Vector3(math.cos(theta), SUN_PITCH, math.sin(theta)) * -1.0

    def _update_thunder(self, duration: float) -> None:
        if self._current_weather != WeatherKind.THUNDERSTORM or self._next_weather is not None:
            return

        if self._thunder_flash > 0.0:
            self._thunder_sound_delay -= duration
            if self._thunder_sound_delay <= 0.0:
                sound_id = self._settings.thunder_sound_ids[self._dice.roll_dice(THUNDER_SOUND_COUNT)]
                LOGGER.debug("Thunder %s", sound_id)
                self._sound.play(sound_id, 1.0, 1.0)
                self._thunder_sound_delay = THUNDER_SOUND_COOLDOWN

            self._thunder_flash -= duration
            if self._thunder_flash <= 0.0:
                self._thunder_chance_needed = float(self._dice.roll_dice(100))
                self._thunder_chance = 0.0
        else:
            self._thunder_chance += duration * THUNDER_CHANCE_PER_SECOND
            if self._thunder_chance >= self._thunder_chance_needed:
                LOGGER.debug("Lightning after %.1f%% accumulated chance", self._thunder_chance)
                self._thunder_flash = self._settings.thunder_threshold
                self._thunder_sound_delay = THUNDER_SOUND_DELAY

    def _update_ambient_sound(self, result: WeatherResult) -> None:
        if self._playing_sound_id != result.ambient_loop_sound_id:
            self.stop_sounds()
            if result.ambient_loop_sound_id:
                self._ambient_sound = self._sound.play_loop(result.ambient_loop_sound_id, 1.0)
            self._playing_sound_id = result.ambient_loop_sound_id

        if self._ambient_sound is not None:
            self._sound.set_volume(self._ambient_sound, result.ambient_sound_volume)
