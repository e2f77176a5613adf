"""Moon angle, phase and visibility from the day count and hour of day."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum

from skyengine.fallback import Fallback, FieldSpec

# a moon has to be able to finish its arc within one day
MAX_SPEED = 180.0 / 23.0
# in-game calendar epoch (16 Last Seed); seventeen daily increments have happened by then
START_DAY = 16
DEGREES_PER_HOUR = 15.0


class MoonPhase(IntEnum):
    FULL = 0
    WANING_GIBBOUS = 1
    THIRD_QUARTER = 2
    WANING_CRESCENT = 3
    NEW = 4
    WAXING_CRESCENT = 5
    FIRST_QUARTER = 6
    WAXING_GIBBOUS = 7


@dataclass(frozen=True)
class MoonState:
    """Snapshot handed to the sky renderer for one moon."""

    rotation_from_horizon: float
    rotation_from_north: float
    phase: MoonPhase
    shadow_blend: float
    moon_alpha: float


def _moon_field(attribute: str, suffix: str, positive: bool = False) -> FieldSpec:
    return FieldSpec(attribute, "Moons_{name}_" + suffix, "float", positive)


MOON_SCHEMA: tuple[FieldSpec, ...] = (
    _moon_field("fade_in_start", "Fade_In_Start"),
    _moon_field("fade_in_finish", "Fade_In_Finish"),
    _moon_field("fade_out_start", "Fade_Out_Start"),
    _moon_field("fade_out_finish", "Fade_Out_Finish"),
    _moon_field("axis_offset", "Axis_Offset"),
    _moon_field("speed", "Speed", positive=True),
    _moon_field("daily_increment", "Daily_Increment"),
    _moon_field("fade_start_angle", "Fade_Start_Angle"),
    _moon_field("fade_end_angle", "Fade_End_Angle"),
    _moon_field("early_fade_angle", "Moon_Shadow_Early_Fade_Angle"),
)


@dataclass(frozen=True)
class MoonModel:
    """Angular position and visibility of one moon.

    A moon rises on one horizon, travels 180 degrees to the opposite one and
    then sits at the rising horizon until its next rise. The rise hour drifts
    by ``daily_increment`` every day and may pass midnight, so on a given day
    the moon can rise and set, set without rising, or set and rise again.
    """

    name: str
    fade_in_start: float
    fade_in_finish: float
    fade_out_start: float
    fade_out_finish: float
    axis_offset: float
    speed: float
    daily_increment: float
    fade_start_angle: float
    fade_end_angle: float
    early_fade_angle: float

    def __post_init__(self) -> None:
        object.__setattr__(self, "speed", min(self.speed, MAX_SPEED))

    @classmethod
    def from_fallback(cls, name: str, fallback: Fallback) -> MoonModel:
        return cls(name=name, **fallback.resolve(MOON_SCHEMA, name=name))

    def calculate_state(self, days_passed: int, game_hour: float) -> MoonState:
        rotation_from_horizon = self.angle(days_passed, game_hour)
        return MoonState(
            rotation_from_horizon=rotation_from_horizon,
            rotation_from_north=self.axis_offset,
            phase=MoonPhase(self.phase(days_passed, game_hour)),
            shadow_blend=self.shadow_blend(rotation_from_horizon),
            moon_alpha=self.early_moon_shadow_alpha(rotation_from_horizon) * self.hourly_alpha(game_hour),
        )

    def moon_rise_hour(self, days_passed: int) -> float:
        # not wrapped after adding today's increment: a value >= 24 means no rise today
        return self.daily_increment + math.fmod((days_passed - 1 + START_DAY) * self.daily_increment, 24.0)

    def rotation(self, hours: float) -> float:
        return DEGREES_PER_HOUR * self.speed * hours

    def angle(self, days_passed: int, game_hour: float) -> float:
        rise_hour_today = self.moon_rise_hour(days_passed)
        angle_today = 0.0

        if game_hour < rise_hour_today:
            rise_hour_yesterday = self.moon_rise_hour(days_passed - 1)
            if rise_hour_yesterday < 24.0:
                angle_yesterday = self.rotation(24.0 - rise_hour_yesterday)
                if angle_yesterday < 180.0:
                    # still on yesterday's arc
                    angle_today = self.rotation(game_hour) + angle_yesterday
        else:
            angle_today = self.rotation(game_hour - rise_hour_today)

        if angle_today >= 180.0:
            # set; back to the rising horizon
            angle_today = 0.0
        return angle_today

    def phase(self, days_passed: int, game_hour: float) -> int:
        """Eight phases of three days each, starting from full."""
        if game_hour < self.moon_rise_hour(days_passed):
            return (days_passed // 3) % 8
        return ((days_passed + 1) // 3) % 8

    def shadow_blend(self, angle: float) -> float:
        """Ratio between the textured moon (1) and the sky-coloured disc (0)."""
        fade_angle = self.fade_start_angle - self.fade_end_angle
        fade_end_angle_2 = 180.0 - self.fade_end_angle
        fade_start_angle_2 = 180.0 - self.fade_start_angle
        if self.fade_end_angle <= angle < self.fade_start_angle:
            return (angle - self.fade_end_angle) / fade_angle
        if self.fade_start_angle <= angle < fade_start_angle_2:
            return 1.0
        if fade_start_angle_2 <= angle < fade_end_angle_2:
            return (fade_end_angle_2 - angle) / fade_angle
        return 0.0

    def hourly_alpha(self, game_hour: float) -> float:
        if self.fade_out_start <= game_hour < self.fade_out_finish:
            return (self.fade_out_finish - game_hour) / (self.fade_out_finish - self.fade_out_start)
        if self.fade_out_finish <= game_hour < self.fade_in_start:
            return 0.0
        if self.fade_in_start <= game_hour < self.fade_in_finish:
            return (game_hour - self.fade_in_start) / (self.fade_in_finish - self.fade_in_start)
        return 1.0

    def early_moon_shadow_alpha(self, angle: float) -> float:
        early_angle_1 = self.fade_end_angle - self.early_fade_angle
        fade_end_angle_2 = 180.0 - self.fade_end_angle
        early_angle_2 = fade_end_angle_2 + self.early_fade_angle
        if early_angle_1 <= angle < self.fade_end_angle:
            return (angle - early_angle_1) / self.early_fade_angle
        if self.fade_end_angle <= angle < fade_end_angle_2:
            return 1.0
        if fade_end_angle_2 <= angle < early_angle_2:
            return (early_angle_2 - angle) / self.early_fade_angle
        return 0.0
