"""Moon angle, phase and alpha checks against the default Masser settings."""

from __future__ import annotations

import unittest

from skyengine.fallback import ConfigError, Fallback
from skyengine.moon import MAX_SPEED, MoonModel, MoonPhase

from weather_fakes import load_fixtures


def masser(**overrides: float) -> MoonModel:
    values = dict(
        name="Masser",
        fade_in_start=14.0,
        fade_in_finish=15.0,
        fade_out_start=7.0,
        fade_out_finish=10.0,
        axis_offset=35.0,
        speed=0.5,
        daily_increment=1.2,
        fade_start_angle=50.0,
        fade_end_angle=40.0,
        early_fade_angle=0.5,
    )
    values.update(overrides)
    return MoonModel(**values)


class MoonAngleTests(unittest.TestCase):
    def setUp(self) -> None:
        self.moon = masser()

    def test_rise_hour_drifts_by_daily_increment(self) -> None:
        self.assertAlmostEqual(self.moon.moon_rise_hour(0), 19.2)
        self.assertAlmostEqual(self.moon.moon_rise_hour(1), 20.4)

    def test_angle_after_rising_today(self) -> None:
        self.assertAlmostEqual(self.moon.angle(1, 22.0), 12.0)

    def test_angle_continues_yesterdays_arc(self) -> None:
        # rose at 19.2 yesterday: 36 degrees by midnight plus 15 more by 02:00
        self.assertAlmostEqual(self.moon.angle(1, 2.0), 51.0)
        self.assertAlmostEqual(self.moon.angle(1, 19.0), 178.5)

    def test_angle_resets_once_the_moon_sets(self) -> None:
        self.assertEqual(self.moon.angle(1, 20.0), 0.0)

    def test_rise_hour_past_midnight_means_no_rise_today(self) -> None:
        # day 4 rises at 24.0, so the only arc left is the one from day 3
        self.assertAlmostEqual(self.moon.moon_rise_hour(4), 24.0)
        self.assertEqual(self.moon.angle(4, 23.5), 0.0)

    def test_angle_stays_within_half_circle(self) -> None:
        for day in range(0, 60):
            for quarter in range(0, 96):
                angle = self.moon.angle(day, quarter / 4.0)
                self.assertGreaterEqual(angle, 0.0)
                self.assertLess(angle, 180.0)

    def test_speed_is_clamped(self) -> None:
        self.assertEqual(masser(speed=10.0).speed, MAX_SPEED)
        self.assertEqual(masser(speed=180.0 / 23.0).speed, 180.0 / 23.0)
        self.assertEqual(masser(speed=0.5).speed, 0.5)


class MoonPhaseAndAlphaTests(unittest.TestCase):
    def setUp(self) -> None:
        self.moon = masser()

    def test_phase_uses_yesterday_before_rise(self) -> None:
        self.assertEqual(self.moon.phase(2, 2.0), 0)
        self.assertEqual(self.moon.phase(2, 22.0), 1)

    def test_shadow_blend_ramps(self) -> None:
        self.assertEqual(self.moon.shadow_blend(10.0), 0.0)
        self.assertAlmostEqual(self.moon.shadow_blend(45.0), 0.5)
        self.assertEqual(self.moon.shadow_blend(90.0), 1.0)
        self.assertAlmostEqual(self.moon.shadow_blend(135.0), 0.5)
        self.assertEqual(self.moon.shadow_blend(170.0), 0.0)

    def test_hourly_alpha(self) -> None:
        self.assertAlmostEqual(self.moon.hourly_alpha(8.5), 0.5)
        self.assertEqual(self.moon.hourly_alpha(12.0), 0.0)
        self.assertAlmostEqual(self.moon.hourly_alpha(14.5), 0.5)
        self.assertEqual(self.moon.hourly_alpha(20.0), 1.0)
        self.assertEqual(self.moon.hourly_alpha(3.0), 1.0)

    def test_early_shadow_alpha(self) -> None:
        self.assertEqual(self.moon.early_moon_shadow_alpha(10.0), 0.0)
        self.assertAlmostEqual(self.moon.early_moon_shadow_alpha(39.75), 0.5)
        self.assertEqual(self.moon.early_moon_shadow_alpha(90.0), 1.0)
        self.assertAlmostEqual(self.moon.early_moon_shadow_alpha(140.25), 0.5)

    def test_calculate_state(self) -> None:
        state = self.moon.calculate_state(1, 2.0)
        self.assertAlmostEqual(state.rotation_from_horizon, 51.0)
        self.assertEqual(state.rotation_from_north, 35.0)
        self.assertEqual(state.phase, MoonPhase.FULL)
        self.assertEqual(state.shadow_blend, 1.0)
        self.assertEqual(state.moon_alpha, 1.0)

    def test_low_moon_is_invisible(self) -> None:
        state = self.moon.calculate_state(1, 22.0)
        self.assertEqual(state.moon_alpha, 0.0)


class MoonConfigTests(unittest.TestCase):
    def test_loads_both_moons_from_default_config(self) -> None:
        fallback, _, _ = load_fixtures()
        secunda = MoonModel.from_fallback("Secunda", fallback)
        self.assertEqual(secunda.name, "Secunda")
        self.assertEqual(secunda.axis_offset, 50.0)
        self.assertEqual(secunda.fade_end_angle, 30.0)

    def test_missing_moon_keys_are_reported_together(self) -> None:
        with self.assertRaises(ConfigError) as raised:
            MoonModel.from_fallback("Masser", Fallback({"Moons_Masser_Speed": 0.0}))
        problems = raised.exception.problems
        self.assertEqual(len(problems), 10)
        self.assertTrue(any("Moons_Masser_Speed" in problem and "> 0" in problem for problem in problems))


if __name__ == "__main__":
    unittest.main()
