"""Configuration lookup, schema validation and weather profile loading."""

from __future__ import annotations

import json
import tempfile
import unittest
from pathlib import Path

from skyengine.fallback import ConfigError, Fallback, FieldSpec
from skyengine.profile import (
    RAIN_EFFECT,
    UnknownWeatherError,
    WeatherKind,
    WeatherProfile,
    load_weather_profiles,
)

from weather_fakes import CONFIG_FILE, load_fixtures


class FallbackLookupTests(unittest.TestCase):
    def test_colour_is_normalized_with_opaque_alpha(self) -> None:
        fallback = Fallback({"Weather_Clear_Sky_Day_Color": [255, 0, 51]})
        self.assertEqual(fallback.get_colour("Weather_Clear_Sky_Day_Color"), (1.0, 0.0, 0.2, 1.0))

    def test_missing_key_raises_key_error(self) -> None:
        with self.assertRaises(KeyError):
            Fallback({}).get_float("Weather_Sunrise_Time")

    def test_malformed_values_raise_value_error(self) -> None:
        fallback = Fallback({"colour": [1, 2], "flag": "yes", "number": "6", "name": 3})
        with self.assertRaises(ValueError):
            fallback.get_colour("colour")
        with self.assertRaises(ValueError):
            fallback.get_bool("flag")
        with self.assertRaises(ValueError):
            fallback.get_float("number")
        with self.assertRaises(ValueError):
            fallback.get_string("name")

    def test_bool_accepts_zero_and_one(self) -> None:
        fallback = Fallback({"on": 1, "off": 0, "flag": True})
        self.assertTrue(fallback.get_bool("on"))
        self.assertFalse(fallback.get_bool("off"))
        self.assertTrue(fallback.get_bool("flag"))

    def test_resolve_reports_every_problem_at_once(self) -> None:
        schema = (
            FieldSpec("delta", "Weather_{name}_Transition_Delta", "float", positive=True),
            FieldSpec("texture", "Weather_{name}_Cloud_Texture", "string"),
            FieldSpec("wind", "Weather_{name}_Wind_Speed", "float"),
        )
        fallback = Fallback({"Weather_Rain_Transition_Delta": 0.0, "Weather_Rain_Wind_Speed": 0.3})

        with self.assertLogs("skyengine.fallback", level="WARNING"):
            with self.assertRaises(ConfigError) as raised:
                fallback.resolve(schema, name="Rain")

        self.assertEqual(
            raised.exception.problems,
            ["Weather_Rain_Transition_Delta: must be > 0, got 0.0", "missing Weather_Rain_Cloud_Texture"],
        )

    def test_resolve_reads_through_typed_getters(self) -> None:
        class GreyFallback(Fallback):
            def get_colour(self, key: str):
                return (0.5, 0.5, 0.5, 1.0)

        schema = (FieldSpec("sky", "Weather_{name}_Sky_Day_Color", "colour"),)
        resolved = GreyFallback({"Weather_Fog_Sky_Day_Color": [0, 0, 0]}).resolve(schema, name="Fog")
        self.assertEqual(resolved, {"sky": (0.5, 0.5, 0.5, 1.0)})

    def test_from_file_merges_settings_section(self) -> None:
        payload = {"settings": {"fStromWindSpeed": 0.7}, "fallback": {"Weather_Sunrise_Time": 6}}
        with tempfile.TemporaryDirectory() as temp_dir:
            config_file = Path(temp_dir) / "weather.json"
            config_file.write_text(json.dumps(payload), encoding="utf-8")
            fallback = Fallback.from_file(config_file)

        self.assertEqual(fallback.get_float("fStromWindSpeed"), 0.7)
        self.assertEqual(fallback.get_float("Weather_Sunrise_Time"), 6.0)


class WeatherKindTests(unittest.TestCase):
    def test_ids_follow_declaration_order(self) -> None:
        self.assertEqual([kind.id for kind in WeatherKind], list(range(10)))
        self.assertIs(WeatherKind.from_id(5), WeatherKind.THUNDERSTORM)

    def test_out_of_range_id_is_clear(self) -> None:
        self.assertIs(WeatherKind.from_id(10), WeatherKind.CLEAR)
        self.assertIs(WeatherKind.from_id(-1), WeatherKind.CLEAR)

    def test_parse_is_case_insensitive(self) -> None:
        self.assertIs(WeatherKind.parse("Snow"), WeatherKind.SNOW)
        self.assertIs(WeatherKind.parse(WeatherKind.BLIGHT), WeatherKind.BLIGHT)
        self.assertEqual(WeatherKind.ASHSTORM.config_name, "Ashstorm")

    def test_unknown_name_raises(self) -> None:
        with self.assertRaises(UnknownWeatherError):
            WeatherKind.parse("hail")


class WeatherProfileTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls) -> None:
        cls.fallback, cls.settings, cls.profiles = load_fixtures()

    def test_every_kind_has_a_profile(self) -> None:
        self.assertEqual(set(self.profiles), set(WeatherKind))
        self.assertEqual(self.profiles[WeatherKind.RAIN].name, "rain")

    def test_settings_are_loaded(self) -> None:
        self.assertEqual(self.settings.sunrise_time, 6.0)
        self.assertEqual(self.settings.hours_between_weather_changes, 20.0)
        self.assertEqual(self.settings.thunder_sound_ids, ("Thunder0", "Thunder1", "Thunder2", "Thunder3"))

    def test_storm_flag_comes_from_wind_speed(self) -> None:
        self.assertTrue(self.profiles[WeatherKind.ASHSTORM].is_storm)
        self.assertTrue(self.profiles[WeatherKind.BLIZZARD].is_storm)
        self.assertFalse(self.profiles[WeatherKind.THUNDERSTORM].is_storm)
        self.assertFalse(self.profiles[WeatherKind.CLEAR].is_storm)

    def test_precipitation_and_effects(self) -> None:
        rain = self.profiles[WeatherKind.RAIN]
        self.assertEqual(rain.rain_effect, RAIN_EFFECT)
        self.assertEqual(rain.ambient_loop_sound_id, "rain")
        self.assertEqual(rain.rain_speed, 575.0)
        self.assertEqual(self.profiles[WeatherKind.CLEAR].rain_effect, "")
        self.assertEqual(self.profiles[WeatherKind.BLIZZARD].ambient_loop_sound_id, "BM Blizzard")
        self.assertEqual(self.profiles[WeatherKind.SNOW].particle_effect, "meshes\\snow.nif")

    def test_transition_seconds(self) -> None:
        self.assertAlmostEqual(self.profiles[WeatherKind.CLEAR].transition_seconds(), 2004.0)
        self.assertAlmostEqual(self.profiles[WeatherKind.THUNDERSTORM].transition_seconds(), 1002.0)

    def test_cloud_blend_factor_outruns_the_transition(self) -> None:
        rain = self.profiles[WeatherKind.RAIN]
        self.assertAlmostEqual(rain.cloud_blend_factor(0.33), 0.5)
        self.assertEqual(self.profiles[WeatherKind.CLEAR].cloud_blend_factor(0.4), 0.4)

    def test_colours_are_read_from_config(self) -> None:
        clear = self.profiles[WeatherKind.CLEAR]
        self.assertEqual(clear.sky_day_color, (95 / 255.0, 135 / 255.0, 203 / 255.0, 1.0))
        self.assertEqual(clear.land_fog_day_depth, 0.69)

    def test_zero_transition_delta_is_rejected(self) -> None:
        values = json.loads(CONFIG_FILE.read_text(encoding="utf-8"))["fallback"]
        values["Weather_Foggy_Transition_Delta"] = 0.0
        values.pop("Weather_Snow_Cloud_Texture")

        with self.assertLogs("skyengine.fallback", level="WARNING"):
            with self.assertRaises(ConfigError) as raised:
                load_weather_profiles(Fallback(values), self.settings)

        self.assertEqual(
            raised.exception.problems,
            ["Weather_Foggy_Transition_Delta: must be > 0, got 0.0", "missing Weather_Snow_Cloud_Texture"],
        )

    def test_single_profile_from_fallback(self) -> None:
        profile = WeatherProfile.from_fallback(WeatherKind.OVERCAST, self.fallback, self.settings)
        self.assertEqual(profile.clouds_maximum_percent, 0.8)


if __name__ == "__main__":
    unittest.main()
