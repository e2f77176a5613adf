"""Sanity checks for CLI parsing behavior."""

from __future__ import annotations

import logging
import os
import unittest

import main


class CliParseTests(unittest.TestCase):
    def test_default_arguments(self) -> None:
        args = main.parse_arguments([])
        self.assertEqual(args.config, main.DEFAULT_CONFIG)
        self.assertEqual(args.region, main.DEFAULT_REGION)
        self.assertEqual(args.hour, 14.0)
        self.assertEqual(args.day, 0)
        self.assertEqual(args.timescale, 30.0)
        self.assertFalse(args.preview)
        self.assertIsNone(args.headless)
        self.assertIsNone(args.seed)
        self.assertFalse(args.debug)

    def test_preview_flag(self) -> None:
        args = main.parse_arguments(["--preview"])
        self.assertTrue(args.preview)
        self.assertEqual(main.resolve_launch_config(args).mode, "preview")

    def test_headless_launch_config(self) -> None:
        args = main.parse_arguments(["--headless", "6", "--seed", "9"])
        config = main.resolve_launch_config(args)
        self.assertEqual(config.mode, "headless")
        self.assertEqual(config.headless_hours, 6.0)
        self.assertEqual(args.seed, 9)

    def test_fullscreen_is_the_default_mode(self) -> None:
        self.assertEqual(main.resolve_launch_config(main.parse_arguments([])).mode, "fullscreen")

    def test_conflicting_preview_and_headless(self) -> None:
        with self.assertRaises(SystemExit):
            main.parse_arguments(["--preview", "--headless", "2"])

    def test_rejected_values(self) -> None:
        for argv in (["--hour", "24"], ["--hour", "-1"], ["--day", "-3"], ["--timescale", "0"], ["--headless", "0"]):
            with self.subTest(argv=argv):
                with self.assertRaises(SystemExit):
                    main.parse_arguments(argv)

    def test_logging_is_silent_without_debug(self) -> None:
        logger = main.configure_logging(False)
        self.assertFalse(logger.isEnabledFor(logging.CRITICAL))
        logger = main.configure_logging(True)
        self.assertTrue(logger.isEnabledFor(logging.DEBUG))
        main.configure_logging(False)


class HeadlessRunTests(unittest.TestCase):
    def test_headless_run_completes(self) -> None:
        old_video_driver = os.environ.get("SDL_VIDEODRIVER")
        os.environ["SDL_VIDEODRIVER"] = "dummy"
        try:
            self.assertEqual(main.run(["--headless", "1", "--seed", "3", "--region", "Ashlands Region"]), 0)
        finally:
            if old_video_driver is None:
                os.environ.pop("SDL_VIDEODRIVER", None)
            else:
                os.environ["SDL_VIDEODRIVER"] = old_video_driver


if __name__ == "__main__":
    unittest.main()
