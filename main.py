"""Entry point for the sky preview and headless weather runs."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame

from skyengine.clock import GameClock, SessionTimer
from skyengine.collaborators import RandomDice
from skyengine.manager import WeatherManager
from skyengine.preview import LoggingSound, PreviewWorld, PygameSky, to_rgb

REPO_ROOT = Path(__file__).resolve().parent
DEFAULT_CONFIG = REPO_ROOT / "data" / "weather.json"
DEFAULT_REGION = "Ascadian Isles Region"

INTERNAL_WIDTH = 320
INTERNAL_HEIGHT = 200
PREVIEW_SIZE = (640, 400)
TARGET_FPS = 20
FIXED_DT = 1.0 / TARGET_FPS


class RuntimeArgs(argparse.Namespace):
    """Container for command-line runtime options."""

    config: Path
    region: str
    hour: float
    day: int
    timescale: float
    preview: bool
    headless: float | None
    seed: int | None
    debug: bool


@dataclass(frozen=True)
class LaunchConfig:
    """Resolved runtime mode after parsing the command line."""

    mode: str
    headless_hours: float = 0.0


class ShutdownRequested(Exception):
    """Raised when the preview should exit immediately."""


def parse_arguments(argv: list[str] | None = None) -> RuntimeArgs:
    """Parse CLI arguments for the preview and headless modes."""
    parser = argparse.ArgumentParser(description="Regional weather and sky simulation")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG, help="weather configuration JSON")
    parser.add_argument("--region", default=DEFAULT_REGION, help="region the player stands in")
    parser.add_argument("--hour", type=float, default=14.0, help="starting hour of day")
    parser.add_argument("--day", type=int, default=0, help="starting day count")
    parser.add_argument("--timescale", type=float, default=30.0, help="game seconds per real second")
    parser.add_argument("--preview", action="store_true", help="open a local 640x400 preview window")
    parser.add_argument("--headless", type=float, metavar="HOURS", help="simulate HOURS game hours without a window")
    parser.add_argument("--seed", type=int, help="seed for weather and thunder draws")
    parser.add_argument("--debug", action="store_true", help="enable concise debug logging")

    args = parser.parse_args(argv, namespace=RuntimeArgs())

    if args.preview and args.headless is not None:
        parser.error("--preview and --headless cannot be used together")
    if not 0.0 <= args.hour < 24.0:
        parser.error("--hour must be in [0, 24)")
    if args.day < 0:
        parser.error("--day cannot be negative")
    if args.timescale <= 0.0:
        parser.error("--timescale must be positive")
    if args.headless is not None and args.headless <= 0.0:
        parser.error("--headless needs a positive number of hours")

    return args


def configure_logging(debug_enabled: bool) -> logging.Logger:
    """Create a logger that stays quiet unless debug is enabled."""
    logger = logging.getLogger("skyengine")
    logger.handlers.clear()
    logger.propagate = False

    if debug_enabled:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(levelname)s skyengine %(message)s"))
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
    else:
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.CRITICAL + 1)

    return logger


def resolve_launch_config(args: RuntimeArgs) -> LaunchConfig:
    if args.headless is not None:
        return LaunchConfig(mode="headless", headless_hours=args.headless)
    if args.preview:
        return LaunchConfig(mode="preview")
    return LaunchConfig(mode="fullscreen")


def build_simulation(args: RuntimeArgs, sky: PygameSky) -> tuple[WeatherManager, PreviewWorld, LoggingSound]:
    clock = GameClock(day=args.day, hour=args.hour, timescale=args.timescale)
    world = PreviewWorld(clock=clock, region=args.region)
    sound = LoggingSound()
    manager = WeatherManager.from_config(args.config, world, sky, sound, RandomDice(args.seed))
    manager.set_hour(clock.hour)
    return manager, world, sound


def step_simulation(manager: WeatherManager, clock: GameClock, delta_time: float) -> None:
    """Advance the calendar by one frame and let the weather catch up."""
    hours = clock.advance(delta_time)
    manager.advance_time(hours)
    manager.set_hour(clock.hour)
    manager.update(delta_time, paused=False)


def describe(manager: WeatherManager, sky: PygameSky) -> str:
    result = manager.result
    if result is None:
        return f"hour={manager.hour:05.2f} interior"
    weather = manager.current_weather.value
    if manager.next_weather is not None:
        weather = f"{weather}->{manager.next_weather.value} {manager.transition_progress():.0%}"
    moons = " ".join(
        f"{name}={state.rotation_from_horizon:.0f}deg/{state.phase.name.lower()}/{state.moon_alpha:.2f}"
        for name, state in sky.moons.items()
    )
    return (
        f"hour={manager.hour:05.2f} weather={weather} sky={to_rgb(result.sky_color)} "
        f"fog={result.fog_depth:.2f} storm={result.is_storm} {moons}"
    )


def run_headless(args: RuntimeArgs, config: LaunchConfig, logger: logging.Logger) -> int:
    """Run the simulation at the fixed frame rate without opening a window."""
    sky = PygameSky((INTERNAL_WIDTH, INTERNAL_HEIGHT))
    manager, world, _ = build_simulation(args, sky)
    clock = world.clock

    elapsed_hours = 0.0
    next_report = 0.0
    try:
        while elapsed_hours < config.headless_hours:
            step_simulation(manager, clock, FIXED_DT)
            elapsed_hours += clock.game_hours_for(FIXED_DT)
            if elapsed_hours >= next_report:
                logger.info("%s", describe(manager, sky))
                next_report += 1.0
    finally:
        manager.close()
    return 0


def _create_window(config: LaunchConfig) -> tuple[pygame.Surface, tuple[int, int]]:
    """Create the pygame display surface according to resolved mode."""
    if config.mode == "preview":
        try:
            window = pygame.display.set_mode(PREVIEW_SIZE, pygame.RESIZABLE)
        except pygame.error:
            window = pygame.display.set_mode(PREVIEW_SIZE)
        return window, PREVIEW_SIZE

    display_info = pygame.display.Info()
    fullscreen_size = (display_info.current_w, display_info.current_h)
    window = pygame.display.set_mode(fullscreen_size, pygame.FULLSCREEN)
    return window, fullscreen_size


def _compute_integer_scale(screen_size: tuple[int, int]) -> tuple[tuple[int, int], tuple[int, int]]:
    """Compute integer nearest-neighbor scale and centered offset."""
    screen_width, screen_height = screen_size
    scale = min(screen_width // INTERNAL_WIDTH, screen_height // INTERNAL_HEIGHT)
    if scale < 1:
        scale = 1

    scaled_size = (INTERNAL_WIDTH * scale, INTERNAL_HEIGHT * scale)
    offset = ((screen_width - scaled_size[0]) // 2, (screen_height - scaled_size[1]) // 2)
    return scaled_size, offset


def _rebuild_scaling(screen_size: tuple[int, int]) -> tuple[pygame.Surface, tuple[int, int], tuple[int, int]]:
    """Allocate surfaces only when output size changes."""
    scaled_size, scaled_offset = _compute_integer_scale(screen_size)
    scaled_surface = pygame.Surface(scaled_size)
    return scaled_surface, scaled_size, scaled_offset


def _handle_event(event: pygame.event.Event) -> tuple[bool, tuple[int, int] | None]:
    """Return whether to shutdown and an optional new screen size."""
    if event.type == pygame.QUIT:
        return True, None

    if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
        return True, None

    if event.type == pygame.VIDEORESIZE:
        return False, (event.w, event.h)

    if event.type == pygame.WINDOWRESIZED:
        return False, (event.x, event.y)

    return False, None


def _handle_key(event: pygame.event.Event, manager: WeatherManager, world: PreviewWorld) -> None:
    """Digits force the region's weather; plus and minus move the clock by an hour."""
    if event.type != pygame.KEYDOWN:
        return

    if event.unicode.isdigit() and world.region:
        manager.change_weather(world.region, int(event.unicode))
    elif event.unicode in ("+", "="):
        world.clock.advance_hours(1.0)
        manager.advance_time(1.0)
        manager.set_hour(world.clock.hour)
    elif event.unicode == "-":
        world.clock.advance_hours(-1.0)
        manager.set_hour(world.clock.hour)


def run(argv: list[str] | None = None) -> int:
    """Run the preview loop or a headless simulation."""
    args = parse_arguments(argv)
    logger = configure_logging(args.debug)
    config = resolve_launch_config(args)

    if config.mode == "headless":
        return run_headless(args, config, logger)

    sky = PygameSky((INTERNAL_WIDTH, INTERNAL_HEIGHT))
    manager, world, _ = build_simulation(args, sky)

    pygame.init()
    window, output_size = _create_window(config)
    pygame.display.set_caption(f"Sky preview - {args.region}")

    internal_surface = pygame.Surface((INTERNAL_WIDTH, INTERNAL_HEIGHT))
    scaled_surface, scaled_size, scaled_offset = _rebuild_scaling(output_size)

    frame_clock = pygame.time.Clock()
    timer = SessionTimer()

    try:
        while True:
            delta_time = timer.tick()

            for event in pygame.event.get():
                should_shutdown, new_size = _handle_event(event)
                if should_shutdown:
                    raise ShutdownRequested
                if new_size and new_size[0] > 0 and new_size[1] > 0:
                    scaled_surface, scaled_size, scaled_offset = _rebuild_scaling(new_size)
                _handle_key(event, manager, world)

            step_simulation(manager, world.clock, delta_time)
            sky.render(internal_surface)

            pygame.transform.scale(internal_surface, scaled_size, scaled_surface)
            window.fill((0, 0, 0))
            window.blit(scaled_surface, scaled_offset)
            pygame.display.flip()
            frame_clock.tick(TARGET_FPS)
    except ShutdownRequested:
        return 0
    finally:
        manager.close()
        pygame.quit()


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    raise SystemExit(run(argv))


if __name__ == "__main__":
    main()
