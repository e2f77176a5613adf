"""Regional weather tables and the weighted weather draw."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Sequence

from skyengine.collaborators import Dice
from skyengine.profile import WeatherKind

LOGGER = logging.getLogger(__name__)

RegionWeights = tuple[int, ...]


class RegionNotFoundError(KeyError):
    """Raised when a region id is not known to the region store."""


class RegionStore:
    """Case-insensitive table of region id to its ten weather weights."""

    def __init__(self, regions: dict[str, Sequence[int]] | None = None) -> None:
        self._regions: dict[str, RegionWeights] = {}
        for region_id, weights in (regions or {}).items():
            self._regions[region_id.lower()] = tuple(int(weight) for weight in weights)

    @classmethod
    def from_file(cls, config_file: str | Path) -> RegionStore:
        raw_data = json.loads(Path(config_file).read_text(encoding="utf-8"))
        raw_regions = raw_data.get("regions", {}) if isinstance(raw_data, dict) else {}
        if not isinstance(raw_regions, dict):
            LOGGER.warning("Ignoring malformed region table in %s", config_file)
            return cls()

        regions: dict[str, Sequence[int]] = {}
        for region_id, weights in raw_regions.items():
            if (
                not isinstance(weights, list)
                or len(weights) != len(WeatherKind)
                or any(isinstance(weight, bool) or not isinstance(weight, int) for weight in weights)
            ):
                LOGGER.warning("Skipping region %s: expected %d integer weights", region_id, len(WeatherKind))
                continue
            if sum(weights) != 100:
                LOGGER.warning("Region %s weights sum to %d, not 100", region_id, sum(weights))
            regions[region_id] = weights
        return cls(regions)

    def search(self, region_id: str) -> RegionWeights | None:
        return self._regions.get(region_id.lower())

    def find(self, region_id: str) -> RegionWeights:
        weights = self.search(region_id)
        if weights is None:
            raise RegionNotFoundError(region_id)
        return weights

    def region_ids(self) -> list[str]:
        return sorted(self._regions)


class RegionSelector:
    """Draw the next weather for a region from its relative weights."""

    def __init__(self, dice: Dice) -> None:
        self._dice = dice

    def next_weather(self, weights: Sequence[int]) -> WeatherKind:
        """Return the first kind whose cumulative weight reaches a 1..100 draw.

        With weights 30 and 70, draws 1..30 pick the first kind and 31..100
        the second. Weights are expected to sum to 100; a draw past every
        cumulative sum yields clear.
        """
        chance = self._dice.roll_dice(100) + 1
        total = 0
        for index, weight in enumerate(weights):
            total += weight
            if chance <= total:
                return WeatherKind.from_id(index)
        return WeatherKind.CLEAR
