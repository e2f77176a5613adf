"""Named configuration values and declarative schema resolution."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping

LOGGER = logging.getLogger(__name__)

Colour = tuple[float, float, float, float]


class ConfigError(ValueError):
    """Raised once per schema resolution with every problem found."""

    def __init__(self, problems: list[str]) -> None:
        self.problems = list(problems)
        summary = "; ".join(self.problems)
        super().__init__(f"{len(self.problems)} configuration problem(s): {summary}")


@dataclass(frozen=True)
class FieldSpec:
    """Maps one record attribute to a key template and a value kind."""

    attribute: str
    key_template: str
    kind: str
    positive: bool = False

    def key(self, **names: str) -> str:
        return self.key_template.format(**names)


def _parse_float(raw: Any) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float)):
        raise ValueError(f"expected a number, got {raw!r}")
    return float(raw)


def _parse_colour(raw: Any) -> Colour:
    if (
        not isinstance(raw, list)
        or len(raw) != 3
        or any(isinstance(channel, bool) or not isinstance(channel, (int, float)) for channel in raw)
    ):
        raise ValueError(f"colour must be a 3-item numeric list, got {raw!r}")
    red, green, blue = (max(0.0, min(255.0, float(channel))) / 255.0 for channel in raw)
    return (red, green, blue, 1.0)


def _parse_bool(raw: Any) -> bool:
    if isinstance(raw, bool):
        return raw
    if raw in (0, 1):
        return bool(raw)
    raise ValueError(f"expected a boolean, got {raw!r}")


def _parse_string(raw: Any) -> str:
    if not isinstance(raw, str):
        raise ValueError(f"expected a string, got {raw!r}")
    return raw


_PARSERS: dict[str, Callable[[Any], Any]] = {
    "float": _parse_float,
    "colour": _parse_colour,
    "bool": _parse_bool,
    "string": _parse_string,
}


class Fallback:
    """Typed lookup over a flat ``key -> value`` configuration map.

    Keys follow the ``Weather_<Name>_<Field>`` and ``Moons_<Name>_<Field>``
    templates. Lookups of missing or malformed keys raise :class:`KeyError`
    or :class:`ValueError`; use :meth:`resolve` to validate a whole record at
    once.
    """

    def __init__(self, values: Mapping[str, Any]) -> None:
        self._values = dict(values)

    @classmethod
    def from_file(cls, config_file: str | Path) -> Fallback:
        """Load the ``fallback`` and ``settings`` sections of a JSON file."""
        raw_data = json.loads(Path(config_file).read_text(encoding="utf-8"))
        if not isinstance(raw_data, dict):
            raise ConfigError([f"{config_file}: top level must be an object"])

        values: dict[str, Any] = {}
        for section in ("fallback", "settings"):
            entries = raw_data.get(section, {})
            if not isinstance(entries, dict):
                LOGGER.warning("Ignoring malformed %s section in %s", section, config_file)
                continue
            values.update(entries)
        return cls(values)

    def _get(self, key: str, kind: str) -> Any:
        if key not in self._values:
            raise KeyError(key)
        return _PARSERS[kind](self._values[key])

    def get_float(self, key: str) -> float:
        return self._get(key, "float")

    def get_colour(self, key: str) -> Colour:
        return self._get(key, "colour")

    def get_bool(self, key: str) -> bool:
        return self._get(key, "bool")

    def get_string(self, key: str) -> str:
        return self._get(key, "string")

    def resolve(self, schema: tuple[FieldSpec, ...], **names: str) -> dict[str, Any]:
        """Resolve every field of ``schema``, reporting all problems together."""
        resolved: dict[str, Any] = {}
        problems: list[str] = []
        for field in schema:
            key = field.key(**names)
            try:
                value = getattr(self, f"get_{field.kind}")(key)
            except KeyError:
                problems.append(f"missing {key}")
                continue
            except ValueError as error:
                problems.append(f"{key}: {error}")
                continue
            if field.positive and value <= 0.0:
                problems.append(f"{key}: must be > 0, got {value!r}")
                continue
            resolved[field.attribute] = value

        if problems:
            for problem in problems:
                LOGGER.warning("Configuration problem: %s", problem)
            raise ConfigError(problems)
        return resolved
