"""Planner settings and JSON config file loading."""

from __future__ import annotations

import datetime
import json
import pathlib
from typing import Any, NamedTuple

from bridgeplan.calendar_days import Holiday
from bridgeplan.holidays import parse_holiday_entry


MIN_YEAR = datetime.MINYEAR
MAX_YEAR = datetime.MAXYEAR


class ConfigError(ValueError):
    """Raised when a config file cannot be used."""


class PlannerSettings(NamedTuple):
    """Tunables for candidate generation and selection.

    ``max_budget`` and ``max_candidates`` bound the size of the DP table a
    single request may allocate.
    """

    min_desired_length: int = 4
    max_pto_per_candidate: int = 10
    fallback_pto_per_candidate: int = 5
    max_budget: int = 366
    max_candidates: int = 20000


class PlannerConfig(NamedTuple):
    """Values read from a config file.  ``None`` means "not set"."""

    year: int | None = None
    budget: int | None = None
    country: str | None = None
    holidays_file: pathlib.Path | None = None
    holidays: tuple[Holiday, ...] = ()
    settings: PlannerSettings = PlannerSettings()


_SETTING_KEYS = {
    "min_length": "min_desired_length",
    "max_pto_per_vacation": "max_pto_per_candidate",
    "max_budget": "max_budget",
    "max_candidates": "max_candidates",
}


def _int_field(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"'{key}' must be an integer, got {value!r}")
    return value


def load_config(path: str | pathlib.Path) -> PlannerConfig:
    """Load and validate a JSON config file."""
    p = pathlib.Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")

    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Invalid JSON in config file: {exc}") from None
    except OSError as exc:
        raise ConfigError(f"Cannot read config file {path}: {exc.strerror}") from None

    if not isinstance(data, dict):
        raise ConfigError("Config file must contain a JSON object.")

    overrides: dict[str, int] = {}
    for key, field in _SETTING_KEYS.items():
        value = _int_field(data, key)
        if value is not None:
            overrides[field] = value

    raw_holidays = data.get("holidays", [])
    if not isinstance(raw_holidays, list):
        raise ConfigError("'holidays' must be a list.")
    try:
        holidays = tuple(parse_holiday_entry(h) for h in raw_holidays)
    except ValueError as exc:
        raise ConfigError(str(exc)) from None

    country = data.get("country")
    if country is not None and not isinstance(country, str):
        raise ConfigError(f"'country' must be a string, got {country!r}")

    holidays_file = data.get("holidays_file")
    resolved_file: pathlib.Path | None = None
    if holidays_file is not None:
        if not isinstance(holidays_file, str):
            raise ConfigError(f"'holidays_file' must be a string, got {holidays_file!r}")
        resolved_file = pathlib.Path(holidays_file)
        if not resolved_file.is_absolute():
            resolved_file = p.parent / resolved_file

    year = _int_field(data, "year")
    if year is not None and not MIN_YEAR <= year <= MAX_YEAR:
        raise ConfigError(f"'year' must be between {MIN_YEAR} and {MAX_YEAR}, got {year}")

    return PlannerConfig(
        year=year,
        budget=_int_field(data, "budget"),
        country=country,
        holidays_file=resolved_file,
        holidays=holidays,
        settings=PlannerSettings()._replace(**overrides),
    )
