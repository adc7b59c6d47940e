"""Holiday data supplied from outside the planner.

Holiday calendars are never computed here.  They come from a
:class:`HolidaySource`, typically a JSON file keyed by country code and
year, or from dates typed on the command line.

Holiday file layout::

    {
      "US": {
        "2025": [
          {"date": "2025-01-01", "name": "New Year's Day", "type": "public"},
          ...
        ]
      }
    }
"""

from __future__ import annotations

import datetime
import json
import logging
import pathlib
from collections.abc import Iterable
from typing import Protocol

from bridgeplan.calendar_days import PUBLIC, Holiday

logger = logging.getLogger(__name__)


class HolidayDataError(ValueError):
    """Raised when holiday data is malformed."""


class HolidaySource(Protocol):
    def __call__(self, country: str, year: int) -> list[Holiday]: ...


# ---------------------------------------------------------------------------
# Parsing helpers
# ---------------------------------------------------------------------------


def parse_holiday_entry(raw: object) -> Holiday:
    """Build a :class:`Holiday` from a JSON entry.

    Accepts a bare ``"YYYY-MM-DD"`` string or a mapping with ``date``,
    ``name`` and ``type`` (or ``category``) keys.  Timestamps such as
    ``"2025-01-01 00:00:00"`` are cut down to their date part.
    """
    if isinstance(raw, str):
        raw = {"date": raw}
    if not isinstance(raw, dict) or "date" not in raw:
        raise ValueError(f"Holiday entry must be a date string or an object with 'date': {raw!r}")
    try:
        date = datetime.date.fromisoformat(str(raw["date"])[:10])
    except ValueError:
        raise ValueError(f"Invalid holiday date {raw['date']!r}. Use YYYY-MM-DD.") from None
    name = str(raw.get("name") or date.strftime("%b %d"))
    category = str(raw.get("category", raw.get("type", PUBLIC)))
    return Holiday(date, name, category)


def parse_holiday_arg(value: str) -> Holiday:
    """Parse a ``YYYY-MM-DD[=Name]`` command-line value into a public holiday."""
    date_part, _, name = value.partition("=")
    try:
        date = datetime.date.fromisoformat(date_part.strip())
    except ValueError:
        raise ValueError(f"Invalid date format {date_part!r}. Use YYYY-MM-DD.") from None
    return Holiday(date, name.strip() or date.strftime("%b %d"))


def public_holidays(records: Iterable[Holiday], year: int | None = None) -> list[Holiday]:
    """Keep only public holidays (inside *year* when given), sorted by date."""
    kept = [
        h for h in records if h.category == PUBLIC and (year is None or h.date.year == year)
    ]
    return sorted(kept, key=lambda h: h.date)


# ---------------------------------------------------------------------------
# JSON file source
# ---------------------------------------------------------------------------


class JsonHolidaySource:
    """Holiday records read from a JSON file, looked up by country and year."""

    def __init__(self, path: str | pathlib.Path):
        self.path = pathlib.Path(path)
        if not self.path.exists():
            raise HolidayDataError(f"Holiday file not found: {path}")
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise HolidayDataError(f"Invalid JSON in holiday file: {exc}") from None
        except OSError as exc:
            raise HolidayDataError(f"Cannot read holiday file {path}: {exc.strerror}") from None
        if not isinstance(data, dict):
            raise HolidayDataError("Holiday file must map country codes to years.")
        self._data: dict[str, object] = {str(k).upper(): v for k, v in data.items()}

    def countries(self) -> list[str]:
        return sorted(self._data)

    def __call__(self, country: str, year: int) -> list[Holiday]:
        """Return every holiday record for *country* in *year*.

        Raises ``KeyError`` if the country is not in the file.
        """
        by_year = self._data.get(country.upper())
        if by_year is None:
            supported = ", ".join(self.countries())
            msg = f"Unknown country {country!r}. Supported: {supported}"
            raise KeyError(msg)
        if not isinstance(by_year, dict):
            raise HolidayDataError(f"Entry for {country!r} must map years to holiday lists.")

        entries = by_year.get(str(year), [])
        if not isinstance(entries, list):
            raise HolidayDataError(f"Holidays for {country!r} {year} must be a list.")
        try:
            records = [parse_holiday_entry(e) for e in entries]
        except ValueError as exc:
            raise HolidayDataError(str(exc)) from None
        logger.debug("Loaded %d holiday records for %s %d", len(records), country, year)
        return records
