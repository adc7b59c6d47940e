"""Day classification for a single calendar year.

Every date of the year is either a public holiday, a weekend day or a
workday.  Internally days are addressed by their *offset* from January 1st
(``date.toordinal() - first_ordinal``); ``datetime.date`` objects only
appear at the edges.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable
from enum import Enum
from typing import NamedTuple

logger = logging.getLogger(__name__)

PUBLIC = "public"

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class Holiday(NamedTuple):
    """A holiday record as supplied by an external holiday source."""

    date: datetime.date
    name: str
    category: str = PUBLIC


class DayKind(str, Enum):
    HOLIDAY = "holiday"
    WEEKEND = "weekend"
    WORKDAY = "workday"


class DayInfo(NamedTuple):
    """Classification of one date."""

    kind: DayKind
    holiday_name: str | None = None


# ---------------------------------------------------------------------------
# Calendar
# ---------------------------------------------------------------------------


class YearCalendar:
    """Precomputed per-day lookups for one year.

    Only holidays with the ``public`` category that fall inside *year* are
    taken into account; everything else is ignored.
    """

    def __init__(self, year: int, holidays: Iterable[Holiday] = ()):
        self.year = year
        self.start_date = datetime.date(year, 1, 1)
        self.end_date = datetime.date(year, 12, 31)
        self.first_ordinal = self.start_date.toordinal()
        self.num_days = self.end_date.toordinal() - self.first_ordinal + 1

        self.dates: list[datetime.date] = [
            self.start_date + datetime.timedelta(days=d) for d in range(self.num_days)
        ]

        # offset -> holiday records on that day (several sources may name it)
        self.holidays_at: dict[int, list[Holiday]] = {}
        for h in holidays:
            if h.category != PUBLIC:
                logger.debug("Ignoring non-public holiday %s (%s)", h.name, h.category)
                continue
            if h.date.year != year:
                logger.debug("Ignoring holiday %s on %s outside %d", h.name, h.date, year)
                continue
            offset = h.date.toordinal() - self.first_ordinal
            self.holidays_at.setdefault(offset, []).append(h)

        self.is_weekend: list[bool] = [d.weekday() >= 5 for d in self.dates]
        self.is_holiday: list[bool] = [d in self.holidays_at for d in range(self.num_days)]
        self.is_off: list[bool] = [
            w or h for w, h in zip(self.is_weekend, self.is_holiday, strict=True)
        ]

        # _workday_prefix[k] = number of workdays among offsets [0, k)
        self._workday_prefix: list[int] = [0]
        for off in self.is_off:
            self._workday_prefix.append(self._workday_prefix[-1] + (0 if off else 1))

    # ------------------------------------------------------------------
    # Conversions
    # ------------------------------------------------------------------

    def offset(self, date: datetime.date) -> int:
        """Return the day offset of *date* within the year."""
        if date.year != self.year:
            raise ValueError(f"{date} is outside {self.year}")
        return date.toordinal() - self.first_ordinal

    def date_at(self, offset: int) -> datetime.date:
        return self.dates[offset]

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def kind_at(self, offset: int) -> DayKind:
        if self.is_holiday[offset]:
            return DayKind.HOLIDAY
        if self.is_weekend[offset]:
            return DayKind.WEEKEND
        return DayKind.WORKDAY

    def classify(self, date: datetime.date) -> DayInfo:
        """Classify *date*.

        A holiday that falls on a weekend is reported as ``HOLIDAY`` so its
        name is kept; it still shows up in :meth:`weekends_between`.
        """
        d = self.offset(date)
        kind = self.kind_at(d)
        if kind is DayKind.HOLIDAY:
            return DayInfo(kind, self.holidays_at[d][0].name)
        return DayInfo(kind)

    # ------------------------------------------------------------------
    # Range queries (inclusive offsets)
    # ------------------------------------------------------------------

    def workdays_between(self, start: int, end: int) -> int:
        return self._workday_prefix[end + 1] - self._workday_prefix[start]

    def holidays_between(self, start: int, end: int) -> list[Holiday]:
        found: list[Holiday] = []
        for d in range(start, end + 1):
            if self.is_holiday[d]:
                found.extend(self.holidays_at[d])
        return found

    def weekends_between(self, start: int, end: int) -> list[datetime.date]:
        return [self.dates[d] for d in range(start, end + 1) if self.is_weekend[d]]

    @property
    def public_holidays(self) -> list[Holiday]:
        """All public holidays of the year, in date order."""
        return [h for d in sorted(self.holidays_at) for h in self.holidays_at[d]]


def classify_year(year: int, holidays: Iterable[Holiday]) -> dict[datetime.date, DayInfo]:
    """Return a ``date -> DayInfo`` mapping covering every day of *year*."""
    cal = YearCalendar(year, holidays)
    return {cal.dates[d]: cal.classify(cal.dates[d]) for d in range(cal.num_days)}
