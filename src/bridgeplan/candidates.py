"""Candidate generation: every contiguous bridge reachable from each day.

A *candidate* is a run of consecutive days starting on some date that
absorbs every weekend and holiday it meets and spends PTO on workdays
until a per-candidate cap is exhausted.  Every prefix of such a run is a
candidate of its own, so the selector can choose how far to stretch.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable
from typing import NamedTuple

from bridgeplan.calendar_days import Holiday, YearCalendar
from bridgeplan.config import PlannerSettings

logger = logging.getLogger(__name__)


class VacationCandidate(NamedTuple):
    """A contiguous stretch of days off, possibly bridged with PTO."""

    id: int
    start_date: datetime.date
    end_date: datetime.date
    total_days: int
    pto_used: int
    holidays: tuple[Holiday, ...]
    weekends: tuple[datetime.date, ...]
    predecessor: int | None = None

    @property
    def holiday_names(self) -> list[str]:
        return [h.name for h in self.holidays]

    def pto_dates(self) -> list[datetime.date]:
        """Workdays inside the candidate that must be requested off."""
        free = {h.date for h in self.holidays} | set(self.weekends)
        return [
            self.start_date + datetime.timedelta(days=i)
            for i in range(self.total_days)
            if self.start_date + datetime.timedelta(days=i) not in free
        ]

    def overlaps(self, other: VacationCandidate) -> bool:
        return self.start_date <= other.end_date and other.start_date <= self.end_date


def default_pto_cap(pto_budget: int, settings: PlannerSettings = PlannerSettings()) -> int:
    """PTO a single candidate may spend: the budget, capped, with a fallback
    when there is no positive budget to size it from."""
    if pto_budget > 0:
        return min(settings.max_pto_per_candidate, pto_budget)
    return min(settings.max_pto_per_candidate, settings.fallback_pto_per_candidate)


def _make_candidate(cal: YearCalendar, start: int, end: int, cid: int = -1) -> VacationCandidate:
    return VacationCandidate(
        id=cid,
        start_date=cal.dates[start],
        end_date=cal.dates[end],
        total_days=end - start + 1,
        pto_used=cal.workdays_between(start, end),
        holidays=tuple(cal.holidays_between(start, end)),
        weekends=tuple(cal.weekends_between(start, end)),
    )


def generate_candidates(cal: YearCalendar, max_pto_per_candidate: int) -> list[VacationCandidate]:
    """Enumerate every bridge run of *cal* spending at most *max_pto_per_candidate*.

    For each start day the run walks forward; weekends and holidays are
    free, each workday costs one PTO day and the first unaffordable workday
    ends the run.  The run is emitted after every step.  The PTO count of
    each candidate is recomputed from the calendar; a run whose recount
    disagrees with the walking counter is dropped.

    Returned candidates have placeholder ids (``-1``); see
    :func:`deduplicate_candidates`.
    """
    cap = max(0, max_pto_per_candidate)
    is_off = cal.is_off
    num_days = cal.num_days
    candidates: list[VacationCandidate] = []
    rejected = 0

    for start in range(num_days):
        pto = 0
        for end in range(start, num_days):
            if not is_off[end]:
                if pto >= cap:
                    break
                pto += 1

            if cal.workdays_between(start, end) != pto:
                rejected += 1
                continue
            candidates.append(_make_candidate(cal, start, end))

    if rejected:
        logger.debug("Dropped %d runs whose PTO recount disagreed", rejected)
    logger.debug(
        "Generated %d raw candidates for %d (cap %d PTO each)", len(candidates), cal.year, cap
    )
    return candidates


def deduplicate_candidates(candidates: Iterable[VacationCandidate]) -> list[VacationCandidate]:
    """Keep one candidate per ``(start, end)`` and number them.

    Among duplicates the longer one wins, then the cheaper one.  Ids follow
    first-seen order.
    """
    unique: dict[tuple[datetime.date, datetime.date], VacationCandidate] = {}
    for c in candidates:
        key = (c.start_date, c.end_date)
        existing = unique.get(key)
        if (
            existing is None
            or c.total_days > existing.total_days
            or (c.total_days == existing.total_days and c.pto_used < existing.pto_used)
        ):
            unique[key] = c

    result = [c._replace(id=i) for i, c in enumerate(unique.values())]
    logger.debug("Deduplicated to %d candidates", len(result))
    return result


def generate(
    year: int,
    holidays: Iterable[Holiday],
    max_pto_per_candidate: int,
) -> list[VacationCandidate]:
    """Classify *year*, generate its bridge candidates and deduplicate them."""
    cal = YearCalendar(year, holidays)
    return deduplicate_candidates(generate_candidates(cal, max_pto_per_candidate))
