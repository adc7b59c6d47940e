"""Bridge Planner

Pick the best set of vacations for a year: spend a PTO budget on the
workdays between weekends and holidays so that the chosen stretches add
up to as many days off as possible.

Pipeline:
  1. Classify every day of the year (``calendar_days``)
  2. Enumerate bridge candidates from every start day (``candidates``)
  3. Sort them by end date and link predecessors (``indexing``)
  4. Budgeted weighted interval scheduling over the candidates
  5. Assemble the chosen, time-ordered plan with its real totals
"""

from __future__ import annotations

import calendar
import datetime
import logging
from collections.abc import Iterable, Sequence
from typing import NamedTuple

from bridgeplan.calendar_days import Holiday, YearCalendar
from bridgeplan.candidates import (
    VacationCandidate,
    deduplicate_candidates,
    default_pto_cap,
    generate_candidates,
)
from bridgeplan.config import PlannerSettings
from bridgeplan.indexing import index_candidates

logger = logging.getLogger(__name__)

MIN_DESIRED_LENGTH = PlannerSettings().min_desired_length

# ---------------------------------------------------------------------------
# Data types
# ---------------------------------------------------------------------------


class PlannerLimitError(ValueError):
    """Raised when a request would build an oversized DP table."""


class Selection(NamedTuple):
    """Raw selector output.

    ``adjusted_value`` is the objective the DP maximised; the ``actual_*``
    fields are the real sums over the chosen candidates.
    """

    chosen_ids: tuple[int, ...]
    adjusted_value: int
    actual_total_days: int
    actual_pto_used: int


class VacationPlan(NamedTuple):
    """The chosen vacations for a year, in date order."""

    year: int
    pto_budget: int
    vacations: list[VacationCandidate]
    total_days_off: int
    total_pto_used: int
    has_short_vacations: bool

    @property
    def efficiency(self) -> float | None:
        """Days off per PTO day spent."""
        if self.total_pto_used == 0:
            return None
        return self.total_days_off / self.total_pto_used

    @property
    def pto_dates(self) -> list[datetime.date]:
        return [d for v in self.vacations for d in v.pto_dates()]


# ---------------------------------------------------------------------------
# Selector
# ---------------------------------------------------------------------------


def adjusted_value(
    candidate: VacationCandidate, min_desired_length: int = MIN_DESIRED_LENGTH
) -> int:
    """Objective weight of *candidate*: its length, or zero if it is too short.

    Short candidates stay selectable; they just add nothing to the score.
    """
    if candidate.total_days >= min_desired_length:
        return candidate.total_days
    return 0


def select_vacations(
    candidates: Sequence[VacationCandidate],
    total_budget: int,
    min_desired_length: int = MIN_DESIRED_LENGTH,
) -> Selection:
    """Choose non-overlapping candidates maximising adjusted days off.

    *candidates* must come from :func:`~bridgeplan.indexing.index_candidates`
    (sorted by end date, predecessors filled in).

    ``best[i][p]`` is the best adjusted value using the first *i* candidates
    with at most *p* PTO days::

        best[i][p] = max(best[i-1][p],
                         w(c_i) + best[pred(i)+1][p - cost(c_i)])   if p >= cost(c_i)

    Ties keep the candidate out.  ``take[i][p]`` records which branch won so
    the chosen set can be recovered by walking back from the answer cell.
    """
    n = len(candidates)
    if n == 0 or total_budget < 0:
        return Selection((), 0, 0, 0)

    width = total_budget + 1
    logger.debug("Selecting from %d candidates with budget %d (%d cells)", n, total_budget, n * width)

    best: list[list[int]] = [[0] * width]
    take: list[bytearray] = [bytearray(width)]

    for c in candidates:
        cost = c.pto_used
        weight = adjusted_value(c, min_desired_length)
        prev_row = best[-1]
        base_row = best[c.predecessor + 1] if c.predecessor is not None else best[0]

        row = prev_row[:]
        took = bytearray(width)
        for p in range(cost, width):
            v = weight + base_row[p - cost]
            if v > row[p]:
                row[p] = v
                took[p] = 1

        best.append(row)
        take.append(took)

    # Cheapest budget reaching the top value
    final_row = best[n]
    best_p = 0
    for p in range(width):
        if final_row[p] > final_row[best_p]:
            best_p = p

    # Backtrack
    chosen: list[VacationCandidate] = []
    i, p = n, best_p
    while i > 0:
        if take[i][p]:
            c = candidates[i - 1]
            chosen.append(c)
            p -= c.pto_used
            i = c.predecessor + 1 if c.predecessor is not None else 0
        else:
            i -= 1
    chosen.reverse()

    return Selection(
        chosen_ids=tuple(c.id for c in chosen),
        adjusted_value=final_row[best_p],
        actual_total_days=sum(c.total_days for c in chosen),
        actual_pto_used=sum(c.pto_used for c in chosen),
    )


# ---------------------------------------------------------------------------
# Assembler
# ---------------------------------------------------------------------------


def assemble_plan(
    year: int,
    pto_budget: int,
    candidates: Iterable[VacationCandidate],
    selection: Selection,
    min_desired_length: int = MIN_DESIRED_LENGTH,
) -> VacationPlan:
    """Turn a :class:`Selection` into a date-ordered :class:`VacationPlan`."""
    by_id = {c.id: c for c in candidates}
    vacations = sorted(
        (by_id[i] for i in selection.chosen_ids if i in by_id),
        key=lambda c: c.start_date,
    )
    return VacationPlan(
        year=year,
        pto_budget=pto_budget,
        vacations=vacations,
        total_days_off=sum(v.total_days for v in vacations),
        total_pto_used=sum(v.pto_used for v in vacations),
        has_short_vacations=any(v.total_days < min_desired_length for v in vacations),
    )


def short_vacation_advice(
    plan: VacationPlan, min_desired_length: int = MIN_DESIRED_LENGTH
) -> str | None:
    """Advisory text for plans that still contain short breaks."""
    if not plan.has_short_vacations:
        return None
    return (
        f"Some breaks are shorter than {min_desired_length} days. They were kept "
        "because no longer option fit the remaining budget."
    )


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------


class BridgePlanner:
    """Runs the full pipeline for one year, holiday set and PTO budget.

    The planner refuses requests whose DP table would exceed the bounds in
    :class:`~bridgeplan.config.PlannerSettings`.  A negative budget is not
    an error; it simply yields an empty plan.
    """

    def __init__(
        self,
        year: int,
        pto_budget: int,
        holidays: Iterable[Holiday],
        settings: PlannerSettings | None = None,
    ):
        self.settings = settings or PlannerSettings()
        if pto_budget > self.settings.max_budget:
            raise PlannerLimitError(
                f"PTO budget {pto_budget} exceeds the limit of {self.settings.max_budget} days."
            )
        self.year = year
        self.pto_budget = pto_budget
        self.calendar = YearCalendar(year, holidays)
        self.pto_cap = default_pto_cap(pto_budget, self.settings)

    def candidates(self) -> list[VacationCandidate]:
        """Generated, deduplicated and indexed candidates for the year."""
        raw = generate_candidates(self.calendar, self.pto_cap)
        indexed = index_candidates(deduplicate_candidates(raw))
        if len(indexed) > self.settings.max_candidates:
            raise PlannerLimitError(
                f"{len(indexed)} candidates exceed the limit of {self.settings.max_candidates}."
            )
        return indexed

    def optimize(self) -> VacationPlan:
        min_len = self.settings.min_desired_length
        if self.pto_budget < 0:
            return assemble_plan(self.year, self.pto_budget, [], Selection((), 0, 0, 0), min_len)

        candidates = self.candidates()
        selection = select_vacations(candidates, self.pto_budget, min_len)
        plan = assemble_plan(self.year, self.pto_budget, candidates, selection, min_len)
        logger.debug(
            "Chose %d vacations: %d days off for %d PTO",
            len(plan.vacations),
            plan.total_days_off,
            plan.total_pto_used,
        )
        return plan


def plan_vacations(
    year: int,
    holidays: Iterable[Holiday],
    pto_budget: int,
    settings: PlannerSettings | None = None,
) -> VacationPlan:
    """Shortcut for ``BridgePlanner(year, pto_budget, holidays, settings).optimize()``."""
    return BridgePlanner(year, pto_budget, holidays, settings).optimize()


# ---------------------------------------------------------------------------
# Output formatting
# ---------------------------------------------------------------------------


def _date_range_label(start: datetime.date, end: datetime.date) -> str:
    if start == end:
        return start.strftime("%a, %b %d")
    return f"{start.strftime('%a, %b %d')} -> {end.strftime('%a, %b %d')}"


def format_plan(plan: VacationPlan, settings: PlannerSettings | None = None) -> str:
    """Return a human-readable summary of a vacation plan."""
    settings = settings or PlannerSettings()
    lines: list[str] = []
    w = 64

    lines.append("")
    lines.append("=" * w)
    lines.append(f"  VACATION PLAN {plan.year}")
    lines.append("=" * w)
    lines.append(f"  PTO days used: {plan.total_pto_used} / {plan.pto_budget}")
    lines.append(f"  Total days off: {plan.total_days_off}")
    if plan.efficiency is not None:
        lines.append(f"  Efficiency: {plan.efficiency:.1f}x (days off per PTO day)")
    lines.append("")

    if not plan.vacations:
        lines.append("  No vacation fits the budget.")
        return "\n".join(lines)

    lines.append("  Vacations:")
    lines.append("  " + "-" * (w - 4))

    for i, vac in enumerate(plan.vacations, 1):
        n = vac.total_days
        day_word = "day" if n == 1 else "days"
        lines.append(f"  {i:>2}. {_date_range_label(vac.start_date, vac.end_date)}  ({n} {day_word})")

        parts: list[str] = []
        if vac.pto_used:
            parts.append(f"{vac.pto_used} PTO")
        if vac.holidays:
            parts.append(f"{len(vac.holidays)} holiday{'s' if len(vac.holidays) > 1 else ''}")
        if vac.weekends:
            parts.append(f"{len(vac.weekends)} weekend")
        lines.append(f"      {' + '.join(parts)}")
        for h in vac.holidays:
            lines.append(f"      * {h.date.strftime('%a, %b %d')}  {h.name}")
        lines.append("")

    pto_dates = plan.pto_dates
    if pto_dates:
        lines.append("  Days to request off:")
        for d in pto_dates:
            lines.append(f"    -> {d.strftime('%A, %B %d, %Y')}")

    advice = short_vacation_advice(plan, settings.min_desired_length)
    if advice:
        lines.append("")
        lines.append(f"  Note: {advice}")

    return "\n".join(lines)


def format_calendar_view(plan: VacationPlan, cal: YearCalendar) -> str:
    """Return a month-by-month calendar of the months a vacation touches."""
    pto_set = set(plan.pto_dates)
    in_vacation: set[datetime.date] = set()
    for vac in plan.vacations:
        for i in range(vac.total_days):
            in_vacation.add(vac.start_date + datetime.timedelta(days=i))

    active_months = {d.month for d in in_vacation}
    if not active_months:
        return ""

    year = plan.year
    lines: list[str] = [
        "",
        f"  Calendar View {year}",
        "  Legend: P=PTO  H=Holiday  W=Weekend (inside a vacation)",
        "",
    ]

    month_cal = calendar.Calendar(firstweekday=0)

    for month in sorted(active_months):
        lines.append(f"  {calendar.month_name[month]} {year}")
        lines.append("  Mo  Tu  We  Th  Fr  Sa  Su")

        row = ""
        for day_num, weekday in month_cal.itermonthdays2(year, month):
            if day_num == 0:
                row += "    "
            else:
                d = datetime.date(year, month, day_num)
                offset = cal.offset(d)
                if d in pto_set:
                    cell = f" {day_num:>2}P"
                elif d in in_vacation and cal.is_holiday[offset]:
                    cell = f" {day_num:>2}H"
                elif d in in_vacation:
                    cell = f" {day_num:>2}W"
                else:
                    cell = f"  {day_num:>2}"
                row += cell

            if weekday == 6:
                lines.append(row)
                row = ""

        if row.strip():
            lines.append(row)
        lines.append("")

    return "\n".join(lines)


def candidate_to_dict(c: VacationCandidate) -> dict[str, object]:
    return {
        "start_date": c.start_date.isoformat(),
        "end_date": c.end_date.isoformat(),
        "total_days": c.total_days,
        "pto_used": c.pto_used,
        "pto_dates": [d.isoformat() for d in c.pto_dates()],
        "holidays": [{"date": h.date.isoformat(), "name": h.name} for h in c.holidays],
        "weekends": [d.isoformat() for d in c.weekends],
    }


def plan_to_dict(plan: VacationPlan) -> dict[str, object]:
    """JSON-ready representation of *plan*."""
    return {
        "year": plan.year,
        "pto_budget": plan.pto_budget,
        "vacations": [candidate_to_dict(v) for v in plan.vacations],
        "summary": {
            "total_days_off": plan.total_days_off,
            "total_pto_used": plan.total_pto_used,
            "efficiency": round(plan.efficiency, 2) if plan.efficiency is not None else None,
            "has_short_vacations": plan.has_short_vacations,
        },
    }
