"""Bridge Planner.

Spend a PTO budget on the workdays between weekends and holidays so the
year holds as many contiguous days off as possible.
"""

from bridgeplan.calendar_days import DayInfo, DayKind, Holiday, YearCalendar, classify_year
from bridgeplan.candidates import VacationCandidate, generate
from bridgeplan.config import PlannerSettings
from bridgeplan.holidays import JsonHolidaySource
from bridgeplan.indexing import index_candidates
from bridgeplan.optimizer import (
    BridgePlanner,
    PlannerLimitError,
    Selection,
    VacationPlan,
    plan_vacations,
    select_vacations,
)

__all__ = [
    "BridgePlanner",
    "DayInfo",
    "DayKind",
    "Holiday",
    "JsonHolidaySource",
    "PlannerLimitError",
    "PlannerSettings",
    "Selection",
    "VacationCandidate",
    "VacationPlan",
    "YearCalendar",
    "classify_year",
    "generate",
    "index_candidates",
    "plan_vacations",
    "select_vacations",
]
