"""Order candidates by end date and link each to its latest compatible predecessor."""

from __future__ import annotations

import bisect
from collections.abc import Iterable

from bridgeplan.candidates import VacationCandidate


def index_candidates(candidates: Iterable[VacationCandidate]) -> list[VacationCandidate]:
    """Sort by end date and fill in ``predecessor``.

    ``predecessor`` of position *i* is the largest position *j < i* whose
    end date is strictly before the start of *i*, or ``None``.  Equal end
    dates are ordered by start date so the output is deterministic.
    """
    ordered = sorted(candidates, key=lambda c: (c.end_date, c.start_date))
    ends = [c.end_date.toordinal() for c in ordered]

    indexed: list[VacationCandidate] = []
    for c in ordered:
        # Everything left of the insertion point ends before c starts, and
        # since c.end >= c.start all of it sits left of c itself.
        j = bisect.bisect_left(ends, c.start_date.toordinal()) - 1
        indexed.append(c._replace(predecessor=j if j >= 0 else None))
    return indexed
