from __future__ import annotations

import datetime

import pytest

from bridgeplan.calendar_days import Holiday
from bridgeplan.candidates import VacationCandidate
from bridgeplan.config import PlannerSettings
from bridgeplan.indexing import index_candidates
from bridgeplan.optimizer import (
    BridgePlanner,
    PlannerLimitError,
    Selection,
    adjusted_value,
    assemble_plan,
    format_calendar_view,
    format_plan,
    plan_to_dict,
    plan_vacations,
    select_vacations,
    short_vacation_advice,
)

MID_WEEK = Holiday(datetime.date(2025, 3, 12), "Mid-week Day")  # a Wednesday


def _us_holidays_2025() -> list[Holiday]:
    return [
        Holiday(datetime.date(2025, 1, 1), "New Year's Day"),
        Holiday(datetime.date(2025, 1, 20), "Martin Luther King Jr. Day"),
        Holiday(datetime.date(2025, 2, 17), "Presidents' Day"),
        Holiday(datetime.date(2025, 5, 26), "Memorial Day"),
        Holiday(datetime.date(2025, 6, 19), "Juneteenth"),
        Holiday(datetime.date(2025, 7, 4), "Independence Day"),
        Holiday(datetime.date(2025, 9, 1), "Labor Day"),
        Holiday(datetime.date(2025, 11, 27), "Thanksgiving"),
        Holiday(datetime.date(2025, 12, 25), "Christmas Day"),
    ]


def _cand(cid: int, start: tuple[int, int], end: tuple[int, int], pto: int) -> VacationCandidate:
    s = datetime.date(2025, *start)
    e = datetime.date(2025, *end)
    return VacationCandidate(
        id=cid,
        start_date=s,
        end_date=e,
        total_days=(e - s).days + 1,
        pto_used=pto,
        holidays=(),
        weekends=(),
    )


def _chosen(candidates: list[VacationCandidate], budget: int) -> set[int]:
    return set(select_vacations(index_candidates(candidates), budget).chosen_ids)


def _assert_valid(plan, budget: int) -> None:
    assert plan.total_pto_used <= budget
    starts = [v.start_date for v in plan.vacations]
    assert starts == sorted(starts)
    for a, b in zip(plan.vacations, plan.vacations[1:]):
        assert a.end_date < b.start_date


class TestAdjustedValue:
    def test_long_candidate_keeps_length(self) -> None:
        assert adjusted_value(_cand(0, (1, 4), (1, 12), 5)) == 9

    def test_short_candidate_weighs_nothing(self) -> None:
        assert adjusted_value(_cand(0, (1, 4), (1, 6), 1)) == 0

    def test_threshold_is_configurable(self) -> None:
        short = _cand(0, (1, 4), (1, 6), 1)
        assert adjusted_value(short, min_desired_length=3) == 3


class TestSelector:
    def test_two_disjoint_eight_day_candidates(self) -> None:
        first = _cand(0, (1, 4), (1, 11), 5)
        second = _cand(1, (2, 1), (2, 8), 5)
        overlapping = _cand(2, (1, 10), (1, 18), 6)
        result = select_vacations(index_candidates([first, second, overlapping]), 10)
        assert set(result.chosen_ids) == {0, 1}
        assert result.actual_total_days == 16
        assert result.actual_pto_used == 10

    def test_long_bridge_beats_short_ones(self) -> None:
        short_a = _cand(0, (1, 3), (1, 4), 1)
        short_b = _cand(1, (1, 10), (1, 11), 1)
        long_one = _cand(2, (1, 17), (1, 20), 2)
        assert _chosen([short_a, short_b, long_one], 2) == {2}

    def test_short_bridges_only_count_as_zero(self) -> None:
        # Three 3-day breaks add up to more days, yet the 5-day one wins
        shorts = [_cand(i, (2, 1 + 7 * i), (2, 3 + 7 * i), 1) for i in range(3)]
        long_one = _cand(3, (3, 1), (3, 5), 3)
        result = select_vacations(index_candidates([*shorts, long_one]), 3)
        assert result.chosen_ids == (3,)
        assert result.adjusted_value == 5

    def test_only_short_candidates_gives_empty_selection(self) -> None:
        shorts = [_cand(i, (4, 1 + 7 * i), (4, 2 + 7 * i), 1) for i in range(3)]
        assert _chosen(shorts, 10) == set()

    def test_zero_cost_candidate_selectable_with_zero_budget(self) -> None:
        free = _cand(0, (12, 25), (12, 28), 0)
        paid = _cand(1, (6, 1), (6, 9), 3)
        result = select_vacations(index_candidates([free, paid]), 0)
        assert result.chosen_ids == (0,)
        assert result.actual_pto_used == 0

    def test_no_candidates(self) -> None:
        assert select_vacations([], 10) == Selection((), 0, 0, 0)

    def test_negative_budget(self) -> None:
        free = _cand(0, (12, 25), (12, 28), 0)
        assert select_vacations(index_candidates([free]), -1) == Selection((), 0, 0, 0)

    def test_unaffordable_candidate_skipped(self) -> None:
        big = _cand(0, (7, 1), (7, 20), 14)
        small = _cand(1, (8, 1), (8, 5), 3)
        assert _chosen([big, small], 5) == {1}

    def test_tie_keeps_earlier_candidate(self) -> None:
        early = _cand(0, (5, 1), (5, 5), 2)
        late = _cand(1, (5, 3), (5, 7), 2)
        assert select_vacations(index_candidates([late, early]), 2).chosen_ids == (0,)

    def test_cheapest_budget_reaching_best_value(self) -> None:
        only = _cand(0, (9, 1), (9, 6), 2)
        result = select_vacations(index_candidates([only]), 8)
        assert result.actual_pto_used == 2


class TestAssembler:
    def test_sorted_by_start_and_actual_totals(self) -> None:
        cands = [_cand(0, (3, 1), (3, 5), 3), _cand(1, (1, 1), (1, 6), 2)]
        plan = assemble_plan(2025, 10, cands, Selection((0, 1), 11, 11, 5))
        assert [v.id for v in plan.vacations] == [1, 0]
        assert plan.total_days_off == 11
        assert plan.total_pto_used == 5
        assert plan.has_short_vacations is False

    def test_short_vacation_flag_and_advice(self) -> None:
        cands = [_cand(0, (3, 1), (3, 2), 0)]
        plan = assemble_plan(2025, 0, cands, Selection((0,), 0, 2, 0))
        assert plan.has_short_vacations is True
        advice = short_vacation_advice(plan)
        assert advice is not None
        assert "shorter than 4" in advice

    def test_efficiency(self) -> None:
        cands = [_cand(0, (1, 1), (1, 8), 2)]
        plan = assemble_plan(2025, 5, cands, Selection((0,), 8, 8, 2))
        assert plan.efficiency == pytest.approx(4.0)
        empty = assemble_plan(2025, 5, cands, Selection((), 0, 0, 0))
        assert empty.efficiency is None


class TestScenarios:
    def test_mid_week_holiday_two_days(self) -> None:
        plan = plan_vacations(2025, [MID_WEEK], 2)
        assert plan.total_days_off == 5
        assert plan.total_pto_used == 2
        assert len(plan.vacations) == 1
        vac = plan.vacations[0]
        assert vac.start_date <= MID_WEEK.date <= vac.end_date
        assert vac.holiday_names == ["Mid-week Day"]

    def test_mid_week_holiday_weekend_to_weekend(self) -> None:
        plan = plan_vacations(2025, [MID_WEEK], 4)
        assert plan.total_days_off == 9
        assert plan.total_pto_used == 4

    def test_zero_budget_without_free_bridges(self) -> None:
        plan = plan_vacations(2025, [MID_WEEK], 0)
        assert plan.vacations == []
        assert plan.total_pto_used == 0

    def test_zero_budget_uses_free_long_weekend(self) -> None:
        holidays = [
            Holiday(datetime.date(2025, 12, 25), "Christmas Day"),
            Holiday(datetime.date(2025, 12, 26), "Boxing Day"),
        ]
        plan = plan_vacations(2025, holidays, 0)
        assert len(plan.vacations) == 1
        vac = plan.vacations[0]
        assert vac.start_date == datetime.date(2025, 12, 25)
        assert vac.end_date == datetime.date(2025, 12, 28)
        assert plan.total_days_off == 4
        assert plan.total_pto_used == 0

    def test_negative_budget_gives_empty_plan(self) -> None:
        plan = plan_vacations(2025, _us_holidays_2025(), -3)
        assert plan.vacations == []
        assert plan.total_days_off == 0


class TestProperties:
    @pytest.mark.parametrize("budget", [1, 5, 10, 15])
    def test_plans_are_valid(self, budget: int) -> None:
        plan = plan_vacations(2025, _us_holidays_2025(), budget)
        _assert_valid(plan, budget)

    def test_bridging_beats_pto_spent(self) -> None:
        plan = plan_vacations(2025, _us_holidays_2025(), 10)
        assert plan.total_days_off > 10

    def test_more_budget_never_hurts(self) -> None:
        totals = [
            plan_vacations(2025, _us_holidays_2025(), b).total_days_off
            for b in (0, 1, 2, 3, 5, 8, 12)
        ]
        assert totals == sorted(totals)

    def test_deterministic(self) -> None:
        first = plan_vacations(2025, _us_holidays_2025(), 8)
        second = plan_vacations(2025, list(reversed(_us_holidays_2025())), 8)
        assert first == second

    def test_reported_totals_are_actual(self) -> None:
        plan = plan_vacations(2025, _us_holidays_2025(), 12)
        assert plan.total_days_off == sum(v.total_days for v in plan.vacations)
        assert plan.total_pto_used == sum(v.pto_used for v in plan.vacations)
        assert len(plan.pto_dates) == plan.total_pto_used


class TestPlannerLimits:
    def test_budget_over_limit(self) -> None:
        with pytest.raises(PlannerLimitError, match="exceeds the limit"):
            BridgePlanner(2025, 400, _us_holidays_2025())

    def test_candidate_count_over_limit(self) -> None:
        planner = BridgePlanner(
            2025, 5, _us_holidays_2025(), PlannerSettings(max_candidates=10)
        )
        with pytest.raises(PlannerLimitError, match="candidates exceed"):
            planner.optimize()

    def test_custom_cap_limits_each_vacation(self) -> None:
        planner = BridgePlanner(
            2025, 10, _us_holidays_2025(), PlannerSettings(max_pto_per_candidate=2)
        )
        assert planner.pto_cap == 2
        plan = planner.optimize()
        assert all(v.pto_used <= 2 for v in plan.vacations)


class TestFormatting:
    def test_format_plan(self) -> None:
        plan = plan_vacations(2025, _us_holidays_2025(), 10)
        output = format_plan(plan)
        assert "VACATION PLAN 2025" in output
        assert "Days to request off" in output
        assert "PTO days used:" in output

    def test_format_empty_plan(self) -> None:
        plan = plan_vacations(2025, [], 0)
        assert "No vacation fits the budget." in format_plan(plan)

    def test_format_calendar_view(self) -> None:
        planner = BridgePlanner(2025, 4, [MID_WEEK])
        plan = planner.optimize()
        output = format_calendar_view(plan, planner.calendar)
        assert "Calendar View 2025" in output
        assert "March 2025" in output
        assert "12H" in output

    def test_calendar_view_marks_only_holidays_in_a_vacation(self) -> None:
        late_march = Holiday(datetime.date(2025, 3, 27), "Late March Day")  # a Thursday
        planner = BridgePlanner(2025, 1, [MID_WEEK, late_march])
        plan = planner.optimize()
        assert [(v.start_date.day, v.end_date.day) for v in plan.vacations] == [(27, 30)]
        output = format_calendar_view(plan, planner.calendar)
        assert " 27H" in output
        assert " 28P" in output
        assert "12H" not in output

    def test_calendar_view_empty_plan(self) -> None:
        planner = BridgePlanner(2025, 0, [])
        assert format_calendar_view(planner.optimize(), planner.calendar) == ""

    def test_plan_to_dict(self) -> None:
        plan = plan_vacations(2025, [MID_WEEK], 2)
        data = plan_to_dict(plan)
        assert data["year"] == 2025
        assert data["summary"]["total_days_off"] == 5
        vac = data["vacations"][0]
        assert vac["holidays"] == [{"date": "2025-03-12", "name": "Mid-week Day"}]
        assert len(vac["pto_dates"]) == 2
