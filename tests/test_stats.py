"""Unit tests for planner_dashboard.stats."""

from __future__ import annotations

from datetime import date

import pytest

from planner_dashboard import stats
from planner_dashboard.models import Habit, HealthMetric, PlannerState, WealthEntry, seed_state


def _entry(entry_id, when, entry_type, amount, description="x", category="General"):
    return WealthEntry(id=entry_id, date=when, type=entry_type, amount=amount,
                       description=description, category=category)


def test_zero_habits_gives_zero_completion():
    result = stats.compute_stats(PlannerState(), 2024, 6)
    assert result.habit_completion == 0
    assert result.income == 0 and result.expense == 0 and result.net == 0
    assert result.avg_sleep == 0 and result.avg_steps == 0


def test_seed_state_completion_scenario():
    state = seed_state()
    assert stats.compute_stats(state, 2024, 6).habit_completion == 0

    habits = tuple(
        Habit(id=h.id, name=h.name, completed_days=("2024-06-10",), category=h.category)
        for h in state.habits
    )
    state = PlannerState(habits=habits)
    # 2 of 60 slots in a 30-day month
    assert stats.compute_stats(state, 2024, 6).habit_completion == 3


def test_completion_ignores_other_months():
    habit = Habit(id="1", name="Run", completed_days=("2024-05-31", "2024-06-01", "2025-06-02"))
    result = stats.compute_stats(PlannerState(habits=(habit,)), 2024, 6)
    assert result.habit_completion == 3  # 1 / 30


def test_wealth_scenario_income_expense_net():
    state = PlannerState(wealth=(
        _entry("b", "2024-06-05T10:00:00+00:00", "expense", 200, "Rent"),
        _entry("a", "2024-06-01T10:00:00+00:00", "income", 1000, "Salary"),
        _entry("c", "2024-05-30T10:00:00+00:00", "income", 999, "Old"),
    ))
    result = stats.compute_stats(state, 2024, 6)
    assert result.income == 1000
    assert result.expense == 200
    assert result.net == 800


def test_health_scenario_missing_steps_count_as_zero():
    state = PlannerState(health=(
        HealthMetric(date="2024-06-01", sleep_hours=7, steps=10000),
        HealthMetric(date="2024-06-02", sleep_hours=8),
        HealthMetric(date="2024-07-01", sleep_hours=2, steps=500),
    ))
    result = stats.compute_stats(state, 2024, 6)
    assert result.avg_sleep == 7.5
    assert result.avg_steps == 5000


def test_avg_sleep_rounds_to_one_decimal():
    state = PlannerState(health=(
        HealthMetric(date="2024-06-01", sleep_hours=7),
        HealthMetric(date="2024-06-02", sleep_hours=7.5),
        HealthMetric(date="2024-06-03", sleep_hours=7.5),
    ))
    assert stats.compute_stats(state, 2024, 6).avg_sleep == 7.3


@pytest.mark.parametrize(
    "year, month, expected",
    [(2024, 2, 29), (2023, 2, 28), (1900, 2, 28), (2000, 2, 29), (2024, 4, 30), (2024, 12, 31)],
)
def test_days_in_month(year, month, expected):
    assert stats.days_in_month(year, month) == expected


def test_round_half_up():
    assert stats.round_half_up(2.5) == 3
    assert stats.round_half_up(0.25, 1) == 0.3


def test_leading_blanks_sunday_first():
    assert stats.leading_blanks(2024, 9) == 0  # 1 Sep 2024 is a Sunday
    assert stats.leading_blanks(2024, 6) == 6  # 1 Jun 2024 is a Saturday


def test_daily_habit_rate():
    state = PlannerState(habits=(
        Habit(id="1", name="A", completed_days=("2024-06-15",)),
        Habit(id="2", name="B"),
    ))
    assert stats.daily_habit_rate(state, date(2024, 6, 15)) == 50
    assert stats.daily_habit_rate(PlannerState(), date(2024, 6, 15)) == 0


def test_month_net_flow_respects_year():
    state = PlannerState(wealth=(
        _entry("a", "2024-06-01T10:00:00+00:00", "income", 100),
        _entry("b", "2024-06-02T10:00:00+00:00", "expense", 30),
        _entry("c", "2023-06-02T10:00:00+00:00", "expense", 500),
    ))
    assert stats.month_net_flow(state, 2024, 6) == 70
    assert stats.month_net_flow(PlannerState(), 2024, 6) == 0


def test_calendar_days_counts_done_habits():
    state = PlannerState(habits=(
        Habit(id="1", name="A", completed_days=("2024-02-29",)),
        Habit(id="2", name="B", completed_days=("2024-02-29", "2024-02-01")),
    ))
    cells = stats.calendar_days(state, 2024, 2, today=date(2024, 2, 29))
    assert len(cells) == 29
    assert cells[0].done_count == 1
    assert cells[-1].done_count == 2
    assert cells[-1].is_today and not cells[0].is_today


def test_recent_entries_and_health_lookup():
    state = PlannerState(
        wealth=tuple(_entry(str(i), "2024-06-01T10:00:00+00:00", "income", i + 1) for i in range(6)),
        health=(HealthMetric(date="2024-06-01", steps=500),),
    )
    assert [w.id for w in stats.recent_entries(state)] == ["0", "1", "2", "3"]
    assert stats.health_for_day(state, "2024-06-01").steps == 500
    assert stats.health_for_day(state, "2024-06-02") is None


def test_stats_frame_has_one_row():
    frame = stats.stats_frame(stats.compute_stats(seed_state(), 2024, 6))
    assert len(frame) == 1
    assert list(frame.columns) == ["income", "expense", "net", "habit_completion", "avg_sleep", "avg_steps"]
