"""Derived planner statistics.

All functions here are read-only over a :class:`PlannerState`.  Monthly
aggregates filter pandas frames on their ``Year``/``Month`` columns.
"""

from __future__ import annotations

import calendar
from dataclasses import asdict, dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

import pandas as pd

from .models import EXPENSE, INCOME, DateLike, HealthMetric, PlannerState, WealthEntry, day_key, parse_day


@dataclass(frozen=True)
class MonthlyStats:
    income: float
    expense: float
    net: float
    habit_completion: int
    avg_sleep: float
    avg_steps: int


@dataclass(frozen=True)
class CalendarDay:
    day: int
    iso_date: str
    done_count: int
    is_today: bool


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like JavaScript's ``Math.round``/``toFixed`` for non-negative values."""
    quantum = Decimal(1).scaleb(-digits)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def leading_blanks(year: int, month: int) -> int:
    """Number of empty cells before day 1 in a Sunday-first calendar grid."""
    # calendar.weekday: Monday == 0
    return (calendar.weekday(year, month, 1) + 1) % 7


def wealth_frame(entries) -> pd.DataFrame:
    """Ledger entries as a DataFrame with ``Year``/``Month`` columns."""
    rows = []
    for entry in entries:
        stamp = entry.timestamp
        rows.append({
            'id': entry.id,
            'Date': stamp,
            'Year': stamp.year,
            'Month': stamp.month,
            'Type': entry.type,
            'Amount': float(entry.amount),
            'Description': entry.description,
            'Category': entry.category,
        })
    columns = ['id', 'Date', 'Year', 'Month', 'Type', 'Amount', 'Description', 'Category']
    return pd.DataFrame(rows, columns=columns)


def health_frame(records) -> pd.DataFrame:
    rows = []
    for record in records:
        day = parse_day(record.date)
        rows.append({
            'Date': day,
            'Year': day.year,
            'Month': day.month,
            'sleepHours': record.sleep_hours,
            'waterIntake': record.water_intake,
            'steps': record.steps,
            'weight': record.weight,
        })
    columns = ['Date', 'Year', 'Month', 'sleepHours', 'waterIntake', 'steps', 'weight']
    return pd.DataFrame(rows, columns=columns)


def _in_month(df: pd.DataFrame, year: int, month: int) -> pd.DataFrame:
    if df.empty:
        return df
    return df[(df['Year'] == year) & (df['Month'] == month)]


def compute_stats(state: PlannerState, year: int, month: int) -> MonthlyStats:
    """Monthly income/expense, habit completion rate and health averages."""
    month_wealth = _in_month(wealth_frame(state.wealth), year, month)
    income = float(month_wealth.loc[month_wealth['Type'] == INCOME, 'Amount'].sum())
    expense = float(month_wealth.loc[month_wealth['Type'] == EXPENSE, 'Amount'].sum())

    possible = len(state.habits) * days_in_month(year, month)
    completed = 0
    for habit in state.habits:
        for raw in habit.completed_days:
            day = parse_day(raw)
            if day.year == year and day.month == month:
                completed += 1
    habit_completion = int(round_half_up(completed / possible * 100)) if possible else 0

    # Missing fields count as zero in the mean
    month_health = _in_month(health_frame(state.health), year, month)
    if month_health.empty:
        avg_sleep, avg_steps = 0.0, 0
    else:
        sleep = pd.to_numeric(month_health['sleepHours'], errors='coerce').fillna(0.0)
        steps = pd.to_numeric(month_health['steps'], errors='coerce').fillna(0.0)
        avg_sleep = round_half_up(float(sleep.mean()), 1)
        avg_steps = int(round_half_up(float(steps.mean())))

    return MonthlyStats(
        income=income,
        expense=expense,
        net=income - expense,
        habit_completion=habit_completion,
        avg_sleep=avg_sleep,
        avg_steps=avg_steps,
    )


def stats_frame(stats: MonthlyStats) -> pd.DataFrame:
    return pd.DataFrame([asdict(stats)])


def daily_habit_rate(state: PlannerState, today: DateLike) -> float:
    """Percentage of habits done on ``today`` (unrounded)."""
    if not state.habits:
        return 0.0
    key = day_key(today)
    done = sum(1 for habit in state.habits if key in habit.completed_days)
    return done / len(state.habits) * 100


def month_net_flow(state: PlannerState, year: int, month: int) -> float:
    month_wealth = _in_month(wealth_frame(state.wealth), year, month)
    if month_wealth.empty:
        return 0.0
    signed = month_wealth['Amount'].where(month_wealth['Type'] == INCOME, -month_wealth['Amount'])
    return float(signed.sum())


def health_for_day(state: PlannerState, day: DateLike) -> Optional[HealthMetric]:
    key = day_key(day)
    return next((record for record in state.health if record.date == key), None)


def recent_entries(state: PlannerState, limit: int = 4) -> List[WealthEntry]:
    return list(state.wealth[:limit])


def calendar_days(state: PlannerState, year: int, month: int, today: Optional[date] = None) -> List[CalendarDay]:
    """One cell per day of the month with the number of habits completed."""
    today_key = day_key(today) if today is not None else None
    cells = []
    for day in range(1, days_in_month(year, month) + 1):
        iso = date(year, month, day).isoformat()
        done = sum(1 for habit in state.habits if iso in habit.completed_days)
        cells.append(CalendarDay(day=day, iso_date=iso, done_count=done, is_today=iso == today_key))
    return cells
