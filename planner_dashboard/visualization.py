"""Plotly visualisation helpers for the planner dashboard.

Each function takes planner data (a state, stats or a derived frame) and
returns a ``plotly.graph_objects.Figure`` that Streamlit renders via
``st.plotly_chart``.  The calendar figure doubles as the source of the
exported PNG report.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

import numpy as np
import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .formatting import format_currency, month_title
from .models import PlannerState
from .stats import MonthlyStats, calendar_days, health_frame, leading_blanks, wealth_frame

WEEKDAYS = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
INCOME_COLOR = "#10b981"
EXPENSE_COLOR = "#f43f5e"
ACCENT_COLOR = "#4f46e5"


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_calendar_figure(
    state: PlannerState,
    year: int,
    month: int,
    stats: Optional[MonthlyStats] = None,
    today: Optional[date] = None,
) -> go.Figure:
    """Month grid coloured by the number of habits completed each day.

    Parameters
    ----------
    state : PlannerState
        Planner snapshot to visualise.
    year, month : int
        Month to draw; ``month`` is 1-12.
    stats : MonthlyStats, optional
        When given, the monthly summary is added to the title so the
        exported report is self-contained.
    today : datetime.date, optional
        Day to outline.

    Returns
    -------
    plotly.graph_objects.Figure
        Heatmap with one cell per day in a Sunday-first grid.
    """
    cells = calendar_days(state, year, month, today=today)
    offset = leading_blanks(year, month)
    weeks = (offset + len(cells) + 6) // 7

    z = np.full((weeks, 7), np.nan)
    text = np.full((weeks, 7), "", dtype=object)
    hover = np.full((weeks, 7), "", dtype=object)
    for cell in cells:
        row, col = divmod(offset + cell.day - 1, 7)
        z[row, col] = cell.done_count
        dots = "●" * min(cell.done_count, 6)
        text[row, col] = f"<b>{cell.day}</b><br>{dots}" if dots else f"<b>{cell.day}</b>"
        hover[row, col] = f"{cell.iso_date}: {cell.done_count} habit(s) done"

    zmax = max(len(state.habits), 1)
    fig = go.Figure(
        go.Heatmap(
            z=z,
            x=WEEKDAYS,
            y=[f"Week {i + 1}" for i in range(weeks)],
            text=text,
            texttemplate="%{text}",
            customdata=hover,
            hovertemplate="%{customdata}<extra></extra>",
            colorscale=[[0.0, "#f8fafc"], [1.0, ACCENT_COLOR]],
            zmin=0,
            zmax=zmax,
            xgap=3,
            ygap=3,
            showscale=False,
        )
    )

    for cell in cells:
        if cell.is_today:
            row, col = divmod(offset + cell.day - 1, 7)
            fig.add_shape(
                type="rect",
                x0=col - 0.5, x1=col + 0.5,
                y0=row - 0.5, y1=row + 0.5,
                line=dict(color=ACCENT_COLOR, width=3),
            )

    title = month_title(year, month)
    if stats is not None:
        title += (
            f"<br><sup>Habits {stats.habit_completion}% · Income {format_currency(stats.income)}"
            f" · Expense {format_currency(stats.expense)} · Net {format_currency(stats.net)}"
            f" · Sleep {stats.avg_sleep}h · Steps {stats.avg_steps:,}</sup>"
        )
    fig.update_layout(
        title=title,
        xaxis=dict(side="top", fixedrange=True),
        yaxis=dict(autorange="reversed", showticklabels=False, fixedrange=True),
        plot_bgcolor="#ffffff",
        paper_bgcolor="#ffffff",
        height=120 + 90 * weeks,
        margin=dict(l=20, r=20, t=110, b=20),
    )
    return fig


def create_habit_progress_chart(state: PlannerState, year: int, month: int) -> go.Figure:
    """Horizontal bar of completed days per habit within the month."""
    if not state.habits:
        return _empty_figure("No habits added yet")
    prefix = f"{year:04d}-{month:02d}-"
    df = pd.DataFrame(
        {
            "Habit": [habit.name for habit in state.habits],
            "Category": [habit.category for habit in state.habits],
            "Days": [sum(1 for d in habit.completed_days if d.startswith(prefix)) for habit in state.habits],
        }
    )
    fig = px.bar(df, x="Days", y="Habit", color="Category", orientation="h")
    fig.update_layout(
        title=f"Habit completions in {month_title(year, month)}",
        xaxis_title="Days completed",
        yaxis_title="",
    )
    return fig


def create_cash_flow_chart(state: PlannerState) -> go.Figure:
    """Monthly income vs expense bars across the whole ledger."""
    df = wealth_frame(state.wealth)
    if df.empty:
        return _empty_figure("No entries logged yet")
    df["Period"] = df["Year"].astype(str) + "-" + df["Month"].astype(str).str.zfill(2)
    grouped = df.groupby(["Period", "Type"])["Amount"].sum().reset_index()
    fig = px.bar(
        grouped,
        x="Period",
        y="Amount",
        color="Type",
        barmode="group",
        color_discrete_map={"income": INCOME_COLOR, "expense": EXPENSE_COLOR},
    )
    fig.update_layout(title="Cash flow by month", xaxis_title="Month", yaxis_title="Amount ($)")
    return fig


def create_category_pie_chart(state: PlannerState, year: int, month: int) -> go.Figure:
    """Share of the month's expenses by category."""
    df = wealth_frame(state.wealth)
    if not df.empty:
        df = df[(df["Year"] == year) & (df["Month"] == month) & (df["Type"] == "expense")]
    if df.empty:
        return _empty_figure("No expenses this month")
    series = df.groupby("Category")["Amount"].sum().reset_index()
    fig = px.pie(series, names="Category", values="Amount")
    fig.update_layout(title="Expenses by category")
    return fig


def create_health_trend_chart(state: PlannerState, metric: str = "sleepHours") -> go.Figure:
    """Line chart of one health metric over all logged days."""
    df = health_frame(state.health)
    if df.empty or df[metric].isna().all():
        return _empty_figure("No health data logged yet")
    df = df.dropna(subset=[metric]).sort_values("Date")
    df[metric] = pd.to_numeric(df[metric])
    fig = px.line(df, x="Date", y=metric, markers=True)
    fig.update_layout(title=f"{metric} over time", xaxis_title="Date", yaxis_title=metric)
    return fig
