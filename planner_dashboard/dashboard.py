"""Streamlit app for the Zenith planner.

The planner store, view selector and form state live in
``st.session_state`` so they survive Streamlit's script reruns.  Every
button or slider callback goes through the store, which persists the
full state after each change.

To run the dashboard from the command line::

    streamlit run planner_dashboard/Home.py
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Optional

import streamlit as st
from streamlit.errors import StreamlitAPIException

from . import visualization as viz
from .config import configure_logging, ensure_data_directories
from .export import ReportExporter
from .formatting import escape_dollar_for_markdown, format_currency, format_signed_entry, long_date, month_title
from .forms import HEALTH_LIMITS, SLIDER_FIELDS, HabitForm, WealthForm, clamp_health_value
from .persistence import PersistenceAdapter
from .stats import compute_stats, daily_habit_rate, health_for_day, month_net_flow, recent_entries, stats_frame
from .store import PlannerStore
from .views import ViewSelector, ViewType

logger = logging.getLogger(__name__)

STORE_KEY = 'planner_store'
VIEW_KEY = 'view_selector'
HABIT_FORM_KEY = 'habit_form'
WEALTH_FORM_KEY = 'wealth_form'
CALENDAR_KEY = 'calendar_month'
EXPORT_KEY = 'export_result'
EXPORT_FAILED_KEY = 'export_failed'
SHOW_HABIT_FORM_KEY = 'show_habit_form'
NAV_KEY = 'nav_view'
EXPORTER_KEY = 'report_exporter'


def _rerun() -> None:
    rerun_fn = getattr(st, 'rerun', None) or getattr(st, 'experimental_rerun', None)
    if rerun_fn:
        rerun_fn()


def select_view(view: ViewType) -> None:
    """Button callback: switch view before the next script run starts."""
    st.session_state[VIEW_KEY].select(view)
    st.session_state[NAV_KEY] = st.session_state[VIEW_KEY].active


def ensure_session_state(adapter: Optional[PersistenceAdapter] = None) -> PlannerStore:
    """Create the per-session store, selector and forms on first run."""
    state = st.session_state
    if STORE_KEY not in state:
        state[STORE_KEY] = PlannerStore(adapter or PersistenceAdapter())
        logger.info("Planner session started with %d habits", len(state[STORE_KEY].state.habits))
    if VIEW_KEY not in state:
        state[VIEW_KEY] = ViewSelector()
    if NAV_KEY not in state:
        state[NAV_KEY] = state[VIEW_KEY].active
    if HABIT_FORM_KEY not in state:
        state[HABIT_FORM_KEY] = HabitForm()
    if WEALTH_FORM_KEY not in state:
        state[WEALTH_FORM_KEY] = WealthForm()
    if CALENDAR_KEY not in state:
        today = date.today()
        state[CALENDAR_KEY] = (today.year, today.month)
    if EXPORTER_KEY not in state:
        state[EXPORTER_KEY] = ReportExporter()
    return state[STORE_KEY]


def shift_month(year: int, month: int, delta: int) -> tuple:
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


class PlannerUI:
    """Renders the five planner views."""
    _PAGE_CONFIGURED = False

    def __init__(self, store: PlannerStore, today: Optional[date] = None):
        self.store = store
        self.today = today or date.today()

    def setup_page_config(self) -> None:
        if PlannerUI._PAGE_CONFIGURED:
            return
        try:
            st.set_page_config(
                page_title="Zenith Planner",
                page_icon="⚡",
                layout="wide",
                initial_sidebar_state="expanded",
            )
        except StreamlitAPIException:
            pass
        finally:
            PlannerUI._PAGE_CONFIGURED = True

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------
    def render_sidebar(self) -> ViewType:
        selector: ViewSelector = st.session_state[VIEW_KEY]
        st.sidebar.title("⚡ Zenith")
        choice = st.sidebar.radio(
            "Navigate",
            options=ViewSelector.options(),
            format_func=lambda view: view.label,
            key=NAV_KEY,
        )
        if choice != selector.active:
            selector.select(choice)
        st.sidebar.caption(f"Last saved {self.store.state.last_saved[:19].replace('T', ' ')}")
        return selector.active

    def _nav_button(self, label: str, view: ViewType, key: str) -> None:
        st.button(label, key=key, on_click=select_view, args=(view,))

    def render(self, view: ViewType) -> None:
        renderers = {
            ViewType.DASHBOARD: self.render_dashboard,
            ViewType.HABITS: self.render_habits,
            ViewType.HEALTH: self.render_health,
            ViewType.WEALTH: self.render_wealth,
            ViewType.CALENDAR: self.render_calendar,
        }
        renderers.get(view, self.render_dashboard)()

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------
    def render_dashboard(self) -> None:
        state = self.store.state
        st.header("Dashboard")
        st.caption(f"Daily overview for {long_date(self.today)}")

        habit_rate = daily_habit_rate(state, self.today)
        net_flow = month_net_flow(state, self.today.year, self.today.month)
        todays_health = health_for_day(state, self.today)

        col1, col2, col3 = st.columns(3)
        with col1:
            st.metric("Daily completion", f"{round(habit_rate)}%")
            st.progress(min(int(round(habit_rate)), 100))
            self._nav_button("Open habits", ViewType.HABITS, "dash_habits")
        with col2:
            st.metric(
                "Monthly balance",
                format_currency(net_flow),
                delta="Surplus" if net_flow >= 0 else "Deficit",
                delta_color="normal" if net_flow >= 0 else "inverse",
            )
            self._nav_button("Open wealth", ViewType.WEALTH, "dash_wealth")
        with col3:
            sleep = todays_health.sleep_hours if todays_health and todays_health.sleep_hours else 0
            water = todays_health.water_intake if todays_health and todays_health.water_intake else 0
            steps = todays_health.steps if todays_health and todays_health.steps else 0
            st.metric("Sleep", f"{sleep:g}h")
            st.caption(f"{water:g}L water · {steps:,.0f} steps")
            self._nav_button("Open health", ViewType.HEALTH, "dash_health")

        left, right = st.columns(2)
        with left:
            st.subheader("⚡ Daily habits")
            self._render_habit_toggles(limit=6, key_prefix="dash")
        with right:
            st.subheader("🧾 Recent wealth")
            entries = recent_entries(state, limit=4)
            if not entries:
                st.info("No recent entries.")
            for entry in entries:
                st.markdown(
                    escape_dollar_for_markdown(
                        f"**{entry.description}** · {entry.category} · "
                        f"{format_signed_entry(entry.amount, entry.type)}"
                    )
                )
            self._nav_button("Add wealth entry", ViewType.WEALTH, "dash_add_wealth")

    def _render_habit_toggles(self, limit: Optional[int] = None, key_prefix: str = "habit") -> None:
        habits = self.store.state.habits
        if not habits:
            st.info("No habits added yet.")
            return
        for habit in habits[:limit] if limit else habits:
            done = habit.is_done(self.today)
            label = f"~~{habit.name}~~" if done else habit.name
            checked = st.checkbox(
                f"{label}  ·  {habit.category}",
                value=done,
                key=f"{key_prefix}_toggle_{habit.id}_{self.today.isoformat()}",
            )
            if checked != done:
                self.store.toggle_habit_today(habit.id, self.today)
                _rerun()

    # ------------------------------------------------------------------
    # Habits
    # ------------------------------------------------------------------
    def render_habits(self) -> None:
        st.header("🎯 Habits")
        if st.button("➕ Add Habit"):
            st.session_state[SHOW_HABIT_FORM_KEY] = True
        if st.session_state.get(SHOW_HABIT_FORM_KEY, False):
            self.render_habit_form()

        habits = self.store.state.habits
        if not habits:
            st.info('No habits yet. Click "Add Habit" to begin.')
            return
        for habit in habits:
            done = habit.is_done(self.today)
            col1, col2, col3 = st.columns([4, 1, 1])
            with col1:
                st.markdown(f"**{habit.name}**  \n🏷️ {habit.category} · {len(habit.completed_days)} day(s) logged")
            with col2:
                if st.button("✅ Done" if done else "⭕ Mark", key=f"habit_toggle_{habit.id}"):
                    self.store.toggle_habit_today(habit.id, self.today)
                    _rerun()
            with col3:
                if st.button("🗑️", key=f"habit_remove_{habit.id}", help="Remove habit"):
                    self.store.remove_habit(habit.id)
                    _rerun()

        st.plotly_chart(
            viz.create_habit_progress_chart(self.store.state, self.today.year, self.today.month),
            use_container_width=True,
        )

    def render_habit_form(self) -> None:
        form: HabitForm = st.session_state[HABIT_FORM_KEY]
        with st.form("add_habit_form"):
            form.name = st.text_input("Habit Name", value=form.name, placeholder="e.g. Read for 30 mins")
            if form.error:
                st.error(form.error)
            form.category = st.text_input("Category", value=form.category, placeholder="e.g. Health")
            col1, col2 = st.columns(2)
            submitted = col1.form_submit_button("Save Habit")
            cancelled = col2.form_submit_button("Cancel")
        if cancelled:
            st.session_state[HABIT_FORM_KEY] = HabitForm()
            st.session_state[SHOW_HABIT_FORM_KEY] = False
            _rerun()
        elif submitted:
            if form.submit(self.store) is not None:
                st.session_state[SHOW_HABIT_FORM_KEY] = False
            _rerun()

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------
    def render_health(self) -> None:
        st.header("❤️ Health")
        st.caption(f"Logging for {long_date(self.today)}")
        record = self.store.health_for(self.today)
        cols = st.columns(len(SLIDER_FIELDS))
        for col, health_field in zip(cols, SLIDER_FIELDS):
            limit = HEALTH_LIMITS[health_field]
            current = record.get(health_field) if record is not None else None
            current = clamp_health_value(health_field, current or 0)
            with col:
                value = st.slider(
                    limit.label,
                    min_value=0.0,
                    max_value=float(limit.max),
                    value=float(current),
                    step=float(limit.step),
                    key=f"health_{health_field.value}_{self.today.isoformat()}",
                )
                st.caption(f"{value:g}{limit.unit}")
            if value != current:
                self.store.upsert_health_field(
                    self.today, health_field, clamp_health_value(health_field, value)
                )
                record = self.store.health_for(self.today)

        st.plotly_chart(viz.create_health_trend_chart(self.store.state, "sleepHours"), use_container_width=True)

    # ------------------------------------------------------------------
    # Wealth
    # ------------------------------------------------------------------
    def render_wealth(self) -> None:
        st.header("💰 Wealth")
        form: WealthForm = st.session_state[WEALTH_FORM_KEY]
        left, right = st.columns([1, 2])
        with left:
            st.subheader("New entry")
            with st.form("wealth_entry_form", clear_on_submit=False):
                form.description = st.text_input("Label", value=form.description, placeholder="e.g. Salary, Rent")
                form.category = st.text_input("Category", value=form.category, placeholder="e.g. Food, Work")
                form.amount = st.text_input(
                    "Amount ($)", value=form.amount, placeholder="0.00",
                    help="Positive for income, negative for expenses",
                )
                submitted = st.form_submit_button("Save Entry")
            if submitted:
                if form.submit(self.store):
                    _rerun()
            if form.error:
                st.error(form.error)

        with right:
            st.subheader("Ledger")
            entries = self.store.state.wealth
            if not entries:
                st.info("No entries logged yet.")
            for entry in entries:
                col1, col2, col3 = st.columns([4, 2, 1])
                icon = "📈" if entry.type == "income" else "📉"
                col1.markdown(f"{icon} **{entry.description}**  \n🏷️ {entry.category} · {entry.date[:10]}")
                col2.markdown(escape_dollar_for_markdown(format_signed_entry(entry.amount, entry.type)))
                if col3.button("🗑️", key=f"wealth_remove_{entry.id}", help="Delete entry"):
                    self.store.remove_wealth_entry(entry.id)
                    _rerun()

        st.plotly_chart(viz.create_cash_flow_chart(self.store.state), use_container_width=True)
        st.plotly_chart(
            viz.create_category_pie_chart(self.store.state, self.today.year, self.today.month),
            use_container_width=True,
        )

    # ------------------------------------------------------------------
    # Calendar report
    # ------------------------------------------------------------------
    def render_calendar(self) -> None:
        year, month = st.session_state[CALENDAR_KEY]
        state = self.store.state
        stats = compute_stats(state, year, month)

        col_prev, col_title, col_next = st.columns([1, 4, 1])
        if col_prev.button("◀", key="cal_prev"):
            st.session_state[CALENDAR_KEY] = shift_month(year, month, -1)
            st.session_state.pop(EXPORT_KEY, None)
            _rerun()
        col_title.header(f"📅 {month_title(year, month)}")
        if col_next.button("▶", key="cal_next"):
            st.session_state[CALENDAR_KEY] = shift_month(year, month, 1)
            st.session_state.pop(EXPORT_KEY, None)
            _rerun()

        cols = st.columns(6)
        cols[0].metric("Income", format_currency(stats.income))
        cols[1].metric("Expense", format_currency(stats.expense))
        cols[2].metric("Net", format_currency(stats.net))
        cols[3].metric("Habit completion", f"{stats.habit_completion}%")
        cols[4].metric("Avg sleep", f"{stats.avg_sleep}h")
        cols[5].metric("Avg steps", f"{stats.avg_steps:,}")

        fig = viz.create_calendar_figure(state, year, month, stats=stats, today=self.today)
        st.plotly_chart(fig, use_container_width=True)
        self.render_export(fig, year, month)

        with st.expander("Monthly stats table"):
            st.dataframe(stats_frame(stats), hide_index=True, use_container_width=True)

    def render_export(self, fig, year: int, month: int) -> None:
        failed = st.session_state.get(EXPORT_FAILED_KEY, False)
        label = "🔁 Retry export" if failed else "⬇️ Export Report"
        exporter: ReportExporter = st.session_state[EXPORTER_KEY]
        if st.button(label, key="cal_export", disabled=exporter.busy):
            result = exporter.export(fig, year, month)
            st.session_state[EXPORT_KEY] = result
            st.session_state[EXPORT_FAILED_KEY] = result is None
            failed = result is None
        if failed:
            st.error("Export failed. Check the logs and try again.")
        result = st.session_state.get(EXPORT_KEY)
        if result is not None:
            st.download_button(
                f"Download {result.filename}",
                data=result.data,
                file_name=result.filename,
                mime=result.mime,
                key="cal_download",
            )


def main() -> None:
    """Entry point for the Streamlit app."""
    configure_logging()
    ensure_data_directories()
    store = ensure_session_state()
    ui = PlannerUI(store)
    ui.setup_page_config()
    view = ui.render_sidebar()
    ui.render(view)


if __name__ == "__main__":  # pragma: no cover
    main()
