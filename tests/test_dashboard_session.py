import types

from planner_dashboard import dashboard
from planner_dashboard.export import ReportExporter
from planner_dashboard.forms import HabitForm, WealthForm
from planner_dashboard.persistence import MemoryStore, PersistenceAdapter
from planner_dashboard.views import ViewSelector, ViewType


def test_session_state_initialization(monkeypatch):
    dummy_state = {}
    monkeypatch.setattr(dashboard, 'st', types.SimpleNamespace(session_state=dummy_state))
    store = dashboard.ensure_session_state(PersistenceAdapter(MemoryStore()))
    assert dummy_state[dashboard.STORE_KEY] is store
    assert isinstance(dummy_state[dashboard.VIEW_KEY], ViewSelector)
    assert isinstance(dummy_state[dashboard.HABIT_FORM_KEY], HabitForm)
    assert isinstance(dummy_state[dashboard.WEALTH_FORM_KEY], WealthForm)
    assert len(dummy_state[dashboard.CALENDAR_KEY]) == 2
    assert len(store.state.habits) == 2


def test_session_state_is_reused_across_reruns(monkeypatch):
    dummy_state = {}
    monkeypatch.setattr(dashboard, 'st', types.SimpleNamespace(session_state=dummy_state))
    first = dashboard.ensure_session_state(PersistenceAdapter(MemoryStore()))
    first.add_habit("Journal")
    second = dashboard.ensure_session_state(PersistenceAdapter(MemoryStore()))
    assert second is first
    assert len(second.state.habits) == 3


def test_shift_month_wraps_years():
    assert dashboard.shift_month(2024, 12, 1) == (2025, 1)
    assert dashboard.shift_month(2024, 1, -1) == (2023, 12)
    assert dashboard.shift_month(2024, 6, 0) == (2024, 6)


def test_render_dispatches_to_selected_view(monkeypatch):
    memory = MemoryStore()
    ui = dashboard.PlannerUI(dashboard.PlannerStore(PersistenceAdapter(memory)))
    called = []
    for view in ViewType:
        monkeypatch.setattr(ui, f"render_{view.value}", lambda v=view: called.append(v))
    ui.render(ViewType.CALENDAR)
    ui.render("unknown")
    assert called == [ViewType.CALENDAR, ViewType.DASHBOARD]


def test_rerun_prefers_streamlit_rerun(monkeypatch):
    called = {}
    monkeypatch.setattr(dashboard, 'st', types.SimpleNamespace(rerun=lambda: called.setdefault('method', 'rerun')))
    dashboard._rerun()
    assert called['method'] == 'rerun'


def test_select_view_callback_syncs_sidebar(monkeypatch):
    dummy_state = {}
    monkeypatch.setattr(dashboard, 'st', types.SimpleNamespace(session_state=dummy_state))
    dashboard.ensure_session_state(PersistenceAdapter(MemoryStore()))
    assert dummy_state[dashboard.NAV_KEY] is ViewType.DASHBOARD
    dashboard.select_view(ViewType.WEALTH)
    assert dummy_state[dashboard.VIEW_KEY].active is ViewType.WEALTH
    assert dummy_state[dashboard.NAV_KEY] is ViewType.WEALTH


def test_each_session_gets_its_own_exporter(monkeypatch):
    first_state, second_state = {}, {}
    monkeypatch.setattr(dashboard, 'st', types.SimpleNamespace(session_state=first_state))
    dashboard.ensure_session_state(PersistenceAdapter(MemoryStore()))
    monkeypatch.setattr(dashboard, 'st', types.SimpleNamespace(session_state=second_state))
    dashboard.ensure_session_state(PersistenceAdapter(MemoryStore()))
    first = first_state[dashboard.EXPORTER_KEY]
    second = second_state[dashboard.EXPORTER_KEY]
    assert isinstance(first, ReportExporter)
    assert first is not second
    with first._lock:
        assert first.busy
        assert not second.busy
