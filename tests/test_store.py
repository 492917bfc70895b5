"""Unit tests for planner_dashboard.store."""

from __future__ import annotations

import math
from datetime import date, datetime, timezone

import pytest

from planner_dashboard.models import HealthField, ValidationError, seed_state
from planner_dashboard.persistence import MemoryStore, PersistenceAdapter
from planner_dashboard.store import PlannerStore, parse_amount

FIXED_NOW = datetime(2024, 6, 15, 9, 30, tzinfo=timezone.utc)


class CountingAdapter(PersistenceAdapter):
    def __init__(self):
        super().__init__(MemoryStore())
        self.saved = []

    def save(self, state):
        self.saved.append(state)
        super().save(state)


def _store(state=None):
    adapter = CountingAdapter()
    return PlannerStore(adapter, state=state or seed_state(), clock=lambda: FIXED_NOW), adapter


def test_store_loads_seed_from_empty_adapter():
    store = PlannerStore(PersistenceAdapter(MemoryStore()))
    assert [h.name for h in store.state.habits] == ["Morning Meditation", "Strategic Planning"]
    assert store.state.health == ()
    assert store.state.wealth == ()


def test_add_habit_appends_with_empty_days():
    store, adapter = _store()
    habit = store.add_habit("Read for 30 mins", "Health")
    assert len(store.state.habits) == 3
    assert store.state.habits[-1] == habit
    assert habit.completed_days == ()
    assert habit.category == "Health"
    assert len(habit.id) == 9
    assert len(adapter.saved) == 1


def test_add_habit_defaults_blank_category():
    store, _ = _store()
    habit = store.add_habit("Stretch", "   ")
    assert habit.category == "General"


@pytest.mark.parametrize("name", ["", "   ", None])
def test_add_habit_rejects_blank_name(name):
    store, adapter = _store()
    with pytest.raises(ValidationError):
        store.add_habit(name, "Work")
    assert len(store.state.habits) == 2
    assert adapter.saved == []


def test_toggle_twice_restores_completed_days():
    store, _ = _store()
    before = store.habit("1").completed_days
    assert store.toggle_habit_today("1", date(2024, 6, 15)) is True
    assert store.habit("1").completed_days == ("2024-06-15",)
    assert store.toggle_habit_today("1", "2024-06-15") is False
    assert store.habit("1").completed_days == before


def test_toggle_unknown_habit_is_noop():
    store, adapter = _store()
    before = store.state.habits
    assert store.toggle_habit_today("missing", date(2024, 6, 15)) is False
    assert store.state.habits == before
    assert len(adapter.saved) == 1


def test_toggle_rejects_invalid_date():
    store, _ = _store()
    with pytest.raises(ValidationError):
        store.toggle_habit_today("1", "2024-13-40")


def test_previous_snapshot_is_not_mutated():
    store, _ = _store()
    snapshot = store.state
    store.toggle_habit_today("1", "2024-06-15")
    assert snapshot.habits[0].completed_days == ()
    assert store.state is not snapshot


def test_remove_habit_and_missing_id():
    store, _ = _store()
    store.remove_habit("1")
    assert [h.id for h in store.state.habits] == ["2"]
    store.remove_habit("1")
    assert [h.id for h in store.state.habits] == ["2"]


def test_upsert_health_field_creates_then_merges():
    store, _ = _store()
    store.upsert_health_field("2024-06-15", "sleepHours", 7.5)
    store.upsert_health_field(date(2024, 6, 15), HealthField.STEPS, 8000)
    assert len(store.state.health) == 1
    record = store.health_for("2024-06-15")
    assert record.sleep_hours == 7.5
    assert record.steps == 8000
    assert record.water_intake is None

    store.upsert_health_field("2024-06-15", "sleepHours", 6)
    assert store.health_for("2024-06-15").sleep_hours == 6
    assert store.health_for("2024-06-15").steps == 8000


def test_upsert_health_field_rejects_unknown_field():
    store, _ = _store()
    with pytest.raises(ValidationError):
        store.upsert_health_field("2024-06-15", "mood", 3)


def test_add_wealth_entry_negative_amount_is_expense():
    store, _ = _store()
    assert store.add_wealth_entry("Groceries", "", -42.50) is True
    entry = store.state.wealth[0]
    assert entry.type == "expense"
    assert entry.amount == 42.50
    assert entry.category == "General"
    assert entry.date == FIXED_NOW.isoformat()


def test_add_wealth_entry_inserts_newest_first():
    store, _ = _store()
    store.add_wealth_entry("Salary", "Work", "1000")
    store.add_wealth_entry("Rent", "Home", "-200")
    assert [w.description for w in store.state.wealth] == ["Rent", "Salary"]
    assert store.state.wealth[1].type == "income"


@pytest.mark.parametrize(
    "description, amount",
    [("Coffee", 0), ("", 10), ("   ", 10), ("Coffee", "abc"), ("Coffee", float("nan")), ("Coffee", "")],
)
def test_add_wealth_entry_rejects_invalid_input(description, amount):
    store, adapter = _store()
    assert store.add_wealth_entry(description, "Food", amount) is False
    assert store.state.wealth == ()
    assert adapter.saved == []


def test_remove_wealth_entry():
    store, _ = _store()
    store.add_wealth_entry("Salary", "Work", 1000)
    entry_id = store.state.wealth[0].id
    store.remove_wealth_entry("unknown")
    assert len(store.state.wealth) == 1
    store.remove_wealth_entry(entry_id)
    assert store.state.wealth == ()


def test_each_commit_saves_full_state_once():
    store, adapter = _store()
    store.add_habit("Journal")
    store.toggle_habit_today("1", "2024-06-15")
    store.upsert_health_field("2024-06-15", "waterIntake", 2)
    assert len(adapter.saved) == 3
    assert adapter.saved[-1] is store.state
    assert store.state.last_saved == FIXED_NOW.isoformat()


def test_parse_amount():
    assert parse_amount("1,250.50") == 1250.5
    assert parse_amount(-3) == -3.0
    assert math.isnan(parse_amount(True))
    assert math.isnan(parse_amount("twelve"))
