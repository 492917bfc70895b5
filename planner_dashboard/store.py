"""Planner store: the only way to change the planner state.

Every operation builds a new immutable :class:`PlannerState` snapshot,
swaps it in, and then writes the full state through the persistence
adapter exactly once.
"""

from __future__ import annotations

import logging
import math
from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Optional

from .models import (
    DEFAULT_CATEGORY,
    EXPENSE,
    INCOME,
    DateLike,
    Habit,
    HealthField,
    HealthMetric,
    PlannerState,
    ValidationError,
    WealthEntry,
    day_key,
    new_id,
)
from .persistence import PersistenceAdapter

logger = logging.getLogger(__name__)


def _local_now() -> datetime:
    return datetime.now().astimezone()


def parse_amount(value: Any) -> float:
    """Parse a user supplied amount; returns ``nan`` when it is not numeric."""
    if isinstance(value, bool):
        return math.nan
    if isinstance(value, (int, float)):
        return float(value)
    try:
        return float(str(value).strip().replace(",", ""))
    except ValueError:
        return math.nan


class PlannerStore:
    """Holds the current planner snapshot and applies update operations."""

    def __init__(
        self,
        adapter: PersistenceAdapter,
        state: Optional[PlannerState] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.adapter = adapter
        self._state = state if state is not None else adapter.load()
        self._clock = clock or _local_now

    @property
    def state(self) -> PlannerState:
        return self._state

    def _commit(self, new_state: PlannerState, action: str) -> None:
        self._state = replace(new_state, last_saved=self._clock().isoformat())
        logger.debug("%s: %d habits, %d health, %d wealth", action,
                     len(self._state.habits), len(self._state.health), len(self._state.wealth))
        self.adapter.save(self._state)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def habit(self, habit_id: str) -> Optional[Habit]:
        return next((h for h in self._state.habits if h.id == habit_id), None)

    def health_for(self, day: DateLike) -> Optional[HealthMetric]:
        key = day_key(day)
        return next((h for h in self._state.health if h.date == key), None)

    # ------------------------------------------------------------------
    # Habits
    # ------------------------------------------------------------------
    def add_habit(self, name: str, category: str = "") -> Habit:
        """Append a new habit.

        Raises:
            ValidationError: If ``name`` is blank.
        """
        if not name or not name.strip():
            raise ValidationError("Habit name is required")
        existing = {h.id for h in self._state.habits}
        habit_id = new_id()
        while habit_id in existing:
            habit_id = new_id()
        habit = Habit(
            id=habit_id,
            name=name.strip(),
            completed_days=(),
            category=(category or "").strip() or DEFAULT_CATEGORY,
        )
        self._commit(replace(self._state, habits=self._state.habits + (habit,)), "add_habit")
        return habit

    def toggle_habit_today(self, habit_id: str, today: DateLike) -> bool:
        """Flip ``today`` in the habit's completed days; returns the new done state."""
        key = day_key(today)
        done = False
        habits = []
        for habit in self._state.habits:
            if habit.id == habit_id:
                if key in habit.completed_days:
                    days = tuple(d for d in habit.completed_days if d != key)
                else:
                    days = habit.completed_days + (key,)
                    done = True
                habit = replace(habit, completed_days=days)
            habits.append(habit)
        self._commit(replace(self._state, habits=tuple(habits)), "toggle_habit_today")
        return done

    def remove_habit(self, habit_id: str) -> None:
        habits = tuple(h for h in self._state.habits if h.id != habit_id)
        self._commit(replace(self._state, habits=habits), "remove_habit")

    # ------------------------------------------------------------------
    # Health
    # ------------------------------------------------------------------
    def upsert_health_field(self, day: DateLike, health_field: Any, value: Any) -> HealthMetric:
        """Set one field of the record for ``day``, creating the record if needed.

        Range checks belong to the input layer (see ``forms.clamp_health_value``).
        """
        try:
            target = HealthField(health_field)
        except ValueError as exc:
            raise ValidationError(f"Unknown health field: {health_field!r}") from exc
        key = day_key(day)
        record = None
        health = []
        for existing in self._state.health:
            if existing.date == key:
                existing = replace(existing, **{target.attribute: value})
                record = existing
            health.append(existing)
        if record is None:
            record = HealthMetric(date=key, **{target.attribute: value})
            health.append(record)
        self._commit(replace(self._state, health=tuple(health)), "upsert_health_field")
        return record

    # ------------------------------------------------------------------
    # Wealth
    # ------------------------------------------------------------------
    def add_wealth_entry(self, description: str, category: str, signed_amount: Any) -> bool:
        """Insert a ledger entry at the front; returns False when input is invalid."""
        amount = parse_amount(signed_amount)
        if not description or not description.strip() or not math.isfinite(amount) or amount == 0:
            return False
        entry = WealthEntry(
            id=new_id(),
            date=self._clock().isoformat(),
            type=INCOME if amount > 0 else EXPENSE,
            amount=abs(amount),
            description=description.strip(),
            category=(category or "").strip() or DEFAULT_CATEGORY,
        )
        self._commit(replace(self._state, wealth=(entry,) + self._state.wealth), "add_wealth_entry")
        return True

    def remove_wealth_entry(self, entry_id: str) -> None:
        wealth = tuple(w for w in self._state.wealth if w.id != entry_id)
        self._commit(replace(self._state, wealth=wealth), "remove_wealth_entry")
