"""Controlled input state for the planner forms.

Each form keeps its own field values and inline error, validates before
calling the store, and resets itself after a successful submit.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Dict, Optional

from .models import Habit, HealthField, ValidationError
from .store import PlannerStore, parse_amount
from .stats import round_half_up


@dataclass(frozen=True)
class HealthLimit:
    label: str
    max: Optional[float]
    step: float
    unit: str


HEALTH_LIMITS: Dict[HealthField, HealthLimit] = {
    HealthField.SLEEP_HOURS: HealthLimit("Sleep Quality", 12, 0.5, "h"),
    HealthField.WATER_INTAKE: HealthLimit("Water Intake", 8, 0.5, "L"),
    HealthField.STEPS: HealthLimit("Steps", 20000, 500, " steps"),
    HealthField.WEIGHT: HealthLimit("Weight", None, 0.5, " kg"),
}

# Sliders shown on the health view, in display order
SLIDER_FIELDS = (HealthField.SLEEP_HOURS, HealthField.WATER_INTAKE, HealthField.STEPS)


def clamp_health_value(health_field: Any, value: Any) -> float:
    """Clamp ``value`` to the field's range and snap it to the field's step."""
    try:
        limit = HEALTH_LIMITS[HealthField(health_field)]
    except (ValueError, KeyError) as exc:
        raise ValidationError(f"{health_field!r} is not a numeric health field") from exc
    number = parse_amount(value)
    if not math.isfinite(number) or number < 0:
        number = 0.0
    if limit.max is not None:
        number = min(number, float(limit.max))
    snapped = round_half_up(number / limit.step) * limit.step
    if limit.max is not None and snapped > limit.max:
        snapped -= limit.step
    return float(snapped)


@dataclass
class HabitForm:
    name: str = ""
    category: str = ""
    error: str = ""

    def submit(self, store: PlannerStore) -> Optional[Habit]:
        try:
            habit = store.add_habit(self.name, self.category)
        except ValidationError as exc:
            self.error = str(exc)
            return None
        self.name, self.category, self.error = "", "", ""
        return habit


@dataclass
class WealthForm:
    description: str = ""
    category: str = ""
    amount: str = ""
    error: str = ""

    def validate(self) -> str:
        if not self.description.strip():
            return "Description is required"
        amount = parse_amount(self.amount)
        if not math.isfinite(amount) or amount == 0:
            return "Enter a non-zero amount"
        return ""

    def submit(self, store: PlannerStore) -> bool:
        self.error = self.validate()
        if self.error:
            return False
        if not store.add_wealth_entry(self.description, self.category, self.amount):
            self.error = "Entry could not be saved"
            return False
        self.description, self.category, self.amount = "", "", ""
        return True
