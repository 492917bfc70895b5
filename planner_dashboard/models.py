"""Planner data model and JSON (de)serialization.

The persisted blob uses the camelCase keys of the browser planner so that
existing data keeps loading; Python attributes are snake_case.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

DEFAULT_CATEGORY = "General"

INCOME = "income"
EXPENSE = "expense"
ENTRY_TYPES = (INCOME, EXPENSE)

DateLike = Union[date, str]


class ValidationError(ValueError):
    """Raised when user input cannot be turned into a planner entity."""


class HealthField(str, Enum):
    """Writable fields of a health record, keyed by their serialized name."""

    WEIGHT = "weight"
    SLEEP_HOURS = "sleepHours"
    WATER_INTAKE = "waterIntake"
    STEPS = "steps"
    NOTES = "notes"

    @property
    def attribute(self) -> str:
        return _HEALTH_ATTRIBUTES[self]


_HEALTH_ATTRIBUTES = {
    HealthField.WEIGHT: "weight",
    HealthField.SLEEP_HOURS: "sleep_hours",
    HealthField.WATER_INTAKE: "water_intake",
    HealthField.STEPS: "steps",
    HealthField.NOTES: "notes",
}


def new_id() -> str:
    """Return a fresh 9 character base-36 identifier."""
    value = uuid.uuid4().int
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    chars = []
    for _ in range(9):
        value, rem = divmod(value, 36)
        chars.append(digits[rem])
    return "".join(chars)


def parse_day(value: DateLike) -> date:
    """Parse a ``YYYY-MM-DD`` string (or pass through a date)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as exc:
        raise ValidationError(f"Invalid calendar date: {value!r}") from exc


def day_key(value: DateLike) -> str:
    return parse_day(value).isoformat()


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO timestamp, accepting the ``Z`` suffix JavaScript writes."""
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _optional_number(value: Any) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"Expected a number, got {value!r}")
    return value


@dataclass(frozen=True)
class Habit:
    id: str
    name: str
    completed_days: tuple = ()
    category: str = DEFAULT_CATEGORY

    def is_done(self, day: DateLike) -> bool:
        return day_key(day) in self.completed_days

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "completedDays": list(self.completed_days),
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Habit":
        days = data.get("completedDays") or []
        if not isinstance(days, list):
            raise ValidationError("completedDays must be a list")
        unique: List[str] = []
        for raw in days:
            key = day_key(raw)
            if key not in unique:
                unique.append(key)
        return cls(
            id=str(data["id"]),
            name=str(data["name"]),
            completed_days=tuple(unique),
            category=str(data.get("category") or DEFAULT_CATEGORY),
        )


@dataclass(frozen=True)
class HealthMetric:
    date: str
    weight: Optional[float] = None
    sleep_hours: Optional[float] = None
    water_intake: Optional[float] = None
    steps: Optional[float] = None
    notes: Optional[str] = None

    def get(self, health_field: HealthField) -> Any:
        return getattr(self, health_field.attribute)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"date": self.date}
        for health_field in HealthField:
            value = self.get(health_field)
            if value is not None:
                payload[health_field.value] = value
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HealthMetric":
        notes = data.get("notes")
        return cls(
            date=day_key(data["date"]),
            weight=_optional_number(data.get("weight")),
            sleep_hours=_optional_number(data.get("sleepHours")),
            water_intake=_optional_number(data.get("waterIntake")),
            steps=_optional_number(data.get("steps")),
            notes=None if notes is None else str(notes),
        )


@dataclass(frozen=True)
class WealthEntry:
    id: str
    date: str
    type: str
    amount: float
    description: str
    category: str = DEFAULT_CATEGORY

    @property
    def signed_amount(self) -> float:
        return self.amount if self.type == INCOME else -self.amount

    @property
    def timestamp(self) -> datetime:
        return parse_timestamp(self.date)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "date": self.date,
            "type": self.type,
            "amount": self.amount,
            "description": self.description,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "WealthEntry":
        entry_type = data.get("type")
        if entry_type not in ENTRY_TYPES:
            raise ValidationError(f"Unknown wealth entry type: {entry_type!r}")
        amount = _optional_number(data.get("amount"))
        if amount is None:
            raise ValidationError("Wealth entry amount is required")
        parse_timestamp(data["date"])
        return cls(
            id=str(data["id"]),
            date=str(data["date"]),
            type=entry_type,
            amount=amount,
            description=str(data.get("description", "")),
            category=str(data.get("category") or DEFAULT_CATEGORY),
        )


@dataclass(frozen=True)
class PlannerState:
    habits: tuple = ()
    health: tuple = ()
    wealth: tuple = ()
    last_saved: str = field(default_factory=lambda: datetime.now().astimezone().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "habits": [habit.to_dict() for habit in self.habits],
            "health": [record.to_dict() for record in self.health],
            "wealth": [entry.to_dict() for entry in self.wealth],
            "lastSaved": self.last_saved,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "PlannerState":
        """Build a state from decoded JSON.

        Raises:
            ValidationError: If the payload does not have the planner shape.
        """
        if not isinstance(data, dict):
            raise ValidationError("Planner state must be a JSON object")
        collections = {}
        for key in ("habits", "health", "wealth"):
            items = data.get(key)
            if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
                raise ValidationError(f"'{key}' must be a list of objects")
            collections[key] = items
        try:
            habits = tuple(Habit.from_dict(item) for item in collections["habits"])
            health = tuple(HealthMetric.from_dict(item) for item in collections["health"])
            wealth = tuple(WealthEntry.from_dict(item) for item in collections["wealth"])
        except (KeyError, TypeError, ValueError) as exc:
            raise ValidationError(f"Malformed planner record: {exc}") from exc
        last_saved = data.get("lastSaved")
        if not isinstance(last_saved, str):
            last_saved = datetime.now().astimezone().isoformat()
        return cls(habits=habits, health=health, wealth=wealth, last_saved=last_saved)


def seed_state() -> PlannerState:
    """Default state used when nothing valid has been persisted yet."""
    return PlannerState(
        habits=(
            Habit(id="1", name="Morning Meditation", category="Mindset"),
            Habit(id="2", name="Strategic Planning", category="Work"),
        ),
    )
