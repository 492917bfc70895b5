"""Which of the five planner views is on screen."""

from __future__ import annotations

from enum import Enum
from typing import List, Union


class ViewType(str, Enum):
    DASHBOARD = "dashboard"
    HABITS = "habits"
    HEALTH = "health"
    WEALTH = "wealth"
    CALENDAR = "calendar"

    @property
    def label(self) -> str:
        return VIEW_LABELS[self]


VIEW_LABELS = {
    ViewType.DASHBOARD: "📊 Dashboard",
    ViewType.HABITS: "🎯 Habits",
    ViewType.HEALTH: "❤️ Health",
    ViewType.WEALTH: "💰 Wealth",
    ViewType.CALENDAR: "📅 Calendar",
}


class ViewSelector:
    """Holds the active view; any view can be selected from any other."""

    def __init__(self, initial: Union[ViewType, str] = ViewType.DASHBOARD):
        self._active = ViewType(initial)

    @property
    def active(self) -> ViewType:
        return self._active

    def select(self, view: Union[ViewType, str]) -> ViewType:
        """Switch to ``view``.

        Raises:
            ValueError: If ``view`` is not one of the five planner views.
        """
        self._active = ViewType(view)
        return self._active

    @staticmethod
    def options() -> List[ViewType]:
        return list(ViewType)
