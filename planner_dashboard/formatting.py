"""Formatting utilities for currency and date display."""

from __future__ import annotations

from datetime import date
from typing import Union


def format_currency(amount: Union[float, int], include_sign: bool = True) -> str:
    """Format a USD amount, placing the minus sign before the dollar sign.

    Example:
        >>> format_currency(1234.5)
        '$1,234.50'
        >>> format_currency(-42.5)
        '-$42.50'
    """
    formatted = f"{abs(amount):,.2f}"
    prefix = "-" if amount < 0 else ""
    return f"{prefix}${formatted}" if include_sign else f"{prefix}{formatted}"


def escape_dollar_for_markdown(text: str) -> str:
    """Escape dollar signs so Streamlit markdown does not treat them as LaTeX."""
    return text.replace("$", "\\$")


def format_signed_entry(amount: float, entry_type: str) -> str:
    sign = "+" if entry_type == "income" else "-"
    return f"{sign}{format_currency(amount)}"


def long_date(day: date) -> str:
    """e.g. ``Sunday, October 18``."""
    return f"{day:%A, %B} {day.day}"


def month_title(year: int, month: int) -> str:
    return date(year, month, 1).strftime("%B %Y")
