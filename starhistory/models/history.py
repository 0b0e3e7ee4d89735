"""Reconstructed star-history series element."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, date, datetime
from typing import Any

_MONTH_ABBREVIATIONS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def format_display_label(day: date) -> str:
    """Axis label such as `Jan 5, 2023`."""
    return f"{_MONTH_ABBREVIATIONS[day.month - 1]} {day.day}, {day.year}"


@dataclass(frozen=True, slots=True)
class StarHistoryPoint:
    """A dated cumulative star count on the weekly grid."""

    date: date
    cumulative_stars: int

    @property
    def iso_date(self) -> str:
        return self.date.isoformat()

    @property
    def display_label(self) -> str:
        return format_display_label(self.date)

    @property
    def timestamp_millis(self) -> int:
        midnight = datetime(self.date.year, self.date.month, self.date.day, tzinfo=UTC)
        return int(midnight.timestamp() * 1000)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.iso_date,
            "stars": self.cumulative_stars,
            "display_date": self.display_label,
            "timestamp": self.timestamp_millis,
        }
