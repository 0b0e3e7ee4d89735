from __future__ import annotations

from datetime import date

from starhistory.models.history import StarHistoryPoint, format_display_label


def test_display_label_includes_year() -> None:
    assert format_display_label(date(2023, 1, 5)) == "Jan 5, 2023"
    assert format_display_label(date(2024, 12, 31)) == "Dec 31, 2024"


def test_point_serializes_with_label_and_utc_midnight_millis() -> None:
    point = StarHistoryPoint(date=date(2023, 1, 1), cumulative_stars=42)

    assert point.to_dict() == {
        "date": "2023-01-01",
        "stars": 42,
        "display_date": "Jan 1, 2023",
        "timestamp": 1672531200000,
    }
