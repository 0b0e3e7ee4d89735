from __future__ import annotations

from datetime import UTC, datetime, timedelta

from starhistory.models.snapshot import StargazerEvent
from starhistory.services.history.exact import reconstruct_exact


def _star(year: int, month: int, day: int, hour: int = 12) -> StargazerEvent:
    return StargazerEvent(timestamp=datetime(year, month, day, hour, tzinfo=UTC))


def test_exact_path_accumulates_weekly_increments() -> None:
    created = datetime(2023, 1, 1, tzinfo=UTC)
    events = [
        _star(2023, 1, 2),
        _star(2023, 1, 3),
        _star(2023, 1, 5),
        _star(2023, 1, 16),
        _star(2023, 1, 17),
    ]

    series = reconstruct_exact(events, created, now=created + timedelta(days=21))

    assert [point.cumulative_stars for point in series] == [3, 3, 5]
    assert [point.iso_date for point in series] == ["2023-01-01", "2023-01-08", "2023-01-15"]


def test_exact_path_holds_the_total_in_later_weeks() -> None:
    created = datetime(2023, 1, 1, tzinfo=UTC)
    events = [_star(2023, 1, 2), _star(2023, 1, 2), _star(2023, 1, 3), _star(2023, 1, 16), _star(2023, 1, 17)]

    series = reconstruct_exact(events, created, now=created + timedelta(days=70))

    values = [point.cumulative_stars for point in series]
    assert values[:3] == [3, 3, 5]
    assert values[3:] == [5] * 7
    assert all(values[index] <= values[index + 1] for index in range(len(values) - 1))


def test_exact_path_keeps_every_star_across_a_year_boundary() -> None:
    created = datetime(2022, 12, 25, tzinfo=UTC)
    events = [
        _star(2022, 12, 24),
        _star(2022, 12, 31, 10),
        _star(2023, 1, 1, 10),
        _star(2023, 1, 3),
    ]

    series = reconstruct_exact(events, created, now=datetime(2023, 1, 10, tzinfo=UTC))

    assert [point.cumulative_stars for point in series] == [2, 4, 4]
    assert series[-1].cumulative_stars == len(events)


def test_exact_path_without_events_is_all_zero() -> None:
    created = datetime(2024, 3, 1, tzinfo=UTC)

    series = reconstruct_exact([], created, now=created + timedelta(days=30))

    assert len(series) == 5
    assert {point.cumulative_stars for point in series} == {0}


def test_exact_path_point_leads_a_star_by_less_than_one_bucket() -> None:
    created = datetime(2023, 1, 4, tzinfo=UTC)
    star = _star(2023, 1, 19)

    series = reconstruct_exact([star], created, now=datetime(2023, 1, 20, tzinfo=UTC))

    assert [(point.iso_date, point.cumulative_stars) for point in series] == [
        ("2023-01-04", 0),
        ("2023-01-11", 1),
        ("2023-01-18", 1),
    ]
    first_counted = next(point for point in series if point.cumulative_stars)
    week_end = first_counted.date + timedelta(days=7)
    assert timedelta(0) <= star.timestamp.date() - week_end < timedelta(days=7)
