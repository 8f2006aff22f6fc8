"""Tests for per-day bucketing and the month-cell overflow policy."""

from datetime import date, datetime

from planner.domain.models import Event, EventOccurrence
from planner.services.buckets import (
    bucket_for_day,
    is_multi_day,
    month_cell,
    multi_day_for_range,
    visible_and_overflow,
)
from planner.services.recurrence import occurrence_from_event


def _make_occ(start: datetime, end: datetime, title: str = "Existing", **kw) -> EventOccurrence:
    return occurrence_from_event(Event(title=title, start_time=start, end_time=end, **kw))


def test_is_multi_day():
    assert not is_multi_day(_make_occ(datetime(2026, 3, 2, 9), datetime(2026, 3, 2, 17)))
    assert is_multi_day(_make_occ(datetime(2026, 3, 2, 9), datetime(2026, 3, 3, 9)))
    # Ending exactly at midnight still changes the calendar date.
    assert is_multi_day(_make_occ(datetime(2026, 3, 2, 10), datetime(2026, 3, 3, 0)))


def test_bucket_for_day_filters_and_sorts():
    late = _make_occ(datetime(2026, 3, 2, 15), datetime(2026, 3, 2, 16), "Late")
    early = _make_occ(datetime(2026, 3, 2, 8), datetime(2026, 3, 2, 9), "Early")
    other_day = _make_occ(datetime(2026, 3, 3, 8), datetime(2026, 3, 3, 9), "Tuesday")
    spanning = _make_occ(datetime(2026, 3, 2, 20), datetime(2026, 3, 3, 2), "Overnight")

    bucket = bucket_for_day([late, early, other_day, spanning], date(2026, 3, 2))
    assert [o.title for o in bucket] == ["Early", "Late"]


def test_visible_and_overflow_caps_at_three():
    bucket = [
        _make_occ(datetime(2026, 3, 2, h), datetime(2026, 3, 2, h, 30), f"E{h}")
        for h in range(8, 13)
    ]
    visible, overflow = visible_and_overflow(bucket)
    assert [o.title for o in visible] == ["E8", "E9", "E10"]
    assert overflow == 2


def test_visible_and_overflow_no_overflow():
    bucket = [_make_occ(datetime(2026, 3, 2, 8), datetime(2026, 3, 2, 9))]
    assert visible_and_overflow(bucket) == (bucket, 0)


def test_month_cell():
    occs = [
        _make_occ(datetime(2026, 3, 2, h), datetime(2026, 3, 2, h, 45)) for h in range(9, 14)
    ]
    cell = month_cell(occs, date(2026, 3, 2), True, today=date(2026, 3, 2))
    assert cell.is_today
    assert cell.is_current_month
    assert len(cell.events) == 3
    assert cell.overflow_count == 2

    empty = month_cell(occs, date(2026, 3, 3), False, today=date(2026, 3, 2))
    assert not empty.is_today
    assert empty.events == []
    assert empty.overflow_count == 0


def test_multi_day_for_range():
    week_start, week_end = datetime(2026, 3, 1), datetime(2026, 3, 8)
    trip = _make_occ(datetime(2026, 2, 27, 9), datetime(2026, 3, 2, 18), "Trip")
    later = _make_occ(datetime(2026, 3, 9, 9), datetime(2026, 3, 10, 9), "Later")
    single = _make_occ(datetime(2026, 3, 4, 9), datetime(2026, 3, 4, 10), "Meeting")
    holiday = _make_occ(
        datetime(2026, 3, 5, 0), datetime(2026, 3, 5, 23, 59), "Holiday", is_all_day=True
    )

    occs = [trip, later, single, holiday]
    assert [o.title for o in multi_day_for_range(occs, week_start, week_end)] == ["Trip"]
    assert [
        o.title
        for o in multi_day_for_range(occs, week_start, week_end, include_all_day=True)
    ] == ["Trip", "Holiday"]
