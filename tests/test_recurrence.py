"""Tests for expanding events into occurrences."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone

from planner.domain.models import Event, RecurrenceRule, ViewMode, ViewWindow
from planner.services.recurrence import (
    epoch_millis,
    expand_event,
    expand_occurrences,
    occurrence_id,
)
from planner.services.windows import compute_window

# Monday 2 March 2026
MONDAY = datetime(2026, 3, 2)
WEEK = compute_window(ViewMode.WEEK, MONDAY)


def _event(start: datetime, end: datetime, rule: str | None = None, **kw) -> Event:
    return Event(
        title=kw.pop("title", "Standup"),
        start_time=start,
        end_time=end,
        recurrence=RecurrenceRule(rrule_text=rule) if rule else None,
        **kw,
    )


def _local(moment: datetime) -> datetime:
    return moment.astimezone().replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Non-recurring events
# ---------------------------------------------------------------------------


def test_single_event_inside_window_passes_through():
    event = _event(MONDAY.replace(hour=10), MONDAY.replace(hour=11), location="Room 1")
    occurrences = expand_occurrences([event], WEEK)

    assert len(occurrences) == 1
    occ = occurrences[0]
    assert occ.id == event.id
    assert occ.source_event_id == event.id
    assert occ.is_recurring_instance is False
    assert occ.start_time == event.start_time
    assert occ.end_time == event.end_time
    assert occ.location == "Room 1"


def test_single_event_outside_window_is_not_dropped():
    event = _event(datetime(2025, 1, 1, 9), datetime(2025, 1, 1, 10))
    assert [o.id for o in expand_occurrences([event], WEEK)] == [event.id]


def test_zero_duration_event():
    event = _event(MONDAY.replace(hour=9), MONDAY.replace(hour=9))
    assert expand_occurrences([event], WEEK)[0].duration == timedelta(0)


# ---------------------------------------------------------------------------
# Recurring events
# ---------------------------------------------------------------------------


def test_weekly_monday_over_four_weeks():
    event = _event(
        MONDAY.replace(hour=10), MONDAY.replace(hour=11), "FREQ=WEEKLY;BYDAY=MO"
    )
    window = ViewWindow(start=datetime(2026, 3, 1), end=datetime(2026, 3, 29))
    occurrences = expand_event(event, window)

    assert len(occurrences) == 4
    starts = [o.start_time for o in occurrences]
    assert starts[0] == datetime(2026, 3, 2, 10)
    for earlier, later in zip(starts, starts[1:]):
        assert later - earlier == timedelta(days=7)
    for occ in occurrences:
        assert occ.end_time - occ.start_time == timedelta(hours=1)
        assert occ.source_event_id == event.id
        assert occ.is_recurring_instance is True
        assert occ.title == "Standup"


def test_daily_count_three_in_same_week():
    event = _event(
        MONDAY.replace(hour=10), MONDAY.replace(hour=11), "FREQ=DAILY;COUNT=3"
    )
    occurrences = expand_occurrences([event], WEEK)

    assert [o.start_time for o in occurrences] == [
        datetime(2026, 3, 2, 10),
        datetime(2026, 3, 3, 10),
        datetime(2026, 3, 4, 10),
    ]
    assert all(o.duration == timedelta(minutes=60) for o in occurrences)


def test_virtual_ids_use_epoch_millis_of_start():
    event = _event(
        MONDAY.replace(hour=10), MONDAY.replace(hour=11), "FREQ=DAILY;COUNT=2"
    )
    first = expand_event(event, WEEK)[0]

    expected_ms = int(datetime(2026, 3, 2, 10, tzinfo=timezone.utc).timestamp() * 1000)
    assert epoch_millis(first.start_time) == expected_ms
    assert first.id == f"{event.id}_{expected_ms}"
    assert first.id == occurrence_id(event.id, first.start_time)


def test_occurrence_starting_before_window_but_overlapping_is_kept():
    """A 22:00-02:00 instance on Saturday night runs into Sunday's window."""
    event = _event(
        datetime(2026, 2, 25, 22), datetime(2026, 2, 26, 2), "FREQ=DAILY"
    )
    occurrences = expand_event(event, WEEK)

    first = occurrences[0]
    assert first.start_time == datetime(2026, 2, 28, 22)
    assert first.end_time == datetime(2026, 3, 1, 2)
    assert all(o.end_time >= WEEK.start for o in occurrences)
    assert all(o.start_time <= WEEK.end for o in occurrences)


def test_series_bounds_are_carried_on_every_instance():
    event = _event(
        MONDAY.replace(hour=10), MONDAY.replace(hour=11), "FREQ=WEEKLY;BYDAY=MO,WE,FR"
    )
    occurrences = expand_event(event, WEEK)

    assert len(occurrences) == 3
    assert {o.series_start_time for o in occurrences} == {event.start_time}
    assert {o.series_end_time for o in occurrences} == {event.end_time}


def test_rule_exhausted_before_window_yields_nothing():
    event = _event(
        datetime(2025, 1, 6, 10), datetime(2025, 1, 6, 11), "FREQ=DAILY;COUNT=3"
    )
    assert expand_event(event, WEEK) == []


def test_rrule_prefix_is_accepted():
    event = _event(
        MONDAY.replace(hour=10), MONDAY.replace(hour=11), "RRULE:FREQ=DAILY;COUNT=2"
    )
    assert len(expand_event(event, WEEK)) == 2


def test_aware_event_expands_against_naive_window():
    start = datetime(2026, 3, 2, 12, tzinfo=timezone.utc)
    event = _event(start, start + timedelta(hours=1), "FREQ=DAILY;INTERVAL=2")
    assert event.start_time == _local(start)

    occurrences = expand_event(event, WEEK)

    assert len(occurrences) >= 3
    assert occurrences[0].start_time == _local(start)
    assert all(o.start_time.tzinfo is None for o in occurrences)
    assert all(o.is_recurring_instance for o in occurrences)
    for earlier, later in zip(occurrences, occurrences[1:]):
        assert later.start_time - earlier.start_time == timedelta(days=2)


def test_utc_until_bounds_the_series(caplog):
    first = MONDAY.replace(hour=10)
    event = _event(first, first + timedelta(hours=1), "FREQ=DAILY;UNTIL=20260305T000000Z")
    until = _local(datetime(2026, 3, 5, tzinfo=timezone.utc))
    expected = [
        first + timedelta(days=d) for d in range(6) if first + timedelta(days=d) <= until
    ]

    with caplog.at_level(logging.ERROR, logger="planner.services.recurrence"):
        occurrences = expand_event(event, WEEK)

    assert [o.start_time for o in occurrences] == expected
    assert len(occurrences) >= 3
    assert all(o.is_recurring_instance for o in occurrences)
    assert "Failed to expand" not in caplog.text


def test_local_until_bounds_the_series():
    first = MONDAY.replace(hour=10)
    event = _event(first, first + timedelta(hours=1), "FREQ=DAILY;UNTIL=20260304T000000")
    assert [o.start_time.day for o in expand_event(event, WEEK)] == [2, 3]


# ---------------------------------------------------------------------------
# Failure handling
# ---------------------------------------------------------------------------


def test_malformed_rule_shows_event_once(caplog):
    event = _event(MONDAY.replace(hour=10), MONDAY.replace(hour=11), "FREQ=SOMETIMES")

    with caplog.at_level(logging.ERROR, logger="planner.services.recurrence"):
        occurrences = expand_occurrences([event], WEEK)

    assert len(occurrences) == 1
    assert occurrences[0].id == event.id
    assert occurrences[0].is_recurring_instance is False
    assert "FREQ=SOMETIMES" in caplog.text


def test_rule_without_freq_shows_event_once():
    event = _event(MONDAY.replace(hour=10), MONDAY.replace(hour=11), "COUNT=3")
    assert [o.id for o in expand_occurrences([event], WEEK)] == [event.id]


def test_mixed_list_keeps_input_order():
    single = _event(MONDAY.replace(hour=8), MONDAY.replace(hour=9), title="Single")
    broken = _event(MONDAY.replace(hour=9), MONDAY.replace(hour=10), "garbage", title="Broken")
    daily = _event(
        MONDAY.replace(hour=10), MONDAY.replace(hour=11), "FREQ=DAILY;COUNT=2", title="Daily"
    )
    titles = [o.title for o in expand_occurrences([single, broken, daily], WEEK)]
    assert titles == ["Single", "Broken", "Daily", "Daily"]
