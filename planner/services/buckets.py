"""Per-day bucketing of occurrences for month cells."""

from __future__ import annotations

from datetime import date, datetime
from typing import Iterable

from planner.domain.models import EventOccurrence, MonthCell

DEFAULT_VISIBLE_EVENTS = 3


def is_multi_day(occurrence: EventOccurrence) -> bool:
    return occurrence.start_time.date() != occurrence.end_time.date()


def bucket_for_day(
    occurrences: Iterable[EventOccurrence], day: date
) -> list[EventOccurrence]:
    """Single-day occurrences starting on *day*, ordered by start time.

    Multi-day occurrences are laid out in lanes instead, see
    ``multi_day_for_range``.
    """
    bucket = [
        occ
        for occ in occurrences
        if not is_multi_day(occ) and occ.start_time.date() == day
    ]
    return sorted(bucket, key=lambda occ: occ.start_time)


def multi_day_for_range(
    occurrences: Iterable[EventOccurrence],
    start: datetime,
    end: datetime,
    include_all_day: bool = False,
) -> list[EventOccurrence]:
    """Multi-day occurrences overlapping ``[start, end)``, in input order.

    With *include_all_day*, single-day all-day occurrences are included too
    (the week view shows them in its all-day row).
    """
    selected: list[EventOccurrence] = []
    for occ in occurrences:
        if not (is_multi_day(occ) or (include_all_day and occ.is_all_day)):
            continue
        # Zero-length occurrences at start still belong to the range.
        if occ.start_time < end and (occ.end_time > start or occ.start_time >= start):
            selected.append(occ)
    return selected


def visible_and_overflow(
    bucket: list[EventOccurrence], limit: int = DEFAULT_VISIBLE_EVENTS
) -> tuple[list[EventOccurrence], int]:
    """Split a day's bucket into what fits in the cell and the "+N more" count."""
    return bucket[:limit], max(0, len(bucket) - limit)


def month_cell(
    occurrences: Iterable[EventOccurrence],
    day: date,
    is_current_month: bool,
    today: date | None = None,
    limit: int = DEFAULT_VISIBLE_EVENTS,
) -> MonthCell:
    visible, overflow = visible_and_overflow(bucket_for_day(occurrences, day), limit)
    return MonthCell(
        day=day,
        is_current_month=is_current_month,
        is_today=today == day,
        events=visible,
        overflow_count=overflow,
    )
