"""Lane assignment for multi-day occurrences within one displayed week."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta
from typing import Iterable

from planner.domain.models import EventOccurrence, LanePlacement

DAYS_PER_WEEK = 7


def overlaps(a: EventOccurrence, b: EventOccurrence) -> bool:
    """Half-open overlap; touching ends (a.end == b.start) do not collide."""
    return not (a.start_time >= b.end_time or a.end_time <= b.start_time)


def assign_lanes(occurrences: Iterable[EventOccurrence]) -> dict[str, int]:
    """Greedy interval colouring: map occurrence id to a display row.

    Occurrences are taken in start order (ties keep input order) and each one
    goes into the lowest lane none of whose members it overlaps. No two
    overlapping occurrences share a lane, and the lane count is minimal.
    """
    ordered = sorted(occurrences, key=lambda occ: occ.start_time)
    lanes: list[list[EventOccurrence]] = []
    assignment: dict[str, int] = {}

    for occ in ordered:
        for index, members in enumerate(lanes):
            if not any(overlaps(occ, member) for member in members):
                members.append(occ)
                assignment[occ.id] = index
                break
        else:
            lanes.append([occ])
            assignment[occ.id] = len(lanes) - 1

    return assignment


def lane_count(assignment: dict[str, int]) -> int:
    return max(assignment.values()) + 1 if assignment else 0


def effective_end_date(occurrence: EventOccurrence) -> date:
    """Last calendar day the occurrence is drawn on.

    An end at exactly midnight does not reach into that day: 10:00 Monday to
    00:00 Tuesday covers Monday only.
    """
    end = occurrence.end_time
    if end.time() == time(0, 0) and end.date() > occurrence.start_time.date():
        return end.date() - timedelta(days=1)
    return end.date()


def week_span(
    occurrence: EventOccurrence, week_start: date | datetime
) -> tuple[int, int]:
    """Day-of-week columns (0 = Sunday) covered inside the week, clamped to 0..6."""
    first = week_start.date() if isinstance(week_start, datetime) else week_start
    start_col = (occurrence.start_time.date() - first).days
    end_col = (effective_end_date(occurrence) - first).days
    start_col = max(0, min(DAYS_PER_WEEK - 1, start_col))
    end_col = max(start_col, min(DAYS_PER_WEEK - 1, end_col))
    return start_col, end_col


def place_week_lanes(
    occurrences: Iterable[EventOccurrence],
    week_start: date | datetime,
    lane_height_px: float,
) -> list[LanePlacement]:
    """Position each occurrence horizontally by day span and vertically by lane."""
    occurrences = list(occurrences)
    assignment = assign_lanes(occurrences)

    placements: list[LanePlacement] = []
    for occ in sorted(occurrences, key=lambda o: o.start_time):
        start_col, end_col = week_span(occ, week_start)
        lane = assignment[occ.id]
        placements.append(
            LanePlacement(
                occurrence=occ,
                lane=lane,
                start_column=start_col,
                end_column=end_col,
                left_pct=start_col / DAYS_PER_WEEK * 100,
                width_pct=(end_col - start_col + 1) / DAYS_PER_WEEK * 100,
                top_px=lane * lane_height_px,
            )
        )
    return placements
