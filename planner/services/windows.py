"""View window math for the week and month grids.

Weeks start on Sunday. All arithmetic is on local naive wall-clock values;
an aware anchor is converted to local time first.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime, timedelta

from planner.domain.models import ViewMode, ViewWindow, to_wall_clock

MONTH_GRID_CELLS = 42  # 6 rows x 7 days


def start_of_day(moment: datetime) -> datetime:
    return moment.replace(hour=0, minute=0, second=0, microsecond=0)


def _days_since_sunday(day: date) -> int:
    # date.weekday(): Monday == 0 ... Sunday == 6
    return (day.weekday() + 1) % 7


def week_start(anchor: datetime) -> datetime:
    """Midnight of the Sunday on or before *anchor*."""
    midnight = start_of_day(anchor)
    return midnight - timedelta(days=_days_since_sunday(midnight.date()))


def compute_window(mode: ViewMode | str, anchor: datetime) -> ViewWindow:
    """Return the ``[start, end)`` window rendered for *mode* around *anchor*.

    Week: Sunday 00:00 through the following Sunday 00:00.
    Month: the Sunday on/before the 1st through the day after the Saturday
    on/after the last day, so the span is a whole number of weeks.
    """
    anchor = to_wall_clock(anchor)
    mode = ViewMode(mode)
    if mode == ViewMode.WEEK:
        start = week_start(anchor)
        return ViewWindow(start=start, end=start + timedelta(days=7))

    first = start_of_day(anchor).replace(day=1)
    start = first - timedelta(days=_days_since_sunday(first.date()))

    last_day = calendar.monthrange(anchor.year, anchor.month)[1]
    last = first.replace(day=last_day)
    saturday = last + timedelta(days=6 - _days_since_sunday(last.date()))
    return ViewWindow(start=start, end=saturday + timedelta(days=1))


def week_dates(anchor: datetime | date) -> list[date]:
    """The seven dates, Sunday to Saturday, of the week containing *anchor*."""
    day = to_wall_clock(anchor).date() if isinstance(anchor, datetime) else anchor
    sunday = day - timedelta(days=_days_since_sunday(day))
    return [sunday + timedelta(days=i) for i in range(7)]


def month_dates(anchor: datetime | date) -> list[tuple[date, bool]]:
    """The 42 cells of the month grid as ``(date, is_current_month)`` pairs."""
    if isinstance(anchor, datetime):
        anchor = to_wall_clock(anchor)
    first = date(anchor.year, anchor.month, 1)
    last_day = calendar.monthrange(anchor.year, anchor.month)[1]

    cells: list[tuple[date, bool]] = []
    for offset in range(_days_since_sunday(first), 0, -1):
        cells.append((first - timedelta(days=offset), False))
    for day in range(1, last_day + 1):
        cells.append((date(anchor.year, anchor.month, day), True))

    last = date(anchor.year, anchor.month, last_day)
    remaining = MONTH_GRID_CELLS - len(cells)
    for offset in range(1, remaining + 1):
        cells.append((last + timedelta(days=offset), False))
    return cells


def shift_period(mode: ViewMode | str, anchor: datetime, step: int) -> datetime:
    """Move *anchor* by *step* weeks or months.

    In month mode the day of month is clamped, so Jan 31 + 1 month is Feb 28/29.
    """
    mode = ViewMode(mode)
    if mode == ViewMode.WEEK:
        return anchor + timedelta(days=7 * step)

    month_index = anchor.year * 12 + (anchor.month - 1) + step
    year, month = divmod(month_index, 12)
    month += 1
    day = min(anchor.day, calendar.monthrange(year, month)[1])
    return anchor.replace(year=year, month=month, day=day)
