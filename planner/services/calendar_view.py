"""Calendar view state and the render pipeline.

window -> recurrence expansion -> day buckets / lanes -> time grid.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Callable

from planner.config import Settings, settings as default_settings
from planner.domain.models import (
    Event,
    EventOccurrence,
    MonthLayout,
    ViewMode,
    ViewWindow,
    WeekLayout,
    WeekRow,
    to_wall_clock,
)
from planner.services.buckets import month_cell, multi_day_for_range
from planner.services.lanes import place_week_lanes
from planner.services.recurrence import expand_occurrences
from planner.services.timegrid import TimeGridMapper
from planner.services.windows import (
    compute_window,
    month_dates,
    shift_period,
    week_dates,
)

logger = logging.getLogger(__name__)


class CalendarView:
    """What the calendar is currently showing, plus the layouts derived from it.

    Expanded occurrences are cached per window until ``invalidate`` is called
    (after a mutation) or the window changes.
    """

    def __init__(
        self,
        fetch_events: Callable[[], list[Event]],
        settings: Settings | None = None,
        mode: ViewMode = ViewMode.MONTH,
        selected_date: datetime | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.settings = settings or default_settings
        self.mapper = TimeGridMapper(self.settings)
        self._fetch_events = fetch_events
        self._clock = clock
        self.mode = ViewMode(mode)
        self.selected_date = to_wall_clock(selected_date or clock())
        self._occurrences: list[EventOccurrence] | None = None
        self.refresh_count = 0

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    @property
    def window(self) -> ViewWindow:
        return compute_window(self.mode, self.selected_date)

    def set_mode(self, mode: ViewMode | str) -> None:
        self.mode = ViewMode(mode)
        self._occurrences = None

    def select_date(self, moment: datetime) -> None:
        self.selected_date = to_wall_clock(moment)
        self._occurrences = None

    def navigate_prev(self) -> None:
        self.select_date(shift_period(self.mode, self.selected_date, -1))

    def navigate_next(self) -> None:
        self.select_date(shift_period(self.mode, self.selected_date, 1))

    def go_to_today(self) -> None:
        self.select_date(self._clock())

    def invalidate(self) -> None:
        """Drop cached occurrences so the next read refetches from the store."""
        self._occurrences = None
        self.refresh_count += 1
        logger.debug("Calendar view invalidated (refresh #%d)", self.refresh_count)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def occurrences(self) -> list[EventOccurrence]:
        if self._occurrences is None:
            self._occurrences = expand_occurrences(self._fetch_events(), self.window)
        return self._occurrences

    def month_layout(self, today: date | None = None) -> MonthLayout:
        window = compute_window(ViewMode.MONTH, self.selected_date)
        occurrences = (
            self.occurrences()
            if self.mode == ViewMode.MONTH
            else expand_occurrences(self._fetch_events(), window)
        )
        today = today or to_wall_clock(self._clock()).date()
        limit = self.settings.month_visible_events

        cells = [
            month_cell(occurrences, day, is_current, today, limit)
            for day, is_current in month_dates(self.selected_date)
        ]

        weeks: list[WeekRow] = []
        for row in range(len(cells) // 7):
            row_start = window.start + timedelta(days=7 * row)
            row_end = row_start + timedelta(days=7)
            weeks.append(
                WeekRow(
                    days=[cell.day for cell in cells[row * 7 : row * 7 + 7]],
                    lanes=place_week_lanes(
                        multi_day_for_range(occurrences, row_start, row_end),
                        row_start,
                        self.settings.lane_height_px,
                    ),
                )
            )
        return MonthLayout(window=window, cells=cells, weeks=weeks)

    def week_layout(self) -> WeekLayout:
        window = compute_window(ViewMode.WEEK, self.selected_date)
        occurrences = (
            self.occurrences()
            if self.mode == ViewMode.WEEK
            else expand_occurrences(self._fetch_events(), window)
        )
        all_day = place_week_lanes(
            multi_day_for_range(
                occurrences, window.start, window.end, include_all_day=True
            ),
            window.start,
            self.settings.lane_height_px,
        )
        return WeekLayout(
            window=window,
            days=week_dates(window.start),
            all_day=all_day,
            timed=self.mapper.place_timed(occurrences, window.start),
        )
