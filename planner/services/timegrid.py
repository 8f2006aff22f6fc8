"""Wall-clock time <-> pixel mapping for the week view's day columns."""

from __future__ import annotations

import math
from datetime import date, datetime, time, timedelta
from typing import Iterable

from planner.config import Settings, settings as default_settings
from planner.domain.models import EventOccurrence, TimedPlacement
from planner.services.buckets import is_multi_day


def _midnight(day: date | datetime) -> datetime:
    if isinstance(day, datetime):
        return day.replace(hour=0, minute=0, second=0, microsecond=0)
    return datetime.combine(day, time())


class TimeGridMapper:
    """Maps times to vertical offsets at a fixed scale and snaps pointer input.

    With the default settings one hour is 50px, so one minute is 50/60px, and
    pointer positions snap to the nearest 15 minutes.
    """

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or default_settings
        self.pixels_per_minute = self.settings.pixels_per_hour / 60
        self.snap = self.settings.snap_minutes
        self.min_height_px = self.settings.min_event_height_px

    # ------------------------------------------------------------------
    # Scale
    # ------------------------------------------------------------------

    def minutes_to_pixels(self, minutes: float) -> float:
        return minutes * self.pixels_per_minute

    def pixels_to_minutes(self, pixels: float) -> float:
        return pixels / self.pixels_per_minute

    def snap_minutes(self, minutes: float) -> int:
        # Halves round up: 7.5 minutes snaps to 15.
        return int(math.floor(minutes / self.snap + 0.5)) * self.snap

    # ------------------------------------------------------------------
    # Mapping
    # ------------------------------------------------------------------

    def time_to_offset(self, instant: datetime) -> float:
        return self.minutes_to_pixels(instant.hour * 60 + instant.minute)

    def offset_to_time(self, pixels: float, day: date | datetime) -> datetime:
        """Snapped time at *pixels* below the top of *day*'s column.

        Offsets above the column clamp to midnight.
        """
        minutes = max(0, self.snap_minutes(self.pixels_to_minutes(pixels)))
        return _midnight(day) + timedelta(minutes=minutes)

    def event_height(self, start: datetime, end: datetime) -> float:
        minutes = (end - start).total_seconds() / 60
        return max(self.min_height_px, self.minutes_to_pixels(minutes))

    # ------------------------------------------------------------------
    # Gestures
    # ------------------------------------------------------------------

    def resize_end(self, occurrence: EventOccurrence, height_px: float) -> datetime:
        """New end for a bottom-edge drag to *height_px*; the start never moves."""
        height = max(self.min_height_px, height_px)
        minutes = self.snap_minutes(self.pixels_to_minutes(height))
        return occurrence.start_time + timedelta(minutes=minutes)

    def move(
        self, occurrence: EventOccurrence, pixels: float, day: date | datetime
    ) -> tuple[datetime, datetime]:
        """New ``(start, end)`` for a drop at *pixels* on *day*; duration is kept."""
        start = self.offset_to_time(pixels, day)
        return start, start + occurrence.duration

    def quick_add_range(
        self, pixels: float, day: date | datetime
    ) -> tuple[datetime, datetime]:
        start = self.offset_to_time(pixels, day)
        return start, start + timedelta(minutes=self.settings.quick_add_minutes)

    # ------------------------------------------------------------------
    # Layout
    # ------------------------------------------------------------------

    def place_timed(
        self,
        occurrences: Iterable[EventOccurrence],
        week_start: date | datetime,
    ) -> list[TimedPlacement]:
        """Placements for single-day, non-all-day occurrences in the week."""
        first = week_start.date() if isinstance(week_start, datetime) else week_start
        placements: list[TimedPlacement] = []
        for occ in sorted(occurrences, key=lambda o: o.start_time):
            if occ.is_all_day or is_multi_day(occ):
                continue
            column = (occ.start_time.date() - first).days
            if not 0 <= column < 7:
                continue
            placements.append(
                TimedPlacement(
                    occurrence=occ,
                    column=column,
                    top_px=self.time_to_offset(occ.start_time),
                    height_px=self.event_height(occ.start_time, occ.end_time),
                )
            )
        return placements
