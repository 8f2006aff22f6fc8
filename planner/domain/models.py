"""Domain models for the calendar engine."""

from __future__ import annotations

import uuid
from datetime import date, datetime, timedelta, timezone
from enum import StrEnum

from pydantic import BaseModel, Field, field_validator, model_validator


class EventType(StrEnum):
    WORK = "WORK"
    MEETING = "MEETING"
    PERSONAL = "PERSONAL"
    APPOINTMENT = "APPOINTMENT"
    OTHER = "OTHER"


class ViewMode(StrEnum):
    WEEK = "week"
    MONTH = "month"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


def to_wall_clock(value: datetime | None) -> datetime | None:
    """Local naive wall-clock time for *value*.

    Aware datetimes are converted to the machine's local zone and stripped;
    naive ones are already wall-clock values and pass through.
    """
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Core domain models
# ---------------------------------------------------------------------------


class RecurrenceRule(BaseModel):
    """RRULE text such as ``FREQ=WEEKLY;BYDAY=MO,WE,FR``.

    The rule has no anchor of its own; it is always anchored at the owning
    event's ``start_time``.
    """

    rrule_text: str = Field(min_length=1)


class Event(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    description: str | None = None
    start_time: datetime
    end_time: datetime
    location: str | None = None
    event_type: EventType = EventType.OTHER
    is_all_day: bool = False
    team_id: str | None = None
    recurrence: RecurrenceRule | None = None
    created_at: datetime = Field(default_factory=_utcnow)

    wall_clock_times = field_validator("start_time", "end_time")(to_wall_clock)

    @model_validator(mode="after")
    def _end_not_before_start(self) -> Event:
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time


class EventOccurrence(Event):
    """One concrete instance of an event inside a view window.

    Never persisted. ``source_event_id`` points at the stored event so that
    edits made on a recurring instance land on the series.
    """

    source_event_id: str
    is_recurring_instance: bool = False
    series_start_time: datetime
    series_end_time: datetime

    wall_clock_series_times = field_validator("series_start_time", "series_end_time")(
        to_wall_clock
    )


class ViewWindow(BaseModel):
    """Half-open ``[start, end)`` range of whole days."""

    start: datetime
    end: datetime

    wall_clock_bounds = field_validator("start", "end")(to_wall_clock)


# ---------------------------------------------------------------------------
# Layout output
# ---------------------------------------------------------------------------


class LanePlacement(BaseModel):
    occurrence: EventOccurrence
    lane: int = Field(ge=0)
    start_column: int
    end_column: int
    left_pct: float
    width_pct: float
    top_px: float


class TimedPlacement(BaseModel):
    occurrence: EventOccurrence
    column: int
    top_px: float
    height_px: float


class MonthCell(BaseModel):
    day: date
    is_current_month: bool
    is_today: bool = False
    events: list[EventOccurrence] = Field(default_factory=list)
    overflow_count: int = 0


class WeekRow(BaseModel):
    days: list[date]
    lanes: list[LanePlacement] = Field(default_factory=list)


class MonthLayout(BaseModel):
    window: ViewWindow
    cells: list[MonthCell]
    weeks: list[WeekRow]


class WeekLayout(BaseModel):
    window: ViewWindow
    days: list[date]
    all_day: list[LanePlacement] = Field(default_factory=list)
    timed: list[TimedPlacement] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Mutation payloads
# ---------------------------------------------------------------------------


class EventCreate(BaseModel):
    title: str = Field(min_length=1)
    description: str | None = None
    start_time: datetime
    end_time: datetime
    location: str | None = None
    event_type: EventType = EventType.OTHER
    is_all_day: bool = False
    team_id: str | None = None
    recurrence: RecurrenceRule | None = None

    wall_clock_times = field_validator("start_time", "end_time")(to_wall_clock)

    @model_validator(mode="after")
    def _end_not_before_start(self) -> EventCreate:
        if self.end_time < self.start_time:
            raise ValueError("end_time must not be before start_time")
        return self


class EventUpdate(BaseModel):
    """Partial update; only explicitly set fields are applied."""

    title: str | None = Field(default=None, min_length=1)
    description: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    location: str | None = None
    event_type: EventType | None = None
    is_all_day: bool | None = None
    team_id: str | None = None
    recurrence: RecurrenceRule | None = None

    wall_clock_times = field_validator("start_time", "end_time")(to_wall_clock)


class EventDraft(BaseModel):
    """Prefilled times for the create dialog."""

    start_time: datetime
    end_time: datetime
    is_all_day: bool = False

    wall_clock_times = field_validator("start_time", "end_time")(to_wall_clock)
