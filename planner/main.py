"""FastAPI application: HTTP shell over the event store and calendar views."""

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import FastAPI, HTTPException

from planner.config import settings
from planner.domain.errors import EventNotFoundError, MutationError
from planner.domain.models import (
    Event,
    EventCreate,
    EventOccurrence,
    EventUpdate,
    MonthLayout,
    ViewMode,
    ViewWindow,
    WeekLayout,
)
from planner.repos.memory import EventRepository
from planner.services.calendar_view import CalendarView
from planner.services.dates import resolve_anchor

logging.basicConfig(level=settings.log_level)

app = FastAPI(title="Planner Calendar Service")

# ── Singletons (created at import time for simplicity) ────────────────
event_repo = EventRepository()


def _view(mode: ViewMode, anchor: str | None) -> CalendarView:
    now = datetime.now()
    selected = resolve_anchor(anchor, now)
    if selected is None:
        raise HTTPException(status_code=400, detail="Could not understand anchor date")
    return CalendarView(
        event_repo.list_all,
        settings=settings,
        mode=mode,
        selected_date=selected,
        clock=lambda: now,
    )


# ── Events ────────────────────────────────────────────────────────────


@app.get("/events", response_model=list[Event])
def list_events() -> list[Event]:
    """Return all stored events, earliest first."""
    return event_repo.list_all()


@app.post("/events", response_model=Event)
def create_event(payload: EventCreate) -> Event:
    return event_repo.create(payload)


@app.get("/events/{event_id}", response_model=Event)
def get_event(event_id: str) -> Event:
    """Return a single event by id."""
    event = event_repo.get(event_id)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


@app.patch("/events/{event_id}", response_model=Event)
def update_event(event_id: str, payload: EventUpdate) -> Event:
    """Apply the fields present in the body; absent fields are left alone."""
    try:
        return event_repo.update(event_id, payload)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")
    except MutationError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@app.delete("/events/{event_id}", status_code=200)
def delete_event(event_id: str) -> dict:
    try:
        event_repo.delete(event_id)
    except EventNotFoundError:
        raise HTTPException(status_code=404, detail="Event not found")
    return {"status": "deleted"}


# ── Calendar ──────────────────────────────────────────────────────────


@app.get("/calendar/window", response_model=ViewWindow)
def get_window(mode: ViewMode = ViewMode.WEEK, anchor: str | None = None) -> ViewWindow:
    """Return the ``[start, end)`` window for *mode* around *anchor*."""
    return _view(mode, anchor).window


@app.get("/calendar/occurrences", response_model=list[EventOccurrence])
def list_occurrences(
    mode: ViewMode = ViewMode.WEEK, anchor: str | None = None
) -> list[EventOccurrence]:
    """Stored events expanded into concrete occurrences for the window."""
    return _view(mode, anchor).occurrences()


@app.get("/calendar/month", response_model=MonthLayout)
def month_layout(anchor: str | None = None) -> MonthLayout:
    return _view(ViewMode.MONTH, anchor).month_layout()


@app.get("/calendar/week", response_model=WeekLayout)
def week_layout(anchor: str | None = None) -> WeekLayout:
    return _view(ViewMode.WEEK, anchor).week_layout()
