"""Domain events published when the calendar changes."""

from __future__ import annotations

from pydantic import BaseModel

from planner.domain.models import ViewMode


class EventCreated(BaseModel):
    """Fired after the store accepted a new event."""

    event_id: str


class EventUpdated(BaseModel):
    """Fired after the store applied an update.

    ``fields`` lists the names that were sent, e.g. ``["end_time"]`` for a resize.
    """

    event_id: str
    fields: list[str]


class EventDeleted(BaseModel):
    event_id: str


class MutationFailed(BaseModel):
    """Fired when the store rejected a mutation; nothing was changed."""

    action: str
    event_id: str | None = None
    message: str


class ViewChanged(BaseModel):
    """Fired when the user navigates or switches view mode."""

    mode: ViewMode
    anchor: str
