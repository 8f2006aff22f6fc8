"""In-memory event store standing in for the persistence collaborator."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from planner.domain.errors import EventNotFoundError, MutationError
from planner.domain.models import Event, EventCreate, EventUpdate

logger = logging.getLogger(__name__)


class EventRepository:
    """Dict-backed store for Event instances, keyed by id.

    ``create``/``update``/``delete`` are the mutation surface the interaction
    controller talks to; they raise ``MutationError`` on rejection and leave
    the stored event untouched.
    """

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def add(self, event: Event) -> None:
        self._store[event.id] = event

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def list_all(self) -> list[Event]:
        return sorted(self._store.values(), key=lambda e: e.start_time)

    def create(self, payload: EventCreate) -> Event:
        event = Event(**payload.model_dump())
        self._store[event.id] = event
        logger.info("Created event %s (%s)", event.id, event.title)
        return event

    def update(self, event_id: str, payload: EventUpdate) -> Event:
        stored = self._store.get(event_id)
        if stored is None:
            raise EventNotFoundError(event_id)

        changes = payload.model_dump(exclude_unset=True)
        try:
            updated = Event(**{**stored.model_dump(), **changes})
        except ValidationError as exc:
            raise MutationError(exc.errors()[0]["msg"]) from exc

        self._store[event_id] = updated
        logger.info("Updated event %s fields=%s", event_id, sorted(changes))
        return updated

    def delete(self, event_id: str) -> None:
        if self._store.pop(event_id, None) is None:
            raise EventNotFoundError(event_id)
        logger.info("Deleted event %s", event_id)
