"""Errors raised by the event store."""

from __future__ import annotations


class MutationError(Exception):
    """A create, update or delete could not be applied."""


class EventNotFoundError(MutationError):
    def __init__(self, event_id: str) -> None:
        super().__init__(f"Event not found: {event_id}")
        self.event_id = event_id
