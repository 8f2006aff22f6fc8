"""Domain-event handlers, wired to the bus when the calendar is assembled."""

from __future__ import annotations

import logging

from planner.domain.bus import EventBus
from planner.domain.events import (
    EventCreated,
    EventDeleted,
    EventUpdated,
    MutationFailed,
    ViewChanged,
)
from planner.services.calendar_view import CalendarView

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """Wires domain-event handlers to the bus with access to the calendar view."""

    def __init__(self, bus: EventBus, view: CalendarView) -> None:
        self.bus = bus
        self.view = view
        self.errors: list[MutationFailed] = []
        self._register()

    def _register(self) -> None:
        self.bus.subscribe(EventCreated, self.on_event_changed)
        self.bus.subscribe(EventUpdated, self.on_event_changed)
        self.bus.subscribe(EventDeleted, self.on_event_changed)
        self.bus.subscribe(MutationFailed, self.on_mutation_failed)
        self.bus.subscribe(ViewChanged, self.on_view_changed)

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def on_event_changed(self, event: EventCreated | EventUpdated | EventDeleted) -> None:
        # The store is the source of truth; re-read it on the next render.
        logger.info("%s for %s, refreshing view", type(event).__name__, event.event_id)
        self.view.invalidate()

    def on_mutation_failed(self, event: MutationFailed) -> None:
        logger.warning(
            "%s failed for %s: %s", event.action, event.event_id or "new event", event.message
        )
        self.errors.append(event)

    def on_view_changed(self, event: ViewChanged) -> None:
        logger.debug("View changed to %s around %s", event.mode, event.anchor)
