"""Pointer and keyboard interaction on the calendar grid.

The controller owns a single session value (see ``planner.domain.sessions``)
and turns finished gestures into create/update/delete calls on the event
store. Nothing is applied optimistically: the view is refreshed from the
store only after a mutation succeeds.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Protocol

from pydantic import ValidationError

from planner.domain.bus import EventBus
from planner.domain.errors import MutationError
from planner.domain.events import (
    EventCreated,
    EventDeleted,
    EventUpdated,
    MutationFailed,
    ViewChanged,
)
from planner.domain.models import (
    Event,
    EventCreate,
    EventDraft,
    EventOccurrence,
    EventUpdate,
    ViewMode,
)
from planner.domain.sessions import (
    Dragging,
    Idle,
    QuickAdding,
    Resizing,
    ScreenPoint,
    Selecting,
    SessionState,
)
from planner.services.calendar_view import CalendarView
from planner.services.timegrid import TimeGridMapper

logger = logging.getLogger(__name__)

ERROR_MESSAGES = {
    "create": "Could not create the event. Please try again.",
    "update": "Could not save your changes to the event. Please try again.",
    "delete": "Could not delete the event. Please try again.",
}


class EventStore(Protocol):
    def create(self, payload: EventCreate) -> Event: ...

    def update(self, event_id: str, payload: EventUpdate) -> Event: ...

    def delete(self, event_id: str) -> None: ...


class InteractionController:
    def __init__(
        self,
        store: EventStore,
        bus: EventBus,
        view: CalendarView,
        mapper: TimeGridMapper | None = None,
    ) -> None:
        self.store = store
        self.bus = bus
        self.view = view
        self.mapper = mapper or view.mapper
        self.session: SessionState = Idle()
        self.dialog: EventDraft | None = None
        self.error: str | None = None

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------

    @property
    def is_idle(self) -> bool:
        return isinstance(self.session, Idle)

    def _start(self, session: SessionState) -> None:
        if not self.is_idle:
            logger.debug("Cancelling %s to start %s", self.session.kind, session.kind)
        self.session = session

    def _finish(self) -> None:
        self.session = Idle()

    def cancel(self) -> bool:
        """Escape or a click outside: drop any gesture, popover or dialog.

        Returns whether there was anything to drop.
        """
        had_state = not self.is_idle or self.dialog is not None
        self._finish()
        self.dialog = None
        return had_state

    def _at(self, day: date, hour: int = 0) -> datetime:
        return datetime.combine(day, time(hour))

    # ------------------------------------------------------------------
    # Month grid: drag across days to create
    # ------------------------------------------------------------------

    def begin_selection(self, day: date) -> None:
        self._start(Selecting(anchor_date=day, current_date=day))

    def extend_selection(self, day: date) -> None:
        if isinstance(self.session, Selecting):
            self.session = self.session.model_copy(update={"current_date": day})

    def end_selection(self) -> EventDraft | None:
        """Finish the selection and open the create dialog for the selected days."""
        if not isinstance(self.session, Selecting):
            return None
        first, last = sorted((self.session.anchor_date, self.session.current_date))
        self._finish()
        self.dialog = EventDraft(
            start_time=self._at(first),
            end_time=self._at(last + timedelta(days=1)),
            is_all_day=True,
        )
        return self.dialog

    # ------------------------------------------------------------------
    # Week grid: move
    # ------------------------------------------------------------------

    def begin_drag(self, occurrence: EventOccurrence, grab_offset_px: float = 0.0) -> None:
        top = self.mapper.time_to_offset(occurrence.start_time)
        self._start(
            Dragging(
                occurrence=occurrence,
                grab_offset_px=grab_offset_px,
                current_date=occurrence.start_time.date(),
                current_offset_px=top + grab_offset_px,
            )
        )

    def update_drag(self, day: date, pointer_px: float) -> None:
        if isinstance(self.session, Dragging):
            self.session = self.session.model_copy(
                update={"current_date": day, "current_offset_px": pointer_px}
            )

    def drop(self, day: date | None = None, pointer_px: float | None = None) -> Event | None:
        """Drop the dragged event; the start snaps, the duration is kept.

        A recurring instance shifts its whole series by the same amount.
        """
        session = self.session
        if not isinstance(session, Dragging):
            return None
        self._finish()

        day = day or session.current_date
        pointer_px = session.current_offset_px if pointer_px is None else pointer_px
        occ = session.occurrence
        new_start, _ = self.mapper.move(
            occ, pointer_px - session.grab_offset_px, self._at(day)
        )
        delta = new_start - occ.start_time
        if not delta:
            return None

        payload = EventUpdate(
            start_time=occ.series_start_time + delta,
            end_time=occ.series_end_time + delta,
        )
        return self._mutate(
            "update",
            occ.source_event_id,
            lambda: self.store.update(occ.source_event_id, payload),
            fields=["start_time", "end_time"],
        )

    # ------------------------------------------------------------------
    # Week grid: resize the end
    # ------------------------------------------------------------------

    def begin_resize(self, occurrence: EventOccurrence, pointer_px: float) -> None:
        height = self.mapper.event_height(occurrence.start_time, occurrence.end_time)
        self._start(
            Resizing(
                occurrence=occurrence,
                origin_offset_px=pointer_px,
                origin_height_px=height,
                height_px=height,
            )
        )

    def update_resize(self, pointer_px: float) -> None:
        session = self.session
        if isinstance(session, Resizing):
            height = session.origin_height_px + pointer_px - session.origin_offset_px
            self.session = session.model_copy(
                update={"height_px": max(self.mapper.min_height_px, height)}
            )

    def end_resize(self) -> Event | None:
        """Commit the new end time; the start is never touched."""
        session = self.session
        if not isinstance(session, Resizing):
            return None
        self._finish()

        occ = session.occurrence
        new_duration = self.mapper.resize_end(occ, session.height_px) - occ.start_time
        if new_duration == occ.duration:
            return None

        payload = EventUpdate(end_time=occ.series_start_time + new_duration)
        return self._mutate(
            "update",
            occ.source_event_id,
            lambda: self.store.update(occ.source_event_id, payload),
            fields=["end_time"],
        )

    # ------------------------------------------------------------------
    # Week grid: click to quick-add
    # ------------------------------------------------------------------

    def begin_quick_add(
        self, day: date, pointer_px: float, position: ScreenPoint | None = None
    ) -> QuickAdding:
        start, end = self.mapper.quick_add_range(pointer_px, self._at(day))
        session = QuickAdding(
            start_time=start,
            end_time=end,
            position=position or ScreenPoint(x=0, y=pointer_px),
        )
        self._start(session)
        return session

    def confirm_quick_add(self, title: str, **fields: Any) -> Event | None:
        """Create the quick-add event.

        A blank title keeps the popover open; so does invalid input, which
        also sets ``error``.
        """
        session = self.session
        if not isinstance(session, QuickAdding) or not title.strip():
            return None
        try:
            payload = EventCreate(
                title=title.strip(),
                start_time=session.start_time,
                end_time=session.end_time,
                **fields,
            )
        except ValidationError as exc:
            self.error = exc.errors()[0]["msg"]
            return None

        self._finish()
        return self._mutate("create", None, lambda: self.store.create(payload))

    # ------------------------------------------------------------------
    # Create dialog
    # ------------------------------------------------------------------

    def open_create_dialog(self, day: date | None = None) -> EventDraft:
        self._finish()
        day = day or self.view.selected_date.date()
        start = self._at(day, self.view.settings.default_event_hour)
        self.dialog = EventDraft(start_time=start, end_time=start + timedelta(hours=1))
        return self.dialog

    def submit_dialog(self, title: str, **fields: Any) -> Event | None:
        """Create an event from the open dialog.

        Invalid input keeps the dialog open and sets ``error``.
        """
        draft = self.dialog
        if draft is None or not title.strip():
            return None
        data = {**draft.model_dump(), **fields}
        try:
            payload = EventCreate(title=title.strip(), **data)
        except ValidationError as exc:
            self.error = exc.errors()[0]["msg"]
            return None

        self.dialog = None
        return self._mutate("create", None, lambda: self.store.create(payload))

    def close_dialog(self) -> None:
        self.dialog = None

    def delete_occurrence(self, occurrence: EventOccurrence) -> bool:
        """Delete the stored event behind *occurrence* (the whole series if recurring)."""
        self._finish()
        event_id = occurrence.source_event_id
        self._mutate("delete", event_id, lambda: self.store.delete(event_id))
        return self.error is None

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def _navigated(self) -> None:
        self.bus.publish(
            ViewChanged(mode=self.view.mode, anchor=self.view.selected_date.isoformat())
        )

    def go_to_today(self) -> None:
        self.view.go_to_today()
        self._navigated()

    def set_view_mode(self, mode: ViewMode | str) -> None:
        self.view.set_mode(mode)
        self._navigated()

    def navigate_prev(self) -> None:
        self.view.navigate_prev()
        self._navigated()

    def navigate_next(self) -> None:
        self.view.navigate_next()
        self._navigated()

    # ------------------------------------------------------------------
    # Keyboard
    # ------------------------------------------------------------------

    def _shortcuts(self) -> dict[str, Callable[[], Any]]:
        return {
            "n": self.open_create_dialog,
            "t": self.go_to_today,
            "w": lambda: self.set_view_mode(ViewMode.WEEK),
            "m": lambda: self.set_view_mode(ViewMode.MONTH),
            "ArrowLeft": self.navigate_prev,
            "ArrowRight": self.navigate_next,
        }

    def handle_key(
        self,
        key: str,
        input_focused: bool = False,
        ctrl: bool = False,
        alt: bool = False,
    ) -> bool:
        """Run the shortcut bound to *key*; return whether it was handled.

        Shortcuts are ignored while typing, while a dialog or the quick-add
        popover is open, and with modifier keys held. Escape always cancels.
        """
        if key == "Escape":
            return self.cancel()
        if input_focused or ctrl or alt:
            return False
        if self.dialog is not None or isinstance(self.session, QuickAdding):
            return False

        action = self._shortcuts().get(key if len(key) > 1 else key.lower())
        if action is None:
            return False
        action()
        return True

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _mutate(
        self,
        action: str,
        event_id: str | None,
        call: Callable[[], Event | None],
        fields: list[str] | None = None,
    ) -> Event | None:
        self.error = None
        try:
            result = call()
        except MutationError as exc:
            self.error = ERROR_MESSAGES[action]
            self.bus.publish(
                MutationFailed(action=action, event_id=event_id, message=str(exc))
            )
            return None

        if action == "create":
            self.bus.publish(EventCreated(event_id=result.id))
        elif action == "update":
            self.bus.publish(EventUpdated(event_id=event_id, fields=fields or []))
        else:
            self.bus.publish(EventDeleted(event_id=event_id))
        return result
