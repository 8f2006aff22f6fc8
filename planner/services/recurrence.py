"""Service for expanding stored events into concrete occurrences inside a
view window."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Iterable

from dateutil.rrule import rrulestr

from planner.domain.models import Event, EventOccurrence, ViewWindow, to_wall_clock

logger = logging.getLogger(__name__)

_UTC_UNTIL = re.compile(r"(UNTIL=)(\d{8}T\d{6})Z", re.IGNORECASE)
_RRULE_STAMP = "%Y%m%dT%H%M%S"


def epoch_millis(moment: datetime) -> int:
    """Milliseconds since the epoch.

    Naive datetimes are wall-clock values and are read as UTC, so the result
    does not depend on the machine's local zone.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return int(moment.timestamp() * 1000)


def occurrence_id(event_id: str, start: datetime) -> str:
    return f"{event_id}_{epoch_millis(start)}"


def occurrence_from_event(event: Event) -> EventOccurrence:
    """Wrap *event* unchanged, keeping its own id."""
    return EventOccurrence(
        **event.model_dump(),
        source_event_id=event.id,
        series_start_time=event.start_time,
        series_end_time=event.end_time,
    )


def _local_until(match: re.Match) -> str:
    until = datetime.strptime(match.group(2), _RRULE_STAMP).replace(tzinfo=timezone.utc)
    return match.group(1) + to_wall_clock(until).strftime(_RRULE_STAMP)


def build_rule(event: Event):
    """Parse the event's RRULE text anchored at its own start.

    A UTC ``UNTIL`` (``...Z``) is rewritten to local wall-clock time to match
    the naive start.

    Raises ``ValueError`` if the text is not a valid rule.
    """
    text = event.recurrence.rrule_text
    if event.start_time.tzinfo is None:
        text = _UTC_UNTIL.sub(_local_until, text)
    return rrulestr(text, dtstart=event.start_time)


def expand_event(event: Event, window: ViewWindow) -> list[EventOccurrence]:
    """Expand one event into the occurrences that overlap *window*.

    The search starts one duration before the window so an instance that
    begins earlier but runs into it (e.g. across midnight) is kept.
    Non-recurring events are returned as-is, whether or not they overlap.
    """
    if event.recurrence is None:
        return [occurrence_from_event(event)]

    duration = event.duration
    try:
        rule = build_rule(event)
        starts = rule.between(window.start - duration, window.end, inc=True)
    except (ValueError, TypeError):
        logger.exception(
            "Failed to expand recurrence %r for event %s; showing it once",
            event.recurrence.rrule_text,
            event.id,
        )
        return [occurrence_from_event(event)]

    occurrences: list[EventOccurrence] = []
    base = event.model_dump(exclude={"id", "start_time", "end_time"})
    for start in starts:
        end = start + duration
        if end < window.start or start > window.end:
            continue
        occurrences.append(
            EventOccurrence(
                **base,
                id=occurrence_id(event.id, start),
                start_time=start,
                end_time=end,
                source_event_id=event.id,
                is_recurring_instance=True,
                series_start_time=event.start_time,
                series_end_time=event.end_time,
            )
        )
    return occurrences


def expand_occurrences(
    events: Iterable[Event], window: ViewWindow
) -> list[EventOccurrence]:
    """Expand every event in *events* against *window*, in input order."""
    occurrences: list[EventOccurrence] = []
    for event in events:
        occurrences.extend(expand_event(event, window))
    logger.debug(
        "Expanded events into %d occurrence(s) for %s..%s",
        len(occurrences),
        window.start,
        window.end,
    )
    return occurrences
