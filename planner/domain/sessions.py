"""Interaction session states.

Exactly one session is active at a time. A gesture replaces ``Idle`` on
pointer-down and is replaced by ``Idle`` again on pointer-up or cancel.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from planner.domain.models import EventOccurrence


class ScreenPoint(BaseModel):
    x: float
    y: float


class Idle(BaseModel):
    kind: Literal["idle"] = "idle"


class Selecting(BaseModel):
    """Month-grid drag across day cells."""

    kind: Literal["selecting"] = "selecting"
    anchor_date: date
    current_date: date


class Dragging(BaseModel):
    """Event being moved; ``grab_offset_px`` is where inside the event it was grabbed."""

    kind: Literal["dragging"] = "dragging"
    occurrence: EventOccurrence
    grab_offset_px: float = 0.0
    current_date: date
    current_offset_px: float


class Resizing(BaseModel):
    kind: Literal["resizing"] = "resizing"
    occurrence: EventOccurrence
    origin_offset_px: float
    origin_height_px: float
    height_px: float


class QuickAdding(BaseModel):
    kind: Literal["quick_adding"] = "quick_adding"
    start_time: datetime
    end_time: datetime
    position: ScreenPoint = Field(default_factory=lambda: ScreenPoint(x=0, y=0))


SessionState = Annotated[
    Union[Idle, Selecting, Dragging, Resizing, QuickAdding],
    Field(discriminator="kind"),
]
