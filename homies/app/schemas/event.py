"""
Pydantic models for event data.

``EventForm`` is the shape used to create and edit an event.
``EventRead`` is the summary row shown in lists (all events, events a
user has joined) and ``EventDetails`` is the full view of one event.
The ``type`` and ``organiser`` fields of the read models hold display
names resolved from the ``types`` and ``users`` tables.
"""

from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

from .event_type import TypeRead

EVENT_NAME_MIN_LENGTH = 5
EVENT_NAME_MAX_LENGTH = 20
EVENT_DESCRIPTION_MIN_LENGTH = 15
EVENT_DESCRIPTION_MAX_LENGTH = 150


class EventForm(BaseModel):
    """Schema for creating or editing an event.

    ``end`` is not checked against ``start``.  ``types`` is only filled
    when the form is prepared for editing, so a caller can render the
    category selection next to the current values.
    """

    name: str = Field(
        ...,
        min_length=EVENT_NAME_MIN_LENGTH,
        max_length=EVENT_NAME_MAX_LENGTH,
        examples=["Dog walk"],
    )
    description: str = Field(
        ...,
        min_length=EVENT_DESCRIPTION_MIN_LENGTH,
        max_length=EVENT_DESCRIPTION_MAX_LENGTH,
        examples=["A walk with our dogs around the park"],
    )
    start: datetime = Field(..., examples=["2025-09-01T10:00:00"])
    end: datetime = Field(..., examples=["2025-09-01T12:00:00"])
    type_id: int = Field(..., ge=1, examples=[1])
    types: List[TypeRead] = Field(default_factory=list)


class EventRead(BaseModel):
    """Summary of an event for list views."""

    id: int
    name: str
    start: datetime
    type: str | None = None
    organiser: str


class EventDetails(BaseModel):
    """Full view of a single event."""

    id: int
    name: str
    description: str
    start: datetime
    end: datetime
    organiser: str
    created_on: datetime
    type: str | None = None
