"""Domain models for events and bookings."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field

try:
    from enum import StrEnum
except ImportError:  # pragma: no cover - fallback for older Python runtimes

    class StrEnum(str, Enum):
        pass


class EventMode(StrEnum):
    ONLINE = "online"
    OFFLINE = "offline"
    HYBRID = "hybrid"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


# Descriptive fields every event must carry as non-empty text.
TEXT_FIELDS = (
    "title",
    "description",
    "overview",
    "image",
    "venue",
    "location",
    "organizer",
    "audience",
)


# ---------------------------------------------------------------------------
# Stored records
# ---------------------------------------------------------------------------


class Event(BaseModel):
    id: str = Field(default_factory=_new_id)
    title: str
    slug: str
    description: str
    overview: str
    image: str
    venue: str
    location: str
    date: str
    time: str
    mode: EventMode
    audience: str
    agenda: list[str]
    organizer: str
    tags: list[str]
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class Booking(BaseModel):
    id: str = Field(default_factory=_new_id)
    event_id: str
    email: str
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


# ---------------------------------------------------------------------------
# Request / Response DTOs
# ---------------------------------------------------------------------------


class EventDraft(BaseModel):
    """Raw organizer input, before any normalization."""

    title: str
    description: str
    overview: str
    image: str
    venue: str
    location: str
    date: str
    time: str
    mode: str
    audience: str
    organizer: str
    agenda: list[str] | str
    tags: list[str] | str


class EventPatch(BaseModel):
    """Partial update; fields left unset are not touched."""

    title: str | None = None
    description: str | None = None
    overview: str | None = None
    image: str | None = None
    venue: str | None = None
    location: str | None = None
    date: str | None = None
    time: str | None = None
    mode: str | None = None
    audience: str | None = None
    organizer: str | None = None
    agenda: list[str] | str | None = None
    tags: list[str] | str | None = None


class BookingRequest(BaseModel):
    event_id: str
    email: str


class EventResponse(BaseModel):
    message: str
    event: Event


class EventListResponse(BaseModel):
    message: str
    events: list[Event]


class SimilarEventsResponse(BaseModel):
    events: list[Event]
