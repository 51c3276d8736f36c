"""In-memory repositories for events and bookings."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from devevent.domain.errors import UniquenessConflictError
from devevent.domain.models import Booking, Event

logger = logging.getLogger(__name__)

EventPredicate = Callable[[Event], bool]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class EventRepository:
    """Dict-backed store for Event instances, keyed by id.

    Owns the two things a document store would: uniqueness of ``slug`` and
    the ``created_at``/``updated_at`` bookkeeping.
    """

    def __init__(self) -> None:
        self._store: dict[str, Event] = {}

    def create(self, event: Event) -> Event:
        self.check_slug_free(event)
        now = _utcnow()
        stored = event.model_copy(update={"created_at": now, "updated_at": now})
        self._store[stored.id] = stored
        return stored

    def replace(self, event: Event) -> Event:
        """Overwrite an existing record, keeping its creation timestamp."""
        self.check_slug_free(event)
        previous = self._store.get(event.id)
        created_at = previous.created_at if previous else event.created_at
        stored = event.model_copy(
            update={"created_at": created_at, "updated_at": _utcnow()}
        )
        self._store[stored.id] = stored
        return stored

    def get(self, event_id: str) -> Event | None:
        return self._store.get(event_id)

    def get_by_slug(self, slug: str) -> Event | None:
        return self.find_one(lambda e: e.slug == slug)

    def find(
        self, predicate: EventPredicate | None = None, newest_first: bool = False
    ) -> list[Event]:
        events = [e for e in self._store.values() if predicate is None or predicate(e)]
        if newest_first:
            events.sort(key=lambda e: e.created_at, reverse=True)
        return events

    def find_one(self, predicate: EventPredicate) -> Event | None:
        return next((e for e in self._store.values() if predicate(e)), None)

    def exists(self, predicate: EventPredicate) -> bool:
        return self.find_one(predicate) is not None

    def check_slug_free(self, event: Event) -> None:
        clash = self.find_one(lambda e: e.slug == event.slug and e.id != event.id)
        if clash is not None:
            logger.warning(
                "Rejected write of event %s: slug %r already used by %s",
                event.id,
                event.slug,
                clash.id,
            )
            raise UniquenessConflictError(
                f"An event with slug '{event.slug}' already exists"
            )


class BookingRepository:
    """Dict-backed store for Booking instances, keyed by id."""

    def __init__(self) -> None:
        self._store: dict[str, Booking] = {}

    def save(self, booking: Booking) -> Booking:
        now = _utcnow()
        previous = self._store.get(booking.id)
        created_at = previous.created_at if previous else now
        stored = booking.model_copy(update={"created_at": created_at, "updated_at": now})
        self._store[stored.id] = stored
        return stored

    def get(self, booking_id: str) -> Booking | None:
        return self._store.get(booking_id)

    def list_for_event(self, event_id: str) -> list[Booking]:
        return [b for b in self._store.values() if b.event_id == event_id]
