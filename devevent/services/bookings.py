"""Booking write path: email clean-up plus the event reference guard."""

from __future__ import annotations

import logging
import re
from typing import Callable

from devevent.domain.errors import ReferentialIntegrityError, ValidationError
from devevent.domain.models import Booking
from devevent.repos.memory import BookingRepository, EventRepository

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

BookingStage = Callable[[Booking, Booking | None, EventRepository], Booking]


def clean_email(
    booking: Booking, previous: Booking | None, event_repo: EventRepository
) -> Booking:
    email = booking.email.strip().lower()
    if not email:
        raise ValidationError("Email is required", field="email")
    if not _EMAIL_RE.match(email):
        raise ValidationError("Please provide a valid email address", field="email")
    return booking.model_copy(update={"email": email})


def ensure_event_exists(
    booking: Booking, previous: Booking | None, event_repo: EventRepository
) -> Booking:
    """Reject bookings whose event reference does not resolve.

    Only checked when the reference is new or has changed.
    """
    if previous is not None and previous.event_id == booking.event_id:
        return booking
    if not event_repo.exists(lambda e: e.id == booking.event_id):
        logger.warning(
            "Rejected booking %s: event %s not found", booking.id, booking.event_id
        )
        raise ReferentialIntegrityError(
            f"Event with ID {booking.event_id} does not exist. Cannot create booking."
        )
    return booking


BOOKING_STAGES: list[BookingStage] = [clean_email, ensure_event_exists]


def save_booking(
    booking: Booking, event_repo: EventRepository, booking_repo: BookingRepository
) -> Booking:
    """Run the booking stages and persist the result; nothing is written on failure."""
    previous = booking_repo.get(booking.id)
    for stage in BOOKING_STAGES:
        booking = stage(booking, previous, event_repo)
    return booking_repo.save(booking)


def create_booking(
    event_id: str,
    email: str,
    event_repo: EventRepository,
    booking_repo: BookingRepository,
) -> Booking:
    booking = save_booking(
        Booking(event_id=event_id, email=email), event_repo, booking_repo
    )
    logger.info("Created booking %s for event %s", booking.id, booking.event_id)
    return booking
