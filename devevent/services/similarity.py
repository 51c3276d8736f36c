"""Service for finding events that share tags with a given event."""

from __future__ import annotations

import logging

from devevent.domain.models import Event
from devevent.repos.memory import EventRepository
from devevent.services.normalizers import normalize_string_list

logger = logging.getLogger(__name__)


def _normalized_copy(event: Event) -> Event:
    """Return *event* with agenda/tags coerced to flat lists, storage untouched.

    Records written before normalization was enforced may still hold a JSON
    blob or a comma-joined string in these fields.
    """
    return event.model_copy(
        update={
            "agenda": normalize_string_list(event.agenda),
            "tags": normalize_string_list(event.tags),
        }
    )


def find_similar(slug: str, event_repo: EventRepository) -> list[Event]:
    """Return other events sharing at least one tag with the event at *slug*.

    Best-effort: an unknown slug or any failure while matching yields ``[]``.
    Only the source's tags are normalized; candidates are compared on their
    stored tags and returned as stored, in storage order.
    """
    try:
        source = event_repo.get_by_slug(slug)
        if source is None:
            return []

        tags = set(_normalized_copy(source).tags)
        if not tags:
            return []

        return event_repo.find(
            lambda e: e.id != source.id and not tags.isdisjoint(e.tags)
        )
    except Exception:
        logger.exception("Similar-event lookup failed for slug %r", slug)
        return []
