"""Pre-commit pipeline that keeps every stored Event canonical.

Each stage receives the candidate record (a plain dict) and the set of
fields that changed in this write. Stages either normalize the record in
place or raise; nothing reaches storage unless every stage passes.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from devevent.domain.errors import NotFoundError, ValidationError
from devevent.domain.models import TEXT_FIELDS, Event, EventDraft, EventMode, EventPatch
from devevent.repos.memory import EventRepository
from devevent.services.normalizers import (
    generate_slug,
    normalize_date,
    normalize_string_list,
    normalize_time,
)

logger = logging.getLogger(__name__)

Stage = Callable[[dict[str, Any], set[str]], None]


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------


def require_text_fields(record: dict[str, Any], changed: set[str]) -> None:
    for field in TEXT_FIELDS:
        value = record.get(field)
        if not isinstance(value, str) or not value.strip():
            raise ValidationError(f"Event {field} is required", field=field)
        record[field] = value.strip()


def derive_slug(record: dict[str, Any], changed: set[str]) -> None:
    if "title" not in changed:
        return
    slug = generate_slug(record["title"])
    if not slug:
        raise ValidationError("title produces empty slug", field="title")
    record["slug"] = slug


def normalize_schedule(record: dict[str, Any], changed: set[str]) -> None:
    if "date" in changed:
        record["date"] = normalize_date(record.get("date") or "")
    if "time" in changed:
        record["time"] = normalize_time(record.get("time") or "")


def check_mode(record: dict[str, Any], changed: set[str]) -> None:
    mode = record.get("mode")
    if isinstance(mode, str):
        mode = mode.strip()
    if mode not in {m.value for m in EventMode}:
        raise ValidationError(
            "Mode must be online, offline, or hybrid", field="mode"
        )
    record["mode"] = EventMode(mode)


def check_collections(record: dict[str, Any], changed: set[str]) -> None:
    for field in ("agenda", "tags"):
        items = record.get(field)
        if not isinstance(items, list) or not items:
            raise ValidationError(
                f"{field.capitalize()} must contain at least one item", field=field
            )
        if not all(isinstance(item, str) and item.strip() for item in items):
            raise ValidationError(
                f"{field.capitalize()} items must be non-empty strings", field=field
            )


EVENT_STAGES: list[Stage] = [
    require_text_fields,
    derive_slug,
    normalize_schedule,
    check_mode,
    check_collections,
]


def run_event_pipeline(record: dict[str, Any], changed: set[str]) -> dict[str, Any]:
    """Run every stage over *record* in order and return it."""
    for stage in EVENT_STAGES:
        stage(record, changed)
    return record


# ---------------------------------------------------------------------------
# Write path
# ---------------------------------------------------------------------------


def _normalize_collections(values: dict[str, Any]) -> None:
    for field in ("agenda", "tags"):
        if field in values:
            values[field] = normalize_string_list(values[field])


def validate_draft(draft: EventDraft, event_repo: EventRepository) -> Event:
    """Run every create-time check on *draft* without storing anything.

    Lets the caller reject a submission before side effects such as the
    image upload. Returns the canonical Event that ``create_event`` would
    store.
    """
    record = draft.model_dump()
    _normalize_collections(record)
    run_event_pipeline(record, changed=set(record))

    event = Event(**record)
    event_repo.check_slug_free(event)
    return event


def create_event(draft: EventDraft, event_repo: EventRepository) -> Event:
    """Canonicalize *draft* and store it as a new Event."""
    event = event_repo.create(validate_draft(draft, event_repo))
    logger.info("Created event %s (%s)", event.id, event.slug)
    return event


def update_event(event_id: str, patch: EventPatch, event_repo: EventRepository) -> Event:
    """Apply *patch* to a stored event, recomputing only what changed.

    Raises ``NotFoundError`` if no event has *event_id*.
    """
    previous = event_repo.get(event_id)
    if previous is None:
        raise NotFoundError("Event not found", field="id")

    changes = patch.model_dump(exclude_unset=True, exclude_none=True)
    _normalize_collections(changes)

    record = previous.model_dump()
    changed = {field for field, value in changes.items() if record.get(field) != value}
    record.update(changes)
    run_event_pipeline(record, changed)

    event = event_repo.replace(Event(**record))
    logger.info("Updated event %s fields=%s", event.id, sorted(changed))
    return event
