"""FastAPI application: entry point for the DevEvent service."""

from __future__ import annotations

import json
from typing import Any

from fastapi import FastAPI, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from devevent.config import get_settings
from devevent.domain.errors import (
    EventPlatformError,
    NotFoundError,
    ReferentialIntegrityError,
    UniquenessConflictError,
    UploadError,
    ValidationError,
)
from devevent.domain.models import (
    Booking,
    BookingRequest,
    EventDraft,
    EventListResponse,
    EventPatch,
    EventResponse,
    SimilarEventsResponse,
)
from devevent.logging_config import setup_logging
from devevent.repos.memory import BookingRepository, EventRepository
from devevent.services.bookings import create_booking
from devevent.services.lifecycle import create_event, update_event, validate_draft
from devevent.services.normalizers import normalize_string_list
from devevent.services.similarity import find_similar
from devevent.services.uploads import LocalImageStore

settings = get_settings()
setup_logging(settings.log_level)

app = FastAPI(title="DevEvent")

# ── Singletons (created at import time for simplicity) ────────────────
event_repo = EventRepository()
booking_repo = BookingRepository()
image_store = LocalImageStore(
    directory=settings.upload_dir,
    base_url=settings.image_base_url,
    folder=settings.image_folder,
)

if settings.image_base_url.startswith("/"):
    app.mount(
        settings.image_base_url,
        StaticFiles(directory=settings.upload_dir, check_dir=False),
        name="uploads",
    )

_STATUS_CODES: list[tuple[type[EventPlatformError], int]] = [
    (ValidationError, 400),
    (NotFoundError, 404),
    (ReferentialIntegrityError, 404),
    (UniquenessConflictError, 409),
    (UploadError, 502),
]


@app.exception_handler(EventPlatformError)
async def handle_platform_error(request: Request, exc: EventPlatformError) -> JSONResponse:
    status_code = next(
        (code for cls, code in _STATUS_CODES if isinstance(exc, cls)), 500
    )
    return JSONResponse(
        status_code=status_code,
        content={"message": exc.message, "field": exc.field},
    )


def _parse_json_field(raw: str, field: str) -> Any:
    try:
        return json.loads(raw or "null")
    except ValueError:
        raise ValidationError(f"Invalid JSON for {field}", field=field) from None


# ── Routes ────────────────────────────────────────────────────────────


@app.post("/api/events", status_code=201, response_model=EventResponse)
def submit_event(
    title: str = Form(""),
    description: str = Form(""),
    overview: str = Form(""),
    venue: str = Form(""),
    location: str = Form(""),
    date: str = Form(""),
    time: str = Form(""),
    mode: str = Form(""),
    audience: str = Form(""),
    organizer: str = Form(""),
    tags: str = Form(""),
    agenda: str = Form(""),
    image: UploadFile | None = File(None),
) -> EventResponse:
    """Accept a multipart event submission, upload its image and store it.

    The submission is validated before the image is uploaded, so a rejected
    event never leaves a file behind.
    """
    data = image.file.read() if image is not None else b""
    if not data:
        raise ValidationError("Image file is required", field="image")

    draft = EventDraft(
        title=title,
        description=description,
        overview=overview,
        image=image.filename or "upload",
        venue=venue,
        location=location,
        date=date,
        time=time,
        mode=mode,
        audience=audience,
        organizer=organizer,
        agenda=normalize_string_list(_parse_json_field(agenda, "agenda")),
        tags=normalize_string_list(_parse_json_field(tags, "tags")),
    )
    validate_draft(draft, event_repo)

    image_url = image_store.upload(data, image.filename or "")
    event = create_event(draft.model_copy(update={"image": image_url}), event_repo)
    return EventResponse(message="Event created successfully", event=event)


@app.get("/api/events", response_model=EventListResponse)
def list_events() -> EventListResponse:
    """Return all stored events, newest first."""
    return EventListResponse(
        message="Events fetched successfully",
        events=event_repo.find(newest_first=True),
    )


@app.get("/api/events/{slug}", response_model=EventResponse)
def get_event(slug: str) -> EventResponse:
    event = event_repo.get_by_slug(slug)
    if event is None:
        raise NotFoundError("Event not found", field="slug")
    return EventResponse(message="Event fetched successfully", event=event)


@app.get("/api/events/{slug}/similar", response_model=SimilarEventsResponse)
def get_similar_events(slug: str) -> SimilarEventsResponse:
    """Return events sharing at least one tag; empty for unknown slugs."""
    return SimilarEventsResponse(events=find_similar(slug, event_repo))


@app.patch("/api/events/{event_id}", response_model=EventResponse)
def patch_event(event_id: str, body: EventPatch) -> EventResponse:
    event = update_event(event_id, body, event_repo)
    return EventResponse(message="Event updated successfully", event=event)


@app.post("/api/bookings", status_code=201, response_model=Booking)
def book_event(body: BookingRequest) -> Booking:
    return create_booking(body.event_id, body.email, event_repo, booking_repo)
