"""End-to-end tests for the HTTP surface."""

from __future__ import annotations

import json

import pytest
from fastapi.testclient import TestClient

from devevent import main
from devevent.main import app, booking_repo, event_repo
from devevent.services.uploads import LocalImageStore


@pytest.fixture(autouse=True)
def _clear_repos(tmp_path, monkeypatch):
    """Reset in-memory repos and keep uploads out of the working tree."""
    event_repo._store.clear()
    booking_repo._store.clear()
    monkeypatch.setattr(
        main, "image_store", LocalImageStore(tmp_path, "/uploads", folder="DevEvent")
    )
    yield
    event_repo._store.clear()
    booking_repo._store.clear()


@pytest.fixture()
def client():
    return TestClient(app)


# ---------------------------------------------------------------------------
# Stub data helpers
# ---------------------------------------------------------------------------

_IMAGE = ("poster.png", b"\x89PNG\r\n\x1a\nfake", "image/png")


def _form(**overrides) -> dict:
    form = {
        "title": "DevFest 2024!",
        "description": "A community-run developer festival.",
        "overview": "Talks, workshops and codelabs.",
        "venue": "Convention Center",
        "location": "Lagos, Nigeria",
        "date": "March 5, 2024",
        "time": "2:30 PM",
        "mode": "hybrid",
        "audience": "Developers",
        "organizer": "GDG Lagos",
        "tags": json.dumps(["cloud", "ai"]),
        "agenda": json.dumps(["Keynote", "Workshops"]),
    }
    form.update(overrides)
    return form


def _submit(client: TestClient, **overrides):
    return client.post("/api/events", data=_form(**overrides), files={"image": _IMAGE})


# ---------------------------------------------------------------------------
# Event submission
# ---------------------------------------------------------------------------


def test_submit_event_creates_canonical_record(client: TestClient, tmp_path):
    resp = _submit(client)
    assert resp.status_code == 201
    body = resp.json()

    assert body["message"] == "Event created successfully"
    event = body["event"]
    assert event["slug"] == "devfest-2024"
    assert event["date"] == "2024-03-05"
    assert event["time"] == "14:30"
    assert event["mode"] == "hybrid"
    assert event["tags"] == ["cloud", "ai"]
    assert event["agenda"] == ["Keynote", "Workshops"]
    assert event["image"].startswith("/uploads/DevEvent/")
    assert event["image"].endswith(".png")
    assert len(list((tmp_path / "DevEvent").iterdir())) == 1


def test_submit_requires_image(client: TestClient):
    resp = client.post("/api/events", data=_form())
    assert resp.status_code == 400
    assert resp.json() == {"message": "Image file is required", "field": "image"}


@pytest.mark.parametrize("field", ["tags", "agenda"])
def test_submit_rejects_invalid_json(client: TestClient, field):
    resp = _submit(client, **{field: "cloud, ai"})
    assert resp.status_code == 400
    assert resp.json()["message"] == f"Invalid JSON for {field}"


def test_submit_flattens_nested_tags(client: TestClient):
    resp = _submit(client, tags=json.dumps(['["cloud", "ai"]']))
    assert resp.status_code == 201
    assert resp.json()["event"]["tags"] == ["cloud", "ai"]


def test_submit_rejects_unknown_mode(client: TestClient):
    resp = _submit(client, mode="virtual")
    assert resp.status_code == 400
    assert resp.json()["field"] == "mode"
    assert event_repo.find() == []


def test_submit_rejects_bad_time(client: TestClient):
    resp = _submit(client, time="14:65")
    assert resp.status_code == 400
    assert resp.json()["field"] == "time"


def test_submit_rejects_missing_tags(client: TestClient):
    resp = _submit(client, tags="")
    assert resp.status_code == 400
    assert resp.json()["field"] == "tags"


def test_submit_duplicate_slug_conflicts(client: TestClient):
    assert _submit(client).status_code == 201

    resp = _submit(client, title="devfest 2024")
    assert resp.status_code == 409
    assert resp.json()["field"] == "slug"


@pytest.mark.parametrize(
    "overrides", [{"mode": "virtual"}, {"time": "14:65"}, {"date": "2024"}, {"tags": ""}]
)
def test_rejected_submission_uploads_nothing(client: TestClient, tmp_path, overrides):
    resp = _submit(client, **overrides)
    assert resp.status_code == 400
    assert not (tmp_path / "DevEvent").exists()


def test_duplicate_submission_uploads_nothing(client: TestClient, tmp_path):
    assert _submit(client).status_code == 201

    assert _submit(client, title="devfest 2024").status_code == 409
    assert len(list((tmp_path / "DevEvent").iterdir())) == 1


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def test_list_events_newest_first(client: TestClient):
    _submit(client, title="First Event")
    _submit(client, title="Second Event")

    resp = client.get("/api/events")
    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Events fetched successfully"
    assert [e["slug"] for e in body["events"]] == ["second-event", "first-event"]


def test_get_event_by_slug(client: TestClient):
    _submit(client)

    resp = client.get("/api/events/devfest-2024")
    assert resp.status_code == 200
    assert resp.json()["event"]["title"] == "DevFest 2024!"


def test_get_event_404(client: TestClient):
    resp = client.get("/api/events/nope")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Event not found"


def test_similar_events(client: TestClient):
    _submit(client, title="Cloud Day", tags=json.dumps(["cloud"]))
    _submit(client, title="AI Day", tags=json.dumps(["ai", "ml"]))
    _submit(client, title="Rust Day", tags=json.dumps(["rust"]))
    _submit(client)

    resp = client.get("/api/events/devfest-2024/similar")
    assert resp.status_code == 200
    assert [e["slug"] for e in resp.json()["events"]] == ["cloud-day", "ai-day"]


def test_similar_events_unknown_slug(client: TestClient):
    resp = client.get("/api/events/nope/similar")
    assert resp.status_code == 200
    assert resp.json() == {"events": []}


# ---------------------------------------------------------------------------
# Updates
# ---------------------------------------------------------------------------


def test_patch_event(client: TestClient):
    event_id = _submit(client).json()["event"]["id"]

    resp = client.patch(
        f"/api/events/{event_id}", json={"time": "9:15 pm", "tags": "cloud, web"}
    )
    assert resp.status_code == 200
    event = resp.json()["event"]
    assert event["time"] == "21:15"
    assert event["tags"] == ["cloud", "web"]
    assert event["slug"] == "devfest-2024"


def test_patch_unknown_event(client: TestClient):
    resp = client.patch("/api/events/missing", json={"venue": "x"})
    assert resp.status_code == 404


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------


def test_book_event(client: TestClient):
    event_id = _submit(client).json()["event"]["id"]

    resp = client.post(
        "/api/bookings", json={"event_id": event_id, "email": " Ada@Example.com "}
    )
    assert resp.status_code == 201
    assert resp.json()["email"] == "ada@example.com"
    assert len(booking_repo.list_for_event(event_id)) == 1


def test_book_missing_event(client: TestClient):
    resp = client.post(
        "/api/bookings", json={"event_id": "missing", "email": "ada@example.com"}
    )
    assert resp.status_code == 404
    assert resp.json()["field"] == "event_id"
    assert booking_repo._store == {}


def test_book_invalid_email(client: TestClient):
    event_id = _submit(client).json()["event"]["id"]

    resp = client.post("/api/bookings", json={"event_id": event_id, "email": "nope"})
    assert resp.status_code == 400
    assert resp.json()["field"] == "email"
