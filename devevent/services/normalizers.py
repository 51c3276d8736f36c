"""Pure normalizers turning raw organizer input into canonical field values.

Nothing here touches storage. Date and time parsing follow one pinned
policy so the result never depends on the host's locale or timezone:

* dates: strict ``YYYY-MM-DD`` is validated and kept; anything else goes
  through ``dateparser`` in English, month-first for ambiguous numeric
  dates (``03/04/2024`` is March 4th), first of the month when the day is
  missing, naive input read as UTC and explicit offsets converted to UTC.
  Input without a month or a year is rejected rather than completed from
  today's date.
* times: strict ``HH:MM`` is kept; anything else must look like a time of
  day and is parsed with ``dateutil``, keeping the wall-clock reading.
  Input carrying date parts or more than one am/pm marker is rejected.
"""

from __future__ import annotations

import json
import re
from datetime import date, datetime
from typing import Any, Callable

import dateparser
from dateutil import parser as dateutil_parser

from devevent.domain.errors import InvalidDateError, InvalidTimeError

_ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_TIME_24H_RE = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")
# h:mm, or an hour followed by am/pm ("2pm", "2 p.m.")
_TIME_OF_DAY_RE = re.compile(r"\d\s*:\s*\d|\d\s*[ap]\.?\s*m\b", re.IGNORECASE)

_DATEPARSER_SETTINGS = {
    "DATE_ORDER": "MDY",
    "PREFER_DAY_OF_MONTH": "first",
    "TIMEZONE": "UTC",
    "TO_TIMEZONE": "UTC",
    "RETURN_AS_TIMEZONE_AWARE": False,
    # Without these the missing parts would be filled from today's date.
    "REQUIRE_PARTS": ["month", "year"],
}
_AMPM_RE = re.compile(r"(?<![a-z])[ap]\.?\s*m\.?(?![a-z])", re.IGNORECASE)
# Two unrelated anchors: a time-only string keeps each anchor's date.
_TIME_DEFAULTS = (datetime(1970, 1, 1), datetime(2000, 2, 2))


# ---------------------------------------------------------------------------
# Slug
# ---------------------------------------------------------------------------


def generate_slug(title: str) -> str:
    """Derive the URL-safe slug for *title*.

    ``"DevFest 2024!"`` becomes ``"devfest-2024"``. An empty result means
    the title has no usable characters; callers must reject it.
    """
    slug = title.lower().strip()
    slug = re.sub(r"[^\w\s-]", "", slug, flags=re.ASCII)
    slug = re.sub(r"\s+", "-", slug, flags=re.ASCII)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip("-")


# ---------------------------------------------------------------------------
# Date / time
# ---------------------------------------------------------------------------


def normalize_date(raw: str) -> str:
    """Return *raw* as an ISO ``YYYY-MM-DD`` calendar date."""
    text = raw.strip() if isinstance(raw, str) else ""
    if not text:
        raise InvalidDateError("Invalid date format: date is empty")

    if _ISO_DATE_RE.match(text):
        try:
            return date.fromisoformat(text).isoformat()
        except ValueError:
            raise InvalidDateError(f"Invalid date format: {raw!r}") from None

    parsed = dateparser.parse(text, languages=["en"], settings=_DATEPARSER_SETTINGS)
    if parsed is None:
        raise InvalidDateError(f"Invalid date format: {raw!r}")
    return parsed.date().isoformat()


def normalize_time(raw: str) -> str:
    """Return *raw* as a zero-padded 24-hour ``HH:MM`` string.

    ``"2:30 PM"`` becomes ``"14:30"``; ``"14:65"`` is rejected.
    """
    text = raw.strip() if isinstance(raw, str) else ""
    if _TIME_24H_RE.match(text):
        return text

    if not _TIME_OF_DAY_RE.search(text) or len(_AMPM_RE.findall(text)) > 1:
        raise InvalidTimeError(f"Invalid time format: {raw!r}")
    try:
        parsed = [dateutil_parser.parse(text, default=d) for d in _TIME_DEFAULTS]
    except (ValueError, OverflowError):
        raise InvalidTimeError(f"Invalid time format: {raw!r}") from None

    # Any day, month or year in the input would override an anchor's date.
    if any(p.date() != d.date() for p, d in zip(parsed, _TIME_DEFAULTS)):
        raise InvalidTimeError(f"Invalid time format: {raw!r}")
    return f"{parsed[0].hour:02d}:{parsed[0].minute:02d}"


# ---------------------------------------------------------------------------
# Tags / agenda
# ---------------------------------------------------------------------------


def _as_text(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    return json.dumps(value, default=str).strip()


def _flatten(items: list | tuple) -> list[str]:
    out: list[str] = []
    for item in items:
        if item is None:
            continue
        if isinstance(item, (list, tuple)):
            out.extend(_flatten(item))
            continue
        text = _as_text(item)
        if text:
            out.append(text)
    return out


def _parse_json_array(text: str) -> list | None:
    text = text.strip()
    if not text.startswith("["):
        return None
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return parsed if isinstance(parsed, list) else None


def _match_json_in_sequence(raw: Any) -> list[str] | None:
    if not isinstance(raw, (list, tuple)) or len(raw) != 1:
        return None
    if not isinstance(raw[0], str):
        return None
    parsed = _parse_json_array(raw[0])
    return None if parsed is None else _flatten(parsed)


def _match_sequence(raw: Any) -> list[str] | None:
    if not isinstance(raw, (list, tuple)):
        return None
    return _flatten(raw)


def _match_json_string(raw: Any) -> list[str] | None:
    if not isinstance(raw, str):
        return None
    parsed = _parse_json_array(raw)
    return None if parsed is None else _flatten(parsed)


def _match_comma_string(raw: Any) -> list[str] | None:
    if not isinstance(raw, str):
        return None
    return [piece.strip() for piece in raw.split(",") if piece.strip()]


# First match wins.
_LIST_SHAPES: list[Callable[[Any], list[str] | None]] = [
    _match_json_in_sequence,
    _match_sequence,
    _match_json_string,
    _match_comma_string,
]


def normalize_string_list(raw: Any) -> list[str]:
    """Coerce tags/agenda in any historical shape into a flat list of strings.

    Accepts ``['["a","b"]']``, ``["a", "b"]``, ``'["a","b"]'`` and
    ``"a, b"``. Never raises: input no shape recognises yields ``[]``, and
    callers enforce "at least one item" themselves.
    """
    for match in _LIST_SHAPES:
        result = match(raw)
        if result is not None:
            return result
    return []
