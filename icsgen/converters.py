"""
icsgen Converters - Calendar documents to and from JSON.

JSON layout:
    {
      "prodid": "-//example//EN",
      "name": "Team",
      "method": "PUBLISH",
      "events": [
        {
          "uid": "1@example.com",
          "dtstamp": "2024-06-26T12:00:00Z",
          "start": "2024-06-26",
          "end": "2024-06-27",
          "summary": "Midsummer",
          "categories": ["holiday"],
          "geo": [59.91, 10.75],
          "transparent": true
        }
      ]
    }

Dates and datetimes are ISO-8601 strings. A date-only start makes an
all-day event.
"""

from __future__ import annotations

import json
from datetime import date, datetime, timezone
from typing import Any

from icsgen.document import CalendarDocument, CalendarEvent

_TEXT_FIELDS = ("summary", "description", "location")


def _parse_temporal(value: Any, field_name: str) -> datetime | date:
    if not isinstance(value, str):
        raise ValueError(f"Invalid calendar JSON: '{field_name}' must be an ISO-8601 string")
    text = value.strip()
    try:
        if "T" not in text and len(text) == 10:
            return date.fromisoformat(text)
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(
            f"Invalid calendar JSON: '{field_name}' is not an ISO-8601 date or datetime: {value!r}"
        ) from None
    # DATE-TIME is written floating or in UTC; other offsets are converted.
    if parsed.tzinfo is not None:
        return parsed.astimezone(timezone.utc)
    return parsed


def _format_temporal(value: datetime | date) -> str:
    if isinstance(value, datetime):
        offset = value.utcoffset()
        if offset is not None and not offset:
            return value.replace(tzinfo=None).isoformat() + "Z"
        return value.isoformat()
    return value.isoformat()


def _event_from_dict(doc: CalendarDocument, data: dict[str, Any], index: int) -> CalendarEvent:
    if "start" not in data:
        raise ValueError(f"Invalid calendar JSON: event {index} has no 'start'")
    start = _parse_temporal(data["start"], "start")
    end = _parse_temporal(data["end"], "end") if data.get("end") is not None else None

    dtstamp = None
    if data.get("dtstamp") is not None:
        dtstamp = _parse_temporal(data["dtstamp"], "dtstamp")
        if not isinstance(dtstamp, datetime):
            raise ValueError("Invalid calendar JSON: 'dtstamp' must be a datetime")
        if dtstamp.tzinfo is None:
            dtstamp = dtstamp.replace(tzinfo=timezone.utc)

    text = {}
    for key in _TEXT_FIELDS:
        val = data.get(key, "")
        if not isinstance(val, str):
            raise ValueError(f"Invalid calendar JSON: '{key}' must be a string")
        text[key] = val

    uid = data.get("uid", "")
    if not isinstance(uid, str):
        raise ValueError("Invalid calendar JSON: 'uid' must be a string")

    categories = data.get("categories", [])
    if not isinstance(categories, list) or not all(isinstance(c, str) for c in categories):
        raise ValueError("Invalid calendar JSON: 'categories' must be an array of strings")

    geo = data.get("geo")
    if geo is not None:
        if (
            not isinstance(geo, list)
            or len(geo) != 2
            or not all(isinstance(g, (int, float)) and not isinstance(g, bool) for g in geo)
        ):
            raise ValueError("Invalid calendar JSON: 'geo' must be a [latitude, longitude] pair")
        geo = (geo[0], geo[1])

    transparent = data.get("transparent", False)
    if not isinstance(transparent, bool):
        raise ValueError("Invalid calendar JSON: 'transparent' must be true or false")

    return doc.add_event(
        start=start,
        end=end,
        uid=uid,
        dtstamp=dtstamp,
        categories=categories,
        geo=geo,
        transparent=transparent,
        **text,
    )


def from_json(json_str: str) -> CalendarDocument:
    """Create a calendar document from a JSON string.

    Validates the structure and the field types; the character content is
    checked later by the writers.
    """
    data = json.loads(json_str)

    if not isinstance(data, dict):
        raise ValueError("Invalid calendar JSON: expected a JSON object at top level")

    header = {}
    for key in ("prodid", "name", "method"):
        val = data.get(key, "")
        if not isinstance(val, str):
            raise ValueError(f"Invalid calendar JSON: '{key}' must be a string")
        header[key] = val

    doc = CalendarDocument.create(
        prodid=header["prodid"] or None,
        name=header["name"],
        method=header["method"],
    )

    events = data.get("events", [])
    if not isinstance(events, list):
        raise ValueError("Invalid calendar JSON: 'events' must be an array")

    for i, event in enumerate(events):
        if not isinstance(event, dict):
            raise ValueError(f"Invalid calendar JSON: event {i} must be a JSON object")
        _event_from_dict(doc, event, i)

    return doc


def to_json(doc: CalendarDocument, indent: int = 2) -> str:
    """Convert a calendar document to a JSON string."""
    events = []
    for ev in doc.events:
        item: dict[str, Any] = {
            "uid": ev.uid,
            "dtstamp": _format_temporal(ev.dtstamp),
            "start": _format_temporal(ev.start),
        }
        if ev.end is not None:
            item["end"] = _format_temporal(ev.end)
        for key in _TEXT_FIELDS:
            if getattr(ev, key):
                item[key] = getattr(ev, key)
        if ev.categories:
            item["categories"] = list(ev.categories)
        if ev.geo is not None:
            item["geo"] = list(ev.geo)
        if ev.transparent:
            item["transparent"] = True
        events.append(item)

    data: dict[str, Any] = {"prodid": doc.prodid}
    if doc.name:
        data["name"] = doc.name
    if doc.method:
        data["method"] = doc.method
    data["events"] = events
    return json.dumps(data, indent=indent, ensure_ascii=False)
