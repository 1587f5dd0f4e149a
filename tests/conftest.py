"""Shared fixtures for the almanac test suite."""

from datetime import date

import pytest

from almanac.models import Event


@pytest.fixture
def make_event():
    """Factory for events with sensible defaults; dates accept YYYY-MM-DD strings."""

    def _make(id="e", start="2026-01-01", end="2026-01-01", label=None, tone="sea",
              created_at=0, images=()):
        return Event.from_payload({
            "id": id,
            "label": label or id,
            "start": start,
            "end": end,
            "tone": tone,
            "createdAt": created_at,
            "images": list(images),
        })

    return _make


@pytest.fixture
def scenario_events(make_event):
    """Two January 2026 events: A spans two grid weeks, B overlaps A's second week."""
    return [
        make_event("A", "2026-01-01", "2026-01-10", created_at=1000),
        make_event("B", "2026-01-05", "2026-01-06", created_at=2000),
    ]


@pytest.fixture
def fixed_today():
    return date(2026, 5, 1)


ICS_TEMPLATE = """BEGIN:VCALENDAR
VERSION:2.0
PRODID:-//almanac tests//EN
{body}
END:VCALENDAR
"""


@pytest.fixture
def ics_bytes():
    body = "\n".join([
        "BEGIN:VEVENT",
        "UID:trip-1",
        "SUMMARY:Copenhagen sprint",
        "DTSTART;VALUE=DATE:20260317",
        "DTEND;VALUE=DATE:20260324",
        "CREATED:20260101T000000Z",
        "DESCRIPTION:Team offsite",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:meeting-1",
        "SUMMARY:Planning",
        "DTSTART:20260501T090000Z",
        "DTEND:20260501T100000Z",
        "END:VEVENT",
        "BEGIN:VEVENT",
        "UID:weekly-1",
        "SUMMARY:Standup",
        "DTSTART:20260105T090000Z",
        "DTEND:20260105T091500Z",
        "RRULE:FREQ=WEEKLY",
        "END:VEVENT",
    ])
    return ICS_TEMPLATE.format(body=body).replace("\n", "\r\n").encode()
