from datetime import datetime, date, timedelta

import requests
from icalendar import Calendar as iCal
from loguru import logger

import almanac.settings as settings
from almanac.models import Event, validate_event_payload


def download_calendar(source: str) -> bytes:
    """
    Fetch an ICS calendar from a URL or file path.
    """
    if source.startswith("http"):
        resp = requests.get(source, timeout=30)
        resp.raise_for_status()
        return resp.content
    else:
        with open(source, "rb") as f:
            return f.read()


def parse_calendar(raw: bytes) -> iCal:
    """
    Parse raw ICS bytes into an icalendar.Calendar object.
    """
    return iCal.from_ical(raw)


def _local_date(value, tz_local) -> date:
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz_local)
        return value.date()
    return value


def _epoch_ms(comp, tz_local) -> int:
    for prop in ("CREATED", "DTSTAMP"):
        if comp.get(prop):
            value = comp.decoded(prop)
            if isinstance(value, datetime):
                if value.tzinfo is None:
                    value = value.replace(tzinfo=tz_local)
                return int(value.timestamp() * 1000)
    return 0


def vevent_to_event(comp, tone: str, tz_local=None) -> Event | None:
    """
    Convert one VEVENT into a planner event. All-day DTEND is exclusive;
    a timed event ending at midnight does not occupy its final day.
    Recurring VEVENTs are not expanded and yield None.
    """
    tz_local = tz_local or settings.TZ_LOCAL
    summary = str(comp.get('SUMMARY', '')).strip()
    if comp.get('RRULE'):
        logger.debug("Skipping recurring event '{}'", summary)
        return None

    start_raw = comp.decoded('dtstart')
    if comp.get('dtend'):
        end_raw = comp.decoded('dtend')
    elif comp.get('duration'):
        end_raw = start_raw + comp.decoded('duration')
    else:
        end_raw = start_raw

    start = _local_date(start_raw, tz_local)
    end = _local_date(end_raw, tz_local)
    if isinstance(end_raw, datetime):
        local_end = end_raw.astimezone(tz_local) if end_raw.tzinfo else end_raw
        if local_end.time() == datetime.min.time() and end > start:
            end -= timedelta(days=1)
    elif end > start:
        end -= timedelta(days=1)

    attachments = comp.get('ATTACH') or []
    if not isinstance(attachments, list):
        attachments = [attachments]

    return Event(
        id=str(comp.get('UID') or f"{summary}-{start.isoformat()}"),
        label=summary or "Untitled",
        start=start,
        end=end,
        tone=tone,
        images=tuple(str(a) for a in attachments),
        created_at=_epoch_ms(comp, tz_local),
        description=str(comp.get('DESCRIPTION')) if comp.get('DESCRIPTION') else None,
    )


def extract_events(cal: iCal, tone: str, name: str) -> list[Event]:
    events = []
    for comp in cal.walk():
        if comp.name != "VEVENT":
            continue
        event = vevent_to_event(comp, tone)
        if event is not None:
            events.append(event)
    logger.debug("Calendar {}: {} event(s)", name, len(events))
    return events


def load_inline_events(entries: list[dict]) -> list[Event]:
    """Validate and convert the `events:` list from config.yaml."""
    events = []
    for entry in entries:
        payload = dict(entry)
        validate_event_payload(payload)
        payload.setdefault("id", f"{payload['label']}-{payload['start']}")
        events.append(Event.from_payload(payload))
    return events


def load_events(config: dict) -> list[Event]:
    """
    High-level loader: inline events plus every configured ICS calendar,
    de-duplicated by id (first wins) and ordered by start, end, creation.
    """
    all_events = load_inline_events(config.get("events") or [])

    sources = config.get("calendars") or []
    names = [entry.get("name", "<unknown>") for entry in sources]
    logger.debug("Loading {} calendars: {}", len(names), names)
    for entry in sources:
        name = entry.get("name")
        source = entry.get("source")
        logger.debug("Fetching calendar {} from {}...", name, source)
        raw = download_calendar(source)
        cal = parse_calendar(raw)
        all_events.extend(extract_events(cal, entry.get("tone", "sea"), name))

    seen = set()
    unique = []
    for event in all_events:
        if event.id in seen:
            logger.debug("Dropping duplicate event id {}", event.id)
            continue
        seen.add(event.id)
        unique.append(event)

    return sorted(unique, key=lambda e: (e.start, e.end, e.created_at))
