from dataclasses import dataclass
import datetime

from loguru import logger

from almanac.dates import parse_date, format_date_key

TONES = ("sea", "sunset", "orchid", "ink")


def _as_date(value) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return parse_date(str(value).strip())


@dataclass(frozen=True)
class Event:
    """
    A date-ranged planner entry. Reversed ranges are swapped on construction,
    so `start <= end` always holds. `created_at` is epoch milliseconds and is
    only used to break stacking ties.
    """
    id: str
    label: str
    start: datetime.date
    end: datetime.date
    tone: str = "sea"
    images: tuple = ()
    created_at: int = 0
    description: str | None = None

    def __post_init__(self):
        if self.start > self.end:
            start, end = self.end, self.start
            object.__setattr__(self, "start", start)
            object.__setattr__(self, "end", end)
        object.__setattr__(self, "images", tuple(self.images or ()))

    @classmethod
    def from_payload(cls, payload: dict) -> "Event":
        """Build an Event from the event-source shape (`createdAt` or `created_at`)."""
        created = payload.get("createdAt", payload.get("created_at"))
        return cls(
            id=str(payload["id"]),
            label=str(payload["label"]),
            start=_as_date(payload["start"]),
            end=_as_date(payload["end"]),
            tone=payload.get("tone", "sea"),
            images=tuple(payload.get("images") or ()),
            created_at=int(created or 0),
            description=payload.get("description"),
        )

    def to_payload(self) -> dict:
        payload = {
            "id": self.id,
            "label": self.label,
            "start": format_date_key(self.start),
            "end": format_date_key(self.end),
            "tone": self.tone,
            "images": list(self.images),
            "createdAt": self.created_at,
        }
        if self.description is not None:
            payload["description"] = self.description
        return payload


@dataclass(frozen=True)
class GridCell:
    # row/column are 0-based: row = index // columns, column = index % columns
    index: int
    row: int
    column: int
    date: datetime.date | None = None
    day_number: int | None = None
    month_index: int | None = None
    is_month_start: bool = False
    is_weekend: bool = False

    @property
    def is_blank(self) -> bool:
        return self.date is None


@dataclass(frozen=True)
class Segment:
    """
    The row-local projection of an event. `row`, `col_start` and `col_end`
    are 1-based; `start_day`/`end_day` are the day-of-year bounds of the
    clipped event the segment belongs to.
    """
    event_id: str
    label: str
    tone: str
    start_day: int
    end_day: int
    row: int
    col_start: int
    span: int
    created_at: int = 0
    stack_index: int | None = None

    @property
    def col_end(self) -> int:
        return self.col_start + self.span - 1


@dataclass(frozen=True)
class LayoutResult:
    year: int
    columns: int
    rows: int
    start_offset: int
    days_in_year: int
    cells: tuple
    segments: tuple
    max_stack_by_row: tuple
    segments_by_row: tuple = ()

    @property
    def max_stack(self) -> int:
        return max(self.max_stack_by_row, default=0)

    def row_segments(self, row: int) -> list:
        """Stacked segments of a 1-based row, in placement order."""
        return next((list(placed) for r, placed in self.segments_by_row if r == row), [])


def normalize_submission(payload: dict) -> dict:
    """
    Shape a create/update payload for the event sink, guaranteeing
    start <= end. Label and tone are passed through untouched.
    """
    start = _as_date(payload["start"])
    end = _as_date(payload["end"])
    if start > end:
        logger.debug("Swapping reversed range {} → {}", start, end)
        start, end = end, start
    submission = {
        "label": payload.get("label"),
        "start": format_date_key(start),
        "end": format_date_key(end),
        "tone": payload.get("tone"),
        "images": list(payload.get("images") or []),
    }
    if payload.get("description") is not None:
        submission["description"] = payload["description"]
    return submission


def new_event_from_range(events: list, first: datetime.date, second: datetime.date, now_ms: int) -> Event:
    """
    Event created by picking two days on the grid: either click order works,
    the tone cycles through the palette by how many events already exist.
    """
    start, end = min(first, second), max(first, second)
    tone = TONES[len(events) % len(TONES)]
    return Event(
        id=f"event-{now_ms}",
        label="New event",
        start=start,
        end=end,
        tone=tone,
        images=(),
        created_at=now_ms,
    )


def validate_event_payload(payload: dict) -> None:
    """
    Persistence-side checks: non-blank label, parseable dates and a known tone.
    """
    label = payload.get("label")
    if label is None or not str(label).strip():
        logger.error("Event {!r} has a blank label.", payload.get("id"))
        raise ValueError(f"Event {payload.get('id')!r}: label can't be blank")
    for key in ("start", "end"):
        value = payload.get(key)
        if value is None or value == "":
            logger.error("Event {!r} is missing '{}'.", payload.get("id"), key)
            raise ValueError(f"Event {payload.get('id')!r}: {key} can't be blank")
        try:
            _as_date(value)
        except ValueError:
            logger.error("Event {!r} has a malformed {} date: {!r}", payload.get("id"), key, value)
            raise ValueError(f"Event {payload.get('id')!r}: invalid {key} date '{value}'")
    tone = payload.get("tone")
    if tone not in TONES:
        logger.error("Event {!r} has unknown tone {!r}.", payload.get("id"), tone)
        raise ValueError(f"Event {payload.get('id')!r}: tone must be one of {', '.join(TONES)}")
