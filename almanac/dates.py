import calendar
import re
from datetime import datetime, date

MONTH_ABBR = [calendar.month_abbr[m] for m in range(1, 13)]
WEEKDAY_SHORT = ['Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat']


def parse_date(text: str) -> date:
    """
    Interpret a strict YYYY-MM-DD string as a calendar date (no timezone).
    Raises ValueError on anything else, including unpadded months or days.
    """
    if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", text):
        raise ValueError(f"Expected YYYY-MM-DD, got {text!r}")
    return datetime.strptime(text, "%Y-%m-%d").date()


def is_leap_year(year: int) -> bool:
    return year % 4 == 0 and (year % 100 != 0 or year % 400 == 0)


def days_in_year(year: int) -> int:
    return 366 if is_leap_year(year) else 365


def day_of_year(d: date) -> int:
    """1-based ordinal day of `d` within its own year."""
    return (d - date(d.year, 1, 1)).days + 1


def weekday_index(d: date) -> int:
    """Sunday-first weekday index, 0=Sunday .. 6=Saturday."""
    return (d.weekday() + 1) % 7


def format_date_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def is_date_in_range(d: date, start: date, end: date) -> bool:
    lo, hi = min(start, end), max(start, end)
    return lo <= d <= hi


def format_event_range(start: date, end: date) -> str:
    """
    Short human range label: "Mar 17–23" inside one month,
    "Mar 30–Apr 2" across months.
    """
    start_month = MONTH_ABBR[start.month - 1]
    end_month = MONTH_ABBR[end.month - 1]
    if start.month == end.month:
        return f"{start_month} {start.day}–{end.day}"
    return f"{start_month} {start.day}–{end_month} {end.day}"
