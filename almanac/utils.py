from datetime import datetime
import re
from loguru import logger
import webcolors

import almanac.settings as settings


def css_color_to_hex(name_or_hex: str) -> str:
    """
    Convert a CSS color name, functional gray(%), or hex code to a 6-digit hex code.

    - Leaves hex codes unchanged (3-digit shorthands are expanded).
    - Parses CSS4 gray(%) syntax.
    - grayN class names gray0–gray15.
    - Falls back to standard CSS color names via webcolors.
    """
    value = name_or_hex.strip()
    if value.startswith("#"):
        if len(value) == 4:
            return "#" + "".join(ch * 2 for ch in value[1:])
        return value

    lower = value.lower()

    m_pct = re.fullmatch(r'gray\(\s*([0-9]+(?:\.[0-9]+)?)%\s*\)', lower)
    if m_pct:
        level = round(255 * float(m_pct.group(1)) / 100)
        return f"#{level:02X}{level:02X}{level:02X}"

    m = re.fullmatch(r'gray([0-9]|1[0-5])', lower)
    if m:
        level = int(m.group(1)) * 17
        return f"#{level:02X}{level:02X}{level:02X}"

    try:
        return webcolors.name_to_hex(lower)
    except ValueError:
        logger.error("Unknown CSS color '{}', passing through.", name_or_hex)
        return name_or_hex


def tone_color(tone: str) -> str:
    """Hex fill for an event tone; unknown tones fall back to ink."""
    raw = settings.TONE_COLORS.get(tone) or settings.TONE_COLORS["ink"]
    return css_color_to_hex(raw)


def parse_year_range(s: str, today=None) -> list[int]:
    """
    Years to render. Accepts "this year", "next year", "2026",
    "2026:2028" / "2026/2028" / "2026 to 2028" and "N years" (from this year).
    """
    s = s.strip().strip('"').strip("'").lower()
    this_year = (today or datetime.now(tz=settings.TZ_LOCAL).date()).year

    if s in ("", "year", "this year"):
        return [this_year]
    if s == "next year":
        return [this_year + 1]
    if s == "last year":
        return [this_year - 1]

    if (m := re.fullmatch(r'(?P<num>\d+)\s*years?', s)):
        num = int(m.group("num"))
        if num < 1:
            logger.error("Year count must be positive: {!r}", s)
            raise ValueError(f"Invalid year range '{s}'")
        return [this_year + i for i in range(num)]

    if (m := re.fullmatch(r'(\d{4})\s*(?:[:/]|to)\s*(\d{4})', s)):
        start, end = int(m.group(1)), int(m.group(2))
    elif re.fullmatch(r'\d{4}', s):
        start = end = int(s)
    else:
        logger.error("Cannot parse year range {!r}", s)
        raise ValueError(f"Invalid year range '{s}'")

    if start > end:
        logger.error("Start year {} after end year {}", start, end)
        raise ValueError(f"Start year {start} after end year {end}")

    return list(range(start, end + 1))
