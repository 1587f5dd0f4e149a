from pathlib import Path

import yaml
from loguru import logger

from almanac.models import TONES
from almanac.utils import css_color_to_hex


def load_config(path: str | Path = "config.yaml") -> dict:
    """
    Load planner config: inline `events`, ICS `calendars` and optional
    `tones` color overrides, normalizing every color to hex.
    """
    path = Path(path)
    if not path.is_file():
        logger.error("Config file {} not found.", path)
        raise FileNotFoundError(f"Config file '{path}' not found")

    with open(path, 'r', encoding='utf-8') as f:
        logger.debug("Loading configuration from {}", path)
        config = yaml.safe_load(f) or {}

    config["events"] = config.get("events") or []
    config["calendars"] = config.get("calendars") or []
    for cal in config["calendars"]:
        cal["tone"] = cal.get("tone", "sea")
        if cal["tone"] not in TONES:
            logger.error("Calendar {!r} has unknown tone {!r}.", cal.get("name"), cal["tone"])
            raise ValueError(f"Calendar {cal.get('name')!r}: tone must be one of {', '.join(TONES)}")

    tones = {}
    for tone, color in (config.get("tones") or {}).items():
        if tone not in TONES:
            logger.warning("Ignoring color for unknown tone {!r}.", tone)
            continue
        tones[tone] = css_color_to_hex(str(color))
    config["tones"] = tones
    return config
