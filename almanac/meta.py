import yaml
from loguru import logger

import almanac.settings as settings

META_KEYS = ("_last_anchor", "events_hash")


def load_meta(path=None) -> dict:
    """
    Load metadata from META_FILE. Return {} if missing or invalid.
    """
    meta_file = path or settings.META_FILE
    if meta_file.exists() and meta_file.is_file():
        try:
            data = yaml.safe_load(meta_file.read_text())
        except yaml.YAMLError as e:
            logger.warning("Failed to parse meta file: {}, using empty metadata.", e)
            return {}
        if isinstance(data, dict):
            return {k: v for k, v in data.items() if k in META_KEYS}
    return {}


def save_meta(meta: dict, path=None) -> None:
    """
    Save metadata to META_FILE, only writing expected keys.
    """
    meta_file = path or settings.META_FILE
    to_write = {k: meta[k] for k in META_KEYS if k in meta}
    try:
        meta_file.parent.mkdir(parents=True, exist_ok=True)
        meta_file.write_text(yaml.safe_dump(to_write))
    except OSError as e:
        logger.warning("Failed to write meta file: {}", e)


def needs_refresh(meta: dict, anchor: str, events_hash: str, force: bool = False) -> bool:
    """True when the year range or the events changed since the last run."""
    if force:
        logger.info("APP_FORCE_REFRESH set, refreshing...")
        return True
    last_anchor = meta.get("_last_anchor")
    if last_anchor != anchor:
        logger.info("Year range changed: {} → {}, refreshing...", last_anchor, anchor)
        return True
    if meta.get("events_hash") != events_hash:
        logger.info("Events changed, refreshing...")
        return True
    return False
