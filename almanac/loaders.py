import base64
import re
from pathlib import Path
from urllib.parse import unquote_to_bytes
from xml.etree.ElementTree import ParseError

import cairosvg
import requests
from loguru import logger

DATA_URI = re.compile(r'^data:(?P<mime>[\w/+.-]+)?(?P<params>(?:;[\w=.-]+)*?)(?P<b64>;base64)?,(?P<data>.*)$', re.S)


def decode_data_uri(uri: str) -> tuple[str, bytes]:
    """
    Split a data: URI into (mime type, raw bytes). Handles both base64 and
    percent-encoded payloads.
    """
    m = DATA_URI.match(uri)
    if not m:
        raise ValueError("Not a data URI")
    mime = (m.group("mime") or "text/plain").lower()
    payload = m.group("data")
    if m.group("b64"):
        return mime, base64.b64decode("".join(payload.split()), validate=True)
    return mime, unquote_to_bytes(payload)


def fetch_image(ref: str) -> tuple[str, bytes]:
    """
    Resolve an image reference (data URI, http(s) URL or file path) to
    (mime type, bytes).
    """
    if ref.startswith("data:"):
        return decode_data_uri(ref)
    if ref.startswith("http"):
        resp = requests.get(ref, timeout=30)
        resp.raise_for_status()
        mime = resp.headers.get("Content-Type", "").split(";")[0].strip().lower()
        return mime, resp.content
    path = Path(ref)
    mime = "image/svg+xml" if path.suffix.lower() == ".svg" else ""
    return mime, path.read_bytes()


def load_image(ref: str, output_width: int | None = None) -> bytes | None:
    """
    Image bytes ReportLab can draw, rasterizing SVG to PNG. Unreadable
    references are logged and give None.
    """
    try:
        mime, data = fetch_image(ref)
        if mime == "image/svg+xml" or data.lstrip()[:5] in (b"<svg ", b"<?xml"):
            return cairosvg.svg2png(bytestring=data, output_width=output_width)
        return data
    except (OSError, ValueError, ParseError, requests.RequestException) as e:
        logger.warning("Skipping image {}: {}", ref[:60], e)
        return None
