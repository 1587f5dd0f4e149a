import os
from dateutil import tz
from pathlib import Path


# Project root
BASE_DIR = Path(__file__).resolve().parent.parent

# File paths
CONFIG_PATH  = Path(os.getenv("APP_CONFIG_PATH", str(BASE_DIR / "config.yaml")))
META_FILE    = Path(os.getenv("APP_META_FILE_PATH", str(BASE_DIR / "planner_meta.yaml")))
OUTPUT_PDF   = os.getenv("APP_OUTPUT_PDF_PATH", "output/almanac.pdf")
OUTPUT_PNG   = os.getenv("APP_OUTPUT_PNG_DIR", "output/png")
FONTS_DIR = BASE_DIR / "fonts"

TIMEZONE = os.getenv("TZ", "UTC")
YEAR_RANGE = os.getenv("TIME_YEAR_RANGE", "this year")

TZ_LOCAL = tz.gettz(TIMEZONE) or tz.tzutc()

FORMAT       = os.getenv("APP_OUTPUT_FORMAT", "pdf").lower()
USE_SAMPLES  = os.getenv("APP_USE_SAMPLES", "false").lower() in ("1", "true", "yes")
VISION_BOARD = os.getenv("DOC_VISION_BOARD", "true").lower() not in ("0","false","no")
VISION_MAX_IMAGES = int(os.getenv("DOC_VISION_MAX_IMAGES", 3))
WEEKEND_SHADING = os.getenv("DOC_WEEKEND_SHADING", "true").lower() not in ("0","false","no")

# Color defaults
CELL_FILL       = os.getenv("DOC_CELL_FILL_COLOR", "white")
WEEKEND_FILL    = os.getenv("DOC_WEEKEND_FILL_COLOR", "gray(94%)")
GRIDLINE_COLOR  = os.getenv("DOC_GRID_LINE_COLOR", "gray(20%)")
MONTH_START_COLOR = os.getenv("DOC_MONTH_START_COLOR", "black")
FOOTER_COLOR    = os.getenv("DOC_FOOTER_COLOR", "gray(60%)")

# Tone palette, overridable per tone from config.yaml
TONE_COLORS = {
    "sea":    os.getenv("DOC_TONE_SEA", "#1b6c7a"),
    "sunset": os.getenv("DOC_TONE_SUNSET", "#e66a3b"),
    "orchid": os.getenv("DOC_TONE_ORCHID", "#8a4b87"),
    "ink":    os.getenv("DOC_TONE_INK", "#1f2937"),
}

# Page layout
PDF_MARGIN_LEFT   = float(os.getenv("DOC_MARGIN_LEFT", 6))
PDF_MARGIN_RIGHT  = float(os.getenv("DOC_MARGIN_RIGHT", 6))
PDF_MARGIN_TOP    = float(os.getenv("DOC_MARGIN_TOP", 9))
PDF_MARGIN_BOTTOM = float(os.getenv("DOC_MARGIN_BOTTOM", 6))
PDF_GRID_BOTTOM_BUFFER = float(os.getenv("DOC_GRID_BOTTOM_PADDING", 9))
PDF_PAGE_SIZE= os.getenv("DOC_PAGE_DIMENSIONS", "1404x1872")  # Default to reMarkable 2
PDF_DPI = float(os.getenv("DOC_PAGE_DPI", "226"))
FOOTER = os.getenv("DOC_FOOTER_TEXT", "A L M A N A C")

# Grid geometry, in points
GRID_MIN_DAY_WIDTH = float(os.getenv("GRID_MIN_DAY_WIDTH", 66))
GRID_CELL_MIN      = int(os.getenv("GRID_CELL_MIN", 44))
GRID_CELL_MAX      = int(os.getenv("GRID_CELL_MAX", 70))
GRID_CELL_DEFAULT  = int(os.getenv("GRID_CELL_DEFAULT", 56))
EVENT_BAR_HEIGHT   = float(os.getenv("GRID_EVENT_BAR_HEIGHT", 14))
EVENT_BAR_GAP      = float(os.getenv("GRID_EVENT_BAR_GAP", 3))
ROW_HEIGHT_MODE    = os.getenv("GRID_ROW_HEIGHT_MODE", "row").lower()

# Behavior
FORCE_REFRESH = os.getenv("APP_FORCE_REFRESH", "false").lower() in ("1", "true", "yes")
