import math

from loguru import logger
from reportlab.lib.pagesizes import letter

import almanac.settings as settings
from almanac.grid import build_grid
from almanac.event_processing import split_segments, assign_stacks, max_overlap
from almanac.models import Event, LayoutResult


def compute_columns(
    width: float,
    min_day_width: float | None = None,
    cell_min: int | None = None,
    cell_max: int | None = None,
    default_cell: int | None = None,
) -> tuple[int, int]:
    """
    Fit as many whole weeks as the width allows (at least one) and derive the
    clamped per-day cell size. Returns (columns, cell_size).
    """
    min_day_width = settings.GRID_MIN_DAY_WIDTH if min_day_width is None else min_day_width
    cell_min = settings.GRID_CELL_MIN if cell_min is None else cell_min
    cell_max = settings.GRID_CELL_MAX if cell_max is None else cell_max
    default_cell = settings.GRID_CELL_DEFAULT if default_cell is None else default_cell

    min_week_width = min_day_width * 7
    week_groups = max(1, math.floor(width / min_week_width)) if width > 0 else 1
    columns = week_groups * 7
    raw_cell = width / columns if width > 0 else default_cell
    cell_size = max(cell_min, min(cell_max, math.floor(raw_cell)))
    return columns, cell_size


def layout(year: int, columns: int, events: list) -> LayoutResult:
    """
    Pure year layout: grid cells, row-bounded segments and their stack
    indices. Identical inputs always give an identical result.
    """
    cells, geo = build_grid(year, columns)
    segments = split_segments(events, year, geo["start_offset"], columns)
    stacked, max_stack_by_row, by_row = assign_stacks(segments, geo["rows"])

    for row, placed in by_row.items():
        depth = max_stack_by_row[row - 1]
        overlap = max_overlap(placed)
        if depth != overlap:
            logger.warning("Row {} uses {} slots for an overlap of {}", row, depth, overlap)

    return LayoutResult(
        year=year,
        columns=columns,
        rows=geo["rows"],
        start_offset=geo["start_offset"],
        days_in_year=geo["days_in_year"],
        cells=tuple(cells),
        segments=tuple(stacked),
        max_stack_by_row=tuple(max_stack_by_row),
        segments_by_row=tuple((row, tuple(placed)) for row, placed in by_row.items()),
    )


def stack_offset(depth: int, bar_height: float | None = None, bar_gap: float | None = None) -> float:
    """Vertical space reserved above a row's day cells for `depth` stacked bars."""
    bar_height = settings.EVENT_BAR_HEIGHT if bar_height is None else bar_height
    bar_gap = settings.EVENT_BAR_GAP if bar_gap is None else bar_gap
    if depth <= 0:
        return 0
    return depth * bar_height + (depth - 1) * bar_gap + 6


def row_heights(result: LayoutResult, cell_size: float, mode: str | None = None) -> list[float]:
    """
    Height of each row: the cell plus room for its event bars. In "uniform"
    mode every row reserves the deepest row's stack.
    """
    mode = settings.ROW_HEIGHT_MODE if mode is None else mode
    if mode == "uniform":
        offset = stack_offset(result.max_stack)
        return [cell_size + offset for _ in range(result.rows)]
    return [cell_size + stack_offset(depth) for depth in result.max_stack_by_row]


def paginate_rows(heights: list[float], available: float) -> list[list[int]]:
    """
    Greedily pack consecutive 1-based rows onto pages of height `available`.
    A row taller than a page still gets a page of its own.
    """
    pages = []
    current, used = [], 0.0
    for row, h in enumerate(heights, start=1):
        if current and used + h > available:
            pages.append(current)
            current, used = [], 0.0
        current.append(row)
        used += h
    if current:
        pages.append(current)
    return pages


def pixels_to_points(pixels, dpi):
    return pixels * 72 / dpi


def get_page_size():
    env_size = settings.PDF_PAGE_SIZE
    env_dpi = settings.PDF_DPI
    try:
        px_width, px_height = map(int, env_size.lower().split("x"))
        width_pt = pixels_to_points(px_width, dpi=env_dpi)
        height_pt = pixels_to_points(px_height, dpi=env_dpi)
        return width_pt, height_pt
    except ValueError as e:
        logger.warning("Invalid DOC_PAGE_DIMENSIONS or DOC_PAGE_DPI: {}. Using fallback letter size.", e)
        return letter


def get_layout_config(width, height):
    # Raw page margins from environment
    page_left   = settings.PDF_MARGIN_LEFT
    page_right  = width - settings.PDF_MARGIN_RIGHT
    page_top    = height - settings.PDF_MARGIN_TOP
    page_bottom = settings.PDF_MARGIN_BOTTOM

    # Fixed dimensions
    heading_size   = 12
    heading_ascent = heading_size * 0.75
    weekday_band   = 12
    element_pad    = 8
    text_padding   = 3

    bottom_buffer = settings.PDF_GRID_BOTTOM_BUFFER

    # Grid sits under the title, separator line and weekday labels
    grid_top    = page_top - heading_ascent - (2 * element_pad) - weekday_band
    grid_bottom = page_bottom + bottom_buffer
    grid_left   = page_left
    grid_right  = page_right

    return {
        "grid_top":       grid_top,
        "grid_bottom":    grid_bottom,
        "grid_left":      grid_left,
        "grid_right":     grid_right,
        "grid_width":     grid_right - grid_left,
        "grid_height":    grid_top - grid_bottom,
        "heading_size":   heading_size,
        "heading_ascent": heading_ascent,
        "weekday_band":   weekday_band,
        "page_left":      page_left,
        "page_right":     page_right,
        "page_top":       page_top,
        "page_bottom":    page_bottom,
        "element_pad":    element_pad,
        "text_padding":   text_padding,
    }


class LayoutSession:
    """
    Holds the inputs of one planner view and keeps its layout current.
    Any change to (year, columns, events) replaces `result` wholesale;
    changes that leave the inputs equal do not recompute.
    """

    def __init__(self, year: int, events: list | None = None, width: float = 0):
        self.year = year
        self.events = list(events or [])
        self.columns, self.cell_size = compute_columns(width)
        self.recomputes = 0
        self.result = None
        self._refresh()

    def _refresh(self):
        logger.debug("Recomputing layout for {} at {} columns", self.year, self.columns)
        self.result = layout(self.year, self.columns, self.events)
        self.recomputes += 1
        return self.result

    def resize(self, width: float) -> LayoutResult:
        columns, cell_size = compute_columns(width)
        self.cell_size = cell_size
        if columns != self.columns:
            logger.debug("Width {} → {} columns (was {})", width, columns, self.columns)
            self.columns = columns
            return self._refresh()
        return self.result

    def set_year(self, year: int) -> LayoutResult:
        if year != self.year:
            self.year = year
            return self._refresh()
        return self.result

    def shift_year(self, delta: int) -> LayoutResult:
        return self.set_year(self.year + delta)

    def set_events(self, events: list) -> LayoutResult:
        events = list(events)
        if events != self.events:
            self.events = events
            return self._refresh()
        return self.result

    def add_event(self, event: Event) -> LayoutResult:
        return self.set_events(self.events + [event])

    def row_heights(self, mode: str | None = None) -> list[float]:
        return row_heights(self.result, self.cell_size, mode)
