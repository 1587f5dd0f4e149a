import math
from datetime import date, timedelta

from loguru import logger

from almanac.dates import days_in_year, weekday_index
from almanac.models import GridCell


def grid_geometry(year: int, columns: int) -> dict:
    """
    Padding arithmetic for a year laid out Sunday-first in rows of `columns`.
    Raises ValueError for non-positive column counts.
    """
    if columns <= 0:
        logger.error("Grid needs a positive column count, got {}.", columns)
        raise ValueError(f"columns must be positive, got {columns}")

    n_days       = days_in_year(year)
    start_offset = weekday_index(date(year, 1, 1))
    total_cells  = start_offset + n_days
    trailing     = (columns - total_cells % columns) % columns
    grid_cells   = total_cells + trailing
    rows         = math.ceil(grid_cells / columns)

    return {
        "year":         year,
        "columns":      columns,
        "days_in_year": n_days,
        "start_offset": start_offset,
        "total_cells":  total_cells,
        "trailing":     trailing,
        "grid_cells":   grid_cells,
        "rows":         rows,
    }


def build_grid(year: int, columns: int) -> tuple[list[GridCell], dict]:
    """
    Lay out every day of `year` into a gap-free, rectangular, row-major grid.
    Cells before January 1 and after December 31 are blank padding.
    Returns (cells, geometry).
    """
    geo = grid_geometry(year, columns)
    jan1 = date(year, 1, 1)
    cells = []
    for i in range(geo["grid_cells"]):
        row, column = divmod(i, columns)
        doy = i - geo["start_offset"] + 1
        if doy < 1 or doy > geo["days_in_year"]:
            cells.append(GridCell(index=i, row=row, column=column))
            continue
        d = jan1 + timedelta(days=doy - 1)
        cells.append(GridCell(
            index=i,
            row=row,
            column=column,
            date=d,
            day_number=d.day,
            month_index=d.month - 1,
            is_month_start=d.day == 1,
            is_weekend=weekday_index(d) in (0, 6),
        ))

    logger.log(
        "LAYOUT",
        "Grid {}: {} columns × {} rows (offset {}, trailing {})",
        year, columns, geo["rows"], geo["start_offset"], geo["trailing"],
    )
    return cells, geo
