import sys
import os
from pathlib import Path

from PyPDF2 import PdfMerger
from loguru import logger

import almanac.settings as settings
from almanac.fonts import init_fonts
from almanac.config import load_config
from almanac.meta import load_meta, save_meta, needs_refresh
from almanac.calendar_loader import load_events
from almanac.event_processing import compute_events_hash
from almanac.layout import get_page_size, get_layout_config, compute_columns, layout
from almanac.utils import parse_year_range
from almanac.renderers import render_year_pdf, export_pdf_to_png
from almanac.samples import sample_events
from almanac.logger import configure_logging


def main():
    # 0) Set up logs
    configure_logging()
    # 1) Initialize fonts once
    init_fonts()
    logger.debug("Timezone: {}", settings.TIMEZONE)

    # 2) Years to render
    years = parse_year_range(os.getenv("TIME_YEAR_RANGE", settings.YEAR_RANGE))

    # 3) Load config and events
    config_path = Path(settings.CONFIG_PATH)
    config = load_config(config_path) if config_path.is_file() else {"events": [], "calendars": [], "tones": {}}
    settings.TONE_COLORS.update(config["tones"])
    events = load_events(config)
    if not events and settings.USE_SAMPLES:
        logger.info("No events configured, using sample events.")
        events = sample_events(years[0])
    logger.info("Loaded {} event(s)", len(events))

    # 4) Skip when nothing changed
    anchor   = f"{years[0]}:{years[-1]}"
    new_hash = compute_events_hash(events)
    meta     = load_meta()
    if not needs_refresh(meta, anchor, new_hash, settings.FORCE_REFRESH):
        logger.info("No changes for {}, skipping generation.", anchor)
        sys.exit(0)

    # 5) Responsive geometry from the page's grid width
    width, height = get_page_size()
    grid_width = get_layout_config(width, height)["grid_width"]
    columns, cell_size = compute_columns(grid_width)
    logger.debug("Grid width {:.1f}pt → {} columns, cell {}pt", grid_width, columns, cell_size)

    # 6) Per-year layout & rendering
    merger = PdfMerger()
    temp_files = []
    for year in years:
        result = layout(year, columns, events)
        tmp = f"/tmp/almanac_{year}.pdf"
        render_year_pdf(result, events, tmp, cell_size)
        merger.append(tmp)
        temp_files.append(tmp)

    # 7) Write merged PDF
    out_path = settings.OUTPUT_PDF
    os.makedirs(os.path.dirname(out_path) or ".", exist_ok=True)
    with open(out_path, "wb") as f:
        merger.write(f)
    merger.close()
    logger.info("Wrote file to {}", out_path)

    if settings.FORMAT in ("png", "both"):
        export_pdf_to_png(out_path, years, output_dir=settings.OUTPUT_PNG)

    # 8) Persist metadata
    save_meta({"_last_anchor": anchor, "events_hash": new_hash})
    logger.info("✅ Completed generation for {}", anchor)

    # 9) Clean up
    for fpath in temp_files:
        os.remove(fpath)


if __name__ == '__main__':
    main()
