from io import BytesIO
from datetime import datetime
import subprocess
from pathlib import Path
from loguru import logger

from reportlab.pdfgen import canvas
from reportlab.lib.colors import HexColor, white
from reportlab.lib.utils import ImageReader

import almanac.settings as settings
from almanac.dates import MONTH_ABBR, WEEKDAY_SHORT, format_event_range, format_date_key
from almanac.fonts import FONTS
from almanac.layout import get_layout_config, get_page_size, row_heights, paginate_rows, stack_offset
from almanac.loaders import load_image
from almanac.models import LayoutResult
from almanac.utils import css_color_to_hex, tone_color


def draw_rect_with_optional_round(c, x, y, w, h, radius,
                                  round_left=True, round_right=True,
                                  stroke=0, fill=1):
    """
    Draws a rectangle at (x,y) of width w, height h.
    round_left / round_right round the two corners on that side with
    `radius`; a bar continuing from or into another row keeps that side square.
    """
    radius = min(radius, w / 2, h / 2)
    p = c.beginPath()
    # start at bottom-left
    p.moveTo(x + radius if round_left else x, y)

    # bottom edge, then right side
    if round_right:
        p.lineTo(x + w - radius, y)
        p.arcTo(x + w - 2*radius, y, x + w, y + 2*radius, startAng=270, extent=90)
        p.lineTo(x + w, y + h - radius)
        p.arcTo(x + w - 2*radius, y + h - 2*radius, x + w, y + h, startAng=0, extent=90)
    else:
        p.lineTo(x + w, y)
        p.lineTo(x + w, y + h)

    # top edge, then left side
    if round_left:
        p.lineTo(x + radius, y + h)
        p.arcTo(x, y + h - 2*radius, x + 2*radius, y + h, startAng=90, extent=90)
        p.lineTo(x, y + radius)
        p.arcTo(x, y, x + 2*radius, y + 2*radius, startAng=180, extent=90)
    else:
        p.lineTo(x, y + h)
        p.lineTo(x, y)

    p.close()
    c.drawPath(p, stroke=stroke, fill=fill)


def ellipsize(c, text, font_name, font_size, max_w):
    if c.stringWidth(text, font_name, font_size) <= max_w:
        return text
    txt = text
    while txt and c.stringWidth(txt + "...", font_name, font_size) > max_w:
        txt = txt[:-1]
    return (txt.rstrip() + "...") if txt else ""


def day_anchor(d) -> str:
    """Stable per-day bookmark key."""
    return f"year-day-{format_date_key(d)}"


def draw_header(c, width, layout, title):
    c.setFillGray(0)
    title_y = layout["page_top"] - layout["heading_ascent"]  # Pin ascenders to page_top
    c.setFont(FONTS["bold"], layout["heading_size"])
    c.drawCentredString(width/2, title_y, title)

    sep_y = title_y - layout["element_pad"]
    c.setStrokeGray(0.4)
    c.setLineWidth(1)
    c.line(layout["page_left"], sep_y, layout["page_right"], sep_y)
    return sep_y


def draw_weekday_labels(c, layout, columns, cell_w):
    y = layout["grid_top"] + 3
    c.setFillGray(0.3)
    c.setFont(FONTS["semibold"], 6)
    for col in range(columns):
        cx = layout["grid_left"] + col * cell_w + cell_w / 2
        c.drawCentredString(cx, y, WEEKDAY_SHORT[col % 7])


def draw_footer(c, width, tz_local):
    footer = settings.FOOTER
    if footer == "disabled":
        return
    if footer == "updatedat":
        footer_text = datetime.now(tz_local).strftime("Updated: %Y-%m-%d %H:%M %Z")
    else:
        footer_text = footer
    c.setFont(FONTS["light"], 6)
    c.setFillColor(HexColor(css_color_to_hex(settings.FOOTER_COLOR)))
    c.drawCentredString(width/2, settings.PDF_MARGIN_BOTTOM, footer_text)


def draw_day_cells(c, result: LayoutResult, row, x0, y_top, cell_w, cell_h):
    """Paint the day cells of a 1-based row whose cell band starts at y_top."""
    grid_hex = css_color_to_hex(settings.GRIDLINE_COLOR)
    first = (row - 1) * result.columns
    for cell in result.cells[first:first + result.columns]:
        x = x0 + cell.column * cell_w
        y = y_top - cell_h
        if cell.is_blank:
            continue
        fill = settings.WEEKEND_FILL if (cell.is_weekend and settings.WEEKEND_SHADING) else settings.CELL_FILL
        c.setFillColor(HexColor(css_color_to_hex(fill)))
        c.setStrokeColor(HexColor(grid_hex))
        c.setLineWidth(0.33)
        c.rect(x, y, cell_w, cell_h, stroke=1, fill=1)

        c.setFillGray(0.15)
        if cell.is_month_start:
            # Month marker: heavier left rule and the month name
            c.setStrokeColor(HexColor(css_color_to_hex(settings.MONTH_START_COLOR)))
            c.setLineWidth(1.2)
            c.line(x, y, x, y + cell_h)
            c.setFont(FONTS["bold"], 7)
            c.drawString(x + 3, y + cell_h - 9, f"{MONTH_ABBR[cell.month_index]} {cell.day_number}")
            key = day_anchor(cell.date)
            c.bookmarkPage(key)
            c.addOutlineEntry(f"{MONTH_ABBR[cell.month_index]} {result.year}", key, level=0)
        else:
            c.setFont(FONTS["regular"], 7)
            c.drawString(x + 3, y + cell_h - 9, str(cell.day_number))


def draw_segments(c, result: LayoutResult, row, x0, y_top, cell_w):
    """Paint a row's stacked event bars downward from y_top."""
    bar_h = settings.EVENT_BAR_HEIGHT
    gap = settings.EVENT_BAR_GAP
    font = FONTS["semibold"]
    font_size = max(5, bar_h * 0.5)
    for seg in result.row_segments(row):
        x = x0 + (seg.col_start - 1) * cell_w + 1
        w = seg.span * cell_w - 2
        y = y_top - 3 - seg.stack_index * (bar_h + gap) - bar_h

        # Square off the sides where the event continues into a neighbouring row
        flat_start = (seg.row - 1) * result.columns + seg.col_start - 1
        flat_end = flat_start + seg.span - 1
        starts_here = flat_start == result.start_offset + seg.start_day - 1
        ends_here = flat_end == result.start_offset + seg.end_day - 1

        c.setFillColor(HexColor(tone_color(seg.tone)))
        draw_rect_with_optional_round(c, x, y, w, bar_h, 4,
                                      round_left=starts_here, round_right=ends_here)
        c.setFillColor(white)
        c.setFont(font, font_size)
        label = ellipsize(c, seg.label, font, font_size, w - 6)
        c.drawString(x + 3, y + (bar_h - font_size * 0.7) / 2, label)
        logger.log("VISUAL", "Bar '{}' row {} slot {}: x={x:.1f} w={w:.1f} y={y:.1f}",
                   seg.label, seg.row, seg.stack_index, x=x, w=w, y=y)


def render_year_pages(c, result: LayoutResult, cell_size, width, height, tz_local=None):
    """
    Draw the year grid across as many pages as its rows need. Every page
    repeats the title and weekday labels. Returns the number of pages.
    """
    tz_local = tz_local or settings.TZ_LOCAL
    layout = get_layout_config(width, height)
    cell_w = layout["grid_width"] / result.columns
    heights = row_heights(result, cell_size)
    pages = paginate_rows(heights, layout["grid_height"])

    logger.log("VISUAL", "Page size: {w:.2f}×{h:.2f}", w=width, h=height)
    logger.log("VISUAL", "Grid: {} columns, cell {:.2f}×{}", result.columns, cell_w, cell_size)
    logger.debug("Year {} spans {} page(s)", result.year, len(pages))

    uniform = settings.ROW_HEIGHT_MODE == "uniform"
    for page_no, page_rows in enumerate(pages, start=1):
        title = str(result.year) if len(pages) == 1 else f"{result.year} · {page_no}/{len(pages)}"
        draw_header(c, width, layout, title)
        draw_weekday_labels(c, layout, result.columns, cell_w)

        y = layout["grid_top"]
        for row in page_rows:
            depth = result.max_stack if uniform else result.max_stack_by_row[row - 1]
            offset = stack_offset(depth)
            draw_segments(c, result, row, layout["grid_left"], y, cell_w)
            draw_day_cells(c, result, row, layout["grid_left"], y - offset, cell_w, cell_size)
            y -= heights[row - 1]

        draw_footer(c, width, tz_local)
        c.showPage()
    return len(pages)


def render_vision_board(c, event, width, height, max_images=None):
    """
    One page per event: label, date range and up to `max_images` of its
    images fanned out like polaroids. Returns how many images were drawn.
    """
    max_images = settings.VISION_MAX_IMAGES if max_images is None else max_images
    layout = get_layout_config(width, height)
    sep_y = draw_header(c, width, layout, "Vision board")

    c.setFillColor(HexColor(tone_color(event.tone)))
    c.circle(layout["page_left"] + 8, sep_y - 24, 4, stroke=0, fill=1)
    c.setFillGray(0)
    c.setFont(FONTS["semibold"], 14)
    c.drawString(layout["page_left"] + 18, sep_y - 29, event.label)
    c.setFont(FONTS["regular"], 9)
    c.setFillGray(0.4)
    c.drawString(layout["page_left"] + 18, sep_y - 44, format_event_range(event.start, event.end))

    card_w = min(160, (layout["page_right"] - layout["page_left"]) / 2)
    card_h = card_w * 4 / 3
    centre_x = width / 2
    top_y = sep_y - 80

    drawn = 0
    for ref in event.images[:max_images]:
        data = load_image(ref, output_width=int(card_w * settings.PDF_DPI / 72))
        if data is None:
            continue
        img = ImageReader(BytesIO(data))
        c.saveState()
        c.translate(centre_x + (drawn * 28 - 28) * 2, top_y - drawn * 20)
        c.rotate(6 if drawn % 2 == 0 else -5)
        # White polaroid frame, then the picture inset
        c.setFillColor(white)
        c.setStrokeGray(0.8)
        c.roundRect(-card_w / 2 - 6, -card_h - 22, card_w + 12, card_h + 28, 4, stroke=1, fill=1)
        c.drawImage(img, -card_w / 2, -card_h, width=card_w, height=card_h,
                    mask="auto", preserveAspectRatio=True)
        c.restoreState()
        drawn += 1

    logger.log("VISUAL", "Vision board '{}': {} image(s)", event.label, drawn)
    draw_footer(c, width, settings.TZ_LOCAL)
    c.showPage()
    return drawn


def render_year_pdf(result: LayoutResult, events: list, output_path: str, cell_size: int,
                    vision_board: bool | None = None) -> int:
    """
    Write the year grid, followed by a vision board for every event of the
    year that has images. Returns the page count.
    """
    vision_board = settings.VISION_BOARD if vision_board is None else vision_board
    width, height = get_page_size()
    c = canvas.Canvas(output_path, pagesize=(width, height))
    c.setTitle(f"Almanac {result.year}")
    pages = render_year_pages(c, result, cell_size, width, height)

    if vision_board:
        shown = {seg.event_id for seg in result.segments}
        for event in events:
            if event.id in shown and event.images:
                render_vision_board(c, event, width, height)
                pages += 1

    c.save()
    logger.debug("Wrote {} page(s) for {} to {}", pages, result.year, output_path)
    return pages


def export_pdf_to_png(pdf_path: str,
                      years: list,
                      output_dir: str = None,
                      dpi: int = 150):
    """
    Calls Poppler's pdftocairo to rasterize each page of `pdf_path` to PNG.
    Output files: almanac_<first year>-<last year>_NN.png in page order.
    """
    base = Path(pdf_path).with_suffix('')
    out_dir = Path(output_dir or f"{base}_png")
    out_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Rendering PNGs...")

    # prefix for pdftocairo (it will append -1.png, -2.png, etc)
    prefix = str(out_dir / "page")
    subprocess.run([
        "pdftocairo",
        "-png",
        "-r", str(dpi),
        str(pdf_path),
        prefix
    ], check=True)

    span = f"{years[0]}-{years[-1]}" if len(years) > 1 else str(years[0])
    for file in sorted(out_dir.glob("page-*.png")):
        idx = int(file.stem.split('-')[1])  # 1-based page number
        file.rename(out_dir / f"almanac_{span}_{idx:02d}.png")

    return str(out_dir)
