"""Tests for PDF rendering (almanac/renderers.py), writing real files to tmp_path."""

import pytest

import almanac.renderers as renderers
import almanac.settings as settings
from almanac.layout import layout
from almanac.renderers import ellipsize, export_pdf_to_png, render_year_pdf
from almanac.samples import sample_events
from reportlab.pdfgen import canvas


@pytest.fixture
def page(monkeypatch):
    monkeypatch.setattr(settings, "PDF_PAGE_SIZE", "1404x1872")
    monkeypatch.setattr(settings, "PDF_DPI", 226.0)
    monkeypatch.setattr(settings, "FOOTER", "A L M A N A C")


def test_year_pdf_without_vision_boards(page, tmp_path, scenario_events):
    result = layout(2026, 7, scenario_events)
    out = tmp_path / "year.pdf"
    pages = render_year_pdf(result, scenario_events, str(out), cell_size=56, vision_board=False)
    assert pages > 1  # 53 week rows don't fit one portrait page
    assert out.read_bytes().startswith(b"%PDF")


def test_vision_board_page_per_event_with_images(page, tmp_path):
    events = sample_events(2026)
    result = layout(2026, 7, events)
    plain = render_year_pdf(result, events, str(tmp_path / "plain.pdf"), 56, vision_board=False)
    boards = render_year_pdf(result, events, str(tmp_path / "boards.pdf"), 56, vision_board=True)
    assert boards == plain + len(events)


def test_events_outside_the_year_get_no_vision_board(page, tmp_path):
    events = sample_events(2025)
    result = layout(2026, 7, events)
    plain = render_year_pdf(result, events, str(tmp_path / "plain.pdf"), 56, vision_board=False)
    boards = render_year_pdf(result, events, str(tmp_path / "boards.pdf"), 56, vision_board=True)
    assert boards == plain


def test_uniform_rows_need_at_least_as_many_pages(page, tmp_path, monkeypatch, scenario_events):
    result = layout(2026, 7, scenario_events)
    monkeypatch.setattr(settings, "ROW_HEIGHT_MODE", "row")
    per_row = render_year_pdf(result, [], str(tmp_path / "row.pdf"), 56, vision_board=False)
    monkeypatch.setattr(settings, "ROW_HEIGHT_MODE", "uniform")
    uniform = render_year_pdf(result, [], str(tmp_path / "uniform.pdf"), 56, vision_board=False)
    assert uniform >= per_row


def test_ellipsize(tmp_path):
    c = canvas.Canvas(str(tmp_path / "scratch.pdf"))
    assert ellipsize(c, "Short", "Helvetica", 8, 200) == "Short"
    clipped = ellipsize(c, "A rather long event label", "Helvetica", 8, 40)
    assert clipped.endswith("...")
    assert c.stringWidth(clipped, "Helvetica", 8) <= 40
    assert ellipsize(c, "Anything", "Helvetica", 8, 1) == ""


def test_export_pdf_to_png_renames_pages(tmp_path, monkeypatch):
    calls = []

    def fake_run(cmd, check):
        calls.append(cmd)
        prefix = cmd[-1]
        for n in (1, 2):
            with open(f"{prefix}-{n}.png", "wb") as f:
                f.write(b"png")

    monkeypatch.setattr(renderers.subprocess, "run", fake_run)
    out_dir = export_pdf_to_png(str(tmp_path / "almanac.pdf"), [2026, 2027], output_dir=str(tmp_path / "png"))
    names = sorted(p.name for p in (tmp_path / "png").iterdir())
    assert names == ["almanac_2026-2027_01.png", "almanac_2026-2027_02.png"]
    assert calls[0][:2] == ["pdftocairo", "-png"]
    assert out_dir == str(tmp_path / "png")
