import logging
import os
import re
from dataclasses import replace

import pytest

from conftest import make_items
from documents import LineItem, Technician
from pdf_sections import TECH_BOX_HEIGHT
from pdf_service import (
    assemble_quote,
    assemble_work_order,
    generate_quote_pdf,
    generate_work_order_pdf,
    render_quote_report,
    render_work_order_report,
)
from report_theme import PLAIN, PROFESSIONAL


def texts(surface):
    return [t.text for t in surface.drawn_text]


def find(surface, text):
    return next(t for t in surface.drawn_text if t.text == text)


# -----------------------------
# Assembled layouts
# -----------------------------
def test_quote_document_content(surface, quote_data, missing_logo):
    totals = assemble_quote(surface, PROFESSIONAL, quote_data, logo_path=missing_logo)
    drawn = texts(surface)

    assert totals.grand_cents == 25000
    assert totals.skipped_rows == []
    assert "R$ 250,00" in drawn
    assert "Quote #QT-7" in drawn
    assert "Date: 10/05/2024" in drawn
    assert "Valid until: 25/05/2024" in drawn
    assert "Status: PENDING" in drawn
    assert "TERMS AND CONDITIONS:" in drawn
    assert {"Responsible", "Client"} <= set(drawn)
    assert surface.page_count == 1


def test_quote_closing_blocks_move_to_next_page(surface, quote_data, missing_logo):
    data = replace(quote_data, items=make_items(25))
    totals = assemble_quote(surface, PROFESSIONAL, data, logo_path=missing_logo)

    assert totals.grand_cents == 25 * 1000
    assert surface.page_count == 2
    assert find(surface, "QUOTE ITEMS").page == 0
    assert find(surface, "Client").page == 1


def test_long_quote_keeps_every_row_and_total_on_the_page(surface, quote_data, missing_logo):
    data = replace(quote_data, items=make_items(25))
    assemble_quote(surface, PROFESSIONAL, data, logo_path=missing_logo)

    assert all(t.y < surface.page_height for t in surface.drawn_text)
    drawn = texts(surface)
    assert all(f"Item {i}" in drawn for i in range(1, 26))
    assert drawn.count("Description") == 2

    rows = [t for t in surface.drawn_text if t.text.startswith("Item ")]
    assert all(t.y + 25 - 8 <= surface.content_bottom for t in rows)
    assert find(surface, "Item 25").page == 1

    total = find(surface, "TOTAL:")
    amount = find(surface, "R$ 250,00")
    assert total.page == amount.page == 1
    assert total.y < surface.content_bottom


def test_many_technicians_continue_on_next_page(surface, work_order_data, missing_logo):
    techs = [Technician(f"Tech {i}", role="technician") for i in range(24)]
    data = replace(work_order_data, technicians=techs)
    totals = assemble_work_order(surface, PROFESSIONAL, data, logo_path=missing_logo)

    assert all(t.y < surface.page_height for t in surface.drawn_text)
    cards = [find(surface, f"Tech {i}") for i in range(24)]
    # name sits 10 below the card top
    assert all(c.y - 10 + TECH_BOX_HEIGHT <= surface.content_bottom for c in cards)
    assert cards[11].page == 0
    assert cards[12].page == 1
    assert find(surface, "SERVICE ITEMS").page >= 1
    assert find(surface, "R$ 500,00").y < surface.content_bottom
    assert totals.grand_cents == 50000


def test_work_order_document_content(surface, work_order_data, missing_logo):
    totals = assemble_work_order(surface, PROFESSIONAL, work_order_data, logo_path=missing_logo)
    drawn = texts(surface)

    assert totals.grand_cents == 50000
    assert totals.material_cents == 20000
    assert totals.labor_cents == 30000
    assert "Work Order #WO-12" in drawn
    assert "Status: IN PROGRESS" in drawn
    assert "Scheduled: 10/06/2024" in drawn
    assert "Type: Installation" in drawn
    assert "ASSIGNED TECHNICIANS" in drawn
    assert "joao@samclimatiza.test" in drawn
    assert "R$ 500,00" in drawn
    assert "SERVICE CONFIRMATION" in drawn
    assert {"Technician", "Client"} <= set(drawn)


def test_work_order_long_table_breaks_once(surface, work_order_data, missing_logo):
    data = replace(work_order_data, items=make_items(20), technicians=[])
    assemble_work_order(surface, PROFESSIONAL, data, logo_path=missing_logo)

    assert surface.page_count == 2
    assert find(surface, "SERVICE ITEMS").page == 0
    assert find(surface, "OBSERVATIONS:").page == 1
    assert find(surface, "Technician").page == 1


def test_work_order_table_starts_below_technician_grid(surface, work_order_data, missing_logo):
    techs = [Technician(f"Tech {i}", role="technician") for i in range(5)]
    data = replace(work_order_data, technicians=techs)
    assemble_work_order(surface, PROFESSIONAL, data, logo_path=missing_logo)

    last_card = find(surface, "Tech 4")
    heading = find(surface, "SERVICE ITEMS")
    card_bottom = last_card.y - 10 + TECH_BOX_HEIGHT
    assert (heading.page, heading.y) >= (last_card.page, card_bottom)


def test_work_order_without_items_skips_table(surface, work_order_data, missing_logo):
    data = replace(work_order_data, items=[])
    totals = assemble_work_order(surface, PROFESSIONAL, data, logo_path=missing_logo)

    assert totals.grand_cents == 0
    assert "SERVICE ITEMS" not in texts(surface)
    assert "TOTAL:" not in texts(surface)
    assert "SERVICE CONFIRMATION" in texts(surface)


def test_plain_theme_keeps_content(surface, quote_data, missing_logo):
    totals = assemble_quote(surface, PLAIN, quote_data, logo_path=missing_logo)
    assert totals.grand_cents == 25000
    assert "SAM CLIMATIZA" in texts(surface)
    assert "R$ 250,00" in texts(surface)


def test_stored_total_mismatch_is_logged(surface, quote_data, missing_logo, caplog):
    data = replace(quote_data, quote=replace(quote_data.quote, total_cents=30000))
    with caplog.at_level(logging.WARNING, logger="pdf_service"):
        totals = assemble_quote(surface, PROFESSIONAL, data, logo_path=missing_logo)
    assert totals.grand_cents == 25000
    assert "differs" in caplog.text


# -----------------------------
# Files
# -----------------------------
def test_render_quote_report_writes_pdf(tmp_path, quote_data, missing_logo):
    report = render_quote_report(quote_data, reports_dir=str(tmp_path), logo_path=missing_logo)

    assert re.fullmatch(r"/pdf/quote_7_\d+\.pdf", report.path)
    assert report.path == f"/pdf/{report.filename}"
    assert report.file_path == os.path.join(str(tmp_path), report.filename)
    assert report.pages == 1
    assert report.grand_total_cents == 25000
    assert report.skipped_rows == []
    with open(report.file_path, "rb") as f:
        assert f.read(4) == b"%PDF"


def test_same_quote_twice_gives_distinct_files(tmp_path, quote_data, missing_logo):
    first = generate_quote_pdf(quote_data, reports_dir=str(tmp_path), logo_path=missing_logo)
    second = generate_quote_pdf(quote_data, reports_dir=str(tmp_path), logo_path=missing_logo)

    assert first != second
    assert sorted(os.listdir(tmp_path)) == sorted(p.rsplit("/", 1)[1] for p in (first, second))


def test_render_accepts_json_payloads(tmp_path, quote_payload, work_order_payload, missing_logo):
    quote = render_quote_report(quote_payload, reports_dir=str(tmp_path), logo_path=missing_logo)
    path = generate_work_order_pdf(work_order_payload, reports_dir=str(tmp_path), logo_path=missing_logo, theme="plain")

    assert quote.grand_total_cents == 25000
    assert re.fullmatch(r"/pdf/workorder_12_\d+\.pdf", path)
    assert len(os.listdir(tmp_path)) == 2


def test_work_order_report_counts_pages(tmp_path, work_order_data, missing_logo):
    data = replace(work_order_data, items=make_items(20), technicians=[])
    report = render_work_order_report(data, reports_dir=str(tmp_path), logo_path=missing_logo)
    assert report.pages == 2
    assert report.grand_total_cents == 20000


def test_skipped_rows_are_reported(tmp_path, quote_data, missing_logo):
    items = list(quote_data.items) + [LineItem("Mystery part", "material", 1, 100, None)]
    report = render_quote_report(replace(quote_data, items=items), reports_dir=str(tmp_path), logo_path=missing_logo)

    assert report.grand_total_cents == 25000
    assert [(r.index, r.description) for r in report.skipped_rows] == [(2, "Mystery part")]
    assert os.path.exists(report.file_path)


def test_reports_dir_creation_failure_raises_oserror(tmp_path, quote_data, missing_logo):
    blocker = tmp_path / "pdf"
    blocker.write_text("not a directory")
    with pytest.raises(OSError):
        render_quote_report(quote_data, reports_dir=str(blocker), logo_path=missing_logo)


def test_failed_render_removes_partial_file(tmp_path, quote_data, missing_logo):
    broken = replace(quote_data, quote=replace(quote_data.quote, created_at=None))
    with pytest.raises(TypeError):
        render_quote_report(broken, reports_dir=str(tmp_path), logo_path=missing_logo)
    assert os.listdir(tmp_path) == []
