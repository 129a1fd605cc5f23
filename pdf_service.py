# pdf_service.py
import logging
import os
import re
from dataclasses import dataclass, field
from datetime import datetime
from functools import partial

from config import Config
from documents import QuoteData, WorkOrderData
from pagination import break_if_near_bottom, ensure_space
from pdf_sections import (
    QUOTE_STATUSES,
    WORK_ORDER_STATUSES,
    SkippedRow,
    TableTotals,
    render_client_box,
    render_description,
    render_footer,
    render_header,
    render_info_bar,
    render_items_table,
    render_notes_box,
    render_service_box,
    render_signatures,
    render_technician_grid,
    render_totals_box,
    status_badge,
)
from pdf_surface import DrawingSurface
from report_theme import ReportTheme, get_theme

logger = logging.getLogger(__name__)

QUOTE_KIND = "quote"
WORK_ORDER_KIND = "workorder"

QUOTE_TERMS = (
    "Prices include labor and materials as specified.",
    "Amounts may change after a technical visit.",
    "Payment terms: to be agreed.",
    "This proposal is valid for 15 days.",
)

# Room needed below the cursor before a block starts; smaller leftovers go to a new page
TABLE_MIN_HEIGHT = 100
QUOTE_CLOSING_HEIGHT = 160
WORK_ORDER_CLOSING_HEIGHT = 210
OBSERVATIONS_BOX_HEIGHT = 60


@dataclass
class GeneratedReport:
    path: str            # URL-style path handed back to the caller, e.g. /pdf/quote_7_1700000000000.pdf
    filename: str
    file_path: str       # where the file was written on disk
    pages: int
    grand_total_cents: int
    skipped_rows: list[SkippedRow] = field(default_factory=list)


def _safe_filename(name) -> str:
    # strip characters not allowed on Windows/mac paths
    return re.sub(r'[\\/*?:"<>|\s]', "", str(name or "")).strip() or "unknown"


def _open_report_file(kind: str, document_id, reports_dir: str):
    """
    Create <reports_dir>/<kind>_<id>_<epochMillis>.pdf exclusively.
    Never reuses an existing name: on a clash the millisecond stamp is bumped.
    """
    os.makedirs(reports_dir, exist_ok=True)
    stamp = int(datetime.now().timestamp() * 1000)
    while True:
        filename = f"{kind}_{_safe_filename(document_id)}_{stamp}.pdf"
        file_path = os.path.join(reports_dir, filename)
        try:
            return open(file_path, "xb"), filename, file_path
        except FileExistsError:
            stamp += 1


# -----------------------------
# Assemblers (fixed section order per document type)
# -----------------------------
def assemble_quote(
    surface: DrawingSurface,
    theme: ReportTheme,
    data: QuoteData,
    *,
    logo_path: str | None = None,
    company_name: str = Config.COMPANY_NAME,
    subtitle: str = Config.COMPANY_TAGLINE,
    footer_lines=Config.COMPANY_FOOTER_LINES,
) -> TableTotals:
    quote = data.quote

    render_header(surface, theme, title="QUOTE", subtitle=subtitle, company_name=company_name, logo_path=logo_path)
    render_info_bar(
        surface, theme,
        number=f"Quote #QT-{quote.id}",
        created_label="Date",
        created_at=quote.created_at,
        status=status_badge(QUOTE_STATUSES, quote.status),
        secondary_label="Valid until",
        secondary_date=quote.valid_until,
    )
    render_client_box(surface, theme, data.client)
    render_description(surface, theme, quote.description)

    ensure_space(surface, TABLE_MIN_HEIGHT)
    totals = render_items_table(surface, theme, data.items, title="QUOTE ITEMS")
    if quote.total_cents is not None and quote.total_cents != totals.grand_cents:
        logger.warning(
            "Quote %s: stored total %s differs from the sum of rendered items %s",
            quote.id, quote.total_cents, totals.grand_cents,
        )
    render_totals_box(surface, theme, totals)

    break_if_near_bottom(surface)
    ensure_space(surface, QUOTE_CLOSING_HEIGHT)
    render_notes_box(surface, theme, title="TERMS AND CONDITIONS:", lines=QUOTE_TERMS)
    render_signatures(surface, theme, "Responsible", "Client")
    render_footer(surface, theme, footer_lines)
    return totals


def assemble_work_order(
    surface: DrawingSurface,
    theme: ReportTheme,
    data: WorkOrderData,
    *,
    logo_path: str | None = None,
    company_name: str = Config.COMPANY_NAME,
    subtitle: str = Config.COMPANY_TAGLINE,
    footer_lines=Config.COMPANY_FOOTER_LINES,
) -> TableTotals:
    work_order = data.work_order

    render_header(surface, theme, title="WORK ORDER", subtitle=subtitle, company_name=company_name, logo_path=logo_path)
    render_info_bar(
        surface, theme,
        number=f"Work Order #WO-{work_order.id}",
        created_label="Created",
        created_at=work_order.created_at,
        status=status_badge(WORK_ORDER_STATUSES, work_order.status),
        secondary_label="Scheduled",
        secondary_date=work_order.scheduled_date,
        framed=True,
    )
    render_client_box(surface, theme, data.client)
    render_service_box(surface, theme, work_order)
    render_technician_grid(surface, theme, data.technicians)

    totals = TableTotals()
    if data.items:
        ensure_space(surface, TABLE_MIN_HEIGHT)
        totals = render_items_table(surface, theme, data.items, title="SERVICE ITEMS", with_kind=True)
        render_totals_box(surface, theme, totals, with_subtotals=True)

    break_if_near_bottom(surface)
    ensure_space(surface, WORK_ORDER_CLOSING_HEIGHT)
    render_notes_box(surface, theme, title="OBSERVATIONS:", height=OBSERVATIONS_BOX_HEIGHT)
    render_signatures(surface, theme, "Technician", "Client", title="SERVICE CONFIRMATION")
    render_footer(surface, theme, footer_lines)
    return totals


# -----------------------------
# Facade
# -----------------------------
def _render_report(kind: str, document_id, title: str, assemble, *, theme, reports_dir) -> GeneratedReport:
    theme = theme if isinstance(theme, ReportTheme) else get_theme(theme or Config.REPORT_THEME)
    reports_dir = reports_dir or Config.REPORTS_DIR
    logger.info("Generating %s PDF for id=%s (theme=%s)", kind, document_id, theme.name)

    # Directory/file errors propagate as-is: nothing has been drawn yet.
    sink, filename, file_path = _open_report_file(kind, document_id, reports_dir)
    try:
        with sink:
            surface = DrawingSurface(sink, pagesize=theme.page_size, title=title)
            totals = assemble(surface, theme)
            surface.finalize()
    except Exception:
        logger.exception("Failed to render %s", file_path)
        try:
            os.remove(file_path)
        except OSError:
            logger.warning("Could not remove partial file %s", file_path)
        raise

    if totals.skipped_rows:
        logger.warning("%s: %d line item(s) skipped", filename, len(totals.skipped_rows))
    logger.info("PDF generated: %s (%d page(s))", filename, surface.page_count)

    return GeneratedReport(
        path=f"{Config.REPORTS_URL_PREFIX}/{filename}",
        filename=filename,
        file_path=file_path,
        pages=surface.page_count,
        grand_total_cents=totals.grand_cents,
        skipped_rows=list(totals.skipped_rows),
    )


def render_quote_report(data, *, theme=None, reports_dir: str | None = None, logo_path: str | None = None) -> GeneratedReport:
    """
    Renders a quote aggregate ({quote, client, items}) to a new PDF file.
    `data` may be a QuoteData or the equivalent dict.
    """
    if not isinstance(data, QuoteData):
        data = QuoteData.from_dict(data)
    assemble = partial(assemble_quote, data=data, logo_path=logo_path or Config.LOGO_PATH)
    return _render_report(
        QUOTE_KIND, data.quote.id, f"Quote - QT-{data.quote.id}", assemble,
        theme=theme, reports_dir=reports_dir,
    )


def render_work_order_report(data, *, theme=None, reports_dir: str | None = None, logo_path: str | None = None) -> GeneratedReport:
    """
    Renders a work order aggregate ({workOrder, service, client, items, technicians}) to a new PDF file.
    `data` may be a WorkOrderData or the equivalent dict.
    """
    if not isinstance(data, WorkOrderData):
        data = WorkOrderData.from_dict(data)
    assemble = partial(assemble_work_order, data=data, logo_path=logo_path or Config.LOGO_PATH)
    return _render_report(
        WORK_ORDER_KIND, data.work_order.id, f"Work Order - WO-{data.work_order.id}", assemble,
        theme=theme, reports_dir=reports_dir,
    )


def generate_quote_pdf(data, **kwargs) -> str:
    """Returns the URL-style path of the generated quote PDF."""
    return render_quote_report(data, **kwargs).path


def generate_work_order_pdf(data, **kwargs) -> str:
    """Returns the URL-style path of the generated work order PDF."""
    return render_work_order_report(data, **kwargs).path
