# pdf_sections.py
"""
Section renderers for quote and work order documents.

Each renderer draws one block on a DrawingSurface and leaves the cursor just
below it. Positions are fixed pixel constants; the documents are
laid out by hand, column by column.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import NamedTuple

from documents import MATERIAL, LineItem, PartyInfo, Technician, WorkOrderDocument
from formatting import PLACEHOLDER, format_cents, format_date, placeholder
from pagination import ensure_space
from pdf_surface import DrawingSurface
from report_theme import ReportTheme

logger = logging.getLogger(__name__)

BOLD = "Helvetica-Bold"

TABLE_X = 50
TABLE_WIDTH = 500
LABEL_X = 70
RIGHT_COLUMN_X = 350
SECTION_GAP = 20

INFO_BAR_HEIGHT = 70
CLIENT_BOX_HEIGHT = 90
SERVICE_BOX_MIN_HEIGHT = 100
SERVICE_TEXT_WIDTH = 450

TECH_COLUMNS = 2
TECH_BOX_WIDTH = 200
TECH_BOX_HEIGHT = 40
TECH_MARGIN = 20
TECH_ROW_GAP = 10
TECH_TITLE_HEIGHT = 30

HEADER_ROW_HEIGHT = 20
ROW_HEIGHT = 25

TOTALS_X = 350
TOTALS_WIDTH = 200
TOTALS_ROW_HEIGHT = 30
SUBTOTAL_LINE_HEIGHT = 16

SIGNATURE_WIDTH = 180
SIGNATURE_LEFT_X = 80
SIGNATURE_RIGHT_X = 330

FOOTER_OFFSETS = (40, 30, 20)


class Column(NamedTuple):
    title: str
    width: float
    align: str


QUOTE_COLUMNS = (
    Column("#", 40, "left"),
    Column("Description", 250, "left"),
    Column("Qty", 70, "center"),
    Column("Unit price", 70, "center"),
    Column("Total", 70, "center"),
)

WORK_ORDER_COLUMNS = (
    Column("#", 30, "left"),
    Column("Description", 220, "left"),
    Column("Qty", 40, "center"),
    Column("Type", 70, "center"),
    Column("Unit price", 70, "center"),
    Column("Total", 70, "center"),
)

# status -> (label, colour); unknown statuses fall back to "pending"
QUOTE_STATUSES = {
    "pending": ("PENDING", "#f59e0b"),
    "approved": ("APPROVED", "#22c55e"),
    "rejected": ("REJECTED", "#ef4444"),
}

WORK_ORDER_STATUSES = {
    "pending": ("PENDING", "#3b82f6"),
    "in_progress": ("IN PROGRESS", "#f59e0b"),
    "completed": ("COMPLETED", "#22c55e"),
    "cancelled": ("CANCELLED", "#ef4444"),
}

SERVICE_TYPES = {
    "installation": "Installation",
    "maintenance": "Maintenance",
    "repair": "Repair",
    "inspection": "Inspection",
}

KIND_LABELS = {
    MATERIAL: "Material",
    "labor": "Labor",
}


def status_badge(statuses: dict, status: str | None) -> tuple[str, str]:
    return statuses.get(status, statuses["pending"])


def service_type_label(service_type: str | None) -> str:
    return SERVICE_TYPES.get(service_type) or placeholder(service_type)


@dataclass
class SkippedRow:
    index: int
    description: str
    reason: str


@dataclass
class TableTotals:
    """Running totals of the rows actually drawn in the item table."""
    grand_cents: int = 0
    material_cents: int = 0
    labor_cents: int = 0
    rendered_rows: int = 0
    skipped_rows: list[SkippedRow] = field(default_factory=list)

    def add(self, kind: str, cents: int) -> None:
        self.grand_cents += cents
        if kind == MATERIAL:
            self.material_cents += cents
        else:
            self.labor_cents += cents
        self.rendered_rows += 1


# -----------------------------
# Header / info
# -----------------------------
def render_header(
    surface: DrawingSurface,
    theme: ReportTheme,
    *,
    title: str,
    subtitle: str,
    company_name: str,
    logo_path: str | None,
) -> None:
    logo_drawn = False
    try:
        if logo_path and os.path.exists(logo_path):
            surface.draw_image(logo_path, surface.margin, 40, width=theme.logo_width)
            logo_drawn = True
        else:
            logger.warning("Logo not found at %s, using text header", logo_path)
    except Exception:
        logger.exception("Could not load logo %s, using text header", logo_path)

    if logo_drawn:
        surface.advance(theme.logo_advance_lines)
    elif theme.boxed:
        # Company name sits left, on the same line as the right-aligned title
        surface.draw_text(
            company_name, surface.margin, surface.margin,
            font_size=theme.fallback_name_size, color=theme.accent, font=BOLD,
        )
    else:
        surface.draw_text(company_name, font_size=theme.fallback_name_size, color=theme.accent, font=BOLD)
        surface.advance(3)

    surface.draw_text(title, font_size=theme.title_size, color=theme.accent, font=BOLD, align=theme.title_align)
    surface.draw_text(subtitle, font_size=12, color=theme.muted, align=theme.title_align)
    surface.advance(0.5)

    y = surface.cursor.y
    surface.draw_line(surface.margin, y, surface.margin + TABLE_WIDTH, y, color=theme.accent, opacity=0.5)
    surface.advance(1)


def render_info_bar(
    surface: DrawingSurface,
    theme: ReportTheme,
    *,
    number: str,
    created_label: str,
    created_at,
    status: tuple[str, str],
    secondary_label: str,
    secondary_date,
    framed: bool = False,
) -> None:
    """Document number/date on the left, status and validity/schedule date on the right."""
    top = surface.cursor.y
    if framed:
        surface.draw_rect(
            TABLE_X, top, TABLE_WIDTH, INFO_BAR_HEIGHT,
            fill_color=theme.info_fill if theme.boxed else None,
            stroke_color=theme.box_border,
            fill_opacity=theme.box_fill_opacity,
        )
        left_x, pad_y, align = LABEL_X, 15, "left"
    else:
        left_x, pad_y, align = surface.margin, 0, "right"

    right_w = TABLE_X + TABLE_WIDTH - RIGHT_COLUMN_X
    status_label, status_color = status
    secondary = format_date(secondary_date) if secondary_date is not None else PLACEHOLDER

    surface.draw_text(number, left_x, top + pad_y, font_size=12, color=theme.text)
    surface.draw_text(f"{created_label}: {format_date(created_at)}", left_x, top + pad_y + 20, font_size=12, color=theme.text)
    surface.draw_text(f"Status: {status_label}", RIGHT_COLUMN_X, top + pad_y, font_size=12, color=status_color, font=BOLD, width=right_w, align=align)
    surface.draw_text(f"{secondary_label}: {secondary}", RIGHT_COLUMN_X, top + pad_y + 20, font_size=12, color=theme.text, width=right_w, align=align)

    height = INFO_BAR_HEIGHT if framed else 40
    surface.cursor.y = top + height + SECTION_GAP


def render_client_box(surface: DrawingSurface, theme: ReportTheme, client: PartyInfo, *, title: str = "CLIENT DETAILS") -> None:
    top = surface.cursor.y
    surface.draw_rect(
        TABLE_X, top, TABLE_WIDTH, CLIENT_BOX_HEIGHT,
        fill_color=theme.client_fill if theme.boxed else None,
        stroke_color=theme.box_border,
        fill_opacity=theme.box_fill_opacity,
    )
    surface.draw_text(title, LABEL_X, top + 10, font_size=14, color=theme.heading, font=BOLD)

    left_w = RIGHT_COLUMN_X - LABEL_X - 10
    right_w = TABLE_X + TABLE_WIDTH - RIGHT_COLUMN_X - 10
    left = (
        ("Name", client.name),
        ("Contact", client.contact_name),
        ("Email", client.email),
    )
    for i, (label, value) in enumerate(left):
        surface.draw_text(f"{label}: {placeholder(value)}", LABEL_X, top + 32 + i * 15, font_size=11, color=theme.text, width=left_w, max_lines=1)
    surface.draw_text(f"Phone: {placeholder(client.phone)}", RIGHT_COLUMN_X, top + 40, font_size=11, color=theme.text, width=right_w, max_lines=1)
    surface.draw_text(f"Address: {placeholder(client.address)}", RIGHT_COLUMN_X, top + 55, font_size=11, color=theme.text, width=right_w, max_lines=2)

    surface.cursor.y = top + CLIENT_BOX_HEIGHT + SECTION_GAP


def render_description(surface: DrawingSurface, theme: ReportTheme, text: str | None, *, title: str = "DESCRIPTION") -> None:
    surface.draw_text(title, font_size=14, color=theme.heading, font=BOLD, underline=True)
    surface.advance(0.5)
    surface.draw_text(placeholder(text), font_size=11, color=theme.text, width=TABLE_WIDTH)
    surface.advance(1)


# -----------------------------
# Work order blocks
# -----------------------------
def render_service_box(surface: DrawingSurface, theme: ReportTheme, work_order: WorkOrderDocument, *, title: str = "SERVICE DETAILS") -> None:
    top = surface.cursor.y
    description = f"Description: {placeholder(work_order.service_description)}"
    notes = f"Work order notes: {placeholder(work_order.description)}"
    desc_h = surface.measure_text(description, x=LABEL_X, font_size=11, width=SERVICE_TEXT_WIDTH)
    notes_h = surface.measure_text(notes, x=LABEL_X, font_size=11, width=SERVICE_TEXT_WIDTH)
    notes_y = top + 52 + desc_h + 6
    box_h = max(SERVICE_BOX_MIN_HEIGHT, notes_y + notes_h + 12 - top)

    surface.draw_rect(
        TABLE_X, top, TABLE_WIDTH, box_h,
        fill_color=theme.service_fill if theme.boxed else None,
        stroke_color=theme.box_border,
        fill_opacity=theme.box_fill_opacity,
    )
    surface.draw_text(title, LABEL_X, top + 10, font_size=14, color=theme.heading, font=BOLD)
    surface.draw_text(f"Type: {service_type_label(work_order.service_type)}", LABEL_X, top + 32, font_size=11, color=theme.text)
    surface.draw_text(description, LABEL_X, top + 52, font_size=11, color=theme.text, width=SERVICE_TEXT_WIDTH)
    surface.draw_text(notes, LABEL_X, notes_y, font_size=11, color=theme.text, width=SERVICE_TEXT_WIDTH)

    surface.cursor.y = top + box_h + SECTION_GAP


def technician_detail(tech: Technician) -> str:
    return placeholder(tech.email or tech.role)


def render_technician_grid(
    surface: DrawingSurface,
    theme: ReportTheme,
    technicians: list[Technician],
    *,
    title: str = "ASSIGNED TECHNICIANS",
) -> None:
    """
    Two-column grid of technician cards; nothing is drawn for an empty list.
    A row of cards that would cross the bottom margin continues on a new page.
    """
    if not technicians:
        return

    ensure_space(surface, TECH_TITLE_HEIGHT + TECH_BOX_HEIGHT)
    top = surface.cursor.y
    surface.draw_text(title, TABLE_X, top, font_size=14, color=theme.heading, font=BOLD, underline=True)
    row_y = top + TECH_TITLE_HEIGHT
    inner_w = TECH_BOX_WIDTH - 20

    for start in range(0, len(technicians), TECH_COLUMNS):
        if row_y + TECH_BOX_HEIGHT > surface.content_bottom:
            surface.new_page()
            row_y = surface.cursor.y
        for col, tech in enumerate(technicians[start:start + TECH_COLUMNS]):
            x = LABEL_X + col * (TECH_BOX_WIDTH + TECH_MARGIN)
            surface.draw_rect(
                x, row_y, TECH_BOX_WIDTH, TECH_BOX_HEIGHT,
                fill_color=theme.tech_fill if theme.boxed else None,
                stroke_color=theme.tech_border,
                radius=5,
            )
            surface.draw_text(placeholder(tech.name), x + 10, row_y + 10, font_size=11, color=theme.text, width=inner_w, max_lines=1)
            surface.draw_text(technician_detail(tech), x + 10, row_y + 25, font_size=9, color=theme.muted, width=inner_w, max_lines=1)
        row_y += TECH_BOX_HEIGHT + TECH_ROW_GAP

    surface.cursor.y = row_y + SECTION_GAP


# -----------------------------
# Item table / totals
# -----------------------------
def _as_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise TypeError(f"{name} is not a number: {value!r}")
    return int(value)


def _item_cells(index: int, item: LineItem, with_kind: bool) -> list[str]:
    cells = [
        str(index + 1),
        placeholder(item.description),
        str(_as_int(item.quantity, "quantity")),
    ]
    if with_kind:
        cells.append(KIND_LABELS.get(item.kind, KIND_LABELS["labor"]))
    cells.append(format_cents(item.unit_price_cents))
    cells.append(format_cents(item.total_cents))
    return cells


def _draw_row(surface: DrawingSurface, columns, cells, y: float, *, color: str, font: str = "Helvetica") -> None:
    cx = TABLE_X
    for column, cell in zip(columns, cells):
        if column.align == "left":
            surface.draw_text(cell, cx + 5, y, font_size=10, color=color, font=font, width=column.width - 10, max_lines=1)
        else:
            surface.draw_text(cell, cx, y, font_size=10, color=color, font=font, width=column.width, align=column.align)
        cx += column.width


def _draw_header_row(surface: DrawingSurface, theme: ReportTheme, columns, top: float) -> None:
    if theme.boxed:
        surface.draw_rect(TABLE_X, top, TABLE_WIDTH, HEADER_ROW_HEIGHT, fill_color=theme.accent)
    _draw_row(surface, columns, [c.title for c in columns], top + 6, color=theme.header_row_text, font=BOLD)
    if not theme.boxed:
        surface.draw_line(TABLE_X, top + HEADER_ROW_HEIGHT, TABLE_X + TABLE_WIDTH, top + HEADER_ROW_HEIGHT, color=theme.row_rule)


def _close_table(surface: DrawingSurface, theme: ReportTheme, top: float, rows: int) -> None:
    surface.draw_rect(
        TABLE_X, top, TABLE_WIDTH, HEADER_ROW_HEIGHT + rows * ROW_HEIGHT,
        stroke_color=theme.table_border,
    )


def render_items_table(
    surface: DrawingSurface,
    theme: ReportTheme,
    items: list[LineItem],
    *,
    title: str,
    with_kind: bool = False,
) -> TableTotals:
    """
    Draw the line-item table and return the totals of the rows drawn.

    Item totals are summed as given (total_cents), not recomputed from
    quantity * unit price. A row that cannot be formatted is logged, recorded
    in `skipped_rows` and left out of the totals; the rest of the table still
    renders. Rows that would cross the bottom margin continue on a new page
    under a repeated header row, and each page's part gets its own border.
    """
    surface.draw_text(title, font_size=14, color=theme.heading, font=BOLD, underline=True)
    surface.advance(0.5)

    columns = WORK_ORDER_COLUMNS if with_kind else QUOTE_COLUMNS
    part_top = surface.cursor.y
    part_rows = 0
    _draw_header_row(surface, theme, columns, part_top)

    totals = TableTotals()
    row_y = part_top + HEADER_ROW_HEIGHT
    for index, item in enumerate(items):
        try:
            cells = _item_cells(index, item, with_kind)
            amount = _as_int(item.total_cents, "total")
        except Exception as exc:
            description = str(getattr(item, "description", "") or "")
            logger.warning("Skipping line item %d (%r): %s", index + 1, description, exc)
            totals.skipped_rows.append(SkippedRow(index=index, description=description, reason=str(exc)))
            continue

        if row_y + ROW_HEIGHT > surface.content_bottom:
            _close_table(surface, theme, part_top, part_rows)
            surface.new_page()
            part_top = surface.cursor.y
            part_rows = 0
            _draw_header_row(surface, theme, columns, part_top)
            row_y = part_top + HEADER_ROW_HEIGHT

        if theme.boxed:
            # zebra by item index
            fill = theme.row_fills[index % 2]
            surface.draw_rect(TABLE_X, row_y, TABLE_WIDTH, ROW_HEIGHT, fill_color=fill)
        _draw_row(surface, columns, cells, row_y + 8, color=theme.text)
        if not theme.boxed:
            surface.draw_line(TABLE_X, row_y + ROW_HEIGHT, TABLE_X + TABLE_WIDTH, row_y + ROW_HEIGHT, color=theme.row_rule)

        totals.add(item.kind, amount)
        part_rows += 1
        row_y += ROW_HEIGHT

    _close_table(surface, theme, part_top, part_rows)
    surface.cursor.y = row_y
    return totals


def render_totals_box(surface: DrawingSurface, theme: ReportTheme, totals: TableTotals, *, with_subtotals: bool = False) -> None:
    subtotals = []
    if with_subtotals:
        subtotals = [("Materials:", totals.material_cents), ("Labor:", totals.labor_cents)]
    sub_h = len(subtotals) * SUBTOTAL_LINE_HEIGHT
    box_h = TOTALS_ROW_HEIGHT + sub_h

    ensure_space(surface, box_h)
    top = surface.cursor.y

    if theme.boxed:
        surface.draw_rect(TOTALS_X, top, TOTALS_WIDTH, box_h, fill_color=theme.totals_fill)
    else:
        surface.draw_line(TOTALS_X, top + box_h, TOTALS_X + TOTALS_WIDTH, top + box_h, color=theme.row_rule)

    amount_x = TOTALS_X + 80
    amount_w = TOTALS_WIDTH - 90
    y = top + 8
    for label, cents in subtotals:
        surface.draw_text(label, TOTALS_X + 10, y, font_size=10, color=theme.muted)
        surface.draw_text(format_cents(cents), amount_x, y, font_size=10, color=theme.text, width=amount_w, align="right")
        y += SUBTOTAL_LINE_HEIGHT

    surface.draw_text("TOTAL:", TOTALS_X + 10, top + sub_h + 10, font_size=12, color=theme.accent, font=BOLD)
    surface.draw_text(
        format_cents(totals.grand_cents), amount_x, top + sub_h + 10,
        font_size=12, color="#000000", font=BOLD, width=amount_w, align="right",
    )
    surface.cursor.y = top + box_h + 10


# -----------------------------
# Closing blocks
# -----------------------------
def render_notes_box(
    surface: DrawingSurface,
    theme: ReportTheme,
    *,
    title: str,
    lines=(),
    height: float = 50,
) -> None:
    """Filled box with short notes in two columns, or empty for handwritten observations."""
    surface.draw_text(title, font_size=10, color=theme.muted, font=BOLD, underline=True)
    surface.advance(0.3)

    top = surface.cursor.y
    surface.draw_rect(
        TABLE_X, top, TABLE_WIDTH, height,
        fill_color=theme.notes_fill if theme.boxed else None,
        stroke_color=theme.notes_border if theme.boxed else theme.box_border,
        fill_opacity=0.7,
    )
    for i, line in enumerate(lines):
        row, col = divmod(i, 2)
        surface.draw_text(f"• {line}", TABLE_X + 10 + col * 240, top + 10 + row * 20, font_size=8.5, color="#444444", width=230)

    surface.cursor.y = top + height + 10


def render_signatures(
    surface: DrawingSurface,
    theme: ReportTheme,
    left_caption: str,
    right_caption: str,
    *,
    title: str | None = None,
) -> None:
    if title:
        surface.draw_text(title, font_size=12, color=theme.accent, font=BOLD, align="center")
        surface.advance(1.5)

    line_y = surface.cursor.y + 40
    for x, caption in ((SIGNATURE_LEFT_X, left_caption), (SIGNATURE_RIGHT_X, right_caption)):
        surface.draw_line(x, line_y, x + SIGNATURE_WIDTH, line_y, color=theme.signature_line)
        surface.draw_text(caption, x, line_y + 5, font_size=10, color=theme.muted, width=SIGNATURE_WIDTH, align="center")

    surface.cursor.y = line_y + 5 + surface.line_height(10) + SECTION_GAP


def render_footer(surface: DrawingSurface, theme: ReportTheme, lines) -> None:
    # Anchored to the page bottom, not the cursor
    for offset, line in zip(FOOTER_OFFSETS, lines):
        surface.draw_text(
            line, surface.margin, surface.page_height - offset,
            font_size=8, color=theme.muted, width=TABLE_WIDTH, align="center",
        )
