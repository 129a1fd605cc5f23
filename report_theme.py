# report_theme.py
from dataclasses import dataclass

from reportlab.lib.pagesizes import A4


@dataclass(frozen=True)
class ReportTheme:
    """
    Palette and box usage for one visual variant of the quote/work order documents.

    boxed=True fills section boxes, the table header and zebra rows;
    boxed=False draws the same layout with rules and outlines only.
    """
    name: str
    boxed: bool
    accent: str = "#1a56db"
    heading: str = "#1a56db"
    text: str = "#333333"
    muted: str = "#666666"
    title_size: float = 20
    title_align: str = "right"
    logo_width: float = 100
    logo_advance_lines: float = 3
    fallback_name_size: float = 16
    info_fill: str = "#f0f9ff"
    client_fill: str = "#f0f5ff"
    service_fill: str = "#f0f7ff"
    box_fill_opacity: float = 0.5
    box_border: str = "#cccccc"
    header_row_text: str = "#ffffff"
    row_fills: tuple = ("#f8fafc", "#ffffff")
    row_rule: str = "#dddddd"
    table_border: str = "#cccccc"
    tech_fill: str = "#f8fafc"
    tech_border: str = "#e2e8f0"
    totals_fill: str = "#f0f5ff"
    notes_fill: str = "#f9fafb"
    notes_border: str = "#e5e7eb"
    signature_line: str = "#888888"
    page_size: tuple = A4


PROFESSIONAL = ReportTheme(name="professional", boxed=True)

PLAIN = ReportTheme(
    name="plain",
    boxed=False,
    heading="#1d4ed8",
    text="#000000",
    title_size=16,
    title_align="center",
    logo_width=80,
    logo_advance_lines=4,
    fallback_name_size=20,
    header_row_text="#666666",
    signature_line="#000000",
)

THEMES = {t.name: t for t in (PROFESSIONAL, PLAIN)}


def get_theme(name: str | None) -> ReportTheme:
    key = (name or "").strip().lower()
    return THEMES.get(key, PROFESSIONAL)
