# pdf_surface.py
"""
Drawing surface for report PDFs.

Wraps a reportlab canvas with a top-left coordinate system (y grows down the
page, like the layouts are written) and an explicit vertical cursor.

Text drawn without x/y flows: it is placed at the cursor and the cursor moves
below it. Text drawn at explicit coordinates never moves the cursor, which is
what lets section renderers lay out side-by-side columns (label at x=70 and
value at x=350 on the same row) and then advance once.
"""
from dataclasses import dataclass
from typing import NamedTuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import ImageReader
from reportlab.pdfbase.pdfmetrics import getAscentDescent, stringWidth
from reportlab.pdfgen import canvas

LINE_SPACING = 1.2
DEFAULT_FONT = "Helvetica"
DEFAULT_FONT_SIZE = 12
DEFAULT_MARGIN = 50


@dataclass
class RenderCursor:
    """Vertical writing position for one render call; y is measured from the top edge."""
    y: float
    page: int = 0


class DrawnText(NamedTuple):
    page: int
    x: float
    y: float
    text: str


def wrap_text(text, font, size, max_width):
    words = str(text).split()
    lines = []
    current = ""

    def split_long_token(token: str):
        """Break a single long token (like an email) into width-safe chunks."""
        if stringWidth(token, font, size) <= max_width:
            return [token]
        chunks = []
        remaining = token
        while remaining:
            lo, hi = 1, len(remaining)
            fit = 1
            while lo <= hi:
                mid = (lo + hi) // 2
                piece = remaining[:mid]
                if stringWidth(piece, font, size) <= max_width:
                    fit = mid
                    lo = mid + 1
                else:
                    hi = mid - 1
            chunks.append(remaining[:fit])
            remaining = remaining[fit:]
        return chunks

    expanded_words = []
    for w in words:
        expanded_words.extend(split_long_token(w))

    for w in expanded_words:
        test = current + (" " if current else "") + w
        if stringWidth(test, font, size) <= max_width:
            current = test
        else:
            if current:
                lines.append(current)
            current = w
    if current:
        lines.append(current)
    return lines or [""]


def truncate_text(text, font, size, max_width, suffix="..."):
    text = str(text)
    if stringWidth(text, font, size) <= max_width:
        return text
    while text and stringWidth(text + suffix, font, size) > max_width:
        text = text[:-1]
    return text.rstrip() + suffix


def _color(value):
    if value is None or isinstance(value, colors.Color):
        return value
    return colors.HexColor(value)


class DrawingSurface:
    def __init__(self, sink, *, pagesize=A4, margin=DEFAULT_MARGIN, title: str | None = None):
        self.page_width, self.page_height = pagesize
        self.margin = margin
        self.cursor = RenderCursor(y=margin)
        self.drawn_text: list[DrawnText] = []
        self._font_size = DEFAULT_FONT_SIZE
        self._canvas = canvas.Canvas(sink, pagesize=pagesize)
        if title:
            self._canvas.setTitle(title)

    # -----------------------------
    # Geometry
    # -----------------------------
    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    @property
    def content_bottom(self) -> float:
        return self.page_height - self.margin

    @property
    def page_count(self) -> int:
        return self.cursor.page + 1

    def line_height(self, font_size: float | None = None) -> float:
        return (font_size or self._font_size) * LINE_SPACING

    def _pdf_y(self, y: float) -> float:
        return self.page_height - y

    # -----------------------------
    # Text
    # -----------------------------
    def _layout_lines(self, text, font, size, width, max_lines):
        lines = []
        for paragraph in str(text).split("\n"):
            lines.extend(wrap_text(paragraph, font, size, width))
        if max_lines and len(lines) > max_lines:
            lines = lines[:max_lines]
            lines[-1] = truncate_text(lines[-1] + " ...", font, size, width)
        return lines

    def measure_text(self, value, *, x=None, font_size=None, font=DEFAULT_FONT, width=None, max_lines=None) -> float:
        size = font_size or self._font_size
        left = self.margin if x is None else x
        if width is None:
            width = self.page_width - self.margin - left
        return len(self._layout_lines(value, font, size, width, max_lines)) * self.line_height(size)

    def draw_text(
        self,
        value,
        x: float | None = None,
        y: float | None = None,
        *,
        font_size: float | None = None,
        color="#000000",
        font: str = DEFAULT_FONT,
        width: float | None = None,
        align: str = "left",
        underline: bool = False,
        continued: bool = False,
        max_lines: int | None = None,
    ) -> float:
        size = font_size or self._font_size
        self._font_size = size
        flowing = x is None and y is None
        left = self.margin if x is None else x
        top = self.cursor.y if y is None else y
        if width is None:
            width = self.page_width - self.margin - left

        lines = self._layout_lines(value, font, size, width, max_lines)
        line_h = self.line_height(size)
        ascent, _descent = getAscentDescent(font, size)

        pdf = self._canvas
        pdf.setFont(font, size)
        pdf.setFillColor(_color(color))
        for i, line in enumerate(lines):
            line_w = stringWidth(line, font, size)
            if align == "right":
                line_x = left + width - line_w
            elif align == "center":
                line_x = left + (width - line_w) / 2
            else:
                line_x = left
            line_top = top + i * line_h
            baseline = line_top + ascent
            pdf.drawString(line_x, self._pdf_y(baseline), line)
            if underline and line:
                pdf.setStrokeColor(_color(color))
                pdf.setLineWidth(0.5)
                pdf.line(line_x, self._pdf_y(baseline + 1.5), line_x + line_w, self._pdf_y(baseline + 1.5))
            if line:
                self.drawn_text.append(DrawnText(self.cursor.page, line_x, line_top, line))

        height = len(lines) * line_h
        if flowing and not continued:
            self.cursor.y = top + height
        return height

    def advance(self, lines: float = 1) -> None:
        self.cursor.y += lines * self.line_height()

    # -----------------------------
    # Shapes / images
    # -----------------------------
    def draw_rect(
        self,
        x: float,
        y: float,
        w: float,
        h: float,
        *,
        fill_color=None,
        stroke_color=None,
        radius: float = 0,
        fill_opacity: float = 1.0,
        line_width: float = 1,
    ) -> None:
        if fill_color is None and stroke_color is None:
            return
        pdf = self._canvas
        pdf.saveState()
        if fill_color is not None:
            pdf.setFillColor(_color(fill_color))
            pdf.setFillAlpha(fill_opacity)
        if stroke_color is not None:
            pdf.setStrokeColor(_color(stroke_color))
            pdf.setLineWidth(line_width)
        stroke = 1 if stroke_color is not None else 0
        fill = 1 if fill_color is not None else 0
        if radius:
            pdf.roundRect(x, self._pdf_y(y + h), w, h, radius, stroke=stroke, fill=fill)
        else:
            pdf.rect(x, self._pdf_y(y + h), w, h, stroke=stroke, fill=fill)
        pdf.restoreState()

    def draw_line(self, x1, y1, x2, y2, *, color="#000000", opacity: float = 1.0, line_width: float = 1) -> None:
        pdf = self._canvas
        pdf.saveState()
        pdf.setStrokeColor(_color(color))
        pdf.setStrokeAlpha(opacity)
        pdf.setLineWidth(line_width)
        pdf.line(x1, self._pdf_y(y1), x2, self._pdf_y(y2))
        pdf.restoreState()

    def draw_image(self, path, x: float, y: float, *, width: float) -> float:
        """Draw an image scaled to `width`; returns the drawn height. Raises if unreadable."""
        img = ImageReader(path)
        iw, ih = img.getSize()
        height = width * float(ih) / float(iw)
        self._canvas.drawImage(img, x, self._pdf_y(y + height), width=width, height=height, mask="auto")
        return height

    # -----------------------------
    # Pages / output
    # -----------------------------
    def new_page(self) -> None:
        self._canvas.showPage()
        self.cursor.page += 1
        self.cursor.y = self.margin

    def finalize(self) -> None:
        """Seal the document and write it to the sink."""
        self._canvas.save()
