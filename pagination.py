# pagination.py
"""
Page-break checks.

Block checks run before large blocks (technician grid, item table, totals,
notes + signatures). The table and the technician grid also check each row
against `content_bottom` themselves.
"""
import logging

from pdf_surface import DrawingSurface

logger = logging.getLogger(__name__)

# Distance from the bottom edge past which the closing blocks move to a new page
NEAR_BOTTOM_OFFSET = 150


def ensure_space(surface: DrawingSurface, required_height: float) -> bool:
    """Start a new page when `required_height` does not fit above the bottom margin."""
    if surface.cursor.y + required_height > surface.content_bottom:
        logger.debug(
            "Page break: y=%.1f + %.1f exceeds %.1f", surface.cursor.y, required_height, surface.content_bottom
        )
        surface.new_page()
        return True
    return False


def break_if_near_bottom(surface: DrawingSurface, offset: float = NEAR_BOTTOM_OFFSET, advance_lines: float = 2) -> bool:
    if surface.cursor.y > surface.page_height - offset:
        logger.debug("Page break: y=%.1f is within %s of the page bottom", surface.cursor.y, offset)
        surface.new_page()
        return True
    surface.advance(advance_lines)
    return False
