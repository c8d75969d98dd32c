"""
PdfReportRenderer - tabular reports and sticker grids as PDF bytes.

Tables: A4 portrait, 10 mm margins, 8 pt text, header row repeated on
every page.

Sticker grids: one A4 page, 10 mm margin, cells laid out from the top-left
corner. The page turns landscape only when the grid is wider than the
portrait printable width but still fits the landscape one. Cells that would
cross the page margin are skipped.
"""

import logging
from io import BytesIO
from typing import List, Sequence, Tuple

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, SimpleDocTemplate, Table, TableStyle

from studio_helpers.stickers.models import DEFAULT_COLOR, ControllerButton


logger = logging.getLogger(__name__)


MARGIN_MM = 10.0
A4_WIDTH_MM = 210.0
A4_HEIGHT_MM = 297.0
PORTRAIT_PRINTABLE_MM = A4_WIDTH_MM - 2 * MARGIN_MM
LANDSCAPE_PRINTABLE_MM = A4_HEIGHT_MM - 2 * MARGIN_MM

TABLE_FONT = "Helvetica"
TABLE_HEADER_FONT = "Helvetica-Bold"
TABLE_FONT_SIZE = 8

LABEL_FONT = "Helvetica"
LABEL_PADDING_MM = 2.0
LABEL_LINE_SPACING = 1.2
MIN_LABEL_FONT = 4.0
MAX_RECOMMENDED_COLUMNS = 13

HEADER_FILL = colors.HexColor("#2196F3")


def needs_landscape(grid_width_mm: float) -> bool:
    """Landscape iff the grid overflows portrait but fits landscape."""
    return PORTRAIT_PRINTABLE_MM < grid_width_mm <= LANDSCAPE_PRINTABLE_MM


def base_label_size(cell_width_mm: float, cell_height_mm: float) -> float:
    """Starting font size for a cell label, between 6 and 16 pt."""
    return max(6.0, min(16.0, min(cell_width_mm, cell_height_mm) / 6))


def fit_label(
    text: str, cell_width: float, cell_height: float, font_size: float
) -> Tuple[List[str], float]:
    """
    Wrap text to the padded cell and shrink it if the lines are too tall.

    Args:
        cell_width, cell_height: Cell size in points
        font_size: Starting size in points

    Returns:
        (lines, font_size)
    """
    padding = LABEL_PADDING_MM * mm
    area_width = max(cell_width - 2 * padding, 1.0)
    area_height = max(cell_height - 2 * padding, 1.0)

    lines = simpleSplit(text, LABEL_FONT, font_size, area_width) or [text]
    if len(lines) * font_size * LABEL_LINE_SPACING > area_height:
        font_size = max(MIN_LABEL_FONT, area_height / len(lines) / LABEL_LINE_SPACING)
        lines = simpleSplit(text, LABEL_FONT, font_size, area_width) or [text]
    return lines, font_size


def _fill_color(value: str) -> colors.Color:
    try:
        return colors.HexColor(value)
    except (ValueError, TypeError):
        logger.warning(f"Invalid button colour {value!r}; using {DEFAULT_COLOR}")
        return colors.HexColor(DEFAULT_COLOR)


class PdfReportRenderer:
    """Renders report tables and sticker grids with reportlab."""

    def render_table(self, columns: Sequence[str], rows: Sequence[Sequence[str]], title: str = "") -> bytes:
        """
        Render rows under a header row.

        Returns:
            PDF document bytes
        """
        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=A4,
            leftMargin=MARGIN_MM * mm,
            rightMargin=MARGIN_MM * mm,
            topMargin=MARGIN_MM * mm,
            bottomMargin=MARGIN_MM * mm,
            title=title,
        )

        cell_style = ParagraphStyle(
            "cell", fontName=TABLE_FONT, fontSize=TABLE_FONT_SIZE, leading=TABLE_FONT_SIZE * 1.2,
        )
        header_style = ParagraphStyle(
            "header", parent=cell_style, fontName=TABLE_HEADER_FONT, textColor=colors.white,
        )

        data = [[Paragraph(_escape(column), header_style) for column in columns]]
        for row in rows:
            data.append([Paragraph(_escape(value or ""), cell_style) for value in row])

        column_width = doc.width / max(len(columns), 1)
        table = Table(data, colWidths=[column_width] * len(columns), repeatRows=1)
        table.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("TOPPADDING", (0, 0), (-1, -1), 2),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 2),
        ]))

        doc.build([table])
        return buffer.getvalue()

    def render_grid(
        self,
        buttons: Sequence[ControllerButton],
        grid_rows: int,
        grid_columns: int,
        cell_width: float,
        cell_height: float,
        unit: str = "mm",
    ) -> bytes:
        """
        Render a sticker sheet.

        Args:
            buttons: Buttons to draw; their row/column place them on the grid
            grid_rows, grid_columns: Grid dimensions
            cell_width, cell_height: Size of one cell in unit
            unit: "mm" or "cm"

        Returns:
            PDF document bytes
        """
        factor = 10.0 if unit == "cm" else 1.0
        width_mm = cell_width * factor
        height_mm = cell_height * factor

        if grid_columns > MAX_RECOMMENDED_COLUMNS:
            logger.warning(
                f"Too many columns ({grid_columns}); at most {MAX_RECOMMENDED_COLUMNS} "
                f"fit comfortably on a page"
            )

        grid_width_mm = width_mm * grid_columns
        pagesize = landscape(A4) if needs_landscape(grid_width_mm) else A4
        page_width, page_height = pagesize
        printable_width_mm = page_width / mm - 2 * MARGIN_MM
        if grid_width_mm > printable_width_mm:
            logger.warning(
                f"Grid width ({grid_width_mm:.1f}mm) exceeds available width "
                f"({printable_width_mm:.1f}mm)"
            )

        margin = MARGIN_MM * mm
        w = width_mm * mm
        h = height_mm * mm
        font_size = base_label_size(width_mm, height_mm)

        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=pagesize)
        pdf.setTitle("Controller Stickers")
        pdf.setLineWidth(0)

        for button in buttons:
            left = margin + button.column * w
            top = margin + button.row * h
            if left + w > page_width - margin or top + h > page_height - margin:
                logger.warning(
                    f"Button at row {button.row}, col {button.column} would go off page; skipped"
                )
                continue

            # PDF origin is bottom-left
            bottom = page_height - top - h
            pdf.setFillColor(_fill_color(button.color))
            pdf.setStrokeColor(colors.black)
            if button.shape == "circle":
                radius = min(w, h) / 2 - 1 * mm
                pdf.circle(left + w / 2, bottom + h / 2, radius, stroke=1, fill=1)
            else:
                pdf.rect(left, bottom, w, h, stroke=1, fill=1)

            text = button.display_text
            if text and text.strip():
                self._draw_label(pdf, text, left, bottom, w, h, font_size)

        pdf.showPage()
        pdf.save()
        return buffer.getvalue()

    @staticmethod
    def _draw_label(pdf, text: str, left: float, bottom: float, w: float, h: float, font_size: float) -> None:
        lines, size = fit_label(text, w, h, font_size)
        line_height = size * LABEL_LINE_SPACING
        center_x = left + w / 2
        # Baseline of the first line so the block is vertically centred
        baseline = bottom + h / 2 + len(lines) * line_height / 2 - size

        pdf.setFillColor(colors.white)
        pdf.setFont(LABEL_FONT, size)
        for index, line in enumerate(lines):
            pdf.drawCentredString(center_x, baseline - index * line_height, line)


def _escape(text: str) -> str:
    return str(text).replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")
