"""PDF capture of the paginated view.

Draws the page tree from paginated_view.build_pages() with reportlab, one
physical landscape A4 page per logical page. Layout is not re-derived here:
each logical page is placed in a fixed frame and whatever does not fit is
truncated, exactly like the fixed-height pages of the on-screen preview.
"""

from dataclasses import dataclass

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import (
    SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle,
    PageBreak, KeepInFrame,
)
from reportlab.lib.enums import TA_LEFT, TA_CENTER, TA_RIGHT
import io
from xml.sax.saxutils import escape as xml_escape

from app.services.paginated_view import (
    PAGE_PADDING_MM, Cell, CoverHeader, DataTable, Footnotes, Heading,
    KeyValueTable, Note, Page, TextBox, TwoColumnList,
)


# ──────────────────────────────────────────────
# Colours
# ──────────────────────────────────────────────
_INK = colors.black
_HEADER_BG = colors.Color(0.97, 0.98, 0.99)     # header cell fill
_LABEL_BG = colors.Color(0.99, 0.99, 0.99)      # cover label column
_MUTED = colors.Color(0.39, 0.45, 0.55)         # hints and placeholders
_BORDER = 1.5                                   # border width in points


# ──────────────────────────────────────────────
# Unicode → latin-1 safe replacements
# ──────────────────────────────────────────────
_UNICODE_REPLACEMENTS = {
    "—": "-",   # em dash
    "–": "-",   # en dash
    "‘": "'",   # left single quote
    "’": "'",   # right single quote
    "“": '"',   # left double quote
    "”": '"',   # right double quote
    "…": "...", # ellipsis
    "•": "-",   # bullet
    "→": "->",  # right arrow
    "≤": "<=",  # less than or equal
    "≥": ">=",  # greater than or equal
}


def _sanitize_text(text: str) -> str:
    """Replace Unicode characters that Helvetica/latin-1 cannot encode."""
    if not text:
        return ""
    for char, replacement in _UNICODE_REPLACEMENTS.items():
        text = text.replace(char, replacement)
    return text.encode("latin-1", errors="replace").decode("latin-1")


def _markup(text: str) -> str:
    """Sanitised, XML-escaped paragraph markup with preserved line breaks."""
    return xml_escape(_sanitize_text(text)).replace("\n", "<br/>")


@dataclass(frozen=True)
class CaptureConfig:
    """Fixed capture geometry: landscape A4, one physical page per logical page."""
    page_size: tuple = landscape(A4)
    margin_mm: float = 5.0
    page_compression: bool = True


class PDFService:
    """Captures the paginated view into a PDF file."""

    def __init__(self, config: CaptureConfig | None = None):
        self.config = config or CaptureConfig()
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()
        self._footers: list[str] = []

    def _setup_custom_styles(self):
        """Paragraph styles using the built-in Helvetica family."""

        # ── Cover ──
        self.styles.add(ParagraphStyle(
            name='Institution',
            fontName='Helvetica-Bold',
            fontSize=10,
            leading=13,
        ))
        self.styles.add(ParagraphStyle(
            name='CoverTitle',
            fontName='Helvetica-Bold',
            fontSize=40,
            leading=46,
            alignment=TA_RIGHT,
            spaceBefore=40,
            spaceAfter=36,
        ))
        self.styles.add(ParagraphStyle(
            name='Footnote',
            fontName='Helvetica',
            fontSize=7.5,
            leading=9.5,
            textColor=colors.Color(0.2, 0.2, 0.2),
        ))

        # ── Sections ──
        self.styles.add(ParagraphStyle(
            name='SectionTitle',
            fontName='Helvetica-Bold',
            fontSize=10.5,
            leading=13,
            spaceAfter=5,
        ))
        self.styles.add(ParagraphStyle(
            name='Intro',
            fontName='Helvetica',
            fontSize=8.5,
            leading=11,
            spaceAfter=5,
        ))
        self.styles.add(ParagraphStyle(
            name='BoxText',
            fontName='Helvetica',
            fontSize=9.5,
            leading=12.5,
        ))
        self.styles.add(ParagraphStyle(
            name='BoxHint',
            fontName='Helvetica-Oblique',
            fontSize=8,
            leading=10,
            textColor=_MUTED,
            spaceAfter=4,
        ))

        # ── Tables ──
        self.styles.add(ParagraphStyle(
            name='CellText',
            fontName='Helvetica',
            fontSize=9,
            leading=11.5,
            alignment=TA_LEFT,
        ))
        self.styles.add(ParagraphStyle(
            name='CellCentered',
            fontName='Helvetica',
            fontSize=9,
            leading=11.5,
            alignment=TA_CENTER,
        ))
        self.styles.add(ParagraphStyle(
            name='CellHeader',
            fontName='Helvetica-Bold',
            fontSize=9,
            leading=11.5,
        ))
        self.styles.add(ParagraphStyle(
            name='CellPlaceholder',
            fontName='Helvetica-Oblique',
            fontSize=9,
            leading=11.5,
            alignment=TA_CENTER,
            textColor=_MUTED,
        ))
        self.styles.add(ParagraphStyle(
            name='ColumnTitle',
            fontName='Helvetica-Bold',
            fontSize=9,
            leading=11,
            alignment=TA_CENTER,
        ))
        self.styles.add(ParagraphStyle(
            name='ColumnHint',
            fontName='Helvetica-Oblique',
            fontSize=7.5,
            leading=9.5,
            alignment=TA_CENTER,
            spaceAfter=6,
        ))
        self.styles.add(ParagraphStyle(
            name='ColumnItem',
            fontName='Helvetica',
            fontSize=8.5,
            leading=11,
            spaceAfter=4,
        ))
        self.styles.add(ParagraphStyle(
            name='PageFooter',
            fontName='Helvetica',
            fontSize=7.5,
            alignment=TA_RIGHT,
        ))

    # ──────────────────────────────────────────
    # Main entry point
    # ──────────────────────────────────────────
    def capture(self, pages: list[Page], title: str = "") -> bytes:
        """Render the page tree as a PDF.

        Args:
            pages: Logical pages from build_pages().
            title: Document title stored in the PDF metadata.

        Returns:
            PDF file as bytes, with exactly len(pages) pages.
        """
        buffer = io.BytesIO()
        margin = (self.config.margin_mm + PAGE_PADDING_MM) * mm
        doc = SimpleDocTemplate(
            buffer,
            pagesize=self.config.page_size,
            rightMargin=margin,
            leftMargin=margin,
            topMargin=margin,
            bottomMargin=margin,
            title=_sanitize_text(title),
            pageCompression=1 if self.config.page_compression else 0,
        )

        # Frame padding is 6pt on every side
        frame_width = doc.width - 12
        frame_height = doc.height - 12

        self._footers = [page.footer for page in pages]
        story = []
        for index, page in enumerate(pages):
            content = []
            for block in page.blocks:
                content.extend(self._build_block(block, frame_width))
            story.append(KeepInFrame(frame_width, frame_height, content, mode='truncate'))
            if index < len(pages) - 1:
                story.append(PageBreak())

        doc.build(
            story,
            onFirstPage=self._draw_page_furniture,
            onLaterPages=self._draw_page_furniture,
        )
        buffer.seek(0)
        return buffer.getvalue()

    # ──────────────────────────────────────────
    # Page furniture (footer)
    # ──────────────────────────────────────────
    def _draw_page_furniture(self, canvas, doc):
        """Draw the "Pàgina n/5" footer in the bottom-right corner."""
        page_index = canvas.getPageNumber() - 1
        if page_index >= len(self._footers):
            return
        canvas.saveState()
        page_width, _ = self.config.page_size
        margin = (self.config.margin_mm + PAGE_PADDING_MM) * mm
        canvas.setFont('Helvetica', 7.5)
        canvas.setFillColor(_INK)
        canvas.drawRightString(
            page_width - margin, margin / 2,
            _sanitize_text(self._footers[page_index]),
        )
        canvas.restoreState()

    # ──────────────────────────────────────────
    # Blocks
    # ──────────────────────────────────────────
    def _build_block(self, block, width: float) -> list:
        """Flowables for one page block."""
        if isinstance(block, CoverHeader):
            elements = [
                Paragraph(_markup(line), self.styles['Institution'])
                for line in block.institution_lines
            ]
            elements.append(Paragraph(_markup(block.title), self.styles['CoverTitle']))
            return elements

        if isinstance(block, Heading):
            return [Paragraph(_markup(block.text), self.styles['SectionTitle'])]

        if isinstance(block, Note):
            return [Paragraph(_markup(block.text), self.styles['Intro'])]

        if isinstance(block, Footnotes):
            rule = Table([['']], colWidths=[width], rowHeights=[4])
            rule.setStyle(TableStyle([('LINEABOVE', (0, 0), (-1, -1), 0.8, _INK)]))
            return [Spacer(1, 18), rule] + [
                Paragraph(_markup(line), self.styles['Footnote']) for line in block.lines
            ]

        if isinstance(block, TextBox):
            return [self._build_text_box(block, width), Spacer(1, 12)]

        if isinstance(block, KeyValueTable):
            return [self._build_key_value_table(block, width), Spacer(1, 10)]

        if isinstance(block, DataTable):
            return [self._build_data_table(block, width), Spacer(1, 12)]

        if isinstance(block, TwoColumnList):
            return [self._build_two_columns(block, width), Spacer(1, 12)]

        raise TypeError(f"Unknown page block: {type(block).__name__}")

    def _build_text_box(self, block: TextBox, width: float) -> Table:
        """Single bordered cell with an optional guiding hint."""
        elements = []
        if block.hint:
            elements.append(Paragraph(_markup(block.hint), self.styles['BoxHint']))
        body = _markup(block.text)
        if block.italic:
            body = f"<i>{body}</i>"
        elements.append(Paragraph(body, self.styles['BoxText']))

        box = Table([[elements]], colWidths=[width], minRowHeights=[block.min_height_mm * mm])
        box.setStyle(TableStyle([
            ('BOX', (0, 0), (-1, -1), _BORDER, _INK),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('TOPPADDING', (0, 0), (-1, -1), 8),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
            ('LEFTPADDING', (0, 0), (-1, -1), 10),
            ('RIGHTPADDING', (0, 0), (-1, -1), 10),
        ]))
        return box

    def _build_key_value_table(self, block: KeyValueTable, width: float) -> Table:
        label_width = 70 * mm
        rows = [
            [
                Paragraph(_markup(label), self.styles['CellHeader']),
                Paragraph(_markup(value), self.styles['CellText']),
            ]
            for label, value in block.rows
        ]
        table = Table(rows, colWidths=[label_width, width - label_width])
        table.setStyle(TableStyle([
            ('GRID', (0, 0), (-1, -1), _BORDER, _INK),
            ('BACKGROUND', (0, 0), (0, -1), _LABEL_BG),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('TOPPADDING', (0, 0), (-1, -1), 8),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
            ('LEFTPADDING', (0, 0), (-1, -1), 8),
            ('RIGHTPADDING', (0, 0), (-1, -1), 8),
        ]))
        return table

    def _cell(self, cell: Cell) -> list:
        if cell.italic and cell.muted:
            return [Paragraph(_markup(cell.text), self.styles['CellPlaceholder'])]
        if cell.bold:
            style = self.styles['CellHeader']
        elif cell.centered:
            style = self.styles['CellCentered']
        else:
            style = self.styles['CellText']
        elements = [Paragraph(_markup(cell.text), style)]
        if cell.sub:
            elements.append(Paragraph(f"<i>{_markup(cell.sub)}</i>", self.styles['Footnote']))
        return elements

    def _build_data_table(self, block: DataTable, width: float) -> Table:
        """Bordered table with a filled header row."""
        rows = [[Paragraph(_markup(h), self.styles['CellHeader']) for h in block.headers]]
        for row in block.rows:
            rows.append([self._cell(cell) for cell in row])

        table = Table(rows, colWidths=[width * w for w in block.widths], repeatRows=1)
        table.setStyle(TableStyle([
            ('GRID', (0, 0), (-1, -1), _BORDER, _INK),
            ('BACKGROUND', (0, 0), (-1, 0), _HEADER_BG),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('TOPPADDING', (0, 0), (-1, -1), 6),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 6),
            ('LEFTPADDING', (0, 0), (-1, -1), 7),
            ('RIGHTPADDING', (0, 0), (-1, -1), 7),
        ]))
        return table

    def _build_two_columns(self, block: TwoColumnList, width: float) -> Table:
        """Objectives and criteria side by side, no rules between items."""
        cells = []
        for column in (block.left, block.right):
            elements = [
                Paragraph(_markup(column.title), self.styles['ColumnTitle']),
                Paragraph(_markup(column.hint), self.styles['ColumnHint']),
            ]
            elements.extend(
                Paragraph(_markup(item), self.styles['ColumnItem']) for item in column.items
            )
            cells.append(elements)

        table = Table([cells], colWidths=[width / 2, width / 2])
        table.setStyle(TableStyle([
            ('BOX', (0, 0), (-1, -1), _BORDER, _INK),
            ('LINEAFTER', (0, 0), (0, -1), _BORDER, _INK),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
            ('TOPPADDING', (0, 0), (-1, -1), 8),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
            ('LEFTPADDING', (0, 0), (-1, -1), 8),
            ('RIGHTPADDING', (0, 0), (-1, -1), 8),
        ]))
        return table


def get_pdf_service() -> PDFService:
    return PDFService()
