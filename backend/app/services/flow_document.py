"""Word-processor (.docx) rendition of a Situació d'Aprenentatge.

A landscape flow document: title block, then section titles followed by
tables or bordered text boxes. Explicit page breaks sit at the same four
seams as the paginated view (after the cover, after transversal
competencies, after knowledge items, after activities).
"""
from __future__ import annotations

import io

from docx import Document
from docx.enum.section import WD_ORIENT
from docx.enum.table import WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Cm, Pt, RGBColor

from app.services import document_text as txt
from app.services.derivation import DerivedView

_PAGE_WIDTH_CM = 29.7     # landscape A4
_PAGE_HEIGHT_CM = 21.0
_MARGIN_CM = 1.5
_HEADER_FILL = "F2F2F2"
_BORDER_SIZE = 12          # eighths of a point (1.5pt)
_CELL_PADDING = 113        # twips (0.2cm)
_MUTED = RGBColor(0x64, 0x74, 0x8B)


# ──────────────────────────────────────────────
# Cell formatting (raw OOXML: python-docx has no API for these)
# ──────────────────────────────────────────────

def _cell_properties(cell):
    return cell._element.get_or_add_tcPr()


def _set_cell_border(cell) -> None:
    borders = OxmlElement("w:tcBorders")
    for edge in ("top", "left", "bottom", "right"):
        element = OxmlElement(f"w:{edge}")
        element.set(qn("w:val"), "single")
        element.set(qn("w:sz"), str(_BORDER_SIZE))
        element.set(qn("w:space"), "0")
        element.set(qn("w:color"), "000000")
        borders.append(element)
    _cell_properties(cell).append(borders)


def _set_cell_padding(cell) -> None:
    margins = OxmlElement("w:tcMar")
    for edge in ("top", "left", "bottom", "right"):
        element = OxmlElement(f"w:{edge}")
        element.set(qn("w:w"), str(_CELL_PADDING))
        element.set(qn("w:type"), "dxa")
        margins.append(element)
    _cell_properties(cell).append(margins)


def _shade_cell(cell, fill: str) -> None:
    shading = OxmlElement("w:shd")
    shading.set(qn("w:val"), "clear")
    shading.set(qn("w:color"), "auto")
    shading.set(qn("w:fill"), fill)
    _cell_properties(cell).append(shading)


def _format_cell(cell, fill: str | None = None) -> None:
    """Uniform border and padding; tcPr children must stay in schema order."""
    _set_cell_border(cell)
    if fill:
        _shade_cell(cell, fill)
    _set_cell_padding(cell)


def _write_cell(cell, text: str, *, bold=False, italic=False, centered=False,
                muted=False, hint: str = "", header=False, fill: str | None = None) -> None:
    """Fill a cell with uniform border and padding plus the given emphasis."""
    if header:
        fill = _HEADER_FILL
        bold = True
        centered = True
    _format_cell(cell, fill)

    paragraph = cell.paragraphs[0]
    run = paragraph.add_run(text or "")
    run.bold = bold
    run.italic = italic
    if muted:
        run.font.color.rgb = _MUTED
    if centered:
        paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER

    if hint:
        hint_paragraph = cell.add_paragraph()
        if centered:
            hint_paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
        hint_run = hint_paragraph.add_run(hint)
        hint_run.italic = True
        hint_run.font.size = Pt(8)


class FlowDocumentBuilder:
    """Builds the .docx tree from a DerivedView."""

    def __init__(self, view: DerivedView):
        self.view = view
        self.doc = Document()
        self._setup_page()

    def _setup_page(self) -> None:
        section = self.doc.sections[0]
        section.orientation = WD_ORIENT.LANDSCAPE
        section.page_width = Cm(_PAGE_WIDTH_CM)
        section.page_height = Cm(_PAGE_HEIGHT_CM)
        for side in ("left_margin", "right_margin", "top_margin", "bottom_margin"):
            setattr(section, side, Cm(_MARGIN_CM))

        normal = self.doc.styles["Normal"]
        normal.font.name = "Arial"
        normal.font.size = Pt(10)

    # ── primitives ──

    def _section_title(self, text: str) -> None:
        paragraph = self.doc.add_paragraph()
        paragraph.paragraph_format.space_before = Pt(10)
        run = paragraph.add_run(text.upper())
        run.bold = True
        run.font.size = Pt(11)

    def _intro(self, text: str) -> None:
        run = self.doc.add_paragraph().add_run(text)
        run.font.size = Pt(9)

    def _text_box(self, text: str, hint: str = "", italic: bool = False) -> None:
        """Single bordered cell, the flow equivalent of a fixed page box."""
        table = self.doc.add_table(rows=1, cols=1)
        cell = table.cell(0, 0)
        _format_cell(cell)
        paragraph = cell.paragraphs[0]
        if hint:
            hint_run = paragraph.add_run(hint)
            hint_run.italic = True
            hint_run.font.size = Pt(8)
            hint_run.font.color.rgb = _MUTED
            paragraph = cell.add_paragraph()
        run = paragraph.add_run(text or "")
        run.italic = italic

    def _table(self, headers: tuple[str, ...], widths: tuple[float, ...]):
        table = self.doc.add_table(rows=1, cols=len(headers))
        table.alignment = WD_TABLE_ALIGNMENT.CENTER
        for cell, header in zip(table.rows[0].cells, headers):
            _write_cell(cell, header, header=True)
        usable = Cm(_PAGE_WIDTH_CM - 2 * _MARGIN_CM)
        for column, fraction in zip(table.columns, widths):
            for cell in column.cells:
                cell.width = int(usable * fraction)
        return table

    def _add_row(self, table, widths: tuple[float, ...]):
        row = table.add_row()
        usable = Cm(_PAGE_WIDTH_CM - 2 * _MARGIN_CM)
        for cell, fraction in zip(row.cells, widths):
            cell.width = int(usable * fraction)
        return row.cells

    # ── sections ──

    def _cover(self) -> None:
        for line in txt.INSTITUTION_LINES:
            self.doc.add_paragraph().add_run(line).bold = True

        title = self.doc.add_paragraph()
        title.alignment = WD_ALIGN_PARAGRAPH.RIGHT
        title.paragraph_format.space_before = Pt(48)
        title.paragraph_format.space_after = Pt(36)
        run = title.add_run(txt.DOCUMENT_TITLE)
        run.bold = True
        run.font.size = Pt(40)

        table = self.doc.add_table(rows=0, cols=2)
        for label, value in (
            (txt.LABEL_TITLE, self.view.title),
            (txt.LABEL_LEVEL, self.view.level),
            (txt.LABEL_SUBJECT_AREA, self.view.subject_area),
        ):
            label_cell, value_cell = table.add_row().cells
            _write_cell(label_cell, label, bold=True, fill=_HEADER_FILL)
            _write_cell(value_cell, value)

        self.doc.add_paragraph()
        for line in txt.COVER_FOOTNOTES:
            run = self.doc.add_paragraph().add_run(line)
            run.font.size = Pt(7.5)

    def _description(self) -> None:
        self._section_title(txt.SECTION_DESCRIPTION)
        self._text_box(self.view.context_and_challenge, hint=txt.HINT_DESCRIPTION)

        self._section_title(txt.SECTION_COMPETENCIES)
        self._intro(txt.INTRO_COMPETENCIES)
        widths = (0.67, 0.33)
        table = self._table((txt.HEADER_COMPETENCY, txt.HEADER_SUBJECT), widths)
        for row in self.view.competencies:
            competency_cell, area_cell = self._add_row(table, widths)
            _write_cell(competency_cell, row.label)
            _write_cell(area_cell, row.subject_area)

        self._section_title(txt.SECTION_TRANSVERSAL)
        self._text_box(self.view.transversal_competencies)

    def _curriculum(self) -> None:
        table = self.doc.add_table(rows=2, cols=2)
        columns = (
            (txt.SECTION_OBJECTIVES, txt.HINT_OBJECTIVES, self.view.objectives),
            (txt.SECTION_CRITERIA, txt.HINT_CRITERIA, self.view.criteria),
        )
        for index, (title, hint, items) in enumerate(columns):
            _write_cell(table.cell(0, index), title, header=True, hint=hint)
            body = table.cell(1, index)
            _format_cell(body)
            first = True
            for item in items:
                paragraph = body.paragraphs[0] if first else body.add_paragraph()
                paragraph.add_run(item).font.size = Pt(9)
                first = False

        self._section_title(txt.SECTION_KNOWLEDGE)
        self._intro(txt.INTRO_KNOWLEDGE)
        widths = (0.06, 0.61, 0.33)
        table = self._table((txt.HEADER_NUMBER, txt.HEADER_KNOWLEDGE, txt.HEADER_SUBJECT), widths)
        for row in self.view.knowledge:
            number_cell, content_cell, area_cell = self._add_row(table, widths)
            _write_cell(number_cell, row.number, centered=True)
            _write_cell(content_cell, row.content)
            _write_cell(area_cell, row.subject_area)

    def _development(self) -> None:
        self._section_title(txt.SECTION_DEVELOPMENT)
        self._text_box(self.view.methodological_strategies, hint=txt.HINT_DEVELOPMENT)

        self._section_title(txt.SECTION_ACTIVITIES)
        widths = (0.25, 0.58, 0.17)
        table = self._table((txt.HEADER_PHASE, txt.HEADER_ACTIVITY, txt.HEADER_TIME), widths)
        for phase in self.view.phases:
            phase_cell, description_cell, time_cell = self._add_row(table, widths)
            _write_cell(phase_cell, phase.label, bold=True, hint=phase.hint)
            _write_cell(description_cell, phase.description)
            _write_cell(time_cell, phase.time_allocation)

    def _supports(self) -> None:
        self._section_title(txt.SECTION_VECTORS)
        self._text_box(self.view.vectors_description, italic=True)

        self._section_title(txt.SECTION_UNIVERSAL)
        self._text_box(self.view.universal_supports)

        self._section_title(txt.SECTION_ADDITIONAL)
        self._intro(txt.INTRO_ADDITIONAL)
        widths = (0.33, 0.67)
        table = self._table((txt.HEADER_STUDENT, txt.HEADER_MEASURE), widths)
        for row in self.view.additional_supports:
            student_cell, measure_cell = self._add_row(table, widths)
            emphasis = dict(italic=True, centered=True, muted=True) if row.placeholder else {}
            _write_cell(student_cell, row.student_label, **emphasis)
            _write_cell(measure_cell, row.measure, **emphasis)

    def build(self):
        self._cover()
        self.doc.add_page_break()
        self._description()
        self.doc.add_page_break()
        self._curriculum()
        self.doc.add_page_break()
        self._development()
        self.doc.add_page_break()
        self._supports()
        return self.doc


def build_flow_document(view: DerivedView):
    return FlowDocumentBuilder(view).build()


def pack_flow_document(document) -> bytes:
    """Serialise a python-docx Document into .docx bytes."""
    buffer = io.BytesIO()
    document.save(buffer)
    return buffer.getvalue()
