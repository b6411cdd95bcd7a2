"""Tests for the three export renditions: PDF capture, .docx flow document, HTML markup.

All tests run FULLY OFFLINE. Generated files are read back with PyPDF2 and
python-docx.

Coverage:
  1. the PDF has exactly one page per logical page (5)
  2. the .docx has four explicit page breaks and landscape A4 geometry
  3. the HTML markup carries no page-break rules
  4. competency codes and the supports placeholder agree across renditions
"""

import io
import re
from html import unescape

import pytest
from docx import Document
from docx.enum.section import WD_ORIENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml.ns import qn
from PyPDF2 import PdfReader

from app.services.derivation import derive_view
from app.services.document_text import NO_DATA_LABEL
from app.services.flow_document import build_flow_document, pack_flow_document
from app.services.markup_document import render_markup_document
from app.services.paginated_view import build_pages
from app.services.pdf import CaptureConfig, PDFService, _sanitize_text

_CODE = re.compile(r"CE\.\d+\.")


def _pdf_text(content: bytes) -> tuple[int, str]:
    reader = PdfReader(io.BytesIO(content))
    return len(reader.pages), "\n".join(page.extract_text() or "" for page in reader.pages)


def _docx(content: bytes):
    return Document(io.BytesIO(content))


def _docx_text(document) -> str:
    parts = [p.text for p in document.paragraphs]
    for table in document.tables:
        for row in table.rows:
            for cell in row.cells:
                parts.append(cell.text)
    return "\n".join(parts)


def _page_breaks(document) -> int:
    return sum(
        1
        for br in document.element.body.iter(qn("w:br"))
        if br.get(qn("w:type")) == "page"
    )


# ── PDF capture ───────────────────────────────────────────────────────────────

class TestPdfCapture:
    def test_five_pages(self, sample_unit):
        view = derive_view(sample_unit)
        content = PDFService().capture(build_pages(view), view.title)
        assert content.startswith(b"%PDF")
        pages, _ = _pdf_text(content)
        assert pages == 5

    def test_overflowing_text_is_clipped_not_reflowed(self, document_data):
        from app.models.situacio import CurriculumUnit

        document_data["descripcio"]["context_repte"] = "Text molt llarg. " * 2500
        unit = CurriculumUnit.model_validate(document_data)
        view = derive_view(unit)
        pages, _ = _pdf_text(PDFService().capture(build_pages(view), view.title))
        assert pages == 5

    def test_landscape_geometry(self, sample_unit):
        view = derive_view(sample_unit)
        reader = PdfReader(io.BytesIO(PDFService().capture(build_pages(view))))
        box = reader.pages[0].mediabox
        assert float(box.width) > float(box.height)

    def test_footer_and_codes_in_text(self, sample_unit):
        view = derive_view(sample_unit)
        _, text = _pdf_text(PDFService().capture(build_pages(view), view.title))
        assert "5/5" in text
        assert "CE.1." in text and "CE.2." in text

    def test_uncompressed_config(self, sample_unit):
        view = derive_view(sample_unit)
        service = PDFService(CaptureConfig(page_compression=False))
        pages, _ = _pdf_text(service.capture(build_pages(view)))
        assert pages == 5

    def test_sanitize_replaces_typographic_marks(self):
        assert "’" not in _sanitize_text("Situació d’aprenentatge")


# ── DOCX flow document ────────────────────────────────────────────────────────

class TestFlowDocument:
    def test_four_page_breaks(self, sample_unit):
        document = _docx(pack_flow_document(build_flow_document(derive_view(sample_unit))))
        assert _page_breaks(document) == 4

    def test_landscape_a4(self, sample_unit):
        document = _docx(pack_flow_document(build_flow_document(derive_view(sample_unit))))
        section = document.sections[0]
        assert section.orientation == WD_ORIENT.LANDSCAPE
        assert section.page_width > section.page_height
        assert round(section.page_width.cm, 1) == 29.7

    def test_codes_and_placeholder(self, sample_unit):
        document = _docx(pack_flow_document(build_flow_document(derive_view(sample_unit))))
        text = _docx_text(document)
        assert "CE.1. Analitzar fonts històriques" in text
        assert NO_DATA_LABEL in text

    def test_support_rows(self, unit_with_supports):
        document = _docx(
            pack_flow_document(build_flow_document(derive_view(unit_with_supports)))
        )
        text = _docx_text(document)
        assert "Alumne A" in text and "Alumne B" in text
        assert NO_DATA_LABEL not in text

    def test_single_placeholder_row_in_supports_table(self, sample_unit):
        document = _docx(pack_flow_document(build_flow_document(derive_view(sample_unit))))
        supports = document.tables[-1]
        assert len(supports.rows) == 2  # header + one data row
        assert [cell.text for cell in supports.rows[1].cells] == [NO_DATA_LABEL, NO_DATA_LABEL]

    def test_header_hint_centered_like_title(self, sample_unit):
        document = build_flow_document(derive_view(sample_unit))
        # cover, description box, competencies, transversal box, objectives/criteria
        header = document.tables[4].cell(0, 0)
        title, hint = header.paragraphs[0], header.paragraphs[1]
        assert title.alignment == WD_ALIGN_PARAGRAPH.CENTER
        assert hint.alignment == WD_ALIGN_PARAGRAPH.CENTER

    def test_header_cells_shaded_in_schema_order(self, sample_unit):
        document = build_flow_document(derive_view(sample_unit))
        # cover, description box, then the competency table
        header_cell = document.tables[2].rows[0].cells[0]
        tc_pr = header_cell._tc.tcPr
        tags = [child.tag for child in tc_pr]
        borders, shading, margins = (
            tags.index(qn("w:tcBorders")),
            tags.index(qn("w:shd")),
            tags.index(qn("w:tcMar")),
        )
        assert borders < shading < margins


# ── HTML markup document ──────────────────────────────────────────────────────

class TestMarkupDocument:
    def test_no_page_break_rules(self, sample_unit):
        html = render_markup_document(derive_view(sample_unit))
        assert "page-break" not in html
        assert "@page" not in html

    def test_inline_styles_only(self, sample_unit):
        html = render_markup_document(derive_view(sample_unit))
        assert "<style" not in html
        assert 'style="' in html

    def test_placeholder_row(self, sample_unit):
        html = unescape(render_markup_document(derive_view(sample_unit)))
        assert NO_DATA_LABEL in html
        assert "font-style:italic;text-align:center" in html

    def test_single_placeholder_row_in_supports_table(self, sample_unit):
        html = render_markup_document(derive_view(sample_unit))
        supports = unescape(html.split("<table")[-1])
        assert supports.count("<tr>") == 2  # header + one data row
        assert supports.count(f">{NO_DATA_LABEL}</td>") == 2

    def test_escapes_user_text(self, document_data):
        from app.models.situacio import CurriculumUnit

        document_data["descripcio"]["competencies_transversals"] = "<b>tag</b> & co"
        html = render_markup_document(derive_view(CurriculumUnit.model_validate(document_data)))
        assert "&lt;b&gt;tag&lt;/b&gt; &amp; co" in html


# ── Empty curricular lists ────────────────────────────────────────────────────

class TestEmptyLists:
    @pytest.fixture
    def empty_view(self, document_data):
        from app.models.situacio import CurriculumUnit

        document_data["concrecio_curricular"] = {
            "competencies_especifiques": [],
            "objectius": [],
            "criteris_avaluacio": [],
            "sabers": [],
        }
        return derive_view(CurriculumUnit.model_validate(document_data))

    def test_paginated_tables_are_header_only(self, empty_view):
        pages = build_pages(empty_view)
        assert len(pages) == 5
        competencies = pages[1].blocks[4]
        knowledge = pages[2].blocks[3]
        assert competencies.rows == () and knowledge.rows == ()
        assert pages[2].blocks[0].left.items == ()

    def test_pdf_still_five_pages(self, empty_view):
        content = PDFService().capture(build_pages(empty_view), empty_view.title)
        assert content.startswith(b"%PDF")
        pages, _ = _pdf_text(content)
        assert pages == 5

    def test_docx_header_only_tables(self, empty_view):
        content = pack_flow_document(build_flow_document(empty_view))
        assert content[:2] == b"PK"
        document = _docx(content)
        assert _page_breaks(document) == 4
        competencies, knowledge = document.tables[2], document.tables[5]
        assert len(competencies.rows) == 1
        assert len(knowledge.rows) == 1
        assert _CODE.findall(_docx_text(document)) == []

    def test_html_header_only_tables(self, empty_view):
        html = render_markup_document(empty_view)
        assert html.startswith("<!DOCTYPE html>")
        tables = html.split("<table")[1:]
        # identification, competencies, objectives/criteria, knowledge, activities, supports
        competencies, knowledge = tables[1], tables[3]
        assert competencies.split("</table>")[0].count("<tr>") == 1
        assert knowledge.split("</table>")[0].count("<tr>") == 1
        assert _CODE.findall(html) == []


# ── Consistency across renditions ─────────────────────────────────────────────

class TestConsistency:
    @pytest.fixture
    def view(self, sample_unit):
        return derive_view(sample_unit)

    def test_same_competency_codes_everywhere(self, view):
        _, pdf_text = _pdf_text(PDFService().capture(build_pages(view), view.title))
        docx_text = _docx_text(_docx(pack_flow_document(build_flow_document(view))))
        html_text = unescape(render_markup_document(view))

        expected = view.competency_codes
        assert _CODE.findall(docx_text) == expected
        assert _CODE.findall(html_text) == expected
        assert _CODE.findall(pdf_text) == expected

    def test_three_competencies_renumbered_everywhere(self, document_data):
        from app.models.situacio import CurriculumUnit

        document_data["concrecio_curricular"]["competencies_especifiques"] = [
            {"descripcio": "Analitzar fonts", "area_materia": "Medi"},
            {"descripcio": "CE.2. Comunicar oralment", "area_materia": "Llengua"},
            {"descripcio": "Resoldre problemes", "area_materia": "Matemàtiques"},
        ]
        view = derive_view(CurriculumUnit.model_validate(document_data))
        expected = ["CE.1.", "CE.2.", "CE.3."]

        pages = build_pages(view)
        preview_codes = [row[0].text[:5] for row in pages[1].blocks[4].rows]
        docx_text = _docx_text(_docx(pack_flow_document(build_flow_document(view))))
        html_text = unescape(render_markup_document(view))

        assert preview_codes == expected
        assert _CODE.findall(docx_text) == expected
        assert _CODE.findall(html_text) == expected
        assert "CE.2. Comunicar oralment" in html_text
        assert "CE.2. CE.2." not in html_text

    def test_list_numbering_everywhere(self, view):
        docx_text = _docx_text(_docx(pack_flow_document(build_flow_document(view))))
        html_text = unescape(render_markup_document(view))
        for item in view.objectives + view.criteria:
            assert item in docx_text
            assert item in html_text

    def test_placeholder_everywhere(self, view):
        _, pdf_text = _pdf_text(PDFService().capture(build_pages(view), view.title))
        docx_text = _docx_text(_docx(pack_flow_document(build_flow_document(view))))
        html_text = unescape(render_markup_document(view))

        assert NO_DATA_LABEL in docx_text
        assert NO_DATA_LABEL in html_text
        assert "No s" in pdf_text and "definit dades" in pdf_text
