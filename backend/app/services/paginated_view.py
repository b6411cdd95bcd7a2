"""Paginated view of a Situació d'Aprenentatge.

build_pages() projects a DerivedView onto the five fixed pages of the official
model. The page tree is the single source of visual truth: the HTML preview
(screen and print) and the PDF capture both draw it as-is, one physical
landscape A4 page per logical page. Nothing reflows across pages; text that
does not fit its box is clipped.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from html import escape

from app.services import document_text as txt
from app.services.derivation import DerivedView

PAGE_WIDTH_MM = 297
PAGE_HEIGHT_MM = 210
PAGE_PADDING_MM = 15


# ──────────────────────────────────────────────
# Page tree
# ──────────────────────────────────────────────

@dataclass(frozen=True)
class Cell:
    text: str
    sub: str = ""
    bold: bool = False
    italic: bool = False
    muted: bool = False
    centered: bool = False


@dataclass(frozen=True)
class CoverHeader:
    institution_lines: tuple[str, ...]
    title: str


@dataclass(frozen=True)
class Heading:
    text: str


@dataclass(frozen=True)
class Note:
    text: str


@dataclass(frozen=True)
class TextBox:
    text: str
    hint: str = ""
    italic: bool = False
    min_height_mm: int = 25


@dataclass(frozen=True)
class KeyValueTable:
    rows: tuple[tuple[str, str], ...]


@dataclass(frozen=True)
class DataTable:
    headers: tuple[str, ...]
    rows: tuple[tuple[Cell, ...], ...]
    widths: tuple[float, ...]  # fractions of the content width


@dataclass(frozen=True)
class ListColumn:
    title: str
    hint: str
    items: tuple[str, ...]


@dataclass(frozen=True)
class TwoColumnList:
    left: ListColumn
    right: ListColumn


@dataclass(frozen=True)
class Footnotes:
    lines: tuple[str, ...]


@dataclass(frozen=True)
class Page:
    number: int
    blocks: tuple = field(default_factory=tuple)

    @property
    def footer(self) -> str:
        return txt.page_footer(self.number)


def _cover_page(view: DerivedView) -> Page:
    return Page(1, (
        CoverHeader(txt.INSTITUTION_LINES, txt.DOCUMENT_TITLE),
        KeyValueTable((
            (txt.LABEL_TITLE, view.title),
            (txt.LABEL_LEVEL, view.level),
            (txt.LABEL_SUBJECT_AREA, view.subject_area),
        )),
        Footnotes(txt.COVER_FOOTNOTES),
    ))


def _description_page(view: DerivedView) -> Page:
    return Page(2, (
        Heading(txt.SECTION_DESCRIPTION),
        TextBox(view.context_and_challenge, hint=txt.HINT_DESCRIPTION, min_height_mm=40),
        Heading(txt.SECTION_COMPETENCIES),
        Note(txt.INTRO_COMPETENCIES),
        DataTable(
            headers=(txt.HEADER_COMPETENCY, txt.HEADER_SUBJECT),
            rows=tuple(
                (Cell(row.label), Cell(row.subject_area))
                for row in view.competencies
            ),
            widths=(0.67, 0.33),
        ),
        Heading(txt.SECTION_TRANSVERSAL),
        TextBox(view.transversal_competencies, min_height_mm=20),
    ))


def _curriculum_page(view: DerivedView) -> Page:
    return Page(3, (
        TwoColumnList(
            left=ListColumn(txt.SECTION_OBJECTIVES, txt.HINT_OBJECTIVES, view.objectives),
            right=ListColumn(txt.SECTION_CRITERIA, txt.HINT_CRITERIA, view.criteria),
        ),
        Heading(txt.SECTION_KNOWLEDGE),
        Note(txt.INTRO_KNOWLEDGE),
        DataTable(
            headers=(txt.HEADER_NUMBER, txt.HEADER_KNOWLEDGE, txt.HEADER_SUBJECT),
            rows=tuple(
                (Cell(row.number, centered=True), Cell(row.content), Cell(row.subject_area))
                for row in view.knowledge
            ),
            widths=(0.06, 0.61, 0.33),
        ),
    ))


def _development_page(view: DerivedView) -> Page:
    return Page(4, (
        Heading(txt.SECTION_DEVELOPMENT),
        TextBox(view.methodological_strategies, hint=txt.HINT_DEVELOPMENT, min_height_mm=30),
        Heading(txt.SECTION_ACTIVITIES),
        DataTable(
            headers=(txt.HEADER_PHASE, txt.HEADER_ACTIVITY, txt.HEADER_TIME),
            rows=tuple(
                (
                    Cell(phase.label, sub=phase.hint, bold=True),
                    Cell(phase.description),
                    Cell(phase.time_allocation),
                )
                for phase in view.phases
            ),
            widths=(0.25, 0.58, 0.17),
        ),
    ))


def _supports_page(view: DerivedView) -> Page:
    return Page(5, (
        Heading(txt.SECTION_VECTORS),
        TextBox(view.vectors_description, italic=True),
        Heading(txt.SECTION_UNIVERSAL),
        TextBox(view.universal_supports),
        Heading(txt.SECTION_ADDITIONAL),
        Note(txt.INTRO_ADDITIONAL),
        DataTable(
            headers=(txt.HEADER_STUDENT, txt.HEADER_MEASURE),
            rows=tuple(
                (
                    Cell(row.student_label, italic=row.placeholder,
                         muted=row.placeholder, centered=row.placeholder),
                    Cell(row.measure, italic=row.placeholder,
                         muted=row.placeholder, centered=row.placeholder),
                )
                for row in view.additional_supports
            ),
            widths=(0.33, 0.67),
        ),
    ))


def build_pages(view: DerivedView) -> list[Page]:
    """The five logical pages, always in the same order."""
    return [
        _cover_page(view),
        _description_page(view),
        _curriculum_page(view),
        _development_page(view),
        _supports_page(view),
    ]


# ──────────────────────────────────────────────
# HTML preview (screen + print)
# ──────────────────────────────────────────────

_STYLESHEET = f"""
  body {{ margin: 0; background: #e2e8f0; }}
  .official-page {{
    background: white; width: {PAGE_WIDTH_MM}mm; height: {PAGE_HEIGHT_MM}mm;
    padding: {PAGE_PADDING_MM}mm; margin: 0 auto 20px auto; box-sizing: border-box;
    overflow: hidden; position: relative; color: black;
    font-family: Arial, Helvetica, sans-serif;
    box-shadow: 0 4px 20px rgba(0,0,0,0.1);
  }}
  .exporting .official-page {{ margin: 0 auto; box-shadow: none; }}
  .institution {{ font-weight: bold; font-size: 14px; }}
  .official-header-title {{ font-size: 56px; font-weight: bold; margin: 60px 0 50px; text-align: right; }}
  .official-table {{ width: 100%; border-collapse: collapse; margin-bottom: 20px; }}
  .official-table td, .official-table th {{ border: 1.5px solid black; padding: 10px; vertical-align: top; font-size: 13px; text-align: left; }}
  .official-table th {{ background: #f8fafc; font-weight: bold; }}
  .official-table .label {{ width: 250px; font-weight: bold; background: #fcfcfc; }}
  .official-table .centered {{ text-align: center; }}
  .official-table .placeholder {{ color: #64748b; font-style: italic; text-align: center; }}
  .official-section-title {{ font-weight: bold; font-size: 14px; margin-bottom: 8px; text-transform: uppercase; }}
  .official-intro {{ font-size: 11px; margin-bottom: 8px; }}
  .official-box {{ border: 1.5px solid black; padding: 12px; font-size: 13px; margin-bottom: 24px; overflow: hidden; }}
  .official-box .hint, .cell-hint {{ color: #64748b; font-style: italic; font-size: 11px; display: block; }}
  .official-note {{ font-size: 10px; line-height: 1.2; margin-top: 20px; color: #333; border-top: 1px solid black; padding-top: 6px; }}
  .official-footer {{ position: absolute; bottom: {PAGE_PADDING_MM}mm; right: {PAGE_PADDING_MM}mm; font-size: 10px; }}
  .flex-table {{ display: flex; width: 100%; border: 1.5px solid black; margin-bottom: 24px; }}
  .flex-col-table {{ flex: 1; padding: 10px; border-right: 1.5px solid black; font-size: 12px; }}
  .flex-col-table:last-child {{ border-right: none; }}
  .flex-col-title {{ text-align: center; font-weight: bold; text-transform: uppercase; font-size: 12px; }}
  .flex-col-hint {{ text-align: center; font-style: italic; font-size: 10px; margin-bottom: 8px; }}
  .flex-col-table p {{ margin: 0 0 6px; }}
  @media print {{
    @page {{ size: A4 landscape; margin: 0; }}
    body {{ background: white; }}
    .official-page {{ box-shadow: none; margin: 0; page-break-after: always; }}
  }}
"""


def _html_text(value: str) -> str:
    return escape(value or "").replace("\n", "<br>")


def _render_cell(cell: Cell, tag: str = "td") -> str:
    classes = []
    if cell.muted and cell.italic:
        classes.append("placeholder")
    elif cell.centered:
        classes.append("centered")
    class_attr = f' class="{" ".join(classes)}"' if classes else ""
    body = _html_text(cell.text)
    if cell.bold:
        body = f"<strong>{body}</strong>"
    if cell.sub:
        body += f'<span class="cell-hint">{_html_text(cell.sub)}</span>'
    return f"<{tag}{class_attr}>{body}</{tag}>"


def _render_block(block) -> str:
    if isinstance(block, CoverHeader):
        lines = "".join(
            f'<div class="institution">{escape(line)}</div>' for line in block.institution_lines
        )
        return f'<div>{lines}</div><div class="official-header-title">{escape(block.title)}</div>'
    if isinstance(block, Heading):
        return f'<div class="official-section-title">{escape(block.text)}</div>'
    if isinstance(block, Note):
        return f'<p class="official-intro">{escape(block.text)}</p>'
    if isinstance(block, Footnotes):
        lines = "".join(f"<p>{escape(line)}</p>" for line in block.lines)
        return f'<div class="official-note">{lines}</div>'
    if isinstance(block, TextBox):
        hint = f'<span class="hint">{escape(block.hint)}</span>' if block.hint else ""
        body = _html_text(block.text)
        if block.italic:
            body = f"<em>{body}</em>"
        return (
            f'<div class="official-box" style="min-height:{block.min_height_mm}mm">'
            f"{hint}{body}</div>"
        )
    if isinstance(block, KeyValueTable):
        rows = "".join(
            f'<tr><td class="label">{escape(label)}</td><td>{_html_text(value)}</td></tr>'
            for label, value in block.rows
        )
        return f'<table class="official-table"><tbody>{rows}</tbody></table>'
    if isinstance(block, DataTable):
        cols = "".join(f'<col style="width:{w * 100:.0f}%">' for w in block.widths)
        head = "".join(f"<th>{escape(h)}</th>" for h in block.headers)
        rows = "".join(
            "<tr>" + "".join(_render_cell(cell) for cell in row) + "</tr>"
            for row in block.rows
        )
        return (
            f'<table class="official-table"><colgroup>{cols}</colgroup>'
            f"<thead><tr>{head}</tr></thead><tbody>{rows}</tbody></table>"
        )
    if isinstance(block, TwoColumnList):
        columns = []
        for column in (block.left, block.right):
            items = "".join(f"<p>{_html_text(item)}</p>" for item in column.items)
            columns.append(
                f'<div class="flex-col-table">'
                f'<div class="flex-col-title">{escape(column.title)}</div>'
                f'<div class="flex-col-hint">{escape(column.hint)}</div>'
                f"{items}</div>"
            )
        return f'<div class="flex-table">{"".join(columns)}</div>'
    raise TypeError(f"Unknown page block: {type(block).__name__}")


def render_paginated_html(pages: list[Page], title: str = "", exporting: bool = False) -> str:
    """Standalone HTML document with one fixed-size section per page."""
    sections = []
    for page in pages:
        body = "".join(_render_block(block) for block in page.blocks)
        sections.append(
            f'<section class="official-page" data-page="{page.number}">'
            f'{body}<div class="official-footer">{escape(page.footer)}</div></section>'
        )
    container_class = "pages exporting" if exporting else "pages"
    return f"""<!DOCTYPE html>
<html lang="ca">
<head><meta charset="UTF-8"><title>{escape(title or txt.DOCUMENT_TITLE)}</title>
<style>{_STYLESHEET}</style></head>
<body>
<div class="{container_class}">
{"".join(sections)}
</div>
</body>
</html>"""
