"""HTML rendition of a Situació d'Aprenentatge for cloud upload.

Continuous flow: headings, paragraphs and bordered tables, no pages. The
importing word processor drops <style> blocks, so every rule is inline.
HTML is built with plain string templates; all model text is escaped.
"""
from __future__ import annotations

from html import escape

from app.services import document_text as txt
from app.services.derivation import DerivedView

# ── Inline styles ─────────────────────────────────────────────────────────────
_FONT = "font-family:Arial,Helvetica,sans-serif;"
_TABLE = "width:100%;border-collapse:collapse;margin:0 0 16px;"
_CELL = "border:1px solid #000000;padding:6px 8px;vertical-align:top;font-size:11pt;"
_HEADER = _CELL + "background:#f2f2f2;font-weight:bold;text-align:center;"
_PLACEHOLDER = _CELL + "font-style:italic;text-align:center;color:#64748b;"
_H2 = "font-size:13pt;font-weight:bold;text-transform:uppercase;margin:20px 0 6px;"
_HINT = "font-style:italic;color:#64748b;font-size:9pt;margin:0 0 4px;"
_INTRO = "font-size:10pt;margin:0 0 6px;"
_BOX = "border:1px solid #000000;padding:8px 10px;margin:0 0 16px;"


def _text(value: str) -> str:
    return escape(value or "").replace("\n", "<br>")


def _heading(text: str) -> str:
    return f'<h2 style="{_H2}">{escape(text)}</h2>'


def _box(text: str, hint: str = "", italic: bool = False) -> str:
    hint_html = f'<p style="{_HINT}">{escape(hint)}</p>' if hint else ""
    body = _text(text)
    if italic:
        body = f"<em>{body}</em>"
    return f'<div style="{_BOX}">{hint_html}<p style="margin:0;">{body}</p></div>'


def _table(headers: tuple[str, ...], rows: list[str]) -> str:
    head = "".join(f'<th style="{_HEADER}">{escape(h)}</th>' for h in headers)
    return (
        f'<table style="{_TABLE}" cellpadding="0" cellspacing="0">'
        f"<thead><tr>{head}</tr></thead><tbody>{''.join(rows)}</tbody></table>"
    )


def _row(*cells: str, style: str = _CELL) -> str:
    return "<tr>" + "".join(f'<td style="{style}">{cell}</td>' for cell in cells) + "</tr>"


def render_markup_document(view: DerivedView) -> str:
    """Full HTML document mirroring the paginated and .docx renditions."""

    # ── Identification ────────────────────────────────────────────────────────
    identification = "".join(
        _row(f"<strong>{escape(label)}</strong>", _text(value))
        for label, value in (
            (txt.LABEL_TITLE, view.title),
            (txt.LABEL_LEVEL, view.level),
            (txt.LABEL_SUBJECT_AREA, view.subject_area),
        )
    )

    # ── Competencies ──────────────────────────────────────────────────────────
    competency_rows = [
        _row(_text(row.label), _text(row.subject_area)) for row in view.competencies
    ]

    # ── Objectives / criteria ─────────────────────────────────────────────────
    objectives = "".join(f'<p style="margin:0 0 4px;">{_text(o)}</p>' for o in view.objectives)
    criteria = "".join(f'<p style="margin:0 0 4px;">{_text(c)}</p>' for c in view.criteria)
    objectives_criteria = (
        f'<table style="{_TABLE}" cellpadding="0" cellspacing="0"><tr>'
        f'<th style="{_HEADER}">{escape(txt.SECTION_OBJECTIVES)}'
        f'<p style="{_HINT}">{escape(txt.HINT_OBJECTIVES)}</p></th>'
        f'<th style="{_HEADER}">{escape(txt.SECTION_CRITERIA)}'
        f'<p style="{_HINT}">{escape(txt.HINT_CRITERIA)}</p></th>'
        f"</tr>"
        f'<tr><td style="{_CELL}width:50%;">{objectives}</td>'
        f'<td style="{_CELL}width:50%;">{criteria}</td></tr></table>'
    )

    # ── Knowledge ─────────────────────────────────────────────────────────────
    knowledge_rows = [
        _row(escape(row.number), _text(row.content), _text(row.subject_area))
        for row in view.knowledge
    ]

    # ── Activities (fixed four phases) ────────────────────────────────────────
    phase_rows = [
        _row(
            f"<strong>{escape(phase.label)}</strong>"
            f'<p style="{_HINT}">{escape(phase.hint)}</p>',
            _text(phase.description),
            _text(phase.time_allocation),
        )
        for phase in view.phases
    ]

    # ── Additional supports (placeholder row when empty) ──────────────────────
    support_rows = [
        _row(
            _text(row.student_label),
            _text(row.measure),
            style=_PLACEHOLDER if row.placeholder else _CELL,
        )
        for row in view.additional_supports
    ]

    return f"""<!DOCTYPE html>
<html lang="ca">
<head><meta charset="UTF-8"><title>{escape(view.title)}</title></head>
<body style="{_FONT}color:#000000;">
  <p style="margin:0;font-weight:bold;">{escape(txt.INSTITUTION_LINES[0])}</p>
  <p style="margin:0 0 16px;font-weight:bold;">{escape(txt.INSTITUTION_LINES[1])}</p>
  <h1 style="font-size:26pt;margin:0 0 16px;">{escape(txt.DOCUMENT_TITLE)}</h1>
  <table style="{_TABLE}" cellpadding="0" cellspacing="0"><tbody>{identification}</tbody></table>

  {_heading(txt.SECTION_DESCRIPTION)}
  {_box(view.context_and_challenge, hint=txt.HINT_DESCRIPTION)}

  {_heading(txt.SECTION_COMPETENCIES)}
  <p style="{_INTRO}">{escape(txt.INTRO_COMPETENCIES)}</p>
  {_table((txt.HEADER_COMPETENCY, txt.HEADER_SUBJECT), competency_rows)}

  {_heading(txt.SECTION_TRANSVERSAL)}
  {_box(view.transversal_competencies)}

  {objectives_criteria}

  {_heading(txt.SECTION_KNOWLEDGE)}
  <p style="{_INTRO}">{escape(txt.INTRO_KNOWLEDGE)}</p>
  {_table((txt.HEADER_NUMBER, txt.HEADER_KNOWLEDGE, txt.HEADER_SUBJECT), knowledge_rows)}

  {_heading(txt.SECTION_DEVELOPMENT)}
  {_box(view.methodological_strategies, hint=txt.HINT_DEVELOPMENT)}

  {_heading(txt.SECTION_ACTIVITIES)}
  {_table((txt.HEADER_PHASE, txt.HEADER_ACTIVITY, txt.HEADER_TIME), phase_rows)}

  {_heading(txt.SECTION_VECTORS)}
  {_box(view.vectors_description, italic=True)}

  {_heading(txt.SECTION_UNIVERSAL)}
  {_box(view.universal_supports)}

  {_heading(txt.SECTION_ADDITIONAL)}
  <p style="{_INTRO}">{escape(txt.INTRO_ADDITIONAL)}</p>
  {_table((txt.HEADER_STUDENT, txt.HEADER_MEASURE), support_rows)}
</body>
</html>"""
