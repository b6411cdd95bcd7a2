"""Display values derived from a CurriculumUnit.

Numbering is never stored on the model: it is recomputed here from sequence
position on every render pass. All three renderers consume the single
DerivedView built by derive_view(), so competency codes, list numbers and the
empty-supports placeholder are identical across PDF, DOCX and HTML.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Sequence

from app.models.situacio import Activities, AdditionalSupport, CurriculumUnit
from app.services.document_text import NO_DATA_LABEL, PHASE_TEXT

# "CE.2. ", "ce2.", " CE.10.  " ...
_COMPETENCY_PREFIX = re.compile(r"^\s*CE\.?\d+\.\s*", re.IGNORECASE)
_SLUG_DROP = re.compile(r"[^a-z0-9]")

# Fixed display order of the four activity phases
PHASE_ORDER = ("initial", "development", "structuring", "application")


@dataclass(frozen=True)
class CompetencyCode:
    code: str
    text: str


@dataclass(frozen=True)
class CompetencyRow:
    code: str
    text: str
    subject_area: str

    @property
    def label(self) -> str:
        return f"{self.code} {self.text}".strip()


@dataclass(frozen=True)
class KnowledgeRow:
    number: str
    content: str
    subject_area: str


@dataclass(frozen=True)
class PhaseRow:
    key: str
    label: str
    hint: str
    description: str
    time_allocation: str


@dataclass(frozen=True)
class SupportRow:
    student_label: str
    measure: str
    placeholder: bool = False


def normalize_competency_code(raw_description: str, position_index: int) -> CompetencyCode:
    """Strip any upstream "CE.n." prefix and renumber from position."""
    text = _COMPETENCY_PREFIX.sub("", raw_description or "", count=1).strip()
    return CompetencyCode(code=f"CE.{position_index + 1}.", text=text)


def number_criterion(raw_text: str, position_index: int) -> str:
    """Prefix the criterion with its position unless it already carries numbering.

    Any period in the text counts as existing numbering. This is a known
    limitation: an unnumbered criterion containing an abbreviation is left
    unnumbered.
    """
    if "." in raw_text:
        return raw_text
    return f"{position_index + 1}. {raw_text}"


def _position_label(position_index: int, position_base: int = 1) -> str:
    return str(position_index + position_base)


def numbered_list(items: Sequence[str], position_base: int = 1) -> list[str]:
    return [
        f"{_position_label(i, position_base)}. {item}"
        for i, item in enumerate(items)
    ]


def resolve_additional_supports(items: Sequence[AdditionalSupport]) -> list[SupportRow]:
    """One row per support, or a single placeholder row when there are none."""
    if not items:
        return [SupportRow(NO_DATA_LABEL, NO_DATA_LABEL, placeholder=True)]
    return [SupportRow(item.student_label, item.measure) for item in items]


def derive_filename_slug(title: str) -> str:
    return _SLUG_DROP.sub("", (title or "").lower())


def export_filename(title: str, extension: str, prefix: str = "Situacio_Aprenentatge") -> str:
    return f"{prefix}_{derive_filename_slug(title)}{extension}"


def ordered_activity_phases(activities: Activities) -> list[PhaseRow]:
    """The four phases, each addressed by name, in fixed display order."""
    details = {
        "initial": activities.initial,
        "development": activities.development,
        "structuring": activities.structuring,
        "application": activities.application,
    }
    rows = []
    for key in PHASE_ORDER:
        label, hint = PHASE_TEXT[key]
        detail = details[key]
        rows.append(PhaseRow(
            key=key,
            label=label,
            hint=hint,
            description=detail.description,
            time_allocation=detail.time_allocation,
        ))
    return rows


@dataclass(frozen=True)
class DerivedView:
    """Everything a renderer prints, computed once per render pass."""

    title: str
    level: str
    subject_area: str
    context_and_challenge: str
    transversal_competencies: str
    competencies: tuple[CompetencyRow, ...]
    objectives: tuple[str, ...]
    criteria: tuple[str, ...]
    knowledge: tuple[KnowledgeRow, ...]
    methodological_strategies: str
    phases: tuple[PhaseRow, ...]
    vectors_description: str
    universal_supports: str
    additional_supports: tuple[SupportRow, ...]
    filename_slug: str

    @property
    def competency_codes(self) -> list[str]:
        return [row.code for row in self.competencies]


def derive_view(unit: CurriculumUnit) -> DerivedView:
    spec = unit.curricular_specification

    competencies = []
    for i, competency in enumerate(spec.specific_competencies):
        normalized = normalize_competency_code(competency.description, i)
        competencies.append(
            CompetencyRow(normalized.code, normalized.text, competency.subject_area)
        )

    knowledge = [
        KnowledgeRow(_position_label(i), item.content, item.subject_area)
        for i, item in enumerate(spec.knowledge_items)
    ]

    return DerivedView(
        title=unit.identification.title,
        level=unit.identification.level,
        subject_area=unit.identification.subject_area,
        context_and_challenge=unit.description.context_and_challenge,
        transversal_competencies=unit.description.transversal_competencies,
        competencies=tuple(competencies),
        objectives=tuple(numbered_list(spec.objectives)),
        criteria=tuple(
            number_criterion(text, i) for i, text in enumerate(spec.evaluation_criteria)
        ),
        knowledge=tuple(knowledge),
        methodological_strategies=unit.development.methodological_strategies,
        phases=tuple(ordered_activity_phases(unit.development.activities)),
        vectors_description=unit.support_measures.vectors_description,
        universal_supports=unit.support_measures.universal_supports,
        additional_supports=tuple(
            resolve_additional_supports(unit.support_measures.additional_supports)
        ),
        filename_slug=derive_filename_slug(unit.identification.title),
    )
