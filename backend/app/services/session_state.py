"""Application state for one review/export session.

State is an immutable value; every change goes through a pure update
function that returns a new AppState. SessionStore only holds the current
value for the running process.
"""
from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from types import MappingProxyType
from typing import Mapping

from app.models.situacio import CurriculumUnit


class ExportTarget(str, Enum):
    PDF = "pdf"
    DOCX = "docx"
    GDOC = "gdoc"


class ExportStatus(str, Enum):
    IDLE = "idle"
    IN_PROGRESS = "in_progress"


class ExportOutcome(str, Enum):
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class ExportSlot:
    status: ExportStatus = ExportStatus.IDLE
    last_outcome: ExportOutcome | None = None
    notice: str | None = None


def _idle_slots() -> Mapping[ExportTarget, ExportSlot]:
    return MappingProxyType({target: ExportSlot() for target in ExportTarget})


@dataclass(frozen=True)
class AppState:
    document: CurriculumUnit | None = None
    exports: Mapping[ExportTarget, ExportSlot] = field(default_factory=_idle_slots)
    # Set while the PDF capture runs; the preview drops inter-page gaps
    exporting: bool = False

    def slot(self, target: ExportTarget) -> ExportSlot:
        return self.exports[target]


def initial_state() -> AppState:
    return AppState()


def _with_slot(state: AppState, target: ExportTarget, slot: ExportSlot) -> AppState:
    exports = dict(state.exports)
    exports[target] = slot
    return replace(state, exports=MappingProxyType(exports))


def load_document(state: AppState, unit: CurriculumUnit) -> AppState:
    """Hold a freshly extracted or edited document, replacing any previous one."""
    return replace(state, document=unit)


def discard_document(state: AppState) -> AppState:
    """Back to the editor: no document, finished export results cleared.

    Slots still in progress stay in progress (and so does the exporting
    flag) until their export finishes, so a reloaded document cannot start
    a second concurrent run of the same target.
    """
    exports = {
        target: ExportSlot(status=slot.status) if slot.status == ExportStatus.IN_PROGRESS
        else ExportSlot()
        for target, slot in state.exports.items()
    }
    return AppState(exports=MappingProxyType(exports), exporting=state.exporting)


def begin_export(state: AppState, target: ExportTarget) -> AppState:
    return _with_slot(
        state, target, replace(state.slot(target), status=ExportStatus.IN_PROGRESS)
    )


def finish_export(
    state: AppState,
    target: ExportTarget,
    outcome: ExportOutcome,
    notice: str | None = None,
) -> AppState:
    """Every export ends idle; a failure only leaves a notice behind."""
    return _with_slot(
        state,
        target,
        ExportSlot(status=ExportStatus.IDLE, last_outcome=outcome, notice=notice),
    )


def set_exporting(state: AppState, exporting: bool) -> AppState:
    return replace(state, exporting=exporting)


def describe(state: AppState) -> dict:
    """JSON-ready summary of the session."""
    return {
        "document": (
            state.document.model_dump(by_alias=True) if state.document is not None else None
        ),
        "exporting": state.exporting,
        "exports": {
            target.value: {
                "status": slot.status.value,
                "last_outcome": slot.last_outcome.value if slot.last_outcome else None,
                "notice": slot.notice,
            }
            for target, slot in state.exports.items()
        },
    }


class SessionStore:
    """Holds the current AppState; the event loop is the only writer."""

    def __init__(self, state: AppState | None = None):
        self.state = state or initial_state()

    def apply(self, update, *args) -> AppState:
        self.state = update(self.state, *args)
        return self.state
