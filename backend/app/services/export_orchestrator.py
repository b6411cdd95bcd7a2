"""Export orchestration for the three targets (PDF, DOCX, Google Doc).

Each target has its own slot in the session state: idle -> in_progress ->
idle. Triggering a target that is already in progress is ignored (nothing is
queued) and other targets are unaffected. Renderers are synchronous; the
blocking finalisation of each target runs in a worker thread so the event
loop stays responsive.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from app.core.errors import ExportError, ExportFailureKind
from app.models.situacio import CurriculumUnit
from app.services import session_state as st
from app.services.derivation import DerivedView, derive_view, export_filename
from app.services.drive_upload import DriveUploader, UploadResult
from app.services.flow_document import build_flow_document, pack_flow_document
from app.services.markup_document import render_markup_document
from app.services.paginated_view import build_pages
from app.services.pdf import PDFService
from app.services.telemetry import emit_event

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@dataclass(frozen=True)
class ExportArtifact:
    filename: str
    media_type: str
    content: bytes


class NoDocumentError(LookupError):
    """Raised when an export is requested with no document held."""


class ExportOrchestrator:
    def __init__(
        self,
        store: st.SessionStore,
        pdf_service: PDFService | None = None,
        filename_prefix: str = "Situacio_Aprenentatge",
    ):
        self.store = store
        self.pdf_service = pdf_service or PDFService()
        self.filename_prefix = filename_prefix

    # ──────────────────────────────────────────
    # Public API
    # ──────────────────────────────────────────

    def is_busy(self, target: st.ExportTarget) -> bool:
        return self.store.state.slot(target).status == st.ExportStatus.IN_PROGRESS

    async def export_pdf(self) -> ExportArtifact | None:
        return await self._run(st.ExportTarget.PDF, self._capture_pdf)

    async def export_docx(self) -> ExportArtifact | None:
        return await self._run(st.ExportTarget.DOCX, self._pack_docx)

    async def export_gdoc(self, uploader: DriveUploader) -> UploadResult | None:
        return await self._run(
            st.ExportTarget.GDOC, lambda view: self._upload_gdoc(view, uploader)
        )

    async def run(self, target: st.ExportTarget, uploader: DriveUploader | None = None):
        """Trigger one export target by name; GDOC needs an uploader."""
        if target == st.ExportTarget.PDF:
            return await self.export_pdf()
        if target == st.ExportTarget.DOCX:
            return await self.export_docx()
        if uploader is None:
            raise ValueError("Google Doc export needs an uploader")
        return await self.export_gdoc(uploader)

    # ──────────────────────────────────────────
    # State machine
    # ──────────────────────────────────────────

    async def _run(self, target: st.ExportTarget, finalize: Callable):
        """Guarded entry, finalise, always back to idle.

        Returns None when the target is already in progress. Export errors are
        recorded on the slot and re-raised for the caller to report.
        """
        if self.is_busy(target):
            logger.info("[Export] %s already in progress, ignoring trigger", target.value)
            return None

        unit = self.store.state.document
        if unit is None:
            raise NoDocumentError("No document to export")

        self.store.apply(st.begin_export, target)
        try:
            result = await finalize(self._view(unit))
        except ExportError as exc:
            logger.error("[Export] %s failed (%s): %s", target.value, exc.kind.value, exc.message)
            self.store.apply(st.finish_export, target, st.ExportOutcome.FAILED, exc.message)
            emit_event("export", target=target.value, ok=False, error_type=exc.kind.value)
            raise
        except Exception as exc:
            logger.error("[Export] %s failed unexpectedly: %s", target.value, exc, exc_info=True)
            self.store.apply(st.finish_export, target, st.ExportOutcome.FAILED, str(exc))
            emit_event("export", target=target.value, ok=False, error_type=type(exc).__name__)
            raise

        self.store.apply(st.finish_export, target, st.ExportOutcome.SUCCEEDED)
        emit_event("export", target=target.value, ok=True)
        return result

    @staticmethod
    def _view(unit: CurriculumUnit) -> DerivedView:
        return derive_view(unit)

    def _filename(self, view: DerivedView, extension: str) -> str:
        return export_filename(view.title, extension, self.filename_prefix)

    # ──────────────────────────────────────────
    # Target finalisers
    # ──────────────────────────────────────────

    async def _capture_pdf(self, view: DerivedView) -> ExportArtifact:
        pages = build_pages(view)
        self.store.apply(st.set_exporting, True)
        try:
            content = await asyncio.to_thread(self.pdf_service.capture, pages, view.title)
        except ExportError:
            raise
        except Exception as exc:
            raise ExportError(ExportFailureKind.CAPTURE_FAILED, f"PDF capture failed: {exc}") from exc
        finally:
            self.store.apply(st.set_exporting, False)
        return ExportArtifact(self._filename(view, ".pdf"), PDF_MEDIA_TYPE, content)

    async def _pack_docx(self, view: DerivedView) -> ExportArtifact:
        def build_and_pack() -> bytes:
            return pack_flow_document(build_flow_document(view))

        try:
            content = await asyncio.to_thread(build_and_pack)
        except Exception as exc:
            raise ExportError(ExportFailureKind.PACK_FAILED, f"DOCX packing failed: {exc}") from exc
        return ExportArtifact(self._filename(view, ".docx"), DOCX_MEDIA_TYPE, content)

    async def _upload_gdoc(self, view: DerivedView, uploader: DriveUploader) -> UploadResult:
        html = render_markup_document(view)
        return await asyncio.to_thread(uploader.upload_html, self._filename(view, ""), html)
