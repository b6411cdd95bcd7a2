"""Tests for ExportOrchestrator: per-target guards, concurrency and failure handling.

All tests run FULLY OFFLINE. The PDF capture and the Drive uploader are
replaced by fakes; the DOCX target runs for real.

Coverage:
  1. a second PDF trigger while one is in progress is a no-op
  2. DOCX proceeds while PDF is in progress
  3. the exporting flag is set only during capture and always cleared
  4. failures end idle with a notice and propagate as ExportError
  5. exporting with no document raises NoDocumentError
"""

import asyncio
import threading

import pytest

from app.core.errors import ExportError, ExportFailureKind
from app.services import session_state as st
from app.services.drive_upload import UploadResult
from app.services.export_orchestrator import (
    DOCX_MEDIA_TYPE,
    PDF_MEDIA_TYPE,
    ExportOrchestrator,
    NoDocumentError,
)


class BlockingPdfService:
    """Capture that waits until the test releases it."""

    def __init__(self):
        self.started = threading.Event()
        self.release = threading.Event()
        self.calls = 0

    def capture(self, pages, title=""):
        self.calls += 1
        self.started.set()
        self.release.wait(timeout=5)
        return b"%PDF-fake"


class FailingPdfService:
    def capture(self, pages, title=""):
        raise RuntimeError("renderer exploded")


class FakeUploader:
    def __init__(self, error=None):
        self.error = error
        self.uploads = []

    def upload_html(self, name, html):
        if self.error is not None:
            raise self.error
        self.uploads.append((name, html))
        return UploadResult("doc-1", "https://docs.example/document/d/doc-1/edit")


@pytest.fixture
def store(sample_unit):
    store = st.SessionStore()
    store.apply(st.load_document, sample_unit)
    return store


# ── Guards and concurrency ────────────────────────────────────────────────────

class TestConcurrency:
    def test_reentrant_pdf_trigger_is_ignored(self, store):
        pdf = BlockingPdfService()
        orchestrator = ExportOrchestrator(store, pdf)

        async def scenario():
            first = asyncio.create_task(orchestrator.export_pdf())
            await asyncio.to_thread(pdf.started.wait, 5)

            assert orchestrator.is_busy(st.ExportTarget.PDF)
            assert store.state.exporting is True
            assert await orchestrator.export_pdf() is None

            pdf.release.set()
            return await first

        artifact = asyncio.run(scenario())

        assert pdf.calls == 1
        assert artifact.content == b"%PDF-fake"
        assert artifact.media_type == PDF_MEDIA_TYPE
        assert artifact.filename == "Situacio_Aprenentatge_unitategipte5.pdf"
        slot = store.state.slot(st.ExportTarget.PDF)
        assert slot.status == st.ExportStatus.IDLE
        assert slot.last_outcome == st.ExportOutcome.SUCCEEDED
        assert store.state.exporting is False

    def test_docx_proceeds_while_pdf_in_progress(self, store):
        pdf = BlockingPdfService()
        orchestrator = ExportOrchestrator(store, pdf)

        async def scenario():
            pdf_task = asyncio.create_task(orchestrator.export_pdf())
            await asyncio.to_thread(pdf.started.wait, 5)

            docx = await orchestrator.export_docx()
            pdf_still_running = orchestrator.is_busy(st.ExportTarget.PDF)

            pdf.release.set()
            await pdf_task
            return docx, pdf_still_running

        docx, pdf_still_running = asyncio.run(scenario())

        assert pdf_still_running
        assert docx.media_type == DOCX_MEDIA_TYPE
        assert docx.filename.endswith(".docx")
        assert docx.content[:2] == b"PK"

    def test_discard_and_reload_does_not_start_second_capture(self, store, sample_unit):
        pdf = BlockingPdfService()
        orchestrator = ExportOrchestrator(store, pdf)

        async def scenario():
            first = asyncio.create_task(orchestrator.export_pdf())
            await asyncio.to_thread(pdf.started.wait, 5)

            store.apply(st.discard_document)
            store.apply(st.load_document, sample_unit)
            second = await orchestrator.export_pdf()
            exporting_during_first = store.state.exporting

            pdf.release.set()
            return await first, second, exporting_during_first

        first, second, exporting_during_first = asyncio.run(scenario())

        assert second is None
        assert pdf.calls == 1
        assert exporting_during_first is True
        assert first.content == b"%PDF-fake"
        assert store.state.slot(st.ExportTarget.PDF).status == st.ExportStatus.IDLE
        assert store.state.exporting is False

    def test_run_dispatches_by_target(self, store):
        orchestrator = ExportOrchestrator(store)
        artifact = asyncio.run(orchestrator.run(st.ExportTarget.DOCX))
        assert artifact.media_type == DOCX_MEDIA_TYPE
        with pytest.raises(ValueError):
            asyncio.run(orchestrator.run(st.ExportTarget.GDOC))

    def test_custom_filename_prefix(self, store):
        orchestrator = ExportOrchestrator(store, filename_prefix="SA")
        artifact = asyncio.run(orchestrator.export_docx())
        assert artifact.filename == "SA_unitategipte5.docx"


# ── Failures ──────────────────────────────────────────────────────────────────

class TestFailures:
    def test_capture_failure_is_recorded(self, store):
        orchestrator = ExportOrchestrator(store, FailingPdfService())
        with pytest.raises(ExportError) as exc:
            asyncio.run(orchestrator.export_pdf())
        assert exc.value.kind == ExportFailureKind.CAPTURE_FAILED

        slot = store.state.slot(st.ExportTarget.PDF)
        assert slot.status == st.ExportStatus.IDLE
        assert slot.last_outcome == st.ExportOutcome.FAILED
        assert "renderer exploded" in slot.notice
        assert store.state.exporting is False

    def test_retry_after_failure(self, store):
        orchestrator = ExportOrchestrator(store, FailingPdfService())
        with pytest.raises(ExportError):
            asyncio.run(orchestrator.export_pdf())
        orchestrator.pdf_service = BlockingPdfService()
        orchestrator.pdf_service.release.set()
        assert asyncio.run(orchestrator.export_pdf()) is not None

    def test_upload_failure_keeps_document(self, store, sample_unit):
        uploader = FakeUploader(
            ExportError(ExportFailureKind.AUTH_FAILED, "consent dismissed")
        )
        orchestrator = ExportOrchestrator(store)
        with pytest.raises(ExportError) as exc:
            asyncio.run(orchestrator.export_gdoc(uploader))
        assert exc.value.kind == ExportFailureKind.AUTH_FAILED
        assert store.state.document is sample_unit
        assert store.state.slot(st.ExportTarget.GDOC).notice == "consent dismissed"

    def test_no_document(self):
        orchestrator = ExportOrchestrator(st.SessionStore())
        with pytest.raises(NoDocumentError):
            asyncio.run(orchestrator.export_docx())


# ── Google Doc target ─────────────────────────────────────────────────────────

class TestGdoc:
    def test_uploads_markup_rendition(self, store):
        uploader = FakeUploader()
        result = asyncio.run(ExportOrchestrator(store).export_gdoc(uploader))

        assert result.edit_url.endswith("/doc-1/edit")
        ((name, html),) = uploader.uploads
        assert name == "Situacio_Aprenentatge_unitategipte5"
        assert html.startswith("<!DOCTYPE html>")
        assert "page-break" not in html
        slot = store.state.slot(st.ExportTarget.GDOC)
        assert slot.last_outcome == st.ExportOutcome.SUCCEEDED
