"""Situació d'Aprenentatge API.

POST   /api/situacions/ingest             file -> plain text
POST   /api/situacions/extract            text -> document (held in the session)
GET    /api/situacions/session            held document + export slots
PUT    /api/situacions/session/document   replace the held document (edited copy)
DELETE /api/situacions/session/document   back to the editor, state reset
GET    /api/situacions/preview            paginated HTML (screen / print)
POST   /api/situacions/export/pdf         PDF attachment
POST   /api/situacions/export/docx        .docx attachment
GET    /api/situacions/export/html        HTML attachment (upload payload)
POST   /api/situacions/export/gdoc        upload to Google Docs -> edit URL

A busy export target answers 409 and starts nothing; other targets keep working.
"""

import asyncio
import logging
from typing import Optional

from fastapi import APIRouter, File, Header, HTTPException, Response, UploadFile
from fastapi.responses import HTMLResponse

from app.core.config import get_settings
from app.core.errors import (
    ExportError,
    ExportFailureKind,
    ExtractionError,
    ExtractionFailureKind,
    IngestionError,
)
from app.models.situacio import CurriculumUnit, ExtractionRequest, IngestionResponse
from app.services import session_state as st
from app.services.derivation import derive_view, export_filename
from app.services.drive_upload import DriveUploader, GoogleTokenProvider, StaticTokenProvider
from app.services.export_orchestrator import ExportArtifact, ExportOrchestrator, NoDocumentError
from app.services.extraction import get_extractor
from app.services.ingestion import read_as_text
from app.services.markup_document import render_markup_document
from app.services.paginated_view import build_pages, render_paginated_html
from app.services.pdf import get_pdf_service
from app.services.telemetry import instrument

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/situacions", tags=["situacions"])

settings = get_settings()
session_store = st.SessionStore()
orchestrator = ExportOrchestrator(
    session_store, get_pdf_service(), filename_prefix=settings.export_filename_prefix
)
extractor = get_extractor()

_EXTRACTION_STATUS = {
    ExtractionFailureKind.QUOTA_EXHAUSTED: 402,
    ExtractionFailureKind.KEY_MISSING: 401,
    ExtractionFailureKind.UNKNOWN: 502,
}
_EXPORT_STATUS = {
    ExportFailureKind.CAPTURE_FAILED: 500,
    ExportFailureKind.PACK_FAILED: 500,
    ExportFailureKind.AUTH_FAILED: 401,
    ExportFailureKind.UPLOAD_REJECTED: 502,
}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _held_document() -> CurriculumUnit:
    unit = session_store.state.document
    if unit is None:
        raise HTTPException(status_code=404, detail="No document generated yet")
    return unit


def _export_http_error(exc: ExportError) -> HTTPException:
    return HTTPException(
        status_code=_EXPORT_STATUS[exc.kind],
        detail={"kind": exc.kind.value, "message": exc.message},
    )


def _busy(target: st.ExportTarget) -> HTTPException:
    return HTTPException(
        status_code=409, detail=f"Export '{target.value}' already in progress"
    )


def _attachment(artifact: ExportArtifact) -> Response:
    return Response(
        content=artifact.content,
        media_type=artifact.media_type,
        headers={"Content-Disposition": f'attachment; filename="{artifact.filename}"'},
    )


def _uploader(authorization: Optional[str]) -> DriveUploader:
    if authorization and authorization.startswith("Bearer "):
        token_provider = StaticTokenProvider(authorization.split(" ", 1)[1].strip())
    else:
        token_provider = GoogleTokenProvider(settings.google_application_credentials)
    return DriveUploader(
        token_provider,
        upload_url=settings.drive_upload_url,
        edit_url_template=settings.docs_edit_url,
        timeout=settings.upload_timeout_seconds,
    )


# ---------------------------------------------------------------------------
# Ingestion + extraction
# ---------------------------------------------------------------------------

@router.post("/ingest", response_model=IngestionResponse)
@instrument(route="/api/situacions/ingest")
async def ingest_file(file: UploadFile = File(...)):
    """Read an uploaded PDF, Word or text file as plain text."""
    file_content = await file.read()
    filename = file.filename or "unknown"
    try:
        text = await asyncio.to_thread(read_as_text, filename, file_content)
    except IngestionError as e:
        logger.error("Ingestion failed for %s: %s", filename, e.message)
        raise HTTPException(status_code=400, detail=f"Error en llegir el fitxer: {e.message}")
    return IngestionResponse(filename=filename, text=text)


@router.post("/extract", response_model=CurriculumUnit, response_model_by_alias=True)
@instrument(route="/api/situacions/extract")
async def extract_situacio(request: ExtractionRequest):
    """Generate a Situació d'Aprenentatge from free text and hold it."""
    if not request.text.strip():
        raise HTTPException(status_code=422, detail="text must not be empty")
    try:
        unit = await asyncio.to_thread(extractor.extract, request.text)
    except ExtractionError as e:
        raise HTTPException(
            status_code=_EXTRACTION_STATUS[e.kind],
            detail={
                "kind": e.kind.value,
                "message": e.message,
                "needs_api_key": e.needs_api_key,
            },
        )
    session_store.apply(st.load_document, unit)
    return unit


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------

@router.get("/session")
async def get_session():
    return st.describe(session_store.state)


@router.put("/session/document", response_model=CurriculumUnit, response_model_by_alias=True)
async def replace_document(unit: CurriculumUnit):
    """Replace the held document as a whole with the user's edited copy."""
    session_store.apply(st.load_document, unit)
    return unit


@router.delete("/session/document")
async def discard_document():
    session_store.apply(st.discard_document)
    return st.describe(session_store.state)


# ---------------------------------------------------------------------------
# Preview + exports
# ---------------------------------------------------------------------------

@router.get("/preview", response_class=HTMLResponse)
async def preview():
    view = derive_view(_held_document())
    return HTMLResponse(
        render_paginated_html(
            build_pages(view), title=view.title, exporting=session_store.state.exporting
        )
    )


@router.post("/export/pdf")
@instrument(route="/api/situacions/export/pdf", target="pdf")
async def export_pdf():
    _held_document()
    try:
        artifact = await orchestrator.export_pdf()
    except ExportError as e:
        raise _export_http_error(e)
    except NoDocumentError:
        raise HTTPException(status_code=404, detail="No document generated yet")
    if artifact is None:
        raise _busy(st.ExportTarget.PDF)
    return _attachment(artifact)


@router.post("/export/docx")
@instrument(route="/api/situacions/export/docx", target="docx")
async def export_docx():
    _held_document()
    try:
        artifact = await orchestrator.export_docx()
    except ExportError as e:
        raise _export_http_error(e)
    except NoDocumentError:
        raise HTTPException(status_code=404, detail="No document generated yet")
    if artifact is None:
        raise _busy(st.ExportTarget.DOCX)
    return _attachment(artifact)


@router.get("/export/html")
async def export_html():
    view = derive_view(_held_document())
    filename = export_filename(view.title, ".html", settings.export_filename_prefix)
    return Response(
        content=render_markup_document(view).encode("utf-8"),
        media_type="text/html; charset=utf-8",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/export/gdoc")
@instrument(route="/api/situacions/export/gdoc", target="gdoc")
async def export_gdoc(authorization: Optional[str] = Header(None)):
    """Upload the document to Google Docs and return its edit URL."""
    _held_document()
    try:
        result = await orchestrator.export_gdoc(_uploader(authorization))
    except ExportError as e:
        raise _export_http_error(e)
    except NoDocumentError:
        raise HTTPException(status_code=404, detail="No document generated yet")
    if result is None:
        raise _busy(st.ExportTarget.GDOC)
    return {"document_id": result.document_id, "edit_url": result.edit_url}
