"""Upload of the HTML rendition to Google Drive as a native Google Doc.

Two steps: acquire a bearer token for the document-creation scopes, then one
multipart/related POST (JSON metadata part + HTML part) to the Drive upload
endpoint asking for conversion to the Google Docs format.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from typing import Protocol, Sequence

import requests

from app.core.errors import ExportError, ExportFailureKind

logger = logging.getLogger(__name__)

UPLOAD_SCOPES = (
    "https://www.googleapis.com/auth/drive.file",
    "https://www.googleapis.com/auth/documents",
)
GOOGLE_DOC_MIME_TYPE = "application/vnd.google-apps.document"
MULTIPART_BOUNDARY = "-------314159265358979323846"


class TokenProvider(Protocol):
    def acquire(self, scopes: Sequence[str]) -> str: ...


class StaticTokenProvider:
    """Bearer token the browser already obtained through its own consent flow."""

    def __init__(self, token: str):
        self._token = token

    def acquire(self, scopes: Sequence[str]) -> str:
        if not self._token:
            raise ExportError(ExportFailureKind.AUTH_FAILED, "Empty access token")
        return self._token


class GoogleTokenProvider:
    """Service-account file when configured, application-default credentials otherwise."""

    def __init__(self, credentials_path: str = ""):
        self._credentials_path = credentials_path

    def _credentials(self, scopes: Sequence[str]):
        from google.oauth2 import service_account
        import google.auth

        if self._credentials_path and os.path.exists(self._credentials_path):
            return service_account.Credentials.from_service_account_file(
                self._credentials_path, scopes=list(scopes)
            )
        creds, _ = google.auth.default(scopes=list(scopes))
        return creds

    def acquire(self, scopes: Sequence[str]) -> str:
        from google.auth.exceptions import GoogleAuthError
        from google.auth.transport.requests import Request

        try:
            creds = self._credentials(scopes)
            creds.refresh(Request())
        except (GoogleAuthError, OSError, ValueError) as exc:
            raise ExportError(
                ExportFailureKind.AUTH_FAILED, f"Could not acquire access token: {exc}"
            ) from exc
        if not creds.token:
            raise ExportError(ExportFailureKind.AUTH_FAILED, "Credentials returned no token")
        return creds.token


@dataclass(frozen=True)
class UploadResult:
    document_id: str
    edit_url: str


def build_multipart_body(name: str, html: str, boundary: str = MULTIPART_BOUNDARY) -> tuple[bytes, str]:
    """multipart/related body: metadata part first, HTML content second."""
    metadata = json.dumps({"name": name, "mimeType": GOOGLE_DOC_MIME_TYPE})
    body = (
        f"--{boundary}\r\n"
        f"Content-Type: application/json; charset=UTF-8\r\n\r\n"
        f"{metadata}\r\n"
        f"--{boundary}\r\n"
        f"Content-Type: text/html; charset=UTF-8\r\n\r\n"
        f"{html}\r\n"
        f"--{boundary}--"
    )
    return body.encode("utf-8"), f"multipart/related; boundary={boundary}"


class DriveUploader:
    def __init__(
        self,
        token_provider: TokenProvider,
        upload_url: str,
        edit_url_template: str,
        timeout: float = 30.0,
        http=None,
    ):
        self._token_provider = token_provider
        self._upload_url = upload_url
        self._edit_url_template = edit_url_template
        self._timeout = timeout
        self._http = http or requests

    def upload_html(self, name: str, html: str) -> UploadResult:
        """Create a Google Doc from HTML. Blocking; run via asyncio.to_thread."""
        token = self._token_provider.acquire(UPLOAD_SCOPES)
        body, content_type = build_multipart_body(name, html)

        try:
            response = self._http.post(
                self._upload_url,
                data=body,
                headers={
                    "Authorization": f"Bearer {token}",
                    "Content-Type": content_type,
                },
                timeout=self._timeout,
            )
        except requests.RequestException as exc:
            raise ExportError(
                ExportFailureKind.UPLOAD_REJECTED, f"Upload request failed: {exc}"
            ) from exc

        if response.status_code in (401, 403):
            raise ExportError(
                ExportFailureKind.AUTH_FAILED,
                f"Upload not authorised (HTTP {response.status_code})",
            )
        if response.status_code >= 400:
            raise ExportError(
                ExportFailureKind.UPLOAD_REJECTED,
                f"Upload rejected (HTTP {response.status_code}): {response.text[:300]}",
            )

        try:
            document_id = (response.json() or {}).get("id")
        except ValueError:
            document_id = None
        if not document_id:
            raise ExportError(ExportFailureKind.UPLOAD_REJECTED, "Upload response has no document id")

        logger.info("[DriveUploader] Created document %s (%s)", document_id, name)
        return UploadResult(
            document_id=document_id,
            edit_url=self._edit_url_template.format(document_id=document_id),
        )
