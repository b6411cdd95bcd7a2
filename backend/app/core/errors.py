"""Failure taxonomy for extraction, ingestion and export.

Services raise these; routers translate them into HTTP responses.
"""
from enum import Enum


class ExtractionFailureKind(str, Enum):
    QUOTA_EXHAUSTED = "quota_exhausted"
    KEY_MISSING = "key_missing"
    UNKNOWN = "unknown"


class ExportFailureKind(str, Enum):
    CAPTURE_FAILED = "capture_failed"
    PACK_FAILED = "pack_failed"
    AUTH_FAILED = "auth_failed"
    UPLOAD_REJECTED = "upload_rejected"


class ExtractionError(RuntimeError):
    """Raised when the model call cannot produce a valid document."""
    def __init__(self, kind: ExtractionFailureKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message

    @property
    def needs_api_key(self) -> bool:
        """Quota and key failures are both fixed by supplying a paid key."""
        return self.kind in (
            ExtractionFailureKind.QUOTA_EXHAUSTED,
            ExtractionFailureKind.KEY_MISSING,
        )


class IngestionError(RuntimeError):
    """Raised when an uploaded file cannot be read as text."""
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ExportError(RuntimeError):
    """Raised when an export target cannot be finalised."""
    def __init__(self, kind: ExportFailureKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message
