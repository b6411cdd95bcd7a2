"""Extraction of a CurriculumUnit from free-text lesson notes.

The model does all the structuring: we send the prompt and the response
schema, then validate its JSON into the document model. Failures are
classified so the UI can tell "needs a paid API key" apart from anything
else.
"""
from __future__ import annotations

import json
import logging

from pydantic import ValidationError

from app.core.config import get_settings
from app.core.deps import get_llm_api_key, get_llm_client
from app.core.errors import ExtractionError, ExtractionFailureKind
from app.models.situacio import CurriculumUnit
from app.prompts.situacio_extraction import (
    SITUACIO_EXTRACTION_PROMPT,
    SITUACIO_RESPONSE_SCHEMA,
    SITUACIO_SYSTEM_PROMPT,
)

logger = logging.getLogger(__name__)

_QUOTA_MARKERS = ("resource_exhausted", "quota", "rate limit", "too many requests")
_KEY_MARKERS = (
    "api key not valid",
    "api_key_invalid",
    "invalid api key",
    "incorrect api key",
    "permission_denied",
    "requested entity was not found",
    "unauthenticated",
)


def clean_json_response(content: str) -> str:
    """Strip markdown fences from model output."""
    content = content.strip()
    if content.startswith("```json"):
        content = content[7:]
    if content.startswith("```"):
        content = content[3:]
    if content.endswith("```"):
        content = content[:-3]
    return content.strip()


def _status_code(exc: Exception) -> int | None:
    # google-genai APIError has .code, openai APIStatusError has .status_code
    for attr in ("status_code", "code"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    return None


def classify_extraction_error(exc: Exception) -> ExtractionFailureKind:
    status = _status_code(exc)
    message = str(exc).lower()
    if status == 429 or any(marker in message for marker in _QUOTA_MARKERS):
        return ExtractionFailureKind.QUOTA_EXHAUSTED
    if status in (401, 403) or any(marker in message for marker in _KEY_MARKERS):
        return ExtractionFailureKind.KEY_MISSING
    return ExtractionFailureKind.UNKNOWN


class SituacioExtractor:
    def __init__(self, client=None, settings=None):
        self.settings = settings or get_settings()
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = get_llm_client(self.settings)
        return self._client

    def _model_name(self) -> str:
        if self.settings.llm_provider == "openai":
            return self.settings.openai_model
        return self.settings.gemini_model

    def extract(self, raw_text: str) -> CurriculumUnit:
        """Turn raw notes into a validated CurriculumUnit.

        Raises:
            ExtractionError: classified as quota, missing key or unknown.
        """
        if not raw_text or not raw_text.strip():
            raise ExtractionError(ExtractionFailureKind.UNKNOWN, "No text to analyse")
        if self._client is None and not get_llm_api_key(self.settings):
            raise ExtractionError(
                ExtractionFailureKind.KEY_MISSING,
                f"No API key configured for provider '{self.settings.llm_provider}'",
            )

        try:
            response = self.client.chat.completions.create(
                model=self._model_name(),
                messages=[
                    {"role": "system", "content": SITUACIO_SYSTEM_PROMPT},
                    {"role": "user", "content": SITUACIO_EXTRACTION_PROMPT.format(text=raw_text)},
                ],
                temperature=0.4,
                max_tokens=8192,
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "situacio_aprenentatge",
                        "schema": SITUACIO_RESPONSE_SCHEMA,
                    },
                },
            )
        except Exception as exc:
            kind = classify_extraction_error(exc)
            logger.error("Extraction call failed (%s): %s", kind.value, exc)
            raise ExtractionError(kind, str(exc)) from exc

        content = clean_json_response(response.choices[0].message.content or "")
        try:
            data = json.loads(content)
            unit = CurriculumUnit.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as exc:
            logger.error("Extraction returned an invalid document: %s", exc)
            raise ExtractionError(
                ExtractionFailureKind.UNKNOWN, f"Invalid response from the model: {exc}"
            ) from exc

        logger.info(
            "Extracted '%s' with %d competencies, %d objectives",
            unit.identification.title,
            len(unit.curricular_specification.specific_competencies),
            len(unit.curricular_specification.objectives),
        )
        return unit


def get_extractor() -> SituacioExtractor:
    return SituacioExtractor()
