import logging
import os
from openai import OpenAI
from app.core.config import get_settings

_prompt_logger = logging.getLogger("programador.llm_prompts")


# ── Gemini adapter (OpenAI-shaped) ───────────────────────────────────────────
# extraction.py only knows client.chat.completions.create(...); the adapter
# answers that call through google-genai so either provider can back it.

class _GeminiMessage:
    def __init__(self, content: str):
        self.content = content


class _GeminiChoice:
    def __init__(self, content: str):
        self.message = _GeminiMessage(content)


class _GeminiResponse:
    def __init__(self, text: str):
        self.choices = [_GeminiChoice(text)]


def _split_messages(messages) -> tuple[str | None, str]:
    """OpenAI chat messages -> (system instruction, user contents)."""
    system, user = [], []
    for message in messages or []:
        (system if message.get("role") == "system" else user).append(message["content"])
    return "\n\n".join(system) or None, "\n\n".join(user)


def _response_schema(response_format):
    # {"type": "json_schema", "json_schema": {"name": ..., "schema": {...}}}
    if not response_format or response_format.get("type") != "json_schema":
        return None
    return response_format["json_schema"]["schema"]


def _log_prompt(model: str, system: str | None, user: str, temperature, max_tokens) -> None:
    if os.environ.get("DEBUG_LLM_PROMPTS", "").lower() not in ("1", "true"):
        return
    _prompt_logger.warning(
        "LLM prompt model=%s temp=%s max_tokens=%s\n── SYSTEM ──\n%s\n── USER ──\n%s",
        model, temperature, max_tokens, system or "(none)", user,
    )


class _GeminiCompletions:
    def __init__(self, api_key: str, model: str):
        self._api_key = api_key
        self._model = model

    def create(self, model=None, messages=None, temperature=0.7, max_tokens=None,
               response_format=None, **kwargs):
        from google import genai
        from google.genai import types

        system_instruction, user_prompt = _split_messages(messages)
        model_name = model or self._model
        max_tokens = max_tokens or 8192
        _log_prompt(model_name, system_instruction, user_prompt, temperature, max_tokens)

        response = genai.Client(api_key=self._api_key).models.generate_content(
            model=model_name,
            contents=user_prompt,
            config=types.GenerateContentConfig(
                system_instruction=system_instruction,
                temperature=temperature,
                max_output_tokens=max_tokens,
                response_mime_type="application/json",
                response_schema=_response_schema(response_format),
            ),
        )
        return _GeminiResponse(response.text or "")


class _GeminiChat:
    def __init__(self, api_key: str, model: str):
        self.completions = _GeminiCompletions(api_key, model)


class GeminiClientAdapter:
    def __init__(self, api_key: str, model: str = "gemini-3-flash-preview"):
        self.chat = _GeminiChat(api_key, model)


def get_llm_client(settings=None):
    """Return the active LLM client based on llm_provider setting."""
    if settings is None:
        settings = get_settings()
    if settings.llm_provider == "openai":
        return OpenAI(api_key=settings.openai_api_key)
    return GeminiClientAdapter(api_key=settings.gemini_api_key, model=settings.gemini_model)


def get_llm_api_key(settings=None) -> str:
    """Key for the active provider; empty when not configured."""
    if settings is None:
        settings = get_settings()
    if settings.llm_provider == "openai":
        return settings.openai_api_key
    return settings.gemini_api_key
