from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    app_name: str = "Programador LOMLOE"
    debug: bool = False

    # LLM extraction
    llm_provider: str = "gemini"
    gemini_api_key: str = ""
    gemini_model: str = "gemini-3-flash-preview"
    openai_api_key: str = ""
    openai_model: str = "gpt-4o-mini"

    # Google Drive upload (service account JSON; falls back to ADC)
    google_application_credentials: str = ""
    drive_upload_url: str = (
        "https://www.googleapis.com/upload/drive/v3/files?uploadType=multipart"
    )
    docs_edit_url: str = "https://docs.google.com/document/d/{document_id}/edit"
    upload_timeout_seconds: float = 30.0

    # Exports
    export_filename_prefix: str = "Situacio_Aprenentatge"

    # Telemetry
    enable_telemetry_log: bool = True

    # CORS
    frontend_url: str = "http://localhost:5173"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


@lru_cache
def get_settings() -> Settings:
    return Settings()
