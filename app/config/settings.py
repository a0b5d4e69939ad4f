from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"
    files_root: Path = Path("/app/files")

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "docvalidator"
    db_username: str = "docvalidator"
    db_password: str = "secret"
    db_pool_min_size: int = 1
    db_pool_max_size: int = 10

    max_job_attempts: int = 3
    job_poll_interval_seconds: int = 5
    batch_timeout_seconds: float | None = None

    pdf_engine: str = "pdfplumber"
    text_layer_min_chars: int = 50

    ocr_render_scale: float = 1.5
    vision_render_scale: float = 2.0
    min_page_image_bytes: int = 30_000
    vision_jpeg_threshold_bytes: int = 300_000

    ocr_engine: str = "tesseract"
    ocr_language: str = "por"
    ocr_page_min_confidence: float = 50.0
    ocr_min_text_chars: int = 20
    ocr_min_confidence: float = 60.0

    vision_confidence_threshold: float = 80.0
    document_failure_policy: str = "isolate"

    extraction_provider: str = "openai"
    extraction_api_key: str = ""
    extraction_base_url: str | None = None
    extraction_model_name: str = "gpt-4o-mini"
    extraction_timeout_seconds: int = 60
    extraction_temperature: float = 0.0

    text_max_attempts: int = 1
    vision_max_attempts: int = 2
    comparison_max_attempts: int = 1
    retry_backoff_seconds: float = 0.0

    divergency_engine: str = "llm"
