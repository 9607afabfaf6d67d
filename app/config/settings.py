from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "petitions"
    db_username: str = "petitions"
    db_password: str = "secret"

    max_job_attempts: int = 3
    job_poll_interval_seconds: int = 5

    files_root: str = "/app/files"
    crop_config_path: str = "config/crop.json"
    pdf_engine: str = "pymupdf"
    render_scale: float = 2.0
    max_pages: int | None = None
    batch_size: int = 10

    credential_encryption_key: str = ""

    run_matching_after_ocr: bool = False
    matching_procedure: str = "insert_top_matches"

    openai_model_name: str = "gpt-4o"
    openai_base_url: str | None = None
    openai_max_output_tokens: int = 1000
    openai_timeout_seconds: int = 60
    openai_max_attempts: int = 1
    openai_backoff_seconds: float = 5.0
    openai_request_interval_seconds: float = 0.0

    gemini_model_name: str = "gemini-1.5-flash"
    gemini_base_url: str = "https://generativelanguage.googleapis.com/v1beta"
    gemini_max_output_tokens: int = 1000
    gemini_timeout_seconds: int = 60
    gemini_max_attempts: int = 3
    gemini_backoff_seconds: float = 5.0
    gemini_request_interval_seconds: float = 0.0

    mistral_model_name: str = "mistral-large-latest"
    mistral_base_url: str = "https://api.mistral.ai/v1"
    mistral_max_output_tokens: int = 1000
    mistral_timeout_seconds: int = 60
    mistral_max_attempts: int = 1
    mistral_backoff_seconds: float = 5.0
    mistral_request_interval_seconds: float = 0.0
