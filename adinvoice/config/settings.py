from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    storage_backend: str = "postgres"
    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "adinvoice"
    db_username: str = "adinvoice"
    db_password: str = "secret"

    files_root: Path = Path("./var")
    temp_dir_name: str = "tmp"
    uploads_dir_name: str = "uploads"

    pdf_engine: str = "pdfplumber"

    batch_window_size: int = Field(default=15, ge=1)
    pause_poll_interval_seconds: float = Field(default=0.1, gt=0)
    max_batch_files: int = Field(default=200, ge=1)
    max_retained_runs: int = Field(default=100, ge=1)

    extraction_provider: str = "openai"

    extraction_openai_api_key: str = ""
    extraction_openai_model_name: str = "gpt-4o-mini"
    extraction_openai_timeout_seconds: int = 30
    extraction_openai_temperature: float = 0.1

    extraction_openai_compatible_base_url: str = ""
    extraction_openai_compatible_api_key: str = ""
    extraction_openai_compatible_model_name: str = ""
    extraction_openai_compatible_timeout_seconds: int = 30

    extraction_openrouter_api_key: str = ""
    extraction_openrouter_model_name: str = ""
    extraction_openrouter_timeout_seconds: int = 30

    extraction_groq_api_key: str = ""
    extraction_groq_model_name: str = ""
    extraction_groq_timeout_seconds: int = 30

    extraction_together_api_key: str = ""
    extraction_together_model_name: str = ""
    extraction_together_timeout_seconds: int = 30

    extraction_deepseek_api_key: str = ""
    extraction_deepseek_model_name: str = ""
    extraction_deepseek_timeout_seconds: int = 30

    extraction_ollama_api_key: str = "ollama"
    extraction_ollama_model_name: str = ""
    extraction_ollama_timeout_seconds: int = 60

    @property
    def temp_dir(self) -> Path:
        return self.files_root / self.temp_dir_name

    @property
    def uploads_dir(self) -> Path:
        return self.files_root / self.uploads_dir_name
