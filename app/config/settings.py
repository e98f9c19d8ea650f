from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    db_host: str = "host.docker.internal"
    db_port: int = 5432
    db_database: str = "upload_gateway"
    db_username: str = "upload_gateway"
    db_password: str = "secret"
    db_pool_timeout_seconds: float = Field(default=5.0, gt=0)

    gateway_max_workers: int = Field(default=8, ge=1)

    max_upload_bytes: int = Field(default=50 * 1024 * 1024, gt=0)
    allowed_mime_types: list[str] = ["application/pdf", "text/plain"]

    pdf_engine: str = "pdfplumber"
    pdf_max_pages: int | None = Field(default=500, ge=1)

    shingle_size: int = Field(default=3, ge=1)
    byte_shingle_size: int = Field(default=64, ge=4)
    near_duplicate_threshold: int = Field(default=8, ge=0, le=63)
    near_duplicate_bands: int | None = Field(default=None, ge=1, le=64)
    near_duplicate_auto_reject: bool = False

    index_store: str = "none"
    index_checkpoint_every: int = Field(default=100, ge=1)

    antivirus_provider: str = "http"
    antivirus_url: str = "http://localhost:3310/scan"
    antivirus_timeout_seconds: float = Field(default=30.0, gt=0)

    structural_inspector: str = "pymupdf"
    structural_timeout_seconds: float = Field(default=15.0, gt=0)

    quality_provider: str = "openai"
    quality_timeout_seconds: float = Field(default=30.0, gt=0)
    quality_min_score: float = Field(default=0.5, ge=0.0, le=1.0)
    quality_auto_reject: bool = False
    quality_max_chars: int = Field(default=12000, ge=1)

    quality_openai_api_key: str = ""
    quality_openai_model_name: str = ""
    quality_openai_temperature: float = 0.0
    quality_openai_compatible_base_url: str = ""
    quality_openai_compatible_api_key: str = ""
    quality_openai_compatible_model_name: str = ""
    quality_openrouter_api_key: str = ""
    quality_openrouter_model_name: str = ""
    quality_ollama_api_key: str = ""
    quality_ollama_model_name: str = ""

    metadata_allowed_categories: list[str] = [
        "research",
        "education",
        "legal",
        "finance",
        "technology",
        "health",
        "media",
        "other",
    ]
    metadata_title_max_length: int = Field(default=200, ge=1)
    metadata_author_max_length: int = Field(default=120, ge=1)
    metadata_description_min_length: int = Field(default=0, ge=0)
    metadata_description_max_length: int = Field(default=5000, ge=1)
