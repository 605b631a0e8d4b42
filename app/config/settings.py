from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    app_env: str = "dev"
    log_level: str = "INFO"

    segment_target_height: int = Field(default=4000, gt=0)
    segment_scan_range: int = Field(default=400, gt=0)
    segment_scan_stride: int = Field(default=5, gt=0)
    segment_sample_points: int = Field(default=20, gt=0)
    segment_blank_threshold: float = 10.0
    # Pillow decompression-bomb limit applied by decode_image; 0 disables it.
    segment_max_image_pixels: int = Field(default=300_000_000, ge=0)
    chunk_jpeg_quality: int = Field(default=85, ge=1, le=95)

    ocr_engine: str = "tesseract"
    ocr_languages: str = "chi_sim+eng"
    ocr_max_workers: int = Field(default=4, gt=0)
    tesseract_cmd: str = ""
    tesseract_timeout_seconds: int = Field(default=0, ge=0)

    storage_backend: str = "json"
    storage_path: str = "expense_records.json"

    db_host: str = "localhost"
    db_port: int = 5432
    db_database: str = "expenses"
    db_username: str = "expenses"
    db_password: str = "secret"
