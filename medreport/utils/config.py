"""
Configuration management for medreport.
Handles capture/export tuning, latency thresholds, and environment settings.
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings


class Settings(PydanticBaseSettings):
    """Application settings with environment variable support."""

    debug: bool = Field(False, env="DEBUG")
    reload: bool = Field(False, env="RELOAD")
    host: str = Field("0.0.0.0", env="HOST")
    port: int = Field(8000, env="PORT")

    # Capture (document region -> raster)
    capture_backend: str = Field("weasyprint", env="CAPTURE_BACKEND")
    capture_scale: float = Field(2.0, env="CAPTURE_SCALE")
    capture_use_cors: bool = Field(True, env="CAPTURE_USE_CORS")
    capture_timeout_seconds: float = Field(10.0, env="CAPTURE_TIMEOUT_SECONDS")

    # Encode (raster -> PDF)
    # "fixed_page": A4, image scaled to page width
    # "fit_raster": page sized to the raster itself
    page_size_policy: str = Field("fixed_page", env="PAGE_SIZE_POLICY")

    # Export
    export_dir: str = Field("storage/exports", env="EXPORT_DIR")
    require_patient_id: bool = Field(True, env="REQUIRE_PATIENT_ID")

    # Watermark overlay
    watermark_enabled: bool = Field(True, env="WATERMARK_ENABLED")
    watermark_text: str = Field("SAMPLE", env="WATERMARK_TEXT")
    watermark_rows: int = Field(1, env="WATERMARK_ROWS")
    watermark_columns: int = Field(1, env="WATERMARK_COLUMNS")

    # Latency Thresholds (ms)
    capture_threshold: int = Field(5000, env="CAPTURE_THRESHOLD")
    encode_threshold: int = Field(1000, env="ENCODE_THRESHOLD")

    # Logging
    log_level: str = Field("INFO", env="LOG_LEVEL")
    enable_structured_logging: bool = Field(True, env="ENABLE_STRUCTURED_LOGGING")
    compliance_log_file: Optional[str] = Field(None, env="COMPLIANCE_LOG_FILE")

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()


class PageConfig:
    """Fixed page geometry shared by the preview and the PDF writer."""

    # A4 at 96 px per inch
    PREVIEW_WIDTH_PX = 794
    PREVIEW_HEIGHT_PX = 1123
    PREVIEW_PADDING_PX = 32
    CSS_PX_PER_PT = 96 / 72


class LatencyConfig:
    """Latency monitoring and alerting configuration."""

    # Critical thresholds (ms)
    CRITICAL_CAPTURE_LATENCY = 8000
    CRITICAL_ENCODE_LATENCY = 3000

    # Warning thresholds (ms)
    WARNING_CAPTURE_LATENCY = 3000
    WARNING_ENCODE_LATENCY = 1500
