"""
Configuration management for OCRS API Server.

Supports environment variables, .env files, and command-line arguments.
"""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

MIB = 1024 * 1024


class Settings(BaseSettings):
    """
    Application settings with environment variable support.

    All settings can be configured via:
    - Environment variables (prefix: OCRS_API_)
    - .env file
    - Command-line arguments (via argparse in __main__.py)
    """

    model_config = SettingsConfigDict(
        env_prefix="OCRS_API_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ===================
    # Model Configuration
    # ===================
    detection_model_url: str = Field(
        default="https://ocrs-models.s3-accelerate.amazonaws.com/text-detection.rten",
        description="URL of the text detection model"
    )
    recognition_model_url: str = Field(
        default="https://ocrs-models.s3-accelerate.amazonaws.com/text-recognition.rten",
        description="URL of the text recognition model"
    )
    model_download_timeout: Optional[float] = Field(
        default=None,
        gt=0,
        description="Timeout in seconds for each model download (unset waits indefinitely)"
    )

    # ============
    # Engine
    # ============
    engine_backend: str = Field(
        default="ocrs:OcrBackend",
        description="Import path of the OCR engine backend ('module:attribute')"
    )
    serialize_inference: bool = Field(
        default=False,
        description="Run inference calls one at a time for backends that are not thread-safe"
    )

    # ===============
    # Upload Limits
    # ===============
    upload_total_limit: int = Field(
        default=15 * MIB,
        ge=1,
        description="Maximum size in bytes of a multipart request body"
    )
    upload_field_limit: int = Field(
        default=15 * MIB,
        ge=1,
        description="Maximum size in bytes of the uploaded file field"
    )

    # ==============
    # Output
    # ==============
    min_line_length: int = Field(
        default=2,
        ge=0,
        description="Recognized lines with fewer characters are dropped"
    )

    # ====================
    # Server Configuration
    # ====================
    host: str = Field(
        default="0.0.0.0",
        description="Server host address"
    )
    port: int = Field(
        default=6622,
        ge=1,
        le=65535,
        description="Server port"
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get the global settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings():
    """Reset settings to default."""
    global _settings
    _settings = None
