"""
Configuration management.

Centralized environment variable management and validation.
"""

from typing import Literal, Optional
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from shared.errors import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,  # Allow case-insensitive env var matching
        extra="ignore"
    )

    # Environment
    environment: Literal["development", "staging", "production"] = "development"

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    # LOG_DIR: Directory for the rotating log file. Empty string disables file logging.
    log_dir: str = "logs"

    # Generation provider
    # GENERATION_PROVIDER: "veo" (Gemini API long-running operations) or "replicate"
    generation_provider: Literal["veo", "replicate"] = "veo"

    # API keys (only the one matching generation_provider is required)
    gemini_api_key: Optional[str] = None
    replicate_api_token: Optional[str] = None

    # Model selection
    veo_model: str = "veo-2.0-generate-001"
    replicate_model: str = "kwaivgi/kling-v2.1"

    # Polling
    # POLL_INTERVAL_SECONDS: Fixed delay between job status queries, no backoff.
    poll_interval_seconds: float = 10.0
    download_timeout_seconds: float = 120.0

    # Progress ticker
    progress_interval_seconds: float = 3.0

    # Compositing
    composite_height: int = 720
    composite_quality: int = 90

    @field_validator("replicate_api_token")
    @classmethod
    def validate_replicate_api_token(cls, v: Optional[str]) -> Optional[str]:
        """Validate Replicate API token format when provided."""
        if v is None or v == "":
            return None
        if not v.startswith("r8_"):
            raise ConfigError("REPLICATE_API_TOKEN must start with 'r8_'")
        if len(v) < 20:
            raise ConfigError("REPLICATE_API_TOKEN appears to be invalid")
        return v

    @field_validator("gemini_api_key")
    @classmethod
    def validate_gemini_api_key(cls, v: Optional[str]) -> Optional[str]:
        """Validate Gemini API key when provided."""
        if v is None or v == "":
            return None
        if len(v) < 20:
            raise ConfigError("GEMINI_API_KEY appears to be invalid")
        return v

    @field_validator("poll_interval_seconds", "progress_interval_seconds", "download_timeout_seconds")
    @classmethod
    def validate_positive_interval(cls, v: float) -> float:
        """Intervals and timeouts must be positive."""
        if v <= 0:
            raise ConfigError(f"Interval must be positive, got {v}")
        return v

    @field_validator("composite_height")
    @classmethod
    def validate_composite_height(cls, v: int) -> int:
        """Validate canonical composite height."""
        if v <= 0:
            raise ConfigError("COMPOSITE_HEIGHT must be a positive number of pixels")
        return v

    @field_validator("composite_quality")
    @classmethod
    def validate_composite_quality(cls, v: int) -> int:
        """Validate JPEG quality (Pillow recommends staying at or below 95)."""
        if not 1 <= v <= 95:
            raise ConfigError("COMPOSITE_QUALITY must be between 1 and 95")
        return v

    @property
    def active_credential(self) -> Optional[str]:
        """Credential for the selected generation provider."""
        if self.generation_provider == "replicate":
            return self.replicate_api_token
        return self.gemini_api_key


# Singleton instance
try:
    settings = Settings()
except Exception as e:
    # Re-raise as ConfigError for consistency
    if isinstance(e, ConfigError):
        raise
    raise ConfigError(f"Failed to load configuration: {str(e)}") from e
