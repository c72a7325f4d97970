"""Environment-based configuration for Pictor."""

from __future__ import annotations

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from pictor.image.color import parse_hex_color


class Settings(BaseSettings):
    """Application settings loaded from PICTOR_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="PICTOR_",
        case_sensitive=False,
    )

    # Prefix joined to descriptor paths
    document_root: str = ""

    # Pixel engine backend
    engine: Literal["pillow", "array"] = "pillow"

    # Matting colour in hex (None = keep transparency)
    default_background: str | None = None

    # Input limits
    max_image_pixels: int = Field(default=16_777_216, ge=1)

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @field_validator("default_background")
    @classmethod
    def _check_background(cls, value: str | None) -> str | None:
        if value:
            parse_hex_color(value)
        return value or None


def get_settings() -> Settings:
    """Create and return application settings."""
    return Settings()
