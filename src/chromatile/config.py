"""chromatile configuration using pydantic-settings.

All configuration is strongly typed and supports environment variables
and .env files.
"""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: Literal["console", "json"] = "console"

    # Tiling
    TILE_SIZE: int = Field(default=256, gt=0)  # DZI tile edge in pixels
    TILE_PREFIX: str = "dzi"  # File-name stem for tiles
    TILE_OUTPUT_FOLDER: str = "output"
    TILE_WORKERS: int = Field(default=4, ge=1)  # Threads per pyramid level

    # Raster output
    IMAGE_FORMAT: str = "PNG"  # Pillow format name for every written raster
    COMPOSITE_OUTPUT: str = "./output.png"
    # Pillow decompression-bomb limit in pixels (None = unlimited)
    MAX_IMAGE_PIXELS: int | None = Field(default=None, gt=0)


# Singleton instance for import convenience
settings = Settings()
