"""Shared pytest fixtures and configuration."""

from collections.abc import Callable, Iterator
from pathlib import Path

import numpy as np
import numpy.typing as npt
import pytest
from PIL import Image

from chromatile.config import Settings
from chromatile.utils.logging import clear_correlation_context, configure_logging

PngWriter = Callable[[str, npt.NDArray[np.uint8]], Path]


@pytest.fixture(autouse=True)
def reset_logging_context() -> Iterator[None]:
    """Reset correlation context between tests."""
    clear_correlation_context()
    yield
    clear_correlation_context()


@pytest.fixture
def test_settings() -> Settings:
    """Create a Settings instance with test-safe defaults."""
    return Settings(
        LOG_LEVEL="DEBUG",
        LOG_FORMAT="console",
        TILE_SIZE=16,
        TILE_WORKERS=2,
        _env_file=None,  # type: ignore[call-arg]
    )


@pytest.fixture
def configure_test_logging() -> Iterator[None]:
    """Configure logging for tests with console output."""
    configure_logging(level="DEBUG", log_format="console")
    yield


@pytest.fixture
def write_png(tmp_path: Path) -> PngWriter:
    """Write a numpy array as a PNG under tmp_path.

    2D uint8 arrays become grayscale ("L") images, HxWx4 arrays RGBA.
    """

    def _write(name: str, pixels: npt.NDArray[np.uint8]) -> Path:
        path = tmp_path / name
        Image.fromarray(np.ascontiguousarray(pixels, dtype=np.uint8)).save(path)
        return path

    return _write


@pytest.fixture
def rng() -> np.random.Generator:
    """Deterministic random generator for pixel data."""
    return np.random.default_rng(1234)
