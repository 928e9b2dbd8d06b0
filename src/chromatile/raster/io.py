"""Raster load/save helpers wrapping Pillow.

All rasters move through the pipelines as RGBA ``PIL.Image.Image`` objects.
Low-level Pillow and OS errors are wrapped into chromatile exceptions with
the offending path attached.
"""

from __future__ import annotations

from pathlib import Path

from PIL import Image, UnidentifiedImageError

from chromatile.config import settings
from chromatile.exceptions import CodecError, InputNotFoundError
from chromatile.geometry import Size

Image.MAX_IMAGE_PIXELS = settings.MAX_IMAGE_PIXELS

_DECODE_ERRORS = (UnidentifiedImageError, Image.DecompressionBombError, OSError)


def require_exists(path: Path | str, *, label: str = "Input") -> Path:
    """Check that a declared input file exists.

    Args:
        path: Path to check.
        label: Human-readable name used in the error (e.g. "Red channel").

    Returns:
        The path as a Path.

    Raises:
        InputNotFoundError: If the path does not exist or is not a file.
    """
    path = Path(path)
    if not path.is_file():
        raise InputNotFoundError(f"{label} file does not exist", path)
    return path


def read_size(path: Path | str) -> Size:
    """Read raster dimensions from the file header without decoding pixels.

    Raises:
        InputNotFoundError: If the file does not exist.
        CodecError: If Pillow cannot identify the file.
    """
    path = require_exists(path)
    try:
        with Image.open(path) as image:
            return Size.from_tuple(image.size)
    except _DECODE_ERRORS as e:
        raise CodecError(f"Cannot read image header: {e}", path, operation="load") from e


def load_raster(path: Path | str) -> Image.Image:
    """Load a raster fully into memory as RGBA.

    Raises:
        InputNotFoundError: If the file does not exist.
        CodecError: If decoding fails.
    """
    path = require_exists(path)
    try:
        with Image.open(path) as image:
            image.load()
            return image.convert("RGBA")
    except _DECODE_ERRORS as e:
        raise CodecError(f"Cannot decode image: {e}", path, operation="load") from e


def save_raster(
    image: Image.Image,
    path: Path | str,
    image_format: str | None = None,
) -> Path:
    """Encode and write a raster.

    Args:
        image: Raster to write.
        path: Destination file.
        image_format: Pillow format name. Defaults to settings.IMAGE_FORMAT.

    Returns:
        The path written.

    Raises:
        CodecError: If encoding or writing fails.
    """
    path = Path(path)
    image_format = image_format or settings.IMAGE_FORMAT
    try:
        image.save(path, format=image_format)
    except (KeyError, ValueError, OSError) as e:
        raise CodecError(f"Cannot save image: {e}", path, operation="save") from e
    return path
