"""Raster I/O for chromatile.

Key Components:
    - load_raster: Decode a file into an RGBA PIL image
    - read_size: Header-only size query (used by dry runs)
    - save_raster: Encode an image, wrapping failures in CodecError
    - require_exists: Up-front input existence check
"""

from chromatile.raster.io import load_raster, read_size, require_exists, save_raster

__all__ = [
    "load_raster",
    "read_size",
    "require_exists",
    "save_raster",
]
