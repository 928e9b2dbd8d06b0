"""Geometry module for chromatile.

This package provides the coordinate vocabulary shared by the channel
registration and tile pyramid pipelines.

Key Components:
    - Primitives: Size, Scale, Offset, BoundingBox models
    - Parsers: parse_bbox / parse_size turning raw values into validated
      primitives, raising InvalidGeometryError on bad input

Example:
    from chromatile.geometry import BoundingBox, parse_bbox

    bbox = parse_bbox([0, 0, 40000, 30000], name="red bbox")
    print(bbox.extent)  # Size(width=40000, height=30000)
"""

from chromatile.geometry.primitives import (
    BoundingBox,
    Offset,
    Scale,
    Size,
    parse_bbox,
    parse_size,
)

__all__ = [
    "BoundingBox",
    "Offset",
    "Scale",
    "Size",
    "parse_bbox",
    "parse_size",
]
