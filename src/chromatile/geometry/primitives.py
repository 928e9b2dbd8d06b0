"""Geometry primitives for chromatile.

This module provides immutable Pydantic models shared by the registration
and tiling pipelines: pixel sizes and offsets, per-axis scale factors, and
bounding boxes in the reference (full WSI) coordinate space. All
coordinates follow the convention where (0, 0) is the top-left corner.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Self

from pydantic import BaseModel, Field, ValidationError, model_validator

from chromatile.exceptions import InvalidGeometryError


class Offset(BaseModel, frozen=True):
    """A pixel placement within a canvas.

    Attributes:
        x: Horizontal position (pixels from left edge).
        y: Vertical position (pixels from top edge).
    """

    x: int = Field(..., ge=0, description="X offset (pixels from left)")
    y: int = Field(..., ge=0, description="Y offset (pixels from top)")

    def to_tuple(self) -> tuple[int, int]:
        """Convert to (x, y) tuple."""
        return (self.x, self.y)

    @classmethod
    def from_tuple(cls, coord: tuple[int, int]) -> Self:
        """Create Offset from (x, y) tuple."""
        return cls(x=coord[0], y=coord[1])


class Size(BaseModel, frozen=True):
    """A 2D size representing width and height.

    Both dimensions must be strictly positive (> 0); every raster the
    pipelines allocate is described by one of these.

    Attributes:
        width: Horizontal extent in pixels.
        height: Vertical extent in pixels.
    """

    width: int = Field(..., gt=0, description="Width in pixels")
    height: int = Field(..., gt=0, description="Height in pixels")

    def to_tuple(self) -> tuple[int, int]:
        """Convert to (width, height) tuple."""
        return (self.width, self.height)

    @classmethod
    def from_tuple(cls, size: tuple[int, int]) -> Self:
        """Create Size from (width, height) tuple."""
        return cls(width=size[0], height=size[1])


class Scale(BaseModel, frozen=True):
    """Per-axis downscale factor: reference pixels per channel pixel.

    A factor of 1.0 means the channel is at reference resolution; a
    channel captured at lower resolution for the same footprint has a
    larger factor.

    Attributes:
        x: Horizontal factor (> 0).
        y: Vertical factor (> 0).
    """

    x: float = Field(..., gt=0, description="Reference pixels per pixel (x)")
    y: float = Field(..., gt=0, description="Reference pixels per pixel (y)")

    def to_tuple(self) -> tuple[float, float]:
        """Convert to (x, y) tuple."""
        return (self.x, self.y)


class BoundingBox(BaseModel, frozen=True):
    """A channel's footprint in the reference coordinate space.

    The box spans [min_x, max_x) x [min_y, max_y). Extents must be strictly
    positive on both axes, otherwise the derived scale would be zero.

    Attributes:
        min_x: Left edge (inclusive).
        min_y: Top edge (inclusive).
        max_x: Right edge (exclusive).
        max_y: Bottom edge (exclusive).
    """

    min_x: int = Field(..., ge=0)
    min_y: int = Field(..., ge=0)
    max_x: int = Field(..., ge=0)
    max_y: int = Field(..., ge=0)

    @model_validator(mode="after")
    def _validate_extent(self) -> Self:
        """Reject boxes whose max does not exceed min on either axis."""
        if self.max_x <= self.min_x or self.max_y <= self.min_y:
            raise ValueError(
                "BoundingBox extents must be positive "
                f"(got x: {self.min_x}..{self.max_x}, y: {self.min_y}..{self.max_y})"
            )
        return self

    @property
    def width(self) -> int:
        """Horizontal extent in reference pixels."""
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        """Vertical extent in reference pixels."""
        return self.max_y - self.min_y

    @property
    def extent(self) -> Size:
        """Return the extent as a Size."""
        return Size(width=self.width, height=self.height)

    @property
    def origin(self) -> Offset:
        """Return the top-left corner as an Offset."""
        return Offset(x=self.min_x, y=self.min_y)

    def to_tuple(self) -> tuple[int, int, int, int]:
        """Convert to (min_x, min_y, max_x, max_y) tuple."""
        return (self.min_x, self.min_y, self.max_x, self.max_y)

    @classmethod
    def from_tuple(cls, bbox: tuple[int, int, int, int]) -> Self:
        """Create BoundingBox from (min_x, min_y, max_x, max_y) tuple."""
        return cls(min_x=bbox[0], min_y=bbox[1], max_x=bbox[2], max_y=bbox[3])


def parse_bbox(values: Sequence[int], *, name: str = "bbox") -> BoundingBox:
    """Build a BoundingBox from raw CLI-style values.

    Args:
        values: Exactly four integers: min_x, min_y, max_x, max_y.
        name: Label used in the error message.

    Returns:
        The validated bounding box.

    Raises:
        InvalidGeometryError: On wrong cardinality or a degenerate box.
    """
    if len(values) != 4:
        raise InvalidGeometryError(f"{name} must have 4 values, got {len(values)}")
    try:
        return BoundingBox(
            min_x=values[0], min_y=values[1], max_x=values[2], max_y=values[3]
        )
    except ValidationError as e:
        raise InvalidGeometryError(f"Invalid {name} {tuple(values)}: {e}") from e


def parse_size(values: Sequence[int], *, name: str = "size") -> Size:
    """Build a Size from raw CLI-style values.

    Raises:
        InvalidGeometryError: On wrong cardinality or a non-positive dimension.
    """
    if len(values) != 2:
        raise InvalidGeometryError(f"{name} must have 2 values, got {len(values)}")
    try:
        return Size(width=values[0], height=values[1])
    except ValidationError as e:
        raise InvalidGeometryError(f"Invalid {name} {tuple(values)}: {e}") from e
