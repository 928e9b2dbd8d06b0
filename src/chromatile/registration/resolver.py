"""Per-channel scale resolution.

Each channel raster covers a bounding box of the reference WSI. Dividing
the bbox extent by the raster's pixel size gives the channel's downscale
factor: how many reference pixels one channel pixel spans. The minimum
factor across channels (x and y independently) identifies the finest
resolution available, which becomes the common frame for registration.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping

from pydantic import BaseModel

from chromatile.exceptions import InvalidGeometryError
from chromatile.geometry import BoundingBox, Offset, Scale, Size, parse_size


def round_nearest(value: float) -> int:
    """Round a non-negative value to the nearest integer, halves away from zero."""
    return math.floor(value + 0.5)


def compute_scale(raw_size: Size, bbox: BoundingBox) -> Scale:
    """Return reference pixels per raw pixel on each axis.

    Raises:
        InvalidGeometryError: If the result is not strictly positive.
    """
    scale_x = bbox.width / raw_size.width
    scale_y = bbox.height / raw_size.height
    if scale_x <= 0 or scale_y <= 0:
        raise InvalidGeometryError(
            f"Degenerate scale ({scale_x}, {scale_y}) for bbox {bbox.to_tuple()}"
        )
    return Scale(x=scale_x, y=scale_y)


class ChannelGeometry(BaseModel, frozen=True):
    """Geometry of one loaded channel.

    Attributes:
        name: Channel label ("red", "green", "blue", ...).
        bbox: Footprint of the raster in reference coordinates.
        raw_size: Pixel size of the raster as loaded.
    """

    name: str
    bbox: BoundingBox
    raw_size: Size

    @classmethod
    def from_dimensions(
        cls, name: str, bbox: BoundingBox, width: int, height: int
    ) -> ChannelGeometry:
        """Build geometry from raw raster dimensions.

        Raises:
            InvalidGeometryError: If either dimension is zero.
        """
        raw_size = parse_size([width, height], name=f"{name} raster size")
        return cls(name=name, bbox=bbox, raw_size=raw_size)

    @property
    def scale(self) -> Scale:
        """Downscale factor of this channel relative to the reference."""
        return compute_scale(self.raw_size, self.bbox)

    @property
    def offset(self) -> Offset:
        """Position of the bbox origin in this channel's own pixel units."""
        scale = self.scale
        return Offset(
            x=round_nearest(self.bbox.min_x / scale.x),
            y=round_nearest(self.bbox.min_y / scale.y),
        )


class ScaleResolver:
    """Computes channel scales and the minimum scale across channels.

    The resolver is stateless and operates purely on the inputs provided
    to each method.
    """

    def resolve(
        self, channels: Mapping[str, tuple[Size, BoundingBox]]
    ) -> dict[str, Scale]:
        """Compute the scale of every channel.

        Args:
            channels: Mapping of channel name to (raw_size, bbox).

        Returns:
            Mapping of channel name to its Scale.
        """
        return {
            name: compute_scale(raw_size, bbox)
            for name, (raw_size, bbox) in channels.items()
        }

    def minimum(self, scales: Iterable[Scale]) -> Scale:
        """Component-wise minimum of the given scales.

        The x and y minima may come from different channels.

        Raises:
            InvalidGeometryError: If no scales are given.
        """
        scales = list(scales)
        if not scales:
            raise InvalidGeometryError("Cannot take the minimum of zero scales")
        return Scale(
            x=min(scale.x for scale in scales),
            y=min(scale.y for scale in scales),
        )
