"""Canvas registration: where each channel lands on the common canvas.

Given the minimum scale across channels, every channel's true footprint
(its bbox) is re-expressed in units of that scale. Channels already at the
minimum scale keep their raw size; the rest get a target size to be
resampled to. The canvas hosts the full reference WSI at the minimum
scale, so every placement is an offset within one coordinate frame.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from chromatile.exceptions import InvalidGeometryError
from chromatile.geometry import Offset, Scale, Size
from chromatile.registration.resolver import (
    ChannelGeometry,
    ScaleResolver,
    round_nearest,
)
from chromatile.utils.logging import get_logger

logger = get_logger(__name__)

# Scales come from float division; two channels with the same footprint and
# pixel size must still compare equal.
_SCALE_REL_TOL = 1e-9


@dataclass(frozen=True)
class ChannelPlacement:
    """Target rectangle of one channel on the canvas.

    Attributes:
        target_size: Pixel size the channel must have on the canvas.
        target_offset: Top-left position of the channel on the canvas.
        resample: False when the raster is already at the canvas scale.
    """

    target_size: Size
    target_offset: Offset
    resample: bool


@dataclass(frozen=True)
class RegistrationPlan:
    """Complete registration for one invocation.

    Attributes:
        minimum_scale: Component-wise minimum scale across channels.
        canvas_size: Size of the reference WSI at minimum_scale.
        placements: Placement per channel name.
    """

    minimum_scale: Scale
    canvas_size: Size
    placements: dict[str, ChannelPlacement] = field(default_factory=dict)

    def summary(self) -> dict[str, object]:
        """Plain-data view of the plan for logging and JSON output."""
        return {
            "minimum_scale": self.minimum_scale.to_tuple(),
            "canvas_size": self.canvas_size.to_tuple(),
            "placements": {
                name: {
                    "target_size": p.target_size.to_tuple(),
                    "target_offset": p.target_offset.to_tuple(),
                    "resample": p.resample,
                }
                for name, p in self.placements.items()
            },
        }


def scales_match(a: Scale, b: Scale) -> bool:
    """True when two scales are equal on both axes (up to float noise)."""
    return math.isclose(a.x, b.x, rel_tol=_SCALE_REL_TOL) and math.isclose(
        a.y, b.y, rel_tol=_SCALE_REL_TOL
    )


class CanvasRegistrar:
    """Computes channel placements and the canvas size."""

    __slots__ = ("_resolver",)

    def __init__(self, resolver: ScaleResolver | None = None) -> None:
        self._resolver = resolver or ScaleResolver()

    def register(
        self, geometry: ChannelGeometry, minimum_scale: Scale
    ) -> ChannelPlacement:
        """Place one channel on the canvas at minimum_scale.

        Args:
            geometry: The channel's bbox and raw size.
            minimum_scale: Common scale chosen for the canvas.

        Returns:
            The channel's target size and offset.

        Raises:
            InvalidGeometryError: If the target size has a zero component.
        """
        if scales_match(geometry.scale, minimum_scale):
            return ChannelPlacement(
                target_size=geometry.raw_size,
                target_offset=geometry.offset,
                resample=False,
            )

        bbox = geometry.bbox
        width = round_nearest(bbox.width / minimum_scale.x)
        height = round_nearest(bbox.height / minimum_scale.y)
        if width == 0 or height == 0:
            raise InvalidGeometryError(
                f"Channel '{geometry.name}' would be resampled to {width}x{height}"
            )

        return ChannelPlacement(
            target_size=Size(width=width, height=height),
            target_offset=Offset(
                x=round_nearest(bbox.min_x / minimum_scale.x),
                y=round_nearest(bbox.min_y / minimum_scale.y),
            ),
            resample=True,
        )

    def canvas_size(self, reference_size: Size, minimum_scale: Scale) -> Size:
        """Size of the full reference WSI at minimum_scale (truncated).

        Raises:
            InvalidGeometryError: If the canvas would have zero area.
        """
        width = int(reference_size.width / minimum_scale.x)
        height = int(reference_size.height / minimum_scale.y)
        if width == 0 or height == 0:
            raise InvalidGeometryError(
                f"Canvas for reference {reference_size.to_tuple()} at scale "
                f"{minimum_scale.to_tuple()} has zero area"
            )
        return Size(width=width, height=height)

    def plan(
        self, geometries: Sequence[ChannelGeometry], reference_size: Size
    ) -> RegistrationPlan:
        """Register a full channel set.

        Args:
            geometries: One entry per channel; names must be unique.
            reference_size: Pixel size of the full reference WSI.

        Returns:
            The RegistrationPlan for the set.

        Raises:
            InvalidGeometryError: On duplicate names, an empty set, or any
                zero-sized target or canvas.
        """
        names = [g.name for g in geometries]
        if len(set(names)) != len(names):
            raise InvalidGeometryError(f"Duplicate channel names: {names}")

        scales = self._resolver.resolve(
            {g.name: (g.raw_size, g.bbox) for g in geometries}
        )
        minimum_scale = self._resolver.minimum(scales.values())
        canvas_size = self.canvas_size(reference_size, minimum_scale)

        placements = {g.name: self.register(g, minimum_scale) for g in geometries}

        logger.debug(
            "Channels registered",
            minimum_scale=minimum_scale.to_tuple(),
            canvas_size=canvas_size.to_tuple(),
            resampled=[name for name, p in placements.items() if p.resample],
        )
        return RegistrationPlan(
            minimum_scale=minimum_scale,
            canvas_size=canvas_size,
            placements=placements,
        )
