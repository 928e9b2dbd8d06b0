"""Channel compositing onto the registered canvas.

Each channel is resampled (when the plan says so), pasted onto its own
transparent canvas at its target offset, reduced to the colour band it
feeds, and transformed by its mode. The three bands are then stacked into
one opaque RGBA raster.

Resampling uses nearest neighbour: channels are typically segmentation
label maps, and any smoothing filter would invent intermediate labels
along region boundaries.
"""

from __future__ import annotations

from collections.abc import Mapping

import numpy as np
import numpy.typing as npt
from PIL import Image

from chromatile.exceptions import InvalidGeometryError
from chromatile.geometry import Size
from chromatile.registration.modes import ChannelMode, apply_mode
from chromatile.registration.registrar import ChannelPlacement, RegistrationPlan
from chromatile.utils.logging import correlation_scope, get_logger

logger = get_logger(__name__)

# Output band index fed by each channel name
CHANNEL_BANDS: dict[str, int] = {"red": 0, "green": 1, "blue": 2}

_TRANSPARENT_BLACK = (0, 0, 0, 0)
_OPAQUE = 255


def fit_channel(
    image: Image.Image,
    placement: ChannelPlacement,
    canvas_size: Size,
) -> Image.Image:
    """Place one channel raster on a transparent canvas.

    Args:
        image: The channel as loaded (RGBA).
        placement: Target size and offset from the registration plan.
        canvas_size: Size of the shared canvas.

    Returns:
        An RGBA image of canvas_size. Pixels outside the placed rectangle are
        transparent black; parts of the channel beyond the canvas are clipped.
    """
    if placement.resample:
        image = image.resize(
            placement.target_size.to_tuple(),
            resample=Image.Resampling.NEAREST,
        )
    canvas = Image.new("RGBA", canvas_size.to_tuple(), _TRANSPARENT_BLACK)
    # No mask: the channel overwrites the destination, alpha included
    canvas.paste(image.convert("RGBA"), placement.target_offset.to_tuple())
    return canvas


def collapse_band(
    canvas: Image.Image,
    band: int,
    mode: ChannelMode,
    channel: str | None = None,
) -> npt.NDArray[np.uint8]:
    """Extract one colour band from a fitted canvas and transform it."""
    values = np.asarray(canvas.convert("RGBA"), dtype=np.uint8)[:, :, band]
    return apply_mode(values, mode, channel)


def merge_bands(
    bands: Mapping[int, npt.NDArray[np.uint8]],
    canvas_size: Size,
) -> Image.Image:
    """Stack transformed bands into one opaque RGBA image.

    Bands absent from the mapping read as zero, so an unregistered band
    renders black. Alpha is always 255.
    """
    height, width = canvas_size.height, canvas_size.width
    merged = np.zeros((height, width, 4), dtype=np.uint8)
    merged[:, :, 3] = _OPAQUE
    for index, values in bands.items():
        if values.shape != (height, width):
            raise InvalidGeometryError(
                f"Band {index} has shape {values.shape}, canvas is {(height, width)}"
            )
        merged[:, :, index] = values
    return Image.fromarray(merged)


class ChannelCompositor:
    """Composites registered channels into one RGBA raster.

    Example:
        >>> compositor = ChannelCompositor()
        >>> rgba = compositor.composite(
        ...     {"red": red, "green": green, "blue": blue},
        ...     plan,
        ...     {"red": ChannelMode.bitmask, "green": ChannelMode.skip,
        ...      "blue": ChannelMode.pass_through},
        ... )
    """

    def composite(
        self,
        channels: Mapping[str, Image.Image],
        plan: RegistrationPlan,
        modes: Mapping[str, ChannelMode],
    ) -> Image.Image:
        """Composite loaded channels according to a registration plan.

        Args:
            channels: Loaded rasters keyed by channel name ("red", "green",
                "blue").
            plan: Registration plan covering every channel.
            modes: Value transform per channel; missing entries default to
                pass-through.

        Returns:
            An RGBA image of plan.canvas_size with alpha 255 everywhere.

        Raises:
            InvalidGeometryError: If a channel name has no output band or no
                placement in the plan.
            BitmaskRangeError: If a bitmask channel holds a label above 8.
        """
        bands: dict[int, npt.NDArray[np.uint8]] = {}
        for name, image in channels.items():
            if name not in CHANNEL_BANDS:
                raise InvalidGeometryError(
                    f"Unknown channel '{name}'; expected one of {list(CHANNEL_BANDS)}"
                )
            placement = plan.placements.get(name)
            if placement is None:
                raise InvalidGeometryError(f"Channel '{name}' is not in the plan")

            mode = modes.get(name, ChannelMode.pass_through)
            with correlation_scope(channel=name):
                fitted = fit_channel(image, placement, plan.canvas_size)
                bands[CHANNEL_BANDS[name]] = collapse_band(
                    fitted, CHANNEL_BANDS[name], mode, name
                )
                logger.debug(
                    "Channel fitted",
                    mode=mode.value,
                    resampled=placement.resample,
                    target_size=placement.target_size.to_tuple(),
                    target_offset=placement.target_offset.to_tuple(),
                )

        return merge_bands(bands, plan.canvas_size)
