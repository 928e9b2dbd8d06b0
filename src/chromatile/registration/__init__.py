"""Channel registration pipeline for chromatile.

This package aligns independently captured, independently downscaled
channel rasters of one WSI onto a shared canvas and merges them into a
single RGB raster.

Public API:
    - ScaleResolver / ChannelGeometry: per-channel scale and offset.
    - CanvasRegistrar / RegistrationPlan / ChannelPlacement: canvas size and
      channel placements at the minimum scale.
    - ChannelCompositor: resample, paste, transform and merge.
    - ChannelMode / bitmask / apply_mode: per-channel value transforms.
"""

from chromatile.registration.compositor import CHANNEL_BANDS, ChannelCompositor
from chromatile.registration.modes import ChannelMode, apply_mode, bitmask
from chromatile.registration.registrar import (
    CanvasRegistrar,
    ChannelPlacement,
    RegistrationPlan,
    scales_match,
)
from chromatile.registration.resolver import ChannelGeometry, ScaleResolver

__all__ = [
    "CHANNEL_BANDS",
    "CanvasRegistrar",
    "ChannelCompositor",
    "ChannelGeometry",
    "ChannelMode",
    "ChannelPlacement",
    "RegistrationPlan",
    "ScaleResolver",
    "apply_mode",
    "bitmask",
    "scales_match",
]
