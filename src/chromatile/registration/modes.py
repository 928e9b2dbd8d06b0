"""Per-channel value transforms.

Each channel is collapsed into one colour band through a pure
``uint8 -> uint8`` function selected by its mode. The functions are
materialised as 256-entry lookup tables so a whole band is transformed with
one numpy indexing operation.
"""

from __future__ import annotations

from enum import Enum

import numpy as np
import numpy.typing as npt

from chromatile.exceptions import BitmaskRangeError

# Label n maps to bit 2^(n-1); 2^7 is the last bit in a byte.
MAX_BITMASK_LABEL = 8


class ChannelMode(str, Enum):
    """How a channel's values are written to its output band."""

    bitmask = "bitmask"  # Label index -> single-bit flag
    pass_through = "pass-through"  # Identity (heatmaps, intensities)
    skip = "skip"  # Band forced to zero

    @classmethod
    def _missing_(cls, value: object) -> ChannelMode | None:
        # "heatmap" is the historical name of the identity transform
        if value == "heatmap":
            return cls.pass_through
        return None


def bitmask(value: int) -> int:
    """Map a label index to its bit flag: 0->0, 1->1, 2->2, n>=3 -> 2^(n-1).

    Raises:
        BitmaskRangeError: If value is outside 0..8.
    """
    if value < 0 or value > MAX_BITMASK_LABEL:
        raise BitmaskRangeError(value)
    if value == 0:
        return 0
    return 1 << (value - 1)


def _build_table(mode: ChannelMode) -> npt.NDArray[np.uint8]:
    values = np.arange(256, dtype=np.uint8)
    if mode is ChannelMode.pass_through:
        return values
    if mode is ChannelMode.skip:
        return np.zeros(256, dtype=np.uint8)
    table = np.zeros(256, dtype=np.uint8)
    for label in range(MAX_BITMASK_LABEL + 1):
        table[label] = bitmask(label)
    return table


_TABLES: dict[ChannelMode, npt.NDArray[np.uint8]] = {
    mode: _build_table(mode) for mode in ChannelMode
}


def apply_mode(
    band: npt.NDArray[np.uint8],
    mode: ChannelMode,
    channel: str | None = None,
) -> npt.NDArray[np.uint8]:
    """Transform one band of pixel values.

    Args:
        band: 2D uint8 array of channel values.
        mode: Transform to apply.
        channel: Channel name, reported if a bitmask label is out of range.

    Returns:
        A new uint8 array of the same shape.

    Raises:
        BitmaskRangeError: If mode is bitmask and any value exceeds 8.
    """
    if mode is ChannelMode.bitmask and band.size:
        highest = int(band.max())
        if highest > MAX_BITMASK_LABEL:
            raise BitmaskRangeError(highest, channel)
    return _TABLES[mode][band]
