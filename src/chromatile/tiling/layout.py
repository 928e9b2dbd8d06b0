"""Tile pyramid layout.

Level 0 is the coarsest level (a single tile); the finest level Z is the
smallest Z with ``tile_size * 2**Z >= max(width, height)``. Every level's
grid is the finest grid halved (rounding up) once per level step.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import NamedTuple

from chromatile.exceptions import InvalidGeometryError
from chromatile.geometry import Size


class TileCoord(NamedTuple):
    """Position of one tile in the pyramid.

    Attributes:
        column: Horizontal grid index (0 = left).
        row: Vertical grid index (0 = top).
        level: Zoom level (0 = coarsest).
    """

    column: int
    row: int
    level: int


def tile_name(coord: TileCoord, prefix: str = "") -> str:
    """File stem for a tile: ``{prefix}_{level}_{row}_{column}``.

    Without a prefix the stem is ``{level}_{row}_{column}``.
    """
    stem = f"{coord.level}_{coord.row}_{coord.column}"
    return f"{prefix}_{stem}" if prefix else stem


def _ceil_div(value: int, divisor: int) -> int:
    return -(-value // divisor)


def finest_level(size: Size, tile_size: int) -> int:
    """Number of halvings until both dimensions fit in one tile."""
    if tile_size <= 0:
        raise InvalidGeometryError(f"Tile size must be positive, got {tile_size}")
    width, height = size.width, size.height
    level = 0
    while width > tile_size or height > tile_size:
        width = _ceil_div(width, 2)
        height = _ceil_div(height, 2)
        level += 1
    return level


@dataclass(frozen=True)
class PyramidLayout:
    """Grid geometry of every level for one source raster.

    Attributes:
        source_size: Pixel size of the full-resolution source.
        tile_size: Edge length of every (square) tile.
    """

    source_size: Size
    tile_size: int

    def __post_init__(self) -> None:
        if self.tile_size <= 0:
            raise InvalidGeometryError(
                f"Tile size must be positive, got {self.tile_size}"
            )

    @property
    def finest_level(self) -> int:
        """Level Z holding the source at full resolution."""
        return finest_level(self.source_size, self.tile_size)

    @property
    def levels(self) -> range:
        """Levels from finest to coarsest (Z, Z-1, ..., 0)."""
        return range(self.finest_level, -1, -1)

    def grid(self, level: int) -> tuple[int, int]:
        """Return (cols, rows) at a level.

        Raises:
            InvalidGeometryError: If the level is outside 0..Z.
        """
        top = self.finest_level
        if level < 0 or level > top:
            raise InvalidGeometryError(f"Level {level} out of range [0, {top}]")
        cols = _ceil_div(self.source_size.width, self.tile_size)
        rows = _ceil_div(self.source_size.height, self.tile_size)
        factor = 1 << (top - level)
        return (_ceil_div(cols, factor), _ceil_div(rows, factor))

    def tile_count(self, level: int) -> int:
        """Number of tiles at a level."""
        cols, rows = self.grid(level)
        return cols * rows

    def coords(self, level: int) -> Iterator[TileCoord]:
        """Iterate tile coordinates at a level, row by row."""
        cols, rows = self.grid(level)
        for row in range(rows):
            for column in range(cols):
                yield TileCoord(column=column, row=row, level=level)
