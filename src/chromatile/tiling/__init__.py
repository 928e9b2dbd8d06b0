"""Deep-zoom tile pyramid generation for chromatile.

Public API:
    - PyramidLayout: Per-level grid geometry for a source size.
    - TileCoord / tile_name: Tile addressing and file naming.
    - PyramidBuilder: Writes the finest level and coarsens down to level 0.
    - BuildReport: Levels and tile counts written by a build.
"""

from chromatile.tiling.builder import BuildReport, PyramidBuilder
from chromatile.tiling.layout import PyramidLayout, TileCoord, finest_level, tile_name

__all__ = [
    "BuildReport",
    "PyramidBuilder",
    "PyramidLayout",
    "TileCoord",
    "finest_level",
    "tile_name",
]
