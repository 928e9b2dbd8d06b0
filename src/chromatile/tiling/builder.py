"""Deep-zoom tile pyramid generation.

The finest level is cut straight from the source raster. Each coarser level
is built from the level below it: four sibling tiles are pasted into a
2x2 mosaic and halved with a bilinear filter. Tiles are written to disk as
soon as they exist and read back when the next level needs them, so only
one level's working set is ever held in memory.

Tiles within a level are independent and are produced on a thread pool;
a level is fully written before the next coarser level starts.

Boundary Behavior:
    Finest-level tiles that extend past the source are padded with
    transparent black. Siblings missing at a coarsening step (odd grid
    edges) are substituted with opaque black tiles.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from PIL import Image

from chromatile.config import settings
from chromatile.exceptions import InvalidGeometryError
from chromatile.geometry import Size
from chromatile.raster import load_raster, save_raster
from chromatile.tiling.layout import PyramidLayout, TileCoord, tile_name
from chromatile.utils.logging import correlation_scope, get_logger

logger = get_logger(__name__)

_OPAQUE_BLACK = (0, 0, 0, 255)


@dataclass
class BuildReport:
    """Summary of the tiles written by one build.

    Attributes:
        layout: Pyramid layout used.
        levels_written: Levels produced, in the order they were written.
        tiles_written: Total number of tile files written.
    """

    layout: PyramidLayout
    levels_written: list[int] = field(default_factory=list)
    tiles_written: int = 0


class PyramidBuilder:
    """Writes a tile pyramid for one source raster into a flat folder.

    Example:
        >>> builder = PyramidBuilder(Path("tiles"), prefix="slide")
        >>> report = builder.build(load_raster("slide.png"))
        >>> report.levels_written
        [4, 3, 2, 1, 0]
    """

    __slots__ = (
        "_extension",
        "_image_format",
        "_max_workers",
        "_output_folder",
        "_prefix",
        "_tile_size",
    )

    def __init__(
        self,
        output_folder: Path | str,
        prefix: str = "",
        tile_size: int | None = None,
        max_workers: int | None = None,
        image_format: str | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            output_folder: Directory receiving the tiles (created if needed).
            prefix: File-name stem; empty for ``{level}_{row}_{column}``.
            tile_size: Tile edge in pixels. Defaults to settings.TILE_SIZE.
            max_workers: Threads per level. Defaults to settings.TILE_WORKERS.
            image_format: Pillow format. Defaults to settings.IMAGE_FORMAT.
        """
        self._output_folder = Path(output_folder)
        self._prefix = prefix
        self._tile_size = tile_size if tile_size is not None else settings.TILE_SIZE
        self._max_workers = max_workers or settings.TILE_WORKERS
        self._image_format = image_format or settings.IMAGE_FORMAT
        self._extension = f".{self._image_format.lower()}"
        if self._tile_size <= 0:
            raise InvalidGeometryError(
                f"Tile size must be positive, got {self._tile_size}"
            )

    @property
    def tile_size(self) -> int:
        """Edge length of every tile."""
        return self._tile_size

    def layout_for(self, size: Size) -> PyramidLayout:
        """Pyramid layout for a source of the given size."""
        return PyramidLayout(source_size=size, tile_size=self._tile_size)

    def tile_path(self, coord: TileCoord) -> Path:
        """Path of the file holding a tile."""
        name = tile_name(coord, self._prefix)
        return self._output_folder / f"{name}{self._extension}"

    # ------------------------------------------------------------------
    # Whole-pyramid and single-level entry points
    # ------------------------------------------------------------------

    def build(self, source: Image.Image) -> BuildReport:
        """Write every level from the finest down to level 0."""
        layout = self.layout_for(Size.from_tuple(source.size))
        report = BuildReport(layout=layout)

        report.tiles_written += self.write_finest_level(source, layout)
        del source  # the full-resolution raster is not needed past this point
        report.levels_written.append(layout.finest_level)
        for level in range(layout.finest_level - 1, -1, -1):
            report.tiles_written += self.coarsen_level(level, layout)
            report.levels_written.append(level)
        return report

    def rebuild_level(
        self,
        level: int,
        layout: PyramidLayout,
        source: Image.Image | None = None,
    ) -> BuildReport:
        """Regenerate a single level.

        The finest level is cut from ``source``; any other level is built
        from the tiles already on disk for the next finer level.

        Raises:
            InvalidGeometryError: If the level is out of range, or the finest
                level is requested without a source raster.
        """
        layout.grid(level)  # validates range
        report = BuildReport(layout=layout)
        if level == layout.finest_level:
            if source is None:
                raise InvalidGeometryError(
                    f"Level {level} is the finest level and needs the source raster"
                )
            report.tiles_written = self.write_finest_level(source, layout)
        else:
            report.tiles_written = self.coarsen_level(level, layout)
        report.levels_written.append(level)
        return report

    # ------------------------------------------------------------------
    # Level producers
    # ------------------------------------------------------------------

    def write_finest_level(self, source: Image.Image, layout: PyramidLayout) -> int:
        """Cut the source into finest-level tiles and write them.

        Returns:
            Number of tiles written.
        """
        if source.mode != "RGBA":
            source = source.convert("RGBA")
        level = layout.finest_level
        cols, rows = layout.grid(level)
        logger.info(
            "Writing finest level",
            level=level,
            cols=cols,
            rows=rows,
            source_size=layout.source_size.to_tuple(),
        )

        def write(coord: TileCoord) -> None:
            tile = self._cut_tile(source, coord)
            save_raster(tile, self.tile_path(coord), self._image_format)

        return self._run_level(level, layout.coords(level), write)

    def coarsen_level(self, level: int, layout: PyramidLayout) -> int:
        """Build ``level`` from the persisted tiles of ``level + 1``.

        Returns:
            Number of tiles written.

        Raises:
            InvalidGeometryError: If level is not below the finest level.
        """
        if level >= layout.finest_level:
            raise InvalidGeometryError(
                f"Level {level} has no finer level to coarsen from "
                f"(finest is {layout.finest_level})"
            )
        cols, rows = layout.grid(level)
        logger.info("Coarsening level", level=level, cols=cols, rows=rows)

        def write(coord: TileCoord) -> None:
            tile = self._merge_siblings(coord)
            save_raster(tile, self.tile_path(coord), self._image_format)

        return self._run_level(level, layout.coords(level), write)

    # ------------------------------------------------------------------
    # Tile construction
    # ------------------------------------------------------------------

    def _cut_tile(self, source: Image.Image, coord: TileCoord) -> Image.Image:
        """Exact tile_size window; pixels past the source edge are zero."""
        left = coord.column * self._tile_size
        top = coord.row * self._tile_size
        return source.crop((left, top, left + self._tile_size, top + self._tile_size))

    def _load_or_blank(self, coord: TileCoord) -> Image.Image:
        path = self.tile_path(coord)
        if path.exists():
            return load_raster(path)
        return Image.new("RGBA", (self._tile_size, self._tile_size), _OPAQUE_BLACK)

    def _merge_siblings(self, coord: TileCoord) -> Image.Image:
        """Merge the 2x2 finer tiles under ``coord`` and halve the result."""
        size = self._tile_size
        finer = coord.level + 1
        x, y = coord.column * 2, coord.row * 2

        mosaic = Image.new("RGBA", (size * 2, size * 2), _OPAQUE_BLACK)
        quadrants = (
            (TileCoord(x, y, finer), (0, 0)),
            (TileCoord(x + 1, y, finer), (size, 0)),
            (TileCoord(x, y + 1, finer), (0, size)),
            (TileCoord(x + 1, y + 1, finer), (size, size)),
        )
        for sibling, position in quadrants:
            mosaic.paste(self._load_or_blank(sibling), position)

        return mosaic.resize((size, size), resample=Image.Resampling.BILINEAR)

    def _run_level(
        self,
        level: int,
        coords: Iterable[TileCoord],
        write: Callable[[TileCoord], None],
    ) -> int:
        """Write every tile of a level, returning once all are on disk."""
        self._output_folder.mkdir(parents=True, exist_ok=True)
        coords = list(coords)

        with correlation_scope(zoom_level=level):
            if self._max_workers == 1:
                for coord in coords:
                    write(coord)
            else:
                with ThreadPoolExecutor(max_workers=self._max_workers) as pool:
                    # Consuming the iterator re-raises the first worker failure
                    list(pool.map(write, coords))
            logger.info("Level written", tiles=len(coords))
        return len(coords)
