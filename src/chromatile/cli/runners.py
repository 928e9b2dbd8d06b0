"""CLI runners for compositing and tiling.

This module provides the execution logic for the CLI commands, bridging
the CLI interface to the registration and tiling components. Runners take
plain values, raise chromatile exceptions, and return result dataclasses;
they never print or exit.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from chromatile.exceptions import InvalidGeometryError
from chromatile.geometry import parse_bbox, parse_size
from chromatile.raster import load_raster, read_size, require_exists, save_raster
from chromatile.registration import (
    CanvasRegistrar,
    ChannelCompositor,
    ChannelGeometry,
    ChannelMode,
    RegistrationPlan,
)
from chromatile.tiling import BuildReport, PyramidBuilder, PyramidLayout
from chromatile.utils.logging import get_logger, set_correlation_context


@dataclass(frozen=True)
class ChannelInput:
    """One channel as declared on the command line."""

    name: str
    path: Path
    bbox: Sequence[int]
    mode: ChannelMode = ChannelMode.bitmask


@dataclass
class CompositeResult:
    """Result from a composite run."""

    run_id: str
    plan: RegistrationPlan
    output_path: Path | None
    dry_run: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "dry_run": self.dry_run,
            "output": str(self.output_path) if self.output_path else None,
            **self.plan.summary(),
        }


@dataclass
class TilingResult:
    """Result from a tiling run."""

    run_id: str
    output_folder: Path
    layout: PyramidLayout
    levels_written: list[int] = field(default_factory=list)
    tiles_written: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "output_folder": str(self.output_folder),
            "source_size": self.layout.source_size.to_tuple(),
            "tile_size": self.layout.tile_size,
            "finest_level": self.layout.finest_level,
            "levels_written": self.levels_written,
            "tiles_written": self.tiles_written,
        }


def _new_run_id() -> str:
    return uuid.uuid4().hex[:12]


def run_composite(
    *,
    channels: Sequence[ChannelInput],
    source_dimensions: Sequence[int],
    output_path: Path,
    dry_run: bool = False,
    image_format: str | None = None,
) -> CompositeResult:
    """Register and composite channels into one RGB raster.

    Every input is checked and every geometry computed before any pixel
    data is decoded. With ``dry_run`` only file headers are read and
    nothing is written.

    Raises:
        InputNotFoundError: If a channel file is missing.
        InvalidGeometryError: On malformed bboxes/dimensions or a degenerate
            plan.
        CodecError: If a raster cannot be decoded or the output cannot be
            written.
        BitmaskRangeError: If a bitmask channel holds a label above 8.
    """
    logger = get_logger(__name__)
    run_id = _new_run_id()
    set_correlation_context(run_id=run_id)

    if not channels:
        raise InvalidGeometryError("At least one channel is required")

    for channel in channels:
        require_exists(channel.path, label=f"{channel.name.capitalize()} channel")
    bboxes = {c.name: parse_bbox(c.bbox, name=f"{c.name} bbox") for c in channels}
    reference_size = parse_size(source_dimensions, name="source dimensions")

    if dry_run:
        logger.info("Dry run enabled, no files will be written")
    sizes = {c.name: read_size(c.path).to_tuple() for c in channels}

    geometries = [
        ChannelGeometry.from_dimensions(name, bboxes[name], *sizes[name])
        for name in bboxes
    ]
    plan = CanvasRegistrar().plan(geometries, reference_size)
    logger.info("Registration plan computed", **plan.summary())

    if dry_run:
        logger.info("Dry run complete")
        return CompositeResult(
            run_id=run_id, plan=plan, output_path=None, dry_run=True
        )

    logger.info("Loading channels", count=len(channels))
    rasters = {c.name: load_raster(c.path) for c in channels}
    modes = {c.name: c.mode for c in channels}
    combined = ChannelCompositor().composite(rasters, plan, modes)
    rasters.clear()

    logger.info("Saving composite", path=str(output_path))
    save_raster(combined, output_path, image_format)
    return CompositeResult(run_id=run_id, plan=plan, output_path=Path(output_path))


def run_tiling(
    *,
    input_image: Path,
    output_folder: Path,
    file_stem: str = "",
    tile_size: int | None = None,
    layer_to_prepare: int = 0,
    workers: int | None = None,
) -> TilingResult:
    """Write a deep-zoom tile pyramid for one raster.

    Args:
        input_image: Source raster.
        output_folder: Flat directory receiving the tiles.
        file_stem: Tile file-name prefix ("" for none).
        tile_size: Tile edge in pixels (settings.TILE_SIZE if None).
        layer_to_prepare: 0 builds every level; any other value regenerates
            only that level from the persisted next-finer level (or from the
            source when it is the finest level).
        workers: Threads per level (settings.TILE_WORKERS if None).

    Raises:
        InputNotFoundError: If the source raster is missing.
        InvalidGeometryError: If the tile size or requested level is invalid.
        CodecError: If a raster cannot be read or a tile cannot be written.
    """
    logger = get_logger(__name__)
    run_id = _new_run_id()
    set_correlation_context(run_id=run_id)

    input_image = require_exists(input_image, label="Input image")
    if layer_to_prepare < 0:
        raise InvalidGeometryError(f"Level must be >= 0, got {layer_to_prepare}")

    builder = PyramidBuilder(
        output_folder,
        prefix=file_stem,
        tile_size=tile_size,
        max_workers=workers,
    )

    report: BuildReport
    if layer_to_prepare == 0:
        logger.info("Building full pyramid", input=str(input_image))
        report = builder.build(load_raster(input_image))
    else:
        layout = builder.layout_for(read_size(input_image))
        layout.grid(layer_to_prepare)  # validates range before decoding
        source = (
            load_raster(input_image)
            if layer_to_prepare == layout.finest_level
            else None
        )
        logger.info("Rebuilding single level", level=layer_to_prepare)
        report = builder.rebuild_level(layer_to_prepare, layout, source)

    return TilingResult(
        run_id=run_id,
        output_folder=Path(output_folder),
        layout=report.layout,
        levels_written=report.levels_written,
        tiles_written=report.tiles_written,
    )
