"""chromatile CLI - channel compositing and deep-zoom tiling.

Command-line interface for registering channel rasters into one RGB image
and for cutting a raster into a tile pyramid.
"""

from __future__ import annotations

import json
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer

from chromatile import __version__
from chromatile.config import settings
from chromatile.utils.logging import configure_logging, get_logger

app = typer.Typer(
    name="chromatile",
    help="chromatile: channel compositing and tile pyramids for whole-slide images",
    add_completion=False,
)


class ModeChoice(str, Enum):
    """Per-channel value transform as spelled on the command line."""

    bitmask = "bitmask"
    heatmap = "heatmap"  # Same transform as pass-through
    pass_through = "pass-through"
    skip = "skip"


BBoxOption = tuple[int, int, int, int]


# =============================================================================
# Commands
# =============================================================================


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show version information."""
    if json_output:
        typer.echo(json.dumps({"version": __version__}))
    else:
        typer.echo(f"chromatile {__version__}")


@app.command()
def composite(  # noqa: PLR0913
    red_path: Annotated[
        Path, typer.Option("--red-path", "-r", help="Red channel raster")
    ],
    green_path: Annotated[
        Path, typer.Option("--green-path", "-g", help="Green channel raster")
    ],
    blue_path: Annotated[
        Path, typer.Option("--blue-path", "-b", help="Blue channel raster")
    ],
    red_bbox: Annotated[
        BBoxOption,
        typer.Option("--red-bbox", help="Red footprint: MIN_X MIN_Y MAX_X MAX_Y"),
    ],
    green_bbox: Annotated[
        BBoxOption,
        typer.Option("--green-bbox", help="Green footprint: MIN_X MIN_Y MAX_X MAX_Y"),
    ],
    blue_bbox: Annotated[
        BBoxOption,
        typer.Option("--blue-bbox", help="Blue footprint: MIN_X MIN_Y MAX_X MAX_Y"),
    ],
    source_dimensions: Annotated[
        tuple[int, int],
        typer.Option("--source-dimensions", help="Reference WSI size: WIDTH HEIGHT"),
    ],
    red_mode: Annotated[
        ModeChoice, typer.Option("--red-mode", help="Red channel transform")
    ] = ModeChoice.bitmask,
    green_mode: Annotated[
        ModeChoice, typer.Option("--green-mode", help="Green channel transform")
    ] = ModeChoice.bitmask,
    blue_mode: Annotated[
        ModeChoice, typer.Option("--blue-mode", help="Blue channel transform")
    ] = ModeChoice.bitmask,
    output: Annotated[
        Path, typer.Option("--out", "-o", help="Output raster path")
    ] = Path(settings.COMPOSITE_OUTPUT),
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", "-d", help="Compute geometry only, write nothing"),
    ] = False,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity (-v, -vv)"
        ),
    ] = 0,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Register three channel rasters and merge them into one RGB image."""
    from chromatile.cli.runners import ChannelInput, run_composite  # noqa: PLC0415
    from chromatile.registration import ChannelMode  # noqa: PLC0415

    _configure_logging(verbose)
    logger = get_logger(__name__)

    logger.info("Starting composite", output=str(output), dry_run=dry_run)

    try:
        result = run_composite(
            channels=[
                ChannelInput("red", red_path, red_bbox, ChannelMode(red_mode.value)),
                ChannelInput(
                    "green", green_path, green_bbox, ChannelMode(green_mode.value)
                ),
                ChannelInput(
                    "blue", blue_path, blue_bbox, ChannelMode(blue_mode.value)
                ),
            ],
            source_dimensions=source_dimensions,
            output_path=output,
            dry_run=dry_run,
        )

        if json_output:
            typer.echo(json.dumps(result.to_dict(), indent=2))
        else:
            plan = result.plan
            width, height = plan.canvas_size.to_tuple()
            typer.echo(f"Minimum scale: {plan.minimum_scale.to_tuple()}")
            typer.echo(f"Canvas: {width}x{height}")
            if result.dry_run:
                typer.echo("Dry run complete, nothing written.")
            else:
                typer.echo(f"Saved to {result.output_path}")

        raise typer.Exit(0)

    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("Composite failed")
        if json_output:
            typer.echo(json.dumps({"error": str(e)}))
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.command()
def tile(  # noqa: PLR0913
    input_image: Annotated[
        Path, typer.Option("--input-image", "-i", help="Path to source raster")
    ],
    output_folder: Annotated[
        Path, typer.Option("--output-folder", "-o", help="Directory for tiles")
    ] = Path(settings.TILE_OUTPUT_FOLDER),
    output_file_stem: Annotated[
        str, typer.Option("--output-file-stem", "-s", help="Tile file-name stem")
    ] = settings.TILE_PREFIX,
    tile_size: Annotated[
        int, typer.Option("--tile-size", "-t", min=1, help="Tile edge in pixels")
    ] = settings.TILE_SIZE,
    layer_to_prepare: Annotated[
        int,
        typer.Option(
            "--layer-to-prepare",
            "-l",
            min=0,
            help="Only regenerate this level (0 = build all levels)",
        ),
    ] = 0,
    workers: Annotated[
        int, typer.Option("--workers", "-w", min=1, help="Threads per level")
    ] = settings.TILE_WORKERS,
    verbose: Annotated[
        int, typer.Option("--verbose", "-v", count=True, help="Increase verbosity")
    ] = 0,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Cut a raster into a deep-zoom tile pyramid."""
    from chromatile.cli.runners import run_tiling  # noqa: PLC0415

    _configure_logging(verbose)
    logger = get_logger(__name__)

    logger.info(
        "Starting tiling",
        input=str(input_image),
        output_folder=str(output_folder),
        tile_size=tile_size,
    )

    try:
        result = run_tiling(
            input_image=input_image,
            output_folder=output_folder,
            file_stem=output_file_stem,
            tile_size=tile_size,
            layer_to_prepare=layer_to_prepare,
            workers=workers,
        )

        if json_output:
            typer.echo(json.dumps(result.to_dict(), indent=2))
        else:
            levels = ", ".join(str(level) for level in result.levels_written)
            typer.echo(f"Levels written: {levels}")
            typer.echo(f"Tiles written: {result.tiles_written}")
            typer.echo(f"Output folder: {result.output_folder}")

        raise typer.Exit(0)

    except typer.Exit:
        raise
    except Exception as e:
        logger.exception("Tiling failed")
        if json_output:
            typer.echo(json.dumps({"error": str(e)}))
        else:
            typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from None


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """chromatile: channel compositing and tile pyramids for whole-slide images."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())


def _configure_logging(verbose: int) -> None:
    """Configure logging based on verbosity level."""
    if verbose == 0:
        level = "WARNING"
    elif verbose == 1:
        level = "INFO"
    else:  # verbose >= 2
        level = "DEBUG"

    configure_logging(level=level)


if __name__ == "__main__":  # pragma: no cover
    app()
