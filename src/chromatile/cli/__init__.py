"""CLI module for chromatile.

Provides the command-line interface for compositing channel rasters and
building deep-zoom tile pyramids.
"""

from __future__ import annotations

from chromatile.cli.main import ModeChoice, app

__all__ = ["ModeChoice", "app"]
