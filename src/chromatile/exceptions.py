"""Custom exceptions for chromatile.

Every fatal condition in the registration and tiling pipelines is raised
as one of these types so callers (the CLI, tests, batch drivers) can tell
a missing input from bad geometry from a codec failure.
"""

from pathlib import Path


class ChromatileError(Exception):
    """Base exception for all chromatile errors."""

    def __init__(self, message: str, path: Path | str | None = None) -> None:
        """Initialize error with optional path context.

        Args:
            message: Human-readable error description.
            path: Path to the file that caused the error.
        """
        self.path = Path(path) if path else None
        self.message = message
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with path context if available."""
        if self.path:
            return f"{self.message} (path: {self.path})"
        return self.message


class InputNotFoundError(ChromatileError):
    """Raised when a declared source raster does not exist.

    Always raised before any raster work begins.
    """

    pass


class InvalidGeometryError(ChromatileError, ValueError):
    """Raised when geometry input or a derived geometry is unusable.

    This error is raised when:
    - A bounding box or size argument has the wrong number of values
    - A bounding box has zero or negative extent on an axis
    - A computed target size or canvas size has a zero component
    - A requested pyramid level does not exist
    """

    pass


class CodecError(ChromatileError):
    """Raised when a raster cannot be decoded or encoded.

    This error is raised when:
    - Pillow cannot identify or decode an input file
    - Saving a raster fails (unknown format, unwritable path, ...)
    """

    def __init__(
        self,
        message: str,
        path: Path | str | None = None,
        *,
        operation: str | None = None,
    ) -> None:
        """Initialize codec error with operation context.

        Args:
            message: Human-readable error description.
            path: Path of the raster being read or written.
            operation: "load" or "save".
        """
        self.operation = operation
        super().__init__(message, path)

    def _format_message(self) -> str:
        """Format error message with full operation context."""
        parts = [self.message]
        if self.operation is not None:
            parts.append(f"operation={self.operation}")
        if self.path:
            parts.append(f"path={self.path}")

        if len(parts) == 1:
            return parts[0]
        return f"{parts[0]} ({', '.join(parts[1:])})"


class BitmaskRangeError(ChromatileError, ValueError):
    """Raised when a bitmask channel holds a label index above 8.

    The bitmask encoding maps label n to the bit 2^(n-1); only labels
    0..8 fit in one byte.
    """

    def __init__(self, value: int, channel: str | None = None) -> None:
        self.value = value
        self.channel = channel
        where = f" in channel '{channel}'" if channel else ""
        super().__init__(
            f"Bitmask label {value}{where} is outside the supported range 0-8"
        )
