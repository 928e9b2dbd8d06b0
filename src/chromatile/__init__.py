"""chromatile: channel registration and tile pyramids for whole-slide images."""

__version__ = "0.1.0"
