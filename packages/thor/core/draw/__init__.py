"""Raster output."""

from thor.core.draw.canvas import Canvas

__all__ = ["Canvas"]
