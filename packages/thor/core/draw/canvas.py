"""Square RGBA canvas built one colour row at a time and saved as PNG."""

from __future__ import annotations

from collections.abc import Sequence
import logging
from pathlib import Path

import numpy as np
from numpy.typing import NDArray
from PIL import Image

from thor.core.colour.codec import PAD_COLOUR, ColourValue
from thor.core.colour.sketch import ColourSketch
from thor.core.errors import CanvasError, CanvasFullError, CanvasSizeError, WidthMismatchError

logger = logging.getLogger(__name__)


def check_canvas_size(side: int, row_count: int) -> None:
    """Validate that ``row_count`` rows fit on a ``side`` x ``side`` canvas.

    Raises:
        CanvasSizeError: If side < 1, row_count < 0 or row_count > side
    """
    if side < 1:
        raise CanvasSizeError(f"Canvas side must be >= 1, got {side}")
    if row_count < 0:
        raise CanvasSizeError(f"Row count must be >= 0, got {row_count}")
    if row_count > side:
        raise CanvasSizeError(
            f"Number of OTUs > sketch length ({row_count} : {side}). "
            f"Suggest supplying top {side} OTUs."
        )


class Canvas:
    """Square pixel buffer whose side equals the colour sketch length.

    Rows are appended top-down. ``padding`` is the number of rows that will
    be filled with the sentinel colour when the canvas is saved with
    ``pad=True``.

    Args:
        side: Width and height in pixels (the store's sketch length)
        row_count: Number of content rows that will be drawn

    Raises:
        CanvasSizeError: If side < 1, row_count < 0 or row_count > side

    Example:
        >>> canvas = Canvas(side=3, row_count=2)
        >>> canvas.padding
        1
    """

    def __init__(self, side: int, row_count: int) -> None:
        check_canvas_size(side, row_count)
        self.side = side
        self.row_count = row_count
        self.padding = side - row_count
        self._pixels: NDArray[np.uint8] = np.zeros((side, side, 4), dtype=np.uint8)
        self._rows_drawn = 0

    @property
    def rows_drawn(self) -> int:
        return self._rows_drawn

    @property
    def is_full(self) -> bool:
        return self._rows_drawn == self.side

    def draw_row(self, colours: ColourSketch | Sequence[ColourValue]) -> None:
        """Append one row of pixels.

        The canvas is unchanged when the row is rejected.

        Raises:
            WidthMismatchError: If the row width differs from the side length
            CanvasFullError: If every row is already drawn
        """
        if len(colours) != self.side:
            raise WidthMismatchError(
                f"Was expecting a row of length {self.side}, "
                f"received a row of length {len(colours)}"
            )
        if self.is_full:
            raise CanvasFullError(f"Canvas is full ({self.side} rows drawn)")

        if isinstance(colours, ColourSketch):
            row = colours.pixels
        else:
            row = np.array([colour.as_tuple() for colour in colours], dtype=np.uint8)
        self._pixels[self._rows_drawn] = row
        self._rows_drawn += 1

    def draw_padding_row(self) -> None:
        """Append one row of the sentinel padding colour."""
        self.draw_row([PAD_COLOUR] * self.side)

    def to_array(self) -> NDArray[np.uint8]:
        """Copy of the full ``(side, side, 4)`` buffer."""
        return self._pixels.copy()

    def save(self, path: str | Path, pad: bool = True) -> Path:
        """Write the canvas to ``path`` as a PNG.

        With ``pad=True`` any undrawn rows are filled with the sentinel colour
        and a ``side x side`` image is written. With ``pad=False`` an
        incomplete canvas is trimmed to the rows drawn so far.

        Raises:
            CanvasError: If nothing was drawn and ``pad`` is False
        """
        path = Path(path)
        if pad:
            while not self.is_full:
                self.draw_padding_row()
            pixels = self._pixels
        else:
            if self._rows_drawn == 0:
                raise CanvasError(f"Nothing drawn on canvas, refusing to write empty image {path}")
            pixels = self._pixels[: self._rows_drawn]

        path.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(np.ascontiguousarray(pixels)).save(str(path), "PNG")
        logger.debug(f"Saved {pixels.shape[1]}x{pixels.shape[0]} image to {path}")
        return path
