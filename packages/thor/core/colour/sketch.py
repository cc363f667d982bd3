"""Colour sketches: fixed-length, identified sequences of colours."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from typing import overload

import numpy as np
from numpy.typing import NDArray

from thor.core.colour.codec import (
    CHANNEL_MAX,
    CHANNELS,
    ColourValue,
    channel_key,
    check_uint32,
)
from thor.core.errors import ChannelOverflowError, SketchOverflowError

_SHIFTS = (0, 8, 16, 24)


class ColourSketch:
    """An identified, read-only sequence of RGBA colours.

    Pixels are held as a ``(length, 4)`` uint8 array that is marked
    non-writeable; every transformation returns a new sketch.

    Args:
        sketch_id: Non-empty identifier (usually a genus name)
        pixels: Array-like of shape ``(length, 4)`` with values 0-255

    Raises:
        ValueError: If the id is empty, the pixel values are not integers or
            the pixel array has the wrong shape
        ChannelOverflowError: If a pixel value is outside 0-255
    """

    __slots__ = ("_id", "_pixels")

    def __init__(self, sketch_id: str, pixels: NDArray[np.uint8] | Sequence[Sequence[int]]) -> None:
        if not isinstance(sketch_id, str) or not sketch_id:
            raise ValueError("Colour sketch id must be a non-empty string")
        source = np.asarray(pixels)
        if source.size and source.dtype.kind not in "iu":
            raise ValueError(
                f"Colour sketch {sketch_id!r} needs integer channel values, "
                f"got dtype {source.dtype}"
            )
        out_of_range = source.size and (source.min() < 0 or source.max() > CHANNEL_MAX)
        if source.dtype != np.uint8 and out_of_range:
            raise ChannelOverflowError(
                f"Colour sketch {sketch_id!r} has channel values outside the range 0-{CHANNEL_MAX}"
            )
        array = np.array(source, dtype=np.uint8, copy=True)
        if array.ndim != 2 or array.shape[1] != 4:
            raise ValueError(
                f"Colour sketch {sketch_id!r} needs a (length, 4) pixel array, got shape {array.shape}"
            )
        if array.shape[0] == 0:
            raise ValueError(f"Colour sketch {sketch_id!r} is empty")
        array.flags.writeable = False
        self._id = sketch_id
        self._pixels = array

    @classmethod
    def from_values(cls, sketch_id: str, values: Iterable[int]) -> ColourSketch:
        """Encode raw sketch elements, one colour per element.

        Raises:
            SketchOverflowError: If any element is outside the uint32 range
                (the message names the sketch and element index)
        """
        checked: list[int] = []
        for i, value in enumerate(values):
            try:
                checked.append(check_uint32(value))
            except SketchOverflowError as e:
                raise SketchOverflowError(f"Sketch {sketch_id!r}, element {i}: {e}") from e

        raw = np.asarray(checked, dtype=np.uint32)
        pixels = np.stack([(raw >> shift) & CHANNEL_MAX for shift in _SHIFTS], axis=-1)
        return cls(sketch_id, pixels.astype(np.uint8).reshape(-1, 4))

    @classmethod
    def from_colours(cls, sketch_id: str, colours: Iterable[ColourValue]) -> ColourSketch:
        return cls(sketch_id, [colour.as_tuple() for colour in colours])

    @classmethod
    def filled(cls, sketch_id: str, colour: ColourValue, length: int) -> ColourSketch:
        """Sketch of ``length`` copies of a single colour."""
        return cls(sketch_id, np.tile(np.asarray(colour.as_tuple(), dtype=np.uint8), (length, 1)))

    @property
    def id(self) -> str:
        return self._id

    @property
    def pixels(self) -> NDArray[np.uint8]:
        """Read-only ``(length, 4)`` uint8 view of the colours."""
        return self._pixels

    @property
    def colours(self) -> tuple[ColourValue, ...]:
        return tuple(self)

    def values(self) -> list[int]:
        """Decode back to the raw sketch elements."""
        raw = self._pixels.astype(np.uint32)
        combined = raw[:, 0] | (raw[:, 1] << 8) | (raw[:, 2] << 16) | (raw[:, 3] << 24)
        return [int(v) for v in combined]

    def __len__(self) -> int:
        return int(self._pixels.shape[0])

    @overload
    def __getitem__(self, index: int) -> ColourValue: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[ColourValue, ...]: ...

    def __getitem__(self, index: int | slice) -> ColourValue | tuple[ColourValue, ...]:
        if isinstance(index, slice):
            return tuple(_to_colour(row) for row in self._pixels[index])
        return _to_colour(self._pixels[index])

    def __iter__(self) -> Iterator[ColourValue]:
        for row in self._pixels:
            yield _to_colour(row)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ColourSketch):
            return NotImplemented
        return self._id == other._id and np.array_equal(self._pixels, other._pixels)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ColourSketch(id={self._id!r}, length={len(self)})"

    def adjust(self, channel: str, delta: int) -> ColourSketch:
        """Return a new sketch with ``delta`` added to one channel of every colour.

        Raises:
            ValueError: If channel is not one of r/g/b/a
            ChannelOverflowError: If any adjusted value leaves 0-255
        """
        column = CHANNELS.index(channel_key(channel))
        adjusted = self._pixels[:, column].astype(np.int64) + delta
        bad = np.flatnonzero((adjusted < 0) | (adjusted > CHANNEL_MAX))
        if bad.size:
            i = int(bad[0])
            raise ChannelOverflowError(
                f"Sketch {self._id!r}, element {i}: adjusting {channel.upper()}="
                f"{int(self._pixels[i, column])} by {delta} would leave the range 0-{CHANNEL_MAX}"
            )
        pixels = self._pixels.copy()
        pixels[:, column] = adjusted.astype(np.uint8)
        return ColourSketch(self._id, pixels)

    def with_channel(self, channel: str, value: int) -> ColourSketch:
        """Return a new sketch with one channel set to ``value`` for every colour."""
        column = CHANNELS.index(channel_key(channel))
        if not 0 <= value <= CHANNEL_MAX:
            raise ChannelOverflowError(
                f"Sketch {self._id!r}: {channel.upper()}={value} is outside the range 0-{CHANNEL_MAX}"
            )
        pixels = self._pixels.copy()
        pixels[:, column] = value
        return ColourSketch(self._id, pixels)

    def to_csv_fields(self, hex: bool = True) -> list[str]:
        """Render each colour as ``#RRGGBBAA`` or ``rgba(r,g,b,a)``."""
        if hex:
            return [colour.hex for colour in self]
        return [colour.rgba() for colour in self]

    def to_csv_line(self, hex: bool = True) -> str:
        """Render the sketch as ``id,colour,colour,...``."""
        return ",".join([self._id, *self.to_csv_fields(hex=hex)])


def _to_colour(row: NDArray[np.uint8]) -> ColourValue:
    return ColourValue(int(row[0]), int(row[1]), int(row[2]), int(row[3]))
