"""Tests for ColourSketch."""

from __future__ import annotations

import numpy as np
import pytest

from thor.core.colour.codec import ColourValue, encode
from thor.core.colour.sketch import ColourSketch
from thor.core.errors import ChannelOverflowError, SketchOverflowError


class TestConstruction:
    """Tests for building colour sketches."""

    def test_from_values_encodes_each_element(self):
        """Test element i becomes encode(element i)."""
        values = [0x0000ABCD, 0, 0xFFFFFFFF]
        sketch = ColourSketch.from_values("Escherichia", values)

        assert sketch.id == "Escherichia"
        assert len(sketch) == 3
        assert list(sketch) == [encode(v) for v in values]
        assert sketch.values() == values

    def test_from_values_reports_sketch_and_index(self):
        """Test the overflow message names the sketch and element."""
        with pytest.raises(SketchOverflowError, match=r"'Bacillus', element 2"):
            ColourSketch.from_values("Bacillus", [1, 2, 2**32])

    def test_from_colours(self):
        """Test building from ColourValue objects."""
        colours = [ColourValue(1, 2, 3, 4), ColourValue(5, 6, 7, 8)]
        sketch = ColourSketch.from_colours("x", colours)

        assert sketch.colours == tuple(colours)

    def test_filled(self):
        """Test a sketch of repeated colour."""
        sketch = ColourSketch.filled("pad", ColourValue(255, 255, 255, 255), 5)

        assert len(sketch) == 5
        assert {c.hex for c in sketch} == {"#FFFFFFFF"}

    @pytest.mark.parametrize(
        "pixels",
        [np.zeros((0, 4), dtype=np.uint8), np.zeros((3, 3), dtype=np.uint8), np.zeros(4)],
    )
    def test_bad_shape_rejected(self, pixels: np.ndarray):
        """Test pixel arrays must be non-empty (length, 4)."""
        with pytest.raises(ValueError):
            ColourSketch("x", pixels)

    def test_empty_id_rejected(self):
        """Test an id is required."""
        with pytest.raises(ValueError):
            ColourSketch("", [[0, 0, 0, 0]])

    def test_out_of_range_pixels_rejected(self):
        """Test pixel values outside 0-255 are not silently truncated."""
        with pytest.raises(ChannelOverflowError):
            ColourSketch("x", [[0, 0, 0, 300]])

    @pytest.mark.parametrize(
        "pixels",
        [[[1.7, 0, 0, 0]], [[1.0, 2.0, 3.0, 4.0]], np.ones((1, 4), dtype=bool)],
    )
    def test_non_integer_pixels_rejected(self, pixels):
        """Test float and bool channel values are not truncated into uint8."""
        with pytest.raises(ValueError, match="integer channel values"):
            ColourSketch("x", pixels)

    def test_pixels_are_read_only(self):
        """Test the pixel buffer cannot be mutated in place."""
        sketch = ColourSketch.from_values("x", [1, 2])

        with pytest.raises(ValueError):
            sketch.pixels[0, 0] = 9

    def test_source_array_is_copied(self):
        """Test later changes to the source array do not leak in."""
        source = np.zeros((2, 4), dtype=np.uint8)
        sketch = ColourSketch("x", source)
        source[0, 0] = 7

        assert sketch[0].r == 0


class TestAccess:
    """Tests for indexing and equality."""

    def test_index_and_slice(self):
        """Test integer and slice indexing."""
        sketch = ColourSketch.from_values("x", [1, 2, 3])

        assert sketch[1] == encode(2)
        assert sketch[1:] == (encode(2), encode(3))

    def test_equality(self):
        """Test equality compares id and colours."""
        a = ColourSketch.from_values("x", [1, 2])
        assert a == ColourSketch.from_values("x", [1, 2])
        assert a != ColourSketch.from_values("y", [1, 2])
        assert a != ColourSketch.from_values("x", [1, 3])


class TestTransforms:
    """Tests for adjust/with_channel."""

    def test_adjust_every_colour(self):
        """Test adjust applies to every element and returns a new sketch."""
        sketch = ColourSketch.from_colours("x", [ColourValue(0, 0, 0, 10), ColourValue(0, 0, 0, 20)])
        adjusted = sketch.adjust("a", 5)

        assert [c.a for c in adjusted] == [15, 25]
        assert [c.a for c in sketch] == [10, 20]

    def test_adjust_overflow_names_element(self):
        """Test overflow reports the first offending element."""
        sketch = ColourSketch.from_colours("x", [ColourValue(0, 0, 0, 0), ColourValue(0, 0, 0, 250)])

        with pytest.raises(ChannelOverflowError, match="element 1"):
            sketch.adjust("A", 10)

    def test_with_channel(self):
        """Test setting a channel for every colour."""
        sketch = ColourSketch.from_values("x", [0xFFFFFFFF, 0])

        assert [c.a for c in sketch.with_channel("a", 128)] == [128, 128]

    def test_with_channel_out_of_range(self):
        """Test with_channel rejects values outside 0-255."""
        with pytest.raises(ChannelOverflowError):
            ColourSketch.from_values("x", [1]).with_channel("r", 256)


class TestCsv:
    """Tests for CSV rendering."""

    def test_hex_line(self):
        """Test the id followed by hex colours."""
        sketch = ColourSketch.from_values("Escherichia", [0x0000ABCD, 0xFFFFFFFF])

        assert sketch.to_csv_line() == "Escherichia,#CDAB0000,#FFFFFFFF"

    def test_rgba_fields(self):
        """Test rgba() rendering."""
        sketch = ColourSketch.from_values("x", [0x04030201])

        assert sketch.to_csv_fields(hex=False) == ["rgba(1,2,3,4)"]
