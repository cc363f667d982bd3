"""Tests for the uint32 <-> RGBA colour codec."""

from __future__ import annotations

import random

import pytest

from thor.core.colour.codec import (
    PAD_COLOUR,
    UINT32_MAX,
    ColourValue,
    check_uint32,
    decode,
    encode,
    to_int,
)
from thor.core.errors import ChannelOverflowError, ColourFormatError, SketchOverflowError


class TestEncode:
    """Tests for encode()."""

    def test_least_significant_byte_is_red(self):
        """Test the documented example 0x0000ABCD."""
        colour = encode(0x0000ABCD)

        assert colour == ColourValue(r=0xCD, g=0xAB, b=0x00, a=0x00)
        assert colour.hex == "#CDAB0000"

    def test_each_byte_maps_to_one_channel(self):
        """Test a value with every byte distinct."""
        assert encode(0x44332211).as_tuple() == (0x11, 0x22, 0x33, 0x44)

    def test_bounds(self):
        """Test 0 and the maximum uint32."""
        assert encode(0).as_tuple() == (0, 0, 0, 0)
        assert encode(UINT32_MAX).as_tuple() == (255, 255, 255, 255)

    @pytest.mark.parametrize("value", [-1, UINT32_MAX + 1, 2**40])
    def test_out_of_range_rejected(self, value: int):
        """Test values outside 0..2^32-1 raise instead of wrapping."""
        with pytest.raises(SketchOverflowError):
            encode(value)

    @pytest.mark.parametrize("value", [1.5, "12", True, None])
    def test_non_integer_rejected(self, value: object):
        """Test non-integer elements are rejected."""
        with pytest.raises(SketchOverflowError):
            check_uint32(value)

    def test_round_trip_through_int(self):
        """Test to_int inverts encode at a few representative points."""
        for value in (0, 1, 0x0000ABCD, 0x80000000, 0xDEADBEEF, UINT32_MAX):
            assert to_int(encode(value)) == value


class TestDecode:
    """Tests for decode()."""

    def test_decode_hex(self):
        """Test decode accepts #RRGGBBAA."""
        assert decode("#CDAB0000") == encode(0x0000ABCD)

    def test_decode_is_case_insensitive_and_hash_optional(self):
        """Test lower-case digits and a missing '#' are accepted."""
        assert decode("cdab0000") == decode("#CDAB0000")

    def test_decode_inverts_hex(self):
        """Test decode(c.hex) == c."""
        colour = ColourValue(1, 2, 254, 255)
        assert decode(colour.hex) == colour

    @pytest.mark.parametrize(
        "value",
        [
            0,
            1,
            0xFF,
            0x100,
            0xFFFF,
            0x10000,
            0xFFFFFF,
            0x1000000,
            0x7FFFFFFF,
            0x80000000,
            0xFFFFFFFE,
            UINT32_MAX,
        ],
    )
    def test_hex_round_trip_at_byte_boundaries(self, value: int):
        """Test decode(encode(v).hex) == encode(v) where channels carry over."""
        assert decode(encode(value).hex) == encode(value)

    def test_hex_round_trip_random_sample(self):
        """Test decode(encode(v).hex) == encode(v) over seeded random values."""
        rng = random.Random(20240101)
        for value in (rng.randint(0, UINT32_MAX) for _ in range(2000)):
            colour = encode(value)
            assert decode(colour.hex) == colour
            assert to_int(decode(colour.hex)) == value

    @pytest.mark.parametrize(
        "text",
        ["", "#", "#CDAB00", "#CDAB000000", "#GGAB0000", "#CDAB0000\n", " #CDAB0000"],
    )
    def test_malformed_rejected(self, text: str):
        """Test anything but exactly 8 hex digits fails."""
        with pytest.raises(ColourFormatError):
            decode(text)

    def test_format_error_is_value_error(self):
        """Test ColourFormatError can be caught as ValueError."""
        with pytest.raises(ValueError):
            decode("not a colour")


class TestColourValue:
    """Tests for ColourValue."""

    def test_hex_is_upper_case(self):
        """Test canonical hex uses upper-case digits."""
        assert ColourValue(0xAB, 0xCD, 0xEF, 0x01).hex == "#ABCDEF01"

    def test_rgba_text(self):
        """Test rgba() rendering."""
        assert ColourValue(1, 2, 3, 4).rgba() == "rgba(1,2,3,4)"

    def test_channel_out_of_range(self):
        """Test constructing a channel outside 0-255 fails."""
        with pytest.raises(ChannelOverflowError):
            ColourValue(256, 0, 0, 0)
        with pytest.raises(ChannelOverflowError):
            ColourValue(0, 0, 0, -1)

    def test_channel_must_be_int(self):
        """Test non-int channels raise TypeError."""
        with pytest.raises(TypeError):
            ColourValue(1.0, 0, 0, 0)  # type: ignore[arg-type]

    def test_adjust_returns_new_value_and_keeps_hex_in_sync(self):
        """Test adjust leaves the original untouched."""
        colour = ColourValue(10, 20, 30, 40)
        adjusted = colour.adjust("A", -40)

        assert adjusted == ColourValue(10, 20, 30, 0)
        assert adjusted.hex == "#0A141E00"
        assert colour.a == 40

    def test_adjust_overflow(self):
        """Test adjusting past 255 or below 0 fails."""
        colour = ColourValue(250, 5, 0, 0)
        with pytest.raises(ChannelOverflowError):
            colour.adjust("r", 6)
        with pytest.raises(ChannelOverflowError):
            colour.adjust("g", -6)

    def test_adjust_unknown_channel(self):
        """Test an unknown channel name fails."""
        with pytest.raises(ValueError, match="Unknown colour channel"):
            ColourValue(0, 0, 0, 0).adjust("x", 1)

    def test_with_channel(self):
        """Test replacing one channel."""
        assert ColourValue(1, 2, 3, 4).with_channel("b", 99) == ColourValue(1, 2, 99, 4)

    def test_pad_colour_is_white(self):
        """Test the sentinel padding colour."""
        assert PAD_COLOUR.as_tuple() == (255, 255, 255, 255)
