"""Bijective mapping between unsigned 32-bit integers and RGBA colours.

Bit layout (least significant first)::

    bits  0-7  -> R
    bits  8-15 -> G
    bits 16-23 -> B
    bits 24-31 -> A

Example:
    >>> encode(0x0000ABCD)
    ColourValue(r=205, g=171, b=0, a=0)
    >>> encode(0x0000ABCD).hex
    '#CDAB0000'
    >>> decode("#CDAB0000") == encode(0x0000ABCD)
    True
"""

from __future__ import annotations

from dataclasses import dataclass
import numbers
import re
from typing import Literal

from thor.core.errors import ChannelOverflowError, ColourFormatError, SketchOverflowError

UINT32_MAX = 0xFFFFFFFF
CHANNEL_MAX = 0xFF

Channel = Literal["r", "g", "b", "a"]
CHANNELS: tuple[Channel, ...] = ("r", "g", "b", "a")

_HEX_RE = re.compile(r"#?([0-9A-Fa-f]{8})")


@dataclass(frozen=True)
class ColourValue:
    """A single 8-bit RGBA colour.

    Immutable: channel adjustments return a new value, so ``hex`` always
    reflects the channels.
    """

    r: int
    g: int
    b: int
    a: int

    def __post_init__(self) -> None:
        for channel in CHANNELS:
            value = getattr(self, channel)
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"Channel {channel} must be an int, got {type(value).__name__}")
            if not 0 <= value <= CHANNEL_MAX:
                raise ChannelOverflowError(
                    f"Channel {channel}={value} is outside the range 0-{CHANNEL_MAX}"
                )

    @property
    def hex(self) -> str:
        """Canonical ``#RRGGBBAA`` form (upper-case digits)."""
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}{self.a:02X}"

    def rgba(self) -> str:
        """Textual ``rgba(r,g,b,a)`` form."""
        return f"rgba({self.r},{self.g},{self.b},{self.a})"

    def as_tuple(self) -> tuple[int, int, int, int]:
        return (self.r, self.g, self.b, self.a)

    def with_channel(self, channel: str, value: int) -> ColourValue:
        """Return a copy with one channel replaced.

        Raises:
            ValueError: If channel is not one of r/g/b/a
            ChannelOverflowError: If value is outside 0-255
        """
        key = channel_key(channel)
        channels = {c: getattr(self, c) for c in CHANNELS}
        channels[key] = value
        return ColourValue(**channels)

    def adjust(self, channel: str, delta: int) -> ColourValue:
        """Return a copy with ``delta`` added to one channel.

        Raises:
            ValueError: If channel is not one of r/g/b/a
            ChannelOverflowError: If the adjusted channel leaves 0-255
        """
        key = channel_key(channel)
        current = getattr(self, key)
        if not 0 <= current + delta <= CHANNEL_MAX:
            raise ChannelOverflowError(
                f"Adjusting {key}={current} by {delta} would leave the range 0-{CHANNEL_MAX}"
            )
        return self.with_channel(key, current + delta)


def channel_key(channel: str) -> Channel:
    key = channel.lower()
    if key not in CHANNELS:
        raise ValueError(f"Unknown colour channel {channel!r}, expected one of R/G/B/A")
    return key  # type: ignore[return-value]


def check_uint32(value: object) -> int:
    """Validate that value is an integer in the unsigned 32-bit range.

    Raises:
        SketchOverflowError: If value is not an int or is out of range
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise SketchOverflowError(f"Sketch element {value!r} is not an integer")
    if not 0 <= value <= UINT32_MAX:
        raise SketchOverflowError(
            f"Sketch element {value} is outside the unsigned 32-bit range (0-{UINT32_MAX})"
        )
    return int(value)


def encode(value: int) -> ColourValue:
    """Encode an unsigned 32-bit integer as a colour."""
    value = check_uint32(value)
    return ColourValue(
        r=value & CHANNEL_MAX,
        g=(value >> 8) & CHANNEL_MAX,
        b=(value >> 16) & CHANNEL_MAX,
        a=(value >> 24) & CHANNEL_MAX,
    )


def to_int(colour: ColourValue) -> int:
    """Inverse of ``encode``."""
    return colour.r | (colour.g << 8) | (colour.b << 16) | (colour.a << 24)


def decode(text: str) -> ColourValue:
    """Parse ``#RRGGBBAA`` (leading ``#`` optional) into a colour.

    Raises:
        ColourFormatError: If text is not exactly 8 hex digits
    """
    match = _HEX_RE.fullmatch(text) if isinstance(text, str) else None
    if match is None:
        raise ColourFormatError(f"Invalid hex colour: {text!r} (expected #RRGGBBAA)")
    digits = match.group(1)
    return ColourValue(
        r=int(digits[0:2], 16),
        g=int(digits[2:4], 16),
        b=int(digits[4:6], 16),
        a=int(digits[6:8], 16),
    )


# Sentinel "no data" colour, used for the store's padding sketch and canvas padding
PAD_VALUE = UINT32_MAX
PAD_COLOUR = encode(PAD_VALUE)
