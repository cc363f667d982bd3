"""Exception hierarchy for thor.

Every error raised by the core derives from ``ThorError``. Where a builtin
exception already describes the failure (``ValueError``, ``OverflowError``,
``LookupError``) the thor error also inherits from it, so callers can catch
either.
"""

from __future__ import annotations


class ThorError(Exception):
    """Base exception for all thor errors."""


# ---------------------------------------------------------------------------
# Input / format
# ---------------------------------------------------------------------------


class InputError(ThorError):
    """Raised when an input file is missing, unreadable or of an unsupported kind."""


class FormatError(ThorError, ValueError):
    """Raised when input content cannot be parsed."""


class ColourFormatError(FormatError):
    """Raised for a malformed hex colour string."""


class TableFormatError(FormatError):
    """Raised for a malformed OTU table (missing header, bad row)."""


class StoreFormatError(FormatError):
    """Raised when a colour sketch store artifact is corrupt or inconsistent."""


class SketchFormatError(FormatError):
    """Raised when a raw sketch document cannot be read."""


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


class SketchOverflowError(ThorError, OverflowError):
    """Raised when a sketch element is outside the unsigned 32-bit range."""


class ChannelOverflowError(ThorError, OverflowError):
    """Raised when a colour channel adjustment leaves the 0-255 range."""


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class StoreError(ThorError):
    """Base exception for colour sketch store misuse."""


class DuplicateKeyError(StoreError):
    """Raised when inserting an id that is already present."""


class LengthMismatchError(StoreError):
    """Raised when a sketch length differs from the store's sketch length."""


class StoreEmptyError(StoreError):
    """Raised when an operation needs at least one sketch in the store."""


class OtuLookupError(ThorError, LookupError):
    """Raised when an OTU has no colour sketch in the reference store."""


# ---------------------------------------------------------------------------
# OTU table state
# ---------------------------------------------------------------------------


class StateError(ThorError):
    """Raised when an OTU table operation is invalid for its current state."""


class AlreadyReducedError(StateError):
    """Raised when top-N reduction is requested a second time."""


class InsufficientDataError(StateError):
    """Raised when more top OTUs are requested than the table holds."""


# ---------------------------------------------------------------------------
# Canvas
# ---------------------------------------------------------------------------


class CanvasError(ThorError):
    """Base exception for canvas misuse."""


class CanvasSizeError(CanvasError, ValueError):
    """Raised when a canvas cannot hold the requested number of rows."""


class WidthMismatchError(CanvasError):
    """Raised when a row's width differs from the canvas side length."""


class CanvasFullError(CanvasError):
    """Raised when drawing onto a canvas that already holds every row."""
