"""Colour encoding of sketches and the persistent colour sketch store."""

from thor.core.colour.builder import build_store, build_store_sync
from thor.core.colour.codec import PAD_COLOUR, ColourValue, decode, encode, to_int
from thor.core.colour.sketch import ColourSketch
from thor.core.colour.store import PADDING_KEY, ColourSketchStore, read_sketch_length

__all__ = [
    # Codec
    "ColourValue",
    "encode",
    "decode",
    "to_int",
    "PAD_COLOUR",
    # Sketches
    "ColourSketch",
    # Store
    "ColourSketchStore",
    "PADDING_KEY",
    "read_sketch_length",
    "build_store",
    "build_store_sync",
]
