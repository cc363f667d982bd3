"""Keyed, persistent store of colour sketches.

The store is built once (see ``thor.core.colour.builder``), dumped to a single
binary artifact and later loaded wholesale for read-only lookups.

Artifact layout (NumPy ``.npz``, no pickled objects)::

    meta     uint8   UTF-8 JSON: format, version, sketch_length, count
    ids      <U..    sketch ids, sorted
    colours  uint8   (count, sketch_length, 4) RGBA pixels, same order as ids

``meta`` is a separate archive member so the sketch length can be read
without decoding the colour payload.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
import csv
import json
import logging
import os
from pathlib import Path
import tempfile
from typing import Any
import zipfile

import numpy as np

from thor.core.colour.codec import PAD_COLOUR
from thor.core.colour.sketch import ColourSketch
from thor.core.errors import (
    DuplicateKeyError,
    InputError,
    LengthMismatchError,
    StoreEmptyError,
    StoreFormatError,
)

logger = logging.getLogger(__name__)

# Reserved id of the sentinel "no data" sketch
PADDING_KEY = "padding"

STORE_FORMAT = "thor.coloursketches"
STORE_VERSION = 1


class ColourSketchStore:
    """Mapping of sketch id to ColourSketch with a uniform sketch length.

    Example:
        >>> store = ColourSketchStore()
        >>> store.insert("Escherichia", ColourSketch.from_values("Escherichia", [1, 2, 3]))
        >>> store.sketch_length
        3
    """

    def __init__(self) -> None:
        self._sketches: dict[str, ColourSketch] = {}
        self._sketch_length: int | None = None

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def sketch_length(self) -> int:
        """Element count shared by every sketch in the store.

        Raises:
            StoreEmptyError: If the store holds no sketches
        """
        if self._sketch_length is None:
            raise StoreEmptyError("Colour sketch store is empty, sketch length is undefined")
        return self._sketch_length

    def lookup(self, sketch_id: str) -> ColourSketch | None:
        """Return the sketch for ``sketch_id``, or None if absent."""
        return self._sketches.get(sketch_id)

    def ids(self) -> list[str]:
        return sorted(self._sketches)

    def __contains__(self, sketch_id: object) -> bool:
        return sketch_id in self._sketches

    def __len__(self) -> int:
        return len(self._sketches)

    def __iter__(self) -> Iterator[str]:
        return iter(self.ids())

    def __repr__(self) -> str:
        return f"ColourSketchStore(count={len(self)}, sketch_length={self._sketch_length})"

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def insert(self, sketch_id: str, sketch: ColourSketch) -> None:
        """Add a sketch under ``sketch_id``.

        The store is left unchanged when any check fails.

        Raises:
            ValueError: If ``sketch.id`` differs from ``sketch_id``
            DuplicateKeyError: If ``sketch_id`` is already present
            LengthMismatchError: If the sketch length differs from the store's
        """
        if sketch.id != sketch_id:
            raise ValueError(f"Sketch id {sketch.id!r} does not match key {sketch_id!r}")
        if sketch_id in self._sketches:
            raise DuplicateKeyError(f"Duplicate sketch id found: {sketch_id}")
        if self._sketch_length is not None and len(sketch) != self._sketch_length:
            raise LengthMismatchError(
                f"Sketch {sketch_id!r} has length {len(sketch)}, "
                f"store sketch length is {self._sketch_length}"
            )
        self._sketches[sketch_id] = sketch
        if self._sketch_length is None:
            self._sketch_length = len(sketch)

    def seed_padding(self) -> ColourSketch:
        """Insert the padding sketch (sketch-length-many sentinel colours).

        Raises:
            StoreEmptyError: If the store is empty (no sketch length yet)
            DuplicateKeyError: If the padding key is already present
        """
        padding = ColourSketch.filled(PADDING_KEY, PAD_COLOUR, self.sketch_length)
        self.insert(PADDING_KEY, padding)
        return padding

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def dump(self, path: str | Path) -> Path:
        """Write the whole store to ``path``, replacing any existing file.

        Returns:
            The path written

        Raises:
            StoreEmptyError: If the store is empty
        """
        path = Path(path)
        ids = self.ids()
        meta = {
            "format": STORE_FORMAT,
            "version": STORE_VERSION,
            "sketch_length": self.sketch_length,
            "count": len(ids),
        }
        colours = np.stack([self._sketches[sketch_id].pixels for sketch_id in ids])

        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as fh:
                np.savez(
                    fh,
                    meta=np.frombuffer(json.dumps(meta).encode("utf-8"), dtype=np.uint8),
                    ids=np.array(ids, dtype=str),
                    colours=colours,
                )
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.info(f"Wrote {len(ids)} colour sketches (length {meta['sketch_length']}) to {path}")
        return path

    def load(self, path: str | Path) -> None:
        """Replace the store's contents with the artifact at ``path``.

        Contents are never merged. On failure the store keeps its
        previous contents.

        Raises:
            InputError: If the file is missing or unreadable
            StoreFormatError: If the artifact is corrupt or inconsistent
        """
        path = Path(path)
        with _open_archive(path) as archive:
            meta = _read_meta(archive, path)
            ids = [str(sketch_id) for sketch_id in _member(archive, "ids", path)]
            colours = _member(archive, "colours", path)

        sketch_length = meta["sketch_length"]
        if colours.dtype != np.uint8 or colours.shape != (meta["count"], sketch_length, 4):
            raise StoreFormatError(
                f"Corrupt colour sketch store {path}: colour payload shape {colours.shape} "
                f"does not match count={meta['count']}, sketch_length={sketch_length}"
            )
        if len(ids) != meta["count"] or len(set(ids)) != len(ids):
            raise StoreFormatError(f"Corrupt colour sketch store {path}: ids are inconsistent")

        sketches: dict[str, ColourSketch] = {}
        for sketch_id, pixels in zip(ids, colours, strict=True):
            try:
                sketches[sketch_id] = ColourSketch(sketch_id, pixels)
            except ValueError as e:
                raise StoreFormatError(f"Corrupt colour sketch store {path}: {e}") from e

        self._sketches = sketches
        self._sketch_length = sketch_length if sketches else None
        logger.info(f"Loaded {len(sketches)} colour sketches (length {sketch_length}) from {path}")

    @classmethod
    def from_file(cls, path: str | Path) -> ColourSketchStore:
        store = cls()
        store.load(path)
        return store

    def write_csv(self, path: str | Path, hex: bool = True, include_padding: bool = False) -> Path:
        """Write one CSV row per sketch: ``id, colour_1, ..., colour_n``.

        Colours are rendered as ``#RRGGBBAA`` (``hex=True``) or ``rgba(r,g,b,a)``.
        """
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", newline="", encoding="utf-8") as fh:
            writer = csv.writer(fh)
            for sketch_id in self.ids():
                if sketch_id == PADDING_KEY and not include_padding:
                    continue
                writer.writerow([sketch_id, *self._sketches[sketch_id].to_csv_fields(hex=hex)])
        logger.debug(f"Wrote colour sketch CSV to {path}")
        return path


def read_sketch_length(path: str | Path) -> int:
    """Read the sketch length of a store artifact without loading its sketches.

    Raises:
        InputError: If the file is missing or unreadable
        StoreFormatError: If the artifact is corrupt
    """
    path = Path(path)
    with _open_archive(path) as archive:
        return _read_meta(archive, path)["sketch_length"]


@contextmanager
def _open_archive(path: Path) -> Iterator[np.lib.npyio.NpzFile]:
    """Open a store artifact lazily; members are decoded on access."""
    try:
        archive = np.load(path, allow_pickle=False)
    except OSError as e:
        raise InputError(f"Cannot read colour sketch store {path}: {e}") from e
    except (ValueError, zipfile.BadZipFile, EOFError) as e:
        raise StoreFormatError(f"Corrupt colour sketch store {path}: {e}") from e

    if not isinstance(archive, np.lib.npyio.NpzFile):
        raise StoreFormatError(f"Not a colour sketch store: {path}")
    try:
        yield archive
    finally:
        archive.close()


def _member(archive: np.lib.npyio.NpzFile, name: str, path: Path) -> np.ndarray:
    try:
        return archive[name]
    except KeyError as e:
        raise StoreFormatError(f"Corrupt colour sketch store {path}: missing {name!r}") from e
    except (ValueError, zipfile.BadZipFile, EOFError, OSError) as e:
        raise StoreFormatError(f"Corrupt colour sketch store {path}: {e}") from e


def _read_meta(archive: np.lib.npyio.NpzFile, path: Path) -> dict[str, Any]:
    try:
        meta = json.loads(_member(archive, "meta", path).tobytes().decode("utf-8"))
    except ValueError as e:
        if isinstance(e, StoreFormatError):
            raise
        raise StoreFormatError(f"Corrupt colour sketch store {path}: unreadable meta") from e
    if not isinstance(meta, dict) or meta.get("format") != STORE_FORMAT:
        raise StoreFormatError(f"Not a colour sketch store: {path}")
    if meta.get("version") != STORE_VERSION:
        raise StoreFormatError(
            f"Unsupported colour sketch store version {meta.get('version')!r} in {path}"
        )
    for field in ("sketch_length", "count"):
        value = meta.get(field)
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise StoreFormatError(f"Invalid {field} {value!r} in colour sketch store {path}")
    return meta
