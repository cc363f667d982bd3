"""Reading raw sketches produced by an external sketching tool.

Each sketch is a JSON document holding an array of unsigned integers under
``sketch`` (or ``Sketch``). The sketch id is the file name with its
directory and ``.sketch`` / ``.json`` suffix removed, e.g.
``refs/Escherichia.sketch`` -> ``Escherichia``.
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictInt, ValidationError

from thor.core.errors import DuplicateKeyError, InputError, SketchFormatError

logger = logging.getLogger(__name__)

SKETCH_SUFFIXES = (".sketch", ".json")


class SketchDocument(BaseModel):
    """On-disk raw sketch."""

    model_config = ConfigDict(extra="ignore")

    sketch: list[StrictInt] = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("sketch", "Sketch"),
        description="Sketch elements (unsigned integers)",
    )


def sketch_id_from_path(path: str | Path) -> str:
    """Strip directory and sketch suffix from a file name."""
    name = Path(path).name
    for suffix in SKETCH_SUFFIXES:
        if name.endswith(suffix):
            return name[: -len(suffix)]
    return name


def read_sketch(path: str | Path) -> list[int]:
    """Read one raw sketch file.

    Raises:
        InputError: If the file cannot be read
        SketchFormatError: If the file is not a valid sketch document
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise InputError(f"Cannot read sketch file {path}: {e}") from e
    try:
        return SketchDocument.model_validate_json(text).sketch
    except ValidationError as e:
        raise SketchFormatError(f"Invalid sketch file {path}: {e}") from e


def find_sketch_files(directory: str | Path, recursive: bool = False) -> list[Path]:
    """List sketch files in a directory, sorted by path."""
    directory = Path(directory)
    if not directory.is_dir():
        raise InputError(f"Sketch directory does not exist: {directory}")
    candidates = directory.rglob("*") if recursive else directory.glob("*")
    return sorted(p for p in candidates if p.is_file() and p.name.endswith(SKETCH_SUFFIXES))


def load_sketch_collection(directory: str | Path, recursive: bool = False) -> dict[str, list[int]]:
    """Read every sketch in ``directory`` keyed by sketch id.

    Raises:
        InputError: If the directory is missing or holds no sketches
        SketchFormatError: If a sketch file is invalid
        DuplicateKeyError: If two files map to the same sketch id
    """
    files = find_sketch_files(directory, recursive=recursive)
    if not files:
        raise InputError(f"No sketch files ({', '.join(SKETCH_SUFFIXES)}) found in {directory}")

    collection: dict[str, list[int]] = {}
    sources: dict[str, Path] = {}
    for path in files:
        sketch_id = sketch_id_from_path(path)
        if sketch_id in collection:
            raise DuplicateKeyError(
                f"Duplicate sketch name found: {sketch_id} ({sources[sketch_id]}, {path})"
            )
        collection[sketch_id] = read_sketch(path)
        sources[sketch_id] = path

    logger.info(f"Read {len(collection)} sketches from {directory}")
    return collection
