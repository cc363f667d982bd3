"""Hammer OTU tables into images: one square PNG per sample.

Each image is ``sketch_length`` pixels square. Row ``i`` is the colour sketch
of the sample's ``i``-th most abundant genus; padding OTUs and any rows left
over are drawn in the sentinel padding colour.
"""

from __future__ import annotations

import logging
from pathlib import Path

from thor.core.colour.sketch import ColourSketch
from thor.core.colour.store import ColourSketchStore
from thor.core.config.models import HammerConfig
from thor.core.draw.canvas import Canvas, check_canvas_size
from thor.core.hammer.table import OtuTable
from thor.core.utils.formatting import clean_filename
from thor.core.utils.logging import get_logger, log_performance

logger = logging.getLogger(__name__)


def resolve_top_n(config: HammerConfig, sketch_length: int, total_otus: int) -> int:
    """Number of OTUs to keep per sample.

    An explicit ``config.top_n`` is used as-is (and may fail later if it
    exceeds the table or the sketch length). Otherwise the image height is
    filled: ``min(sketch_length, total_otus)``.
    """
    if config.top_n is not None:
        return config.top_n
    return min(sketch_length, total_otus)


def image_path(out_prefix: str | Path, sample: str) -> Path:
    """``<out_prefix>-<sample>.png`` with the sample name made file-safe."""
    out_prefix = Path(out_prefix)
    return out_prefix.with_name(f"{out_prefix.name}-{clean_filename(sample)}.png")


def draw_sample(rows: list[ColourSketch | None], side: int) -> Canvas:
    """Draw one sample's colour rows onto a new canvas."""
    canvas = Canvas(side=side, row_count=len(rows))
    for row in rows:
        if row is None:
            canvas.draw_padding_row()
        else:
            canvas.draw_row(row)
    return canvas


def plan_image_paths(
    out_prefix: str | Path,
    samples: list[str],
    claimed: dict[Path, str] | None = None,
) -> dict[str, Path]:
    """Map each sample to its image path, failing on any file name collision.

    Args:
        out_prefix: Directory and basename for the images
        samples: Sample names in column order
        claimed: Paths already taken (path -> owner label); updated in place
            only when every path is free

    Raises:
        ValueError: If two samples, or a sample and a claimed path, share a file
    """
    claimed = {} if claimed is None else claimed
    planned: dict[str, Path] = {}
    owners: dict[Path, str] = {}
    for sample in samples:
        path = image_path(out_prefix, sample)
        owner = owners.get(path) or claimed.get(path)
        if owner is not None:
            raise ValueError(f"{owner!r} and {sample!r} map to the same image file {path}")
        owners[path] = sample
        planned[sample] = path
    claimed.update(owners)
    return planned


@log_performance
def render_table(
    table_path: str | Path,
    store: ColourSketchStore,
    config: HammerConfig,
    out_prefix: str | Path,
    claimed: dict[Path, str] | None = None,
) -> list[Path]:
    """Render every sample of an OTU table to a PNG.

    Image paths and colours are resolved for all samples before the first
    image is written.

    Args:
        table_path: OTU table file
        store: Loaded reference colour sketch store
        config: Rendering settings
        out_prefix: Directory and basename for the images
        claimed: Image paths already written by earlier tables in the same run

    Returns:
        Paths of the images written, in sample column order

    Raises:
        InputError, TableFormatError: If the table cannot be read
        ValueError: If two images would share a file name
        CanvasSizeError: If top_n exceeds the sketch length
        InsufficientDataError: If top_n exceeds the table's OTUs
        OtuLookupError: If a top OTU has no colour sketch
    """
    table = OtuTable.from_file(table_path, table_format=config.table_format)
    side = store.sketch_length
    n = resolve_top_n(config, side, table.total_otus)
    check_canvas_size(side, n)
    table.keep_top_n(n)
    rows_by_sample = table.colour_top_n(store, alpha_abundance=config.alpha_abundance)
    paths = plan_image_paths(out_prefix, table.sample_names, claimed)

    written: list[Path] = []
    for sample, rows in rows_by_sample.items():
        sample_logger = get_logger(__name__, sample=sample)
        path = paths[sample]
        canvas = draw_sample(rows, side)
        padding_otus = sum(1 for row in rows if row is None)
        padding_rows = padding_otus + (canvas.padding if config.pad else 0)
        canvas.save(path, pad=config.pad)
        sample_logger.info(
            f"Sample {sample}: {len(rows) - padding_otus} OTUs, {padding_rows} padding rows -> {path}"
        )
        written.append(path)

    logger.info(f"Rendered {len(written)} images from {table_path}")
    return written
