"""Concurrent construction of a colour sketch store.

Encoding fans out to one task per raw sketch (bounded by a semaphore, run in
worker threads). All tasks are joined before any result is consumed; a single
collector then inserts the results in sorted id order and is the only writer
to the store.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping, Sequence
import logging

from thor.core.colour.sketch import ColourSketch
from thor.core.colour.store import ColourSketchStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


async def build_store(
    sketches: Mapping[str, Sequence[int]],
    max_workers: int = DEFAULT_MAX_WORKERS,
    seed_padding: bool = True,
) -> ColourSketchStore:
    """Encode raw sketches and collect them into a new store.

    Args:
        sketches: Raw sketch elements keyed by id
        max_workers: Maximum number of concurrent encoding tasks
        seed_padding: Insert the padding sketch once all sketches are in

    Returns:
        Populated ColourSketchStore

    Raises:
        ValueError: If no sketches are given or max_workers < 1
        SketchOverflowError: If a sketch holds an element outside the uint32
            range (the first failing id in sorted order is raised, after every
            task has finished)
        LengthMismatchError: If sketches differ in length
    """
    if not sketches:
        raise ValueError("Need at least one sketch to build a colour sketch store")
    if max_workers < 1:
        raise ValueError(f"max_workers must be >= 1, got {max_workers}")

    ordering = sorted(sketches)
    semaphore = asyncio.Semaphore(max_workers)

    async def encode_with_limit(sketch_id: str) -> ColourSketch:
        async with semaphore:
            return await asyncio.to_thread(
                ColourSketch.from_values, sketch_id, sketches[sketch_id]
            )

    logger.debug(f"Encoding {len(ordering)} sketches (max {max_workers} concurrent)")
    results = await asyncio.gather(
        *(encode_with_limit(sketch_id) for sketch_id in ordering),
        return_exceptions=True,
    )

    failures = [
        (sketch_id, result)
        for sketch_id, result in zip(ordering, results, strict=True)
        if isinstance(result, BaseException)
    ]
    if failures:
        for sketch_id, error in failures:
            logger.error(f"Failed to colour sketch {sketch_id}: {error}")
        logger.error(f"{len(failures)}/{len(ordering)} sketches could not be coloured")
        raise failures[0][1]

    store = ColourSketchStore()
    for sketch_id, result in zip(ordering, results, strict=True):
        store.insert(sketch_id, result)  # type: ignore[arg-type]

    if seed_padding:
        store.seed_padding()

    logger.info(f"Coloured {len(ordering)} sketches (sketch length {store.sketch_length})")
    return store


def build_store_sync(
    sketches: Mapping[str, Sequence[int]],
    max_workers: int = DEFAULT_MAX_WORKERS,
    seed_padding: bool = True,
) -> ColourSketchStore:
    """Blocking wrapper around ``build_store``."""
    return asyncio.run(build_store(sketches, max_workers=max_workers, seed_padding=seed_padding))
