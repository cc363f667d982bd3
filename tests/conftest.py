"""Shared pytest fixtures for thor tests."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from thor.core.colour.sketch import ColourSketch
from thor.core.colour.store import ColourSketchStore

LINEAGE = "k__Bacteria; p__Firmicutes; c__Bacilli; o__Bacillales; f__Bacillaceae; g__{genus}; s__"

# Raw sketches matching tests/fixtures/thor/sketches
RAW_SKETCHES: dict[str, list[int]] = {
    "Bacillus": [0x000000FF, 0x0000FF00, 0x00FF0000, 0xFF000000],
    "Clostridium": [0x11223344] * 4,
    "Escherichia": [1, 2, 3, 4],
}

# ============================================================================
# Path Fixtures
# ============================================================================


@pytest.fixture
def project_root() -> Path:
    """Get project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def fixtures_dir() -> Path:
    """Get test fixtures directory."""
    return Path(__file__).parent / "fixtures" / "thor"


@pytest.fixture
def otu_table_path(fixtures_dir: Path) -> Path:
    """Two-sample QIIME table: S1 {Escherichia:5, Bacillus:4, Clostridium:0},
    S2 {Bacillus:5, Clostridium:2, Escherichia:0}."""
    return fixtures_dir / "otu-table.txt"


@pytest.fixture
def sketch_dir(fixtures_dir: Path) -> Path:
    """Directory of raw sketch documents (three genera, length 4)."""
    return fixtures_dir / "sketches"


# ============================================================================
# OTU Table Fixtures
# ============================================================================


@pytest.fixture
def write_otu_table(tmp_path: Path) -> Callable[..., Path]:
    """Factory writing a QIIME OTU table to a temporary file.

    ``abundances`` maps genus -> per-sample counts; each genus becomes one row.
    """

    def _write(
        samples: Sequence[str],
        abundances: dict[str, Sequence[int | str]],
        comments: Sequence[str] = ("# Constructed from biom file",),
        name: str = "table.txt",
    ) -> Path:
        lines = [*comments, "\t".join(["#OTU ID", *samples, "Consensus Lineage"])]
        for otu_id, (genus, counts) in enumerate(abundances.items()):
            fields = [str(otu_id), *(str(c) for c in counts), LINEAGE.format(genus=genus)]
            lines.append("\t".join(fields))
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path

    return _write


# ============================================================================
# Store Fixtures
# ============================================================================


@pytest.fixture
def reference_store() -> ColourSketchStore:
    """Store holding the three reference genera plus the padding sketch."""
    store = ColourSketchStore()
    for sketch_id, values in sorted(RAW_SKETCHES.items()):
        store.insert(sketch_id, ColourSketch.from_values(sketch_id, values))
    store.seed_padding()
    return store


@pytest.fixture
def store_path(reference_store: ColourSketchStore, tmp_path: Path) -> Path:
    """Reference store dumped to disk."""
    return reference_store.dump(tmp_path / "ref-coloursketches.thor")
