"""OTU tables: parsing, top-N reduction and colour resolution.

Lifecycle::

    UNPARSED --read()--> PARSED --keep_top_n()--> REDUCED

Only genus-level OTUs are kept: a body row is ingested when its lineage
column holds a ``g__<genus>`` segment, and rows sharing a genus are summed.

Supported formats:
    qiime: tab-separated, ``#`` comment lines, a ``#OTU`` header naming the
        sample columns, and a trailing consensus lineage column::

            # Constructed from biom file
            #OTU ID	S1	S2	Consensus Lineage
            0	5	0	k__Bacteria; p__Proteobacteria; ...; g__Escherichia
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
import logging
from pathlib import Path
from typing import TextIO

from thor.core.colour.sketch import ColourSketch
from thor.core.colour.store import ColourSketchStore
from thor.core.errors import (
    AlreadyReducedError,
    InputError,
    InsufficientDataError,
    OtuLookupError,
    StateError,
    TableFormatError,
)

logger = logging.getLogger(__name__)

SUPPORTED_FORMATS = ("qiime",)

COMMENT_PREFIX = "#"
HEADER_PREFIX = "#OTU"
GENUS_MARKER = "g__"
LINEAGE_SEPARATOR = ";"


class TableState(str, Enum):
    """Processing state of an OtuTable."""

    UNPARSED = "unparsed"
    PARSED = "parsed"
    REDUCED = "reduced"


@dataclass(frozen=True)
class Otu:
    """A genus-level OTU and its abundance in one sample.

    ``padding`` marks a zero-abundance entry that was kept only to fill a
    top-N window; it is rendered with the sentinel colour, not looked up.
    """

    name: str
    abundance: int
    padding: bool = False


def genus_from_lineage(lineage: str) -> str | None:
    """Return the genus named in a consensus lineage, or None.

    Example:
        >>> genus_from_lineage("k__Bacteria; p__Firmicutes; g__Bacillus; s__")
        'Bacillus'
        >>> genus_from_lineage("k__Bacteria; p__Firmicutes; g__") is None
        True
    """
    for segment in lineage.split(LINEAGE_SEPARATOR):
        segment = segment.strip()
        if segment.startswith(GENUS_MARKER):
            genus = segment[len(GENUS_MARKER) :].strip()
            return genus or None
    return None


def _parse_abundance(raw: str, line_no: int, sample: str) -> int:
    text = raw.strip()
    try:
        value = int(text)
    except ValueError:
        try:
            number = float(text)
        except ValueError:
            number = None
        if number is None or not number.is_integer():
            raise TableFormatError(
                f"Line {line_no}: abundance {raw!r} for sample {sample!r} is not an integer"
            ) from None
        value = int(number)
    if value < 0:
        raise TableFormatError(f"Line {line_no}: negative abundance {value} for sample {sample!r}")
    return value


class OtuTable:
    """Sample-by-genus abundance table.

    Args:
        table_format: Input format (currently only ``"qiime"``)

    Raises:
        InputError: If the format is unsupported
    """

    def __init__(self, table_format: str = "qiime") -> None:
        if table_format not in SUPPORTED_FORMATS:
            raise InputError(f"Unsupported OTU table format: {table_format}")
        self.table_format = table_format
        self.path: Path | None = None
        self.state = TableState.UNPARSED
        self._comments: list[str] = []
        self._sample_names: list[str] = []
        self._sample_data: list[dict[str, int]] = []
        self._top_n: list[list[Otu]] = []
        self._total_otus = 0
        self._rows_read = 0

    @classmethod
    def from_file(cls, path: str | Path, table_format: str = "qiime") -> OtuTable:
        """Construct and read a table in one step."""
        table = cls(table_format)
        table.read(path)
        return table

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def sample_names(self) -> list[str]:
        return list(self._sample_names)

    @property
    def num_samples(self) -> int:
        return len(self._sample_names)

    @property
    def total_otus(self) -> int:
        """Number of distinct genus-level OTUs in the table."""
        return self._total_otus

    @property
    def rows_read(self) -> int:
        """Number of body rows ingested (rows without a genus are not counted)."""
        return self._rows_read

    @property
    def comments(self) -> list[str]:
        return list(self._comments)

    def comments_text(self) -> str:
        """Comment lines joined in file order (newlines kept)."""
        return "".join(self._comments)

    def sample_name(self, index: int) -> str:
        try:
            return self._sample_names[index]
        except IndexError:
            raise IndexError(
                f"Sample index {index} out of range ({self.num_samples} samples)"
            ) from None

    def abundances(self, sample: str) -> dict[str, int]:
        """Genus -> abundance map for a parsed (not yet reduced) sample."""
        if self.state is not TableState.PARSED:
            raise StateError(
                f"Abundances are only available in the parsed state (now {self.state.value})"
            )
        return dict(self._sample_data[self._sample_index(sample)])

    def top_n(self, sample: str) -> list[Otu]:
        """Top-N OTUs of a sample, most abundant first."""
        if self.state is not TableState.REDUCED:
            raise StateError("keep_top_n() must be run before reading top OTUs")
        return list(self._top_n[self._sample_index(sample)])

    def _sample_index(self, sample: str) -> int:
        try:
            return self._sample_names.index(sample)
        except ValueError:
            raise KeyError(f"Unknown sample: {sample}") from None

    # ------------------------------------------------------------------
    # Parsing
    # ------------------------------------------------------------------

    def read(self, path: str | Path) -> None:
        """Read a table file (UNPARSED -> PARSED).

        Raises:
            StateError: If the table was already read
            InputError: If the file cannot be opened
            TableFormatError: If the content is malformed
        """
        if self.state is not TableState.UNPARSED:
            raise StateError(f"OTU table already read from {self.path}")
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8", newline="") as fh:
                self._read_qiime(fh)
        except OSError as e:
            raise InputError(f"Cannot read OTU table {path}: {e}") from e
        except UnicodeDecodeError as e:
            raise TableFormatError(f"{path}: not a UTF-8 text file ({e})") from e
        except TableFormatError as e:
            raise TableFormatError(f"{path}: {e}") from e

        self.path = path
        self.state = TableState.PARSED
        logger.info(
            f"Read OTU table {path}: {self.num_samples} samples, "
            f"{self._total_otus} genus-level OTUs from {self._rows_read} rows"
        )

    def _read_qiime(self, fh: TextIO) -> None:
        lines = enumerate(fh, start=1)
        comments: list[str] = []

        # Comment block, terminated by the #OTU header
        header: list[str] | None = None
        for line_no, line in lines:
            if not line.startswith(COMMENT_PREFIX):
                raise TableFormatError(
                    f"Line {line_no}: no {HEADER_PREFIX} header line found in QIIME OTU table"
                )
            if line.startswith(HEADER_PREFIX):
                header = line.rstrip("\r\n").split("\t")
                break
            comments.append(line)
        if header is None:
            raise TableFormatError(f"No {HEADER_PREFIX} header line found in QIIME OTU table")

        samples = [name.strip() for name in header[1:-1]]
        if not samples:
            raise TableFormatError(f"{HEADER_PREFIX} header names no sample columns")
        if len(set(samples)) != len(samples):
            raise TableFormatError(f"{HEADER_PREFIX} header has duplicate sample names")
        sample_data: list[dict[str, int]] = [{} for _ in samples]
        expected_columns = len(samples) + 2
        rows_read = 0

        for line_no, line in lines:
            row = line.rstrip("\r\n")
            if not row.strip():
                continue
            fields = row.split("\t")
            if len(fields) != expected_columns:
                raise TableFormatError(
                    f"Line {line_no}: expected {expected_columns} columns, found {len(fields)}"
                )
            genus = genus_from_lineage(fields[-1])
            if genus is None:
                continue
            for i, sample in enumerate(samples):
                value = _parse_abundance(fields[i + 1], line_no, sample)
                sample_data[i][genus] = sample_data[i].get(genus, 0) + value
            rows_read += 1

        self._comments = comments
        self._sample_names = samples
        self._sample_data = sample_data
        self._top_n = [[] for _ in samples]
        self._total_otus = len(sample_data[0])
        self._rows_read = rows_read

    # ------------------------------------------------------------------
    # Reduction
    # ------------------------------------------------------------------

    def keep_top_n(self, n: int) -> None:
        """Keep only the ``n`` most abundant OTUs of each sample (PARSED -> REDUCED).

        Ordering is by descending abundance, ties broken by ascending genus
        name, so the result is reproducible. Zero-abundance entries inside the
        window are flagged as padding. Per-sample abundance maps are released
        afterwards.

        Raises:
            AlreadyReducedError: If called a second time
            StateError: If the table has not been read
            ValueError: If n < 1
            InsufficientDataError: If n exceeds the number of distinct OTUs
        """
        if self.state is TableState.REDUCED:
            raise AlreadyReducedError("keep_top_n() has already been run on this OTU table")
        if self.state is not TableState.PARSED:
            raise StateError("OTU table must be read before keep_top_n()")
        if n < 1:
            raise ValueError(f"n must be >= 1, got {n}")
        if n > self._total_otus:
            raise InsufficientDataError(
                f"Requested top {n} OTUs but the table only holds {self._total_otus} "
                f"genus-level OTUs"
            )

        for index in range(self.num_samples):
            self._reduce_sample(index, n)

        self.state = TableState.REDUCED
        logger.debug(f"Kept top {n} OTUs for {self.num_samples} samples")

    def _reduce_sample(self, index: int, n: int) -> None:
        """Sort one sample and store its top ``n``; touches only that sample's slot."""
        ranked = sorted(self._sample_data[index].items(), key=lambda item: (-item[1], item[0]))
        window = [Otu(name, abundance) for name, abundance in ranked[:n]]
        self._top_n[index] = [
            replace(otu, padding=True) if otu.abundance == 0 else otu for otu in window
        ]
        self._sample_data[index] = {}

    # ------------------------------------------------------------------
    # Colour resolution
    # ------------------------------------------------------------------

    def colour_top_n(
        self, store: ColourSketchStore, alpha_abundance: bool = False
    ) -> dict[str, list[ColourSketch | None]]:
        """Resolve each sample's top-N OTUs to colour sketches.

        Padding entries are returned as None and never looked up.

        Args:
            store: Reference colour sketch store
            alpha_abundance: Replace each sketch's alpha channel with the OTU's
                abundance relative to the sample's most abundant OTU (0-255)

        Returns:
            Sample name -> ordered rows, in sample column order

        Raises:
            StateError: If keep_top_n() has not been run
            OtuLookupError: If an OTU has no sketch in the store
        """
        if self.state is not TableState.REDUCED:
            raise StateError("keep_top_n() must be run before colour_top_n()")

        rows_by_sample: dict[str, list[ColourSketch | None]] = {}
        for sample, otus in zip(self._sample_names, self._top_n, strict=True):
            max_abundance = max((otu.abundance for otu in otus), default=0)
            rows: list[ColourSketch | None] = []
            for otu in otus:
                if otu.padding:
                    rows.append(None)
                    continue
                sketch = store.lookup(otu.name)
                if sketch is None:
                    raise OtuLookupError(
                        f"Sample {sample}: the genus name {otu.name!r} "
                        f"(abundance: {otu.abundance}) could not be found in the colour sketches"
                    )
                if alpha_abundance:
                    sketch = sketch.with_channel("a", round(255 * otu.abundance / max_abundance))
                rows.append(sketch)
            rows_by_sample[sample] = rows
        return rows_by_sample
