"""Command-line interface for thor (Transforming Hashed OTUs to RGB).

Subcommands:
    colour  Colour a reference set of sketches and store them
    hammer  Hammer OTU tables into images using the stored colour sketches
"""

from __future__ import annotations

import argparse
import asyncio
from datetime import datetime
import logging
from pathlib import Path
import sys

from pydantic import ValidationError
from rich.console import Console

from thor.core.colour.builder import build_store
from thor.core.colour.store import ColourSketchStore
from thor.core.config.loader import load_thor_config
from thor.core.config.models import ThorConfig
from thor.core.errors import InputError, ThorError
from thor.core.hammer.render import render_table
from thor.core.sketches import load_sketch_collection
from thor.core.utils.logging import configure_logging

__version__ = "0.1.0"

console = Console()
logger = logging.getLogger(__name__)

STORE_SUFFIX = "-coloursketches.thor"
CSV_SUFFIX = "-coloursketches.csv"


def default_out_file() -> str:
    """``./thor-<timestamp>`` basename used when --out is not given."""
    return f"./thor-{datetime.now().strftime('%Y%m%d%H%M%S')}"


def prepare_output(out_file: str, config: ThorConfig) -> Path:
    """Create the output directory and start logging to ``<out_file>.log``."""
    out = Path(out_file)
    if not out.is_absolute() and out.parent == Path("."):
        out = Path(config.output_dir) / out
    out.parent.mkdir(parents=True, exist_ok=True)

    configure_logging(
        level=config.logging.level,
        format_string=config.logging.format,
        filename=str(out.with_name(out.name + ".log")),
        structured=config.logging.structured,
    )
    logger.info(f"thor (version {__version__})")
    return out


def load_config_or_exit(path: str | None) -> ThorConfig:
    try:
        return load_thor_config(path)
    except (FileNotFoundError, ValueError, ValidationError) as e:
        console.print(f"[red]ERROR: Could not load config: {e}[/red]")
        sys.exit(1)


def check_file(path: Path, description: str) -> None:
    """Raise InputError unless ``path`` is an existing, readable file."""
    if not path.exists():
        raise InputError(f"{description} does not exist: {path}")
    if not path.is_file():
        raise InputError(f"{description} is not a file: {path}")


# ---------------------------------------------------------------------------
# colour
# ---------------------------------------------------------------------------


async def run_colour_async(sketch_dir: Path, out: Path, config: ThorConfig) -> Path:
    """Colour every sketch in ``sketch_dir`` and dump the store.

    Returns:
        Path of the store artifact
    """
    colour_config = config.colour
    logger.info("starting the colour subcommand")
    logger.info(f"\tsketch directory: {sketch_dir} (recursive: {colour_config.recursive})")
    logger.info(f"\toutput file basename: {out}")
    logger.info(f"\tmax workers: {colour_config.max_workers}")

    sketches = load_sketch_collection(sketch_dir, recursive=colour_config.recursive)
    console.print(f"[green]Found {len(sketches)} sketches[/green]")

    store = await build_store(sketches, max_workers=colour_config.max_workers)
    store_path = store.dump(out.with_name(out.name + STORE_SUFFIX))

    if colour_config.store_csv:
        csv_path = store.write_csv(out.with_name(out.name + CSV_SUFFIX), hex=colour_config.csv_hex)
        console.print(f"[green]CSV:[/green] {csv_path}")

    console.print(
        f"[green]Coloured {len(sketches)} sketches (length {store.sketch_length})[/green] "
        f"-> {store_path}"
    )
    return store_path


def run_colour(args: argparse.Namespace) -> None:
    config = load_config_or_exit(args.config)
    updates = {}
    if args.recursive:
        updates["recursive"] = True
    if args.store_csv:
        updates["store_csv"] = True
    if args.rgba:
        updates["csv_hex"] = False
    if args.processors is not None:
        updates["max_workers"] = args.processors
    config = config.model_copy(update={"colour": config.colour.model_copy(update=updates)})

    out = prepare_output(args.out, config)
    try:
        asyncio.run(run_colour_async(Path(args.sketch_dir), out, config))
    except (ThorError, ValueError, OSError) as e:
        logger.error(f"colour failed: {e}")
        console.print(f"[red]ERROR: {e}[/red]")
        sys.exit(1)
    logger.info("finished")


# ---------------------------------------------------------------------------
# hammer
# ---------------------------------------------------------------------------


def table_prefixes(tables: list[Path], out: Path) -> list[Path]:
    """Image prefix for each table: ``out`` alone, or ``out-<table stem>`` for several.

    Raises:
        InputError: If two tables share a file stem (their images would collide)
    """
    if len(tables) == 1:
        return [out]
    owners: dict[str, Path] = {}
    for table in tables:
        if table.stem in owners:
            raise InputError(
                f"OTU tables {owners[table.stem]} and {table} share the name {table.stem!r}; "
                f"rename one so their images do not overwrite each other"
            )
        owners[table.stem] = table
    return [out.with_name(f"{out.name}-{table.stem}") for table in tables]


def run_hammer_tables(
    tables: list[Path], store_path: Path, out: Path, config: ThorConfig
) -> list[Path]:
    """Render every sample of every table.

    Returns:
        Paths of all images written
    """
    hammer_config = config.hammer
    logger.info("starting the hammer subcommand")
    logger.info("checking parameters...")
    for table in tables:
        check_file(table, "OTU table")
    check_file(store_path, "Colour sketch store")
    prefixes = table_prefixes(tables, out)
    logger.info("\tinput files:")
    for table in tables:
        logger.info(f"\t\t{table}")
    logger.info(f"\tcolour sketches: {store_path}")
    logger.info(f"\toutput file basename: {out}")
    logger.info(f"\tinclude OTU abundance: {hammer_config.alpha_abundance}")
    logger.info(f"\tpad images: {hammer_config.pad}")

    store = ColourSketchStore.from_file(store_path)
    console.print(
        f"[green]Loaded {len(store)} colour sketches (length {store.sketch_length})[/green]"
    )

    claimed: dict[Path, str] = {}
    written: list[Path] = []
    for table, prefix in zip(tables, prefixes, strict=True):
        images = render_table(table, store, hammer_config, prefix, claimed=claimed)
        console.print(f"[green]{table}:[/green] {len(images)} images")
        written.extend(images)
    return written


def run_hammer(args: argparse.Namespace) -> None:
    config = load_config_or_exit(args.config)
    updates: dict[str, object] = {}
    if args.top_n is not None:
        updates["top_n"] = args.top_n
    if args.no_pad:
        updates["pad"] = False
    if args.alpha_abundance:
        updates["alpha_abundance"] = True
    config = config.model_copy(update={"hammer": config.hammer.model_copy(update=updates)})

    out = prepare_output(args.out, config)
    try:
        written = run_hammer_tables(
            [Path(table) for table in args.otu_tables], Path(args.colour_sketches), out, config
        )
    except (ThorError, ValueError, OSError) as e:
        logger.error(f"hammer failed: {e}")
        console.print(f"[red]ERROR: {e}[/red]")
        sys.exit(1)
    console.print(f"[bold green]Wrote {len(written)} images[/bold green]")
    logger.info("finished")


def build_arg_parser() -> argparse.ArgumentParser:
    """Build argument parser for CLI."""
    p = argparse.ArgumentParser(
        prog="thor",
        description="thor - Transforming Hashed OTUs to RGB",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = p.add_subparsers(dest="cmd", required=True)

    def add_common(parser: argparse.ArgumentParser) -> None:
        parser.add_argument(
            "-o",
            "--out",
            default=default_out_file(),
            help="Directory and basename for saving the outfile(s)",
        )
        parser.add_argument("--config", default=None, help="Path to thor config (JSON or YAML)")

    colour = sub.add_parser("colour", help="Colour a reference set of sketches")
    colour.add_argument(
        "-d", "--sketch-dir", default="./", help="Directory containing the sketches to colour"
    )
    colour.add_argument(
        "--recursive", action="store_true", help="Recursively search the sketch directory"
    )
    colour.add_argument(
        "--store-csv",
        action="store_true",
        help="Also write the colour sketches to a plain text CSV file",
    )
    colour.add_argument(
        "--rgba", action="store_true", help="Write CSV colours as rgba(r,g,b,a) instead of hex"
    )
    colour.add_argument(
        "-p", "--processors", type=int, default=None, help="Number of concurrent encoding tasks"
    )
    add_common(colour)

    hammer = sub.add_parser("hammer", help="Hammer OTU tables into images")
    hammer.add_argument(
        "-i",
        "--otu-tables",
        nargs="+",
        required=True,
        help="Input OTU tables to transform into images",
    )
    hammer.add_argument(
        "-c",
        "--colour-sketches",
        required=True,
        help="Reference colour sketches (from `thor colour`)",
    )
    hammer.add_argument(
        "--top-n", type=int, default=None, help="OTUs kept per sample (default: sketch length)"
    )
    hammer.add_argument(
        "--no-pad", action="store_true", help="Trim images instead of padding unused rows"
    )
    hammer.add_argument(
        "--alpha-abundance",
        action="store_true",
        help="Replace the alpha channel of the colour sketches with the OTU abundance",
    )
    add_common(hammer)

    return p


def main(argv: list[str] | None = None) -> None:
    """Main entry point for CLI."""
    p = build_arg_parser()
    args = p.parse_args(argv)

    if args.cmd == "colour":
        run_colour(args)
    elif args.cmd == "hammer":
        run_hammer(args)


if __name__ == "__main__":
    main()
