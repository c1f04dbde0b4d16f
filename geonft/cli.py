from __future__ import annotations

import sys
from enum import Enum
from pathlib import Path
from typing import List, Optional

import typer

from geonft.config import (
    BATCH_SIZE,
    DEFAULT_NFT,
    DEFAULT_TABLE,
    ENV_DB,
    ENV_KIND,
    ENV_NFT,
    ENV_SET,
    ENV_TABLE,
)
from geonft.datasources import iter_country_networks, open_source
from geonft.errors import GeonftError
from geonft.output.listing import write_intervals, write_networks
from geonft.pipeline import CollectStats, collect_intervals
from geonft.processing.merge import MergeStrategy
from geonft.sinks.nftables import NftSetLoader
from geonft.utils.logging import get_logger, setup_logging

app = typer.Typer(
    help=(
        "Build the IPv4 ranges of a set of countries from a GeoIP database, "
        "merged into the fewest intervals, and print them or load them into an nftables set."
    ),
)

log = get_logger(__name__)


class SourceKind(str, Enum):
    mmdb = "mmdb"
    maxmind = "maxmind"
    geofeed = "geofeed"


class OutputFormat(str, Enum):
    range = "range"
    cidr = "cidr"


class Family(str, Enum):
    ipv4 = "4"
    ipv6 = "6"
    all = "all"


def _require_countries(countries: Optional[List[str]]) -> List[str]:
    if not countries:
        raise typer.BadParameter(
            "need to specify at least one ISO country code",
            param_hint="COUNTRY...",
        )
    return countries


def _fail(e: Exception) -> typer.Exit:
    typer.echo(f"Error: {e}", err=True)
    return typer.Exit(code=1)


COUNTRIES_ARG = typer.Argument(
    None,
    metavar="COUNTRY...",
    help="ISO 3166-1 alpha-2 country codes, e.g. IT FR.",
    show_default=False,
)
DB_OPT = typer.Option(
    ...,
    "--db",
    "-d",
    envvar=ENV_DB,
    exists=True,
    help="GeoIP database: .mmdb file, GeoLite2 Country CSV folder, or geofeed CSV.",
)
KIND_OPT = typer.Option(
    SourceKind.mmdb,
    "--kind",
    "-k",
    envvar=ENV_KIND,
    help="Type of database: mmdb | maxmind | geofeed",
)
VERBOSE_OPT = typer.Option(
    0,
    "--verbose",
    "-v",
    count=True,
    help="-v for progress, -vv for per-subnet debug logs (very verbose).",
)


@app.command()
def ranges(
        countries: Optional[List[str]] = COUNTRIES_ARG,
        db: Path = DB_OPT,
        kind: SourceKind = KIND_OPT,
        print_: bool = typer.Option(
            False,
            "--print",
            "-p",
            help="Print the resulting intervals.",
        ),
        output_format: OutputFormat = typer.Option(
            OutputFormat.range,
            "--format",
            "-f",
            help="Printed format: range ('<lower> - <upper>', upper excluded) | cidr",
        ),
        set_name: Optional[str] = typer.Option(
            None,
            "--set",
            "-s",
            envvar=ENV_SET,
            help="Add the intervals to this nftables set.",
        ),
        table: str = typer.Option(
            DEFAULT_TABLE,
            "--table",
            "-t",
            envvar=ENV_TABLE,
            help="Name of the nftables table the set is in.",
        ),
        strategy: MergeStrategy = typer.Option(
            MergeStrategy.SWEEP,
            "--strategy",
            help=(
                "Merge algorithm: sweep (sort then merge), "
                "incremental (one join per subnet, legacy output), "
                "cascade (incremental, joining until nothing else fits)."
            ),
        ),
        nft: str = typer.Option(
            DEFAULT_NFT,
            "--nft",
            envvar=ENV_NFT,
            help="Path to the nft binary.",
        ),
        batch_size: int = typer.Option(
            BATCH_SIZE,
            "--batch-size",
            min=2,
            help="Set elements per nft transaction (two per interval).",
        ),
        verbose: int = VERBOSE_OPT,
):
    """
    Merge the networks of the given countries into intervals.

    Example:

        geonft ranges IT SM VA --db GeoLite2-Country.mmdb --print
        geonft ranges CN RU --db dbip-country-lite.mmdb --table filter --set blocked4
    """
    setup_logging(verbose)
    countries = _require_countries(countries)

    loader = None
    if set_name and table:
        try:
            loader = NftSetLoader(table, set_name, nft=nft, batch_size=batch_size)
        except ValueError as e:
            raise typer.BadParameter(str(e), param_hint="--batch-size")

    stats = CollectStats()
    try:
        with open_source(db, kind.value) as source:
            intervals = collect_intervals(source, countries, strategy=strategy, stats=stats)
        if loader is not None:
            loader.find_set()
            loader.load(intervals)
    except GeonftError as e:
        raise _fail(e)

    if print_ or loader is None:
        write_intervals(intervals, sys.stdout, fmt=output_format.value)


@app.command()
def networks(
        countries: Optional[List[str]] = COUNTRIES_ARG,
        db: Path = DB_OPT,
        kind: SourceKind = KIND_OPT,
        family: Family = typer.Option(
            Family.ipv4,
            "--family",
            help="Address family to list: 4 | 6 | all",
        ),
        verbose: int = VERBOSE_OPT,
):
    """
    List the networks of the given countries as found in the database,
    one CIDR per line, without merging.
    """
    setup_logging(verbose)
    countries = _require_countries(countries)
    wanted = None if family is Family.all else int(family.value)

    try:
        with open_source(db, kind.value) as source:
            count = write_networks(
                iter_country_networks(source, countries, family=wanted),
                sys.stdout,
            )
    except GeonftError as e:
        raise _fail(e)
    log.info("Listed %d networks", count)


def main() -> None:
    """Entry point for console_scripts."""
    try:
        app()
    except KeyboardInterrupt:
        # Graceful Ctrl+C handling
        typer.echo("Interrupted by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
