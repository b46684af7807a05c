"""CLI interface for the Gatherer SQL scraper."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from gatherer_scraper import __version__
from gatherer_scraper.config import AppConfig, load_config, validate_config
from gatherer_scraper.errors import DiscoveryError
from gatherer_scraper.models import RunPolicy
from gatherer_scraper.scraper import RunReport, Scraper

console = Console()

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_QUIT = 2

EPILOG = """\
Scrapes gatherer.wizards.com for MTG sets and cards. Outputs the results
as SQL files; one for the list of sets and then one for each set.

Examples:
  gatherer-scraper
      Retrieve all MTG sets.
  gatherer-scraper -s "Alliances,Future Sight"
      Retrieve the "Alliances" and "Future Sight" sets.
  gatherer-scraper -o
      Retrieve only the list of sets (no cards).
"""


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    _configure_logging(args)
    sys.exit(run(args))


def _configure_logging(args: argparse.Namespace) -> None:
    level = logging.INFO
    if args.quiet:
        level = logging.WARNING
    elif args.verbose:
        level = logging.DEBUG

    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )

    # Per-card lines still show under --quiet when --verbose is given
    card_logger = logging.getLogger("gatherer_scraper.extractor")
    card_logger.setLevel(logging.INFO if args.verbose else logging.NOTSET)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gatherer-scraper",
        description="Scrape MTG sets and cards from Gatherer into SQL insert scripts",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-f", "--force",
        action="store_true",
        help="Ignore file collisions",
    )
    parser.add_argument(
        "-S", "--skip",
        action="store_true",
        help="Skip file collisions",
    )
    parser.add_argument(
        "-o", "--only-sets",
        action="store_true",
        help="Only download set info",
    )
    parser.add_argument(
        "-s", "--sets",
        type=str,
        default=None,
        help="Comma delimited list of sets to retrieve",
    )
    parser.add_argument(
        "-p", "--pretend",
        action="store_true",
        help="Run but do not output any files",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Suppress status output",
    )
    parser.add_argument(
        "-V", "--verbose",
        action="store_true",
        help="Show extra output",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to config.yaml (default: config.yaml)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory for generated SQL files (overrides config)",
    )
    parser.add_argument(
        "-v", "--version",
        action="version",
        version=f"%(prog)s {__version__}",
        help="Show version number and quit",
    )
    return parser


def _load_app_config(args: argparse.Namespace) -> AppConfig:
    """Load config, applying CLI overrides."""
    config = load_config(args.config)
    if args.output_dir:
        config.output.directory = args.output_dir
    if args.force:
        config.policy.force = True
        config.policy.skip = False
    if args.skip:
        config.policy.skip = True
        config.policy.force = False
    if args.force and args.skip:
        raise ValueError("Config error: --force and --skip are mutually exclusive")
    validate_config(config)
    return config


def run(args: argparse.Namespace) -> int:
    """Run one scrape from parsed arguments and return the exit code."""
    try:
        config = _load_app_config(args)
    except ValueError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        return EXIT_FAILURES

    set_names = args.sets.split(",") if args.sets else None
    policy = config.run_policy(pretend=args.pretend)

    try:
        report = asyncio.run(
            _run_scrape(
                config,
                policy,
                set_names=set_names,
                only_sets=args.only_sets,
                quiet=args.quiet,
                verbose=args.verbose,
            )
        )
    except DiscoveryError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        return EXIT_FAILURES

    if not args.quiet:
        _print_summary(report)

    if report.quit_requested:
        return EXIT_QUIT
    if report.failures:
        return EXIT_FAILURES
    return EXIT_OK


async def _run_scrape(
    config: AppConfig,
    policy: RunPolicy,
    set_names: Optional[List[str]] = None,
    only_sets: bool = False,
    quiet: bool = False,
    verbose: bool = False,
) -> RunReport:
    scraper = Scraper(config, policy, console=console, quiet=quiet, verbose=verbose)
    try:
        return await scraper.run(set_names=set_names, only_sets=only_sets)
    finally:
        await scraper.teardown()


def _print_summary(report: RunReport) -> None:
    table = Table(title="Run Summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")
    table.add_row("Sets", str(len(report.sets)))
    table.add_row("Cards", str(report.total_cards))
    table.add_row("Files written", str(len(report.written)))
    table.add_row("Files skipped", str(len(report.skipped)))
    table.add_row("Failures", str(len(report.failures)))
    console.print()
    console.print(table)

    for failure in report.failures:
        console.print(f"  [red]ERROR[/red] {escape(failure)}")
    if report.quit_requested:
        console.print("[yellow]Stopped at user request[/yellow]")


if __name__ == "__main__":
    main()
