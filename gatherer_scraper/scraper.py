"""Core scrape orchestrator: resolves sets, crawls cards, writes SQL files."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional, Set

from rich.console import Console
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, BarColumn, TextColumn, TimeElapsedColumn

from gatherer_scraper.config import AppConfig
from gatherer_scraper.errors import CrawlError, ExtractError, WriteError
from gatherer_scraper.extractor import CardExtractor
from gatherer_scraper.fetcher import DocumentFetcher
from gatherer_scraper.models import CardSet, RunPolicy
from gatherer_scraper.paginator import ListingPaginator
from gatherer_scraper.registry import resolve_sets
from gatherer_scraper.sql import render_cards, render_sets, set_file_name
from gatherer_scraper.writer import OutputWriter, WriteResult, WriteStatus

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """What a run produced and what went wrong along the way."""

    sets: List[CardSet] = field(default_factory=list)
    results: List[WriteResult] = field(default_factory=list)
    failures: List[str] = field(default_factory=list)
    quit_requested: bool = False

    @property
    def total_cards(self) -> int:
        return sum(len(s.cards) for s in self.sets)

    @property
    def written(self) -> List[WriteResult]:
        return [r for r in self.results if r.written]

    @property
    def skipped(self) -> List[WriteResult]:
        return [r for r in self.results if not r.written]


class Scraper:
    """Orchestrates the full scrape pipeline:
    1. Resolve the sets to process
    2. Write the set list
    3. Crawl every set's listing pages and extract each card
    4. Write one SQL file per set
    """

    def __init__(
        self,
        config: AppConfig,
        policy: RunPolicy,
        console: Optional[Console] = None,
        prompt: Optional[Callable[[str], str]] = None,
        quiet: bool = False,
        verbose: bool = False,
        fetcher: Optional[DocumentFetcher] = None,
    ) -> None:
        self._config = config
        self._policy = policy
        self._console = console or Console()
        self._quiet = quiet
        self._fetcher = fetcher or DocumentFetcher(config.catalog)
        self._paginator = ListingPaginator(self._fetcher, config.catalog.base_url)
        self._extractor = CardExtractor(self._fetcher, verbose=verbose)
        self._writer = OutputWriter(policy, console=self._console, prompt=prompt, quiet=quiet)

    def _status(self, message: str) -> None:
        if not self._quiet:
            self._console.print(message)

    async def teardown(self) -> None:
        await self._fetcher.close()

    async def run(
        self,
        set_names: Optional[List[str]] = None,
        only_sets: bool = False,
    ) -> RunReport:
        """Execute the pipeline.

        DiscoveryError propagates; crawl, extract and write failures are
        recorded on the returned report.
        """
        report = RunReport()

        # 1. Resolve sets
        self._status("\n[bold]Resolving sets...[/bold]")
        report.sets = await resolve_sets(
            self._fetcher, self._config.catalog.landing_url, set_names
        )
        if not report.sets:
            self._status("[red]No sets to process[/red]")
            return report
        self._status(f"Found {len(report.sets)} sets")

        # 2. Set list
        self._write(report, self._config.output.sets_path, render_sets(report.sets))
        if self._policy.quit_requested or only_sets:
            report.quit_requested = self._policy.quit_requested
            return report

        # 3. Crawl
        failed: Set[int] = set()
        self._status("\n[bold]Fetching card data...[/bold]")
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.completed}/{task.total}"),
            TimeElapsedColumn(),
            console=self._console,
            disable=self._quiet,
        ) as progress:
            task = progress.add_task("Sets", total=len(report.sets))
            for card_set in report.sets:
                progress.update(task, description=f"[cyan]{escape(card_set.name)}")
                try:
                    await self._crawl(card_set)
                except (CrawlError, ExtractError) as exc:
                    logger.error("%s (kept %d cards)", exc, len(card_set.cards))
                    report.failures.append(str(exc))
                    failed.add(id(card_set))
                progress.advance(task)

        self._status(f"Fetched {report.total_cards} cards across {len(report.sets)} sets")

        # 4. Per-set files
        self._status("\n[bold]Writing SQL files...[/bold]")
        output_dir = Path(self._config.output.directory)
        for card_set in report.sets:
            path = output_dir / set_file_name(card_set.name)
            if id(card_set) in failed:
                # An incomplete crawl never replaces existing output
                self._status(f"Skipping {escape(str(path))} (crawl failed)")
                report.results.append(WriteResult(path, WriteStatus.SKIPPED, "crawl failed"))
                continue
            self._write(report, path, render_cards(card_set))
            if self._policy.quit_requested:
                report.quit_requested = True
                break

        return report

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    async def _crawl(self, card_set: CardSet) -> None:
        """Extract every linked card of a set, appending as it goes."""
        async for link in self._paginator.collect_links(card_set):
            card = await self._extractor.extract_url(link.url, card_set.name)
            card_set.cards.append(card)
        logger.info("Set %s: collected %d cards", card_set.name, len(card_set.cards))

    def _write(self, report: RunReport, path: Path, content: str) -> None:
        try:
            report.results.append(self._writer.write(path, content))
        except WriteError as exc:
            logger.error("%s", exc)
            report.failures.append(str(exc))
