"""Batch scheduler: runs sections through the orchestrator under rate limits."""

import asyncio
from typing import Any, Awaitable, Callable, List, Optional, Sequence

import pendulum
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import SchedulerConfig, SectionConfig
from ..ingestion import FeedFetcher, FeedItem
from ..models import ItemStatus, RunOptions, RunSummary, SectionStats
from ..publish import PublishFailure, PublishSink
from ..state import ProcessingState, StateStore
from .orchestrator import EnrichmentOrchestrator

console = Console()

SleepFn = Callable[[float], Awaitable[Any]]


class BatchScheduler:
    """
    Processes sections in priority order, items in small sequential batches.

    Waits ``item_delay`` after every item, ``batch_delay`` between batches of
    a section and ``section_delay`` between sections. State is saved after
    every item so an interrupted run resumes where it stopped.
    """

    def __init__(
        self,
        orchestrator: EnrichmentOrchestrator,
        feed_fetcher: FeedFetcher,
        state_store: StateStore,
        sink: PublishSink,
        settings: Optional[SchedulerConfig] = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        """
        Initialize scheduler.

        Args:
            orchestrator: Per-item enrichment
            feed_fetcher: Section feed fetcher
            state_store: Per-section dedup state
            sink: Destination for records
            settings: Batch sizes and delays
            sleep: Async sleep used for all delays
        """
        self.orchestrator = orchestrator
        self.feed_fetcher = feed_fetcher
        self.state_store = state_store
        self.sink = sink
        self.settings = settings or SchedulerConfig()
        self._sleep = sleep

    def run_sync(self, sections: Sequence[SectionConfig], options: Optional[RunOptions] = None) -> RunSummary:
        """Synchronous wrapper for run."""
        return asyncio.run(self.run(sections, options))

    async def run(self, sections: Sequence[SectionConfig], options: Optional[RunOptions] = None) -> RunSummary:
        """
        Run every given section.

        Args:
            sections: Sections to process (sorted by priority here)
            options: Force and limit options

        Returns:
            Per-section counters
        """
        options = options or RunOptions()
        ordered = sorted(sections, key=lambda s: s.priority)
        summary = RunSummary(started_at=pendulum.now("UTC"))

        console.print(Panel.fit(
            f"📰 Pressline enrichment run\n"
            f"Sections: {', '.join(s.id for s in ordered) or '-'} • "
            f"Batch size: {self.settings.batch_size}" + (" • Force" if options.force else ""),
            style="bold blue",
        ))

        for index, section in enumerate(ordered):
            try:
                stats = await self.run_section(section, options)
            except Exception as e:
                console.print(f"[red]Section {section.id} failed: {e}[/red]")
                stats = SectionStats(section_id=section.id, section_name=section.name, error=str(e))
            summary.sections.append(stats)

            if index < len(ordered) - 1:
                console.print(f"[dim]Waiting {self.settings.section_delay:.0f}s before next section...[/dim]")
                await self._sleep(self.settings.section_delay)

        summary.finished_at = pendulum.now("UTC")
        summary.usage = self.orchestrator.get_usage_stats()
        self._print_summary(summary)
        return summary

    def select_candidates(
        self,
        items: Sequence[FeedItem],
        state: ProcessingState,
        options: RunOptions,
    ) -> List[FeedItem]:
        """Filter processed and duplicate items, then apply the feed size and limit caps."""
        seen = set()
        candidates = []
        for item in items:
            if item.url in seen:
                continue
            seen.add(item.url)
            if not options.force and state.is_processed(item.url):
                continue
            candidates.append(item)

        candidates = candidates[: self.settings.feed_size]
        if options.limit is not None:
            candidates = candidates[: options.limit]
        return candidates

    async def run_section(self, section: SectionConfig, options: RunOptions) -> SectionStats:
        """Process one section's feed."""
        console.print(f"\n[bold]Section:[/bold] {section.name} ({section.id})")
        stats = SectionStats(section_id=section.id, section_name=section.name)
        state = self.state_store.load(section.id)

        feed = await self.feed_fetcher.fetch_feed(section)
        if not feed.success:
            console.print(f"[red]✗ Feed {section.feed_url}: {feed.error}[/red]")
            stats.error = feed.error or "feed fetch failed"
            return stats

        stats.feed_items = len(feed.items)
        candidates = self.select_candidates(feed.items, state, options)
        stats.candidates = len(candidates)
        stats.already_processed = sum(1 for item in feed.items if state.is_processed(item.url))

        if not candidates:
            console.print("[dim]No new items to process[/dim]")
            state.touch()
            self.state_store.save(section.id, state)
            return stats

        console.print(f"{len(candidates)} item(s) to process")
        batch_size = self.settings.batch_size
        batches = [candidates[i : i + batch_size] for i in range(0, len(candidates), batch_size)]

        for batch_index, batch in enumerate(batches):
            console.print(f"[dim]Batch {batch_index + 1}/{len(batches)}[/dim]")
            for item in batch:
                await self._process_item(item, section, state, stats)
                await self._sleep(self.settings.item_delay)

            if batch_index < len(batches) - 1:
                console.print(f"[dim]Waiting {self.settings.batch_delay:.0f}s before next batch...[/dim]")
                await self._sleep(self.settings.batch_delay)

        return stats

    async def _process_item(
        self,
        item: FeedItem,
        section: SectionConfig,
        state: ProcessingState,
        stats: SectionStats,
    ) -> None:
        outcome = await self.orchestrator.process(item, section)

        if outcome.status == ItemStatus.PUBLISHABLE and outcome.record is not None:
            try:
                await self.sink.publish([outcome.record], section)
            except PublishFailure as e:
                console.print(f"[red]  ✗ Not published, will retry next run: {e}[/red]")
                stats.publish_failed += 1
            except Exception as e:
                console.print(f"[red]  ✗ Unexpected publish error, will retry next run: {e}[/red]")
                stats.publish_failed += 1
            else:
                state.mark_processed(item.url)
                stats.published += 1
                stats.fallback_stages += sum(1 for v in outcome.sources.values() if v == "fallback")
        elif outcome.status == ItemStatus.SKIPPED:
            stats.skipped += 1
            if self.settings.mark_unusable_processed:
                state.mark_processed(item.url)
        elif outcome.status == ItemStatus.FETCH_FAILED:
            stats.fetch_failed += 1
        else:
            stats.failed += 1

        state.touch()
        if not self.state_store.save(section.id, state):
            stats.state_errors += 1

    def _print_summary(self, summary: RunSummary) -> None:
        """Print run summary."""
        table = Table(title="Run Summary")
        table.add_column("Section", style="cyan")
        table.add_column("Status", style="bold")
        table.add_column("Published", style="green")
        table.add_column("Skipped", style="yellow")
        table.add_column("Failed", style="red")
        table.add_column("Details", style="dim")

        for stats in summary.sections:
            status = "[green]✓[/green]" if stats.success else "[red]✗[/red]"
            failed = stats.fetch_failed + stats.failed + stats.publish_failed
            if stats.success:
                details = (
                    f"{stats.feed_items} in feed, {stats.already_processed} already processed, "
                    f"{stats.fallback_stages} fallback stages"
                )
            else:
                details = stats.error or "Failed"
            table.add_row(
                stats.section_name or stats.section_id,
                status,
                str(stats.published),
                str(stats.skipped),
                str(failed),
                details,
            )

        console.print("\n")
        console.print(table)

        usage = summary.usage
        totals = (
            f"Processed: {summary.processed} • Published: {summary.published}\n"
            f"Generation calls: {usage.get('api_calls', 0)} "
            f"({usage.get('failures', 0)} failed, {usage.get('total_tokens', 0)} tokens, "
            f"model {usage.get('model', '-')})\n"
            f"Duration: {summary.duration:.1f} seconds"
        )

        if summary.failed_sections:
            console.print(Panel(
                f"[yellow]Run finished with errors[/yellow]\n\n"
                f"Failed sections: {', '.join(summary.failed_sections)}\n"
                f"{totals}",
                style="yellow",
            ))
        else:
            console.print(Panel(
                f"[green]✅ Run completed[/green]\n\n{totals}",
                style="green",
            ))
