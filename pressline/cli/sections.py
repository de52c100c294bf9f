"""Section management commands."""

import asyncio
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.table import Table

from ..config import Config
from ..ingestion import FeedFetcher
from ..state import StateStore

console = Console()
sections_app = typer.Typer(help="Manage newsroom sections")


def _load(config_path: Optional[Path]):
    config = Config(config_path)
    try:
        config.config
        return config, config.sections
    except FileNotFoundError as e:
        console.print(f"[red]{e}. Run 'pressline init' first.[/red]")
        raise typer.Exit(1)


@sections_app.command("list")
def sections_list(
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
) -> None:
    """List configured sections in run order."""
    config, sections = _load(config_path)

    if not sections.sections:
        console.print("[yellow]No sections configured.[/yellow]")
        return

    store = StateStore(config.state_dir)
    table = Table(title="Configured Sections")
    table.add_column("Priority", style="green")
    table.add_column("ID", style="cyan")
    table.add_column("Name", style="magenta")
    table.add_column("Enabled", style="yellow")
    table.add_column("State", style="dim")

    for section in sorted(sections.sections, key=lambda s: s.priority):
        state_file = store.state_path(section.id)
        table.add_row(
            str(section.priority),
            section.id,
            section.name,
            "✓" if section.enabled else "✗",
            "present" if state_file.exists() else "-",
        )

    console.print(table)


@sections_app.command("test")
def sections_test(
    section_id: Optional[str] = typer.Argument(None, help="Section ID to test (or test all)"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
) -> None:
    """Fetch and parse section feeds."""
    config, sections = _load(config_path)
    targets = sections.sections

    if section_id:
        targets = [s for s in targets if s.id == section_id]
        if not targets:
            console.print(f"[red]Section '{section_id}' not found.[/red]")
            raise typer.Exit(1)

    fetcher = FeedFetcher(timeout=config.config.fetch.feed_timeout)
    failures = 0
    for section in targets:
        if not section.enabled:
            console.print(f"[yellow]⚠️  {section.id}: Disabled[/yellow]")
            continue

        result = asyncio.run(fetcher.fetch_feed(section))
        if result.success:
            console.print(f"[green]✅ {section.id}: OK ({result.item_count} items)[/green]")
        else:
            failures += 1
            console.print(f"[red]❌ {section.id}: Failed - {result.error}[/red]")

    if failures:
        raise typer.Exit(1)
