"""Run command implementation."""

from pathlib import Path
from typing import Any, Dict, List, Optional

import typer
from rich.console import Console

from ..config import Config, SectionConfig
from ..generation import (
    DisabledProvider,
    FallbackGenerators,
    MockLLMProvider,
    OpenAIProvider,
    TextGenerator,
)
from ..ingestion import ContentExtractor, ContentFetcher, FeedFetcher
from ..models import RunOptions
from ..pipeline import BatchScheduler, EnrichmentOrchestrator
from ..publish import AirtableSink, JsonlSink, PublishSink
from ..state import StateStore

console = Console()


def get_text_generator(llm_config: Dict[str, Any]) -> TextGenerator:
    """Get configured text generator."""
    provider = llm_config.get("provider")

    if provider == "mock":
        return MockLLMProvider()
    if provider == "disabled":
        return DisabledProvider()

    if provider == "openai":
        api_key = llm_config.get("api_key")
        if not api_key:
            console.print("[yellow]Warning: No API key found. Using rule-based generation only.[/yellow]")
            return DisabledProvider("No API key configured")

        return OpenAIProvider(
            api_key=api_key,
            model=llm_config.get("model", "gpt-4o-mini"),
            base_url=llm_config.get("base_url"),
            backoff_seconds=llm_config.get("backoff_seconds", 2.0),
        )

    console.print(f"[yellow]Warning: Unknown LLM provider '{provider}'. Using rule-based generation only.[/yellow]")
    return DisabledProvider(f"Unknown provider: {provider}")


def get_sink(config: Config, dry_run: bool = False) -> PublishSink:
    """Get configured publish sink; dry runs always write JSON lines."""
    sink_config = config.get_sink_config()

    if dry_run or sink_config["kind"] == "jsonl":
        output_path = sink_config.get("output_path") or str(config.workspace_root / "records.jsonl")
        return JsonlSink(Path(output_path).expanduser())

    if sink_config["kind"] != "airtable":
        raise ValueError(f"Unknown sink kind: {sink_config['kind']}")

    if not sink_config.get("base_id") or not sink_config.get("token"):
        raise ValueError(
            f"Missing record store credentials: set {sink_config.get('token_env')} "
            f"and {sink_config.get('base_id_env')}"
        )

    return AirtableSink(
        base_id=sink_config["base_id"],
        token=sink_config["token"],
        api_url=sink_config["api_url"],
        timeout=sink_config["timeout"],
    )


def build_scheduler(config: Config, dry_run: bool = False) -> BatchScheduler:
    """Wire fetchers, generator, fallbacks, state and sink together."""
    settings = config.config
    generator = get_text_generator(config.get_llm_config())

    orchestrator = EnrichmentOrchestrator(
        generator=generator,
        content_fetcher=ContentFetcher(
            timeout=settings.fetch.page_timeout,
            user_agent=settings.fetch.user_agent,
        ),
        extractor=ContentExtractor(),
        fallbacks=FallbackGenerators(settings.fallback, config.sections.labels),
        validation=settings.validation,
        llm=settings.llm,
    )

    return BatchScheduler(
        orchestrator=orchestrator,
        feed_fetcher=FeedFetcher(timeout=settings.fetch.feed_timeout),
        state_store=StateStore(config.state_dir),
        sink=get_sink(config, dry_run),
        settings=settings.scheduler,
    )


def select_sections(config: Config, section_id: Optional[str], all_sections: bool) -> List[SectionConfig]:
    """Resolve the sections a run should process."""
    sections = config.sections

    if all_sections:
        return [s for s in sections.sections if s.enabled]

    section_id = section_id or config.config.default_section
    if not section_id:
        raise ValueError("No section given. Pass a section ID or --all.")

    section = sections.get(section_id)
    if section is None:
        known = ", ".join(s.id for s in sections.sections) or "none"
        raise ValueError(f"Unknown section '{section_id}' (configured: {known})")
    return [section]


def run_command(
    section: Optional[str] = typer.Argument(None, help="Section ID to process (default: config default_section)"),
    all_sections: bool = typer.Option(False, "--all", "-a", help="Process every enabled section"),
    limit: Optional[int] = typer.Option(None, "--limit", "-n", help="Maximum items per section", min=1),
    force: bool = typer.Option(False, "--force", "-f", help="Reprocess items already published"),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Write records to a local JSON-lines file instead of the record store",
    ),
    config_path: Optional[Path] = typer.Option(None, "--config", help="Path to config.yaml"),
) -> None:
    """Fetch section feeds, enrich new items and publish draft records."""
    try:
        config = Config(config_path)
        selected = select_sections(config, section, all_sections)

        if not selected:
            console.print("[yellow]No enabled sections to process.[/yellow]")
            return

        scheduler = build_scheduler(config, dry_run)
        summary = scheduler.run_sync(selected, RunOptions(force=force, limit=limit))

        if summary.failed_sections:
            raise typer.Exit(1)

    except typer.Exit:
        raise
    except FileNotFoundError as e:
        console.print(f"[red]{e}. Run 'pressline init' first.[/red]")
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Run interrupted by user[/yellow]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Run failed: {e}[/red]")
        raise typer.Exit(1)
