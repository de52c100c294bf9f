"""Init command implementation."""

from pathlib import Path
from typing import Dict, List

import typer
from rich.console import Console
from rich.panel import Panel

from ..config import ConfigModel, FallbackConfig, SectionConfig, SectionsFile, SinkConfig, save_config, save_sections

console = Console()


def create_default_sections() -> List[SectionConfig]:
    """Create the default newsroom sections."""
    return [
        SectionConfig(
            id="primera-plana",
            name="Primera Plana",
            feed_url="https://rss.app/feeds/v1.1/_on3KHNu40zPeeYkK.json",
            color="#D32F2F",
            priority=1,
        ),
        SectionConfig(
            id="instituciones",
            name="Instituciones",
            feed_url="https://rss.app/feeds/v1.1/_iVEs2ol109NjJyce.json",
            color="#388E3C",
            priority=2,
        ),
        SectionConfig(
            id="agro",
            name="Agro",
            feed_url="https://rss.app/feeds/v1.1/_20zJLx8JIZ4cnqkE.json",
            color="#388E3C",
            priority=3,
        ),
        SectionConfig(
            id="deportes",
            name="Deportes",
            feed_url="https://rss.app/feeds/v1.1/_GaWKBBIxuHCE5tH1.json",
            color="#1976D2",
            priority=4,
        ),
        SectionConfig(
            id="economia",
            name="Economia",
            feed_url="https://rss.app/feeds/v1.1/_ifKDQanGJM3BOKGC.json",
            color="#FFC107",
            priority=5,
        ),
        SectionConfig(
            id="lifestyle",
            name="Lifestyle",
            feed_url="https://rss.app/feeds/v1.1/_cnOfvOavDTApWv9j.json",
            color="#9C27B0",
            priority=6,
        ),
    ]


def create_default_labels() -> Dict[str, str]:
    """Category id to overline label, in the newsroom's language."""
    return {
        "sport": "Deportes",
        "economy": "Economía",
        "politics": "Política",
        "entertainment": "Espectáculos",
        "technology": "Tecnología",
        "health": "Salud",
        "agriculture": "Agro",
        "culture": "Cultura",
        "news": "Actualidad",
    }


def create_spanish_fallbacks() -> FallbackConfig:
    """Fixed fallback phrases matching the default output language."""
    return FallbackConfig(
        first_heading="Detalles principales",
        second_heading="Información adicional",
        list_intro="Puntos destacados:",
        list_labels=["Dato clave", "Información relevante", "Contexto"],
        image_label="Imagen",
        default_title="Artículo sin título",
        default_summary="No hay descripción disponible",
    )


def init_command(
    config_dir: Path = typer.Option(
        Path.home() / ".config" / "pressline",
        "--config-dir",
        "-c",
        help="Configuration directory",
    ),
    workspace: Path = typer.Option(
        Path.home() / "Pressline",
        "--workspace",
        "-w",
        help="Workspace root directory (state and local output)",
    ),
    sink: str = typer.Option("airtable", "--sink", help="Publish sink (airtable, jsonl)"),
    seed_sections: bool = typer.Option(
        True,
        "--seed-sections/--no-seed-sections",
        help="Seed the default newsroom sections",
    ),
) -> None:
    """Initialize Pressline configuration and workspace."""
    console.print(Panel.fit("📰 Pressline - Initialization", style="bold blue"))

    if sink not in ("airtable", "jsonl"):
        console.print(f"[red]Unknown sink '{sink}'. Use 'airtable' or 'jsonl'.[/red]")
        raise typer.Exit(1)

    config_dir.mkdir(parents=True, exist_ok=True)
    config_path = config_dir / "config.yaml"
    sections_path = config_dir / "sections.yaml"

    config = ConfigModel(
        workspace_root=str(workspace),
        default_section="primera-plana" if seed_sections else None,
        fallback=create_spanish_fallbacks(),
        sink=SinkConfig(kind=sink),
    )
    save_config(config, config_path)
    console.print(f"✅ Created config: {config_path}")

    if seed_sections:
        sections = SectionsFile(sections=create_default_sections(), labels=create_default_labels())
        save_sections(sections, sections_path)
        console.print(f"✅ Created sections: {sections_path} (seeded with {len(sections.sections)} sections)")
    else:
        save_sections(SectionsFile(labels=create_default_labels()), sections_path)
        console.print(f"✅ Created sections: {sections_path} (empty)")

    (workspace / ".state").mkdir(parents=True, exist_ok=True)
    console.print(f"✅ Created workspace: {workspace}")

    steps = ["Set LLM API key: [bold]export OPENAI_API_KEY=your_key[/bold]"]
    if sink == "airtable":
        steps.append("Set record store credentials: [bold]export AIRTABLE_TOKEN=... AIRTABLE_BASE_ID=...[/bold]")
    steps.append("Run: [bold]pressline run --all[/bold]")
    next_steps = "\n".join(f"{i}. {step}" for i, step in enumerate(steps, 1))

    console.print(
        Panel(
            f"[green]✅ Pressline initialized successfully![/green]\n\n"
            f"Configuration: {config_path}\n"
            f"Sections: {sections_path}\n"
            f"Workspace: {workspace}\n\n"
            f"Next steps:\n{next_steps}",
            style="green",
        )
    )
