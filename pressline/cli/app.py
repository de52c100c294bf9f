"""Main CLI application."""

import typer
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()

from .init import init_command
from .run import run_command
from .sections import sections_app

app = typer.Typer(
    name="pressline",
    help="Pressline - feed enrichment pipeline for newsroom drafts",
    no_args_is_help=True,
)

# Register commands
app.command("init")(init_command)
app.command("run")(run_command)
app.add_typer(sections_app, name="sections", help="Manage newsroom sections")


if __name__ == "__main__":
    app()
