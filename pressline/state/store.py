"""Per-section processing state persisted as JSON files."""

import json
import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Optional, Set

import pendulum
from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console

console = Console()


class ProcessingState(BaseModel):
    """Dedup state for one section."""

    model_config = ConfigDict(populate_by_name=True)

    processed_keys: Set[str] = Field(
        default_factory=set,
        alias="processedUrls",
        description="Dedup keys (canonical URLs) already published",
    )
    last_run: Optional[datetime] = Field(None, alias="lastRun", description="Last checkpoint time")

    def is_processed(self, key: str) -> bool:
        """Whether a dedup key was already handled."""
        return key in self.processed_keys

    def mark_processed(self, key: str) -> None:
        """Record a dedup key."""
        self.processed_keys.add(key)

    def touch(self) -> None:
        """Update the last-run timestamp."""
        self.last_run = pendulum.now("UTC")

    def to_json(self) -> dict:
        """Persisted layout: ``{processedUrls, lastRun}``."""
        return {
            "processedUrls": sorted(self.processed_keys),
            "lastRun": self.last_run.isoformat() if self.last_run else None,
        }


class StateStore:
    """Load and save ProcessingState, one JSON file per section."""

    def __init__(self, state_dir: Path) -> None:
        """
        Initialize state store.

        Args:
            state_dir: Directory for ``<section_id>.json`` files
        """
        self.state_dir = Path(state_dir)

    def state_path(self, section_id: str) -> Path:
        """Get state file path for a section."""
        safe_id = "".join(c if c.isalnum() or c in "-_" else "_" for c in section_id)
        return self.state_dir / f"{safe_id}.json"

    def load(self, section_id: str) -> ProcessingState:
        """Load state for a section; empty state when missing or unreadable."""
        path = self.state_path(section_id)
        if not path.exists():
            return ProcessingState()

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return ProcessingState.model_validate(data)
        except (OSError, ValueError) as e:
            console.print(f"[yellow]Could not read state for {section_id}, starting empty: {e}[/yellow]")
            return ProcessingState()

    def save(self, section_id: str, state: ProcessingState) -> bool:
        """
        Persist state for a section.

        Returns:
            True on success; False when the write failed (the run continues in memory)
        """
        path = self.state_path(section_id)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(state.to_json(), f, indent=2)
                os.replace(tmp_name, path)
            except BaseException:
                if os.path.exists(tmp_name):
                    os.unlink(tmp_name)
                raise
            return True
        except OSError as e:
            console.print(f"[red]Error saving state for {section_id}: {e}[/red]")
            return False
