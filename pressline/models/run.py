"""Run models for tracking scheduler executions."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class RunOptions(BaseModel):
    """Per-run scheduler options."""

    force: bool = Field(False, description="Reprocess items already recorded as processed")
    limit: Optional[int] = Field(None, description="Max items per section", ge=1)


class SectionStats(BaseModel):
    """Counters for one section."""

    section_id: str = Field(..., description="Section ID")
    section_name: str = Field("", description="Section display name")
    feed_items: int = Field(0, description="Items in the feed")
    already_processed: int = Field(0, description="Items filtered by the dedup state")
    candidates: int = Field(0, description="Items selected for processing")
    published: int = Field(0, description="Records accepted by the sink")
    skipped: int = Field(0, description="Items with insufficient content")
    fetch_failed: int = Field(0, description="Items whose content could not be fetched")
    failed: int = Field(0, description="Items that errored unexpectedly")
    publish_failed: int = Field(0, description="Records the sink rejected")
    fallback_stages: int = Field(0, description="Stages completed by rule-based fallbacks")
    state_errors: int = Field(0, description="Failed state saves")
    error: Optional[str] = Field(None, description="Section-level error")

    @property
    def success(self) -> bool:
        return self.error is None


class RunSummary(BaseModel):
    """Result of a scheduler run."""

    started_at: datetime = Field(..., description="Run start time")
    finished_at: Optional[datetime] = Field(None, description="Run end time")
    sections: List[SectionStats] = Field(default_factory=list, description="Per-section counters")
    usage: Dict[str, Any] = Field(default_factory=dict, description="Text generator usage statistics")

    @property
    def published(self) -> int:
        return sum(s.published for s in self.sections)

    @property
    def processed(self) -> int:
        """Items that went through the orchestrator."""
        return sum(s.candidates for s in self.sections)

    @property
    def failed_sections(self) -> List[str]:
        return [s.section_id for s in self.sections if not s.success]

    @property
    def duration(self) -> float:
        """Run duration in seconds."""
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()
