"""Data models shared by the pipeline and the publish sinks."""

from .record import EnrichedRecord, ItemOutcome, ItemStatus
from .run import RunOptions, RunSummary, SectionStats

__all__ = ["EnrichedRecord", "ItemOutcome", "ItemStatus", "RunOptions", "RunSummary", "SectionStats"]
