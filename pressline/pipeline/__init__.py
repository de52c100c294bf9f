"""Enrichment pipeline: per-item orchestration and batch scheduling."""

from ..models import EnrichedRecord, ItemOutcome, ItemStatus, RunOptions, RunSummary, SectionStats
from .orchestrator import EnrichmentOrchestrator
from .scheduler import BatchScheduler

__all__ = [
    "BatchScheduler",
    "EnrichedRecord",
    "EnrichmentOrchestrator",
    "ItemOutcome",
    "ItemStatus",
    "RunOptions",
    "RunSummary",
    "SectionStats",
]
