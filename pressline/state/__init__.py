"""Dedup state persistence."""

from .store import ProcessingState, StateStore

__all__ = ["ProcessingState", "StateStore"]
