"""Incremental sync of source documents into the parent and vector stores."""

from cookbook.sync.orchestrator import SyncOrchestrator, SyncPlan, SyncStats

__all__ = [
    "SyncOrchestrator",
    "SyncPlan",
    "SyncStats",
]
