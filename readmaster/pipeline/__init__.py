"""Pipeline orchestration - per-source sync cycles."""

from .sync import SyncOrchestrator, SyncResult, run_sync

__all__ = ["SyncOrchestrator", "SyncResult", "run_sync"]
