"""Snapshot comparison."""

from .engine import DiffEngine, diff_snapshots
from .models import ComponentChange, DiffSummary, SnapshotDiff, TokenDelta
from .report import format_diff_text

__all__ = [
    "ComponentChange",
    "DiffEngine",
    "DiffSummary",
    "SnapshotDiff",
    "TokenDelta",
    "diff_snapshots",
    "format_diff_text",
]
