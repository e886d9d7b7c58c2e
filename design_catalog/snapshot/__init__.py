"""Snapshot building and persistence."""

from .builder import (
    BuildReport,
    BuildResult,
    SkippedFile,
    SnapshotBuilder,
    SourceFile,
    build_snapshot,
    read_source_files,
)
from .cache import AnalysisCache
from .storage import SnapshotStore, load_snapshot, save_snapshot

__all__ = [
    "AnalysisCache",
    "BuildReport",
    "BuildResult",
    "SkippedFile",
    "SnapshotBuilder",
    "SnapshotStore",
    "SourceFile",
    "build_snapshot",
    "load_snapshot",
    "read_source_files",
    "save_snapshot",
]
