"""In-memory analysis cache keyed by file path and content fingerprint.

Used by repeated builds (for example a watch loop) to skip re-parsing files
whose bytes did not change. Purely an optimization.
"""

from collections import OrderedDict
from threading import Lock
from typing import Any

from ..analysis.component_analyzer import FileAnalysis
from ..catalog_logging import get_logger


class AnalysisCache:
    """Thread-safe LRU cache of FileAnalysis results."""

    # Increment when analyzer output changes to invalidate old entries
    CACHE_VERSION = "v1"

    def __init__(self, max_entries: int = 5000):
        self.logger = get_logger()
        self.max_entries = max_entries
        self._lock = Lock()
        self._entries: OrderedDict[tuple[str, str], FileAnalysis] = OrderedDict()
        self._hits = 0
        self._misses = 0

    def get(self, file_path: str, fingerprint: str) -> FileAnalysis | None:
        """Return the cached analysis for this exact file content."""
        key = (file_path, fingerprint)
        with self._lock:
            analysis = self._entries.get(key)
            if analysis is None:
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return analysis

    def set(self, analysis: FileAnalysis) -> None:
        """Store an analysis, evicting the least recently used entry if full."""
        key = (analysis.file_path, analysis.fingerprint)
        with self._lock:
            self._entries[key] = analysis
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                self.logger.debug(f"Evicted cached analysis for {evicted[0]}")

    def invalidate(self, file_path: str) -> int:
        """Drop every cached entry for a path. Returns the number removed."""
        with self._lock:
            stale = [key for key in self._entries if key[0] == file_path]
            for key in stale:
                del self._entries[key]
            return len(stale)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
            self._hits = 0
            self._misses = 0

    def get_stats(self) -> dict[str, Any]:
        """Return cache statistics."""
        with self._lock:
            total = self._hits + self._misses
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "hit_rate": round(self._hits / total, 3) if total else 0.0,
                "version": self.CACHE_VERSION,
            }
