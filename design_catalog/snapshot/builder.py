"""Snapshot assembly over a file set.

The token phase and the component phase are independent: a broken theme
config never stops component extraction, and bad source files never stop
token loading. Files are analyzed in parallel; the final component order
is a sort by (category, name), never the completion order.
"""

import threading
import time
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..analysis.component_analyzer import (
    SKIP_NOT_COMPONENT,
    SKIP_READ_ERROR,
    ComponentAnalyzer,
    FileAnalysis,
)
from ..analysis.parsing import compute_fingerprint
from ..catalog_logging import LogCategory, get_category_logger
from ..categories import CategoryTable
from ..models import ComponentDescriptor, ProjectInfo, Snapshot
from ..styles.base import create_style_extractor
from ..styles.utility_classes import strip_variants
from ..token_store import ConfigValue, TokenStore
from ..tokens import TokenTable
from .cache import AnalysisCache

logger = get_category_logger(LogCategory.SNAPSHOT)

SKIP_ANALYSIS_ERROR = "analysis-error"


@dataclass(frozen=True)
class SourceFile:
    """A candidate file supplied by the discovery collaborator."""

    path: str
    content: bytes

    @classmethod
    def from_path(cls, path: Path, root: Path | None = None) -> "SourceFile":
        """Read a file, recording its path relative to ``root`` when given."""
        display = path.relative_to(root).as_posix() if root else path.as_posix()
        return cls(path=display, content=path.read_bytes())


@dataclass(frozen=True)
class SkippedFile:
    path: str
    reason: str
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"path": self.path, "reason": self.reason, "message": self.message}


def read_source_files(
    paths: Iterable[Path], root: Path | None = None
) -> tuple[list[SourceFile], list[SkippedFile]]:
    """Read candidate files; unreadable ones become ``read-error`` skips."""
    files: list[SourceFile] = []
    skipped: list[SkippedFile] = []
    for path in paths:
        try:
            files.append(SourceFile.from_path(path, root))
        except OSError as e:
            display = path.relative_to(root).as_posix() if root else path.as_posix()
            skipped.append(SkippedFile(display, SKIP_READ_ERROR, str(e)))
    return files, skipped


@dataclass
class BuildReport:
    """Aggregate warnings and counts for one build."""

    files_total: int = 0
    files_processed: int = 0
    components: int = 0
    skipped: list[SkippedFile] = field(default_factory=list)
    non_components: list[str] = field(default_factory=list)
    unresolved_styles: int = 0
    style_warnings: int = 0
    token_warnings: list[str] = field(default_factory=list)
    duplicate_warnings: list[str] = field(default_factory=list)
    cancelled: bool = False
    duration_ms: float = 0.0

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)

    @property
    def warning_count(self) -> int:
        return (
            len(self.skipped)
            + len(self.token_warnings)
            + len(self.duplicate_warnings)
            + self.style_warnings
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "filesTotal": self.files_total,
            "filesProcessed": self.files_processed,
            "components": self.components,
            "skipped": [item.to_dict() for item in self.skipped],
            "nonComponents": list(self.non_components),
            "unresolvedStyles": self.unresolved_styles,
            "styleWarnings": self.style_warnings,
            "tokenWarnings": list(self.token_warnings),
            "duplicateWarnings": list(self.duplicate_warnings),
            "cancelled": self.cancelled,
            "durationMs": round(self.duration_ms, 1),
        }

    def summary(self) -> str:
        """One-line human-readable summary."""
        text = (
            f"{self.components} components from {self.files_processed}/{self.files_total} files, "
            f"{self.skipped_count} skipped, {self.unresolved_styles} unresolved style expressions"
        )
        if self.cancelled:
            text += " (cancelled)"
        return text


@dataclass(frozen=True)
class BuildResult:
    snapshot: Snapshot
    report: BuildReport


class SnapshotBuilder:
    """Drives the analyzer and the token store to produce a Snapshot."""

    def __init__(
        self,
        style_system: str = "tailwind",
        categories: Mapping[str, str] | None = None,
        max_workers: int = 4,
        cache: AnalysisCache | None = None,
        token_store: TokenStore | None = None,
        project: ProjectInfo | None = None,
    ):
        """Initialize the builder.

        Args:
            style_system: Style system name passed to the extractor factory.
            categories: Category table, or a plain ``componentName -> category`` map.
            max_workers: Worker threads for file analysis; 1 runs sequentially.
            cache: Optional analysis cache shared across builds.
            token_store: Token store, defaults to a fresh TokenStore.
            project: Project metadata recorded in the snapshot.
        """
        self.style_system = style_system
        self.categories = (
            categories if isinstance(categories, CategoryTable) else CategoryTable(categories)
        )
        self.max_workers = max(1, max_workers)
        self.cache = cache
        self.token_store = token_store or TokenStore()
        self.project = project or ProjectInfo()
        self.analyzer = ComponentAnalyzer(
            style_extractor=create_style_extractor(style_system),
            categories=self.categories,
        )

    def build(
        self,
        files: Iterable[SourceFile],
        config_value: ConfigValue = None,
        cancel_event: threading.Event | None = None,
        timestamp: str | None = None,
        skipped: Iterable[SkippedFile] = (),
    ) -> BuildResult:
        """Build a snapshot.

        Args:
            files: Candidate source files.
            config_value: Theme configuration value for the token store.
            cancel_event: Checked before each file; when set, the build stops
                and returns the components analyzed so far.
            timestamp: Override for the snapshot timestamp.
            skipped: Files the caller could not read; counted in the report.

        Returns:
            BuildResult holding the snapshot and its report.
        """
        start = time.perf_counter()
        file_list = list(files)
        report = BuildReport(skipped=list(skipped))
        report.files_total = len(file_list) + len(report.skipped)
        for item in report.skipped:
            logger.warning(f"Skipping {item.path}: {item.message or item.reason}")
        cancel_event = cancel_event or threading.Event()

        tokens, token_warnings = self.token_store.load_with_warnings(config_value)
        report.token_warnings.extend(token_warnings)
        for warning in token_warnings:
            logger.warning(warning)

        if self.max_workers > 1 and len(file_list) > 1:
            analyses = self._analyze_parallel(file_list, cancel_event)
        else:
            analyses = self._analyze_sequential(file_list, cancel_event)

        report.cancelled = cancel_event.is_set()
        descriptors = self._collect(analyses, report)
        tokens = self._with_usage_sites(tokens, descriptors)

        snapshot = Snapshot(
            components=tuple(descriptors),
            tokens=tokens,
            project=self.project,
            timestamp=timestamp or datetime.now(UTC).isoformat(),
        )
        report.duration_ms = (time.perf_counter() - start) * 1000
        logger.info(report.summary(), extra={"duration_ms": round(report.duration_ms, 1)})
        return BuildResult(snapshot=snapshot, report=report)

    def _analyze_sequential(
        self, files: list[SourceFile], cancel_event: threading.Event
    ) -> list[FileAnalysis]:
        results = []
        for source in files:
            if cancel_event.is_set():
                logger.info("Snapshot build cancelled")
                break
            results.append(self._analyze_file(source))
        return results

    def _analyze_parallel(
        self, files: list[SourceFile], cancel_event: threading.Event
    ) -> list[FileAnalysis]:
        results = []
        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self._analyze_unless_cancelled, source, cancel_event): source
                for source in files
            }
            for future in as_completed(futures):
                analysis = future.result()
                if analysis is not None:
                    results.append(analysis)
        return results

    def _analyze_unless_cancelled(
        self, source: SourceFile, cancel_event: threading.Event
    ) -> FileAnalysis | None:
        if cancel_event.is_set():
            return None
        return self._analyze_file(source)

    def _analyze_file(self, source: SourceFile) -> FileAnalysis:
        """Analyze one file, isolating any unexpected failure to that file."""
        fingerprint = compute_fingerprint(source.content)
        if self.cache is not None:
            cached = self.cache.get(source.path, fingerprint)
            if cached is not None:
                return cached

        try:
            analysis = self.analyzer.analyze(source.path, source.content)
        except Exception as e:
            logger.warning(f"Analysis failed for {source.path}: {e}")
            return FileAnalysis(
                source.path, fingerprint, skip_reason=SKIP_ANALYSIS_ERROR, message=str(e)
            )

        if self.cache is not None:
            self.cache.set(analysis)
        return analysis

    def _collect(
        self, analyses: list[FileAnalysis], report: BuildReport
    ) -> list[ComponentDescriptor]:
        report.files_processed = len(analyses)
        descriptors: list[ComponentDescriptor] = []
        for analysis in analyses:
            if analysis.descriptor is not None:
                descriptors.append(self._categorized(analysis.descriptor))
            elif analysis.skip_reason == SKIP_NOT_COMPONENT:
                report.non_components.append(analysis.file_path)
            else:
                report.skipped.append(
                    SkippedFile(analysis.file_path, analysis.skip_reason or "", analysis.message)
                )
                logger.warning(
                    f"Skipping {analysis.file_path}: {analysis.message or analysis.skip_reason}"
                )

        report.skipped.sort(key=lambda item: item.path)
        report.non_components.sort()
        descriptors.sort(key=lambda d: (d.category, d.name, d.file_path))

        unique: list[ComponentDescriptor] = []
        seen: dict[tuple[str, str], str] = {}
        for descriptor in descriptors:
            first = seen.get(descriptor.identity)
            if first is not None:
                message = (
                    f"Duplicate component '{descriptor.name}' in {descriptor.file_path}, "
                    f"keeping {first}"
                )
                report.duplicate_warnings.append(message)
                logger.warning(message)
                continue
            seen[descriptor.identity] = descriptor.file_path
            unique.append(descriptor)
            report.unresolved_styles += len(descriptor.style_notes)
            report.style_warnings += len(descriptor.style_issues)

        report.components = len(unique)
        return unique

    def _categorized(self, descriptor: ComponentDescriptor) -> ComponentDescriptor:
        """Cached analyses may predate the current category table."""
        category = self.categories.category_for(descriptor.name, descriptor.file_path)
        if descriptor.category == category:
            return descriptor
        return replace(descriptor, category=category)

    def _with_usage_sites(
        self, tokens: TokenTable, descriptors: list[ComponentDescriptor]
    ) -> TokenTable:
        if not tokens.colors or self.analyzer.style_extractor.style_system != "utility":
            return tokens
        usage: dict[str, list[str]] = {}
        for descriptor in descriptors:
            for color in self._referenced_colors(descriptor.style_tokens, tokens.colors):
                sites = usage.setdefault(color, [])
                if descriptor.name not in sites:
                    sites.append(descriptor.name)
        return tokens.with_usage_sites({name: sorted(sites) for name, sites in usage.items()})

    @staticmethod
    def _referenced_colors(style_tokens: Iterable[str], colors: Mapping[str, Any]) -> set[str]:
        """Colors a utility class ends with, e.g. ``hover:bg-primary-500/50``."""
        found: set[str] = set()
        for token in style_tokens:
            parts = strip_variants(token).split("/")[0].split("-")
            for index in range(1, len(parts)):
                suffix = "-".join(parts[index:])
                if suffix in colors:
                    found.add(suffix)
                    break
        return found


def build_snapshot(
    files: Iterable[SourceFile],
    config_value: ConfigValue = None,
    categories: Mapping[str, str] | None = None,
    style_system: str = "tailwind",
    max_workers: int = 4,
    project: ProjectInfo | None = None,
) -> BuildResult:
    """Convenience wrapper around SnapshotBuilder.build."""
    builder = SnapshotBuilder(
        style_system=style_system,
        categories=categories,
        max_workers=max_workers,
        project=project,
    )
    return builder.build(files, config_value)
