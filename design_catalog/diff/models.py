"""Diff result models. A diff is derived data, recomputable from two snapshots."""

from dataclasses import dataclass, field
from typing import Any

from ..models import ComponentDescriptor


@dataclass(frozen=True)
class ComponentChange:
    """Field-level delta of a component present in both snapshots."""

    name: str
    category: str
    file_path: str
    classes_added: tuple[str, ...] = ()
    classes_removed: tuple[str, ...] = ()
    props_changed: bool = False
    fingerprint_changed: bool = False
    dependencies_added: tuple[str, ...] = ()
    dependencies_removed: tuple[str, ...] = ()

    @property
    def identity(self) -> tuple[str, str]:
        return (self.category, self.name)

    @property
    def is_modified(self) -> bool:
        return bool(
            self.classes_added
            or self.classes_removed
            or self.props_changed
            or self.fingerprint_changed
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "componentName": self.name,
            "category": self.category,
            "filePath": self.file_path,
            "classesAdded": list(self.classes_added),
            "classesRemoved": list(self.classes_removed),
            "propsChanged": self.props_changed,
            "fingerprintChanged": self.fingerprint_changed,
            "dependenciesAdded": list(self.dependencies_added),
            "dependenciesRemoved": list(self.dependencies_removed),
        }


@dataclass(frozen=True)
class TokenDelta:
    """Key-level changes of one token category."""

    category: str
    added: dict[str, Any] = field(default_factory=dict)
    removed: dict[str, Any] = field(default_factory=dict)
    modified: dict[str, dict[str, Any]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not (self.added or self.removed or self.modified)

    def counts(self) -> dict[str, int]:
        return {
            "added": len(self.added),
            "removed": len(self.removed),
            "modified": len(self.modified),
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "added": dict(self.added),
            "removed": dict(self.removed),
            "modified": {key: dict(change) for key, change in self.modified.items()},
        }


@dataclass(frozen=True)
class DiffSummary:
    """Order-independent aggregate counts of a diff."""

    components_added: int = 0
    components_removed: int = 0
    components_modified: int = 0
    components_unchanged: int = 0
    new_classes: tuple[str, ...] = ()
    removed_classes: tuple[str, ...] = ()
    token_counts: dict[str, dict[str, int]] = field(default_factory=dict)

    @property
    def total_changes(self) -> int:
        return self.components_added + self.components_removed + self.components_modified

    @property
    def token_changes(self) -> int:
        return sum(sum(counts.values()) for counts in self.token_counts.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "componentsAdded": self.components_added,
            "componentsRemoved": self.components_removed,
            "componentsModified": self.components_modified,
            "componentsUnchanged": self.components_unchanged,
            "totalChanges": self.total_changes,
            "newClasses": list(self.new_classes),
            "removedClasses": list(self.removed_classes),
            "tokenCounts": {key: dict(value) for key, value in self.token_counts.items()},
        }


@dataclass(frozen=True)
class SnapshotDiff:
    """Differences between a base and a current snapshot."""

    base_timestamp: str
    current_timestamp: str
    added: tuple[ComponentDescriptor, ...] = ()
    removed: tuple[ComponentDescriptor, ...] = ()
    modified: tuple[ComponentChange, ...] = ()
    unchanged: tuple[tuple[str, str], ...] = ()
    token_deltas: dict[str, TokenDelta] = field(default_factory=dict)
    impact_hints: dict[str, tuple[str, ...]] = field(default_factory=dict)
    summary: DiffSummary = field(default_factory=DiffSummary)

    @property
    def has_changes(self) -> bool:
        return bool(self.added or self.removed or self.modified or self.token_deltas)

    def to_dict(self) -> dict[str, Any]:
        return {
            "baseTimestamp": self.base_timestamp,
            "currentTimestamp": self.current_timestamp,
            "added": [component.to_dict() for component in self.added],
            "removed": [component.to_dict() for component in self.removed],
            "modified": [change.to_dict() for change in self.modified],
            "unchanged": [{"category": c, "componentName": n} for c, n in self.unchanged],
            "tokens": {name: delta.to_dict() for name, delta in self.token_deltas.items()},
            "impactHints": {name: list(users) for name, users in self.impact_hints.items()},
            "summary": self.summary.to_dict(),
        }
