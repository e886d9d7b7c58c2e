"""Snapshot comparison.

Components are matched by ``(category, componentName)``. Style tokens are
compared as sets, so reordering alone never counts as a change; the
reported added/removed lists keep the order of the snapshot they come from.
"""

from typing import Any

from ..catalog_logging import LogCategory, get_category_logger
from ..models import ComponentDescriptor, Snapshot, ensure_compatible_version
from .models import ComponentChange, DiffSummary, SnapshotDiff, TokenDelta

logger = get_category_logger(LogCategory.DIFF)


def _ordered_difference(items: tuple[str, ...], other: tuple[str, ...]) -> tuple[str, ...]:
    excluded = set(other)
    seen: set[str] = set()
    result = []
    for item in items:
        if item not in excluded and item not in seen:
            seen.add(item)
            result.append(item)
    return tuple(result)


class DiffEngine:
    """Pure, deterministic comparison of two snapshots."""

    def diff(self, base: Snapshot, current: Snapshot) -> SnapshotDiff:
        """Compute the differences from ``base`` to ``current``.

        Raises:
            SnapshotFormatError: If either snapshot has an incompatible
                formatVersion.
        """
        ensure_compatible_version(base.format_version)
        ensure_compatible_version(current.format_version)

        base_map = base.component_map()
        current_map = current.component_map()

        added = tuple(current_map[key] for key in sorted(current_map.keys() - base_map.keys()))
        removed = tuple(base_map[key] for key in sorted(base_map.keys() - current_map.keys()))

        modified: list[ComponentChange] = []
        unchanged: list[tuple[str, str]] = []
        for key in sorted(base_map.keys() & current_map.keys()):
            change = self.compare_components(base_map[key], current_map[key])
            if change.is_modified:
                modified.append(change)
            else:
                unchanged.append(key)

        token_deltas = self.compare_tokens(
            base.tokens.comparable_categories(), current.tokens.comparable_categories()
        )
        impact_hints = self._impact_hints(current, modified, removed)

        summary = DiffSummary(
            components_added=len(added),
            components_removed=len(removed),
            components_modified=len(modified),
            components_unchanged=len(unchanged),
            new_classes=tuple(sorted({c for change in modified for c in change.classes_added})),
            removed_classes=tuple(
                sorted({c for change in modified for c in change.classes_removed})
            ),
            token_counts={name: delta.counts() for name, delta in token_deltas.items()},
        )
        logger.debug(
            f"Diff: {summary.components_added} added, {summary.components_removed} removed, "
            f"{summary.components_modified} modified"
        )
        return SnapshotDiff(
            base_timestamp=base.timestamp,
            current_timestamp=current.timestamp,
            added=added,
            removed=removed,
            modified=tuple(modified),
            unchanged=tuple(unchanged),
            token_deltas=token_deltas,
            impact_hints=impact_hints,
            summary=summary,
        )

    @staticmethod
    def compare_components(
        base: ComponentDescriptor, current: ComponentDescriptor
    ) -> ComponentChange:
        """Field-level comparison of one matched pair."""
        return ComponentChange(
            name=current.name,
            category=current.category,
            file_path=current.file_path,
            classes_added=_ordered_difference(current.style_tokens, base.style_tokens),
            classes_removed=_ordered_difference(base.style_tokens, current.style_tokens),
            props_changed=base.prop_shape != current.prop_shape,
            fingerprint_changed=base.fingerprint != current.fingerprint,
            dependencies_added=_ordered_difference(current.dependencies, base.dependencies),
            dependencies_removed=_ordered_difference(base.dependencies, current.dependencies),
        )

    @staticmethod
    def compare_tokens(
        base: dict[str, dict[str, Any]], current: dict[str, dict[str, Any]]
    ) -> dict[str, TokenDelta]:
        """Per-category key differences; only non-empty deltas are returned."""
        deltas: dict[str, TokenDelta] = {}
        for category in sorted(base.keys() | current.keys()):
            old = base.get(category, {})
            new = current.get(category, {})
            delta = TokenDelta(
                category=category,
                added={key: new[key] for key in sorted(new.keys() - old.keys())},
                removed={key: old[key] for key in sorted(old.keys() - new.keys())},
                modified={
                    key: {"old": old[key], "new": new[key]}
                    for key in sorted(old.keys() & new.keys())
                    if old[key] != new[key]
                },
            )
            if not delta.is_empty:
                deltas[category] = delta
        return deltas

    @staticmethod
    def _impact_hints(
        current: Snapshot,
        modified: list[ComponentChange],
        removed: tuple[ComponentDescriptor, ...],
    ) -> dict[str, tuple[str, ...]]:
        """Current components that reference a modified or removed component."""
        changed = {change.name for change in modified} | {c.name for c in removed}
        hints: dict[str, tuple[str, ...]] = {}
        for name in sorted(changed):
            users = sorted(
                {
                    component.name
                    for component in current.components
                    if name in component.dependencies and component.name != name
                }
            )
            if users:
                hints[name] = tuple(users)
        return hints


def diff_snapshots(base: Snapshot, current: Snapshot) -> SnapshotDiff:
    """Convenience wrapper around DiffEngine.diff."""
    return DiffEngine().diff(base, current)
