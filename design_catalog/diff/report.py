"""Plain-text rendering of a SnapshotDiff for terminal output."""

from .models import SnapshotDiff


def format_diff_text(diff: SnapshotDiff, use_color: bool = False) -> str:
    """Render a diff as a short human-readable report."""
    green = "\033[92m" if use_color else ""
    red = "\033[91m" if use_color else ""
    yellow = "\033[93m" if use_color else ""
    reset = "\033[0m" if use_color else ""

    summary = diff.summary
    lines = [
        f"Design system changes ({diff.base_timestamp} -> {diff.current_timestamp})",
        f"  {summary.components_added} added, {summary.components_removed} removed, "
        f"{summary.components_modified} modified, {summary.components_unchanged} unchanged",
    ]

    if not diff.has_changes:
        lines.append("  No changes detected")
        return "\n".join(lines)

    for component in diff.added:
        lines.append(f"{green}+ {component.category}/{component.name}{reset}")
    for component in diff.removed:
        lines.append(f"{red}- {component.category}/{component.name}{reset}")
    for change in diff.modified:
        lines.append(f"{yellow}~ {change.category}/{change.name}{reset}")
        if change.classes_added:
            lines.append(f"    classes added: {' '.join(change.classes_added)}")
        if change.classes_removed:
            lines.append(f"    classes removed: {' '.join(change.classes_removed)}")
        if change.props_changed:
            lines.append("    props changed")
        if change.fingerprint_changed and not (
            change.classes_added or change.classes_removed or change.props_changed
        ):
            lines.append("    source changed")
        users = diff.impact_hints.get(change.name)
        if users:
            lines.append(f"    used by: {', '.join(users)}")

    for category, delta in diff.token_deltas.items():
        counts = delta.counts()
        lines.append(
            f"tokens/{category}: +{counts['added']} -{counts['removed']} ~{counts['modified']}"
        )
        for key, change in delta.modified.items():
            lines.append(f"    {key}: {change['old']} -> {change['new']}")

    return "\n".join(lines)
