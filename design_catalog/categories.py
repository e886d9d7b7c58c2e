"""Component name to design-system category assignment."""

import fnmatch
from collections.abc import Iterable, Iterator, Mapping

from .catalog_logging import get_logger
from .models import CATEGORIES, UNCLASSIFIED

logger = get_logger()


def _is_path_pattern(entry: str) -> bool:
    return "/" in entry or "*" in entry or "?" in entry


class CategoryTable(Mapping[str, str]):
    """Read-only ``componentName -> category`` table.

    Entries that look like path globs (``**/atoms/**``) match the
    component's file path instead of its name. Exact names win over path
    patterns; anything unmatched is ``unclassified``.
    """

    def __init__(self, assignments: Mapping[str, str] | None = None):
        self._names: dict[str, str] = {}
        self._patterns: list[tuple[str, str]] = []
        self.warnings: list[str] = []
        for entry, category in (assignments or {}).items():
            if category not in CATEGORIES:
                self.warnings.append(f"Ignoring unknown category '{category}' for '{entry}'")
                continue
            if _is_path_pattern(entry):
                self._patterns.append((entry, category))
            else:
                self._names[entry] = category

    @classmethod
    def from_groups(cls, groups: Mapping[str, Iterable[str]] | None) -> "CategoryTable":
        """Build from the ``categorization`` config shape.

        Example:
            >>> table = CategoryTable.from_groups({"atoms": ["Button", "Input"]})
            >>> table.category_for("Button")
            'atoms'
        """
        assignments: dict[str, str] = {}
        warnings: list[str] = []
        for category, entries in (groups or {}).items():
            if category not in CATEGORIES:
                warnings.append(f"Ignoring unknown category group '{category}'")
                continue
            if isinstance(entries, str):
                entries = [entries]
            for entry in entries:
                if entry in assignments and assignments[entry] != category:
                    warnings.append(
                        f"'{entry}' listed under both '{assignments[entry]}' "
                        f"and '{category}', keeping '{assignments[entry]}'"
                    )
                    continue
                assignments[entry] = category

        table = cls(assignments)
        table.warnings = warnings + table.warnings
        for warning in table.warnings:
            logger.warning(warning)
        return table

    def category_for(self, name: str, file_path: str | None = None) -> str:
        if name in self._names:
            return self._names[name]
        if file_path:
            normalized = "/" + file_path.replace("\\", "/").lstrip("/")
            for pattern, category in self._patterns:
                if fnmatch.fnmatch(normalized, pattern) or fnmatch.fnmatch(
                    normalized, "/" + pattern.lstrip("/")
                ):
                    return category
        return UNCLASSIFIED

    def __getitem__(self, name: str) -> str:
        return self._names[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._names)

    def __len__(self) -> int:
        return len(self._names)
