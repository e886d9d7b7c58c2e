"""Source file discovery with include/exclude glob patterns."""

import fnmatch
import re
from collections.abc import Iterable
from pathlib import Path

from .analysis.parsing import SUPPORTED_EXTENSIONS
from .catalog_logging import get_logger
from .config import SourceConfig

logger = get_logger()

_BRACES = re.compile(r"\{([^{}]*)\}")
ALWAYS_EXCLUDED_DIRS = frozenset({"node_modules", ".git", "dist", "build"})


def expand_braces(pattern: str) -> list[str]:
    """Expand ``*.{tsx,jsx}`` into ``*.tsx`` and ``*.jsx``."""
    match = _BRACES.search(pattern)
    if not match:
        return [pattern]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(
            expand_braces(pattern[: match.start()] + option.strip() + pattern[match.end() :])
        )
    return expanded


def matches_any(relative_path: str, patterns: Iterable[str]) -> bool:
    """Glob match where a leading ``**/`` also matches the top level."""
    for raw in patterns:
        for pattern in expand_braces(raw):
            if fnmatch.fnmatch(relative_path, pattern):
                return True
            if pattern.startswith("**/") and fnmatch.fnmatch(relative_path, pattern[3:]):
                return True
    return False


def discover_files(project_path: Path, source: SourceConfig) -> list[Path]:
    """List parseable source files under the configured source directory, sorted."""
    root = project_path / source.dir
    if not root.is_dir():
        logger.warning(f"Source directory not found: {root}")
        return []

    found: list[Path] = []
    for path in root.rglob("*"):
        if not path.is_file() or path.suffix.lower() not in SUPPORTED_EXTENSIONS:
            continue
        relative = path.relative_to(root).as_posix()
        if ALWAYS_EXCLUDED_DIRS.intersection(path.relative_to(root).parts[:-1]):
            continue
        if not matches_any(relative, source.include):
            continue
        if matches_any(relative, source.exclude):
            continue
        found.append(path)

    logger.debug(f"Discovered {len(found)} source files in {root}")
    return sorted(found)
