"""Snapshot persistence as versioned JSON files."""

import json
import re
from pathlib import Path

from ..catalog_logging import LogCategory, get_category_logger
from ..errors import SnapshotFormatError, SnapshotNotFoundError
from ..models import Snapshot

logger = get_category_logger(LogCategory.SNAPSHOT)

DEFAULT_SNAPSHOT_DIR = ".design-system-snapshots"
LATEST_FILE = "latest.json"


def load_snapshot(path: Path) -> Snapshot:
    """Load and version-check a snapshot file.

    Raises:
        SnapshotNotFoundError: If the file does not exist.
        SnapshotFormatError: If the file cannot be read or decoded, the
            JSON is invalid, or the version is incompatible.
    """
    if not path.exists():
        raise SnapshotNotFoundError(str(path))
    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise SnapshotFormatError(f"Snapshot is not valid JSON: {e}", path=str(path)) from e
    except UnicodeDecodeError as e:
        raise SnapshotFormatError(f"Snapshot is not valid UTF-8: {e}", path=str(path)) from e
    except OSError as e:
        raise SnapshotFormatError(f"Snapshot could not be read: {e}", path=str(path)) from e
    return Snapshot.from_dict(data, path=str(path))


def save_snapshot(snapshot: Snapshot, path: Path) -> Path:
    """Write a snapshot as pretty-printed JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(snapshot.to_dict(), f, indent=2, ensure_ascii=False)
        f.write("\n")
    return path


class SnapshotStore:
    """A directory of timestamped snapshots plus a ``latest.json`` copy."""

    def __init__(self, directory: Path | str = DEFAULT_SNAPSHOT_DIR):
        self.directory = Path(directory)

    @staticmethod
    def filename_for(snapshot: Snapshot) -> str:
        stamp = re.sub(r"[^0-9A-Za-z]+", "-", snapshot.timestamp).strip("-")
        return f"snapshot-{stamp or 'undated'}.json"

    def save(self, snapshot: Snapshot, name: str | None = None) -> Path:
        """Save a snapshot and refresh ``latest.json``.

        Returns:
            Path of the timestamped snapshot file.
        """
        path = self.directory / (name or self.filename_for(snapshot))
        save_snapshot(snapshot, path)
        if path.name != LATEST_FILE:
            save_snapshot(snapshot, self.directory / LATEST_FILE)
        logger.info(f"Saved snapshot with {len(snapshot.components)} components to {path}")
        return path

    def load(self, path: Path | str) -> Snapshot:
        """Load a snapshot by path, or by file name inside the store."""
        candidate = Path(path)
        if not candidate.exists() and not candidate.is_absolute():
            candidate = self.directory / candidate
        return load_snapshot(candidate)

    def latest(self) -> Snapshot:
        return load_snapshot(self.directory / LATEST_FILE)

    def list_snapshots(self) -> list[Path]:
        """Timestamped snapshot files, newest first."""
        if not self.directory.exists():
            return []
        return sorted(self.directory.glob("snapshot-*.json"), reverse=True)

    def previous(self) -> Snapshot:
        """The second newest timestamped snapshot."""
        snapshots = self.list_snapshots()
        if len(snapshots) < 2:
            raise SnapshotNotFoundError(str(self.directory / "snapshot-*.json"))
        return load_snapshot(snapshots[1])
