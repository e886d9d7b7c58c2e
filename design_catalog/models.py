"""Data models for component descriptors and snapshots.

Descriptors and snapshots are frozen once built. Their ``to_dict`` output
is the persisted snapshot format, so existing keys must stay stable.
"""

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Union

from .errors import SnapshotFormatError
from .styles.base import ValidationIssue
from .tokens import TokenTable

FORMAT_VERSION = "1.0.0"
UNCLASSIFIED = "unclassified"
CATEGORIES = ("atoms", "molecules", "organisms", "templates", "pages")


def ensure_compatible_version(version: Any, path: str | None = None) -> None:
    """Reject snapshots whose formatVersion major differs from ours.

    Raises:
        SnapshotFormatError: If the version is missing, malformed or
            incompatible.
    """
    if not isinstance(version, str) or not version:
        raise SnapshotFormatError(
            "Snapshot has no formatVersion", expected_version=FORMAT_VERSION, path=path
        )
    major = version.split(".")[0]
    if not major.isdigit():
        raise SnapshotFormatError(
            f"Malformed snapshot formatVersion: {version}",
            found_version=version,
            expected_version=FORMAT_VERSION,
            path=path,
        )
    if major != FORMAT_VERSION.split(".")[0]:
        raise SnapshotFormatError(
            f"Incompatible snapshot formatVersion {version}",
            found_version=version,
            expected_version=FORMAT_VERSION,
            path=path,
        )


@dataclass(frozen=True)
class PropInfo:
    """A component prop. ``type`` is the raw annotation text, or "unknown"."""

    name: str
    type: str = "unknown"
    required: bool = False
    default: str | None = None

    @property
    def shape(self) -> tuple[str, str, bool]:
        return (self.name, self.type, self.required)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "required": self.required,
        }
        if self.default is not None:
            data["default"] = self.default
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PropInfo":
        return cls(
            name=data["name"],
            type=data.get("type", "unknown"),
            required=data.get("required", False),
            default=data.get("default"),
        )


@dataclass(frozen=True)
class JSXNode:
    """One element of the returned JSX tree.

    Static attribute values are kept; expression-valued attributes are
    recorded by name only.
    """

    tag: str
    attributes: dict[str, Any] = field(default_factory=dict)
    dynamic_attributes: tuple[str, ...] = ()
    children: tuple[Union["JSXNode", str], ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "tag": self.tag,
            "staticAttributes": dict(self.attributes),
            "dynamicAttributes": list(self.dynamic_attributes),
            "children": [
                child.to_dict() if isinstance(child, JSXNode) else child
                for child in self.children
            ],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JSXNode":
        return cls(
            tag=data["tag"],
            attributes=dict(data.get("staticAttributes", {})),
            dynamic_attributes=tuple(data.get("dynamicAttributes", [])),
            children=tuple(
                cls.from_dict(child) if isinstance(child, dict) else child
                for child in data.get("children", [])
            ),
        )


@dataclass(frozen=True)
class ComponentDescriptor:
    """Structured record of one discovered component."""

    name: str
    category: str
    file_path: str
    fingerprint: str
    props: tuple[PropInfo, ...] = ()
    style_tokens: tuple[str, ...] = ()
    conditional_tokens: tuple[str, ...] = ()
    structure: JSXNode | None = None
    dependencies: tuple[str, ...] = ()
    style_notes: tuple[str, ...] = ()
    style_issues: tuple[ValidationIssue, ...] = ()

    @property
    def identity(self) -> tuple[str, str]:
        """Key used to match components across snapshots."""
        return (self.category, self.name)

    @property
    def component_id(self) -> str:
        return f"{self.category}-{self.name}".lower()

    @property
    def prop_shape(self) -> frozenset[tuple[str, str, bool]]:
        return frozenset(prop.shape for prop in self.props)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.component_id,
            "componentName": self.name,
            "category": self.category,
            "filePath": self.file_path,
            "fingerprint": self.fingerprint,
            "props": [prop.to_dict() for prop in self.props],
            "styleTokens": list(self.style_tokens),
            "conditionalTokens": list(self.conditional_tokens),
            "structure": self.structure.to_dict() if self.structure else None,
            "dependencies": list(self.dependencies),
            "unresolvedStyles": list(self.style_notes),
            "styleWarnings": [issue.to_dict() for issue in self.style_issues],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ComponentDescriptor":
        structure = data.get("structure")
        return cls(
            name=data["componentName"],
            category=data.get("category", UNCLASSIFIED),
            file_path=data.get("filePath", ""),
            fingerprint=data.get("fingerprint", ""),
            props=tuple(PropInfo.from_dict(prop) for prop in data.get("props", [])),
            style_tokens=tuple(data.get("styleTokens", [])),
            conditional_tokens=tuple(data.get("conditionalTokens", [])),
            structure=JSXNode.from_dict(structure) if structure else None,
            dependencies=tuple(data.get("dependencies", [])),
            style_notes=tuple(data.get("unresolvedStyles", [])),
            style_issues=tuple(
                ValidationIssue.from_dict(issue) for issue in data.get("styleWarnings", [])
            ),
        )


@dataclass(frozen=True)
class ProjectInfo:
    """Project metadata recorded in every snapshot."""

    name: str = "unknown"
    version: str = "0.0.0"
    framework: str = "react"
    styling: str = "tailwindcss"

    @classmethod
    def from_package_json(cls, path: Path, styling: str = "tailwindcss") -> "ProjectInfo":
        """Read name and version from a package.json, falling back to defaults."""
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return cls(styling=styling)
        if not isinstance(data, dict):
            return cls(styling=styling)
        return cls(
            name=str(data.get("name", "unknown")),
            version=str(data.get("version", "0.0.0")),
            styling=styling,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "version": self.version,
            "framework": self.framework,
            "styling": self.styling,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProjectInfo":
        return cls(
            name=data.get("name", "unknown"),
            version=data.get("version", "0.0.0"),
            framework=data.get("framework", "react"),
            styling=data.get("styling", "tailwindcss"),
        )


@dataclass(frozen=True)
class Snapshot:
    """Timestamped collection of component descriptors plus tokens."""

    components: tuple[ComponentDescriptor, ...] = ()
    tokens: TokenTable = field(default_factory=TokenTable)
    project: ProjectInfo = field(default_factory=ProjectInfo)
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    format_version: str = FORMAT_VERSION

    def component_map(self) -> dict[tuple[str, str], ComponentDescriptor]:
        return {component.identity: component for component in self.components}

    def to_dict(self) -> dict[str, Any]:
        return {
            "formatVersion": self.format_version,
            "timestamp": self.timestamp,
            "project": self.project.to_dict(),
            "components": [component.to_dict() for component in self.components],
            "tokens": self.tokens.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], path: str | None = None) -> "Snapshot":
        """Create from dictionary after checking the format version.

        Raises:
            SnapshotFormatError: On version mismatch or malformed content.
        """
        if not isinstance(data, dict):
            raise SnapshotFormatError("Snapshot must be a JSON object", path=path)
        ensure_compatible_version(data.get("formatVersion"), path=path)
        try:
            return cls(
                format_version=data["formatVersion"],
                timestamp=data.get("timestamp", ""),
                project=ProjectInfo.from_dict(data.get("project", {})),
                components=tuple(
                    ComponentDescriptor.from_dict(item) for item in data.get("components", [])
                ),
                tokens=TokenTable.from_dict(data.get("tokens", {})),
            )
        except (KeyError, TypeError, AttributeError, ValueError) as e:
            raise SnapshotFormatError(f"Malformed snapshot: {e}", path=path) from e
