"""Catalog configuration loader.

Reads ``design-system.config.js`` (statically evaluated) or a JSON
equivalent. Only the keys the pipeline needs are modelled; unknown keys
are ignored.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .catalog_logging import get_logger
from .config_eval import read_config_value
from .errors import ConfigEvaluationError, ConfigurationError
from .styles.base import STYLE_SYSTEM_ALIASES

logger = get_logger()

CONFIG_FILENAMES = (
    "design-system.config.js",
    "design-system.config.cjs",
    "design-system.config.mjs",
    "design-system.config.json",
)
CONFIG_ENV_VAR = "DESIGN_CATALOG_CONFIG"
THEME_CONFIG_FILENAMES = (
    "tailwind.config.js",
    "tailwind.config.cjs",
    "tailwind.config.mjs",
    "tailwind.config.ts",
)

DEFAULT_INCLUDE = ["**/*.{tsx,jsx,ts,js}"]
DEFAULT_EXCLUDE = [
    "**/*.test.*",
    "**/*.spec.*",
    "**/*.stories.*",
    "**/*.d.ts",
    "**/node_modules/**",
]


@dataclass
class SourceConfig:
    """Where component sources live."""

    dir: str = "src"
    include: list[str] = field(default_factory=lambda: list(DEFAULT_INCLUDE))
    exclude: list[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE))

    def to_dict(self) -> dict[str, Any]:
        return {"dir": self.dir, "include": self.include, "exclude": self.exclude}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SourceConfig":
        return cls(
            dir=data.get("dir", "src"),
            include=list(data.get("include", DEFAULT_INCLUDE)),
            exclude=list(data.get("exclude", DEFAULT_EXCLUDE)),
        )


@dataclass
class SnapshotConfig:
    """Where snapshots are stored."""

    dir: str = ".design-system-snapshots"
    workers: int = 4

    def to_dict(self) -> dict[str, Any]:
        return {"dir": self.dir, "workers": self.workers}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SnapshotConfig":
        return cls(dir=data.get("dir", ".design-system-snapshots"), workers=int(data.get("workers", 4)))


@dataclass
class CatalogConfig:
    """Complete catalog configuration."""

    style_system: str = "tailwind"
    source: SourceConfig = field(default_factory=SourceConfig)
    snapshots: SnapshotConfig = field(default_factory=SnapshotConfig)
    theme_config: str | None = None  # Path to tailwind.config.*, auto-detected if None
    categorization: dict[str, list[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.style_system.lower() not in STYLE_SYSTEM_ALIASES:
            raise ConfigurationError(
                f"Unknown styleSystem: {self.style_system}",
                suggestion=f"Use one of: {', '.join(sorted(STYLE_SYSTEM_ALIASES))}",
            )

    def to_dict(self) -> dict[str, Any]:
        return {
            "styleSystem": self.style_system,
            "source": self.source.to_dict(),
            "snapshots": self.snapshots.to_dict(),
            "themeConfig": self.theme_config,
            "categorization": self.categorization,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CatalogConfig":
        categorization = data.get("categorization", {})
        if not isinstance(categorization, dict):
            raise ConfigurationError("'categorization' must be an object of name lists")
        return cls(
            style_system=str(data.get("styleSystem", "tailwind")),
            source=SourceConfig.from_dict(data.get("source", {})),
            snapshots=SnapshotConfig.from_dict(data.get("snapshots", {})),
            theme_config=data.get("themeConfig"),
            categorization={
                str(key): [value] if isinstance(value, str) else list(value)
                for key, value in categorization.items()
            },
        )

    def resolve_theme_config(self, project_path: Path) -> Path | None:
        """Explicit theme config path, or the first tailwind.config.* found."""
        if self.theme_config:
            return project_path / self.theme_config
        for name in THEME_CONFIG_FILENAMES:
            candidate = project_path / name
            if candidate.exists():
                return candidate
        return None


class CatalogConfigLoader:
    """Loader for catalog configuration."""

    def __init__(self, project_path: Path | None = None):
        self.project_path = Path(project_path) if project_path else Path.cwd()

    def load(self, config_path: Path | None = None) -> CatalogConfig:
        """Load catalog configuration.

        Precedence (highest to lowest):
        1. Explicit config_path
        2. Environment variable DESIGN_CATALOG_CONFIG
        3. design-system.config.{js,cjs,mjs,json} in project root
        4. Default configuration

        Raises:
            ConfigurationError: If an explicitly chosen file is missing or
                a config file cannot be evaluated.
        """
        if config_path is not None:
            if not config_path.exists():
                raise ConfigurationError(
                    f"Config file not found: {config_path}", config_file=str(config_path)
                )
            return self._load_from_file(config_path)

        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            env_config_path = Path(env_path)
            if env_config_path.exists():
                return self._load_from_file(env_config_path)
            logger.warning(f"{CONFIG_ENV_VAR} points to a missing file: {env_path}")

        for name in CONFIG_FILENAMES:
            project_config = self.project_path / name
            if project_config.exists():
                return self._load_from_file(project_config)

        logger.debug("No catalog config found, using defaults")
        return CatalogConfig()

    def _load_from_file(self, config_path: Path) -> CatalogConfig:
        logger.debug(f"Loading catalog config from {config_path}")
        try:
            data = read_config_value(config_path)
        except ConfigEvaluationError as e:
            raise ConfigurationError(e.message, config_file=str(config_path)) from e
        return CatalogConfig.from_dict(data)

    def save(self, config: CatalogConfig, config_path: Path | None = None) -> Path:
        """Save configuration as JSON."""
        if config_path is None:
            config_path = self.project_path / "design-system.config.json"
        config_path.write_text(json.dumps(config.to_dict(), indent=2), encoding="utf-8")
        logger.info(f"Saved catalog config to {config_path}")
        return config_path


def load_catalog_config(project_path: Path | None = None) -> CatalogConfig:
    """Convenience function to load the catalog configuration."""
    return CatalogConfigLoader(project_path).load()
