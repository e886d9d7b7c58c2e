"""Structured error types with recovery suggestions.

Snapshot format problems and configuration mistakes surface as hard errors,
as does a failed ``validate`` run. Unparseable files, non-component files,
unresolved style tokens and broken theme configs are reported as warnings by
the pipeline instead.
"""

from __future__ import annotations

import traceback
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(Enum):
    """Categories of catalog errors."""

    CONFIGURATION = "configuration"  # Invalid catalog config
    FILE_SYSTEM = "file_system"  # Missing paths, permissions
    SNAPSHOT_FORMAT = "snapshot_format"  # Unreadable or incompatible snapshot
    VALIDATION = "validation"  # Style validation failures


@dataclass
class CatalogError(Exception):
    """Base class for structured errors with recovery suggestions.

    Attributes:
        category: Error category for grouping.
        message: Human-readable error message.
        suggestion: Optional actionable recovery suggestion.
        details: Optional additional details dict.
        exit_code: Exit code to use when this error terminates the CLI.
    """

    category: ErrorCategory
    message: str
    suggestion: str | None = None
    details: dict[str, Any] | None = field(default_factory=dict)
    exit_code: int = 1

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def format(self, use_color: bool = True) -> str:
        """Format the error for display."""
        red = "\033[91m" if use_color else ""
        cyan = "\033[96m" if use_color else ""
        dim = "\033[2m" if use_color else ""
        reset = "\033[0m" if use_color else ""

        lines = [f"{red}Error:{reset} {self.message}"]

        if self.suggestion:
            lines.append(f"{cyan}Suggestion:{reset} {self.suggestion}")

        if self.details:
            for key, value in self.details.items():
                lines.append(f"{dim}  {key}: {value}{reset}")

        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format(use_color=False)


class ConfigurationError(CatalogError):
    """Error in the catalog configuration."""

    def __init__(
        self,
        message: str,
        config_file: str | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(
            category=ErrorCategory.CONFIGURATION,
            message=message,
            suggestion=suggestion
            or "Check your configuration file syntax and required fields",
            details={"config_file": config_file} if config_file else None,
            exit_code=1,
        )


class ConfigEvaluationError(CatalogError):
    """A configuration module could not be statically evaluated."""

    def __init__(self, message: str, config_file: str | None = None):
        super().__init__(
            category=ErrorCategory.CONFIGURATION,
            message=message,
            suggestion=(
                "Export a plain object literal via 'module.exports = {...}' "
                "or 'export default {...}'"
            ),
            details={"config_file": config_file} if config_file else None,
            exit_code=1,
        )


class SnapshotFormatError(CatalogError):
    """A snapshot is malformed or carries an incompatible formatVersion."""

    def __init__(
        self,
        message: str,
        found_version: str | None = None,
        expected_version: str | None = None,
        path: str | None = None,
    ):
        details: dict[str, Any] = {}
        if found_version is not None:
            details["found_version"] = found_version
        if expected_version is not None:
            details["expected_version"] = expected_version
        if path is not None:
            details["path"] = path
        super().__init__(
            category=ErrorCategory.SNAPSHOT_FORMAT,
            message=message,
            suggestion="Regenerate the snapshot with 'design-catalog snapshot'",
            details=details or None,
            exit_code=2,
        )


class StyleValidationError(CatalogError):
    """Component styles failed validation with error-severity issues."""

    def __init__(self, errors: int, warnings: int = 0):
        super().__init__(
            category=ErrorCategory.VALIDATION,
            message=f"Style validation failed with {errors} error(s)",
            suggestion="Fix the reported style tokens or switch the configured styleSystem",
            details={"errors": errors, "warnings": warnings},
            exit_code=1,
        )


class SnapshotNotFoundError(CatalogError):
    """No snapshot exists where one was expected."""

    def __init__(self, path: str):
        super().__init__(
            category=ErrorCategory.FILE_SYSTEM,
            message=f"Snapshot not found: {path}",
            suggestion="Run 'design-catalog snapshot' to create one",
            details={"path": path},
            exit_code=1,
        )


def handle_exception(
    error: Exception,
    use_color: bool = True,
    verbose: bool = False,
) -> tuple[str, int]:
    """Convert any exception to formatted output and exit code.

    Args:
        error: The exception to handle.
        use_color: Whether to use color in output.
        verbose: Whether to include full traceback.

    Returns:
        Tuple of (formatted_message, exit_code).
    """
    if isinstance(error, CatalogError):
        message = error.format(use_color=use_color)
        exit_code = error.exit_code
    else:
        red = "\033[91m" if use_color else ""
        reset = "\033[0m" if use_color else ""
        message = f"{red}Error:{reset} {error}"
        exit_code = 1

    if verbose:
        message += "\n\nTraceback:\n" + traceback.format_exc()

    return message, exit_code
