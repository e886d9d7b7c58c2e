"""Base classes for style extractors.

A style extractor turns the style-bearing expressions of one parsed source
file into an ordered, deduplicated set of style tokens, and validates
tokens against the vocabulary of its style system.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from ..analysis.parsing import ParsedSource
from ..errors import ConfigurationError


@dataclass(frozen=True)
class StyleToken:
    """One atomic styling declaration.

    Utility classes only use ``name``. Style-object tokens also carry the
    rule/property/value triple they were flattened from.
    """

    name: str
    conditional: bool = False
    rule: str | None = None
    property: str | None = None
    value: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"name": self.name, "conditional": self.conditional}
        if self.rule is not None:
            data.update(rule=self.rule, property=self.property, value=self.value)
        return data


@dataclass
class StyleExtraction:
    """Ordered set of tokens plus notes about unresolved expressions."""

    tokens: list[StyleToken] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)
    _seen: set[str] = field(default_factory=set, repr=False, compare=False)

    def add(self, token: StyleToken) -> None:
        """Add a token unless one with the same name was seen first."""
        if token.name and token.name not in self._seen:
            self._seen.add(token.name)
            self.tokens.append(token)

    def note(self, message: str) -> None:
        if message not in self.notes:
            self.notes.append(message)

    @property
    def names(self) -> list[str]:
        return [token.name for token in self.tokens]

    @property
    def conditional_names(self) -> list[str]:
        return [token.name for token in self.tokens if token.conditional]


@dataclass(frozen=True)
class ValidationIssue:
    """A problem found while validating a style token."""

    token: str
    message: str
    severity: str = "warning"  # "warning" or "error"
    code: str = "UNRECOGNIZED_TOKEN"

    def to_dict(self) -> dict[str, Any]:
        return {
            "token": self.token,
            "message": self.message,
            "severity": self.severity,
            "code": self.code,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ValidationIssue":
        return cls(
            token=data["token"],
            message=data["message"],
            severity=data.get("severity", "warning"),
            code=data.get("code", "UNRECOGNIZED_TOKEN"),
        )


@dataclass
class ValidationResult:
    """Outcome of validating a token set."""

    issues: list[ValidationIssue] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        """Valid unless an error-severity issue exists; warnings never count."""
        return not any(issue.severity == "error" for issue in self.issues)

    @property
    def warnings(self) -> list[ValidationIssue]:
        return [issue for issue in self.issues if issue.severity == "warning"]

    def to_dict(self) -> dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "issues": [issue.to_dict() for issue in self.issues],
        }


class StyleExtractor(ABC):
    """Abstract base class for style-system specific extractors."""

    @property
    @abstractmethod
    def style_system(self) -> str:
        """Canonical name of the style system."""
        ...

    @abstractmethod
    def extract(self, parsed: ParsedSource) -> StyleExtraction:
        """Extract style tokens from a parsed source file.

        Args:
            parsed: Parsed source file.

        Returns:
            StyleExtraction with tokens in first-seen order.
        """
        ...

    @abstractmethod
    def validate(self, tokens: Iterable[str]) -> ValidationResult:
        """Check tokens against the style system's vocabulary.

        Validation never blocks extraction; callers attach the issues to
        the component as warnings.
        """
        ...


STYLE_SYSTEM_ALIASES = {
    "tailwind": "utility",
    "utility": "utility",
    "utility-class": "utility",
    "stylesheet": "style-object",
    "style-object": "style-object",
    "react-native": "style-object",
}


def create_style_extractor(style_system: str = "tailwind") -> StyleExtractor:
    """Create the extractor for a configured style system.

    Raises:
        ConfigurationError: If the style system is unknown.
    """
    canonical = STYLE_SYSTEM_ALIASES.get(style_system.lower())
    if canonical == "utility":
        from .utility_classes import UtilityClassExtractor

        return UtilityClassExtractor()
    if canonical == "style-object":
        from .style_objects import StyleObjectExtractor

        return StyleObjectExtractor()

    raise ConfigurationError(
        f"Unknown style system: {style_system}",
        suggestion=f"Use one of: {', '.join(sorted(STYLE_SYSTEM_ALIASES))}",
    )
