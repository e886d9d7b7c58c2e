"""Design token models.

A TokenTable is the normalized token vocabulary of one snapshot: flat maps
of colors, spacing, typography, breakpoints, shadows, radii and a custom
bucket for any other theme key.
"""

import re
from dataclasses import dataclass, field, replace
from typing import Any

DEFAULT_BREAKPOINTS: dict[str, str] = {
    "sm": "640px",
    "md": "768px",
    "lg": "1024px",
    "xl": "1280px",
    "2xl": "1536px",
}

_HEX_PATTERN = re.compile(r"^#([0-9a-fA-F]{3}|[0-9a-fA-F]{4}|[0-9a-fA-F]{6}|[0-9a-fA-F]{8})$")


@dataclass(frozen=True)
class ColorToken:
    """A flattened color token, e.g. ``primary-500``."""

    name: str
    value: str
    rgb: tuple[int, int, int] | None = None
    usage_sites: tuple[str, ...] = ()

    @classmethod
    def from_value(cls, name: str, value: str) -> "ColorToken":
        """Create a token and derive its RGB triple from a hex value."""
        return cls(name=name, value=value, rgb=cls.hex_to_rgb(value))

    @staticmethod
    def hex_to_rgb(value: str) -> tuple[int, int, int] | None:
        """Convert #RGB, #RGBA, #RRGGBB or #RRGGBBAA to an RGB triple.

        Returns None for anything that is not a well-formed hex color.
        """
        match = _HEX_PATTERN.match(value.strip())
        if not match:
            return None
        digits = match.group(1)
        if len(digits) in (3, 4):
            digits = "".join(ch * 2 for ch in digits[:3])
        return (int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "value": self.value,
            "derivedRgb": list(self.rgb) if self.rgb is not None else None,
            "usageSites": list(self.usage_sites),
        }

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> "ColorToken":
        """Create from dictionary."""
        rgb = data.get("derivedRgb")
        return cls(
            name=name,
            value=data["value"],
            rgb=tuple(rgb) if rgb is not None else None,
            usage_sites=tuple(data.get("usageSites", [])),
        )


@dataclass(frozen=True)
class TypographyTokens:
    """Typography scales, each a flat name -> value map."""

    font_family: dict[str, str] = field(default_factory=dict)
    font_size: dict[str, str] = field(default_factory=dict)
    font_weight: dict[str, str] = field(default_factory=dict)
    line_height: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "fontFamily": dict(self.font_family),
            "fontSize": dict(self.font_size),
            "fontWeight": dict(self.font_weight),
            "lineHeight": dict(self.line_height),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TypographyTokens":
        """Create from dictionary."""
        return cls(
            font_family=dict(data.get("fontFamily", {})),
            font_size=dict(data.get("fontSize", {})),
            font_weight=dict(data.get("fontWeight", {})),
            line_height=dict(data.get("lineHeight", {})),
        )


@dataclass(frozen=True)
class TokenTable:
    """Normalized design tokens resolved from a theme configuration."""

    colors: dict[str, ColorToken] = field(default_factory=dict)
    spacing: dict[str, str] = field(default_factory=dict)
    typography: TypographyTokens = field(default_factory=TypographyTokens)
    breakpoints: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_BREAKPOINTS)
    )
    shadows: dict[str, str] = field(default_factory=dict)
    border_radius: dict[str, str] = field(default_factory=dict)
    custom: dict[str, Any] = field(default_factory=dict)

    @property
    def total_tokens(self) -> int:
        """Total number of tokens across every category."""
        return sum(len(values) for values in self.comparable_categories().values())

    def comparable_categories(self) -> dict[str, dict[str, Any]]:
        """Flat per-category maps used for counting and diffing.

        Colors compare by value only, so usage sites never show up as
        token modifications.
        """
        return {
            "colors": {name: token.value for name, token in self.colors.items()},
            "spacing": dict(self.spacing),
            "fontFamily": dict(self.typography.font_family),
            "fontSize": dict(self.typography.font_size),
            "fontWeight": dict(self.typography.font_weight),
            "lineHeight": dict(self.typography.line_height),
            "breakpoints": dict(self.breakpoints),
            "shadows": dict(self.shadows),
            "borderRadius": dict(self.border_radius),
            "custom": dict(self.custom),
        }

    def with_usage_sites(self, usage: dict[str, list[str]]) -> "TokenTable":
        """Return a copy whose color tokens carry the given usage sites."""
        colors = {
            name: replace(token, usage_sites=tuple(usage.get(name, ())))
            for name, token in self.colors.items()
        }
        return replace(self, colors=colors)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "colors": {name: token.to_dict() for name, token in self.colors.items()},
            "spacing": dict(self.spacing),
            "typography": self.typography.to_dict(),
            "breakpoints": dict(self.breakpoints),
            "shadows": dict(self.shadows),
            "borderRadius": dict(self.border_radius),
            "custom": dict(self.custom),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TokenTable":
        """Create from dictionary."""
        return cls(
            colors={
                name: ColorToken.from_dict(name, value)
                for name, value in data.get("colors", {}).items()
            },
            spacing=dict(data.get("spacing", {})),
            typography=TypographyTokens.from_dict(data.get("typography", {})),
            breakpoints=dict(data.get("breakpoints", DEFAULT_BREAKPOINTS)),
            shadows=dict(data.get("shadows", {})),
            border_radius=dict(data.get("borderRadius", {})),
            custom=dict(data.get("custom", {})),
        )
