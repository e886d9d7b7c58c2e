"""Theme configuration to TokenTable normalization.

Reads the ``theme`` section of a Tailwind-style configuration value and
merges ``theme.extend`` on top of it. Extension keys replace base keys
wholesale; keys only present in the base survive unchanged.
"""

from collections.abc import Callable, Mapping
from typing import Any

from .catalog_logging import LogCategory, get_category_logger
from .tokens import DEFAULT_BREAKPOINTS, ColorToken, TokenTable, TypographyTokens

logger = get_category_logger(LogCategory.TOKENS)

ConfigValue = Mapping[str, Any] | Callable[[], Any] | None

# Theme keys with a dedicated category; everything else lands in ``custom``.
KNOWN_THEME_KEYS = frozenset(
    {
        "colors",
        "spacing",
        "fontFamily",
        "fontSize",
        "fontWeight",
        "lineHeight",
        "screens",
        "boxShadow",
        "borderRadius",
        "extend",
    }
)


class TokenStore:
    """Loads and normalizes a theme configuration value.

    ``load`` never raises. Each category falls back to its own default when
    the configuration is missing, broken, or malformed for that category.
    """

    def load(self, config_value: ConfigValue) -> TokenTable:
        """Load a TokenTable, logging any warnings."""
        table, warnings = self.load_with_warnings(config_value)
        for warning in warnings:
            logger.warning(warning)
        return table

    def load_with_warnings(
        self, config_value: ConfigValue
    ) -> tuple[TokenTable, list[str]]:
        """Load a TokenTable and return the warnings collected on the way.

        Args:
            config_value: Evaluated configuration mapping, a zero-argument
                callable producing one, or None.

        Returns:
            Tuple of (token table, warnings).
        """
        warnings: list[str] = []

        try:
            resolved = config_value() if callable(config_value) else config_value
        except Exception as e:
            warnings.append(f"Theme configuration could not be evaluated: {e}")
            return TokenTable(), warnings

        if resolved is None:
            return TokenTable(), warnings
        if not isinstance(resolved, Mapping):
            warnings.append(
                f"Theme configuration must be an object, got {type(resolved).__name__}"
            )
            return TokenTable(), warnings

        theme = self._section(resolved, "theme", warnings)
        extend = self._section(theme, "extend", warnings)

        def category(name: str, build: Callable[[], Any], default: Any) -> Any:
            try:
                return build()
            except Exception as e:
                warnings.append(f"Ignoring invalid '{name}' tokens: {e}")
                return default

        colors = category(
            "colors", lambda: self._flatten_colors(self._merged(theme, extend, "colors")), {}
        )
        spacing = category(
            "spacing",
            lambda: self._scalars(self._merged(theme, extend, "spacing")),
            {},
        )
        typography = TypographyTokens(
            font_family=category(
                "fontFamily",
                lambda: self._font_families(self._merged(theme, extend, "fontFamily")),
                {},
            ),
            font_size=category(
                "fontSize",
                lambda: self._first_values(self._merged(theme, extend, "fontSize")),
                {},
            ),
            font_weight=category(
                "fontWeight",
                lambda: self._scalars(self._merged(theme, extend, "fontWeight")),
                {},
            ),
            line_height=category(
                "lineHeight",
                lambda: self._scalars(self._merged(theme, extend, "lineHeight")),
                {},
            ),
        )
        breakpoints = category(
            "screens", lambda: self._breakpoints(theme, extend), dict(DEFAULT_BREAKPOINTS)
        )
        shadows = category(
            "boxShadow",
            lambda: self._scalars(self._merged(theme, extend, "boxShadow")),
            {},
        )
        border_radius = category(
            "borderRadius",
            lambda: self._scalars(self._merged(theme, extend, "borderRadius")),
            {},
        )
        custom = category("custom", lambda: self._custom(theme, extend), {})

        table = TokenTable(
            colors=colors,
            spacing=spacing,
            typography=typography,
            breakpoints=breakpoints,
            shadows=shadows,
            border_radius=border_radius,
            custom=custom,
        )
        logger.debug(f"Loaded {table.total_tokens} design tokens")
        return table, warnings

    @staticmethod
    def _section(
        parent: Mapping[str, Any], key: str, warnings: list[str]
    ) -> Mapping[str, Any]:
        value = parent.get(key)
        if value is None:
            return {}
        if not isinstance(value, Mapping):
            warnings.append(f"Ignoring '{key}': expected an object")
            return {}
        return value

    @staticmethod
    def _merged(
        theme: Mapping[str, Any], extend: Mapping[str, Any], key: str
    ) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for source in (theme, extend):
            value = source.get(key)
            if value is None:
                continue
            if not isinstance(value, Mapping):
                raise TypeError(f"expected an object, got {type(value).__name__}")
            merged.update(value)
        return merged

    def _flatten_colors(
        self, colors: Mapping[str, Any], prefix: str = ""
    ) -> dict[str, ColorToken]:
        """Flatten nested color scales into ``name-shade`` keys."""
        tokens: dict[str, ColorToken] = {}
        for key, value in colors.items():
            key = str(key)
            if key == "DEFAULT" and prefix:
                name = prefix
            else:
                name = f"{prefix}-{key}" if prefix else key

            if isinstance(value, Mapping):
                tokens.update(self._flatten_colors(value, name))
            elif isinstance(value, str):
                tokens[name] = ColorToken.from_value(name, value)
            else:
                logger.debug(f"Skipping non-string color value for '{name}'")
        return tokens

    @staticmethod
    def _scalar(value: Any) -> str | None:
        if isinstance(value, bool):
            return None
        if isinstance(value, str | int | float):
            return str(value)
        return None

    def _scalars(self, values: Mapping[str, Any]) -> dict[str, str]:
        result: dict[str, str] = {}
        for key, value in values.items():
            scalar = self._scalar(value)
            if scalar is not None:
                result[str(key)] = scalar
        return result

    def _font_families(self, values: Mapping[str, Any]) -> dict[str, str]:
        result: dict[str, str] = {}
        for key, value in values.items():
            if isinstance(value, list | tuple):
                result[str(key)] = ", ".join(str(item) for item in value)
            elif (scalar := self._scalar(value)) is not None:
                result[str(key)] = scalar
        return result

    def _first_values(self, values: Mapping[str, Any]) -> dict[str, str]:
        """fontSize entries may be ``[size, {lineHeight}]`` pairs."""
        result: dict[str, str] = {}
        for key, value in values.items():
            if isinstance(value, list | tuple):
                value = value[0] if value else None
            scalar = self._scalar(value)
            if scalar is not None:
                result[str(key)] = scalar
        return result

    def _breakpoints(
        self, theme: Mapping[str, Any], extend: Mapping[str, Any]
    ) -> dict[str, str]:
        base = theme.get("screens")
        if base is None:
            base = DEFAULT_BREAKPOINTS
        merged = self._merged({"screens": base}, extend, "screens")

        result: dict[str, str] = {}
        for key, value in merged.items():
            if isinstance(value, Mapping):
                value = value.get("min")
            scalar = self._scalar(value)
            if scalar is not None:
                result[str(key)] = scalar
        return result or dict(DEFAULT_BREAKPOINTS)

    @staticmethod
    def _custom(theme: Mapping[str, Any], extend: Mapping[str, Any]) -> dict[str, Any]:
        custom: dict[str, Any] = {}
        for source in (theme, extend):
            for key, value in source.items():
                if key not in KNOWN_THEME_KEYS:
                    custom[str(key)] = value
        return custom
