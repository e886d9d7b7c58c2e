"""Unit tests for catalog configuration loading."""

import json

import pytest

from design_catalog.config import (
    CONFIG_ENV_VAR,
    CatalogConfig,
    CatalogConfigLoader,
    SourceConfig,
    load_catalog_config,
)
from design_catalog.errors import ConfigurationError


class TestCatalogConfig:
    """Tests for the CatalogConfig dataclass."""

    def test_defaults(self):
        """Test default values."""
        config = CatalogConfig()

        assert config.style_system == "tailwind"
        assert config.source.dir == "src"
        assert config.snapshots.dir == ".design-system-snapshots"
        assert config.categorization == {}

    def test_unknown_style_system(self):
        """Test an unknown styleSystem is a configuration error."""
        with pytest.raises(ConfigurationError, match="Unknown styleSystem"):
            CatalogConfig(style_system="sass")

    def test_from_dict_camel_case(self):
        """Test camelCase keys map onto the dataclass fields."""
        config = CatalogConfig.from_dict(
            {
                "styleSystem": "stylesheet",
                "source": {"dir": "app", "include": ["**/*.jsx"]},
                "snapshots": {"dir": "snaps", "workers": 2},
                "themeConfig": "theme/tailwind.config.js",
                "categorization": {"atoms": "Button"},
            }
        )

        assert config.style_system == "stylesheet"
        assert config.source.include == ["**/*.jsx"]
        assert config.snapshots.workers == 2
        assert config.theme_config == "theme/tailwind.config.js"
        assert config.categorization == {"atoms": ["Button"]}

    def test_roundtrip(self):
        """Test to_dict and from_dict produce equal configs."""
        config = CatalogConfig(
            source=SourceConfig(dir="lib"), categorization={"atoms": ["Button"]}
        )

        assert CatalogConfig.from_dict(config.to_dict()) == config

    def test_invalid_categorization(self):
        """Test categorization must be an object."""
        with pytest.raises(ConfigurationError):
            CatalogConfig.from_dict({"categorization": ["Button"]})

    def test_resolve_theme_config(self, tmp_path):
        """Test explicit theme paths win over auto-detection."""
        (tmp_path / "tailwind.config.js").write_text("module.exports = {};")

        assert CatalogConfig().resolve_theme_config(tmp_path) == tmp_path / "tailwind.config.js"
        explicit = CatalogConfig(theme_config="other.js")
        assert explicit.resolve_theme_config(tmp_path) == tmp_path / "other.js"
        assert CatalogConfig().resolve_theme_config(tmp_path / "missing") is None


class TestCatalogConfigLoader:
    """Tests for CatalogConfigLoader precedence."""

    def test_defaults_without_files(self, tmp_path, monkeypatch):
        """Test defaults are used when no config exists."""
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)

        assert load_catalog_config(tmp_path) == CatalogConfig()

    def test_project_js_config(self, tmp_path, monkeypatch):
        """Test design-system.config.js is evaluated statically."""
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        (tmp_path / "design-system.config.js").write_text(
            "module.exports = {\n"
            "  styleSystem: 'tailwind',\n"
            "  categorization: { atoms: ['Button', 'Input'], molecules: ['Card'] },\n"
            "};\n"
        )

        config = CatalogConfigLoader(tmp_path).load()

        assert config.categorization == {"atoms": ["Button", "Input"], "molecules": ["Card"]}

    def test_env_var_beats_project_file(self, tmp_path, monkeypatch):
        """Test the environment variable takes precedence over project files."""
        (tmp_path / "design-system.config.json").write_text('{"styleSystem": "tailwind"}')
        env_config = tmp_path / "env.json"
        env_config.write_text('{"styleSystem": "react-native"}')
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_config))

        assert CatalogConfigLoader(tmp_path).load().style_system == "react-native"

    def test_explicit_path_beats_env_var(self, tmp_path, monkeypatch):
        """Test an explicit path has the highest precedence."""
        env_config = tmp_path / "env.json"
        env_config.write_text('{"styleSystem": "react-native"}')
        monkeypatch.setenv(CONFIG_ENV_VAR, str(env_config))
        explicit = tmp_path / "explicit.json"
        explicit.write_text('{"styleSystem": "utility"}')

        assert CatalogConfigLoader(tmp_path).load(explicit).style_system == "utility"

    def test_missing_explicit_path(self, tmp_path):
        """Test an explicit but missing path raises."""
        with pytest.raises(ConfigurationError, match="not found"):
            CatalogConfigLoader(tmp_path).load(tmp_path / "nope.json")

    def test_unevaluable_config_is_configuration_error(self, tmp_path, monkeypatch):
        """Test evaluation failures surface as configuration errors."""
        monkeypatch.delenv(CONFIG_ENV_VAR, raising=False)
        (tmp_path / "design-system.config.js").write_text("module.exports = load();\n")

        with pytest.raises(ConfigurationError) as exc_info:
            CatalogConfigLoader(tmp_path).load()

        assert exc_info.value.details["config_file"].endswith("design-system.config.js")

    def test_save(self, tmp_path):
        """Test save writes JSON that loads back."""
        loader = CatalogConfigLoader(tmp_path)
        config = CatalogConfig(categorization={"pages": ["Home"]})

        path = loader.save(config)

        assert json.loads(path.read_text())["categorization"] == {"pages": ["Home"]}
        assert loader.load(path) == config
