"""Unit tests for source file discovery."""

from design_catalog.config import SourceConfig
from design_catalog.discovery import discover_files, expand_braces, matches_any


class TestGlobHelpers:
    """Tests for brace expansion and matching."""

    def test_expand_braces(self):
        """Test brace groups expand into each alternative."""
        assert expand_braces("**/*.{tsx,jsx}") == ["**/*.tsx", "**/*.jsx"]
        assert expand_braces("*.ts") == ["*.ts"]

    def test_double_star_matches_top_level(self):
        """Test **/ patterns also match files directly in the root."""
        assert matches_any("Button.tsx", ["**/*.tsx"])
        assert matches_any("atoms/Button.tsx", ["**/*.tsx"])
        assert not matches_any("Button.css", ["**/*.{tsx,jsx}"])


class TestDiscoverFiles:
    """Tests for discover_files."""

    def test_default_patterns(self, sample_project):
        """Test default include/exclude patterns select component sources."""
        found = discover_files(sample_project, SourceConfig())

        relative = [path.relative_to(sample_project).as_posix() for path in found]
        assert relative == [
            "src/components/Button.tsx",
            "src/components/Card.tsx",
            "src/lib/utils.ts",
        ]

    def test_node_modules_always_skipped(self, tmp_path):
        """Test dependency directories are never scanned."""
        (tmp_path / "src" / "node_modules" / "pkg").mkdir(parents=True)
        (tmp_path / "src" / "node_modules" / "pkg" / "index.js").write_text("x")
        (tmp_path / "src" / "App.jsx").write_text("x")

        found = discover_files(tmp_path, SourceConfig(include=["**/*"], exclude=[]))

        assert [path.name for path in found] == ["App.jsx"]

    def test_missing_source_dir(self, tmp_path):
        """Test a missing source directory yields no files."""
        assert discover_files(tmp_path, SourceConfig(dir="nope")) == []
