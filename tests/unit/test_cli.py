"""Unit tests for CLI functionality."""

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from design_catalog import __version__
from design_catalog.cli import cli
from design_catalog.models import Snapshot
from design_catalog.snapshot import SnapshotStore, save_snapshot
from design_catalog.tokens import TokenTable


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def snapshot_files(project: Path) -> list[Path]:
    return SnapshotStore(project / ".design-system-snapshots").list_snapshots()


class TestMainCLI:
    """Test main CLI group functionality."""

    def test_cli_help(self, runner):
        """Test CLI help output lists the commands."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        for command in ("snapshot", "diff", "validate", "tokens"):
            assert command in result.output

    def test_cli_version(self, runner):
        """Test CLI version option."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output


class TestSnapshotCommand:
    """Tests for the snapshot command."""

    def test_snapshot_writes_store(self, runner, sample_project):
        """Test a snapshot is written with categories and project metadata."""
        result = runner.invoke(cli, ["snapshot", "-p", str(sample_project)])

        assert result.exit_code == 0, result.output
        assert "2 components" in result.output
        latest = SnapshotStore(sample_project / ".design-system-snapshots").latest()
        assert [c.identity for c in latest.components] == [
            ("atoms", "Button"),
            ("molecules", "Card"),
        ]
        assert latest.project.name == "acme-ui"
        assert latest.tokens.colors["brand-500"].value == "#3b82f6"

    def test_snapshot_output_option(self, runner, sample_project, tmp_path):
        """Test --output writes a single file instead of the store."""
        output = tmp_path / "out.json"

        result = runner.invoke(
            cli, ["snapshot", "-p", str(sample_project), "-o", str(output), "-q"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(output.read_text())["formatVersion"] == "1.0.0"
        assert snapshot_files(sample_project) == []

    def test_json_report(self, runner, sample_project):
        """Test --json-report prints the build report."""
        result = runner.invoke(
            cli, ["snapshot", "-p", str(sample_project), "--json-report", "-q", "--workers", "1"]
        )

        assert result.exit_code == 0, result.output
        report = json.loads(result.output)
        assert report["components"] == 2
        assert report["nonComponents"] == ["src/lib/utils.ts"]

    def test_quiet_and_verbose_conflict(self, runner, sample_project):
        """Test --quiet and --verbose together are rejected."""
        result = runner.invoke(cli, ["snapshot", "-p", str(sample_project), "-q", "-v"])

        assert result.exit_code == 1

    def test_bad_config_exit_code(self, runner, sample_project):
        """Test configuration errors exit with code 1 and a message."""
        (sample_project / "design-system.config.json").write_text('{"styleSystem": "sass"}')

        result = runner.invoke(cli, ["snapshot", "-p", str(sample_project)])

        assert result.exit_code == 1
        assert "Unknown styleSystem" in result.output


class TestDiffCommand:
    """Tests for the diff command."""

    @pytest.fixture
    def snapshots(self, runner, sample_project):
        """Build a base snapshot, change Button and build a current one."""
        base = sample_project / "base.json"
        current = sample_project / "current.json"
        runner.invoke(cli, ["snapshot", "-p", str(sample_project), "-q", "-o", str(base)])
        button = sample_project / "src" / "components" / "Button.tsx"
        button.write_text(button.read_text().replace("bg-blue-500", "bg-blue-600"))
        runner.invoke(cli, ["snapshot", "-p", str(sample_project), "-q", "-o", str(current)])
        return base, current

    def test_diff_json(self, runner, sample_project, snapshots):
        """Test the JSON diff reports the Button class change."""
        base, current = snapshots

        result = runner.invoke(
            cli, ["diff", str(base), str(current), "-p", str(sample_project), "--json", "-q"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["modified"][0]["componentName"] == "Button"
        assert data["modified"][0]["classesAdded"] == ["bg-blue-600"]
        assert data["modified"][0]["classesRemoved"] == ["bg-blue-500"]
        assert data["modified"][0]["propsChanged"] is False

    def test_fail_on_change(self, runner, sample_project, snapshots):
        """Test --fail-on-change exits 1 when the snapshots differ."""
        base, current = snapshots

        result = runner.invoke(
            cli, ["diff", str(base), str(current), "-p", str(sample_project), "--fail-on-change"]
        )

        assert result.exit_code == 1
        assert "~ atoms/Button" in result.output

    def test_no_changes(self, runner, sample_project, snapshots):
        """Test diffing a snapshot with itself succeeds even with --fail-on-change."""
        base, _ = snapshots

        result = runner.invoke(
            cli, ["diff", str(base), str(base), "-p", str(sample_project), "--fail-on-change"]
        )

        assert result.exit_code == 0
        assert "No changes detected" in result.output

    def test_defaults_to_previous_and_latest(self, runner, sample_project):
        """Test diff without arguments compares the two newest snapshots."""
        store = SnapshotStore(sample_project / ".design-system-snapshots")
        store.save(Snapshot(timestamp="2026-01-01T00:00:00+00:00"))
        store.save(
            Snapshot(
                tokens=TokenTable(spacing={"1": "4px"}),
                timestamp="2026-01-02T00:00:00+00:00",
            )
        )

        result = runner.invoke(cli, ["diff", "-p", str(sample_project), "--json", "-q"])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["tokens"]["spacing"]["added"] == {"1": "4px"}

    def test_missing_snapshots(self, runner, sample_project):
        """Test a missing snapshot store is reported with exit code 1."""
        result = runner.invoke(cli, ["diff", "-p", str(sample_project)])

        assert result.exit_code == 1
        assert "Snapshot not found" in result.output

    def test_incompatible_snapshot_exit_code(self, runner, sample_project):
        """Test an incompatible formatVersion exits with code 2."""
        path = save_snapshot(Snapshot(format_version="9.0.0"), sample_project / "old.json")

        result = runner.invoke(cli, ["diff", str(path), str(path), "-p", str(sample_project)])

        assert result.exit_code == 2
        assert "Incompatible snapshot formatVersion" in result.output

    def test_undecodable_snapshot_exit_code(self, runner, sample_project):
        """Test a snapshot with invalid UTF-8 exits with code 2."""
        good = save_snapshot(Snapshot(), sample_project / "good.json")
        bad = sample_project / "bad.json"
        bad.write_bytes(b"\xff\xfe{}")

        result = runner.invoke(cli, ["diff", str(bad), str(good), "-p", str(sample_project)])

        assert result.exit_code == 2
        assert "not valid UTF-8" in result.output

    def test_quiet_and_verbose_conflict(self, runner, sample_project):
        """Test diff rejects --quiet together with --verbose."""
        result = runner.invoke(cli, ["diff", "-p", str(sample_project), "-q", "-v"])

        assert result.exit_code == 1
        assert "mutually exclusive" in result.output


class TestTokensCommand:
    """Tests for the tokens command."""

    def test_tokens_from_detected_theme(self, runner, sample_project):
        """Test the tailwind config in the project is picked up."""
        result = runner.invoke(cli, ["tokens", "-p", str(sample_project), "-q"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.output)
        assert data["colors"]["white"]["value"] == "#ffffff"
        assert data["breakpoints"]["2xl"] == "1536px"

    def test_tokens_with_broken_theme(self, runner, sample_project):
        """Test an unevaluable theme yields the default table, not a crash."""
        theme = sample_project / "broken.config.js"
        theme.write_text("module.exports = makeTheme();\n")

        result = runner.invoke(
            cli, ["tokens", "-p", str(sample_project), "--theme", str(theme), "-q"]
        )

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["colors"] == {}


class TestValidateCommand:
    """Tests for the validate command."""

    @pytest.fixture
    def native_project(self, tmp_path, stylesheet_source):
        """A StyleSheet project whose only component uses a deprecated property."""
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "Badge.jsx").write_text(stylesheet_source)
        (tmp_path / "design-system.config.json").write_text('{"styleSystem": "stylesheet"}')
        return tmp_path

    def test_warnings_only_succeeds(self, runner, native_project):
        """Test warning-severity issues are listed without failing."""
        result = runner.invoke(cli, ["validate", "-p", str(native_project)])

        assert result.exit_code == 0, result.output
        assert "unclassified/Badge (src/Badge.jsx)" in result.output
        assert "[warning] DEPRECATED_PROPERTY" in result.output
        assert "Validated 1 files, 1 components: 0 errors, 1 warnings" in result.output

    def test_errors_exit_nonzero(self, runner, native_project):
        """Test an unsupported property fails validation with exit code 1."""
        (native_project / "src" / "Panel.jsx").write_text(
            "export const Panel = () => <View style={{ boxShadow: '0 1px 2px black' }} />;\n"
        )

        result = runner.invoke(cli, ["validate", "-p", str(native_project)])

        assert result.exit_code == 1
        assert "[error] UNSUPPORTED_PROPERTY" in result.output
        assert "Style validation failed with 1 error(s)" in result.output

    def test_json_summary(self, runner, native_project):
        """Test --json prints totals and per-component issues."""
        result = runner.invoke(cli, ["validate", "-p", str(native_project), "--json", "-q"])

        assert result.exit_code == 0, result.output
        summary = json.loads(result.output)
        assert summary["totalFiles"] == 1
        assert summary["totalComponents"] == 1
        assert (summary["errors"], summary["warnings"]) == (0, 1)
        assert summary["results"][0]["issues"][0]["code"] == "DEPRECATED_PROPERTY"

    def test_valid_utility_project(self, runner, sample_project):
        """Test a project with only known utility classes validates cleanly."""
        result = runner.invoke(cli, ["validate", "-p", str(sample_project)])

        assert result.exit_code == 0, result.output
        assert "0 errors, 0 warnings" in result.output
