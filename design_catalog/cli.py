"""Click-based CLI for building and comparing design-system snapshots."""

import json
import sys
from pathlib import Path
from typing import Any

import click

from . import __version__
from .catalog_logging import setup_logging
from .categories import CategoryTable
from .config import CatalogConfig, CatalogConfigLoader
from .config_eval import read_config_value
from .diff import DiffEngine, format_diff_text
from .discovery import discover_files
from .errors import CatalogError, ConfigurationError, StyleValidationError, handle_exception
from .models import ProjectInfo
from .snapshot import SnapshotBuilder, SnapshotStore, read_source_files, save_snapshot
from .token_store import TokenStore


def common_options(f: Any) -> Any:
    """Options shared by every command."""
    f = click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")(f)
    f = click.option("--quiet", "-q", is_flag=True, help="Suppress non-error output")(f)
    f = click.option(
        "--config", type=click.Path(exists=True, dir_okay=False), help="Catalog config file"
    )(f)
    f = click.option(
        "--project",
        "-p",
        type=click.Path(exists=True, file_okay=False),
        default=".",
        show_default=True,
        help="Project directory path",
    )(f)
    return f


def _fail(error: Exception, verbose: bool) -> None:
    message, exit_code = handle_exception(error, use_color=sys.stderr.isatty(), verbose=verbose)
    click.echo(message, err=True)
    sys.exit(exit_code)


def _check_output_flags(quiet: bool, verbose: bool) -> None:
    if quiet and verbose:
        click.echo("Error: --quiet and --verbose are mutually exclusive", err=True)
        sys.exit(1)


def _theme_loader(path: Path | None):
    """Defer theme evaluation so failures become token warnings."""
    if path is None:
        return None
    return lambda: read_config_value(path)


def _build_project(project_path: Path, catalog_config: CatalogConfig, workers: int | None):
    """Discover, read and analyze the project's sources."""
    files, unreadable = read_source_files(
        discover_files(project_path, catalog_config.source), project_path
    )
    builder = SnapshotBuilder(
        style_system=catalog_config.style_system,
        categories=CategoryTable.from_groups(catalog_config.categorization),
        max_workers=workers or catalog_config.snapshots.workers,
        project=ProjectInfo.from_package_json(
            project_path / "package.json",
            styling=catalog_config.style_system,
        ),
    )
    return builder.build(
        files,
        _theme_loader(catalog_config.resolve_theme_config(project_path)),
        skipped=unreadable,
    )


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Design Catalog - component snapshots and design-system change detection."""


@cli.command()
@common_options
@click.option("--output", "-o", type=click.Path(dir_okay=False), help="Snapshot file to write")
@click.option("--workers", type=int, help="Parallel analysis workers")
@click.option("--json-report", is_flag=True, help="Print the build report as JSON")
def snapshot(project, config, quiet, verbose, output, workers, json_report):
    """Analyze components and save a snapshot."""
    _check_output_flags(quiet, verbose)
    setup_logging(quiet=quiet, verbose=verbose)

    project_path = Path(project).resolve()
    try:
        catalog_config = CatalogConfigLoader(project_path).load(Path(config) if config else None)
        result = _build_project(project_path, catalog_config, workers)

        if output:
            saved = save_snapshot(result.snapshot, Path(output))
        else:
            saved = SnapshotStore(project_path / catalog_config.snapshots.dir).save(
                result.snapshot
            )
    except CatalogError as e:
        _fail(e, verbose)
        return

    if json_report:
        click.echo(json.dumps(result.report.to_dict(), indent=2))
    elif not quiet:
        click.echo(f"Scanned {project_path / catalog_config.source.dir}")
        click.echo(result.report.summary())
        for skipped in result.report.skipped:
            click.echo(f"  skipped {skipped.path}: {skipped.message or skipped.reason}", err=True)
        click.echo(f"Snapshot saved to {saved}")


@cli.command()
@common_options
@click.argument("base", required=False, type=click.Path(dir_okay=False))
@click.argument("current", required=False, type=click.Path(dir_okay=False))
@click.option("--json", "as_json", is_flag=True, help="Print the diff as JSON")
@click.option("--fail-on-change", is_flag=True, help="Exit with code 1 when changes exist")
def diff(project, config, quiet, verbose, base, current, as_json, fail_on_change):
    """Compare two snapshots (defaults: previous and latest)."""
    _check_output_flags(quiet, verbose)
    setup_logging(quiet=quiet, verbose=verbose)
    project_path = Path(project).resolve()
    try:
        catalog_config = CatalogConfigLoader(project_path).load(Path(config) if config else None)
        store = SnapshotStore(project_path / catalog_config.snapshots.dir)
        if base and current:
            base_snapshot, current_snapshot = store.load(base), store.load(current)
        elif base:
            base_snapshot, current_snapshot = store.load(base), store.latest()
        else:
            base_snapshot, current_snapshot = store.previous(), store.latest()
        result = DiffEngine().diff(base_snapshot, current_snapshot)
    except CatalogError as e:
        _fail(e, verbose)
        return

    if as_json:
        click.echo(json.dumps(result.to_dict(), indent=2))
    elif not quiet:
        click.echo(format_diff_text(result, use_color=sys.stdout.isatty()))

    if fail_on_change and result.has_changes:
        sys.exit(1)


@cli.command()
@common_options
@click.option("--workers", type=int, help="Parallel analysis workers")
@click.option("--json", "as_json", is_flag=True, help="Print the validation summary as JSON")
def validate(project, config, quiet, verbose, workers, as_json):
    """Validate every component's style tokens against the configured style system."""
    _check_output_flags(quiet, verbose)
    setup_logging(quiet=quiet, verbose=verbose)

    project_path = Path(project).resolve()
    try:
        catalog_config = CatalogConfigLoader(project_path).load(Path(config) if config else None)
        result = _build_project(project_path, catalog_config, workers)
    except CatalogError as e:
        _fail(e, verbose)
        return

    components = result.snapshot.components
    issues = [issue for component in components for issue in component.style_issues]
    errors = sum(1 for issue in issues if issue.severity == "error")
    warnings = len(issues) - errors

    if as_json:
        summary = {
            "totalFiles": result.report.files_total,
            "totalComponents": len(components),
            "errors": errors,
            "warnings": warnings,
            "results": [
                {
                    "component": f"{component.category}/{component.name}",
                    "filePath": component.file_path,
                    "issues": [issue.to_dict() for issue in component.style_issues],
                }
                for component in components
                if component.style_issues
            ],
        }
        click.echo(json.dumps(summary, indent=2))
    elif not quiet:
        for component in components:
            if not component.style_issues:
                continue
            click.echo(f"{component.category}/{component.name} ({component.file_path})")
            for issue in component.style_issues:
                click.echo(f"  [{issue.severity}] {issue.code}: {issue.message}")
        click.echo(
            f"Validated {result.report.files_total} files, {len(components)} components: "
            f"{errors} errors, {warnings} warnings"
        )

    if errors:
        _fail(StyleValidationError(errors, warnings), verbose)


@cli.command()
@common_options
@click.option("--theme", type=click.Path(exists=True, dir_okay=False), help="Theme config file")
def tokens(project, config, quiet, verbose, theme):
    """Print the resolved design token table as JSON."""
    _check_output_flags(quiet, verbose)
    setup_logging(quiet=quiet, verbose=verbose)
    project_path = Path(project).resolve()
    try:
        catalog_config = CatalogConfigLoader(project_path).load(Path(config) if config else None)
    except ConfigurationError as e:
        _fail(e, verbose)
        return

    theme_path = Path(theme) if theme else catalog_config.resolve_theme_config(project_path)
    table = TokenStore().load(_theme_loader(theme_path))
    click.echo(json.dumps(table.to_dict(), indent=2))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
