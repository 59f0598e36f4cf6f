"""Command-line interface for the i18next translation toolkit."""

import click
from pathlib import Path
from typing import List, Optional
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from . import __version__
from .config import Config, load_config
from .core.store import TranslationStore
from .logging_setup import setup_logging
from .management.key_manager import KeyManager
from .models.issues import ERROR, WARNING
from .reporting.analytics import EXPORT_FORMATS, AnalyticsEngine
from .validation.health_checker import HealthChecker

console = Console()

SEVERITY_STYLES = {ERROR: "red", WARNING: "yellow"}


def _split(value: Optional[str]) -> Optional[List[str]]:
    """Parse a comma-separated option; None when unset."""
    if not value:
        return None
    return [item.strip() for item in value.split(",") if item.strip()]


def _score_color(score: float) -> str:
    return "green" if score >= 80 else "yellow" if score >= 60 else "red"


def _engines(config: Config):
    store = TranslationStore(config)
    checker = HealthChecker(config, store)
    return store, checker, KeyManager(config, store), AnalyticsEngine(config, store, checker)


@click.group()
@click.version_option(version=__version__)
@click.option(
    "--config", "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    default=None,
    help="Path to an i18next-mcp.json config file"
)
@click.option(
    "--log-level",
    default=None,
    help="Log level (defaults to I18N_LOG_LEVEL or INFO)"
)
@click.pass_context
def cli(ctx: click.Context, config_path: Optional[str], log_level: Optional[str]):
    """i18next translation health and sync CLI."""
    config = load_config(config_path)
    setup_logging(log_level or config.log_level)
    ctx.obj = config


@cli.command()
@click.pass_obj
def info(config: Config):
    """Show configuration and translation file statistics."""
    store = TranslationStore(config)

    table = Table(title="i18next project")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Project root", str(config.resolved_project_root()))
    table.add_row("Locales path", str(config.resolved_locales_path()))
    table.add_row("Languages", ", ".join(config.languages))
    table.add_row("Namespaces", ", ".join(config.namespaces))
    table.add_row("Default language", config.default_language)
    table.add_row("Backups", str(config.resolved_backup_path()) if config.backup_enabled else "disabled")

    stats = store.file_stats()
    table.add_row("Files", str(stats["total_files"]))
    table.add_row("Total size", f"{stats['total_size']} bytes")
    table.add_row("Last modified", stats["last_modified"] or "-")

    console.print(table)

    problems = config.validate() + config.validate_project()["issues"]
    if problems:
        console.print("[red]Configuration problems:[/red]")
        for problem in problems:
            console.print(f"  - {problem}")
    for file_key, error in stats["unreadable_files"].items():
        console.print(f"[yellow]Unreadable:[/yellow] {file_key}: {error}")


@cli.command()
@click.option(
    "--languages", "-l",
    default=None,
    help="Comma-separated language codes (default: all configured)"
)
@click.option(
    "--namespaces", "-n",
    default=None,
    help="Comma-separated namespaces (default: all configured)"
)
@click.option(
    "--detailed",
    is_flag=True,
    help="List warnings and info issues, not only errors"
)
@click.option(
    "--limit",
    type=int,
    default=20,
    help="Limit number of issues to show"
)
@click.option(
    "--fail-under",
    type=int,
    default=None,
    help="Exit with status 1 if the overall score is below this value"
)
@click.pass_obj
def health(
    config: Config,
    languages: Optional[str],
    namespaces: Optional[str],
    detailed: bool,
    limit: int,
    fail_under: Optional[int],
):
    """Run the translation health check."""
    _, checker, _, _ = _engines(config)
    result = checker.perform_health_check(_split(languages), _split(namespaces), detailed)
    summary = result.summary

    table = Table(title="File health")
    table.add_column("File", style="cyan")
    table.add_column("Keys", justify="right")
    table.add_column("Issues", justify="right")
    table.add_column("Score", justify="right")
    table.add_column("Grade", justify="center")

    for file_key, file_health in result.files.items():
        score = file_health.quality_score
        color = _score_color(score.score)
        table.add_row(
            file_key,
            str(file_health.key_count),
            str(file_health.issue_count),
            f"[{color}]{score.score}[/{color}]",
            score.grade,
        )
    console.print(table)

    shown = result.issues if detailed else [i for i in result.issues if i.severity == ERROR]
    if shown:
        issues_table = Table(show_header=True)
        issues_table.add_column("Severity", width=8)
        issues_table.add_column("Type", style="dim", max_width=36)
        issues_table.add_column("Message", max_width=70)
        for issue in shown[:limit]:
            style = SEVERITY_STYLES.get(issue.severity, "dim")
            issues_table.add_row(f"[{style}]{issue.severity}[/{style}]", issue.type, issue.message)
        console.print(issues_table)
        if len(shown) > limit:
            console.print(f"\n[dim]... and {len(shown) - limit} more[/dim]")

    color = _score_color(summary.score)
    panel_content = (
        f"[bold]Score:[/bold] [{color}]{summary.score}[/{color}] "
        f"({checker.scorer.grade(summary.score)})\n"
        f"[red]Errors:[/red] {summary.errors}\n"
        f"[yellow]Warnings:[/yellow] {summary.warnings}\n"
        f"[dim]Info:[/dim] {summary.info}\n"
        "\n" + "\n".join(f"- {line}" for line in result.recommendations)
    )
    console.print(Panel(panel_content, title="Health Summary"))

    if fail_under is not None and summary.score < fail_under:
        raise SystemExit(1)


@cli.command()
@click.option(
    "--languages", "-l",
    default=None,
    help="Comma-separated language codes (default: all configured)"
)
@click.option(
    "--namespaces", "-n",
    default=None,
    help="Comma-separated namespaces (default: all configured)"
)
@click.pass_obj
def coverage(config: Config, languages: Optional[str], namespaces: Optional[str]):
    """Show translation coverage per language and namespace."""
    _, _, _, analytics = _engines(config)
    report = analytics.generate_coverage_report(_split(languages), _split(namespaces))

    table = Table(title="Coverage by language")
    table.add_column("Language", style="cyan")
    table.add_column("Translated", justify="right")
    table.add_column("Coverage", justify="right")
    for language, stats in report.by_language.items():
        color = _score_color(stats.percentage)
        table.add_row(
            language,
            f"{stats.translated_keys}/{stats.total_keys}",
            f"[{color}]{stats.percentage}%[/{color}]",
        )
    console.print(table)

    table = Table(title="Coverage by namespace")
    table.add_column("Namespace", style="cyan")
    table.add_column("Fully translated", justify="right")
    table.add_column("Coverage", justify="right")
    for namespace, stats in report.by_namespace.items():
        color = _score_color(stats.percentage)
        table.add_row(
            namespace,
            f"{stats.translated_keys}/{stats.total_keys}",
            f"[{color}]{stats.percentage}%[/{color}]",
        )
    console.print(table)

    console.print(Panel(
        "\n".join(f"- {line}" for line in report.recommendations),
        title=f"Overall: {report.overall.percentage}%",
    ))


@cli.command()
@click.option(
    "--source", "-s",
    "source_language",
    default=None,
    help="Source language (default: configured default language)"
)
@click.option(
    "--languages", "-l",
    default=None,
    help="Comma-separated target languages (default: all others)"
)
@click.option(
    "--limit",
    type=int,
    default=20,
    help="Limit number of keys to show per file"
)
@click.pass_obj
def missing(config: Config, source_language: Optional[str], languages: Optional[str], limit: int):
    """Show keys missing from target languages."""
    _, _, _, analytics = _engines(config)
    report = analytics.get_missing_keys(source_language, _split(languages))

    for error in report.errors:
        console.print(f"[yellow]{error}[/yellow]")

    if not report.missing:
        console.print("[green]No missing keys![/green]")
        return

    for language, namespaces in report.missing.items():
        for namespace, keys in namespaces.items():
            console.print(f"[cyan]{language}/{namespace}:[/cyan] {len(keys)} missing")
            for key in keys[:limit]:
                console.print(f"  {key}")
            if len(keys) > limit:
                console.print(f"  [dim]... and {len(keys) - limit} more[/dim]")


@cli.command()
@click.option(
    "--source", "-s",
    "source_language",
    default=None,
    help="Source language (default: configured default language)"
)
@click.option(
    "--languages", "-l",
    default=None,
    help="Comma-separated target languages (default: all others)"
)
@click.option(
    "--namespaces", "-n",
    default=None,
    help="Comma-separated namespaces (default: all configured)"
)
@click.option(
    "--placeholder",
    default="",
    help="Value for added keys (default: copy the source text)"
)
@click.option(
    "--empty",
    is_flag=True,
    help="Add keys with empty values instead of copying the source text"
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Preview changes without saving"
)
@click.pass_obj
def sync(
    config: Config,
    source_language: Optional[str],
    languages: Optional[str],
    namespaces: Optional[str],
    placeholder: str,
    empty: bool,
    dry_run: bool,
):
    """Add keys from the source language to the other languages."""
    _, _, manager, _ = _engines(config)
    report = manager.sync_missing_keys(
        source_language=source_language,
        target_languages=_split(languages),
        namespaces=_split(namespaces),
        placeholder=placeholder,
        copy_values=not empty,
        dry_run=dry_run,
    )

    if report.operations:
        table = Table(title="Dry run" if dry_run else "Synced")
        table.add_column("File", style="cyan")
        table.add_column("Keys", justify="right")
        table.add_column("Action")
        for entry in report.operations:
            table.add_row(f"{entry.language}/{entry.namespace}", str(len(entry.missing_keys)), entry.action)
        console.print(table)
    else:
        console.print("[green]Nothing to sync[/green]")

    for error in report.errors:
        console.print(f"[red]{error}[/red]")

    if dry_run:
        console.print("\n[yellow]Dry run - no changes saved[/yellow]")
    elif report.operations:
        console.print(f"[green]Done![/green] {report.total_keys} keys added")


@cli.command()
@click.option(
    "--format", "-f",
    "export_format",
    type=click.Choice(EXPORT_FORMATS),
    default="json",
    help="Export format"
)
@click.option(
    "--output", "-o",
    "output_path",
    type=click.Path(),
    default=None,
    help="Write to this file (defaults to the suggested file name)"
)
@click.option(
    "--languages", "-l",
    default=None,
    help="Comma-separated language codes (default: all configured)"
)
@click.option(
    "--namespaces", "-n",
    default=None,
    help="Comma-separated namespaces (default: all configured)"
)
@click.pass_obj
def export(
    config: Config,
    export_format: str,
    output_path: Optional[str],
    languages: Optional[str],
    namespaces: Optional[str],
):
    """Export translations to JSON, CSV or gettext."""
    _, _, _, analytics = _engines(config)
    result = analytics.export_data(export_format, _split(languages), _split(namespaces))

    target = Path(output_path or result.filename)
    target.write_text(result.data, encoding="utf-8")
    console.print(f"[green]Exported:[/green] {target}")


@cli.command()
@click.pass_obj
def serve(config: Config):
    """Run the MCP server on stdio."""
    from .server import configure, mcp
    from .services.project_service import ProjectService

    configure(ProjectService(config))
    mcp.run(transport="stdio")


if __name__ == "__main__":
    cli()
