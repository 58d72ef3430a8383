"""promptcoach command-line interface."""

from __future__ import annotations

import logging
import re
import sys
from enum import Enum
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import load_options
from .exceptions import PromptCoachError
from .models import AnalyzerOptions, PromptReport
from .report import analyze as run_analysis

app = typer.Typer(
    name="prompt-coach",
    help="Prompt Coach: prompt quality metrics from Claude Code transcripts",
    add_completion=False,
)
console = Console()
err_console = Console(stderr=True)


class OutputFormat(str, Enum):
    """Report rendering formats."""

    JSON = "json"
    TABLE = "table"


def _get_version_string() -> str:
    """Get version string from package metadata or pyproject.toml."""
    try:
        return get_version("promptcoach")
    except PackageNotFoundError:
        pass

    # Try to read version from pyproject.toml for development installs
    pyproject_path = Path(__file__).parent.parent.parent / "pyproject.toml"
    if pyproject_path.exists():
        content = pyproject_path.read_text()
        match = re.search(r'version\s*=\s*["\']([^"\']+)["\']', content)
        if match:
            return f"{match.group(1)} (development)"

    return "unknown"


def version_callback(value: bool) -> None:
    """Callback for --version flag."""
    if value:
        console.print(f"Prompt Coach version {_get_version_string()}")
        raise typer.Exit


def configure_logging(debug: bool) -> None:
    """Send library logs to stderr through rich."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """Prompt Coach: prompt quality metrics from Claude Code transcripts."""


@app.command()
def version() -> None:
    """Show Prompt Coach version information."""
    console.print(f"Prompt Coach version {_get_version_string()}")


@app.command()
def analyze(
    days: int | None = typer.Option(
        None,
        "--days",
        help="Analyze last N days (default: 7)",
    ),
    limit: int | None = typer.Option(
        None,
        "--limit",
        help="Limit to N most recent prompts (default: 100)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        help="Include full prompt text in examples",
    ),
    project: str | None = typer.Option(
        None,
        "--project",
        help="Filter to project directories containing this substring",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write JSON report to file instead of stdout",
    ),
    projects_dir: Path | None = typer.Option(
        None,
        "--projects-dir",
        help="Transcript root (defaults to ~/.claude/projects/)",
    ),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="YAML file with default options",
    ),
    output_format: OutputFormat = typer.Option(
        OutputFormat.JSON,
        "--format",
        help="Output format: json or table",
    ),
    debug: bool = typer.Option(
        False,
        "--debug",
        help="Log discovery and parsing details to stderr",
    ),
) -> None:
    """Analyze recent transcripts and report prompt quality metrics.

    Examples:
        prompt-coach analyze --days 14
        prompt-coach analyze --project myapp --verbose
        prompt-coach analyze --output report.json
    """
    configure_logging(debug)

    overrides = {
        "days": days,
        "limit": limit,
        "verbose": verbose or None,
        "project": project,
        "output": output,
    }

    try:
        if config is not None:
            options = load_options(config, **overrides)
        else:
            options = AnalyzerOptions.model_validate(
                {key: value for key, value in overrides.items() if value is not None},
            )

        report = run_analysis(options, projects_dir=projects_dir)
    except PromptCoachError as e:
        err_console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except ValueError as e:
        err_console.print(f"[red]Error:[/red] Invalid options: {e}")
        raise typer.Exit(1) from e

    if output_format == OutputFormat.TABLE:
        _print_tables(report)
        return

    payload = report.to_json()
    if options.output:
        try:
            options.output.write_text(payload + "\n", encoding="utf-8")
        except OSError as e:
            err_console.print(f"[red]Error:[/red] Failed to write report: {e}")
            raise typer.Exit(1) from e
        console.print(f"Analysis written to {options.output}")
    else:
        typer.echo(payload)


def _print_tables(report: PromptReport) -> None:
    """Render the headline numbers of a report as rich tables."""
    if report.no_data:
        console.print(f"[yellow]{report.error}[/yellow] in {report.summary.projects_dir}")
        console.print("\nTips:")
        console.print("  • Check that --projects-dir is correct")
        console.print("  • Try increasing --days")
        return

    summary = report.summary
    console.print(f"[bold blue]Prompt Analysis[/bold blue] ({summary.analyzed_period})")
    console.print(
        f"   {summary.total_sessions} sessions, "
        f"{summary.analyzed_prompts} of {summary.total_prompts} prompts analyzed\n",
    )

    metrics_table = Table(title="Metrics")
    metrics_table.add_column("Metric", style="cyan")
    metrics_table.add_column("Value", justify="right")
    metrics = report.metrics
    metrics_table.add_row("First-time success rate", f"{metrics.first_time_success_rate}%")
    metrics_table.add_row("Corrections", str(metrics.correction_prompts))
    metrics_table.add_row("Acknowledgments", str(metrics.acknowledgments))
    metrics_table.add_row("Avg prompt length", f"{metrics.avg_prompt_length} chars")
    metrics_table.add_row("Avg tokens per prompt", f"{metrics.avg_tokens_per_prompt:,}")
    metrics_table.add_row("Correction chains", str(report.patterns.correction_chain_count))
    console.print(metrics_table)

    if report.insights:
        insight_table = Table(title="Insights")
        insight_table.add_column("Type")
        insight_table.add_column("Category")
        insight_table.add_column("Message")
        colors = {"warning": "yellow", "info": "blue", "success": "green"}
        for insight in report.insights:
            color = colors.get(insight.type, "white")
            insight_table.add_row(
                f"[{color}]{insight.type}[/{color}]",
                insight.category,
                insight.message,
            )
        console.print(insight_table)


def main() -> None:
    """Entry point for the CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
