"""covm methods command - per-method coverage metrics."""

import json
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from covmetrics.config.models import CovMetricsConfig
from covmetrics.core.errors import ReportError
from covmetrics.coverage import CoverageMethodElement, OpenCoverReport


def _is_uncovered(method: CoverageMethodElement) -> bool:
    ratio = method.branch_coverage_ratio
    if not method.is_visited:
        return True
    return ratio is not None and ratio.covered < ratio.total


def _make_methods_table(methods: list[CoverageMethodElement]) -> Table:
    table = Table(show_lines=False, pad_edge=False)
    table.add_column("method", style="cyan")
    table.add_column("file", style="dim", overflow="fold")
    table.add_column("visited", justify="center")
    table.add_column("cc", justify="right")
    table.add_column("seq %", justify="right")
    table.add_column("branches", justify="right")
    table.add_column("branch %", justify="right")

    for m in methods:
        ratio = m.branch_coverage_ratio
        branches = f"{ratio.covered}/{ratio.total}" if ratio is not None else "[dim]-[/dim]"
        if ratio is None:
            branch_pct = "[dim]-[/dim]"
        elif ratio.covered == ratio.total:
            branch_pct = f"[green]{m.branch_coverage}[/green]"
        else:
            branch_pct = f"[yellow]{m.branch_coverage}[/yellow]"
        table.add_row(
            m.method_name or "[dim]?[/dim]",
            Path(m.file_name).name if m.file_name else "",
            "[green]yes[/green]" if m.is_visited else "[red]no[/red]",
            str(m.cyclomatic_complexity),
            str(m.sequence_coverage),
            branches,
            branch_pct,
        )
    return table


@click.command()
@click.argument("report_path", type=click.Path(exists=True, path_type=Path))
@click.option("--json", "as_json", is_flag=True, help="Output one JSON object per method")
@click.option(
    "--uncovered-only",
    is_flag=True,
    help="Only list unvisited methods and methods with uncovered branches",
)
@click.pass_context
def methods_command(
    ctx: click.Context, report_path: Path, as_json: bool, uncovered_only: bool
) -> None:
    """Show coverage metrics for every method in an OpenCover report.

    REPORT_PATH is the report XML, or a directory containing one.
    """
    config: CovMetricsConfig = (ctx.obj or {}).get("config") or CovMetricsConfig()
    try:
        report = OpenCoverReport.load(report_path, config=config)
    except ReportError as e:
        if as_json:
            click.echo(json.dumps(e.to_dict()), err=True)
            ctx.exit(1)
        raise click.ClickException(str(e)) from e

    methods = report.methods
    if uncovered_only:
        methods = [m for m in methods if _is_uncovered(m)]

    if as_json:
        for m in methods:
            click.echo(json.dumps(m.to_dict()))
        return

    console = Console()
    if not methods:
        console.print("[yellow]No methods to show[/yellow]")
        return
    console.print(_make_methods_table(methods))
