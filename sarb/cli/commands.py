"""
CLI commands for SARB.

Provides the main command-line interface using Click.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from sarb import __version__
from sarb.core.config import PROJECT_CONFIG_FILE, SarbConfig, validate_config
from sarb.core.errors import HistoryUnavailable, SarbError
from sarb.core.orchestrator import BaselineCreator, ResultsPruner
from sarb.core.registry import Registry
from sarb.history import default_history_registry
from sarb.models.base import ProjectRoot
from sarb.parsers import default_parser_registry
from sarb.pruning.results import PrunedResults
from sarb.reporting import ReportConfig, default_reporter_registry
from sarb.utils.logging import setup_logging

console = Console()
err_console = Console(stderr=True)

# Exit codes
EXIT_SUCCESS = 0
EXIT_NEW_ISSUES = 1
EXIT_CONFIG_ERROR = 2
EXIT_RUNTIME_ERROR = 3


@click.group()
@click.version_option(version=__version__, prog_name="sarb")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output (DEBUG level)")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-error output (ERROR level)")
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    help="Write logs to file",
)
@click.option("--json-logs", is_flag=True, help="Output logs in JSON format")
@click.pass_context
def cli(
    ctx: click.Context,
    verbose: bool,
    quiet: bool,
    log_file: Optional[Path],
    json_logs: bool,
) -> None:
    """SARB - Static Analysis Results Baseliner.

    Records the issues a static analysis tool reports today, then reports
    only the issues introduced since, even after the code has moved.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet

    if verbose:
        level = "DEBUG"
    elif quiet:
        level = "ERROR"
    else:
        level = "INFO"

    setup_logging(
        level=level,
        log_file=log_file,
        json_format=json_logs,
    )


@cli.command()
@click.argument("baseline_file", type=click.Path(dir_okay=False, path_type=Path), required=False)
@click.option(
    "--input-format",
    help="Format of the static analysis results (see 'sarb list-parsers')",
)
@click.option(
    "--project-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Root of the analysed project (defaults to the current directory)",
)
@click.option(
    "-i",
    "--input",
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read analysis results from a file instead of stdin",
)
@click.option("--git-timeout", type=int, help="Timeout in seconds for git commands")
@click.pass_context
def create(
    ctx: click.Context,
    baseline_file: Optional[Path],
    input_format: Optional[str],
    project_root: Optional[Path],
    input_file: Optional[Path],
    git_timeout: Optional[int],
) -> None:
    """Create a baseline from static analysis results.

    BASELINE_FILE is where the baseline is written (defaults to the
    configured baseline file).

    Examples:

        phpstan analyse --error-format=json | sarb create --input-format sarb-json

        sarb create baseline.sarb --input-format sarif -i results.sarif
    """
    root = _project_root(project_root)
    cfg = _load_config(ctx, root, {
        "input_format": input_format,
        "git_timeout": git_timeout,
    })
    baseline_file = baseline_file or cfg.baseline.file

    try:
        creator = ctx.obj.get("baseline_creator") or BaselineCreator(
            _parser_registry(ctx),
            _history_registry(ctx),
            cfg,
        )
        analysis_output = _read_input(input_file)
        snapshot = creator.create(
            baseline_file,
            analysis_output,
            cfg.baseline.results_parser,
            root,
        )

    except HistoryUnavailable as e:
        _print_failure("Baseline creation failed", e, ctx)
        sys.exit(EXIT_RUNTIME_ERROR)

    except SarbError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}", soft_wrap=True)
        sys.exit(EXIT_CONFIG_ERROR)

    except Exception as e:
        _print_failure("Baseline creation failed", e, ctx)
        sys.exit(EXIT_RUNTIME_ERROR)

    if not ctx.obj.get("quiet"):
        err_console.print(
            f"[green]Baseline created:[/] {escape(str(baseline_file))}\n"
            f"Issues in baseline: {snapshot.count}\n"
            f"Revision: {escape(snapshot.revision.identifier)}",
            soft_wrap=True,
        )


@cli.command()
@click.argument("baseline_file", type=click.Path(dir_okay=False, path_type=Path))
@click.option(
    "-f",
    "--output-format",
    help="Format of the report (see 'sarb list-formats')",
)
@click.option(
    "--project-root",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    help="Root of the analysed project (defaults to the current directory)",
)
@click.option(
    "-i",
    "--input",
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Read analysis results from a file instead of stdin",
)
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the report to a file instead of stdout",
)
@click.option("--strict", is_flag=True, help="Include the message when matching findings")
@click.option(
    "--walk-commits",
    is_flag=True,
    help="Follow code movement commit by commit instead of in one diff",
)
@click.option("--workers", type=int, help="Number of threads projecting baseline findings")
@click.option("--git-timeout", type=int, help="Timeout in seconds for git commands")
@click.pass_context
def remove(
    ctx: click.Context,
    baseline_file: Path,
    output_format: Optional[str],
    project_root: Optional[Path],
    input_file: Optional[Path],
    output: Optional[Path],
    strict: bool,
    walk_commits: bool,
    workers: Optional[int],
    git_timeout: Optional[int],
) -> None:
    """Remove baselined issues from the latest analysis results.

    BASELINE_FILE is a baseline written by 'sarb create'. Exits with 1 if
    any issue was introduced since the baseline.

    Examples:

        phpstan analyse --error-format=json | sarb remove baseline.sarb

        sarb remove baseline.sarb -i results.sarif --output-format json
    """
    root = _project_root(project_root)
    cfg = _load_config(ctx, root, {
        "output_format": output_format,
        "strict": strict,
        "walk_commits": walk_commits,
        "workers": workers,
        "git_timeout": git_timeout,
    })

    try:
        reporters = ctx.obj.get("reporter_registry") or default_reporter_registry(
            ReportConfig(max_findings=cfg.reporting.max_findings)
        )
        reporter = reporters.get(cfg.reporting.output_format)
        pruner = ctx.obj.get("results_pruner") or ResultsPruner(
            _parser_registry(ctx),
            _history_registry(ctx),
            cfg,
        )
        analysis_output = _read_input(input_file)
        pruned = pruner.get_pruned_results(baseline_file, analysis_output, root)

    except HistoryUnavailable as e:
        _print_failure("Baseline removal failed", e, ctx)
        sys.exit(EXIT_RUNTIME_ERROR)

    except SarbError as e:
        err_console.print(f"[red]Error:[/] {escape(str(e))}", soft_wrap=True)
        sys.exit(EXIT_CONFIG_ERROR)

    except Exception as e:
        _print_failure("Baseline removal failed", e, ctx)
        sys.exit(EXIT_RUNTIME_ERROR)

    # Keep stdout clean for formats other tools consume
    summary_console = err_console if reporter.is_machine_readable else console
    if not ctx.obj.get("quiet"):
        _print_counts(summary_console, pruned)

    try:
        if output:
            output_path = reporter.write(pruned, output)
            summary_console.print(
                f"[green]Report written to:[/] {escape(str(output_path))}", soft_wrap=True
            )
        else:
            click.echo(reporter.generate(pruned), nl=False)
    except Exception as e:
        _print_failure("Writing report failed", e, ctx)
        sys.exit(EXIT_RUNTIME_ERROR)

    sys.exit(EXIT_NEW_ISSUES if pruned.has_new_issues else EXIT_SUCCESS)


@cli.command("list-parsers")
@click.pass_context
def list_parsers(ctx: click.Context) -> None:
    """List supported static analysis result formats."""
    parsers = _parser_registry(ctx)

    table = Table(title="Input Formats")
    table.add_column("Code", style="cyan")
    table.add_column("Description", style="green")

    for parser in parsers:
        default = " (default)" if parser is parsers.default else ""
        table.add_row(f"{parser.identifier}{default}", parser.description)

    console.print(table)


@cli.command("list-formats")
@click.pass_context
def list_formats(ctx: click.Context) -> None:
    """List supported report output formats."""
    reporters = ctx.obj.get("reporter_registry") or default_reporter_registry()

    table = Table(title="Output Formats")
    table.add_column("Code", style="cyan")
    table.add_column("Extension", style="green")
    table.add_column("Machine readable")

    for reporter in reporters:
        default = " (default)" if reporter is reporters.default else ""
        table.add_row(
            f"{reporter.identifier}{default}",
            reporter.file_extension,
            "yes" if reporter.is_machine_readable else "no",
        )

    console.print(table)


@cli.command()
def version() -> None:
    """Show version and system information."""
    console.print(Panel.fit(
        f"[bold]SARB[/] v{__version__}\n\n"
        "Static Analysis Results Baseliner",
        title="Version Info",
    ))

    import platform

    table = Table(title="System Information")
    table.add_column("Component", style="cyan")
    table.add_column("Version", style="green")

    table.add_row("Python", platform.python_version())
    table.add_row("Platform", platform.platform())
    table.add_row("Architecture", platform.machine())

    console.print(table)


@cli.command()
@click.argument("path", type=click.Path(file_okay=False, path_type=Path), default=".")
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(path: Path, force: bool) -> None:
    """Initialize .sarb.yml configuration in a directory.

    Examples:

        sarb init

        sarb init ./my-project --force
    """
    config_path = path / PROJECT_CONFIG_FILE

    if config_path.exists() and not force:
        console.print(f"[yellow]Configuration already exists:[/] {escape(str(config_path))}")
        console.print("Use --force to overwrite")
        return

    path.mkdir(parents=True, exist_ok=True)
    SarbConfig().to_yaml(config_path)

    console.print(f"[green]Created configuration:[/] {escape(str(config_path))}")
    console.print("Run 'sarb create' to record your first baseline.")


def _project_root(project_root: Optional[Path]) -> ProjectRoot:
    """Build the project root from the option, defaulting to the cwd."""
    if project_root is None:
        return ProjectRoot.from_current_working_directory()
    return ProjectRoot.from_project_root(project_root)


def _load_config(ctx: click.Context, root: ProjectRoot, cli_args: dict[str, Any]) -> SarbConfig:
    """Load configuration, exiting with a config error on failure."""
    cli_args = dict(cli_args, verbose=ctx.obj.get("verbose"), quiet=ctx.obj.get("quiet"))
    try:
        cfg = SarbConfig.load(cli_args=cli_args, project_path=root.root)
    except Exception as e:
        err_console.print(f"[red]Configuration error:[/] {escape(str(e))}", soft_wrap=True)
        sys.exit(EXIT_CONFIG_ERROR)

    if not ctx.obj.get("quiet"):
        for warning in validate_config(cfg):
            err_console.print(f"[yellow]Warning:[/] {escape(warning)}", soft_wrap=True)

    return cfg


def _parser_registry(ctx: click.Context) -> Registry:
    return ctx.obj.get("parser_registry") or default_parser_registry()


def _history_registry(ctx: click.Context) -> Registry:
    return ctx.obj.get("history_registry") or default_history_registry()


def _read_input(input_file: Optional[Path]) -> str:
    """Read analysis output from a file or stdin."""
    if input_file is not None:
        return input_file.read_text(encoding="utf-8")
    return sys.stdin.read()


def _print_counts(target: Console, pruned: PrunedResults) -> None:
    target.print(f"Latest analysis issue count: {pruned.total_count}", highlight=False)
    target.print(f"Baseline issue count: {pruned.baseline_count}", highlight=False)
    target.print(f"Issue count with baseline removed: {pruned.residual_count}", highlight=False)


def _print_failure(title: str, error: Exception, ctx: click.Context) -> None:
    """Print a fatal error, with the traceback when verbose."""
    err_console.print(f"[red]{title}:[/] {escape(str(error))}", soft_wrap=True)
    if ctx.obj.get("verbose"):
        import traceback
        err_console.print(escape(traceback.format_exc()), soft_wrap=True)


if __name__ == "__main__":
    cli()
