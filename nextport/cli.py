#!/usr/bin/env python3
"""
nextport: convert a React project (CRA, Vite or plain webpack) into a
Next.js pages-router project.
"""
import logging
from pathlib import Path
from typing import Optional

import typer

from nextport import __version__, ui
from nextport.error_handler import handle_errors

app = typer.Typer(
    name="nextport",
    help="Convert React projects to Next.js.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# Import subcommands
from nextport.commands import config_cmd

app.add_typer(config_cmd.app, name="config", help="Manage configuration", rich_help_panel="Advanced")


def _version_callback(value: bool):
    if value:
        print(f"nextport {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True,
        help="Show the version and exit.",
    ),
    plain: bool = typer.Option(False, "--plain", help="Plain text output (no colors, ASCII only)."),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr."),
):
    """Convert React projects to Next.js."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    if not plain:
        from nextport.core.config_service import get_config_service
        plain = bool(get_config_service().get("ui.plain_output", False))
    ui.set_plain_mode(plain)
    ui.set_json_mode(False)


def _load_source(source: Path) -> dict[str, str]:
    from nextport.core.config_service import get_config_service
    from nextport.loader import load_directory

    config = get_config_service()
    return load_directory(
        source,
        max_file_bytes=int(config.get("loader.max_file_bytes", 0)),
        max_total_bytes=int(config.get("loader.max_total_bytes", 0)),
        skip_dirs=config.get("loader.skip_dirs", []) or [],
    )


def _print_buckets(output) -> None:
    from rich.table import Table
    from nextport.core.file_tree import BUCKET_DIRECTORIES

    if ui.is_plain():
        for bucket, directory in BUCKET_DIRECTORIES:
            print(f"  {directory or '.'}: {len(output.bucket(bucket))}")
        return
    table = Table(title="Output", show_header=True, expand=False)
    table.add_column("Directory", style="cyan")
    table.add_column("Files", justify="right")
    for bucket, directory in BUCKET_DIRECTORIES:
        table.add_row(f"{directory}/" if directory else "(root)", str(len(output.bucket(bucket))))
    ui.console.print(table)


@app.command(rich_help_panel="Conversion")
@handle_errors
def convert(
    source: Path = typer.Argument(..., help="React project directory"),
    output_dir: Optional[Path] = typer.Option(None, "--output", "-o", help="Output directory (default: <source>-next)"),
    workers: Optional[int] = typer.Option(None, "--workers", "-w", min=1, help="Files processed in parallel"),
    as_json: bool = typer.Option(False, "--json", help="Print the conversion result as JSON"),
    force: bool = typer.Option(False, "--force", "-f", help="Write into a non-empty output directory"),
    show_tree: bool = typer.Option(False, "--tree", help="Print the output file tree"),
):
    """[bold cyan]Convert[/bold cyan] a React project into a Next.js project."""
    from nextport.core import ConversionOptions
    from nextport.core.conversion_service import convert_project
    from nextport.loader import write_output_tree

    source = source.resolve()
    target = (output_dir or source.with_name(f"{source.name}-next")).resolve()
    if target.exists() and any(target.iterdir()) and not force:
        ui.error_panel("Output directory is not empty", f"{target}\nUse --force to write into it.")
        raise typer.Exit(1)

    ui.set_json_mode(as_json)
    files = _load_source(source)
    options = ConversionOptions.from_config(max_workers=workers)

    if ui.is_json() or ui.is_plain():
        output = convert_project(files, options)
    else:
        with ui.console.status("[bold cyan]Converting project...[/bold cyan]"):
            output = convert_project(files, options)

    written = write_output_tree(output, target, source)

    if ui.is_json():
        data = output.to_dict()
        data["outputDir"] = str(target)
        ui.print_json_output(data)
    else:
        _print_buckets(output)
        if show_tree and output.file_tree is not None:
            ui.file_tree_view(output.file_tree)
        ui.conversion_log_view(output.log, verbose=logging.getLogger().isEnabledFor(logging.DEBUG))
        if output.log.errors:
            ui.error_panel("Conversion failed", ui.stats_summary(output.stats, output.log))
        else:
            ui.success_panel(
                f"Wrote {len(written)} files to {target}",
                ui.stats_summary(output.stats, output.log),
            )
    if output.log.errors:
        raise typer.Exit(2)


@app.command(rich_help_panel="Analysis")
@handle_errors
def analyze(
    source: Path = typer.Argument(..., help="React project directory"),
    fmt: str = typer.Option("table", "--format", "-F", help="Output format: table, json or yaml"),
):
    """[bold cyan]Analyze[/bold cyan] a React project without converting it."""
    from rich.panel import Panel
    from rich.table import Table

    from nextport.analyzers.routing_analyzer import flatten_routes
    from nextport.analyzers.state_analyzer import PATTERN_LABELS
    from nextport.core import ConversionOptions
    from nextport.core.analysis_service import analysis_summary, analyze_files, summary_to_yaml

    fmt = fmt.lower()
    if fmt not in ("table", "json", "yaml"):
        ui.error_panel(f"Unknown format: {fmt}", "Use table, json or yaml.")
        raise typer.Exit(1)

    files = _load_source(source.resolve())
    run = analyze_files(files, ConversionOptions.from_config())

    if fmt == "json":
        ui.print_json_output(analysis_summary(run))
        return
    if fmt == "yaml":
        print(summary_to_yaml(analysis_summary(run)), end="")
        return

    project = run.project
    routes = flatten_routes(project.route_table)
    ui.console.print(Panel(
        f"[bold]{source.resolve().name}[/bold]\n"
        f"{len(run.sources)} text files, {len(run.binary_paths)} binary assets\n"
        f"State management: {PATTERN_LABELS.get(project.dominant_state_pattern, project.dominant_state_pattern)}\n"
        f"react-router: {project.react_router_version or 'not found'}",
        title="Project Analysis",
        border_style="cyan",
    ))

    role_table = Table(title="File Roles", show_header=True, expand=False)
    role_table.add_column("Role", style="cyan")
    role_table.add_column("Files", justify="right")
    counts: dict[str, int] = {}
    for role in run.roles.values():
        counts[role] = counts.get(role, 0) + 1
    for role, count in sorted(counts.items(), key=lambda x: -x[1]):
        role_table.add_row(role, str(count))
    ui.console.print(role_table)

    if routes:
        ui.routes_table(routes)

    if project.library_usage:
        lib_table = Table(title="Libraries", show_header=True, expand=False)
        lib_table.add_column("Package", style="cyan")
        lib_table.add_column("Category")
        lib_table.add_column("Files", justify="right")
        lib_table.add_column("Client only", justify="center")
        for name, usage in sorted(project.library_usage.items()):
            lib_table.add_row(name, usage.category, str(len(usage.files)), "yes" if usage.requires_client_directive else "")
        ui.console.print(lib_table)

    if project.env_variables:
        env_table = Table(title="Environment Variables", show_header=True, expand=False)
        env_table.add_column("Variable", style="cyan")
        env_table.add_column("Next.js name", style="green")
        env_table.add_column("Public", justify="center")
        for name, info in sorted(project.env_variables.items()):
            env_table.add_row(name, info.target_name, "yes" if info.is_public else "")
        ui.console.print(env_table)

    warnings = [d for d in run.diagnostics if d.level != "info"]
    if warnings:
        ui.section_divider("Warnings")
        for diagnostic in warnings:
            ui.console.print(f"  {ui.icon('warning')} {diagnostic.render()}", highlight=False)


@app.command(rich_help_panel="Analysis")
@handle_errors
def routes(
    source: Path = typer.Argument(..., help="React project directory"),
):
    """Show the react-router routes and the Next.js pages they map to."""
    from nextport.core import ConversionOptions
    from nextport.core.analysis_service import analyze_files

    files = _load_source(source.resolve())
    run = analyze_files(files, ConversionOptions.from_config())
    if not run.project.route_table:
        ui.console.print("[yellow]No react-router routes found.[/yellow]")
        return
    ui.route_tree_view(run.project.route_table, title=source.resolve().name)


if __name__ == "__main__":
    app()
