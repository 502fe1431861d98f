"""CLI commands for configuration management."""
from __future__ import annotations

import typer
from nextport import ui
from nextport.error_handler import handle_errors

app = typer.Typer(
    name="config",
    help="Manage nextport configuration.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _format_value(value) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value) or "[dim]empty[/dim]"
    if isinstance(value, dict):
        return ", ".join(f"{k}={v}" for k, v in value.items()) or "[dim]empty[/dim]"
    return str(value)


@app.command()
@handle_errors
def show():
    """Display the resolved configuration (all layers merged)."""
    from rich.panel import Panel
    from rich.table import Table
    from nextport.core.config_service import get_config_service

    svc = get_config_service()
    info = svc.show()

    if ui.is_json():
        ui.print_json_output(info)
        return

    sources = info["sources"]
    ui.console.print(Panel(
        f"Global:  {sources['global_config'] or '[dim]not found[/dim]'}\n"
        f"Project: {sources['project_config'] or '[dim]not found[/dim]'}",
        title="Config Sources",
        border_style="cyan",
    ))

    for section, values in info["resolved"].items():
        if not isinstance(values, dict):
            continue
        table = Table(title=section.capitalize(), show_header=True)
        table.add_column("Setting", style="cyan")
        table.add_column("Value")
        for key, val in values.items():
            table.add_row(key, _format_value(val))
        ui.console.print(table)


@app.command("set")
@handle_errors
def set_value(
    key: str = typer.Argument(..., help="Config key in dotted notation (e.g. conversion.max_workers)"),
    value: str = typer.Argument(..., help="Value to set"),
):
    """Set a global configuration value."""
    from nextport.core.config_service import get_config_service

    svc = get_config_service()

    # Convert string booleans
    parsed_value: object
    if value.lower() in ("true", "yes"):
        parsed_value = True
    elif value.lower() in ("false", "no"):
        parsed_value = False
    else:
        try:
            parsed_value = int(value)
        except ValueError:
            parsed_value = value

    svc.set_global(key, parsed_value)
    ui.console.print(f"[green]Set[/green] {key} = {parsed_value}")


@app.command()
@handle_errors
def init():
    """Create a .nextport.toml project config in the current directory."""
    from nextport.core.config_service import get_config_service

    svc = get_config_service()
    try:
        path = svc.init_project_config()
    except FileExistsError as e:
        ui.console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(1)
    ui.console.print(f"[green]Created project config:[/green] {path}")


@app.command()
@handle_errors
def path():
    """Show all configuration file locations."""
    from rich.table import Table
    from nextport.core.config_service import get_config_service

    svc = get_config_service()
    paths = svc.config_paths()

    table = Table(title="Config Paths", show_header=True)
    table.add_column("File", style="cyan")
    table.add_column("Location")
    for name, location in paths.items():
        table.add_row(name, location)
    ui.console.print(table)
