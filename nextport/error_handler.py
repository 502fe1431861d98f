"""Unified CLI error handler for nextport commands."""

from __future__ import annotations

import functools
import logging
import os
import traceback

import typer

from nextport import ui
from nextport.errors import ConfigError, InputAdmissionError, NextportError

logger = logging.getLogger("nextport.error_handler")


def _debug_mode() -> bool:
    """Check if debug output is enabled via NEXTPORT_DEBUG env var."""
    return os.environ.get("NEXTPORT_DEBUG", "").lower() in ("1", "true", "yes")


def _render_nextport_error(e: NextportError) -> None:
    """Render a NextportError with Rich formatting and context."""
    if ui.is_json():
        ui.print_json_output({"error": type(e).__name__, "detail": str(e), "context": e.context})
        return
    ui.console.print(f"\n[bold red]Error:[/bold red] {e}", highlight=False)

    # Context details (only in debug mode)
    if e.context and _debug_mode():
        context_parts = [
            f"  [dim]{key}:[/dim] {value}" for key, value in e.context.items() if value
        ]
        if context_parts:
            ui.console.print("[dim]Context:[/dim]")
            for part in context_parts:
                ui.console.print(part)

    # Actionable hints based on error type
    if isinstance(e, InputAdmissionError) and e.context.get("limit"):
        ui.console.print(
            "[dim]Raise loader.max_file_bytes / loader.max_total_bytes in .nextport.toml "
            "or add the directory to loader.skip_dirs.[/dim]"
        )
    elif isinstance(e, ConfigError):
        ui.console.print("[dim]Run 'nextport config show' to inspect the resolved configuration.[/dim]")


def handle_errors(func):
    """Decorator that catches NextportError and renders formatted CLI output.

    Usage::

        @app.command()
        @handle_errors
        def my_command(...):
            ...  # no try/except needed
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except NextportError as e:
            _render_nextport_error(e)
            if _debug_mode():
                ui.console.print(f"\n[dim]{traceback.format_exc()}[/dim]")
            raise typer.Exit(e.exit_code or 1)
        except KeyboardInterrupt:
            ui.console.print("\n[dim]Interrupted.[/dim]")
            raise typer.Exit(130)
        except (typer.Exit, typer.Abort, SystemExit):
            raise
        except Exception as e:
            logger.debug("Unhandled error in %s", func.__name__, exc_info=True)
            ui.console.print(f"\n[bold red]Unexpected error:[/bold red] {e}", highlight=False)
            if _debug_mode():
                ui.console.print(f"\n[dim]{traceback.format_exc()}[/dim]")
            else:
                ui.console.print("[dim]Set NEXTPORT_DEBUG=1 for full traceback.[/dim]")
            raise typer.Exit(1)

    return wrapper
