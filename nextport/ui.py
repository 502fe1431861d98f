"""Shared UI theme, console, and display helpers for nextport."""

import json
import sys
from rich.console import Console
from rich.theme import Theme
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from nextport.models import ConversionLog, ConversionStats, FileNode, RouteEntry

# ── Output Mode State ──
_plain_mode: bool = False
_json_mode: bool = False


def set_plain_mode(enabled: bool = True) -> None:
    """Enable or disable plain text output (no colors, no panels, ASCII only)."""
    global _plain_mode, console
    _plain_mode = enabled
    if enabled:
        console = Console(no_color=True, highlight=False)
    else:
        console = Console(theme=NEXTPORT_THEME)


def set_json_mode(enabled: bool = True) -> None:
    """Enable or disable JSON output mode."""
    global _json_mode
    _json_mode = enabled


def is_plain() -> bool:
    return _plain_mode


def is_json() -> bool:
    return _json_mode


def print_json_output(data: dict | list) -> None:
    """Print data as formatted JSON to stdout."""
    print(json.dumps(data, indent=2, default=str))


# ── Theme ──
NEXTPORT_THEME = Theme({
    "info": "cyan",
    "success": "bold green",
    "warning": "yellow",
    "error": "bold red",
    "route.source": "bold blue",
    "route.target": "green",
    "brand": "bold cyan",
    "muted": "dim",
})

console = Console(theme=NEXTPORT_THEME)

# ── Status Icons ──
ICONS = {
    "ok": "[green]✔[/green]",
    "warning": "[yellow]▲[/yellow]",
    "error": "[red]✘[/red]",
    "arrow": "[dim]──▸[/dim]",
    "bullet": "[cyan]•[/cyan]",
}

# ASCII equivalents for plain mode
PLAIN_ICONS = {
    "ok": "[OK]",
    "warning": "[!]",
    "error": "[!!]",
    "arrow": "-->",
    "bullet": "*",
}


def icon(name: str) -> str:
    return (PLAIN_ICONS if _plain_mode else ICONS).get(name, "")


def success_panel(title: str, content=None):
    """Display a success panel."""
    if _json_mode:
        return
    if _plain_mode:
        print(f"OK: {title}")
        if content:
            print(f"  {content}")
        return

    console.print(Panel(
        content or "",
        title=f"[bold green]{title}[/bold green]",
        border_style="green",
    ))


def error_panel(title: str, content: str = ""):
    """Display an error panel."""
    if _json_mode:
        print_json_output({"error": title, "detail": content})
        return
    if _plain_mode:
        print(f"ERROR: {title}", file=sys.stderr)
        if content:
            print(f"  {content}", file=sys.stderr)
        return

    console.print(Panel(
        content,
        title=f"[bold red]{title}[/bold red]",
        border_style="red",
    ))


def section_divider(text: str = ""):
    """Print a subtle section divider."""
    if _json_mode:
        return
    if _plain_mode:
        if text:
            print(f"\n-- {text} --")
        else:
            print()
        return

    if text:
        console.print(f"\n[dim]── {text} ──[/dim]")
    else:
        console.print()


def stats_summary(stats: ConversionStats, log: ConversionLog) -> str:
    return (
        f"{stats.converted_files}/{stats.total_files} files converted in {stats.conversion_time_ms} ms, "
        f"{len(log.warnings)} warnings, {len(log.errors)} errors"
    )


def conversion_log_view(log: ConversionLog, verbose: bool = False):
    """Print errors and warnings; info lines only when verbose."""
    if _json_mode:
        return
    sections = [("error", log.errors), ("warning", log.warnings)]
    if verbose:
        sections.append(("bullet", log.info))
    for name, lines in sections:
        for line in lines:
            if _plain_mode:
                print(f"  {PLAIN_ICONS[name]} {line}")
            else:
                console.print(Text.from_markup(f"  {ICONS[name]} ") + Text(line))


def routes_table(routes: list[RouteEntry]):
    """Display the route table, one row per flattened route."""
    if _plain_mode:
        for entry in routes:
            print(f"  {entry.source_path} {PLAIN_ICONS['arrow']} pages/{entry.target_path}  {entry.component}")
        return
    table = Table(title="Routes", show_header=True, expand=False)
    table.add_column("react-router", style="route.source")
    table.add_column("Next.js page", style="route.target")
    table.add_column("Component", style="cyan")
    table.add_column("Params", style="dim")
    for entry in routes:
        table.add_row(entry.source_path, f"pages/{entry.target_path}", entry.component, ", ".join(entry.params))
    console.print(table)


def _add_nodes(branch: Tree, node: FileNode) -> None:
    for child in node.children or ():
        if child.type == "directory":
            _add_nodes(branch.add(f"[bold blue]{child.name}/[/bold blue]"), child)
        else:
            branch.add(child.name)


def _plain_tree(node: FileNode, depth: int = 0) -> None:
    suffix = "/" if node.type == "directory" else ""
    print(f"{'  ' * depth}{node.name}{suffix}")
    for child in node.children or ():
        _plain_tree(child, depth + 1)


def file_tree_view(root: FileNode):
    """Display the output file tree."""
    if _json_mode:
        return
    if _plain_mode:
        _plain_tree(root)
        return
    tree = Tree(f"[bold cyan]{root.name}/[/bold cyan]")
    _add_nodes(tree, root)
    console.print(tree)


def _route_label(entry: RouteEntry) -> str:
    component = f" [cyan]{entry.component}[/cyan]" if entry.component else ""
    return f"[route.source]{entry.source_path}[/route.source] {ICONS['arrow']} [route.target]pages/{entry.target_path}[/route.target]{component}"


def _add_routes(branch: Tree, routes: list[RouteEntry]) -> None:
    for entry in routes:
        _add_routes(branch.add(_route_label(entry)), entry.nested)


def _plain_routes(routes: list[RouteEntry], depth: int = 1) -> None:
    for entry in routes:
        print(f"{'  ' * depth}{entry.source_path} {PLAIN_ICONS['arrow']} pages/{entry.target_path}  {entry.component}".rstrip())
        _plain_routes(entry.nested, depth + 1)


def route_tree_view(routes: list[RouteEntry], title: str = "routes"):
    """Display nested routes as a tree."""
    if _plain_mode:
        print(title)
        _plain_routes(routes)
        return
    tree = Tree(f"[bold cyan]{title}[/bold cyan]")
    _add_routes(tree, routes)
    console.print(tree)
