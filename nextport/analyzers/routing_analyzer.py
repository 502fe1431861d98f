"""Route table construction: react-router paths to file-based page paths."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping

from ..models import AnalysisResult, Diagnostic, RouteDeclaration, RouteEntry

logger = logging.getLogger(__name__)

CATCH_ALL_SEGMENT = "[...catchAll]"
CATCH_ALL_PARAM = "catchAll"


def convert_path(source_path: str) -> str:
    """Convert a react-router path to a pages-directory path (no extension).

    ``/`` becomes ``index``, ``:name`` segments become ``[name]`` and a
    trailing ``*`` becomes ``[...catchAll]``. Other segments are kept.
    """
    segments = [segment for segment in source_path.strip().split("/") if segment]
    if not segments:
        return "index"
    converted = []
    for position, segment in enumerate(segments):
        if segment == "*" and position == len(segments) - 1:
            converted.append(CATCH_ALL_SEGMENT)
        elif segment.startswith(":") and len(segment) > 1:
            converted.append(f"[{segment[1:].rstrip('?')}]")
        else:
            converted.append(segment)
    return "/".join(converted)


def extract_params(source_path: str) -> list[str]:
    """Every ``:name`` segment, plus ``catchAll`` for a trailing wildcard."""
    segments = [segment for segment in source_path.strip().split("/") if segment]
    params = [segment[1:].rstrip("?") for segment in segments if segment.startswith(":") and len(segment) > 1]
    if segments and segments[-1] == "*":
        params.append(CATCH_ALL_PARAM)
    return params


def make_entry(declaration: RouteDeclaration) -> RouteEntry:
    return RouteEntry(
        source_path=declaration.path,
        target_path=convert_path(declaration.path),
        params=extract_params(declaration.path),
        component=declaration.component,
        declared_in=declaration.source_file,
    )


def nest_routes(entries: list[RouteEntry]) -> list[RouteEntry]:
    """Attach each entry to the longest already-resolved proper prefix.

    Entries are resolved in ascending path length (stable), so a parent is
    always resolved before its children. Returns the top-level entries.
    """
    resolved: list[RouteEntry] = []
    roots: list[RouteEntry] = []
    for entry in sorted(entries, key=lambda e: len(e.source_path)):
        parent = None
        for candidate in resolved:
            prefix = candidate.source_path.rstrip("/")
            if prefix and entry.source_path.startswith(prefix + "/") and entry.source_path != candidate.source_path:
                if parent is None or len(candidate.source_path) > len(parent.source_path):
                    parent = candidate
        if parent is None:
            roots.append(entry)
        else:
            entry.parent_path = parent.source_path
            parent.nested.append(entry)
        resolved.append(entry)
    return roots


def flatten_routes(routes: Iterable[RouteEntry]) -> list[RouteEntry]:
    """Depth-first list of every entry in a nested route table."""
    flat: list[RouteEntry] = []
    for entry in routes:
        flat.append(entry)
        flat.extend(flatten_routes(entry.nested))
    return flat


@dataclass
class RoutingReport:
    routes: list[RouteEntry] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


def build_route_table(analyses: Mapping[str, AnalysisResult]) -> RoutingReport:
    """Normalize the route declarations of every file into a nested table.

    Files are read in sorted path order; a source path declared twice keeps
    its first declaration so target paths stay unique.
    """
    report = RoutingReport()
    entries: list[RouteEntry] = []
    seen_sources: dict[str, str] = {}
    seen_targets: dict[str, str] = {}
    for path in sorted(analyses):
        for declaration in analyses[path].details.route_declarations:
            entry = make_entry(declaration)
            if entry.source_path in seen_sources or entry.target_path in seen_targets:
                first = seen_sources.get(entry.source_path) or seen_targets[entry.target_path]
                report.diagnostics.append(Diagnostic(
                    "info", f"route {entry.source_path} already declared in {first}; ignored", path,
                ))
                continue
            seen_sources[entry.source_path] = path
            seen_targets[entry.target_path] = path
            entries.append(entry)
            logger.debug("Route %s -> %s (%s)", entry.source_path, entry.target_path, entry.component)
    report.routes = nest_routes(entries)
    return report
