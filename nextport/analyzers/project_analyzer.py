"""Project analyzer orchestrator.

Classifies and analyzes every file (optionally on a thread pool), then runs
the project-level analyzers over the merged per-file facts: import graph,
library usage, route table, state pattern, environment variables and
static assets. Per-file work is isolated; the project stage only starts
once every file has been analyzed.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Callable, Iterable, Mapping, Optional, Sequence, TypeVar

from ..models import AnalysisResult, Diagnostic, ProjectAnalysis, SourceFile
from .asset_analyzer import analyze_assets
from .classifier import classify_with_rule
from .component_analyzer import analyze_component
from .env_analyzer import analyze_env
from .module_resolver import (
    DEFAULT_EXTENSIONS,
    ModuleResolver,
    build_import_graph,
    collect_library_usage,
    extract_aliases,
    find_pairwise_cycles,
    read_manifest_versions,
)
from .parser import is_code_file
from .rendering import recommend_strategy
from .routing_analyzer import build_route_table, flatten_routes
from .state_analyzer import analyze_state

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def parallel_map(func: Callable[[T], R], items: Sequence[T], max_workers: int = 1) -> list[R]:
    """Apply ``func`` to every item, results in input order.

    Runs inline for a single worker; otherwise on a thread pool.
    """
    if max_workers <= 1 or len(items) <= 1:
        return [func(item) for item in items]
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(func, items))


@dataclass
class FileReport:
    """Per-file outcome of the classify + analyze stage."""
    path: str
    role: str
    rule: str
    analysis: Optional[AnalysisResult] = None
    diagnostics: tuple[Diagnostic, ...] = ()


@dataclass
class AnalysisRun:
    """Everything one analysis pass produced, keyed by project path."""
    sources: list[SourceFile] = field(default_factory=list)
    binary_paths: list[str] = field(default_factory=list)
    reports: dict[str, FileReport] = field(default_factory=dict)
    project: ProjectAnalysis = field(default_factory=ProjectAnalysis)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def analyses(self) -> dict[str, AnalysisResult]:
        return {path: r.analysis for path, r in self.reports.items() if r.analysis is not None}

    @property
    def roles(self) -> dict[str, str]:
        return {path: r.role for path, r in self.reports.items()}

    @property
    def all_paths(self) -> list[str]:
        return sorted({s.path for s in self.sources} | set(self.binary_paths))


def analyze_file(source: SourceFile) -> FileReport:
    """Classify one file and, for code files, run the component analyzer."""
    role, rule = classify_with_rule(source)
    if not is_code_file(source.path):
        logger.debug("Classified %s as %s (%s)", source.path, role, rule)
        return FileReport(path=source.path, role=role, rule=rule)
    analysis, diagnostics = analyze_component(source, role)
    logger.debug("Analyzed %s as %s (%s)", source.path, role, rule)
    return FileReport(
        path=source.path, role=role, rule=rule, analysis=analysis, diagnostics=tuple(diagnostics),
    )


class ProjectAnalyzer:
    """Runs the per-file stages and the project-level analyzers."""

    def __init__(
        self,
        max_workers: int = 1,
        aliases: Optional[Mapping[str, str]] = None,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ):
        self.max_workers = max(1, int(max_workers))
        self.aliases = dict(aliases or {})
        self.extensions = tuple(extensions)

    def analyze(self, sources: Iterable[SourceFile], binary_paths: Iterable[str] = ()) -> AnalysisRun:
        """Analyze a normalized file set and return an AnalysisRun.

        Args:
            sources: Text files of the project.
            binary_paths: Paths of opaque assets (no content is inspected).

        Returns:
            An AnalysisRun whose tables and diagnostics are in sorted path order.
        """
        run = AnalysisRun(
            sources=sorted(sources, key=lambda f: f.path),
            binary_paths=sorted(set(binary_paths)),
        )
        logger.info("Analyzing %d files (%d binary)", len(run.sources), len(run.binary_paths))

        # Step 1: Classify and analyze each file
        for report in parallel_map(analyze_file, run.sources, self.max_workers):
            run.reports[report.path] = report
            run.diagnostics.extend(report.diagnostics)
        analyses = run.analyses

        # Step 2: Alias table
        aliases = extract_aliases(run.sources)
        aliases.update(self.aliases)
        run.project.aliases = dict(sorted(aliases.items()))
        resolver = ModuleResolver(run.all_paths, aliases, self.extensions)

        # Step 3: Import graph and pairwise cycles
        graph, unresolved, warnings = build_import_graph(run.sources, analyses, resolver)
        run.project.import_graph = graph
        run.project.unresolved_imports = unresolved
        run.diagnostics.extend(Diagnostic("info", str(w), w.path) for w in warnings)
        run.project.pairwise_cycles = find_pairwise_cycles(graph)
        for first, second in run.project.pairwise_cycles:
            run.diagnostics.append(Diagnostic("warning", f"circular import with {second}", first))

        # Step 4: Library usage
        versions = read_manifest_versions(run.sources)
        run.project.library_usage = collect_library_usage(analyses, versions, resolver)
        run.project.react_router_version = versions.get("react-router-dom") or versions.get("react-router", "")

        # Step 5: Route table
        routing = build_route_table(analyses)
        run.project.route_table = routing.routes
        run.diagnostics.extend(routing.diagnostics)
        self._refine_strategies(run)

        # Step 6: State management
        run.project.state_report = analyze_state(analyses)
        run.project.dominant_state_pattern = run.project.state_report.dominant

        # Step 7: Environment variables and static assets
        run.project.env_variables = analyze_env(run.sources, analyses)
        run.project.asset_buckets = analyze_assets(run.sources, run.binary_paths, analyses)

        logger.info(
            "Analysis done: %d routes, state pattern %s, %d libraries",
            len(flatten_routes(run.project.route_table)),
            run.project.dominant_state_pattern,
            len(run.project.library_usage),
        )
        return run

    def _refine_strategies(self, run: AnalysisRun) -> None:
        """Re-evaluate rendering for components mounted on a parameterized route."""
        params_by_component: dict[str, list[str]] = {}
        for entry in flatten_routes(run.project.route_table):
            if entry.component and entry.params:
                params_by_component.setdefault(entry.component, []).extend(entry.params)
        if not params_by_component:
            return
        for path, analysis in sorted(run.analyses.items()):
            params = params_by_component.get(analysis.main_export_name or "")
            if params:
                analysis.recommended_rendering_strategy = recommend_strategy(analysis, path, params)
