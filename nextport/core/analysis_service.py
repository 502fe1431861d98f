"""Analysis-only runs: the project facts without rewriting anything.

Backs ``nextport analyze`` and ``nextport routes``, and serializes the
result for JSON and YAML output.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Mapping, Optional

import yaml

from ..analyzers.project_analyzer import AnalysisRun, ProjectAnalyzer
from ..analyzers.routing_analyzer import flatten_routes
from . import ConversionOptions
from .conversion_service import normalize_input

logger = logging.getLogger("nextport.core.analysis")


def analyze_files(files: Mapping[str, str], options: Optional[ConversionOptions] = None) -> AnalysisRun:
    """Run the classifier and every analyzer over a ``path -> text`` map."""
    options = options or ConversionOptions()
    sources, binaries, diagnostics = normalize_input(files)
    analyzer = ProjectAnalyzer(
        max_workers=options.max_workers,
        aliases=options.aliases,
        extensions=options.extensions,
    )
    run = analyzer.analyze(sources, binaries)
    run.diagnostics[:0] = diagnostics
    return run


def analysis_summary(run: AnalysisRun) -> dict:
    """Plain-data view of an analysis run (safe for JSON and YAML)."""
    project = run.project
    analyses = run.analyses
    strategies = Counter(
        a.recommended_rendering_strategy for a in analyses.values() if a.recommended_rendering_strategy
    )
    return {
        "files": {
            path: {
                "role": report.role,
                "rule": report.rule,
                **({
                    "clientOnly": report.analysis.is_client_only,
                    "dataFetching": report.analysis.has_data_fetching,
                    "routing": report.analysis.has_routing,
                    "mainExport": report.analysis.main_export_name,
                    "strategy": report.analysis.recommended_rendering_strategy,
                } if report.analysis is not None else {}),
            }
            for path, report in sorted(run.reports.items())
        },
        "roles": dict(sorted(Counter(run.roles.values()).items())),
        "strategies": dict(sorted(strategies.items())),
        "routes": [entry.to_dict() for entry in project.route_table],
        "flatRoutes": len(flatten_routes(project.route_table)),
        "reactRouterVersion": project.react_router_version or None,
        "statePattern": project.dominant_state_pattern,
        "stateCounts": dict(project.state_report.counts),
        "libraries": {
            name: {
                "version": usage.version,
                "category": usage.category,
                "files": list(usage.files),
                "clientOnly": usage.requires_client_directive,
            }
            for name, usage in sorted(project.library_usage.items())
        },
        "envVariables": {
            name: {"target": info.target_name, "public": info.is_public}
            for name, info in sorted(project.env_variables.items())
        },
        "aliases": dict(project.aliases),
        "unresolvedImports": {path: list(specs) for path, specs in sorted(project.unresolved_imports.items())},
        "cycles": [list(pair) for pair in project.pairwise_cycles],
        "diagnostics": [
            {"level": d.level, "message": d.message, "path": d.path} for d in run.diagnostics
        ],
    }


def summary_to_yaml(summary: dict) -> str:
    return yaml.safe_dump(summary, default_flow_style=False, sort_keys=False, allow_unicode=True)
