"""Markdown reports and the .env.local.example written next to the converted project."""
from __future__ import annotations

from collections import Counter
from typing import Mapping

from ..analyzers.routing_analyzer import flatten_routes
from ..analyzers.state_analyzer import PATTERN_LABELS, STATE_PATTERNS
from ..models import AnalysisResult, EnvVarInfo, ProjectAnalysis, RouteEntry, StateReport

ANALYSIS_REPORT = "analysis-report.md"
STATE_GUIDE = "state-migration-guide.md"
ENV_EXAMPLE = ".env.local.example"


def _route_lines(routes: list[RouteEntry], depth: int = 0) -> list[str]:
    lines = []
    for entry in routes:
        params = f" (params: {', '.join(entry.params)})" if entry.params else ""
        component = f" renders `{entry.component}`" if entry.component else ""
        lines.append(f"{'  ' * depth}- `{entry.source_path}` -> `pages/{entry.target_path}`{component}{params}")
        lines.extend(_route_lines(entry.nested, depth + 1))
    return lines


def analysis_report(
    project: ProjectAnalysis,
    roles: Mapping[str, str],
    analyses: Mapping[str, AnalysisResult],
    title: str = "next-app",
) -> str:
    """Project-wide summary: roles, routes, state, libraries, issues and import problems."""
    role_counts = Counter(roles.values())
    strategies = Counter(
        a.recommended_rendering_strategy for a in analyses.values() if a.recommended_rendering_strategy
    )
    lines = [
        f"# {title}: Conversion Analysis",
        "",
        f"**Files analyzed:** {len(roles)}  ",
        f"**Routes:** {len(flatten_routes(project.route_table))}  ",
        f"**State management:** {PATTERN_LABELS.get(project.dominant_state_pattern, project.dominant_state_pattern)}  ",
    ]
    if project.react_router_version:
        lines.append(f"**react-router:** {project.react_router_version}  ")
    lines.extend(["", "## File Roles", ""])
    for role, count in sorted(role_counts.items()):
        lines.append(f"- **{role}**: {count}")

    if strategies:
        lines.extend(["", "## Rendering Strategies", ""])
        for strategy, count in sorted(strategies.items()):
            lines.append(f"- **{strategy}**: {count}")

    lines.extend(["", "## Routes", ""])
    lines.extend(_route_lines(project.route_table) or ["No react-router routes found."])

    if project.library_usage:
        lines.extend(["", "## Libraries", "", "| Package | Version | Category | Files | Client only |", "|---|---|---|---|---|"])
        for usage in project.library_usage.values():
            lines.append(
                f"| {usage.name} | {usage.version or '-'} | {usage.category} | "
                f"{len(usage.files)} | {'yes' if usage.requires_client_directive else 'no'} |"
            )

    issues = [
        (path, issue)
        for path in sorted(analyses)
        for issue in analyses[path].security + analyses[path].performance
    ]
    if issues:
        lines.extend(["", "## Issues", ""])
        for path, issue in issues:
            location = issue.location or path
            lines.append(f"- **{issue.severity}** `{issue.kind}` {location}: {issue.message}")
            if issue.suggestion:
                lines.append(f"  - {issue.suggestion}")

    if project.unresolved_imports:
        lines.extend(["", "## Unresolved Imports", ""])
        for path, specifiers in sorted(project.unresolved_imports.items()):
            lines.append(f"- `{path}`: {', '.join(f'`{s}`' for s in specifiers)}")

    if project.pairwise_cycles:
        lines.extend(["", "## Circular Imports", ""])
        for first, second in project.pairwise_cycles:
            lines.append(f"- `{first}` <-> `{second}`")

    return "\n".join(lines) + "\n"


def state_migration_guide(report: StateReport) -> str:
    lines = [
        "# State Management Migration Guide",
        "",
        f"**Dominant pattern:** {PATTERN_LABELS.get(report.dominant, report.dominant)}",
        "",
        "## Usage",
        "",
        "| Pattern | Files |",
        "|---|---|",
    ]
    for pattern in STATE_PATTERNS:
        lines.append(f"| {PATTERN_LABELS[pattern]} | {report.counts.get(pattern, 0)} |")

    lines.extend(["", "## Recommendations", ""])
    lines.extend(f"- {item}" for item in report.recommendations)

    if report.files_by_pattern:
        lines.extend(["", "## Files by Pattern", ""])
        for pattern in STATE_PATTERNS:
            files = report.files_by_pattern.get(pattern)
            if not files:
                continue
            lines.append(f"### {PATTERN_LABELS[pattern]}")
            lines.append("")
            lines.extend(f"- `{path}`" for path in files)
            lines.append("")
    return "\n".join(lines).rstrip("\n") + "\n"


def env_local_example(variables: Mapping[str, EnvVarInfo]) -> str:
    """One blank assignment per variable, under its Next.js name."""
    lines = ["# Copy to .env.local and fill in the values"]
    public = sorted({info.target_name for info in variables.values() if info.is_public})
    server = sorted({info.target_name for info in variables.values() if not info.is_public})
    if public:
        lines.extend(["", "# Exposed to the browser"])
        lines.extend(f"{name}=" for name in public)
    if server:
        lines.extend(["", "# Server only"])
        lines.extend(f"{name}=" for name in server)
    return "\n".join(lines) + "\n"
