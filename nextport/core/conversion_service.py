"""Conversion service - turns a React project into a Next.js project.

The run is total: file-scoped problems become diagnostics in the
ConversionLog, and anything unexpected at the orchestrator level yields a
placeholder project instead of an exception.
"""
from __future__ import annotations

import logging
import posixpath
import re
import time
from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..analyzers.asset_analyzer import is_static_asset, is_stylesheet
from ..analyzers.classifier import PAGE_DIRECTORIES
from ..analyzers.env_analyzer import is_env_file
from ..analyzers.libraries import REPLACED_PACKAGES, is_bare_specifier, package_name
from ..analyzers.module_resolver import (
    BUNDLER_CONFIG,
    TS_CONFIG_NAMES,
    ModuleResolver,
    importers_of,
    load_json_config,
)
from ..analyzers.project_analyzer import AnalysisRun, ProjectAnalyzer, parallel_map
from ..analyzers.routing_analyzer import flatten_routes
from ..errors import FatalRunError
from ..models import (
    BINARY_PLACEHOLDER,
    BUCKET_API,
    BUCKET_COMPONENTS,
    BUCKET_CONFIG,
    BUCKET_PAGES,
    BUCKET_PUBLIC,
    BUCKET_STYLES,
    ROLE_API,
    ROLE_COMPONENT,
    ROLE_CONFIG,
    ROLE_CONTEXT,
    ROLE_HOOK,
    ROLE_LAYOUT,
    ROLE_PAGE,
    ROLE_REDUCER,
    ROLE_STORE,
    ROLE_STYLE,
    ROLE_UTIL,
    ConversionOutput,
    Diagnostic,
    RouteEntry,
    SourceFile,
)
from ..transform import TransformContext, TransformResult, run_pipeline
from ..transform.imports import SPECIFIER_SITE, relative_specifier
from . import ConversionOptions
from . import reports, scaffold
from .file_tree import iter_output_files, output_path, tree_from_output

logger = logging.getLogger("nextport.core.conversion")

BOOTSTRAP_CALL = re.compile(r"\b(?:createRoot|hydrateRoot)\s*\(|\bReactDOM\.(?:render|hydrate)\s*\(")
INDEX_NAMES = frozenset({"app", "home", "index", "main"})
LOCKFILES = frozenset({"package-lock.json", "yarn.lock", "pnpm-lock.yaml", "bun.lockb"})
HTML_DOCUMENTS = frozenset({"index.html", "public/index.html"})
ENV_LINE_KEY = re.compile(r"^(\s*(?:export\s+)?)([A-Za-z0-9_]+)(\s*=)", re.M)

ROLE_SUBFOLDERS = {
    ROLE_LAYOUT: "layouts",
    ROLE_HOOK: "hooks",
    ROLE_CONTEXT: "contexts",
    ROLE_REDUCER: "store",
    ROLE_STORE: "store",
    ROLE_UTIL: "utils",
}
# Source directory names folded into the role subfolder
SUBFOLDER_ALIASES = {
    "layouts": frozenset({"layout", "layouts"}),
    "hooks": frozenset({"hooks"}),
    "contexts": frozenset({"context", "contexts", "providers"}),
    "store": frozenset({"store", "redux", "state", "reducers", "slices", "features"}),
    "utils": frozenset({"utils", "util", "helpers", "lib", "services", "constants"}),
}
STYLE_DIRECTORIES = frozenset({"styles", "css", "style"})

PLACEHOLDER_PAGE = """\
export default function Home() {
  return (
    <main>
      <h1>Conversion failed</h1>
      <p>See README.md for the error that stopped the conversion.</p>
    </main>
  );
}
"""


# ── Path helpers ──

def normalize_path(raw: str) -> str:
    """Forward slashes, no leading ``./`` or ``/``; empty for paths escaping the root."""
    path = posixpath.normpath(raw.replace("\\", "/")).lstrip("/")
    if path in ("", ".") or path == ".." or path.startswith("../"):
        return ""
    return path


def strip_source_root(path: str) -> str:
    return path[len("src/"):] if path.startswith("src/") else path


def kebab_case(segment: str) -> str:
    if segment.startswith("["):
        return segment
    return re.sub(r"(?<=[a-z0-9])([A-Z])", r"-\1", segment).replace("_", "-").lower()


def unique_path(path: str, taken: set[str]) -> str:
    """``path``, or ``stem-N.ext`` when taken."""
    if path not in taken:
        return path
    directory, name = posixpath.split(path)
    stem, dot, ext = name.partition(".")
    counter = 2
    while True:
        candidate = posixpath.join(directory, f"{stem}-{counter}{dot}{ext}")
        if candidate not in taken:
            return candidate
        counter += 1


def page_component_name(target: str, component: str) -> str:
    words = re.findall(r"[A-Za-z0-9]+", target) or ["Index"]
    name = "".join(word[:1].upper() + word[1:] for word in words) + "Page"
    return name if name != component else "Route" + name


def normalize_input(files: Mapping[str, str]) -> tuple[list[SourceFile], list[str], list[Diagnostic]]:
    """Split the input map into text sources and binary asset paths."""
    sources: list[SourceFile] = []
    binaries: list[str] = []
    diagnostics: list[Diagnostic] = []
    seen: set[str] = set()
    for raw in sorted(files):
        path = normalize_path(raw)
        if not path:
            diagnostics.append(Diagnostic("warning", "path outside the project root; skipped", raw))
            continue
        if path in seen:
            diagnostics.append(Diagnostic("info", f"duplicate of {path}; skipped", raw))
            continue
        seen.add(path)
        content = files[raw]
        if content == BINARY_PLACEHOLDER:
            binaries.append(path)
        else:
            sources.append(SourceFile(path=path, content=content if isinstance(content, str) else str(content)))
    return sources, binaries, diagnostics


# ── Planning ──

@dataclass
class PlannedFile:
    """Where one emitted file goes and with which output role."""
    source_path: str
    bucket: str
    key: str
    role: str

    @property
    def output_path(self) -> str:
        return output_path(self.bucket, self.key)


@dataclass
class OutputPlan:
    files: dict[str, PlannedFile] = field(default_factory=dict)
    taken: set[str] = field(default_factory=set)
    dropped: dict[str, str] = field(default_factory=dict)
    app_stylesheets: list[str] = field(default_factory=list)

    def place(self, source_path: str, bucket: str, key: str, role: str) -> PlannedFile:
        wanted = output_path(bucket, key)
        final = unique_path(wanted, self.taken)
        if final != wanted:
            key = posixpath.relpath(final, posixpath.dirname(output_path(bucket, "x")) or ".")
        planned = PlannedFile(source_path, bucket, key, role)
        self.taken.add(planned.output_path)
        self.files[source_path] = planned
        return planned

    def drop(self, source_path: str, reason: str) -> None:
        self.dropped[source_path] = reason

    def location_of(self, source_path: str) -> Optional[str]:
        planned = self.files.get(source_path)
        return planned.output_path if planned else None


class ConversionService:
    """Runs one conversion. Instances hold options only; every run is fresh."""

    def __init__(self, options: Optional[ConversionOptions] = None):
        self.options = options or ConversionOptions()

    def convert(self, files: Mapping[str, str]) -> ConversionOutput:
        """Convert a ``path -> text`` map; ``"[BINARY]"`` marks opaque assets."""
        started = time.perf_counter()
        output = ConversionOutput()
        logger.info("Starting conversion of %d files", _file_count(files))

        # Step 1: Normalize input
        sources, binaries, diagnostics = normalize_input(files)
        output.log.extend(diagnostics)
        output.stats.total_files = len(sources) + len(binaries)

        # Step 2: Per-file and project analysis
        analyzer = ProjectAnalyzer(
            max_workers=self.options.max_workers,
            aliases=self.options.aliases,
            extensions=self.options.extensions,
        )
        run = analyzer.analyze(sources, binaries)
        output.analysis = run.project
        output.log.extend(run.diagnostics)

        # Step 3: Output roles and locations
        plan = self._plan(run, output)

        # Step 4: Rewrite code files
        failed = self._rewrite_code(run, plan, output, started)

        # Step 5: Route pages
        self._synthesize_route_pages(run, plan, output)

        # Step 6: Styles, config and public assets
        self._copy_resources(run, plan, output)

        # Step 7: Scaffold and reports
        self._scaffold(run, plan, output)
        self._reports(run, output)

        # Step 8: File tree and stats
        output.file_tree = tree_from_output(output, self.options.app_name)
        emitted = [path for path in plan.files if path not in failed]
        output.stats.converted_files = min(len(emitted), output.stats.total_files)
        output.stats.conversion_time_ms = int((time.perf_counter() - started) * 1000)
        output.log.add(Diagnostic(
            "info",
            f"Converted {output.stats.converted_files} of {output.stats.total_files} files "
            f"in {output.stats.conversion_time_ms} ms",
        ))
        logger.info(
            "Conversion finished: %d/%d files, %d warnings, %d errors",
            output.stats.converted_files, output.stats.total_files,
            len(output.log.warnings), len(output.log.errors),
        )
        return output

    # ── planning ──

    def _plan(self, run: AnalysisRun, output: ConversionOutput) -> OutputPlan:
        plan = OutputPlan()
        # Everything under public/ is copied as is
        analyses = {path: a for path, a in run.analyses.items() if not path.startswith("public/")}
        importers = importers_of(run.project.import_graph)
        sources = {source.path: source for source in run.sources}
        routes = flatten_routes(run.project.route_table)
        route_targets = {entry.target_path for entry in routes}

        # Bootstrap files are replaced by pages/_app
        for path in sorted(analyses):
            if BOOTSTRAP_CALL.search(sources[path].content) and not analyses[path].details.route_declarations:
                plan.drop(path, "application bootstrap replaced by pages/_app")

        roles: dict[str, str] = {}
        for path in sorted(analyses):
            if path in plan.dropped:
                continue
            roles[path] = self._output_role(path, run, importers)

        page_paths = [path for path, role in roles.items() if role == ROLE_PAGE]
        claimed_targets: set[str] = set()

        # Pages mounted on a route take the route's target path
        for entry in routes:
            if entry.target_path in claimed_targets:
                continue
            for path in page_paths:
                if path not in plan.files and analyses[path].main_export_name == entry.component and entry.component:
                    self._place_page(plan, path, entry.target_path)
                    claimed_targets.add(entry.target_path)
                    break

        for path in page_paths:
            if path in plan.files:
                continue
            reserved = route_targets | claimed_targets
            target = self._page_target(path, set())
            if target in reserved and analyses[path].details.route_declarations:
                roles[path] = ROLE_COMPONENT
                output.log.add(Diagnostic("info", f"router shell kept as a component; a route owns pages/{target}", path))
                continue
            if target in reserved:
                target = self._page_target(path, reserved)
            placed = self._place_page(plan, path, target)
            claimed_targets.add(posixpath.splitext(placed.key)[0])

        # Everything else that was analyzed
        for path in sorted(roles):
            if path in plan.files:
                continue
            role = roles[path]
            if role == ROLE_CONFIG:
                self._plan_config(plan, sources[path], output)
            elif role == ROLE_API:
                plan.place(path, BUCKET_API, self._api_key(path), ROLE_API)
            elif role == ROLE_STYLE:
                plan.place(path, BUCKET_STYLES, self._style_key(path), ROLE_STYLE)
            else:
                plan.place(path, BUCKET_COMPONENTS, self._component_key(path, role), role)

        # Files without a component walk
        buckets = run.project.asset_buckets
        app_css = set(buckets.global_css) | set(buckets.component_css) | set(buckets.library_css)
        for source in run.sources:
            if source.path in analyses or source.path in plan.files or source.path in plan.dropped:
                continue
            lower = source.path.lower()
            if lower in HTML_DOCUMENTS:
                plan.drop(source.path, "Next.js renders the HTML document")
            elif lower.startswith("public/"):
                plan.place(source.path, BUCKET_PUBLIC, self._public_key(source.path), ROLE_COMPONENT)
            elif run.reports[source.path].role == ROLE_CONFIG:
                self._plan_config(plan, source, output)
            elif is_stylesheet(source.path):
                planned = plan.place(source.path, BUCKET_STYLES, self._style_key(source.path), ROLE_STYLE)
                if source.path in app_css:
                    plan.app_stylesheets.append(planned.key)
            elif is_static_asset(source.path):
                plan.place(source.path, BUCKET_PUBLIC, self._public_key(source.path), ROLE_COMPONENT)
            else:
                plan.place(source.path, BUCKET_CONFIG, strip_source_root(source.path), ROLE_CONFIG)
        for path in run.binary_paths:
            if path.lower() in HTML_DOCUMENTS:
                plan.drop(path, "Next.js renders the HTML document")
            else:
                plan.place(path, BUCKET_PUBLIC, self._public_key(path), ROLE_COMPONENT)

        for path, reason in sorted(plan.dropped.items()):
            output.log.add(Diagnostic("info", f"not emitted: {reason}", path))
        return plan

    def _output_role(self, path: str, run: AnalysisRun, importers: Mapping[str, list[str]]) -> str:
        """``page`` > entry heuristic > routing presence > classifier role."""
        report = run.reports[path]
        if report.role in (ROLE_PAGE, ROLE_API, ROLE_STYLE, ROLE_CONFIG):
            return report.role
        if report.role == ROLE_COMPONENT and not importers.get(path) and run.project.import_graph.get(path):
            return ROLE_PAGE
        if report.analysis is not None and report.analysis.details.route_declarations:
            return ROLE_PAGE
        return report.role

    def _page_target(self, path: str, reserved: set[str]) -> str:
        parts = path.split("/")
        stem = posixpath.splitext(parts[-1])[0]
        directories = [part.lower() for part in parts[:-1]]
        nested: list[str] = []
        for index in range(len(directories) - 1, -1, -1):
            if directories[index] in PAGE_DIRECTORIES:
                nested = parts[index + 1:-1]
                break
        segments = [kebab_case(part) for part in nested]
        if stem.lower() == "index" or (not segments and stem.lower() in INDEX_NAMES):
            leaf = "index"
        else:
            leaf = kebab_case(stem)
        target = "/".join(segments + [leaf])
        if target in reserved and leaf == "index" and stem.lower() != "index":
            target = "/".join(segments + [kebab_case(stem)])
        return target

    def _place_page(self, plan: OutputPlan, path: str, target: str) -> PlannedFile:
        extension = posixpath.splitext(path)[1] or ".jsx"
        return plan.place(path, BUCKET_PAGES, target + extension, ROLE_PAGE)

    @staticmethod
    def _api_key(path: str) -> str:
        parts = path.split("/")
        lowered = [part.lower() for part in parts[:-1]]
        if "api" in lowered:
            index = len(lowered) - 1 - lowered[::-1].index("api")
            return "/".join(parts[index + 1:])
        return parts[-1]

    @staticmethod
    def _style_key(path: str) -> str:
        parts = strip_source_root(path).split("/")
        if len(parts) > 1 and parts[0].lower() in STYLE_DIRECTORIES:
            parts = parts[1:]
        return "/".join(parts)

    @staticmethod
    def _public_key(path: str) -> str:
        return path[len("public/"):] if path.startswith("public/") else strip_source_root(path)

    @staticmethod
    def _component_key(path: str, role: str) -> str:
        subfolder = ROLE_SUBFOLDERS.get(role, "")
        parts = strip_source_root(path).split("/")
        if len(parts) > 1 and parts[0].lower() == "components":
            parts = parts[1:]
        if subfolder and len(parts) > 1 and parts[0].lower() in SUBFOLDER_ALIASES[subfolder]:
            parts = parts[1:]
        return "/".join([subfolder] + parts) if subfolder else "/".join(parts)

    def _plan_config(self, plan: OutputPlan, source: SourceFile, output: ConversionOutput) -> None:
        name = source.name
        if name in LOCKFILES:
            plan.drop(source.path, "lockfile; reinstall dependencies")
        elif name == "package.json" or name in TS_CONFIG_NAMES:
            plan.drop(source.path, f"{name} is regenerated for Next.js")
        elif BUNDLER_CONFIG.search(source.path):
            plan.drop(source.path, "bundler configuration replaced by next.config.js")
        elif is_env_file(source.path):
            plan.place(source.path, BUCKET_CONFIG, name, ROLE_CONFIG)
        else:
            plan.place(source.path, BUCKET_CONFIG, strip_source_root(source.path), ROLE_CONFIG)

    # ── rewriting ──

    def _contexts(self, run: AnalysisRun, plan: OutputPlan) -> dict[str, TransformContext]:
        resolver = ModuleResolver(run.all_paths, run.project.aliases, self.options.extensions)
        stylesheet_sources = {
            path for path, planned in plan.files.items()
            if planned.bucket == BUCKET_STYLES and planned.key in plan.app_stylesheets
        }
        env_renames = {
            name: info.target_name
            for name, info in run.project.env_variables.items()
            if info.target_name != name
        }
        contexts: dict[str, TransformContext] = {}
        for path, analysis in sorted(run.analyses.items()):
            planned = plan.files.get(path)
            if planned is None or planned.bucket == BUCKET_PUBLIC:
                continue
            targets: dict[str, str] = {}
            dropped: set[str] = set()
            for specifier in analysis.imports:
                resolved = resolver.resolve(path, specifier)
                if resolved is None:
                    continue
                if resolved in stylesheet_sources:
                    dropped.add(specifier)
                    continue
                location = plan.location_of(resolved)
                if location is not None:
                    targets[specifier] = relative_specifier(planned.output_path, location, specifier)
            contexts[path] = TransformContext(
                path=path,
                output_path=planned.output_path,
                role=planned.role,
                strategy=analysis.recommended_rendering_strategy,
                import_targets=targets,
                dropped_imports=frozenset(dropped),
                env_renames=env_renames,
                client_directive=self.options.client_directive,
                revalidate_seconds=self.options.isr_revalidate_seconds,
            )
        return contexts

    def _rewrite_code(
        self, run: AnalysisRun, plan: OutputPlan, output: ConversionOutput, started: float,
    ) -> set[str]:
        """Transform every planned code file; returns the paths that were not converted."""
        sources = {source.path: source for source in run.sources}
        analyses = run.analyses
        contexts = self._contexts(run, plan)
        budget = self.options.time_budget_ms
        deadline = started + budget / 1000 if budget > 0 else None

        def rewrite(path: str) -> Optional[TransformResult]:
            if deadline is not None and time.perf_counter() > deadline:
                return None
            return run_pipeline(sources[path].content, analyses[path], contexts[path])

        paths = sorted(contexts)
        failed: set[str] = {
            path for path, report in run.reports.items()
            if any(d.level == "warning" for d in report.diagnostics)
        }
        for path, result in zip(paths, parallel_map(rewrite, paths, self.options.max_workers)):
            planned = plan.files[path]
            if result is None:
                output.bucket(planned.bucket)[planned.key] = sources[path].content
                output.log.add(Diagnostic("warning", "time budget elapsed; emitted without rewriting", path))
                failed.add(path)
                continue
            output.bucket(planned.bucket)[planned.key] = result.text
            output.log.extend(result.diagnostics)
            if result.failed:
                failed.add(path)
        return failed

    # ── route pages ──

    def _synthesize_route_pages(self, run: AnalysisRun, plan: OutputPlan, output: ConversionOutput) -> None:
        analyses = run.analyses
        by_component: dict[str, str] = {}
        for path in sorted(analyses):
            name = analyses[path].main_export_name
            planned = plan.files.get(path)
            if name and planned is not None and planned.bucket != BUCKET_PAGES:
                by_component.setdefault(name, path)
        page_targets = {posixpath.splitext(key)[0] for key in output.pages}

        for entry in flatten_routes(run.project.route_table):
            if entry.target_path in page_targets or not entry.component:
                continue
            if not re.match(r"^[A-Za-z_$][\w$]*$", entry.component):
                output.log.add(Diagnostic(
                    "info", f"route {entry.source_path} renders {entry.component!r}; no page generated",
                    entry.declared_in,
                ))
                continue
            self._add_route_page(entry, by_component.get(entry.component), plan, output)
            page_targets.add(entry.target_path)

        if "index" not in page_targets and "App" in by_component:
            index = RouteEntry(source_path="/", target_path="index", component="App")
            self._add_route_page(index, by_component["App"], plan, output)
            output.log.add(Diagnostic("info", "no route claims '/'; pages/index renders App", by_component["App"]))

    def _add_route_page(
        self, entry: RouteEntry, component_path: Optional[str], plan: OutputPlan, output: ConversionOutput,
    ) -> None:
        if component_path is not None:
            location = plan.files[component_path].output_path
            extension = ".tsx" if location.endswith(".tsx") else ".jsx"
        else:
            location = f"components/{entry.component}"
            extension = ".jsx"
            output.log.add(Diagnostic(
                "info", f"component {entry.component} for route {entry.source_path} not found; "
                f"pages/{entry.target_path}{extension} imports {location}",
                entry.declared_in,
            ))
        page_path = unique_path(output_path(BUCKET_PAGES, entry.target_path + extension), plan.taken)
        plan.taken.add(page_path)
        specifier = relative_specifier(page_path, location, entry.component)
        name = page_component_name(entry.target_path, entry.component)

        lines = []
        if entry.params:
            lines.append("import { useRouter } from 'next/router';")
        lines.append(f"import {entry.component} from '{specifier}';")
        lines.extend(["", f"export default function {name}() {{"])
        if entry.params:
            lines.append("  const router = useRouter();")
            lines.append(f"  const {{ {', '.join(entry.params)} }} = router.query;")
            lines.append("")
            props = " ".join(f"{param}={{{param}}}" for param in entry.params)
            lines.append(f"  return <{entry.component} {props} />;")
        else:
            lines.append(f"  return <{entry.component} />;")
        lines.append("}")
        output.pages[posixpath.relpath(page_path, "pages")] = "\n".join(lines) + "\n"
        logger.debug("Route page %s -> %s", entry.source_path, page_path)

    # ── resources ──

    def _copy_resources(self, run: AnalysisRun, plan: OutputPlan, output: ConversionOutput) -> None:
        """Emit every planned file that was not rewritten as code."""
        sources = {source.path: source for source in run.sources}
        renames = {
            name: info.target_name
            for name, info in run.project.env_variables.items()
            if info.target_name != name
        }
        for path, planned in sorted(plan.files.items()):
            if path in run.analyses and planned.bucket != BUCKET_PUBLIC:
                continue
            bucket = output.bucket(planned.bucket)
            source = sources.get(path)
            if source is None:
                bucket[planned.key] = BINARY_PLACEHOLDER
                output.asset_sources[planned.output_path] = path
            elif is_env_file(path) and renames:
                bucket[planned.key] = ENV_LINE_KEY.sub(
                    lambda m: m.group(1) + renames.get(m.group(2), m.group(2)) + m.group(3), source.content,
                )
            else:
                bucket[planned.key] = source.content

    # ── scaffold ──

    def _providers(self, run: AnalysisRun, plan: OutputPlan) -> list[scaffold.Provider]:
        app_path = output_path(BUCKET_PAGES, "_app.jsx")
        providers: list[scaffold.Provider] = []
        libraries = run.project.library_usage

        def specifier(path: str) -> str:
            location = plan.files[path].output_path
            return relative_specifier(app_path, location, posixpath.splitext(location)[0])

        if "react-redux" in libraries:
            for path, analysis in sorted(run.analyses.items()):
                planned = plan.files.get(path)
                if planned is None or planned.role != ROLE_STORE:
                    continue
                if "store" in analysis.exports:
                    binding = "{ store }"
                elif "default" in analysis.exports:
                    binding = "store"
                else:
                    continue
                providers.append(scaffold.Provider(
                    imports=("import { Provider } from 'react-redux';", f"import {binding} from '{specifier(path)}';"),
                    open_tag="<Provider store={store}>",
                    close_tag="</Provider>",
                ))
                break

        for package in ("@tanstack/react-query", "react-query"):
            if package in libraries:
                providers.append(scaffold.Provider(
                    imports=(f"import {{ QueryClient, QueryClientProvider }} from '{package}';",),
                    open_tag="<QueryClientProvider client={queryClient}>",
                    close_tag="</QueryClientProvider>",
                    setup=("const queryClient = new QueryClient();",),
                ))
                break

        if "recoil" in libraries:
            providers.append(scaffold.Provider(
                imports=("import { RecoilRoot } from 'recoil';",),
                open_tag="<RecoilRoot>",
                close_tag="</RecoilRoot>",
            ))

        for path, analysis in sorted(run.analyses.items()):
            planned = plan.files.get(path)
            if planned is None or planned.role != ROLE_CONTEXT:
                continue
            named = [name for name in analysis.exports if name.endswith("Provider")]
            if named:
                name = named[0]
                line = f"import {{ {name} }} from '{specifier(path)}';"
            elif (analysis.main_export_name or "").endswith("Provider"):
                name = analysis.main_export_name
                line = f"import {name} from '{specifier(path)}';"
            else:
                continue
            providers.append(scaffold.Provider(imports=(line,), open_tag=f"<{name}>", close_tag=f"</{name}>"))
        return providers

    def _scaffold(self, run: AnalysisRun, plan: OutputPlan, output: ConversionOutput) -> None:
        code_paths = [path for path in run.analyses if path in plan.files]
        typescript = any(path.endswith((".ts", ".tsx")) for path in code_paths)
        manifest = self._top_level_json(run, "package.json")

        if "globals.css" not in output.styles:
            output.styles["globals.css"] = scaffold.globals_css()
        stylesheets = ["globals.css"] + sorted(key for key in plan.app_stylesheets if key != "globals.css")
        app_key = "_app.tsx" if typescript else "_app.jsx"
        if not any(posixpath.splitext(key)[0] == "_app" for key in output.pages):
            output.pages[app_key] = scaffold.app_component(
                [f"../styles/{key}" for key in stylesheets],
                self._providers(run, plan),
                typescript=typescript,
            )

        image_refs = [
            hint.reference for analysis in run.analyses.values() for hint in analysis.assets if hint.kind == "image"
        ]
        output.config.setdefault("next.config.js", scaffold.next_config(scaffold.remote_image_hosts(image_refs)))
        output.config["package.json"] = scaffold.migrate_package_json(
            manifest, self.options.app_name, typescript, keep=self._retained_packages(output),
        )
        if typescript:
            output.config["tsconfig.json"] = scaffold.tsconfig_json(self._top_level_json(run, "tsconfig.json"))
        output.config.setdefault(".gitignore", scaffold.gitignore())

    @staticmethod
    def _retained_packages(output: ConversionOutput) -> set[str]:
        """Packages Next.js replaces that emitted code still imports."""
        retained: set[str] = set()
        for bucket in (BUCKET_PAGES, BUCKET_COMPONENTS, BUCKET_API):
            for key, text in sorted(output.bucket(bucket).items()):
                packages = {
                    package_name(match.group(3)) for match in SPECIFIER_SITE.finditer(text)
                    if is_bare_specifier(match.group(3))
                } & REPLACED_PACKAGES
                for package in sorted(packages):
                    output.log.add(Diagnostic(
                        "warning", f"still imports {package}; the dependency is kept", output_path(bucket, key),
                    ))
                retained |= packages
        return retained

    @staticmethod
    def _top_level_json(run: AnalysisRun, name: str) -> Optional[dict]:
        candidates = sorted(
            (source for source in run.sources if source.name == name),
            key=lambda source: (source.path.count("/"), source.path),
        )
        return load_json_config(candidates[0]) if candidates else None

    def _reports(self, run: AnalysisRun, output: ConversionOutput) -> None:
        output.config[reports.ANALYSIS_REPORT] = reports.analysis_report(
            run.project, run.roles, run.analyses, title=self.options.app_name,
        )
        output.config[reports.STATE_GUIDE] = reports.state_migration_guide(run.project.state_report)
        if run.project.env_variables:
            output.config[reports.ENV_EXAMPLE] = reports.env_local_example(run.project.env_variables)


def _file_count(files) -> int:
    return len(files) if isinstance(files, Mapping) else 0


def placeholder_output(files: Mapping[str, str], error: FatalRunError, started: float, app_name: str) -> ConversionOutput:
    """Minimal project returned when the run itself failed."""
    output = ConversionOutput()
    output.pages["index.jsx"] = PLACEHOLDER_PAGE
    output.styles["globals.css"] = scaffold.globals_css()
    output.config["README.md"] = (
        "# Conversion failed\n\n"
        "The conversion stopped before any output was produced:\n\n"
        f"```\n{error}\n```\n"
    )
    output.log.add(Diagnostic("error", str(error)))
    output.stats.total_files = _file_count(files)
    output.stats.conversion_time_ms = int((time.perf_counter() - started) * 1000)
    output.file_tree = tree_from_output(output, app_name)
    return output


def convert_project(files: Mapping[str, str], options: Optional[ConversionOptions] = None) -> ConversionOutput:
    """Convert a React project given as ``path -> text``. Never raises."""
    options = options or ConversionOptions()
    started = time.perf_counter()
    try:
        return ConversionService(options).convert(files)
    except Exception as e:
        error = FatalRunError(f"Conversion failed: {e}", context={"files": _file_count(files)})
        logger.exception("Conversion failed")
        return placeholder_output(files, error, started, options.app_name)


def output_files(output: ConversionOutput) -> dict[str, str]:
    """Project-relative path -> content for every emitted file."""
    return dict(iter_output_files(output))
