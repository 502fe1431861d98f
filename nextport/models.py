"""Data models shared by the analyzers, the transformer and the orchestrator."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

# ── Vocabulary ──

ROLE_API = "api"
ROLE_CONFIG = "config"
ROLE_STYLE = "style"
ROLE_PAGE = "page"
ROLE_LAYOUT = "layout"
ROLE_HOOK = "hook"
ROLE_CONTEXT = "context"
ROLE_REDUCER = "reducer"
ROLE_STORE = "store"
ROLE_UTIL = "util"
ROLE_COMPONENT = "component"

ROLES = (
    ROLE_API, ROLE_CONFIG, ROLE_STYLE, ROLE_PAGE, ROLE_LAYOUT, ROLE_HOOK,
    ROLE_CONTEXT, ROLE_REDUCER, ROLE_STORE, ROLE_UTIL, ROLE_COMPONENT,
)

CSR = "CSR"
SSR = "SSR"
SSG = "SSG"
ISR = "ISR"
RENDERING_STRATEGIES = (CSR, SSR, SSG, ISR)

# Output buckets, in file-tree order
BUCKET_PAGES = "pages"
BUCKET_COMPONENTS = "components"
BUCKET_API = "api"
BUCKET_STYLES = "styles"
BUCKET_CONFIG = "config"
BUCKET_PUBLIC = "public_assets"

BINARY_PLACEHOLDER = "[BINARY]"


# ── Input ──

@dataclass(frozen=True)
class SourceFile:
    """One admitted input file."""
    path: str
    content: str

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]

    @property
    def extension(self) -> str:
        name = self.name
        return name[name.rfind("."):].lower() if "." in name else ""


# ── Per-file analysis ──

@dataclass
class Issue:
    """A security or performance finding attached to one file."""
    kind: str
    message: str
    severity: str = "low"  # low | medium | high
    location: str = ""
    suggestion: str = ""


@dataclass
class AssetHint:
    """A reference from code to an image, script, font or stylesheet."""
    kind: str  # image | script | font | stylesheet
    reference: str
    line: int = 0


@dataclass
class RouteDeclaration:
    """A route as written in the source, with its path already made absolute."""
    path: str
    component: str = ""
    source_file: str = ""


@dataclass
class ComponentDetails:
    """Supplementary facts gathered during the component walk."""
    hooks: list[str] = field(default_factory=list)
    calls: list[str] = field(default_factory=list)
    browser_apis: list[str] = field(default_factory=list)
    event_handlers: list[str] = field(default_factory=list)
    library_categories: list[str] = field(default_factory=list)
    jsx_elements: list[str] = field(default_factory=list)
    env_vars: list[str] = field(default_factory=list)
    route_declarations: list[RouteDeclaration] = field(default_factory=list)
    component_kind: str = "function"  # function | class | hoc | none
    uses_store: bool = False
    uses_time_sensitive_call: bool = False
    has_pagination_hint: bool = False
    has_data_loader: bool = False
    has_default_export: bool = False
    has_seo_markup: bool = False
    parse_recovered: bool = False


@dataclass
class AnalysisResult:
    """Per-file fact sheet.

    The first block is the required core. ``security``, ``performance``,
    ``assets`` and ``recommended_rendering_strategy`` are the optional
    extension groups; ``details`` holds the raw facts they were derived from.
    """
    role: str = ROLE_COMPONENT
    is_client_only: bool = False
    has_data_fetching: bool = False
    has_routing: bool = False
    uses_state_binding: bool = False
    uses_shared_context: bool = False
    main_export_name: Optional[str] = None
    imports: list[str] = field(default_factory=list)
    exports: list[str] = field(default_factory=list)

    security: list[Issue] = field(default_factory=list)
    performance: list[Issue] = field(default_factory=list)
    assets: list[AssetHint] = field(default_factory=list)
    recommended_rendering_strategy: Optional[str] = None
    details: ComponentDetails = field(default_factory=ComponentDetails)

    @classmethod
    def fallback(cls, imports: Optional[list[str]] = None) -> AnalysisResult:
        """Minimal result used when analysis of a file failed."""
        return cls(role=ROLE_COMPONENT, imports=list(imports or []))


# ── Project-level tables ──

@dataclass
class RouteEntry:
    """Normalized route: react-router path and its file-based target path."""
    source_path: str
    target_path: str
    params: list[str] = field(default_factory=list)
    component: str = ""
    declared_in: str = ""
    parent_path: Optional[str] = None
    nested: list[RouteEntry] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {
            "sourcePath": self.source_path,
            "targetPath": self.target_path,
            "params": list(self.params),
            "component": self.component,
            "declaredIn": self.declared_in,
        }
        if self.parent_path is not None:
            data["parentPath"] = self.parent_path
        if self.nested:
            data["nested"] = [child.to_dict() for child in self.nested]
        return data


@dataclass
class LibraryUsage:
    """How one third-party package is used across the project."""
    name: str
    version: str = ""
    category: str = "other"
    usage_count: int = 0
    files: list[str] = field(default_factory=list)
    requires_client_directive: bool = False


@dataclass
class EnvVarInfo:
    """An environment variable defined in a .env file or read from code."""
    name: str
    target_name: str
    is_public: bool = False
    defined_in: list[str] = field(default_factory=list)
    used_in: list[str] = field(default_factory=list)
    has_value: bool = False


@dataclass
class AssetBuckets:
    """Static assets and stylesheets grouped by how they are migrated."""
    public_assets: list[str] = field(default_factory=list)
    images: list[str] = field(default_factory=list)
    fonts: list[str] = field(default_factory=list)
    global_css: list[str] = field(default_factory=list)
    css_modules: list[str] = field(default_factory=list)
    component_css: list[str] = field(default_factory=list)
    library_css: list[str] = field(default_factory=list)


@dataclass
class StateReport:
    """Per-category file tallies and the resulting recommendation."""
    counts: dict[str, int] = field(default_factory=dict)
    files_by_pattern: dict[str, list[str]] = field(default_factory=dict)
    dominant: str = "none"
    recommendations: list[str] = field(default_factory=list)


@dataclass
class ProjectAnalysis:
    """Everything the project analyzers derive from the full file set."""
    import_graph: dict[str, list[str]] = field(default_factory=dict)
    unresolved_imports: dict[str, list[str]] = field(default_factory=dict)
    pairwise_cycles: list[tuple[str, str]] = field(default_factory=list)
    library_usage: dict[str, LibraryUsage] = field(default_factory=dict)
    route_table: list[RouteEntry] = field(default_factory=list)
    dominant_state_pattern: str = "none"
    state_report: StateReport = field(default_factory=StateReport)
    env_variables: dict[str, EnvVarInfo] = field(default_factory=dict)
    asset_buckets: AssetBuckets = field(default_factory=AssetBuckets)
    aliases: dict[str, str] = field(default_factory=dict)
    react_router_version: str = ""


# ── Output ──

@dataclass
class FileNode:
    """A node of the navigable output tree."""
    name: str
    path: str
    type: str  # file | directory
    content: Optional[str] = None
    children: Optional[list[FileNode]] = None

    def to_dict(self) -> dict:
        data: dict = {"name": self.name, "path": self.path, "type": self.type}
        if self.content is not None:
            data["content"] = self.content
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data


@dataclass(frozen=True)
class Diagnostic:
    """One immutable log record produced while processing a file."""
    level: str  # info | warning | error
    message: str
    path: str = ""

    def render(self) -> str:
        return f"{self.path}: {self.message}" if self.path else self.message


@dataclass
class ConversionLog:
    """Diagnostics accumulated during one run."""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    info: list[str] = field(default_factory=list)

    def add(self, diagnostic: Diagnostic) -> None:
        target = {
            "error": self.errors,
            "warning": self.warnings,
        }.get(diagnostic.level, self.info)
        target.append(diagnostic.render())

    def extend(self, diagnostics) -> None:
        for diagnostic in diagnostics:
            self.add(diagnostic)

    def to_dict(self) -> dict:
        return {"errors": list(self.errors), "warnings": list(self.warnings), "info": list(self.info)}


@dataclass
class ConversionStats:
    total_files: int = 0
    converted_files: int = 0
    conversion_time_ms: int = 0

    def to_dict(self) -> dict:
        return {
            "totalFiles": self.total_files,
            "convertedFiles": self.converted_files,
            "conversionTimeMs": self.conversion_time_ms,
        }


@dataclass
class ConversionOutput:
    """Result of one conversion run."""
    pages: dict[str, str] = field(default_factory=dict)
    components: dict[str, str] = field(default_factory=dict)
    api: dict[str, str] = field(default_factory=dict)
    styles: dict[str, str] = field(default_factory=dict)
    config: dict[str, str] = field(default_factory=dict)
    public_assets: dict[str, str] = field(default_factory=dict)
    file_tree: Optional[FileNode] = None
    log: ConversionLog = field(default_factory=ConversionLog)
    stats: ConversionStats = field(default_factory=ConversionStats)
    analysis: Optional[ProjectAnalysis] = None
    # output path -> input path, for entries whose content is BINARY_PLACEHOLDER
    asset_sources: dict[str, str] = field(default_factory=dict)

    def bucket(self, name: str) -> dict[str, str]:
        return getattr(self, name)

    def to_dict(self) -> dict:
        return {
            "pages": dict(self.pages),
            "components": dict(self.components),
            "api": dict(self.api),
            "styles": dict(self.styles),
            "config": dict(self.config),
            "publicAssets": dict(self.public_assets),
            "fileTree": self.file_tree.to_dict() if self.file_tree else None,
            "log": self.log.to_dict(),
            "stats": self.stats.to_dict(),
        }
