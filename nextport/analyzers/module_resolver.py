"""Import resolution, dependency graph and third-party library usage."""
from __future__ import annotations

import json
import logging
import posixpath
import re
from typing import Iterable, Mapping, Optional

from ..errors import ResolutionWarning
from ..models import AnalysisResult, LibraryUsage, SourceFile
from .libraries import (
    NODE_BUILTINS,
    is_bare_specifier,
    library_category,
    package_name,
    requires_client_directive,
)

logger = logging.getLogger(__name__)

DEFAULT_EXTENSIONS: tuple[str, ...] = (".js", ".jsx", ".ts", ".tsx", ".json")

# Regex extraction, used for files the parser could not handle
IMPORT_PATTERN = re.compile(
    r"""\b(?:import|export)\s+[^;'"]*?\bfrom\s*['"]([^'"]+)['"]"""
    r"""|\bimport\s+['"]([^'"]+)['"]"""
    r"""|require\(\s*['"]([^'"]+)['"]\s*\)"""
    r"""|import\(\s*['"]([^'"]+)['"]\s*\)"""
)

# vite/webpack/craco: alias: { '@': path.resolve(__dirname, 'src') }
BUNDLER_ALIAS = re.compile(
    r"""['"]?([@~$\w][\w@~$/.-]*)['"]?\s*:\s*path\.(?:resolve|join)\(\s*__dirname\s*,\s*['"]([^'"]+)['"]"""
)
BUNDLER_CONFIG = re.compile(r"(?:^|/)(?:vite|webpack|craco)\.config\.[cm]?[jt]s$")
TS_CONFIG_NAMES = ("tsconfig.json", "jsconfig.json")

_LINE_COMMENT = re.compile(r"(?m)^\s*//.*$")
_BLOCK_COMMENT = re.compile(r"/\*.*?\*/", re.S)
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def scan_import_specifiers(text: str) -> list[str]:
    """Regex scan of import/require specifiers, in source order, deduplicated."""
    seen: dict[str, None] = {}
    for match in IMPORT_PATTERN.finditer(text):
        specifier = next(group for group in match.groups() if group)
        seen.setdefault(specifier, None)
    return list(seen)


def load_json_config(source: SourceFile) -> Optional[dict]:
    """json.loads after stripping comments and trailing commas (tsconfig style)."""
    text = _BLOCK_COMMENT.sub("", source.content)
    text = _LINE_COMMENT.sub("", text)
    text = _TRAILING_COMMA.sub(r"\1", text)
    try:
        data = json.loads(text)
    except ValueError as e:
        logger.warning("Failed to parse %s: %s", source.path, e)
        return None
    return data if isinstance(data, dict) else None


def extract_aliases(files: Iterable[SourceFile]) -> dict[str, str]:
    """Build the ``alias -> project path`` table from tsconfig and bundler configs."""
    aliases: dict[str, str] = {}
    for source in sorted(files, key=lambda f: f.path):
        name = source.path.rsplit("/", 1)[-1]
        base_dir = posixpath.dirname(source.path)
        if name in TS_CONFIG_NAMES:
            data = load_json_config(source)
            if not data:
                continue
            options = data.get("compilerOptions") or {}
            base_url = posixpath.join(base_dir, options.get("baseUrl") or ".")
            for pattern, targets in (options.get("paths") or {}).items():
                if not targets:
                    continue
                alias = pattern[:-2] if pattern.endswith("/*") else pattern
                target = targets[0][:-2] if targets[0].endswith("/*") else targets[0]
                aliases.setdefault(alias, _normalize(posixpath.join(base_url, target)))
        elif BUNDLER_CONFIG.search(source.path):
            for alias, target in BUNDLER_ALIAS.findall(source.content):
                aliases.setdefault(alias, _normalize(posixpath.join(base_dir, target)))
    return aliases


def _normalize(path: str) -> str:
    normalized = posixpath.normpath(path)
    return "" if normalized == "." else normalized.lstrip("/")


class ModuleResolver:
    """Resolves import specifiers against a closed set of project paths.

    Resolution order: alias substitution, exact path, extension candidates,
    then ``index`` files under the specifier directory.
    """

    def __init__(
        self,
        paths: Iterable[str],
        aliases: Optional[Mapping[str, str]] = None,
        extensions: Iterable[str] = DEFAULT_EXTENSIONS,
    ):
        self.paths = frozenset(paths)
        self.extensions = tuple(extensions)
        # Longest alias first so "@/components" beats "@"
        self.aliases = sorted((aliases or {}).items(), key=lambda item: -len(item[0]))

    def apply_alias(self, specifier: str) -> Optional[str]:
        for alias, target in self.aliases:
            if specifier == alias:
                return target
            if specifier.startswith(alias.rstrip("/") + "/"):
                rest = specifier[len(alias.rstrip("/")) + 1:]
                return posixpath.join(target, rest) if target else rest
        return None

    def is_local(self, specifier: str) -> bool:
        """True for specifiers that must resolve inside the project."""
        return not is_bare_specifier(specifier) or self.apply_alias(specifier) is not None

    def resolve(self, importer: str, specifier: str) -> Optional[str]:
        """Return the project path ``specifier`` points to, or None."""
        aliased = self.apply_alias(specifier)
        if aliased is not None:
            base = _normalize(aliased)
        elif specifier.startswith("/"):
            base = _normalize(specifier)
        elif specifier.startswith("."):
            base = _normalize(posixpath.join(posixpath.dirname(importer), specifier))
        else:
            return None

        if base in self.paths:
            return base
        for ext in self.extensions:
            if base + ext in self.paths:
                return base + ext
        for ext in self.extensions:
            candidate = posixpath.join(base, "index" + ext) if base else "index" + ext
            if candidate in self.paths:
                return candidate
        return None


def build_import_graph(
    sources: Iterable[SourceFile],
    analyses: Mapping[str, AnalysisResult],
    resolver: ModuleResolver,
) -> tuple[dict[str, list[str]], dict[str, list[str]], list[ResolutionWarning]]:
    """Resolve every file's imports.

    Returns the adjacency map (path -> resolved paths, in import order),
    the unresolved specifiers per importing file, and one ResolutionWarning
    per unresolved specifier.
    """
    graph: dict[str, list[str]] = {}
    unresolved: dict[str, list[str]] = {}
    warnings: list[ResolutionWarning] = []
    for source in sorted(sources, key=lambda f: f.path):
        analysis = analyses.get(source.path)
        if analysis is None:
            continue
        edges: list[str] = []
        for specifier in analysis.imports:
            if not resolver.is_local(specifier):
                continue
            target = resolver.resolve(source.path, specifier)
            if target is None:
                unresolved.setdefault(source.path, []).append(specifier)
                warnings.append(ResolutionWarning(source.path, specifier))
            elif target not in edges:
                edges.append(target)
        graph[source.path] = edges
    return graph, unresolved, warnings


def find_pairwise_cycles(graph: Mapping[str, list[str]]) -> list[tuple[str, str]]:
    """Direct mutual imports only: (A, B) with A < B, A imports B and B imports A."""
    cycles: list[tuple[str, str]] = []
    for path in sorted(graph):
        for target in graph[path]:
            if path < target and path in graph.get(target, ()):
                cycles.append((path, target))
    return sorted(cycles)


def importers_of(graph: Mapping[str, list[str]]) -> dict[str, list[str]]:
    """Reverse adjacency map, recomputed from ``graph``."""
    reverse: dict[str, list[str]] = {}
    for path in sorted(graph):
        for target in graph[path]:
            if target != path:
                reverse.setdefault(target, []).append(path)
    return reverse


def read_manifest_versions(files: Iterable[SourceFile]) -> dict[str, str]:
    """Dependency versions from the top-most package.json."""
    manifests = sorted(
        (f for f in files if f.path.rsplit("/", 1)[-1] == "package.json"),
        key=lambda f: (f.path.count("/"), f.path),
    )
    if not manifests:
        return {}
    data = load_json_config(manifests[0]) or {}
    versions: dict[str, str] = {}
    for section in ("devDependencies", "peerDependencies", "dependencies"):
        deps = data.get(section) or {}
        if isinstance(deps, dict):
            versions.update({str(k): str(v) for k, v in deps.items()})
    return versions


def collect_library_usage(
    analyses: Mapping[str, AnalysisResult],
    versions: Mapping[str, str],
    resolver: ModuleResolver,
) -> dict[str, LibraryUsage]:
    """Aggregate bare imports into per-package usage, sorted by package name."""
    usage: dict[str, LibraryUsage] = {}
    for path in sorted(analyses):
        for specifier in analyses[path].imports:
            if resolver.is_local(specifier) or specifier.startswith("node:"):
                continue
            name = package_name(specifier)
            if name in NODE_BUILTINS:
                continue
            entry = usage.get(name)
            if entry is None:
                entry = usage[name] = LibraryUsage(
                    name=name,
                    version=versions.get(name, ""),
                    category=library_category(name),
                    requires_client_directive=requires_client_directive(name),
                )
            entry.usage_count += 1
            if path not in entry.files:
                entry.files.append(path)
    return dict(sorted(usage.items()))
