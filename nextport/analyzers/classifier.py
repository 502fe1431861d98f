"""File classifier: an ordered rule table mapping a file to its role.

The table is evaluated top to bottom and the first matching row wins.
The row order decides which output bucket a file lands in, so it is part
of the contract and covered by tests row by row.
"""
from __future__ import annotations

import re
from dataclasses import dataclass

from ..models import (
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
    SourceFile,
)
from ..rules import Rule, first_match, first_matching_rule

API_HANDLER_EXPORT = re.compile(r"export\s+(?:default\s+)?(?:async\s+)?function\s+handler\b")
ROUTE_PARAM_HOOK = re.compile(r"\buse(?:Params|History|Navigate|Location)\s*\(")
HOOK_NAME = re.compile(r"^use[A-Z0-9]")
HOOK_EXPORT = re.compile(r"export\s+(?:default\s+)?(?:function|const)\s+use[A-Z0-9]")

STYLESHEET_EXTENSIONS = (".css", ".scss", ".sass", ".less")
STYLED_SUFFIXES = (".styled.js", ".styled.jsx", ".styled.ts", ".styled.tsx")

MANIFEST_NAMES = frozenset({
    "package.json", "package-lock.json", "yarn.lock", "pnpm-lock.yaml",
    "tsconfig.json", "jsconfig.json", ".babelrc", ".eslintrc", ".eslintrc.js",
    ".eslintrc.json", ".prettierrc", ".browserslistrc", ".npmrc", ".nvmrc",
    ".gitignore", ".editorconfig",
})

PAGE_DIRECTORIES = frozenset({"pages", "views", "screens"})


@dataclass(frozen=True)
class FileFacts:
    """The slice of a file the classification rules look at."""
    path: str
    name: str
    stem: str
    lower_name: str
    directories: tuple[str, ...]
    content: str

    @classmethod
    def from_source(cls, source: SourceFile) -> FileFacts:
        parts = source.path.split("/")
        name = parts[-1]
        stem = name.split(".", 1)[0] if not name.startswith(".") else name
        return cls(
            path=source.path,
            name=name,
            stem=stem,
            lower_name=name.lower(),
            directories=tuple(part.lower() for part in parts[:-1]),
            content=source.content,
        )


def _name_contains(*words: str):
    return lambda f: any(word in f.lower_name for word in words)


def _content_contains(*needles: str):
    return lambda f: any(needle in f.content for needle in needles)


def _is_manifest(f: FileFacts) -> bool:
    return f.lower_name in MANIFEST_NAMES or f.lower_name.startswith(".env")


def _is_stylesheet(f: FileFacts) -> bool:
    return f.lower_name.endswith(STYLESHEET_EXTENSIONS) or f.lower_name.endswith(STYLED_SUFFIXES)


CLASSIFICATION_RULES: tuple[Rule[FileFacts, str], ...] = (
    Rule("api-directory", lambda f: "api" in f.directories, ROLE_API),
    Rule("api-handler-export", lambda f: bool(API_HANDLER_EXPORT.search(f.content)), ROLE_API),
    Rule("config-name", _name_contains("config"), ROLE_CONFIG),
    Rule("config-manifest", _is_manifest, ROLE_CONFIG),
    Rule("stylesheet", _is_stylesheet, ROLE_STYLE),
    Rule("page-directory", lambda f: bool(PAGE_DIRECTORIES.intersection(f.directories)), ROLE_PAGE),
    Rule(
        "page-route-params",
        lambda f: "export default" in f.content and bool(ROUTE_PARAM_HOOK.search(f.content)),
        ROLE_PAGE,
    ),
    Rule("layout-name", _name_contains("layout", "header", "footer", "sidebar", "navigation", "navbar"), ROLE_LAYOUT),
    Rule(
        "layout-markup",
        lambda f: "children" in f.content and "<header" in f.content and "<footer" in f.content,
        ROLE_LAYOUT,
    ),
    Rule("hook-name", lambda f: bool(HOOK_NAME.match(f.stem)), ROLE_HOOK),
    Rule("hook-export", lambda f: bool(HOOK_EXPORT.search(f.content)), ROLE_HOOK),
    Rule("context-name", _name_contains("context", "provider"), ROLE_CONTEXT),
    Rule("context-factory", _content_contains("createContext("), ROLE_CONTEXT),
    Rule("reducer-name", _name_contains("reducer", "slice"), ROLE_REDUCER),
    Rule("reducer-factory", _content_contains("createSlice(", "combineReducers("), ROLE_REDUCER),
    Rule("store-name", _name_contains("store"), ROLE_STORE),
    Rule("store-factory", _content_contains("createStore(", "configureStore("), ROLE_STORE),
    Rule("util-name", _name_contains("util", "helper", "service", "constant", "api", "client"), ROLE_UTIL),
)


def classify(source: SourceFile) -> str:
    """Return the role of ``source``; ``component`` when no rule matches."""
    return first_match(CLASSIFICATION_RULES, FileFacts.from_source(source), ROLE_COMPONENT)


def explain(source: SourceFile) -> str:
    """Return the name of the rule that classified ``source``."""
    rule = first_matching_rule(CLASSIFICATION_RULES, FileFacts.from_source(source))
    return rule.name if rule else "default"


def classify_with_rule(source: SourceFile) -> tuple[str, str]:
    """Return ``(role, rule name)`` in a single evaluation of the table."""
    rule = first_matching_rule(CLASSIFICATION_RULES, FileFacts.from_source(source))
    return (rule.effect, rule.name) if rule else (ROLE_COMPONENT, "default")
