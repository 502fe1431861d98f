"""Router hook rewriting: react-router hooks to ``useRouter``."""
from __future__ import annotations

import re

from ..models import AnalysisResult
from .context import TransformContext
from .editing import ensure_import, remove_span

USE_ROUTER_IMPORT = "import { useRouter } from 'next/router';"
SEARCH_PARAMS_IMPORT = "import { useSearchParams } from 'next/navigation';"

USE_PARAMS_CALL = re.compile(r"\buseParams\(\s*\)")
LOCATION_CALL = re.compile(r"\b(?:useLocation\(\s*\)|useRouteMatch\([^()]*\))")
NAVIGATOR_BINDING = re.compile(r"\b(const|let|var)\s+([A-Za-z_$][\w$]*)\s*=\s*(?:useNavigate|useHistory)\(\s*\)")
# const [params] = useSearchParams(); a bound setter has no next/navigation counterpart
SEARCH_PARAMS_BINDING = re.compile(r"\b(const|let|var)\s+\[\s*([A-Za-z_$][\w$]*)\s*,?\s*\]\s*=\s*useSearchParams\(\s*\)")
ROUTER_DECLARATION = re.compile(r"\b(?:const|let|var)\s+router\s*=\s*useRouter\(\s*\)[ \t]*;?")
USE_ROUTER_CALL = re.compile(r"\buseRouter\(")

# Same-site redirects; absolute URLs keep a full page load
LOCATION_ASSIGNMENT = re.compile(r"""\bwindow\.location\.href\s*=\s*(['"])(/(?!/)[^'"\n]*)\1""")
LOCATION_METHOD = re.compile(r"""\bwindow\.location\.(assign|replace)\(\s*(['"])(/(?!/)[^'"\n]*)\2\s*\)""")

ROUTER_NAME = "router"

# Call sites the pass rewrites, per hook. A hook whose every reference is one
# of these no longer needs its react-router import.
HOOK_SITES = {
    "useParams": USE_PARAMS_CALL,
    "useLocation": re.compile(r"\buseLocation\(\s*\)"),
    "useRouteMatch": re.compile(r"\buseRouteMatch\([^()]*\)"),
    "useNavigate": re.compile(r"\b(?:const|let|var)\s+[A-Za-z_$][\w$]*\s*=\s*useNavigate\(\s*\)"),
    "useHistory": re.compile(r"\b(?:const|let|var)\s+[A-Za-z_$][\w$]*\s*=\s*useHistory\(\s*\)"),
    "useSearchParams": SEARCH_PARAMS_BINDING,
}
ROUTER_HOOKS = frozenset(HOOK_SITES) - {"useSearchParams"}


def convertible_hooks(text: str) -> set[str]:
    """Hooks in ``HOOK_SITES`` that ``rewrite_router_hooks`` fully replaces in ``text``."""
    convertible = set()
    for name, sites in HOOK_SITES.items():
        references = len(re.findall(r"(?<![\w$.])" + name + r"\b", text))
        if references == len(sites.findall(text)):
            convertible.add(name)
    return convertible


def _same_block(text: str, start: int, end: int, nested: bool = False) -> bool:
    """True when ``text[end]`` sits in the block open at ``text[start]``.

    With ``nested`` an inner block also counts.
    """
    depth = 0
    for ch in text[start:end]:
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth < 0:
                return False
    return depth >= 0 if nested else depth == 0


def _drop_duplicate_routers(text: str) -> str:
    """Keep one ``router = useRouter()`` declaration per block."""
    kept: list[re.Match] = []
    duplicates: list[re.Match] = []
    for match in ROUTER_DECLARATION.finditer(text):
        if any(_same_block(text, first.end(), match.start()) for first in kept):
            duplicates.append(match)
        else:
            kept.append(match)
    for match in reversed(duplicates):
        text = remove_span(text, match.start(), match.end())
    return text


def _rewrite_navigator(text: str, name: str) -> str:
    """Route every use of the navigate/history binding ``name`` through ``router``."""
    ident = re.escape(name)
    text = re.sub(r"(?<![\w$.])" + ident + r"\.goBack\(\s*\)", "router.back()", text)
    text = re.sub(r"(?<![\w$.])" + ident + r"\(\s*-1\s*\)", "router.back()", text)
    text = re.sub(r"(?<![\w$.])" + ident + r"\.(push|replace|back)\(", r"router.\1(", text)
    if name != ROUTER_NAME:
        text = re.sub(r"(?<![\w$.])" + ident + r"\(", "router.push(", text)
    else:
        text = re.sub(r"(?<![\w$.])router\((?!\s*\))", "router.push(", text)
    return text


def _rewrite_redirects(text: str) -> str:
    """``window.location`` redirects to router calls where a ``router`` binding is in scope."""
    declarations = [match.end() for match in ROUTER_DECLARATION.finditer(text)]
    if not declarations:
        return text

    def in_scope(position: int) -> bool:
        return any(end <= position and _same_block(text, end, position, nested=True) for end in declarations)

    edits = []
    for match in LOCATION_ASSIGNMENT.finditer(text):
        if in_scope(match.start()):
            quote, url = match.group(1), match.group(2)
            edits.append((match.start(), match.end(), f"router.push({quote}{url}{quote})"))
    for match in LOCATION_METHOD.finditer(text):
        if in_scope(match.start()):
            method = "push" if match.group(1) == "assign" else "replace"
            quote, url = match.group(2), match.group(3)
            edits.append((match.start(), match.end(), f"router.{method}({quote}{url}{quote})"))
    for start, end, replacement in sorted(edits, reverse=True):
        text = text[:start] + replacement + text[end:]
    return text


def rewrite_router_hooks(text: str, analysis: AnalysisResult, context: TransformContext) -> str:
    """``useParams()`` reads ``useRouter().query``; navigate/history bindings become ``router``."""
    original = text
    text = USE_PARAMS_CALL.sub("useRouter().query", text)
    text = LOCATION_CALL.sub("useRouter()", text)
    search = SEARCH_PARAMS_BINDING.search(text) is not None
    text = SEARCH_PARAMS_BINDING.sub(r"\1 \2 = useSearchParams()", text)

    names = {match.group(2) for match in NAVIGATOR_BINDING.finditer(text)}
    text = NAVIGATOR_BINDING.sub(lambda m: f"{m.group(1)} {ROUTER_NAME} = useRouter()", text)
    text = _drop_duplicate_routers(text)
    for name in sorted(names):
        text = _rewrite_navigator(text, name)
    text = _rewrite_redirects(text)

    if text == original:
        return original
    if USE_ROUTER_CALL.search(text):
        text = ensure_import(text, USE_ROUTER_IMPORT, "next/router", "useRouter")
    if search:
        text = ensure_import(text, SEARCH_PARAMS_IMPORT, "next/navigation", "useSearchParams")
    return text
