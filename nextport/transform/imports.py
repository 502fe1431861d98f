"""Import substitution and import-path normalization."""
from __future__ import annotations

import posixpath
import re
from typing import Optional

from ..models import AnalysisResult
from .context import TransformContext
from .editing import has_import, remove_span
from .hooks import ROUTER_HOOKS, SEARCH_PARAMS_IMPORT, USE_ROUTER_IMPORT, convertible_hooks

ROUTER_IMPORT = re.compile(
    r"""^[ \t]*import\s+([^;]*?)\s*from\s*(['"])(react-router-dom|react-router)\2[ \t]*;?[ \t]*\n?""",
    re.M,
)
LINK_NAMES = frozenset({"Link", "NavLink"})

LINK_IMPORT = "import Link from 'next/link';"

SPECIFIER_SITE = re.compile(r"""(\bfrom\s*|\bimport\s*\(\s*|\bimport\s+|\brequire\s*\(\s*)(['"])([^'"\n]+)\2""")
SIDE_EFFECT_IMPORT = re.compile(r"""^[ \t]*import\s*(['"])([^'"\n]+)\1[ \t]*;?[ \t]*$""", re.M)

CODE_SUFFIXES = (".js", ".jsx", ".ts", ".tsx", ".mjs", ".cjs")


def _named_specifiers(clause: str) -> Optional[list[str]]:
    """``{ a, b as c }`` -> ``["a", "b as c"]``; None for default and namespace imports."""
    match = re.fullmatch(r"\{([^}]*)\}", clause.strip())
    if match is None:
        return None
    return [" ".join(part.split()) for part in match.group(1).split(",") if part.strip()]


def replaced_router_names(body: str) -> set[str]:
    """react-router names the later passes fully replace in ``body`` (imports excluded)."""
    names = convertible_hooks(body)
    for name in LINK_NAMES:
        references = len(re.findall(r"(?<![\w$.])" + name + r"\b", body))
        if references == len(re.findall(r"</?" + name + r"\b", body)):
            names.add(name)
    return names


def rewrite_router_imports(text: str, analysis: AnalysisResult, context: TransformContext) -> str:
    """Swap the react-router names later passes replace for ``next/router`` and ``next/link``.

    Everything else (``Routes``, ``Outlet``, ``Navigate``, aliased names)
    stays imported from react-router.
    """
    matches = list(ROUTER_IMPORT.finditer(text))
    if not matches:
        return text

    replaced = replaced_router_names(ROUTER_IMPORT.sub("", text))
    dropped: set[str] = set()
    edits = []
    for match in matches:
        specifiers = _named_specifiers(match.group(1))
        if specifiers is None:
            continue
        kept = [name for name in specifiers if name not in replaced]
        if len(kept) == len(specifiers):
            continue
        dropped |= set(specifiers) - set(kept)
        replacement = ""
        if kept:
            quote = match.group(2)
            newline = "\n" if match.group(0).endswith("\n") else ""
            replacement = f"import {{ {', '.join(kept)} }} from {quote}{match.group(3)}{quote};{newline}"
        edits.append((match.start(), match.end(), replacement))
    if not edits:
        return text

    lines = []
    if dropped & ROUTER_HOOKS and not has_import(text, "next/router", "useRouter"):
        lines.append(USE_ROUTER_IMPORT + "\n")
    if "useSearchParams" in dropped and not has_import(text, "next/navigation", "useSearchParams"):
        lines.append(SEARCH_PARAMS_IMPORT + "\n")
    if dropped & LINK_NAMES and not has_import(text, "next/link"):
        lines.append(LINK_IMPORT + "\n")

    position = edits[0][0]
    pieces = [text[:position], "".join(lines)]
    for start, end, replacement in edits:
        pieces.append(text[position:start])
        pieces.append(replacement)
        position = end
    pieces.append(text[position:])
    return "".join(pieces)



# ── Import-path normalization ──

def relative_specifier(from_output: str, to_output: str, original: str) -> str:
    """Specifier from the output file ``from_output`` to ``to_output``.

    Extensions and ``/index`` are left off when the original specifier left
    them off.
    """
    target = to_output
    original_base = posixpath.basename(original.rstrip("/"))
    if target.endswith(CODE_SUFFIXES) and "." not in original_base:
        target = target[:target.rfind(".")]
        if posixpath.basename(target) == "index" and original_base != "index":
            target = posixpath.dirname(target)
    relative = posixpath.relpath(target or ".", posixpath.dirname(from_output) or ".")
    if not relative.startswith("."):
        relative = "./" + relative
    return relative


def normalize_import_paths(text: str, analysis: Optional[AnalysisResult], context: TransformContext) -> str:
    """Point local imports at their output locations; drop global stylesheet imports."""
    if not context.import_targets and not context.dropped_imports:
        return text

    for match in reversed(list(SIDE_EFFECT_IMPORT.finditer(text))):
        if match.group(2) in context.dropped_imports:
            text = remove_span(text, match.start(), match.end())

    def rewrite(match: re.Match) -> str:
        replacement = context.import_targets.get(match.group(3))
        if replacement is None or replacement == match.group(3):
            return match.group(0)
        return f"{match.group(1)}{match.group(2)}{replacement}{match.group(2)}"

    return SPECIFIER_SITE.sub(rewrite, text)
