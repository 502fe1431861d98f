"""JavaScript/TypeScript parser adapter built on tree-sitter grammars.

Picks a grammar from the file extension (sniffing ``.ts`` content for
markup), and when the first parse contains syntax errors retries once with
the alternate grammar in recovery mode. tree-sitter always yields a tree;
a parse only fails outright when nothing outside error nodes survives.
"""
from __future__ import annotations

import logging
import re
import threading
from dataclasses import dataclass
from typing import Any

from ..errors import ParseFailure

logger = logging.getLogger(__name__)

# Language extension mapping
LANGUAGE_MAP: dict[str, str] = {
    ".js": "javascript",
    ".jsx": "javascript",
    ".mjs": "javascript",
    ".cjs": "javascript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".tsx": "tsx",
}

# Grammar tried when the first parse has errors
RECOVERY_LANGUAGE: dict[str, str] = {
    "javascript": "tsx",
    "typescript": "tsx",
    "tsx": "javascript",
}

CODE_EXTENSIONS = frozenset(LANGUAGE_MAP)

# Closing tags, self-closing tags and fragments. Generic type arguments
# (`Array<string>`) never match.
_MARKUP_PATTERN = re.compile(r"</[A-Za-z][\w.]*\s*>|<[A-Za-z][\w.]*(?:\s[^<>]*)?/>|</>")


def _try_tree_sitter() -> bool:
    """Check if the tree-sitter grammars are available."""
    try:
        import tree_sitter_language_pack  # noqa: F401
        return True
    except ImportError:
        return False


_HAS_TREE_SITTER: bool | None = None


def is_available() -> bool:
    """Return True if tree-sitter grammars are installed."""
    global _HAS_TREE_SITTER
    if _HAS_TREE_SITTER is None:
        _HAS_TREE_SITTER = _try_tree_sitter()
    return _HAS_TREE_SITTER


def is_code_file(path: str) -> bool:
    """Return True if the adapter can parse the given path."""
    return _suffix(path) in CODE_EXTENSIONS


def select_language(path: str, text: str = "") -> str:
    """Choose the grammar for a file from its extension and content."""
    language = LANGUAGE_MAP.get(_suffix(path), "javascript")
    if language == "typescript" and _MARKUP_PATTERN.search(text):
        language = "tsx"
    return language


def _suffix(path: str) -> str:
    name = path.rsplit("/", 1)[-1]
    return name[name.rfind("."):].lower() if "." in name else ""


# ── Syntax trees ──

@dataclass
class SyntaxTree:
    """A parsed file: the tree-sitter root plus the bytes it indexes into."""
    root: Any
    source: bytes
    language: str
    error_count: int = 0
    recovered: bool = False

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0

    def text(self, node) -> str:
        if node is None:
            return ""
        return self.source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    def literal(self, node) -> str | None:
        """Return the value of a string-like node, or None for anything else."""
        return literal_value(self, node)


def literal_value(tree: SyntaxTree, node) -> str | None:
    """Unquote string literals, substitution-free templates and `{"..."}` JSX values."""
    if node is None:
        return None
    if node.type == "jsx_expression":
        inner = node.named_children
        return literal_value(tree, inner[0]) if len(inner) == 1 else None
    if node.type == "string":
        raw = tree.text(node)
        return raw[1:-1] if len(raw) >= 2 else ""
    if node.type == "template_string":
        if any(child.type == "template_substitution" for child in node.named_children):
            return None
        raw = tree.text(node)
        return raw[1:-1] if len(raw) >= 2 else ""
    return None


def count_errors(node) -> int:
    """Count ERROR and missing nodes below ``node``."""
    if not node.has_error:
        return 0
    count = 0
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            count += 1
        if current.has_error:
            stack.extend(current.children)
    return count


def _has_usable_content(root) -> bool:
    if root.type == "ERROR":
        return False
    children = root.named_children
    if not children:
        return True
    return any(child.type != "ERROR" for child in children)


# ── Parsing ──

_local = threading.local()


def _get_parser(language: str):
    """Return this thread's parser for ``language``."""
    cache = getattr(_local, "parsers", None)
    if cache is None:
        cache = _local.parsers = {}
    parser = cache.get(language)
    if parser is None:
        from tree_sitter_language_pack import get_parser

        parser = cache[language] = get_parser(language)
    return parser


def _parse_once(source: bytes, language: str, path: str) -> SyntaxTree:
    try:
        tree = _get_parser(language).parse(source)
    except Exception as e:
        raise ParseFailure(path, f"{language} parser raised {e}", language) from e
    root = tree.root_node
    return SyntaxTree(root=root, source=source, language=language, error_count=count_errors(root))


def parse(text: str, path: str = "", language: str | None = None) -> SyntaxTree:
    """Parse ``text`` into a SyntaxTree.

    Args:
        text: File content.
        path: Used for grammar selection and diagnostics.
        language: Force a grammar instead of selecting one.

    Raises:
        ParseFailure: If the grammars are missing, or if neither the first
            parse nor the recovery parse produced anything usable.
    """
    if not is_available():
        raise ParseFailure(path, "tree-sitter grammars are not installed")

    language = language or select_language(path, text)
    source = text.encode("utf-8")
    tree = _parse_once(source, language, path)
    if not tree.has_errors:
        return tree

    alternate = RECOVERY_LANGUAGE.get(language, "tsx")
    logger.debug(
        "%d syntax errors in %s with %s grammar, retrying with %s",
        tree.error_count, path, language, alternate,
    )
    try:
        retry = _parse_once(source, alternate, path)
    except ParseFailure as e:
        logger.debug("Recovery parse of %s failed: %s", path, e)
        retry = None

    best = tree if retry is None or tree.error_count <= retry.error_count else retry
    best.recovered = True
    if not _has_usable_content(best.root):
        raise ParseFailure(
            path, f"{best.error_count} syntax errors and nothing recoverable", best.language,
        )
    return best
