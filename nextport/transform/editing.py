"""Text-level helpers shared by the rewrite passes.

The passes edit source text, not trees, so every helper here returns the
input unchanged when it has nothing to do.
"""
from __future__ import annotations

import re
from typing import Iterator, Optional

# A top-level import statement, single- or multi-line, ending at its module string
IMPORT_STATEMENT = re.compile(r"""^import\s[\s\S]*?['"][^'"\n]+['"][ \t]*;?[ \t]*$""", re.M)
DIRECTIVE = re.compile(r"""^\s*(['"])use (?:client|server)\1;?[ \t]*\n?""")


def import_statements(text: str) -> list[re.Match]:
    return list(IMPORT_STATEMENT.finditer(text))


def has_import(text: str, module: str, name: Optional[str] = None) -> bool:
    """True when ``text`` imports from ``module`` (and binds ``name``, if given)."""
    quoted = re.compile(r"""['"]""" + re.escape(module) + r"""['"]""")
    for match in import_statements(text):
        statement = match.group(0)
        if not quoted.search(statement):
            continue
        if name is None or re.search(r"\b" + re.escape(name) + r"\b", statement):
            return True
    return False


def insert_after_imports(text: str, block: str) -> str:
    """Insert ``block`` (one or more lines) after the last import statement.

    Without imports the block goes after a leading directive, or at the top.
    """
    block = block.rstrip("\n") + "\n"
    statements = import_statements(text)
    if statements:
        end = statements[-1].end()
        newline = text.find("\n", end)
        cut = len(text) if newline == -1 else newline + 1
        prefix = text[:cut] if newline != -1 else text[:cut] + "\n"
        return prefix + block + text[cut:]
    block = block.lstrip("\n")
    directive = DIRECTIVE.match(text)
    if directive:
        head = text[:directive.end()]
        if not head.endswith("\n"):
            head += "\n"
        return head + "\n" + block + text[directive.end():]
    return block + "\n" + text


def ensure_import(text: str, line: str, module: str, name: Optional[str] = None) -> str:
    if has_import(text, module, name):
        return text
    return insert_after_imports(text, line)


def remove_span(text: str, start: int, end: int) -> str:
    """Cut ``text[start:end]``, taking the whole line when nothing else is on it."""
    line_start = text.rfind("\n", 0, start) + 1
    line_end = text.find("\n", end)
    line_end = len(text) if line_end == -1 else line_end + 1
    if not text[line_start:start].strip() and not text[end:line_end].strip():
        return text[:line_start] + text[line_end:]
    return text[:start] + text[end:]


def find_tag_end(text: str, start: int) -> int:
    """Index just past the ``>`` closing the tag opened at ``start``; -1 if none.

    Braces and quotes are tracked so ``>`` inside attribute expressions
    (arrow functions, comparisons) does not end the tag.
    """
    depth = 0
    quote = ""
    i = start + 1
    while i < len(text):
        ch = text[i]
        if quote:
            if ch == "\\":
                i += 2
                continue
            if ch == quote:
                quote = ""
        elif ch in "\"'`":
            quote = ch
        elif ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        elif ch == ">" and depth <= 0:
            return i + 1
        i += 1
    return -1


def open_tags(text: str, *names: str) -> Iterator[tuple[int, int, str]]:
    """Yield ``(start, end, name)`` for each opening tag named in ``names``.

    Positions refer to ``text`` as given; callers editing the text should
    process matches from last to first.
    """
    pattern = re.compile(r"<(" + "|".join(re.escape(n) for n in names) + r")(?=[\s/>])")
    for match in pattern.finditer(text):
        end = find_tag_end(text, match.start())
        if end != -1:
            yield match.start(), end, match.group(1)


def replace_spans(text: str, edits: list[tuple[int, int, str]]) -> str:
    """Apply non-overlapping ``(start, end, replacement)`` edits."""
    for start, end, replacement in sorted(edits, key=lambda e: e[0], reverse=True):
        text = text[:start] + replacement + text[end:]
    return text
