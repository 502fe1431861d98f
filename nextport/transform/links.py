"""``<Link to>`` / ``<NavLink to>`` to Next.js ``<Link href>``."""
from __future__ import annotations

import re

from ..models import AnalysisResult
from .context import TransformContext
from .editing import ensure_import, open_tags, replace_spans
from .imports import LINK_IMPORT

TO_ATTRIBUTE = re.compile(r"(\s)to(\s*=)")
NAVLINK_CLOSE = re.compile(r"</NavLink\s*>")


def rewrite_links(text: str, analysis: AnalysisResult, context: TransformContext) -> str:
    edits = []
    for start, end, name in open_tags(text, "Link", "NavLink"):
        tag = text[start:end]
        rewritten = TO_ATTRIBUTE.sub(r"\1href\2", tag, count=1)
        if name == "NavLink":
            rewritten = "<Link" + rewritten[len("<NavLink"):]
        if rewritten != tag:
            edits.append((start, end, rewritten))
    if not edits:
        return text
    text = replace_spans(text, edits)
    text = NAVLINK_CLOSE.sub("</Link>", text)
    return ensure_import(text, LINK_IMPORT, "next/link")
