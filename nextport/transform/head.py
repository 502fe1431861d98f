"""``<Head>`` / ``<Helmet>`` title and description to ``export const metadata``."""
from __future__ import annotations

import json
import re

from ..models import AnalysisResult
from .context import TransformContext
from .editing import insert_after_imports, remove_span

HEAD_BLOCK = re.compile(r"<(Helmet|Head)\b[^>]*>([\s\S]*?)</\1\s*>")
TITLE = re.compile(r"<title>([^<{}]+)</title>")
DESCRIPTION = re.compile(
    r"""<meta\s+(?=[^>]*\bname\s*=\s*["']description["'])[^>]*\bcontent\s*=\s*(["'])(.*?)\1[^>]*>""",
)
HEAD_IMPORT = re.compile(
    r"""^[ \t]*import\s+(?:\{\s*Helmet\s*\}|Helmet|Head)\s+from\s+['"](?:react-helmet|react-helmet-async|next/head)['"][ \t]*;?[ \t]*$""",
    re.M,
)
EXISTING_METADATA = re.compile(r"\bexport\s+const\s+metadata\b")


def extract_head_metadata(text: str, analysis: AnalysisResult, context: TransformContext) -> str:
    """Move literal title/description out of head blocks into a metadata export.

    Only blocks that yield a literal title or description are removed.
    """
    if EXISTING_METADATA.search(text):
        return text
    metadata: dict[str, str] = {}
    blocks = []
    for match in HEAD_BLOCK.finditer(text):
        body = match.group(2)
        title = TITLE.search(body)
        description = DESCRIPTION.search(body)
        if not (title or description):
            continue
        if title and "title" not in metadata:
            metadata["title"] = title.group(1).strip()
        if description and "description" not in metadata:
            metadata["description"] = description.group(2)
        blocks.append(match)
    if not metadata:
        return text

    for match in reversed(blocks):
        text = remove_span(text, match.start(), match.end())
    if not re.search(r"<(?:Helmet|Head)\b", text):
        for match in reversed(list(HEAD_IMPORT.finditer(text))):
            text = remove_span(text, match.start(), match.end())

    fields = "".join(f"  {key}: {json.dumps(value)},\n" for key, value in metadata.items())
    return insert_after_imports(text, "\nexport const metadata = {\n" + fields + "};\n")
