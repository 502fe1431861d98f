"""Asset tags: ``<img>`` to ``next/image``, ``<script>`` to ``next/script``, font links to a ``next/font`` hint."""
from __future__ import annotations

import re
from urllib.parse import parse_qs, urlsplit

from ..models import AnalysisResult
from .context import TransformContext
from .editing import ensure_import, open_tags, replace_spans

IMAGE_IMPORT = "import Image from 'next/image';"
SCRIPT_IMPORT = "import Script from 'next/script';"

DEFAULT_WIDTH = 500
DEFAULT_HEIGHT = 300

IMG_CLOSE = re.compile(r"</img\s*>")
SCRIPT_CLOSE = re.compile(r"</script\s*>")
HREF = re.compile(r"""\bhref\s*=\s*(["'])(.*?)\1""")
FONT_HOSTS = ("fonts.googleapis.com", "fonts.gstatic.com")


def _has_attribute(tag: str, name: str) -> bool:
    return re.search(r"\s" + re.escape(name) + r"\s*=", tag) is not None


def _image_tag(tag: str) -> str:
    body = tag[len("<img"):]
    body = body[:-2] if body.endswith("/>") else body[:-1]
    body = body.rstrip()
    extra = []
    if not _has_attribute(tag, "width"):
        extra.append(f"width={{{DEFAULT_WIDTH}}}")
    if not _has_attribute(tag, "height"):
        extra.append(f"height={{{DEFAULT_HEIGHT}}}")
    if not _has_attribute(tag, "alt"):
        extra.append('alt=""')
    if extra:
        body += " " + " ".join(extra)
    return "<Image" + body + " />"


def font_family(href: str) -> str:
    """First family named in a Google Fonts stylesheet URL."""
    families = parse_qs(urlsplit(href).query).get("family") or []
    if not families:
        return ""
    return families[0].split("|")[0].split(":")[0].replace("+", " ").strip()


def _font_hint(tag: str) -> str | None:
    href = HREF.search(tag)
    if not href or not any(host in href.group(2) for host in FONT_HOSTS):
        return None
    family = font_family(href.group(2))
    loader = family.replace(" ", "_") if family else "the font"
    return f"{{/* next/font: load {loader} from 'next/font/google' instead of this stylesheet link */}}"


def rewrite_assets(text: str, analysis: AnalysisResult, context: TransformContext) -> str:
    edits = []
    uses_image = uses_script = False
    for start, end, name in open_tags(text, "img", "script", "link"):
        tag = text[start:end]
        if name == "img":
            edits.append((start, end, _image_tag(tag)))
            uses_image = True
        elif name == "script":
            edits.append((start, end, "<Script" + tag[len("<script"):]))
            uses_script = True
        else:
            hint = _font_hint(tag)
            if hint is not None:
                edits.append((start, end, hint))
    if not edits:
        return text

    text = replace_spans(text, edits)
    if uses_image:
        text = IMG_CLOSE.sub("", text)
        text = ensure_import(text, IMAGE_IMPORT, "next/image")
    if uses_script:
        text = SCRIPT_CLOSE.sub("</Script>", text)
        text = ensure_import(text, SCRIPT_IMPORT, "next/script")
    return text
