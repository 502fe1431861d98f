"""Static asset and stylesheet categorization."""
from __future__ import annotations

import posixpath
from typing import Iterable, Mapping

from ..models import AnalysisResult, AssetBuckets, SourceFile
from ..rules import Rule, first_match

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".svg", ".webp", ".avif", ".ico", ".bmp")
FONT_EXTENSIONS = (".woff", ".woff2", ".ttf", ".otf", ".eot")
MEDIA_EXTENSIONS = (".mp4", ".webm", ".ogg", ".mp3", ".wav", ".pdf")
STYLESHEET_EXTENSIONS = (".css", ".scss", ".sass", ".less")

STATIC_EXTENSIONS = IMAGE_EXTENSIONS + FONT_EXTENSIONS + MEDIA_EXTENSIONS

GLOBAL_STYLESHEETS = frozenset({
    "index.css", "main.css", "app.css", "styles.css", "index.scss", "main.scss", "app.scss",
})

CSS_GLOBAL = "global"
CSS_MODULE = "module"
CSS_LIBRARY = "library"
CSS_COMPONENT = "component"

CSS_RULES: tuple[Rule[str, str], ...] = (
    Rule("library", lambda p: "node_modules/" in p or "/vendor/" in p or p.startswith("vendor/"), CSS_LIBRARY),
    Rule("module", lambda p: ".module." in posixpath.basename(p).lower(), CSS_MODULE),
    Rule(
        "global",
        lambda p: "global" in posixpath.basename(p).lower() or posixpath.basename(p).lower() in GLOBAL_STYLESHEETS,
        CSS_GLOBAL,
    ),
)


def css_category(path: str) -> str:
    return first_match(CSS_RULES, path, CSS_COMPONENT)


def is_stylesheet(path: str) -> bool:
    return path.lower().endswith(STYLESHEET_EXTENSIONS)


def is_static_asset(path: str) -> bool:
    """Files copied to public/ as-is."""
    lower = path.lower()
    return lower.startswith("public/") or lower.endswith(STATIC_EXTENSIONS)


def analyze_assets(
    sources: Iterable[SourceFile],
    binary_paths: Iterable[str],
    analyses: Mapping[str, AnalysisResult],
) -> AssetBuckets:
    """Group stylesheets and static files; images are those referenced from code."""
    buckets = AssetBuckets()
    text_paths = {source.path for source in sources}
    all_paths = sorted(text_paths | set(binary_paths))

    for path in all_paths:
        lower = path.lower()
        if is_stylesheet(path) and path in text_paths:
            category = css_category(path)
            {
                CSS_GLOBAL: buckets.global_css,
                CSS_MODULE: buckets.css_modules,
                CSS_LIBRARY: buckets.library_css,
            }.get(category, buckets.component_css).append(path)
            continue
        if lower == "public/index.html":
            continue
        if is_static_asset(path) or path not in text_paths:
            buckets.public_assets.append(path)
            if lower.endswith(FONT_EXTENSIONS):
                buckets.fonts.append(path)

    known = set(all_paths)
    referenced: set[str] = set()
    for path in sorted(analyses):
        for hint in analyses[path].assets:
            if hint.kind != "image" or not hint.reference:
                continue
            ref = hint.reference
            if ref.startswith("."):
                candidate = posixpath.normpath(posixpath.join(posixpath.dirname(path), ref))
            else:
                candidate = "public/" + ref.lstrip("/")
            if candidate in known:
                referenced.add(candidate)
    buckets.images = sorted(referenced)
    return buckets
