"""Data-loader skeletons for pages that fetch on the client."""
from __future__ import annotations

import re

from ..models import ISR, ROLE_PAGE, SSG, SSR, AnalysisResult
from .context import TransformContext

DEFAULT_ENDPOINT = "https://api.example.com/data"

FETCH_URL = re.compile(r"""\b(?:fetch|axios\.get|axios)\(\s*(['"`])([^'"`$\n]+)\1""")
EXISTING_LOADER = re.compile(r"\bexport\s+(?:async\s+)?(?:function\s+|const\s+)(?:getServerSideProps|getStaticProps)\b")
QUERY_READ = re.compile(r"\brouter\.query\b|\buseRouter\(\)\.query\b")

SERVER_SIDE_TEMPLATE = """\
export async function getServerSideProps(context) {{
  try {{
    const res = await fetch('{url}');
    const data = await res.json();
    return {{ props: {{ data }} }};
  }} catch (error) {{
    return {{ props: {{ data: null }} }};
  }}
}}
"""

STATIC_TEMPLATE = """\
export async function getStaticProps() {{
  try {{
    const res = await fetch('{url}');
    const data = await res.json();
    return {{ props: {{ data }}{revalidate} }};
  }} catch (error) {{
    return {{ props: {{ data: null }}{revalidate} }};
  }}
}}
"""

STATIC_PATHS_TEMPLATE = """\
export async function getStaticPaths() {
  return { paths: [], fallback: 'blocking' };
}
"""


def endpoint_of(text: str) -> str:
    """First literal URL passed to ``fetch``/``axios``; a placeholder otherwise."""
    match = FETCH_URL.search(text)
    return match.group(2) if match else DEFAULT_ENDPOINT


def loader_skeleton(strategy: str, url: str, revalidate_seconds: int, needs_paths: bool) -> str:
    if strategy == SSR:
        return SERVER_SIDE_TEMPLATE.format(url=url)
    revalidate = f", revalidate: {revalidate_seconds}" if strategy == ISR else ""
    skeleton = STATIC_TEMPLATE.format(url=url, revalidate=revalidate)
    if needs_paths:
        skeleton = STATIC_PATHS_TEMPLATE + "\n" + skeleton
    return skeleton


def add_data_loader(text: str, analysis: AnalysisResult, context: TransformContext) -> str:
    """Append ``getServerSideProps`` or ``getStaticProps`` to a fetching page without a loader."""
    if context.role != ROLE_PAGE or not analysis.has_data_fetching or analysis.details.has_data_loader:
        return text
    strategy = context.strategy or analysis.recommended_rendering_strategy
    if strategy not in (SSR, SSG, ISR) or EXISTING_LOADER.search(text):
        return text
    needs_paths = strategy in (SSG, ISR) and bool(QUERY_READ.search(text))
    skeleton = loader_skeleton(strategy, endpoint_of(text), context.revalidate_seconds, needs_paths)
    body = text if text.endswith("\n") else text + "\n"
    return body + "\n" + skeleton
