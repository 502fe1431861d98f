"""``"use client"`` directive insertion."""
from __future__ import annotations

from ..models import ROLE_API, AnalysisResult
from .context import TransformContext

CLIENT_DIRECTIVES = ('"use client"', "'use client'")
CLIENT_DIRECTIVE_LINE = '"use client";\n\n'


def add_client_directive(text: str, analysis: AnalysisResult, context: TransformContext) -> str:
    if not (analysis.is_client_only and context.client_directive) or context.role == ROLE_API:
        return text
    if text.lstrip().startswith(CLIENT_DIRECTIVES):
        return text
    return CLIENT_DIRECTIVE_LINE + text
