"""The ordered rewrite pipeline.

Each pass is ``(text, AnalysisResult, TransformContext) -> text``, idempotent,
and returns its input unchanged when its trigger is absent. A pass that
raises aborts the pipeline for that file only: the original text is kept
and a warning is recorded.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Sequence

from ..errors import TransformError
from ..models import AnalysisResult, Diagnostic
from .api_routes import adapt_api_route
from .assets import rewrite_assets
from .context import TransformContext
from .data_fetching import add_data_loader
from .directive import add_client_directive
from .env import rename_env_references
from .head import extract_head_metadata
from .hooks import rewrite_router_hooks
from .imports import normalize_import_paths, rewrite_router_imports
from .links import rewrite_links

logger = logging.getLogger(__name__)

PassFunction = Callable[[str, AnalysisResult, TransformContext], str]


@dataclass(frozen=True)
class TransformPass:
    name: str
    apply: PassFunction


PASSES: tuple[TransformPass, ...] = (
    TransformPass("import-paths", normalize_import_paths),
    TransformPass("imports", rewrite_router_imports),
    TransformPass("hooks", rewrite_router_hooks),
    TransformPass("links", rewrite_links),
    TransformPass("client-directive", add_client_directive),
    TransformPass("metadata", extract_head_metadata),
    TransformPass("assets", rewrite_assets),
    TransformPass("data-loader", add_data_loader),
    TransformPass("env", rename_env_references),
    TransformPass("api-handler", adapt_api_route),
)


@dataclass
class TransformResult:
    text: str
    applied: list[str] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)
    failed: bool = False


def run_pipeline(
    text: str,
    analysis: AnalysisResult,
    context: TransformContext,
    passes: Sequence[TransformPass] = PASSES,
) -> TransformResult:
    """Run ``passes`` in order over ``text``."""
    current = text
    applied: list[str] = []
    for transform in passes:
        try:
            rewritten = transform.apply(current, analysis, context)
        except Exception as e:
            error = TransformError(context.path, transform.name, e)
            logger.warning("%s: %s", context.path, error, exc_info=True)
            return TransformResult(
                text=text,
                diagnostics=[Diagnostic("warning", f"{error}; original content kept", context.path)],
                failed=True,
            )
        if rewritten != current:
            applied.append(transform.name)
            current = rewritten
    if applied:
        logger.debug("Rewrote %s: %s", context.path, ", ".join(applied))
    return TransformResult(text=current, applied=applied)
