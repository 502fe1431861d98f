"""Source rewriting: import-path normalization followed by the ordered passes."""

from .context import TransformContext
from .pipeline import PASSES, TransformPass, TransformResult, run_pipeline

__all__ = ["PASSES", "TransformContext", "TransformPass", "TransformResult", "run_pipeline"]
