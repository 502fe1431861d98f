"""Environment reference renaming to the ``process.env.NEXT_PUBLIC_`` form."""
from __future__ import annotations

import re

from ..analyzers.env_analyzer import target_name
from ..models import AnalysisResult
from .context import TransformContext

ENV_REFERENCE = re.compile(r"\b(process\.env|import\.meta\.env)\.([A-Za-z_][A-Za-z0-9_]*)\b")

# import.meta.env built-ins with a NODE_ENV equivalent
META_BUILTINS = {
    "MODE": "process.env.NODE_ENV",
    "DEV": "(process.env.NODE_ENV !== 'production')",
    "PROD": "(process.env.NODE_ENV === 'production')",
}


def rename_env_references(text: str, analysis: AnalysisResult, context: TransformContext) -> str:
    def rename(match: re.Match) -> str:
        source, name = match.group(1), match.group(2)
        if source == "import.meta.env" and name in META_BUILTINS:
            return META_BUILTINS[name]
        target = context.env_renames.get(name) or target_name(name)
        if source == "process.env" and target == name:
            return match.group(0)
        return f"process.env.{target}"

    return ENV_REFERENCE.sub(rename, text)
