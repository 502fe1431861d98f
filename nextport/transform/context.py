"""Per-file inputs the passes need beyond the text and its AnalysisResult."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Optional

from ..models import ROLE_COMPONENT


@dataclass(frozen=True)
class TransformContext:
    path: str = ""
    output_path: str = ""
    role: str = ROLE_COMPONENT
    strategy: Optional[str] = None
    # original specifier -> specifier relative to the output location
    import_targets: Mapping[str, str] = field(default_factory=dict)
    dropped_imports: frozenset[str] = frozenset()
    env_renames: Mapping[str, str] = field(default_factory=dict)
    client_directive: bool = True
    revalidate_seconds: int = 60
