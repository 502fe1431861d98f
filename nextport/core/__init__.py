"""Service layer for nextport.

All services return typed dataclasses. Services never import from
nextport.ui, nextport.cli, or typer. The CLI handles presentation.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Optional


@dataclass(frozen=True)
class ConversionOptions:
    """Knobs for one conversion run."""

    max_workers: int = 1
    time_budget_ms: int = 0
    client_directive: bool = True
    app_name: str = "next-app"
    isr_revalidate_seconds: int = 60
    extensions: tuple[str, ...] = (".js", ".jsx", ".ts", ".tsx", ".json")
    aliases: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Optional[Any] = None, **overrides: Any) -> ConversionOptions:
        """Build options from the resolved config, then apply non-None overrides.

        Args:
            config: A ConfigService; the module singleton when omitted.
            overrides: Field values that win over the config (CLI flags).
        """
        if config is None:
            from .config_service import get_config_service

            config = get_config_service()
        options = cls(
            max_workers=int(config.get("conversion.max_workers", 1)),
            time_budget_ms=int(config.get("conversion.time_budget_ms", 0)),
            client_directive=bool(config.get("conversion.client_directive", True)),
            app_name=str(config.get("conversion.app_name", "next-app")),
            isr_revalidate_seconds=int(config.get("conversion.isr_revalidate_seconds", 60)),
            extensions=tuple(config.get("resolver.extensions", cls.extensions)),
            aliases=dict(config.get("resolver.aliases", {}) or {}),
        )
        return replace(options, **{k: v for k, v in overrides.items() if v is not None})
