"""Rendering-strategy decision table."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from ..models import CSR, ISR, SSG, SSR, AnalysisResult
from ..rules import Rule, first_match, first_matching_rule


@dataclass(frozen=True)
class StrategyInput:
    has_data_fetching: bool
    uses_time_sensitive_call: bool
    is_client_only: bool
    uses_state_binding: bool
    uses_shared_context: bool
    dynamic_segment: bool


STRATEGY_RULES: tuple[Rule[StrategyInput, str], ...] = (
    Rule(
        "time-sensitive-fetch",
        lambda f: f.has_data_fetching and f.uses_time_sensitive_call,
        SSR,
    ),
    Rule(
        "dynamic-static-fetch",
        lambda f: f.has_data_fetching and not f.is_client_only and f.dynamic_segment,
        ISR,
    ),
    Rule(
        "static-fetch",
        lambda f: f.has_data_fetching and not f.is_client_only,
        SSG,
    ),
    Rule(
        "client-fetch",
        lambda f: f.has_data_fetching and f.is_client_only,
        SSR,
    ),
    Rule(
        "static-markup",
        lambda f: not (f.is_client_only or f.uses_state_binding or f.uses_shared_context),
        SSG,
    ),
)


def is_dynamic_segment(path: str, route_params: Iterable[str] = (), pagination_hint: bool = False) -> bool:
    """True when the file path or its route points at a per-item or paginated page."""
    return "[" in path or bool(tuple(route_params)) or pagination_hint


def strategy_input(
    analysis: AnalysisResult, path: str = "", route_params: Iterable[str] = (),
) -> StrategyInput:
    details = analysis.details
    return StrategyInput(
        has_data_fetching=analysis.has_data_fetching,
        uses_time_sensitive_call=details.uses_time_sensitive_call,
        is_client_only=analysis.is_client_only,
        uses_state_binding=analysis.uses_state_binding,
        uses_shared_context=analysis.uses_shared_context,
        dynamic_segment=is_dynamic_segment(path, route_params, details.has_pagination_hint),
    )


def recommend_strategy(
    analysis: AnalysisResult, path: str = "", route_params: Iterable[str] = (),
) -> str:
    """Return CSR, SSR, SSG or ISR for a file's facts."""
    return first_match(STRATEGY_RULES, strategy_input(analysis, path, route_params), CSR)


def explain_strategy(
    analysis: AnalysisResult, path: str = "", route_params: Iterable[str] = (),
) -> str:
    """Name of the decision row that produced the recommendation."""
    rule = first_matching_rule(STRATEGY_RULES, strategy_input(analysis, path, route_params))
    return rule.name if rule else "interactive"
