"""Ordered (predicate, effect) rule tables.

Every heuristic in the analyzers is written as a table of ``Rule`` rows
and evaluated by the two functions here, so precedence is visible in one
place and each row can be tested on its own.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, TypeVar

S = TypeVar("S")
E = TypeVar("E")


@dataclass(frozen=True)
class Rule(Generic[S, E]):
    """A named row: when ``predicate(subject)`` holds, the rule yields ``effect``."""
    name: str
    predicate: Callable[[S], bool]
    effect: E

    def matches(self, subject: S) -> bool:
        return bool(self.predicate(subject))


def first_match(rules: Iterable[Rule[S, E]], subject: S, default: Any = None) -> Any:
    """Evaluate rules top to bottom and return the effect of the first hit."""
    for rule in rules:
        if rule.matches(subject):
            return rule.effect
    return default


def first_matching_rule(rules: Iterable[Rule[S, E]], subject: S) -> Rule[S, E] | None:
    for rule in rules:
        if rule.matches(subject):
            return rule
    return None


def all_matches(rules: Iterable[Rule[S, E]], subject: S) -> list[E]:
    """Return the effects of every matching rule, in table order."""
    return [rule.effect for rule in rules if rule.matches(subject)]


def contains_any(*needles: str) -> Callable[[str], bool]:
    """Predicate factory: the subject string contains one of ``needles``."""
    return lambda text: any(needle in text for needle in needles)


def member_of(*values: str) -> Callable[[str], bool]:
    """Predicate factory: the subject equals one of ``values``."""
    pool = frozenset(values)
    return lambda value: value in pool
