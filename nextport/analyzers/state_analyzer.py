"""State-management pattern detection and migration advice."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from ..models import AnalysisResult, StateReport
from ..rules import Rule, all_matches
from .libraries import package_name

STATE_REDUX = "redux"
STATE_CONTEXT = "context"
STATE_ZUSTAND = "zustand"
STATE_RECOIL = "recoil"
STATE_JOTAI = "jotai"
STATE_MOBX = "mobx"
STATE_REACT_QUERY = "react-query"
STATE_SWR = "swr"
STATE_LOCAL = "local-state"
STATE_NONE = "none"

# Tie-break order for the dominant pattern. Local state always loses a tie.
STATE_PATTERNS = (
    STATE_REDUX, STATE_CONTEXT, STATE_ZUSTAND, STATE_RECOIL, STATE_JOTAI,
    STATE_MOBX, STATE_REACT_QUERY, STATE_SWR, STATE_LOCAL,
)

PATTERN_LABELS = {
    STATE_REDUX: "Redux (centralized store)",
    STATE_CONTEXT: "React Context (shared context)",
    STATE_ZUSTAND: "Zustand",
    STATE_RECOIL: "Recoil",
    STATE_JOTAI: "Jotai",
    STATE_MOBX: "MobX",
    STATE_REACT_QUERY: "React Query",
    STATE_SWR: "SWR",
    STATE_LOCAL: "Local component state",
    STATE_NONE: "No state management detected",
}


@dataclass(frozen=True)
class StateMarkers:
    """The per-file facts the state rules inspect."""
    hooks: frozenset[str]
    calls: frozenset[str]
    packages: frozenset[str]
    uses_store: bool
    uses_shared_context: bool

    @classmethod
    def from_analysis(cls, analysis: AnalysisResult) -> StateMarkers:
        return cls(
            hooks=frozenset(analysis.details.hooks),
            calls=frozenset(analysis.details.calls),
            packages=frozenset(package_name(spec) for spec in analysis.imports),
            uses_store=analysis.details.uses_store,
            uses_shared_context=analysis.uses_shared_context,
        )


def _markers(hooks=(), calls=(), packages=()):
    hooks, calls, packages = frozenset(hooks), frozenset(calls), frozenset(packages)
    return lambda m: bool(m.hooks & hooks or m.calls & calls or m.packages & packages)


STATE_RULES: tuple[Rule[StateMarkers, str], ...] = (
    Rule(
        "redux",
        lambda m: m.uses_store or _markers(
            hooks=("useSelector", "useDispatch", "useStore"),
            calls=("createStore", "configureStore", "createSlice", "combineReducers", "connect"),
            packages=("redux", "react-redux", "@reduxjs/toolkit"),
        )(m),
        STATE_REDUX,
    ),
    Rule(
        "context",
        lambda m: m.uses_shared_context or _markers(hooks=("useContext",), calls=("createContext",))(m),
        STATE_CONTEXT,
    ),
    Rule("zustand", _markers(packages=("zustand",)), STATE_ZUSTAND),
    Rule("recoil", _markers(
        hooks=("useRecoilState", "useRecoilValue", "useSetRecoilState"), packages=("recoil",),
    ), STATE_RECOIL),
    Rule("jotai", _markers(hooks=("useAtom", "useAtomValue", "useSetAtom"), packages=("jotai",)), STATE_JOTAI),
    Rule("mobx", _markers(
        calls=("makeAutoObservable", "makeObservable"),
        packages=("mobx", "mobx-react", "mobx-react-lite"),
    ), STATE_MOBX),
    Rule("react-query", _markers(
        hooks=("useQuery", "useMutation", "useQueryClient", "useInfiniteQuery"),
        packages=("react-query", "@tanstack/react-query"),
    ), STATE_REACT_QUERY),
    Rule("swr", _markers(hooks=("useSWR", "useSWRInfinite"), packages=("swr",)), STATE_SWR),
    Rule("local-state", _markers(hooks=("useState", "useReducer")), STATE_LOCAL),
)

RECOMMENDATIONS: dict[str, tuple[str, ...]] = {
    STATE_REDUX: (
        "Use Redux Toolkit for a simpler store setup in Next.js",
        'Add the "use client" directive to every component connected to the store',
        "Wrap the application with the Redux Provider in pages/_app",
    ),
    STATE_CONTEXT: (
        "Centralize context providers in pages/_app",
        'Add the "use client" directive to context provider components',
    ),
    STATE_ZUSTAND: (
        "Keep Zustand store initialization in its own module",
        'Add the "use client" directive to files that read Zustand stores',
    ),
    STATE_RECOIL: (
        "Wrap the application with RecoilRoot in pages/_app",
        'Add the "use client" directive to components that use Recoil atoms',
    ),
    STATE_JOTAI: (
        "Wrap the application with the Jotai Provider in pages/_app",
        'Add the "use client" directive to components that use Jotai atoms',
    ),
    STATE_MOBX: (
        'Add the "use client" directive to MobX stores and observer components',
        "Move logic that does not observe state into server-rendered components",
    ),
    STATE_REACT_QUERY: (
        "Set up QueryClientProvider in pages/_app",
        'Add the "use client" directive to components using useQuery or useMutation',
    ),
    STATE_SWR: (
        "SWR works with Next.js as is; consider prefetching with getStaticProps fallback data",
        'Add the "use client" directive to components using useSWR',
    ),
    STATE_LOCAL: (
        "Local component state carries over to Next.js unchanged",
        'Add the "use client" directive to components using useState or useReducer',
    ),
    STATE_NONE: (),
}

GENERAL_RECOMMENDATIONS = (
    "Separate data fetching from state management where possible",
    "Render components without client state on the server",
)


def patterns_for(analysis: AnalysisResult) -> list[str]:
    """Every state category a file belongs to, in enumeration order."""
    return all_matches(STATE_RULES, StateMarkers.from_analysis(analysis))


def dominant_pattern(counts: Mapping[str, int]) -> str:
    """Highest count wins; ties go to the earlier category in STATE_PATTERNS."""
    best, best_count = STATE_NONE, 0
    for pattern in STATE_PATTERNS:
        count = counts.get(pattern, 0)
        if count > best_count:
            best, best_count = pattern, count
    return best


def analyze_state(analyses: Mapping[str, AnalysisResult]) -> StateReport:
    """Tally files per state category and pick the dominant pattern."""
    counts = {pattern: 0 for pattern in STATE_PATTERNS}
    files_by_pattern: dict[str, list[str]] = {pattern: [] for pattern in STATE_PATTERNS}
    for path in sorted(analyses):
        for pattern in patterns_for(analyses[path]):
            counts[pattern] += 1
            files_by_pattern[pattern].append(path)

    dominant = dominant_pattern(counts)
    recommendations = list(RECOMMENDATIONS[dominant]) + list(GENERAL_RECOMMENDATIONS)
    return StateReport(
        counts=counts,
        files_by_pattern={k: v for k, v in files_by_pattern.items() if v},
        dominant=dominant,
        recommendations=recommendations,
    )
