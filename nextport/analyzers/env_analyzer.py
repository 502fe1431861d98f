"""Environment variable discovery and renaming."""
from __future__ import annotations

import re
from typing import Iterable, Mapping

from ..models import AnalysisResult, EnvVarInfo, SourceFile

ENV_LINE = re.compile(r"^\s*(?:export\s+)?([A-Za-z0-9_]+)\s*=\s*(.*)$")
ENV_FILE = re.compile(r"(?:^|/)\.env(?:\.[\w.-]+)?$")

NEXT_PUBLIC_PREFIX = "NEXT_PUBLIC_"
CLIENT_PREFIXES = ("REACT_APP_", "VITE_", NEXT_PUBLIC_PREFIX)
BUILTIN_VARIABLES = frozenset({"NODE_ENV", "PUBLIC_URL", "BASE_URL", "MODE", "DEV", "PROD", "SSR"})


def is_env_file(path: str) -> bool:
    return bool(ENV_FILE.search(path)) and not path.endswith((".example", ".sample", ".template"))


def parse_env_file(text: str) -> dict[str, str]:
    """KEY=value lines; comments and blank lines ignored, surrounding quotes removed."""
    values: dict[str, str] = {}
    for line in text.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        match = ENV_LINE.match(stripped)
        if match:
            value = match.group(2).strip()
            if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
                value = value[1:-1]
            values[match.group(1)] = value
    return values


def target_name(name: str) -> str:
    """Client-exposed names move to the NEXT_PUBLIC_ prefix."""
    for prefix in ("REACT_APP_", "VITE_"):
        if name.startswith(prefix):
            return NEXT_PUBLIC_PREFIX + name[len(prefix):]
    return name


def analyze_env(
    sources: Iterable[SourceFile],
    analyses: Mapping[str, AnalysisResult],
) -> dict[str, EnvVarInfo]:
    """Combine .env definitions with ``process.env`` reads, keyed by original name."""
    variables: dict[str, EnvVarInfo] = {}

    def entry(name: str) -> EnvVarInfo:
        if name not in variables:
            variables[name] = EnvVarInfo(name=name, target_name=target_name(name))
        return variables[name]

    for source in sorted(sources, key=lambda f: f.path):
        if not is_env_file(source.path):
            continue
        for name, value in parse_env_file(source.content).items():
            info = entry(name)
            info.defined_in.append(source.path)
            info.has_value = info.has_value or bool(value)

    for path in sorted(analyses):
        analysis = analyses[path]
        for name in analysis.details.env_vars:
            if name in BUILTIN_VARIABLES:
                continue
            info = entry(name)
            if path not in info.used_in:
                info.used_in.append(path)
            if analysis.is_client_only:
                info.is_public = True

    for info in variables.values():
        if info.name.startswith(CLIENT_PREFIXES):
            info.is_public = True
        if info.is_public and not info.target_name.startswith(NEXT_PUBLIC_PREFIX):
            info.target_name = NEXT_PUBLIC_PREFIX + info.name
    return dict(sorted(variables.items()))
