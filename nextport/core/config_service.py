"""Layered configuration service for nextport.

Priority (highest to lowest):
1. Environment variables (NEXTPORT_*)
2. Project config (.nextport.toml in current directory)
3. Global config (~/.config/nextport/config.toml)
4. Built-in defaults

CLI flags are applied on top by the commands themselves, through
``ConversionOptions``.
"""
from __future__ import annotations

import copy
import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import tomli_w

from ..errors import ConfigError

# TOML reading: stdlib in 3.11+, tomli on 3.10
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

logger = logging.getLogger("nextport.config")


# Default configuration values
DEFAULTS: dict[str, Any] = {
    "conversion": {
        "max_workers": 1,
        "time_budget_ms": 0,
        "client_directive": True,
        "app_name": "next-app",
        "isr_revalidate_seconds": 60,
    },
    "resolver": {
        "extensions": [".js", ".jsx", ".ts", ".tsx", ".json"],
        "aliases": {},
    },
    "loader": {
        "max_file_bytes": 2_000_000,
        "max_total_bytes": 100_000_000,
        "skip_dirs": [],
    },
    "ui": {
        "plain_output": False,
    },
}

# Mapping of env vars to config paths
ENV_VAR_MAP = {
    "NEXTPORT_MAX_WORKERS": "conversion.max_workers",
    "NEXTPORT_TIME_BUDGET_MS": "conversion.time_budget_ms",
    "NEXTPORT_CLIENT_DIRECTIVE": "conversion.client_directive",
    "NEXTPORT_APP_NAME": "conversion.app_name",
    "NEXTPORT_ISR_REVALIDATE": "conversion.isr_revalidate_seconds",
    "NEXTPORT_MAX_FILE_BYTES": "loader.max_file_bytes",
    "NEXTPORT_MAX_TOTAL_BYTES": "loader.max_total_bytes",
    "NEXTPORT_PLAIN": "ui.plain_output",
}

PROJECT_CONFIG_NAME = ".nextport.toml"


def _global_config_dir() -> Path:
    """Return the global config directory: ~/.config/nextport/."""
    return Path.home() / ".config" / "nextport"


def _global_config_path() -> Path:
    return _global_config_dir() / "config.toml"


def _project_config_path() -> Path:
    """Return the project config file path (.nextport.toml in cwd)."""
    return Path.cwd() / PROJECT_CONFIG_NAME


def _read_toml(path: Path) -> dict:
    """Read a TOML file, returning empty dict if missing or unreadable."""
    if not path.is_file():
        return {}
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning("Failed to read %s: %s", path, e)
        return {}


def _write_toml(data: dict, path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "wb") as f:
        tomli_w.dump(data, f)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge override into base (override wins)."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _get_nested(data: dict, dotted_key: str, default: Any = None) -> Any:
    """Get a value from a nested dict using dotted key notation."""
    current = data
    for key in dotted_key.split("."):
        if not isinstance(current, dict):
            return default
        current = current.get(key)
        if current is None:
            return default
    return current


def _set_nested(data: dict, dotted_key: str, value: Any) -> None:
    """Set a value in a nested dict using dotted key notation."""
    keys = dotted_key.split(".")
    current = data
    for key in keys[:-1]:
        if key not in current or not isinstance(current[key], dict):
            current[key] = {}
        current = current[key]
    current[keys[-1]] = value


def _coerce(env_var: str, raw: str, default: Any) -> Any:
    """Convert an environment string to the type of the default it overrides."""
    if isinstance(default, bool):
        lowered = raw.lower()
        if lowered in ("true", "1", "yes"):
            return True
        if lowered in ("false", "0", "no"):
            return False
        raise ConfigError(f"{env_var} must be a boolean, got {raw!r}", context={"env_var": env_var})
    if isinstance(default, int):
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(
                f"{env_var} must be an integer, got {raw!r}", context={"env_var": env_var},
            ) from None
    return raw


@dataclass
class ResolvedConfig:
    """Fully resolved configuration after merging all layers."""
    data: dict = field(default_factory=dict)
    global_config_path: Optional[Path] = None
    project_config_path: Optional[Path] = None

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """Get a config value using dotted key notation."""
        return _get_nested(self.data, dotted_key, default)


class ConfigService:
    """Layered configuration service.

    Resolves config from multiple sources with clear precedence:
    1. Environment variables (NEXTPORT_*)
    2. Project config (.nextport.toml)
    3. Global config (~/.config/nextport/config.toml)
    4. Built-in defaults
    """

    def __init__(self):
        self._resolved: Optional[ResolvedConfig] = None

    def resolve(self, force: bool = False) -> ResolvedConfig:
        """Resolve the full config from all layers."""
        if self._resolved is not None and not force:
            return self._resolved

        merged = copy.deepcopy(DEFAULTS)

        # Layer 3: Global config
        global_path = _global_config_path()
        global_data = _read_toml(global_path)
        if global_data:
            merged = _deep_merge(merged, global_data)
            logger.debug("Loaded global config from %s", global_path)

        # Layer 2: Project config
        project_path = _project_config_path()
        project_data = _read_toml(project_path)
        if project_data:
            merged = _deep_merge(merged, project_data)
            logger.debug("Loaded project config from %s", project_path)

        # Layer 1: Environment variables
        for env_var, config_path in ENV_VAR_MAP.items():
            env_value = os.environ.get(env_var)
            if env_value is not None:
                _set_nested(merged, config_path, _coerce(env_var, env_value, _get_nested(DEFAULTS, config_path)))

        self._resolved = ResolvedConfig(
            data=merged,
            global_config_path=global_path if global_path.is_file() else None,
            project_config_path=project_path if project_path.is_file() else None,
        )
        return self._resolved

    def get(self, dotted_key: str, default: Any = None) -> Any:
        """Get a resolved config value."""
        return self.resolve().get(dotted_key, default)

    def set_global(self, dotted_key: str, value: Any) -> None:
        """Set a value in the global config file."""
        path = _global_config_path()
        data = _read_toml(path)
        _set_nested(data, dotted_key, value)
        _write_toml(data, path)
        self._resolved = None
        logger.info("Set %s = %s in %s", dotted_key, value, path)

    def init_project_config(self) -> Path:
        """Create a .nextport.toml in the current directory with defaults."""
        path = _project_config_path()
        if path.exists():
            raise FileExistsError(f"Project config already exists: {path}")

        data = {
            "conversion": {
                "max_workers": 4,
                "client_directive": True,
                "isr_revalidate_seconds": DEFAULTS["conversion"]["isr_revalidate_seconds"],
            },
            "resolver": {
                "aliases": {"@": "src"},
            },
        }
        _write_toml(data, path)
        logger.info("Created project config: %s", path)
        return path

    def show(self) -> dict:
        """Return the resolved config and the files it came from."""
        resolved = self.resolve(force=True)
        return {
            "resolved": resolved.data,
            "sources": {
                "global_config": str(resolved.global_config_path) if resolved.global_config_path else None,
                "project_config": str(resolved.project_config_path) if resolved.project_config_path else None,
            },
        }

    def config_paths(self) -> dict[str, str]:
        """Return all config file locations and their existence status."""
        global_path = _global_config_path()
        project_path = _project_config_path()
        return {
            "global_config": f"{global_path} ({'exists' if global_path.is_file() else 'not found'})",
            "project_config": f"{project_path} ({'exists' if project_path.is_file() else 'not found'})",
        }


# Module-level singleton
_config_service: Optional[ConfigService] = None


def get_config_service() -> ConfigService:
    """Get or create the global ConfigService instance."""
    global _config_service
    if _config_service is None:
        _config_service = ConfigService()
    return _config_service


def reset_config_service() -> None:
    """Reset the global config service (useful for testing)."""
    global _config_service
    _config_service = None
