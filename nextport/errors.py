"""Custom exception hierarchy for nextport.

All nextport-specific exceptions derive from NextportError. Each exception
carries an optional ``context`` dict with structured metadata (file path,
pass name, grammar, etc.) that the conversion log and the CLI error
handler can render.

Exception hierarchy::

    NextportError
    ├── ParseFailure
    ├── AnalysisError
    ├── ResolutionWarning
    ├── TransformError
    ├── FatalRunError
    ├── InputAdmissionError
    └── ConfigError

Only InputAdmissionError and ConfigError ever reach a caller. The others
are file-scoped and end up as diagnostics in the ConversionLog.
"""
from __future__ import annotations

from typing import Optional


class NextportError(Exception):
    """Base class for all nextport exceptions.

    Args:
        message: Human-readable error description.
        context: Optional dict of structured metadata.
    """

    exit_code: int = 1

    def __init__(self, message: str, context: Optional[dict] = None):
        self.context = context or {}
        super().__init__(message)


# ── File-scoped Errors ─────────────────────────────────────────────

class ParseFailure(NextportError):
    """Raised when a file cannot be parsed, even in recovery mode."""

    def __init__(self, path: str, reason: str, language: str = ""):
        super().__init__(
            f"Could not parse {path or '<input>'}: {reason}",
            context={"file": path, "language": language},
        )
        self.path = path
        self.reason = reason


class AnalysisError(NextportError):
    """Raised when an analyzer step fails on a single file."""

    def __init__(self, path: str, message: str, step: str = ""):
        super().__init__(message, context={"file": path, "step": step})
        self.path = path


class ResolutionWarning(NextportError):
    """An import specifier could not be resolved against the file set."""

    exit_code = 0

    def __init__(self, path: str, specifier: str):
        super().__init__(
            f"Unresolved import '{specifier}'",
            context={"file": path, "specifier": specifier},
        )
        self.path = path
        self.specifier = specifier


class TransformError(NextportError):
    """Raised when a rewrite pass throws on a file."""

    def __init__(self, path: str, pass_name: str, cause: Exception):
        super().__init__(
            f"Pass '{pass_name}' failed: {cause}",
            context={"file": path, "pass": pass_name},
        )
        self.path = path
        self.pass_name = pass_name


# ── Run-level Errors ───────────────────────────────────────────────

class FatalRunError(NextportError):
    """Unexpected orchestrator-level failure; the run yields placeholder output."""

    exit_code = 2


class InputAdmissionError(NextportError):
    """Raised by the loader when input exceeds size or type limits."""

    def __init__(self, message: str, path: str = "", limit: int = 0):
        super().__init__(message, context={"file": path, "limit": limit})


class ConfigError(NextportError):
    """Raised when configuration is invalid or missing."""
    pass
