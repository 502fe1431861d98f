"""Reading a React project from disk and writing the converted project back."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable, Optional

from .core.file_tree import iter_output_files
from .errors import InputAdmissionError
from .models import BINARY_PLACEHOLDER, ConversionOutput

logger = logging.getLogger(__name__)

# Directories to always skip
SKIP_DIRS: set[str] = {
    ".git",
    ".hg",
    ".svn",
    "node_modules",
    ".node_modules",
    ".cache",
    ".parcel-cache",
    ".turbo",
    ".vercel",
    ".idea",
    ".vscode",
    ".vs",
    ".next",
    ".nuxt",
    ".output",
    "dist",
    "build",
    "out",
    "coverage",
    ".nyc_output",
    "storybook-static",
    "__pycache__",
    ".venv",
    "venv",
}

# Hidden files that are part of a React project
KEPT_DOTFILES = (".env", ".gitignore", ".eslintrc", ".prettierrc", ".babelrc", ".browserslistrc", ".nvmrc")

DEFAULT_MAX_FILE_BYTES = 2_000_000
DEFAULT_MAX_TOTAL_BYTES = 100_000_000


def _is_kept_dotfile(name: str) -> bool:
    return any(name == kept or name.startswith(kept + ".") for kept in KEPT_DOTFILES)


def decode_content(data: bytes) -> str:
    """UTF-8 text, or the binary placeholder for anything that is not."""
    if b"\x00" in data:
        return BINARY_PLACEHOLDER
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return BINARY_PLACEHOLDER


def discover_files(root: Path, skip_dirs: Iterable[str] = ()) -> list[Path]:
    """Walk the project tree and collect the files to convert."""
    skipped = SKIP_DIRS | set(skip_dirs)
    files: list[Path] = []
    for item in sorted(root.rglob("*")):
        if not item.is_file():
            continue
        parts = item.relative_to(root).parts
        if set(parts[:-1]) & skipped:
            continue
        if any(part.startswith(".") for part in parts[:-1]):
            continue
        if parts[-1].startswith(".") and not _is_kept_dotfile(parts[-1]):
            continue
        files.append(item)
    return files


def load_directory(
    root: Path,
    max_file_bytes: int = DEFAULT_MAX_FILE_BYTES,
    max_total_bytes: int = DEFAULT_MAX_TOTAL_BYTES,
    skip_dirs: Iterable[str] = (),
) -> dict[str, str]:
    """Read a project directory into a ``path -> content`` map.

    Binary files map to ``"[BINARY]"``.

    Raises:
        InputAdmissionError: If ``root`` is not a directory, or a file or the
            whole project exceeds the size limits.
    """
    root = Path(root)
    if not root.is_dir():
        raise InputAdmissionError(f"Not a directory: {root}", path=str(root))

    files: dict[str, str] = {}
    total = 0
    for path in discover_files(root, skip_dirs):
        relative = path.relative_to(root).as_posix()
        size = path.stat().st_size
        if max_file_bytes and size > max_file_bytes:
            raise InputAdmissionError(
                f"{relative} is {size:,} bytes; the limit is {max_file_bytes:,}",
                path=relative,
                limit=max_file_bytes,
            )
        total += size
        if max_total_bytes and total > max_total_bytes:
            raise InputAdmissionError(
                f"Project exceeds {max_total_bytes:,} bytes",
                path=str(root),
                limit=max_total_bytes,
            )
        files[relative] = decode_content(path.read_bytes())

    logger.info("Loaded %d files (%d bytes) from %s", len(files), total, root)
    return files


def write_output_tree(output: ConversionOutput, out_dir: Path, source_dir: Optional[Path] = None) -> list[Path]:
    """Write every emitted file under ``out_dir``.

    Binary placeholders are copied from ``source_dir`` when it is given and
    skipped otherwise.
    """
    out_dir = Path(out_dir)
    written: list[Path] = []
    for relative, content in iter_output_files(output):
        target = out_dir / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        if content == BINARY_PLACEHOLDER:
            origin = output.asset_sources.get(relative)
            if source_dir is None or origin is None:
                logger.debug("No source for binary asset %s", relative)
                continue
            shutil.copyfile(Path(source_dir) / origin, target)
        else:
            target.write_text(content, encoding="utf-8")
        written.append(target)
    logger.info("Wrote %d files to %s", len(written), out_dir)
    return written
