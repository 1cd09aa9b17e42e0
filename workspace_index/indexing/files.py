"""Workspace file selection: walk a directory and read eligible files."""

from __future__ import annotations

import fnmatch
import logging
import os
from pathlib import Path
from typing import Dict, Iterable, List

from ..config import DEFAULT_EXCLUDE_PATTERNS, DEFAULT_INCLUDE_PATTERNS
from ..config.manager import _expand_patterns
from ..core.models import WorkspaceFile
from ..errors import UnsupportedEnvironmentError
from ..utils import file_size_kb, is_binary_file, read_text

logger = logging.getLogger(__name__)

# Dependency and build folders never descended into, wherever they appear.
PRUNED_DIRS = {
    "node_modules",
    "__pycache__",
    "dist",
    "build",
    "venv",
    "target",
}


def _match_any(path: str, globs: List[str]) -> bool:
    return any(fnmatch.fnmatch(path, g) for g in globs)


def _check_traversable(root: Path) -> None:
    if not root.is_dir():
        raise UnsupportedEnvironmentError(f"Cannot traverse {root}: not a directory")
    try:
        os.listdir(root)
    except OSError as e:
        raise UnsupportedEnvironmentError(f"Cannot traverse {root}: {e}") from e


def iter_files(root: Path, cfg: Dict) -> Iterable[Path]:
    """Yield eligible files under ``root`` ordered by relative path.

    Hidden directories and dependency folders are skipped, as are files that
    miss the include globs, hit the exclude globs, are too large, or look
    binary.
    """
    root = Path(root)
    _check_traversable(root)

    include_globs = cfg.get("include_globs", _expand_patterns(DEFAULT_INCLUDE_PATTERNS))
    exclude_globs = cfg.get("exclude_globs", _expand_patterns(DEFAULT_EXCLUDE_PATTERNS))
    max_kb = int(cfg.get("max_file_size_kb", 512))

    found: List[Path] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = [d for d in dirnames if not d.startswith(".") and d not in PRUNED_DIRS]
        for fname in filenames:
            p = Path(dirpath) / fname
            rel = p.relative_to(root).as_posix()
            if _match_any(rel, exclude_globs):
                continue
            if not _match_any(rel, include_globs):
                continue
            try:
                if file_size_kb(p) > max_kb:
                    logger.debug(f"Skipping {rel}: larger than {max_kb} KiB")
                    continue
            except OSError:
                continue
            if is_binary_file(p):
                continue
            found.append(p)

    found.sort(key=lambda p: p.relative_to(root).as_posix())
    yield from found


def collect_workspace_files(root: Path, cfg: Dict) -> List[WorkspaceFile]:
    """Read every eligible file under ``root`` as a ``WorkspaceFile``."""
    root = Path(root)
    files: List[WorkspaceFile] = []
    for fp in iter_files(root, cfg):
        rel = fp.relative_to(root).as_posix()
        try:
            content = read_text(fp)
        except OSError as e:
            logger.warning(f"Skipping unreadable file {rel}: {e}")
            continue
        files.append(WorkspaceFile(path=rel, content=content))

    logger.info(f"Collected {len(files)} files from {root}")
    return files
