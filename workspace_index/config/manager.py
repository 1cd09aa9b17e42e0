"""Configuration management for workspace_index."""

from __future__ import annotations

import copy
import hashlib
import json
import logging
import os
from pathlib import Path
from typing import Dict, List, Optional

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".workspace_index.json"


DEFAULT_INCLUDE_PATTERNS: List[str] = [
    "*.py", "*.js", "*.ts", "*.tsx", "*.jsx",
    "*.go", "*.java", "*.kt", "*.cs",
    "*.rb", "*.php", "*.rs",
    "*.c", "*.h", "*.cpp", "*.hpp",
    "*.swift",
]

DEFAULT_EXCLUDE_PATTERNS: List[str] = [
    ".git/**",
    "node_modules/**",
    "dist/**",
    "build/**",
    ".venv/**",
    "venv/**",
    "__pycache__/**",
    ".workspace_index/**",
    "target/**",
    ".next/**",
    ".idea/**",
    ".vscode/**",
    ".env",
    ".env.*",
]


def default_home() -> Path:
    """Directory holding the local index (``~/.workspace_index``)."""
    return Path(os.getenv("WORKSPACE_INDEX_HOME", str(Path.home() / ".workspace_index")))


DEFAULT_CONFIG: Dict = {
    "max_file_size_kb": 512,
    "log_level": "INFO",
    "chunking": {"window_lines": 50},
    "embedding": {
        "backend": "sentence_transformers",
        "sentence_transformers_model": "sentence-transformers/all-MiniLM-L6-v2",
    },
    "search": {"top_k": 3},
    "context": {"max_tokens": 4000},
    "vector_store": {
        "backend": "sqlite",
        "path": None,
        "qdrant": {
            "path": None,
            "collection": "workspace_chunks",
        },
    },
}


def expand_pattern(pattern: str) -> List[str]:
    """Expand pattern to include both root and nested versions.

    Examples:
        '*.py' -> ['*.py', '**/*.py']
        'venv/**' -> ['venv/**', '**/venv/**']
    """
    pattern = pattern.strip()
    if not pattern or pattern.startswith("#"):
        return []

    if pattern.startswith("**/"):
        return [pattern]

    if pattern.startswith("*."):
        return [pattern, "**/" + pattern]

    if "/**" in pattern:
        return [pattern, "**/" + pattern]

    return [pattern]


def _expand_patterns(patterns: List[str]) -> List[str]:
    """Expand and deduplicate patterns while preserving order."""
    out: List[str] = []
    seen: set[str] = set()
    for p in patterns:
        for ep in expand_pattern(p):
            if ep not in seen:
                seen.add(ep)
                out.append(ep)
    return out


def _deep_merge(base: Dict, override: Dict) -> Dict:
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _load_file_overrides(repo: Path) -> Dict:
    path = repo / CONFIG_FILE_NAME
    if not path.is_file():
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, OSError) as e:
        logger.warning(f"Ignoring unreadable config file {path}: {e}")
        return {}
    if not isinstance(data, dict):
        logger.warning(f"Ignoring config file {path}: expected a JSON object")
        return {}
    return data


def load_config(repo: Optional[Path] = None) -> Dict:
    """Load configuration.

    Defaults are merged with ``<repo>/.workspace_index.json`` (when present)
    and then with environment overrides. Include/exclude globs are expanded.
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    if repo is not None:
        _deep_merge(config, _load_file_overrides(Path(repo)))

    home = default_home()
    if not config["vector_store"].get("path"):
        config["vector_store"]["path"] = str(home / "index.db")
    if not config["vector_store"]["qdrant"].get("path"):
        config["vector_store"]["qdrant"]["path"] = str(home / "qdrant")

    # Override from environment
    backend = os.getenv("WORKSPACE_INDEX_BACKEND")
    if backend:
        config["vector_store"]["backend"] = backend.strip().lower()
    model = os.getenv("WORKSPACE_INDEX_MODEL")
    if model:
        config["embedding"]["sentence_transformers_model"] = model
    level = os.getenv("WORKSPACE_INDEX_LOG_LEVEL")
    if level:
        config["log_level"] = level.upper()

    config.setdefault("include_globs", _expand_patterns(DEFAULT_INCLUDE_PATTERNS))
    config.setdefault("exclude_globs", _expand_patterns(DEFAULT_EXCLUDE_PATTERNS))

    return config


def cfg_fingerprint(cfg: Dict) -> str:
    """Generate fingerprint hash for config."""
    payload = json.dumps(cfg, sort_keys=True, ensure_ascii=False).encode("utf-8")
    return hashlib.sha256(payload).hexdigest()
