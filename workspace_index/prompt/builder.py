"""LLM context building from search hits."""

from __future__ import annotations

import logging
from typing import Callable, List, Sequence, Tuple

from ..core.models import ScoredChunk

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 4000


# ----------------------------
# Token estimation
# ----------------------------

def _get_token_counter(model: str | None = None) -> Callable[[str], int]:
    """
    Return a token counting function.
    - Use tiktoken if available.
    - Fallback to heuristic otherwise.
    """
    try:
        import tiktoken  # type: ignore

        # Default to a common encoding if model is unknown.
        encoding = tiktoken.encoding_for_model(model) if model else tiktoken.get_encoding("cl100k_base")

        def count_tokens(text: str) -> int:
            return len(encoding.encode(text))

        return count_tokens
    except Exception as e:
        logger.debug(f"tiktoken unavailable, estimating tokens from length: {e}")

        # ~3.5 chars/token, slightly conservative for code
        def count_tokens(text: str) -> int:
            return max(1, int(len(text) / 3.5))

        return count_tokens


def estimate_tokens(text: str) -> int:
    """Estimate token count with fallback heuristic."""
    counter = _get_token_counter()
    return counter(text)


# ----------------------------
# Context building
# ----------------------------

def _build_header(query: str) -> str:
    return "\n".join([
        "# Workspace Context",
        f"Query: {query.strip()}",
        "",
        "## Code Fragments",
    ])


def _format_context_item(hit: ScoredChunk) -> str:
    meta = hit.metadata
    return (
        f"\n### {hit.file_path}:{meta.start_line}-{meta.end_line} (score={hit.score:0.4f})\n"
        f"```{meta.language}\n{hit.content.rstrip()}\n```\n"
    )


def build_context(
    query: str,
    hits: Sequence[ScoredChunk],
    max_tokens: int = DEFAULT_MAX_TOKENS,
    model: str | None = None,
) -> Tuple[str, int]:
    """Render hits, in rank order, into a context block within ``max_tokens``.

    Items are added until the next one would exceed the budget; lower
    ranked hits are dropped rather than truncated.

    Returns:
        (context text, token count of the text)
    """
    count_tokens = _get_token_counter(model)

    parts: List[str] = [_build_header(query)]
    text = parts[0]

    for hit in hits:
        candidate = "".join(parts + [_format_context_item(hit)])
        if count_tokens(candidate) > max_tokens:
            logger.debug(f"Context budget reached at {hit.file_path}; dropping remaining hits")
            break
        parts.append(_format_context_item(hit))
        text = candidate

    return text, count_tokens(text)
