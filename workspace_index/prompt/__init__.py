"""Context building for LLM prompts."""

from .builder import build_context, estimate_tokens

__all__ = [
    "build_context",
    "estimate_tokens",
]
