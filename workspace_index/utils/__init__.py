"""Utility functions for workspace_index."""

from .file_utils import (
    file_size_kb,
    is_binary_file,
    read_text,
)

__all__ = [
    "file_size_kb",
    "is_binary_file",
    "read_text",
]
