"""Line-window chunking for source files."""

from __future__ import annotations

import logging
from typing import List

from .models import ChunkMetadata, ChunkType, CodeChunk

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_LINES = 50
DEFAULT_LANGUAGE = "text"


def language_for_path(file_path: str) -> str:
    """Get language name from file extension.

    The lower-cased suffix after the last ``.`` of the file name, or
    ``"text"`` when the name has no suffix.
    """
    name = file_path.replace("\\", "/").rsplit("/", 1)[-1]
    _, dot, ext = name.rpartition(".")
    if not dot or not ext:
        return DEFAULT_LANGUAGE
    return ext.lower()


def split_lines(content: str) -> List[str]:
    """Split text on newlines; a trailing newline ends the last line."""
    if not content:
        return []
    lines = content.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


# -----------------------------------------------------------------------------
# Interfaces
# -----------------------------------------------------------------------------

class Chunker:
    """Abstract base class for text chunking."""

    def chunk(self, content: str, file_path: str) -> List[CodeChunk]:
        """Chunk a file's text into positioned blocks.

        Args:
            content: Full text of the file
            file_path: Relative path of the file (used for language detection)

        Returns:
            List of CodeChunk objects without embeddings
        """
        raise NotImplementedError


class LineChunker(Chunker):
    """Fixed windows of ``window`` lines, in order and non-overlapping."""

    def __init__(self, window: int = DEFAULT_WINDOW_LINES):
        if window < 1:
            raise ValueError(f"window must be at least 1 line, got {window}")
        self.window = window

    def chunk(self, content: str, file_path: str) -> List[CodeChunk]:
        lines = split_lines(content)
        if not lines:
            return []

        language = language_for_path(file_path)
        total_lines = len(lines)
        chunks: List[CodeChunk] = []

        for start_idx in range(0, total_lines, self.window):
            end_idx = min(start_idx + self.window, total_lines)
            chunks.append(
                CodeChunk(
                    file_path=file_path,
                    content="\n".join(lines[start_idx:end_idx]),
                    metadata=ChunkMetadata(
                        start_line=start_idx + 1,
                        end_line=end_idx,
                        language=language,
                        type=ChunkType.BLOCK,
                    ),
                )
            )

        logger.debug(f"File {file_path}: {total_lines} lines -> {len(chunks)} chunks")
        return chunks


def chunk_code(content: str, file_path: str, window: int = DEFAULT_WINDOW_LINES) -> List[CodeChunk]:
    """Chunk text into line windows (Functional Wrapper)."""
    return LineChunker(window=window).chunk(content, file_path)
