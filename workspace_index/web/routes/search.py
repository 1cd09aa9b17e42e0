"""Search routes."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from ...core.models import ScoredChunk
from ...errors import EmbeddingError, StorageError
from ...prompt import build_context
from ..schemas import ContextRequest, ContextResponse, SearchRequest, SearchResponse, SearchResult
from ..state import WorkspaceState, get_state

logger = logging.getLogger(__name__)

router = APIRouter()


def _run_search(state: WorkspaceState, query: str, limit: int) -> List[ScoredChunk]:
    try:
        return state.searcher.search(query, limit)
    except EmbeddingError as e:
        logger.error(f"Query could not be embedded: {e}")
        raise HTTPException(status_code=503, detail=f"Embedding model unavailable: {e}")
    except StorageError as e:
        logger.error(f"Index search failed: {e}")
        raise HTTPException(status_code=500, detail=f"Index unavailable: {e}")


@router.post("/search", response_model=SearchResponse)
def search(request: SearchRequest, state: WorkspaceState = Depends(get_state)):
    hits = _run_search(state, request.query, request.limit)

    results = []
    for hit in hits:
        meta = hit.metadata
        results.append(SearchResult(
            id=hit.id,
            file_path=hit.file_path,
            start_line=meta.start_line,
            end_line=meta.end_line,
            language=meta.language,
            type=meta.type.value,
            score=hit.score,
            content=hit.content,
        ))

    return SearchResponse(results=results)


@router.post("/context", response_model=ContextResponse)
def generate_context(request: ContextRequest, state: WorkspaceState = Depends(get_state)):
    """Generate LLM context from search results."""
    hits = _run_search(state, request.query, request.limit)
    max_tokens = request.max_tokens or int(state.cfg.get("context", {}).get("max_tokens", 4000))
    context, total_tokens = build_context(request.query, hits, max_tokens=max_tokens)
    return ContextResponse(context=context, total_tokens=total_tokens, hits=len(hits))
