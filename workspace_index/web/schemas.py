from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class FileInput(BaseModel):
    path: str
    content: str


class IndexRequest(BaseModel):
    files: List[FileInput]
    clear: bool = True


class SyncRequest(BaseModel):
    path: str


class JobResponse(BaseModel):
    message: str
    status: str
    total_files: Optional[int] = None


class StatusResponse(BaseModel):
    indexed: bool
    chunks: int
    status: str
    progress: Optional[Dict[str, Any]] = None
    stats: Optional[Dict[str, Any]] = None
    error: Optional[str] = None


class SearchRequest(BaseModel):
    query: str
    limit: int = Field(default=3, ge=1, le=100)


class SearchResult(BaseModel):
    id: int
    file_path: str
    start_line: int
    end_line: int
    language: str
    type: str
    score: float
    content: str


class SearchResponse(BaseModel):
    results: List[SearchResult]


class ContextRequest(SearchRequest):
    max_tokens: Optional[int] = Field(default=None, ge=1)


class ContextResponse(BaseModel):
    context: str
    total_tokens: int
    hits: int
