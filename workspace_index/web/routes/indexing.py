"""Indexing routes with SSE support."""

import asyncio
import json
import logging
from pathlib import Path
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sse_starlette.sse import EventSourceResponse

from ...core.models import WorkspaceFile
from ...errors import StorageError
from ...indexing import is_workspace_indexed, sync_workspace
from ..schemas import IndexRequest, JobResponse, StatusResponse, SyncRequest
from ..state import WorkspaceState, get_state

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/workspace")

PROGRESS_POLL_SECONDS = 0.5


def index_files_task(state: WorkspaceState, files: List[WorkspaceFile], clear: bool) -> None:
    """Background task: optionally clear the store, then index ``files``."""
    job = state.job
    try:
        if clear:
            state.store.clear()
        stats = state.indexer.index(files, on_progress=job.update, cancel_event=job.cancel_event)
        job.finish(stats)
    except Exception as e:
        logger.exception("Workspace indexing failed")
        job.fail(str(e))


def sync_folder_task(state: WorkspaceState, root: Path) -> None:
    """Background task: collect files under ``root`` and rebuild the index."""
    job = state.job
    try:
        stats = sync_workspace(
            root,
            state.cfg,
            on_progress=job.update,
            indexer=state.indexer,
            cancel_event=job.cancel_event,
        )
        job.finish(stats)
    except Exception as e:
        logger.exception(f"Workspace sync of {root} failed")
        job.fail(str(e))


@router.get("/status", response_model=StatusResponse)
def workspace_status(state: WorkspaceState = Depends(get_state)):
    snap = state.job.snapshot()
    try:
        chunks = state.store.count()
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Index unavailable: {e}")
    return StatusResponse(
        indexed=chunks > 0,
        chunks=chunks,
        status=snap["status"],
        progress=snap["progress"],
        stats=snap["stats"],
        error=snap["error"],
    )


@router.post("/index", response_model=JobResponse)
async def start_indexing(
    request: IndexRequest,
    background_tasks: BackgroundTasks,
    state: WorkspaceState = Depends(get_state),
):
    """Index the posted files in the background."""
    if not state.job.start():
        raise HTTPException(status_code=409, detail="Workspace is already being indexed")

    files = [WorkspaceFile(path=f.path, content=f.content) for f in request.files]
    logger.info(f"Starting background indexing of {len(files)} files")
    background_tasks.add_task(index_files_task, state, files, request.clear)

    return JobResponse(
        message=f"Indexing started for {len(files)} files",
        status="indexing",
        total_files=len(files),
    )


@router.post("/sync", response_model=JobResponse)
async def start_sync(
    request: SyncRequest,
    background_tasks: BackgroundTasks,
    state: WorkspaceState = Depends(get_state),
):
    """Rebuild the index from a local folder in the background."""
    root = Path(request.path).expanduser()
    if not root.exists():
        raise HTTPException(status_code=404, detail="Folder not found")
    if not root.is_dir():
        raise HTTPException(status_code=400, detail="Path is not a directory")

    if not state.job.start():
        raise HTTPException(status_code=409, detail="Workspace is already being indexed")

    logger.info(f"Starting background sync of {root}")
    background_tasks.add_task(sync_folder_task, state, root)
    return JobResponse(message=f"Sync started for '{root}'", status="indexing")


@router.get("/index/progress")
async def index_progress(state: WorkspaceState = Depends(get_state)):
    """SSE endpoint for real-time indexing progress."""

    async def event_generator():
        while True:
            snap = state.job.snapshot()
            yield {"event": "progress", "data": json.dumps(snap)}
            if snap["status"] != "indexing":
                break
            await asyncio.sleep(PROGRESS_POLL_SECONDS)

    return EventSourceResponse(event_generator())


@router.post("/index/cancel")
async def cancel_indexing(state: WorkspaceState = Depends(get_state)):
    """Cancel ongoing indexing before its next file."""
    if not state.job.cancel():
        raise HTTPException(status_code=400, detail="Workspace is not being indexed")
    return {"success": True, "message": "Cancellation requested"}


@router.get("/linked")
def workspace_linked(state: WorkspaceState = Depends(get_state)):
    """Whether any workspace has been indexed into the store."""
    try:
        return {"linked": is_workspace_indexed(state.store)}
    except StorageError as e:
        raise HTTPException(status_code=500, detail=f"Index unavailable: {e}")
