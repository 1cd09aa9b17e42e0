"""Main FastAPI application.

Run with ``uvicorn workspace_index.web.app:create_app --factory``.
"""

import logging
from contextlib import asynccontextmanager
from typing import Dict, Optional

from fastapi import APIRouter, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import load_config
from ..core import Embedder, LineChunker, make_embedder
from ..indexing import WorkspaceIndexer
from ..search import WorkspaceSearcher
from ..storage import VectorStore, make_vector_store
from .routes import indexing, search
from .state import WorkspaceState

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Close the store on shutdown
    logger.info("Closing workspace index store")
    app.state.workspace.store.close()


def create_app(
    cfg: Optional[Dict] = None,
    embedder: Optional[Embedder] = None,
    store: Optional[VectorStore] = None,
) -> FastAPI:
    cfg = cfg or load_config()
    logging.basicConfig(level=cfg.get("log_level", "INFO"))

    embedder = embedder or make_embedder(cfg)
    store = store or make_vector_store(cfg)
    window = int(cfg.get("chunking", {}).get("window_lines", 50))

    app = FastAPI(title="Workspace Index", lifespan=lifespan)

    # Setup CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.workspace = WorkspaceState(
        cfg=cfg,
        embedder=embedder,
        store=store,
        indexer=WorkspaceIndexer(embedder=embedder, store=store, chunker=LineChunker(window=window)),
        searcher=WorkspaceSearcher(embedder=embedder, store=store),
    )

    api_router = APIRouter(prefix="/api")

    api_router.include_router(indexing.router)
    api_router.include_router(search.router)

    app.include_router(api_router)

    return app
