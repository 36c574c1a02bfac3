# Path: api/app.py
# Purpose: Expose a FastAPI application for reverse image search operations.
# Layer: api.
# Details: Provides health, index statistics, and search-by-path endpoints delegating to the core searcher.

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from ris.errors import ExtractorMismatch, InvalidArgument, NotFound, RisError, StorageUnavailable
from ris.search.searcher import SimilaritySearcher
from ris.store.base import IndexStore

DEFAULT_K = 3


class SearchRequest(BaseModel):
    """Body of a search request."""

    path: str = Field(description="Query image file or directory of query images on the server.")
    k: int = Field(default=DEFAULT_K, description="Number of results per query image.")


def _status_for(exc: RisError) -> int:
    if isinstance(exc, NotFound):
        return 404
    if isinstance(exc, InvalidArgument):
        return 400
    if isinstance(exc, ExtractorMismatch):
        return 409
    return 503


def create_app(searcher: Optional[SimilaritySearcher] = None, store: Optional[IndexStore] = None):  # type: ignore[override]
    """Create a FastAPI app instance configured with the provided searcher."""

    from fastapi import FastAPI, HTTPException

    app = FastAPI(title="image-ris API", version="0.1.0")
    index_store = store if store is not None else (searcher.store if searcher is not None else None)

    @app.get("/health")
    def health() -> Dict[str, str]:
        """Return a simple health status payload."""

        return {"status": "ok"}

    @app.get("/stats")
    def stats() -> Dict[str, Any]:
        """Return the number of indexed documents."""

        if index_store is None:
            raise HTTPException(status_code=500, detail="Index store is not configured.")
        try:
            return {"documents": index_store.count()}
        except StorageUnavailable as exc:
            raise HTTPException(status_code=_status_for(exc), detail=str(exc)) from exc

    @app.post("/search")
    def search(payload: SearchRequest) -> Dict[str, Any]:
        """Run a search for an image file or directory readable by the server."""

        if searcher is None:
            raise HTTPException(status_code=500, detail="Searcher is not configured.")
        try:
            reports = searcher.search_path(payload.path, payload.k)
        except (NotFound, InvalidArgument, ExtractorMismatch, StorageUnavailable) as exc:
            raise HTTPException(status_code=_status_for(exc), detail=str(exc)) from exc
        return {"results": [report.to_dict() for report in reports]}

    return app
