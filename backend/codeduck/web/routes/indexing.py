"""Indexing routes."""

from pathlib import Path

from fastapi import APIRouter, HTTPException, Request

from ...indexing import DefaultIndexer
from ..schemas import IndexRequest, IndexResponse

router = APIRouter()


@router.post("/index", response_model=IndexResponse)
def index_folder(request: IndexRequest, http_request: Request):
    state = http_request.app.state.codeduck
    folder_path = Path(request.path)
    if not folder_path.exists():
        raise HTTPException(status_code=404, detail="Folder not found")

    indexer = DefaultIndexer(state.generator, state.index)
    indexed = indexer.index(folder_path, state.cfg)
    return IndexResponse(path=str(folder_path), indexed=indexed)
