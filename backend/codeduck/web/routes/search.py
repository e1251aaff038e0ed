"""Search routes."""

from fastapi import APIRouter, HTTPException, Request

from ...core import VectorIndexError
from ...search import DefaultSearcher
from ..schemas import HealthResponse, SearchRequest, SearchResponse, SearchResult

router = APIRouter()


@router.post("/search", response_model=SearchResponse)
def search(request: SearchRequest, http_request: Request):
    state = http_request.app.state.codeduck
    if not request.prompt.strip():
        raise HTTPException(status_code=422, detail="Prompt must not be empty")

    searcher = DefaultSearcher(state.generator, state.index)
    hits = searcher.search(request.prompt, request.top_k)

    return SearchResponse(
        results=[SearchResult(space=hit.space, score=hit.score, entity=hit.entity) for hit in hits]
    )


@router.get("/health", response_model=HealthResponse)
def health(http_request: Request):
    state = http_request.app.state.codeduck
    collection = state.cfg["vector_store"]["qdrant"]["collection_name"]
    try:
        points = state.index.count()
    except VectorIndexError:
        points = None
    return HealthResponse(status="ok", collection=collection, points=points)
