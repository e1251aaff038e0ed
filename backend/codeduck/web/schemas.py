from pydantic import BaseModel, Field
from typing import List, Optional

from ..core import CodeEntity


class IndexRequest(BaseModel):
    path: str


class IndexResponse(BaseModel):
    path: str
    indexed: int


class SearchRequest(BaseModel):
    prompt: str
    top_k: int = Field(default=4, ge=1)


class SearchResult(BaseModel):
    space: str
    score: float
    entity: CodeEntity


class SearchResponse(BaseModel):
    results: List[SearchResult]


class HealthResponse(BaseModel):
    status: str
    collection: str
    points: Optional[int] = None
