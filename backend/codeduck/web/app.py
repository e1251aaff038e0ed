"""Main FastAPI application."""

from __future__ import annotations

import threading
from typing import Dict, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..config import load_config
from ..core import (
    CodeDuckError,
    EmbeddingError,
    EmbeddingGenerator,
    ExtractionError,
    VectorIndexError,
    make_embedding_generator,
)
from ..storage import VectorIndex, make_vector_index
from .routes import indexing, search


class AppState:
    """Shared, read-only handles used by every request.

    Handles not supplied up front are built from config on first use; model
    loading is slow, so the server does not pay for it until a route needs it.
    """

    def __init__(
        self,
        cfg: Dict,
        generator: Optional[EmbeddingGenerator] = None,
        index: Optional[VectorIndex] = None,
    ) -> None:
        self.cfg = cfg
        self._generator = generator
        self._index = index
        self._generator_lock = threading.Lock()
        self._index_lock = threading.Lock()

    @property
    def generator(self) -> EmbeddingGenerator:
        with self._generator_lock:
            if self._generator is None:
                self._generator = make_embedding_generator(self.cfg)
            return self._generator

    @property
    def index(self) -> VectorIndex:
        with self._index_lock:
            if self._index is None:
                self._index = make_vector_index(self.cfg)
            return self._index


_STATUS_BY_ERROR = [
    (ExtractionError, 400),
    (EmbeddingError, 500),
    (VectorIndexError, 502),
]


async def _codeduck_error_handler(request: Request, exc: CodeDuckError) -> JSONResponse:
    status_code = 500
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = code
            break
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def create_app(
    cfg: Optional[Dict] = None,
    generator: Optional[EmbeddingGenerator] = None,
    index: Optional[VectorIndex] = None,
) -> FastAPI:
    app = FastAPI(title="CodeDuck Backend")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.codeduck = AppState(cfg if cfg is not None else load_config(), generator=generator, index=index)
    app.add_exception_handler(CodeDuckError, _codeduck_error_handler)

    api_router = APIRouter(prefix="/api")
    api_router.include_router(indexing.router)
    api_router.include_router(search.router)
    app.include_router(api_router)

    return app
