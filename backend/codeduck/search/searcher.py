"""Semantic search functionality."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional

from ..core import EmbeddingGenerator, SearchHit, make_embedding_generator
from ..storage import VectorIndex, make_vector_index
from .base import Searcher

logger = logging.getLogger(__name__)


class DefaultSearcher(Searcher):

    def __init__(self, generator: EmbeddingGenerator, index: VectorIndex) -> None:
        self.generator = generator
        self.index = index

    def search(self, prompt: str, top_k: int) -> List[SearchHit]:
        if not prompt or not prompt.strip():
            raise ValueError("Search prompt must not be empty")

        vectors = self.generator.embed_query(prompt)
        hits = self.index.search_hits(vectors.code, vectors.text, top_k=top_k)
        logger.debug(f"Query {prompt!r} returned {len(hits)} hits")
        return hits


def search(
    cfg: Dict,
    prompt: str,
    top_k: Optional[int] = None,
    generator: Optional[EmbeddingGenerator] = None,
    index: Optional[VectorIndex] = None,
) -> List[SearchHit]:
    if top_k is None:
        top_k = int(cfg.get("search", {}).get("top_k", 4))
    if generator is None:
        generator = make_embedding_generator(cfg)
    if index is None:
        index = make_vector_index(cfg)
    searcher = DefaultSearcher(generator, index)
    return searcher.search(prompt, top_k)


def format_hit(hit: SearchHit, max_chars: int = 1200) -> str:
    entity = hit.entity
    snippet = entity.context.snippet if entity.context and entity.context.snippet else entity.signature
    if len(snippet) > max_chars:
        snippet = snippet[:max_chars] + "\n…(truncated)…\n"
    location = entity.context.file_path if entity.context else "?"
    header = (
        f"[{hit.space}] {hit.score:0.4f}  {location}:{entity.line_from}-{entity.line_to}  "
        f"{entity.kind.value} {entity.name}"
    )
    return header + "\n" + snippet.rstrip() + "\n"
