"""Code indexing logic."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Optional

from ..core import EmbeddingGenerator, RustEntityExtractor, make_embedding_generator
from ..storage import VectorIndex, make_vector_index
from .base import Indexer

logger = logging.getLogger(__name__)


class DefaultIndexer(Indexer):
    """Full re-extraction of a tree into the vector index.

    Extraction runs before any model or database call, so an unreadable or
    unparsable tree leaves the index untouched.
    """

    def __init__(self, generator: EmbeddingGenerator, index: VectorIndex) -> None:
        self.generator = generator
        self.index_store = index

    def index(self, root: Path, cfg: Dict) -> int:
        extractor_cfg = cfg.get("extractor", {})
        extractor = RustEntityExtractor(
            extension=extractor_cfg.get("extension", ".rs"),
            skip_dirs=extractor_cfg.get("skip_dirs", ["target"]),
        )

        entities = extractor.extract(root)
        if not entities:
            logger.warning(f"No entities found under {root}")
            return 0

        embeddings = self.generator.embed_entities(entities)
        self.index_store.ensure_collection()
        written = self.index_store.insert(embeddings)
        logger.info(f"Indexed {written} entities from {root}")
        return written


def build_index(
    root: Path,
    cfg: Dict,
    generator: Optional[EmbeddingGenerator] = None,
    index: Optional[VectorIndex] = None,
) -> int:
    """Build the index for ``root`` (Wrapper).

    Handles not passed in are created from ``cfg``.
    """
    if generator is None:
        generator = make_embedding_generator(cfg)
    if index is None:
        index = make_vector_index(cfg)
    indexer = DefaultIndexer(generator, index)
    return indexer.index(Path(root), cfg)
