"""Core functionality for codeduck."""

from .models import (
    CODE_DIM,
    CODE_SPACE,
    TEXT_DIM,
    TEXT_SPACE,
    CodeEntity,
    CodeKind,
    Context,
    Embedding,
    QueryVectors,
    SearchHit,
)
from .errors import CodeDuckError, EmbeddingError, ExtractionError, VectorIndexError
from .extraction import EntityExtractor, RustEntityExtractor, extract
from .embeddings import (
    Embedder,
    EmbeddingGenerator,
    SentenceTransformersEmbedder,
    make_embedding_generator,
)

__all__ = [
    "CODE_DIM",
    "CODE_SPACE",
    "TEXT_DIM",
    "TEXT_SPACE",
    "CodeEntity",
    "CodeKind",
    "Context",
    "Embedding",
    "QueryVectors",
    "SearchHit",
    "CodeDuckError",
    "EmbeddingError",
    "ExtractionError",
    "VectorIndexError",
    "EntityExtractor",
    "RustEntityExtractor",
    "extract",
    "Embedder",
    "EmbeddingGenerator",
    "SentenceTransformersEmbedder",
    "make_embedding_generator",
]
