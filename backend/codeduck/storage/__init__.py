"""Vector index backends (Qdrant only)."""

from .base import VectorIndex
from .qdrant import QdrantVectorIndex, make_client, make_vector_index

__all__ = [
    "VectorIndex",
    "QdrantVectorIndex",
    "make_client",
    "make_vector_index",
]
