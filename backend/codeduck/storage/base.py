"""Abstract vector index interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Sequence

from ..core.models import CodeEntity, Embedding, SearchHit


class VectorIndex(ABC):
    """Abstract base class for dual-space vector index backends."""

    @abstractmethod
    def ensure_collection(self) -> None:
        """Create the collection if missing and check its schema otherwise."""
        pass

    @abstractmethod
    def insert(self, embeddings: Sequence[Embedding]) -> int:
        """Store one record per embedding; returns the number written."""
        pass

    @abstractmethod
    def search_hits(self, code_vector: List[float], text_vector: List[float], top_k: int = 4) -> List[SearchHit]:
        """Search both spaces, code hits first, keeping space and score."""
        pass

    @abstractmethod
    def count(self) -> int:
        """Count records in the collection."""
        pass

    def search(self, code_vector: List[float], text_vector: List[float], top_k: int = 4) -> List[CodeEntity]:
        """Search both spaces and return only the entities."""
        return [hit.entity for hit in self.search_hits(code_vector, text_vector, top_k=top_k)]
