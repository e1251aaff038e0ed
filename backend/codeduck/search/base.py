"""Searcher Interface."""

from __future__ import annotations

from typing import List

from ..core import SearchHit


class Searcher:
    """Abstract base class for semantic search."""

    def search(self, prompt: str, top_k: int) -> List[SearchHit]:
        """Search for code entities semantically similar to a prompt.

        Args:
            prompt: Free-text or code-like query
            top_k: Number of hits to fetch from each vector space

        Returns:
            Code-space hits followed by text-space hits, at most
            ``2 * top_k`` in total
        """
        raise NotImplementedError
