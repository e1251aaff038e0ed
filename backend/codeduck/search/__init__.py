"""Semantic search over indexed code entities."""

from .searcher import DefaultSearcher, format_hit, search

__all__ = [
    "DefaultSearcher",
    "format_hit",
    "search",
]
