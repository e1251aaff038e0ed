"""Indexing functionality for codeduck."""

from .indexer import DefaultIndexer, build_index

__all__ = [
    "DefaultIndexer",
    "build_index",
]
