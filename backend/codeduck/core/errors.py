"""Exception types raised by the indexing and retrieval pipeline."""

from __future__ import annotations

from typing import Optional


class CodeDuckError(Exception):
    """Base class for all codeduck failures."""


class ExtractionError(CodeDuckError):
    """Raised when a source tree cannot be turned into entities."""

    def __init__(self, message: str, path: Optional[str] = None, line: Optional[int] = None) -> None:
        self.path = path
        self.line = line
        if path is not None:
            location = f"{path}:{line}" if line is not None else path
            message = f"{message} ({location})"
        super().__init__(message)


class EmbeddingError(CodeDuckError):
    """Raised when an embedding model cannot be loaded or fails to embed a batch."""

    def __init__(self, message: str, model: Optional[str] = None) -> None:
        self.model = model
        if model is not None:
            message = f"[{model}] {message}"
        super().__init__(message)


class VectorIndexError(CodeDuckError):
    """Raised when the vector database rejects or cannot serve a request."""

    def __init__(self, message: str, collection: Optional[str] = None) -> None:
        self.collection = collection
        if collection is not None:
            message = f"Collection '{collection}': {message}"
        super().__init__(message)
