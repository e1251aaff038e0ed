"""Embedding models for the code and text vector spaces."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from .errors import EmbeddingError
from .models import CODE_DIM, TEXT_DIM, CodeEntity, Embedding, QueryVectors

logger = logging.getLogger(__name__)


class Embedder:
    """Abstract base class for embedding models."""

    name: str = "embedder"
    dimension: int = 0

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed multiple texts into vectors."""
        raise NotImplementedError


class SentenceTransformersEmbedder(Embedder):
    """Embedder using SentenceTransformers library.

    The model is loaded once in the constructor and reused for every call;
    loading may download weights on first use.
    """

    def __init__(
        self,
        model_name: str,
        dimension: int,
        batch_size: int = 32,
        device: Optional[str] = None,
        trust_remote_code: bool = False,
        token: Optional[str] = None,
    ) -> None:
        self.name = model_name
        self.dimension = dimension
        self.batch_size = batch_size
        try:
            from sentence_transformers import SentenceTransformer  # type: ignore
            self.model = SentenceTransformer(
                model_name,
                device=device,
                trust_remote_code=trust_remote_code,
                token=token,
            )
        except Exception as e:
            raise EmbeddingError(f"Failed to load model: {e}", model=model_name) from e
        logger.info(f"Loaded embedding model {model_name}")

    def embed(self, texts: List[str]) -> List[List[float]]:
        """Embed texts using SentenceTransformers model."""
        arr = self.model.encode(
            texts,
            batch_size=self.batch_size,
            normalize_embeddings=True,
            show_progress_bar=False,
        )
        return [row.tolist() for row in arr]


def _run_model(embedder: Embedder, texts: List[str]) -> List[List[float]]:
    """Embed ``texts`` and check count and dimension of the output."""
    try:
        vectors = embedder.embed(texts)
    except EmbeddingError:
        raise
    except Exception as e:
        logger.error(f"Embedding batch of {len(texts)} texts failed with {embedder.name}: {e}")
        raise EmbeddingError(f"Failed to embed batch of {len(texts)} texts: {e}", model=embedder.name) from e

    if len(vectors) != len(texts):
        raise EmbeddingError(
            f"Model returned {len(vectors)} vectors for a batch of {len(texts)} texts",
            model=embedder.name,
        )
    for i, vector in enumerate(vectors):
        if len(vector) != embedder.dimension:
            raise EmbeddingError(
                f"Vector {i} of batch of {len(texts)} has dimension {len(vector)}, "
                f"expected {embedder.dimension}",
                model=embedder.name,
            )
    return vectors


class EmbeddingGenerator:
    """Projects entities and queries into the code and text spaces."""

    def __init__(self, code_embedder: Embedder, text_embedder: Embedder) -> None:
        self.code_embedder = code_embedder
        self.text_embedder = text_embedder

    def embed_entities(self, entities: Sequence[CodeEntity]) -> List[Embedding]:
        if not entities:
            return []

        texts = [entity.canonical_text() for entity in entities]
        code_vectors = _run_model(self.code_embedder, texts)
        text_vectors = _run_model(self.text_embedder, texts)

        logger.info(f"Embedded {len(texts)} entities")
        return [
            Embedding(entity=entity, code_vector=code_vector, text_vector=text_vector)
            for entity, code_vector, text_vector in zip(entities, code_vectors, text_vectors)
        ]

    def embed_query(self, text: str) -> QueryVectors:
        code_vector = _run_model(self.code_embedder, [text])[0]
        text_vector = _run_model(self.text_embedder, [text])[0]
        return QueryVectors(code=code_vector, text=text_vector)


def make_embedding_generator(cfg: Dict) -> EmbeddingGenerator:
    """Create the code/text embedder pair from config.

    Args:
        cfg: Configuration dictionary

    Returns:
        EmbeddingGenerator instance

    Raises:
        EmbeddingError: If the backend is unknown or a model fails to load
    """
    emb_cfg = cfg.get("embedding", {})
    backend = str(emb_cfg.get("backend", "sentence_transformers")).strip().lower()
    if backend != "sentence_transformers":
        raise EmbeddingError(f"Unsupported embedding.backend: {backend!r}")

    batch_size = int(emb_cfg.get("batch_size", 32))
    device = emb_cfg.get("device")
    token = emb_cfg.get("hf_token")

    code_embedder = SentenceTransformersEmbedder(
        emb_cfg.get("code_model", "jinaai/jina-embeddings-v2-base-code"),
        dimension=int(emb_cfg.get("code_dim", CODE_DIM)),
        batch_size=batch_size,
        device=device,
        trust_remote_code=True,
        token=token,
    )
    text_embedder = SentenceTransformersEmbedder(
        emb_cfg.get("text_model", "sentence-transformers/all-MiniLM-L6-v2"),
        dimension=int(emb_cfg.get("text_dim", TEXT_DIM)),
        batch_size=batch_size,
        device=device,
        token=token,
    )
    return EmbeddingGenerator(code_embedder, text_embedder)
